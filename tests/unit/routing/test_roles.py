"""Unit tests for prism.routing.roles module."""

import pytest

from prism.providers.base import BackendId
from prism.routing.roles import ROLE_CATALOGUE, Role, get_profile


class TestRoleCatalogue:
    """Test the role catalogue."""

    def test_every_role_has_profile(self) -> None:
        assert set(ROLE_CATALOGUE) == set(Role)
        assert len(Role) == 8

    def test_profiles_are_complete(self) -> None:
        for role, profile in ROLE_CATALOGUE.items():
            assert profile.role is role
            assert profile.system_prompt
            assert set(profile.preferences) == set(BackendId.concrete())
            assert len(profile.preferences) == 4

    def test_coder_prefers_cheap_backends(self) -> None:
        assert get_profile(Role.CODER).preferences[:2] == (BackendId.GEMINI, BackendId.DEEPSEEK)

    def test_architect_prefers_claude(self) -> None:
        assert get_profile(Role.ARCHITECT).preferences[0] is BackendId.CLAUDE

    def test_catalogue_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            ROLE_CATALOGUE[Role.CODER] = ROLE_CATALOGUE[Role.TESTER]  # type: ignore[index]

    def test_role_from_string(self) -> None:
        assert Role("security") is Role.SECURITY
