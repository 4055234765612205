"""Unit tests for prism.routing.tables module."""

from prism.providers.base import BackendId
from prism.routing.roles import ROLE_CATALOGUE, Role
from prism.routing.tables import (
    DEFAULT_FALLBACK_CHAIN,
    DEFAULT_TABLES,
    RoutingTables,
)

G, D, C, O = BackendId.GEMINI, BackendId.DEEPSEEK, BackendId.CLAUDE, BackendId.OPENAI


class TestDefaultTables:
    """Test the built-in tables."""

    def test_shortlists(self) -> None:
        assert DEFAULT_TABLES.high_complexity_shortlist == (C, O)
        assert DEFAULT_TABLES.low_complexity_shortlist == (G, D)

    def test_fallback_chains_never_point_at_self(self) -> None:
        for backend in BackendId.concrete():
            chain = DEFAULT_TABLES.fallback_for(backend)
            assert backend not in chain
            assert len(chain) == 3

    def test_claude_chain(self) -> None:
        assert DEFAULT_TABLES.fallback_for(C) == (G, D, O)

    def test_unknown_backend_uses_default_chain(self) -> None:
        tables = RoutingTables(fallback_chains={})

        assert tables.fallback_for(C) == DEFAULT_FALLBACK_CHAIN

    def test_role_preferences_follow_catalogue(self) -> None:
        for role in Role:
            assert DEFAULT_TABLES.preferences_for(role) == ROLE_CATALOGUE[role].preferences


class TestWithOverrides:
    """Test partial overrides."""

    def test_no_overrides_returns_same_tables(self) -> None:
        assert DEFAULT_TABLES.with_overrides() is DEFAULT_TABLES

    def test_role_override_merged(self) -> None:
        tables = DEFAULT_TABLES.with_overrides(role_preferences={Role.CODER: [O, C]})

        assert tables.preferences_for(Role.CODER) == (O, C)
        assert tables.preferences_for(Role.TESTER) == DEFAULT_TABLES.preferences_for(Role.TESTER)

    def test_chain_override_merged(self) -> None:
        tables = DEFAULT_TABLES.with_overrides(fallback_chains={G: [C]})

        assert tables.fallback_for(G) == (C,)
        assert tables.fallback_for(C) == DEFAULT_TABLES.fallback_for(C)

    def test_shortlist_override(self) -> None:
        tables = DEFAULT_TABLES.with_overrides(
            high_complexity_shortlist=[O],
            low_complexity_shortlist=[],
        )

        assert tables.high_complexity_shortlist == (O,)
        assert tables.low_complexity_shortlist == ()

    def test_original_untouched(self) -> None:
        DEFAULT_TABLES.with_overrides(fallback_chains={G: [C]})

        assert DEFAULT_TABLES.fallback_for(G) == (D, O, C)
