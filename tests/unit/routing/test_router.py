"""Unit tests for prism.routing.router module."""

import pytest

from prism.providers.base import BackendId
from prism.routing.complexity import ComplexityClass
from prism.routing.roles import ROLE_CATALOGUE, Role
from prism.routing.router import BackendRouter, RoutingReason
from prism.routing.tables import DEFAULT_TABLES

G, D, C, O = BackendId.GEMINI, BackendId.DEEPSEEK, BackendId.CLAUDE, BackendId.OPENAI
AUTO = BackendId.AUTO

PROMPTS = [
    "write a loop",
    "Review this architecture",
    "a quick helper",
    "z" * 600,
    "",
]


class TestRouteTotality:
    """route() always lands on a registered backend."""

    @pytest.mark.parametrize(
        "backends",
        [(G,), (D,), (C,), (O,), (G, C), (D, O), (C, O), (G, D, C, O)],
    )
    @pytest.mark.parametrize("role", list(Role))
    def test_auto_returns_registered(self, fake_registry, backends, role) -> None:
        registry, _ = fake_registry(*backends)
        router = BackendRouter(registry)

        for prompt in PROMPTS:
            assert registry.has(router.route(AUTO, role, prompt).backend)


class TestOverride:
    """Explicit overrides."""

    @pytest.mark.parametrize("role", list(Role))
    def test_registered_override_wins(self, fake_registry, role: Role) -> None:
        registry, _ = fake_registry(G, D)
        router = BackendRouter(registry)

        decision = router.route(D, role, "Review this security architecture")

        assert decision.backend is D
        assert decision.reason is RoutingReason.OVERRIDE
        assert decision.complexity is None

    def test_override_outside_high_shortlist(self, fake_registry) -> None:
        """Override B wins on a high-complexity prompt even though B is not shortlisted."""
        registry, _ = fake_registry(C, D)
        router = BackendRouter(registry)

        decision = router.route(D, Role.ARCHITECT, "Optimize the architecture")

        assert decision.backend is D

    def test_unregistered_override_ignored(self, fake_registry) -> None:
        registry, _ = fake_registry(G)
        router = BackendRouter(registry)

        decision = router.route(C, Role.CODER, "write a loop")

        assert decision.backend is G
        assert decision.reason is not RoutingReason.OVERRIDE


class TestComplexityRules:
    """Complexity shortlists."""

    def test_high_uses_first_registered_shortlist_entry(self, fake_registry) -> None:
        registry, _ = fake_registry(G, O)
        router = BackendRouter(registry)

        decision = router.route(AUTO, Role.CODER, "Review this code")

        assert decision.backend is O
        assert decision.reason is RoutingReason.HIGH_COMPLEXITY
        assert decision.complexity is ComplexityClass.HIGH

    def test_low_uses_cheap_shortlist(self, fake_registry) -> None:
        registry, _ = fake_registry(D, C)
        router = BackendRouter(registry)

        decision = router.route(AUTO, Role.ARCHITECT, "a simple diagram")

        assert decision.backend is D
        assert decision.reason is RoutingReason.LOW_COMPLEXITY

    def test_empty_shortlist_falls_to_role(self, fake_registry) -> None:
        registry, _ = fake_registry(G, D)
        router = BackendRouter(registry)

        decision = router.route(AUTO, Role.SECURITY, "security audit")

        assert decision.backend is ROLE_CATALOGUE[Role.SECURITY].preferences[2]
        assert decision.reason is RoutingReason.ROLE_PREFERENCE
        assert decision.complexity is ComplexityClass.HIGH


class TestRolePreference:
    """Role preference and registry default."""

    def test_medium_prompt_uses_role_order(self, fake_registry) -> None:
        """Registry {A, B}; coder; "write a loop" -> first registered in coder's list."""
        registry, _ = fake_registry(C, D)
        router = BackendRouter(registry)

        decision = router.route(AUTO, Role.CODER, "write a loop")

        expected = next(b for b in ROLE_CATALOGUE[Role.CODER].preferences if b in (C, D))
        assert decision.backend is expected is D
        assert decision.reason is RoutingReason.ROLE_PREFERENCE
        assert decision.complexity is ComplexityClass.MEDIUM

    def test_registry_default_when_role_list_has_nothing(self, fake_registry) -> None:
        registry, _ = fake_registry(O, default=O)
        tables = DEFAULT_TABLES.with_overrides(role_preferences={Role.TESTER: [G]})
        router = BackendRouter(registry, tables)

        decision = router.route(AUTO, Role.TESTER, "write tests")

        assert decision.backend is O
        assert decision.reason is RoutingReason.REGISTRY_DEFAULT


class TestPluggableStrategy:
    """The complexity heuristic can be swapped."""

    def test_custom_strategy(self, fake_registry) -> None:
        registry, _ = fake_registry(G, C)
        prompts: list[str] = []

        def always_high(prompt: str) -> ComplexityClass:
            prompts.append(prompt)
            return ComplexityClass.HIGH

        router = BackendRouter(registry, complexity_strategy=always_high)

        decision = router.route(AUTO, Role.CODER, "write a loop")

        assert decision.backend is C
        assert prompts == ["write a loop"]

    def test_strategy_not_called_for_override(self, fake_registry) -> None:
        registry, _ = fake_registry(G, C)

        def explode(prompt: str) -> ComplexityClass:
            raise AssertionError("strategy should not run")

        router = BackendRouter(registry, complexity_strategy=explode)

        assert router.route(G, Role.CODER, "x").backend is G
