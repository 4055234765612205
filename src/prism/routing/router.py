"""Backend router: picks one registered backend for a request.

Decision order:
1. An explicit, registered override wins.
2. HIGH complexity -> first registered backend of the high shortlist.
3. LOW complexity -> first registered backend of the low shortlist.
4. Otherwise, or when the shortlist has nothing registered, the first
   registered backend in the role's preference list.
5. The registry default.

The router is stateless. route() is total over any non-empty registry: it
always returns a registered backend.

Usage:
    router = BackendRouter(registry)
    decision = router.route(BackendId.AUTO, Role.CODER, "write a loop")
    decision.backend   # e.g. BackendId.GEMINI
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from prism.observability.logging import get_logger
from prism.providers.base import BackendId
from prism.providers.registry import ProviderRegistry
from prism.routing.complexity import ComplexityClass, ComplexityStrategy, estimate_complexity
from prism.routing.roles import Role
from prism.routing.tables import DEFAULT_TABLES, RoutingTables

log = get_logger(__name__)


class RoutingReason(StrEnum):
    """Which rule produced a routing decision."""

    OVERRIDE = "override"
    HIGH_COMPLEXITY = "high_complexity"
    LOW_COMPLEXITY = "low_complexity"
    ROLE_PREFERENCE = "role_preference"
    REGISTRY_DEFAULT = "registry_default"


@dataclass(frozen=True, slots=True)
class RoutingDecision:
    """Result of a routing decision.

    Attributes:
        backend: The selected, registered backend.
        reason: The rule that selected it.
        complexity: Complexity class of the prompt. None when an override
            short-circuited the estimate.
    """

    backend: BackendId
    reason: RoutingReason
    complexity: ComplexityClass | None = None


class BackendRouter:
    """Stateless selection of a backend from registry, role and prompt."""

    def __init__(
        self,
        registry: ProviderRegistry,
        tables: RoutingTables = DEFAULT_TABLES,
        complexity_strategy: ComplexityStrategy = estimate_complexity,
    ) -> None:
        self._registry = registry
        self._tables = tables
        self._estimate = complexity_strategy

    @property
    def tables(self) -> RoutingTables:
        return self._tables

    def _first_registered(self, candidates: Iterable[BackendId]) -> BackendId | None:
        return next((b for b in candidates if self._registry.has(b)), None)

    def route(
        self,
        override: BackendId,
        role: Role,
        prompt: str,
    ) -> RoutingDecision:
        """Pick a backend for one request.

        Args:
            override: A specific backend, or BackendId.AUTO to let the router
                decide. An unregistered override is ignored.
            role: Role of the request.
            prompt: Task text used for complexity estimation.

        Returns:
            RoutingDecision naming a registered backend.
        """
        if override is not BackendId.AUTO and self._registry.has(override):
            decision = RoutingDecision(backend=override, reason=RoutingReason.OVERRIDE)
            self._log(decision, role)
            return decision

        complexity = self._estimate(prompt)
        backend: BackendId | None = None
        reason = RoutingReason.ROLE_PREFERENCE

        if complexity == ComplexityClass.HIGH:
            backend = self._first_registered(self._tables.high_complexity_shortlist)
            reason = RoutingReason.HIGH_COMPLEXITY
        elif complexity == ComplexityClass.LOW:
            backend = self._first_registered(self._tables.low_complexity_shortlist)
            reason = RoutingReason.LOW_COMPLEXITY

        if backend is None:
            backend = self._first_registered(self._tables.preferences_for(role))
            reason = RoutingReason.ROLE_PREFERENCE

        if backend is None:
            backend = self._registry.default
            reason = RoutingReason.REGISTRY_DEFAULT

        decision = RoutingDecision(backend=backend, reason=reason, complexity=complexity)
        self._log(decision, role)
        return decision

    def _log(self, decision: RoutingDecision, role: Role) -> None:
        log.info(
            "routing.decision.made",
            backend=decision.backend.value,
            reason=decision.reason.value,
            complexity=decision.complexity.value if decision.complexity else None,
            role=role.value,
        )
