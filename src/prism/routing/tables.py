"""Immutable routing tables: role preferences, complexity shortlists, fallback chains.

The built-in tables are data, not control flow, so they can be inspected in
tests and partially overridden from configuration.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from prism.providers.base import BackendId
from prism.routing.roles import ROLE_CATALOGUE, Role

FallbackChain = Mapping[BackendId, tuple[BackendId, ...]]
"""Failed backend -> alternates to try, in order. Independent of ErrorCategory."""

_G, _D, _C, _O = BackendId.GEMINI, BackendId.DEEPSEEK, BackendId.CLAUDE, BackendId.OPENAI

DEFAULT_HIGH_COMPLEXITY_SHORTLIST: tuple[BackendId, ...] = (_C, _O)
DEFAULT_LOW_COMPLEXITY_SHORTLIST: tuple[BackendId, ...] = (_G, _D)

DEFAULT_FALLBACK_CHAINS: FallbackChain = MappingProxyType({
    _C: (_G, _D, _O),
    _O: (_G, _D, _C),
    _D: (_G, _O, _C),
    _G: (_D, _O, _C),
})

# Used for a backend that has no chain of its own.
DEFAULT_FALLBACK_CHAIN: tuple[BackendId, ...] = (_G, _D)


def _default_role_preferences() -> Mapping[Role, tuple[BackendId, ...]]:
    return MappingProxyType({role: p.preferences for role, p in ROLE_CATALOGUE.items()})


@dataclass(frozen=True, slots=True)
class RoutingTables:
    """All lookup tables the router and resilience controller consult.

    Attributes:
        role_preferences: Role -> backends, most preferred first.
        high_complexity_shortlist: Backends tried first for HIGH prompts.
        low_complexity_shortlist: Backends tried first for LOW prompts.
        fallback_chains: Failed backend -> alternates.
        default_fallback_chain: Alternates for a backend with no chain.
    """

    role_preferences: Mapping[Role, tuple[BackendId, ...]] = field(
        default_factory=_default_role_preferences
    )
    high_complexity_shortlist: tuple[BackendId, ...] = DEFAULT_HIGH_COMPLEXITY_SHORTLIST
    low_complexity_shortlist: tuple[BackendId, ...] = DEFAULT_LOW_COMPLEXITY_SHORTLIST
    fallback_chains: FallbackChain = DEFAULT_FALLBACK_CHAINS
    default_fallback_chain: tuple[BackendId, ...] = DEFAULT_FALLBACK_CHAIN

    def preferences_for(self, role: Role) -> tuple[BackendId, ...]:
        return self.role_preferences.get(role, ())

    def fallback_for(self, backend: BackendId) -> tuple[BackendId, ...]:
        return self.fallback_chains.get(backend, self.default_fallback_chain)

    def with_overrides(
        self,
        *,
        role_preferences: Mapping[Role, Sequence[BackendId]] | None = None,
        high_complexity_shortlist: Sequence[BackendId] | None = None,
        low_complexity_shortlist: Sequence[BackendId] | None = None,
        fallback_chains: Mapping[BackendId, Sequence[BackendId]] | None = None,
    ) -> "RoutingTables":
        """Return a copy with the given entries replaced.

        Mapping overrides are merged key by key; roles or backends that are
        not mentioned keep their current entry.
        """
        changes: dict[str, object] = {}
        if role_preferences:
            merged_roles = dict(self.role_preferences)
            merged_roles.update({Role(r): tuple(p) for r, p in role_preferences.items()})
            changes["role_preferences"] = MappingProxyType(merged_roles)
        if high_complexity_shortlist is not None:
            changes["high_complexity_shortlist"] = tuple(high_complexity_shortlist)
        if low_complexity_shortlist is not None:
            changes["low_complexity_shortlist"] = tuple(low_complexity_shortlist)
        if fallback_chains:
            merged_chains = dict(self.fallback_chains)
            merged_chains.update({BackendId(b): tuple(c) for b, c in fallback_chains.items()})
            changes["fallback_chains"] = MappingProxyType(merged_chains)
        return replace(self, **changes) if changes else self  # type: ignore[arg-type]


DEFAULT_TABLES = RoutingTables()
