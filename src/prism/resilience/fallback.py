"""Fallback candidate ordering.

After a backend fails, its own fallback chain is tried first. Alternates
queued by earlier failures stay behind them, so a chain that points back at
already-attempted backends does not end the request while other reachable
backends remain. No backend is ever queued twice or after it was attempted.
"""

from collections.abc import Collection, Sequence

from prism.providers.base import BackendId
from prism.providers.registry import ProviderRegistry
from prism.routing.tables import RoutingTables


def eligible_alternates(
    tables: RoutingTables,
    registry: ProviderRegistry,
    failed: BackendId,
    attempted: Collection[BackendId],
) -> tuple[BackendId, ...]:
    """Alternates for failed that are registered and not yet attempted, in chain order."""
    seen: set[BackendId] = set()
    result: list[BackendId] = []
    for backend in tables.fallback_for(failed):
        if backend in attempted or backend in seen or not registry.has(backend):
            continue
        seen.add(backend)
        result.append(backend)
    return tuple(result)


def next_pending(
    tables: RoutingTables,
    registry: ProviderRegistry,
    failed: BackendId,
    attempted: Collection[BackendId],
    pending: Sequence[BackendId],
) -> list[BackendId]:
    """Rebuild the pending queue after failed has failed.

    Args:
        tables: Routing tables holding the fallback chains.
        registry: Registry used to drop unregistered backends.
        failed: The backend that just failed.
        attempted: Backends already attempted in this request.
        pending: Candidates queued by earlier failures.

    Returns:
        New pending queue: failed's eligible alternates, then the remaining
        earlier candidates, without duplicates.
    """
    fresh = eligible_alternates(tables, registry, failed, attempted)
    rest = [b for b in pending if b not in fresh and b not in attempted]
    return [*fresh, *rest]
