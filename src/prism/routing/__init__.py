"""Routing module for Prism.

This module decides which backend handles a request:
- Keyword complexity estimation (low / medium / high)
- The role catalogue (system prompts and backend preferences)
- Immutable routing tables (shortlists and fallback chains)
- The stateless BackendRouter
"""

from prism.routing.complexity import (
    ComplexityClass,
    ComplexityStrategy,
    estimate_complexity,
)
from prism.routing.roles import ROLE_CATALOGUE, Role, RoleProfile, get_profile
from prism.routing.router import BackendRouter, RoutingDecision, RoutingReason
from prism.routing.tables import DEFAULT_TABLES, FallbackChain, RoutingTables

__all__ = [
    # Complexity
    "ComplexityClass",
    "ComplexityStrategy",
    "estimate_complexity",
    # Roles
    "Role",
    "RoleProfile",
    "ROLE_CATALOGUE",
    "get_profile",
    # Tables
    "RoutingTables",
    "FallbackChain",
    "DEFAULT_TABLES",
    # Router
    "BackendRouter",
    "RoutingDecision",
    "RoutingReason",
]
