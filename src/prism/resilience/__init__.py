"""Resilience module for Prism.

Runs a request against the routed backend and, on failure, against the
failed backend's fallback chain until one succeeds or all are exhausted.
"""

from prism.resilience.controller import (
    DEFAULT_ATTEMPT_TIMEOUT_SECONDS,
    ResilienceController,
    RoutedResponse,
    build_messages,
)
from prism.resilience.fallback import eligible_alternates, next_pending

__all__ = [
    "ResilienceController",
    "RoutedResponse",
    "build_messages",
    "DEFAULT_ATTEMPT_TIMEOUT_SECONDS",
    "eligible_alternates",
    "next_pending",
]
