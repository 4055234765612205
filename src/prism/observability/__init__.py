"""Observability module for Prism.

Structured logging built on structlog: configure_logging, get_logger,
bind_context, unbind_context.
"""

from prism.observability.logging import (
    LoggingConfig,
    LogMode,
    bind_context,
    configure_logging,
    get_logger,
    set_console_logging,
    unbind_context,
)

__all__ = [
    "LogMode",
    "LoggingConfig",
    "bind_context",
    "configure_logging",
    "get_logger",
    "set_console_logging",
    "unbind_context",
]
