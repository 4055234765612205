"""Structured logging configuration for Prism.

This module configures structlog with standard processors for structured
logging throughout the routing layer. It supports both development mode
(human-readable console output) and production mode (JSON output).

Features:
- ISO 8601 timestamps
- Log level in all entries
- contextvars integration so a request_id follows a request across awaits
- Credential masking before anything is rendered
- Daily log rotation with configurable retention

Standard log keys:
- request_id: Identifier of one routed request
- backend: Backend identifier
- role: Task role
- complexity: Complexity class of the prompt
- category: ErrorCategory of a failed attempt

Event naming convention:
- dot.notation, domain.entity.verb_past_tense
  (e.g. "routing.decision.made", "resilience.attempt.failed")

Usage:
    from prism.observability import configure_logging, get_logger, bind_context

    configure_logging(LoggingConfig(mode=LogMode.DEV))
    log = get_logger(__name__)
    bind_context(request_id="req_123")
    log.info("routing.decision.made", backend="claude", complexity="high")
"""

from __future__ import annotations

from enum import Enum
from functools import partialmethod
import logging
from logging.handlers import TimedRotatingFileHandler
import os
from pathlib import Path
import sys
from typing import Any

from pydantic import BaseModel, Field
import structlog

from prism.core.security import is_sensitive_field, is_sensitive_value, mask_api_key


class LogMode(str, Enum):
    """Logging output mode."""

    DEV = "dev"
    PROD = "prod"


class LoggingConfig(BaseModel):
    """Configuration for structured logging.

    Attributes:
        mode: Output mode (dev for human-readable, prod for JSON).
        log_level: Minimum log level to output.
        log_dir: Directory for log files. Defaults to ~/.prism/logs/.
        max_log_days: Number of days to retain log files.
        enable_file_logging: Whether to write logs to files.
    """

    mode: LogMode = Field(default=LogMode.DEV)
    log_level: str = Field(default="INFO")
    log_dir: Path = Field(default_factory=lambda: Path.home() / ".prism" / "logs")
    max_log_days: int = Field(default=7, ge=1, le=365)
    enable_file_logging: bool = Field(default=True)

    model_config = {"frozen": True}


_configured: bool = False
_console_logging_enabled: bool = True

# Keys structlog adds itself; never masked
_RESERVED_KEYS = frozenset({"event", "level", "timestamp", "filename", "lineno"})


def _get_log_level(level_str: str) -> int:
    """Convert a level name to its logging constant (INFO if unknown)."""
    return logging.getLevelNamesMapping().get(level_str.upper(), logging.INFO)


def _setup_file_handler(config: LoggingConfig) -> TimedRotatingFileHandler | None:
    """Create the daily rotating prism.log handler, or None when disabled."""
    if not config.enable_file_logging:
        return None

    config.log_dir.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        filename=str(config.log_dir / "prism.log"),
        when="midnight",
        backupCount=config.max_log_days,
        encoding="utf-8",
        utc=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(_get_log_level(config.log_level))
    return handler


def _masked(key: str, value: Any) -> Any:
    if is_sensitive_field(key):
        return "<REDACTED>"
    if isinstance(value, str) and is_sensitive_value(value):
        return mask_api_key(value)
    if isinstance(value, dict):
        return {k: _masked(k, v) for k, v in value.items()}
    return value


def _mask_sensitive_data(
    _logger: Any,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor that masks credentials, including in nested dicts."""
    return {
        key: value if key in _RESERVED_KEYS else _masked(key, value)
        for key, value in event_dict.items()
    }


def _build_processors(mode: LogMode) -> list[Any]:
    """Processor chain for a mode; masking runs before the renderer."""
    renderer = (
        structlog.dev.ConsoleRenderer(colors=True)
        if mode == LogMode.DEV
        else structlog.processors.JSONRenderer()
    )
    return [
        structlog.contextvars.merge_contextvars,
        _mask_sensitive_data,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
            ]
        ),
        structlog.processors.format_exc_info,
        renderer,
    ]


def set_console_logging(enabled: bool) -> None:
    """Enable or disable console log output (the CLI turns it off)."""
    global _console_logging_enabled
    _console_logging_enabled = enabled


class _StderrAndFileLogger:
    """Writes rendered lines to stderr while console logging is on, and to prism.log."""

    def __init__(self, file_handler: TimedRotatingFileHandler | None) -> None:
        self._file_handler = file_handler

    def _write(self, level: int, message: str) -> None:
        if _console_logging_enabled:
            print(message, file=sys.stderr)
        if self._file_handler is not None:
            self._file_handler.emit(
                logging.LogRecord("prism", level, "", 0, message, (), None)
            )

    debug = partialmethod(_write, logging.DEBUG)
    info = msg = partialmethod(_write, logging.INFO)
    warning = warn = partialmethod(_write, logging.WARNING)
    error = exception = partialmethod(_write, logging.ERROR)
    critical = fatal = partialmethod(_write, logging.CRITICAL)


def configure_logging(config: LoggingConfig | None = None) -> None:
    """Configure structlog for Prism.

    Reconfiguring replaces the file handler instead of stacking another one.

    Args:
        config: Logging configuration. If None, defaults are used with the
            mode taken from PRISM_LOG_MODE ("dev" or "prod").

    Example:
        configure_logging(LoggingConfig(mode=LogMode.PROD, max_log_days=14))
    """
    global _configured

    if config is None:
        env_mode = os.environ.get("PRISM_LOG_MODE", "dev").lower()
        config = LoggingConfig(mode=LogMode.PROD if env_mode == "prod" else LogMode.DEV)

    log_level = _get_log_level(config.log_level)

    # SDK loggers (litellm, anthropic, httpx) share the file handler
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    file_handler = _setup_file_handler(config)
    if file_handler:
        root_logger.addHandler(file_handler)

    structlog.configure(
        processors=_build_processors(config.mode),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=lambda *_args: _StderrAndFileLogger(file_handler),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a bound logger, configuring defaults on first use.

    Example:
        log = get_logger(__name__)
        log.info("registry.backend.registered", backend="gemini")
    """
    if not _configured:
        configure_logging()

    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind per-request values (request_id, role) for the current async context.

    Never bind credentials.
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def reset_logging() -> None:
    """Forget the logging configuration and bound context. Intended for tests."""
    global _configured
    _configured = False
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
