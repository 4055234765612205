"""Error hierarchy for Prism.

This module defines the exception hierarchy for Prism. These exceptions
are used for configuration errors and programming bugs, and as error types
in Result for expected failures.

Exception Hierarchy:
    PrismError (base)
    ├── BackendError                 - A single backend attempt failed
    ├── ConfigError                  - Configuration and credentials issues
    │   ├── NoProviderConfiguredError - No backend passed credential checks
    │   └── NotRegisteredError        - A specific backend was asked for but is absent
    ├── AllProvidersExhaustedError   - Every reachable fallback failed
    ├── RequestCancelledError        - The caller cancelled the request
    └── ValidationError              - Input value validation failures
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import StrEnum
from typing import Any


class ErrorCategory(StrEnum):
    """Coarse classification of a failed backend call."""

    INVALID_CREDENTIAL = "invalid_credential"
    ACCESS_FORBIDDEN = "access_forbidden"
    RATE_LIMIT_OR_QUOTA = "rate_limit_or_quota"
    SERVER_ERROR = "server_error"
    NETWORK_ERROR = "network_error"
    UNKNOWN = "unknown"


# Message fragments checked in order; first match wins.
_MESSAGE_MARKERS: tuple[tuple[ErrorCategory, tuple[str, ...]], ...] = (
    (
        ErrorCategory.INVALID_CREDENTIAL,
        ("401", "authentication", "invalid x-api-key", "invalid api key", "api key not valid"),
    ),
    (ErrorCategory.ACCESS_FORBIDDEN, ("403", "forbidden")),
    (
        ErrorCategory.RATE_LIMIT_OR_QUOTA,
        ("429", "rate limit", "ratelimit", "quota", "insufficient", "balance"),
    ),
    (ErrorCategory.SERVER_ERROR, ("500", "502", "503", "server error", "overloaded")),
    (
        ErrorCategory.NETWORK_ERROR,
        (
            "econnrefused",
            "connection refused",
            "enotfound",
            "host not found",
            "name or service not known",
            "nodename nor servname",
            "timeout",
            "timed out",
            "network",
            "connection error",
        ),
    ),
)


def classify_failure(status_code: int | None, message: str) -> ErrorCategory:
    """Classify a failed call from its status code and message.

    The status code, when present and recognised, decides the category.
    Otherwise the lower-cased message is scanned for known markers.

    Args:
        status_code: HTTP status code reported by the backend, if any.
        message: The error message text.

    Returns:
        The matching ErrorCategory, UNKNOWN when nothing matches.
    """
    if status_code == 401:
        return ErrorCategory.INVALID_CREDENTIAL
    if status_code == 403:
        return ErrorCategory.ACCESS_FORBIDDEN
    if status_code == 429:
        return ErrorCategory.RATE_LIMIT_OR_QUOTA
    if status_code in (500, 502, 503, 529):
        return ErrorCategory.SERVER_ERROR
    if status_code in (408, 504):
        return ErrorCategory.NETWORK_ERROR

    lowered = message.lower()
    for category, markers in _MESSAGE_MARKERS:
        if any(marker in lowered for marker in markers):
            return category
    return ErrorCategory.UNKNOWN


class PrismError(Exception):
    """Base exception for all Prism errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dict with additional context.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class BackendError(PrismError):
    """Failure of a single backend call.

    Carries the backend's raw status and message plus the derived
    ErrorCategory, which the resilience controller logs and reports.

    Attributes:
        backend: Backend identifier (e.g. "claude", "gemini").
        status_code: HTTP status code if applicable.
        category: Classification derived from status_code and message.
    """

    def __init__(
        self,
        message: str,
        *,
        backend: str | None = None,
        status_code: int | None = None,
        category: ErrorCategory | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.backend = backend
        self.status_code = status_code
        self.category = category or classify_failure(status_code, message)

    @classmethod
    def from_exception(cls, exc: Exception, *, backend: str | None = None) -> BackendError:
        """Create a BackendError from an SDK or transport exception.

        Args:
            exc: The original exception.
            backend: Backend identifier.

        Returns:
            A BackendError with __cause__ set to the original exception.
        """
        status_code = getattr(exc, "status_code", None)
        if not isinstance(status_code, int):
            status_code = None
        error = cls(
            str(exc) or type(exc).__name__,
            backend=backend,
            status_code=status_code,
            details={"original_exception": type(exc).__name__},
        )
        error.__cause__ = exc
        return error


class ConfigError(PrismError):
    """Error from configuration operations.

    Attributes:
        config_key: The configuration key that caused the error.
        config_file: Path to the config file if applicable.
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        config_file: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.config_key = config_key
        self.config_file = config_file


class NoProviderConfiguredError(ConfigError):
    """Raised when no backend credential passes its shape check."""

    def __init__(self, checked: Sequence[str] = ()) -> None:
        super().__init__(
            "At least one backend must be configured with a valid credential",
            config_key="providers",
            details={"checked": list(checked)} if checked else None,
        )


class NotRegisteredError(ConfigError):
    """Raised when a caller asks for a backend that is not registered.

    Attributes:
        backend: The requested backend identifier.
        registered: Backends that are registered.
    """

    def __init__(self, backend: str, registered: Sequence[str] = ()) -> None:
        super().__init__(
            f"Backend {backend} is not available",
            config_key=f"providers.{backend}",
            details={"registered": list(registered)},
        )
        self.backend = backend
        self.registered = tuple(registered)


class AllProvidersExhaustedError(PrismError):
    """Every reachable backend failed for one request.

    The message names the originally chosen backend, the last failure's
    category and text, and the registered backends so a human can tell a
    credential problem from a quota problem without reading logs.

    Attributes:
        original_backend: The backend the router chose first.
        last_error: The final BackendError seen.
        registered: Backends registered when the request ran.
        attempted: Backends attempted, in order.
    """

    def __init__(
        self,
        original_backend: str,
        last_error: BackendError,
        *,
        registered: Sequence[str],
        attempted: Sequence[str] = (),
    ) -> None:
        message = (
            f"All backends failed. Last error from {original_backend} chain "
            f"({last_error.category.value}): {last_error.message}\n"
            f"Registered backends: {', '.join(registered)}\n"
            "Check your API keys and account balance."
        )
        super().__init__(
            message,
            details={
                "original_backend": original_backend,
                "last_backend": last_error.backend,
                "category": last_error.category.value,
                "attempted": list(attempted),
            },
        )
        self.original_backend = original_backend
        self.last_error = last_error
        self.registered = tuple(registered)
        self.attempted = tuple(attempted)

    @property
    def category(self) -> ErrorCategory:
        """Category of the final failure."""
        return self.last_error.category

    def __str__(self) -> str:
        return self.message


class RequestCancelledError(PrismError):
    """The caller cancelled the request before it completed.

    Attributes:
        attempted: Backends attempted before cancellation.
    """

    def __init__(self, attempted: Sequence[str] = ()) -> None:
        super().__init__("Request cancelled by caller", details={"attempted": list(attempted)})
        self.attempted = tuple(attempted)


class ValidationError(PrismError):
    """Error from input validation.

    Attributes:
        field: The field that failed validation.
        value: The invalid value if safe to include.

    Security Note:
        Use safe_value instead of value when logging to avoid exposing
        credentials.
    """

    _SENSITIVE_FIELDS = frozenset({
        "password", "api_key", "secret", "token", "credential",
        "auth", "key", "private", "apikey", "api-key",
    })

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field
        self.value = value

    @property
    def safe_value(self) -> str:
        """Return a representation of value that is safe to log."""
        if self.value is None:
            return "<None>"

        if self.field:
            field_lower = self.field.lower()
            if any(sensitive in field_lower for sensitive in self._SENSITIVE_FIELDS):
                return "<REDACTED>"

        if isinstance(self.value, str):
            value_str = self.value
            secret_prefixes = ("sk-", "aiza", "bearer ", "token ")
            if any(value_str.lower().startswith(p) for p in secret_prefixes):
                return "<REDACTED>"
            if len(value_str) > 50:
                return f"{value_str[:20]}...({len(value_str)} chars)"
            return repr(value_str)

        return f"<{type(self.value).__name__}>"

    def __str__(self) -> str:
        base = self.message
        if self.field:
            base = f"{base} (field: {self.field}, value: {self.safe_value})"
        if self.details:
            base = f"{base} (details: {self.details})"
        return base
