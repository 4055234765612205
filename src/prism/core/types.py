"""Core types for Prism - Result type and type aliases.

This module provides:
- Result[T, E]: A generic type for handling expected failures without exceptions
- Type aliases for token and cost accounting
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import cast


@dataclass(frozen=True, slots=True)
class Result[T, E]:
    """A type that represents either success (Ok) or failure (Err).

    Result is used for expected failures (rate limits, bad credentials, an
    exhausted fallback chain) instead of exceptions. Exceptions are reserved
    for configuration errors and programming bugs.

    Usage:
        ok_result: Result[str, BackendError] = Result.ok("hello")
        err_result: Result[str, BackendError] = Result.err(BackendError("boom"))

        if result.is_ok:
            render(result.value)
        else:
            report(result.error)
    """

    _value: T | None
    _error: E | None
    _is_ok: bool

    @classmethod
    def ok(cls, value: T) -> Result[T, E]:
        """Create a successful Result containing the given value."""
        return cls(_value=value, _error=None, _is_ok=True)

    @classmethod
    def err(cls, error: E) -> Result[T, E]:
        """Create a failed Result containing the given error."""
        return cls(_value=None, _error=error, _is_ok=False)

    @property
    def is_ok(self) -> bool:
        """Return True if this Result is Ok (success)."""
        return self._is_ok

    @property
    def is_err(self) -> bool:
        """Return True if this Result is Err (failure)."""
        return not self._is_ok

    def __repr__(self) -> str:
        if self._is_ok:
            return f"Ok({self._value!r})"
        return f"Err({self._error!r})"

    @property
    def value(self) -> T:
        """Return the Ok value.

        Raises:
            ValueError: If accessed on an Err result.
        """
        if not self._is_ok:
            msg = "Cannot access value on Err result"
            raise ValueError(msg)
        return cast(T, self._value)

    @property
    def error(self) -> E:
        """Return the Err value.

        Raises:
            ValueError: If accessed on an Ok result.
        """
        if self._is_ok:
            msg = "Cannot access error on Ok result"
            raise ValueError(msg)
        return cast(E, self._error)

    def unwrap(self) -> T:
        """Return the Ok value or raise ValueError carrying the error text."""
        if self._is_ok:
            return cast(T, self._value)
        raise ValueError(str(self._error))

    def map[U](self, fn: Callable[[T], U]) -> Result[U, E]:
        """Transform the Ok value, leaving an Err untouched.

        Args:
            fn: Function to apply to the Ok value.

        Returns:
            A new Result with the transformed value or the original error.
        """
        if self._is_ok:
            return Result.ok(fn(cast(T, self._value)))
        return Result.err(cast(E, self._error))


TokenCount = int
"""Type alias for approximate token counts."""

CostUSD = float
"""Type alias for estimated cost in US dollars."""
