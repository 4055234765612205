"""Security utilities for Prism.

This module provides security-related utilities including:
- Credential shape checks used before a backend is registered
- API key masking for logs and error messages
- Size limits for backend responses

Security Level: MEDIUM
- Credentials are masked in logs and never bound to the logging context
- Shape checks are cheap prefix tests, not authorization
"""

import re
from typing import Any

MAX_RESPONSE_LENGTH = 100_000  # 100KB for backend responses

# Credential shapes per backend. Keys are backend identifiers.
_CREDENTIAL_PATTERNS: dict[str, tuple[re.Pattern[str], ...]] = {
    "gemini": (re.compile(r"^AIzaSy\S+$"),),
    "deepseek": (re.compile(r"^sk-\S+$"),),
    "claude": (re.compile(r"^sk-ant-\S+$"),),
    "openai": (re.compile(r"^sk-proj-\S+$"), re.compile(r"^sk-\S+$")),
}

SENSITIVE_FIELD_NAMES = frozenset(
    {
        "password",
        "api_key",
        "apikey",
        "api-key",
        "secret",
        "token",
        "credential",
        "auth",
        "key",
        "private",
        "bearer",
        "authorization",
    }
)

SENSITIVE_PREFIXES = (
    "sk-",
    "pk-",
    "bearer ",
    "token ",
    "secret_",
    "AIza",
)

# Token-count fields contain "token" but are not secrets.
_NON_SENSITIVE_FIELDS = frozenset(
    {"input_tokens", "output_tokens", "max_tokens", "tokens", "total_tokens"}
)


def mask_api_key(api_key: str, visible_chars: int = 4) -> str:
    """Mask an API key for safe logging/display.

    Args:
        api_key: The API key to mask.
        visible_chars: Number of characters to show at the end (default 4).

    Returns:
        Masked API key like "sk-...xxxx" or "<empty>" if key is empty.

    Example:
        >>> mask_api_key("sk-1234567890abcdef")
        'sk-...cdef'
    """
    if not api_key:
        return "<empty>"

    if len(api_key) <= visible_chars + 4:
        return "*" * len(api_key)

    if "-" in api_key[:6]:
        prefix_end = api_key.index("-") + 1
        prefix = api_key[:prefix_end]
        return f"{prefix}...{api_key[-visible_chars:]}"

    return f"...{api_key[-visible_chars:]}"


def validate_credential_shape(backend: str, credential: str | None) -> bool:
    """Check that a credential has the shape its backend issues.

    This is a cheap prefix check performed once when the registry is built.
    It does NOT verify that the key is authorized.

    Args:
        backend: Backend identifier ("gemini", "deepseek", "claude", "openai").
        credential: The credential string, possibly empty or None.

    Returns:
        True if the credential matches one of the backend's shapes.
    """
    if not credential:
        return False
    patterns = _CREDENTIAL_PATTERNS.get(backend.lower())
    if not patterns:
        return False
    return any(pattern.match(credential) for pattern in patterns)


def is_sensitive_field(field_name: str) -> bool:
    """Check if a field name indicates sensitive data."""
    if not field_name:
        return False

    field_lower = field_name.lower()
    if field_lower in _NON_SENSITIVE_FIELDS:
        return False
    return any(sensitive in field_lower for sensitive in SENSITIVE_FIELD_NAMES)


def is_sensitive_value(value: Any) -> bool:
    """Check if a value looks like a credential."""
    if not isinstance(value, str):
        return False

    value_lower = value.lower()
    return any(value_lower.startswith(prefix.lower()) for prefix in SENSITIVE_PREFIXES)


def sanitize_for_logging(data: dict[str, Any]) -> dict[str, Any]:
    """Create a copy of data with sensitive values masked.

    Example:
        >>> sanitize_for_logging({"api_key": "sk-secret123", "name": "test"})
        {'api_key': '<REDACTED>', 'name': 'test'}
    """
    result: dict[str, Any] = {}
    for key, value in data.items():
        if is_sensitive_field(key):
            result[key] = "<REDACTED>"
        elif isinstance(value, str) and is_sensitive_value(value):
            result[key] = mask_api_key(value)
        elif isinstance(value, dict):
            result[key] = sanitize_for_logging(value)
        else:
            result[key] = value
    return result


def truncate_response(text: str, max_length: int = MAX_RESPONSE_LENGTH) -> tuple[str, bool]:
    """Clamp a backend response to the maximum accepted length.

    Args:
        text: Response text.
        max_length: Maximum number of characters to keep.

    Returns:
        Tuple of (possibly truncated text, whether truncation happened).
    """
    if len(text) <= max_length:
        return text, False
    return text[:max_length], True
