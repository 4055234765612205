"""Prism core module - shared types, errors, and security helpers."""

from prism.core.errors import (
    AllProvidersExhaustedError,
    BackendError,
    ConfigError,
    ErrorCategory,
    NoProviderConfiguredError,
    NotRegisteredError,
    PrismError,
    RequestCancelledError,
    ValidationError,
    classify_failure,
)
from prism.core.security import (
    mask_api_key,
    sanitize_for_logging,
    validate_credential_shape,
)
from prism.core.types import CostUSD, Result, TokenCount

__all__ = [
    # Types
    "Result",
    "TokenCount",
    "CostUSD",
    # Errors
    "PrismError",
    "BackendError",
    "ConfigError",
    "NoProviderConfiguredError",
    "NotRegisteredError",
    "AllProvidersExhaustedError",
    "RequestCancelledError",
    "ValidationError",
    "ErrorCategory",
    "classify_failure",
    # Security utilities
    "mask_api_key",
    "validate_credential_shape",
    "sanitize_for_logging",
]
