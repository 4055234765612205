"""Pydantic models for Prism configuration.

This module defines the configuration schema using Pydantic v2.
All configuration validation happens through these models.

Classes:
    RoutingConfig: Optional overrides for the routing tables
    ResilienceConfig: Per-attempt timeout and transport retry settings
    ProviderCredentials: Credential for a single backend
    CredentialsConfig: All backend credentials
    PrismConfig: Top-level configuration combining all sections
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from prism.observability.logging import LoggingConfig
from prism.providers.base import BackendId
from prism.routing.roles import Role

# Environment variables consulted when credentials.yaml has no usable entry.
CREDENTIAL_ENV_VARS: dict[BackendId, str] = {
    BackendId.GEMINI: "GEMINI_API_KEY",
    BackendId.DEEPSEEK: "DEEPSEEK_API_KEY",
    BackendId.CLAUDE: "ANTHROPIC_API_KEY",
    BackendId.OPENAI: "OPENAI_API_KEY",
}


def _reject_auto(backends: list[BackendId]) -> list[BackendId]:
    if BackendId.AUTO in backends:
        msg = "'auto' is not a backend"
        raise ValueError(msg)
    return backends


class RoutingConfig(BaseModel, frozen=True):
    """Overrides for the built-in routing tables.

    Omitted fields keep the built-in tables; mapping entries are merged per
    key.

    Attributes:
        role_preferences: Role -> backend preference order
        high_complexity_shortlist: Backends tried first for high-complexity prompts
        low_complexity_shortlist: Backends tried first for low-complexity prompts
        fallback_chains: Failed backend -> alternates
    """

    role_preferences: dict[Role, list[BackendId]] = Field(default_factory=dict)
    high_complexity_shortlist: list[BackendId] | None = None
    low_complexity_shortlist: list[BackendId] | None = None
    fallback_chains: dict[BackendId, list[BackendId]] = Field(default_factory=dict)

    @field_validator("high_complexity_shortlist", "low_complexity_shortlist")
    @classmethod
    def validate_shortlist(cls, v: list[BackendId] | None) -> list[BackendId] | None:
        """Reject the auto sentinel in shortlists."""
        return None if v is None else _reject_auto(v)

    @field_validator("role_preferences", "fallback_chains")
    @classmethod
    def validate_lists(cls, v: dict[Any, list[BackendId]]) -> dict[Any, list[BackendId]]:
        """Reject the auto sentinel in preference lists and chains."""
        for backends in v.values():
            _reject_auto(backends)
        return v


class ResilienceConfig(BaseModel, frozen=True):
    """Resilience settings.

    Attributes:
        attempt_timeout_seconds: Upper bound for one backend attempt
        backend_max_retries: Transport-level attempts inside one backend
        backend_timeout_seconds: HTTP timeout passed to each backend client
    """

    attempt_timeout_seconds: float = Field(default=120.0, gt=0)
    backend_max_retries: int = Field(default=2, ge=1)
    backend_timeout_seconds: float = Field(default=60.0, gt=0)


class ProviderCredentials(BaseModel, frozen=True):
    """Credential for a single backend.

    Attributes:
        api_key: The API key for the backend
        base_url: Optional custom base URL
    """

    api_key: str = Field(min_length=1)
    base_url: str | None = None


class CredentialsConfig(BaseModel, frozen=True):
    """Configuration for all backend credentials.

    Attributes:
        providers: Dict mapping backend id to credentials
    """

    providers: dict[BackendId, ProviderCredentials] = Field(default_factory=dict)

    def api_keys(self) -> dict[BackendId, str | None]:
        """Return the credential map the provider registry is built from."""
        keys: dict[BackendId, str | None] = {}
        for backend in BackendId.concrete():
            entry = self.providers.get(backend)
            keys[backend] = entry.api_key if entry else None
        return keys

    def base_urls(self) -> dict[BackendId, str]:
        return {b: c.base_url for b, c in self.providers.items() if c.base_url}


class PrismConfig(BaseModel, frozen=True):
    """Top-level Prism configuration.

    Attributes:
        default_backend: Preferred default backend, or auto for the built-in priority
        models: Optional model id per backend
        routing: Routing table overrides
        resilience: Resilience settings
        logging: Logging settings
    """

    default_backend: BackendId = BackendId.AUTO
    models: dict[BackendId, str] = Field(default_factory=dict)
    routing: RoutingConfig = Field(default_factory=RoutingConfig)
    resilience: ResilienceConfig = Field(default_factory=ResilienceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("models")
    @classmethod
    def validate_models(cls, v: dict[BackendId, str]) -> dict[BackendId, str]:
        """Model overrides must name real backends."""
        if BackendId.AUTO in v:
            msg = "'auto' cannot have a model"
            raise ValueError(msg)
        return v


def get_default_config() -> PrismConfig:
    """Get the default Prism configuration."""
    return PrismConfig()


def get_default_credentials() -> CredentialsConfig:
    """Get the credentials template.

    Placeholders fail the credential shape check, so an untouched template
    registers nothing and the environment variables are used instead.
    """
    return CredentialsConfig(
        providers={
            BackendId.GEMINI: ProviderCredentials(api_key="YOUR_GEMINI_API_KEY"),
            BackendId.DEEPSEEK: ProviderCredentials(api_key="YOUR_DEEPSEEK_API_KEY"),
            BackendId.CLAUDE: ProviderCredentials(api_key="YOUR_ANTHROPIC_API_KEY"),
            BackendId.OPENAI: ProviderCredentials(api_key="YOUR_OPENAI_API_KEY"),
        }
    )


def get_config_dir() -> Path:
    """Get the Prism configuration directory path (~/.prism/)."""
    return Path.home() / ".prism"
