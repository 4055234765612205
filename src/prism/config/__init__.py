"""Configuration module for Prism.

Configuration lives in ~/.prism/:
- config.yaml: default backend, model overrides, routing, resilience, logging
- credentials.yaml: API keys per backend (chmod 600)

Environment variables (GEMINI_API_KEY, DEEPSEEK_API_KEY, ANTHROPIC_API_KEY,
OPENAI_API_KEY) fill in any backend the credentials file leaves unusable.
"""

from prism.config.loader import (
    config_exists,
    create_default_config,
    ensure_config_dir,
    load_config,
    load_credentials,
    load_env_files,
    resolve_credentials,
    save_config,
)
from prism.config.models import (
    CREDENTIAL_ENV_VARS,
    CredentialsConfig,
    PrismConfig,
    ProviderCredentials,
    ResilienceConfig,
    RoutingConfig,
    get_config_dir,
    get_default_config,
    get_default_credentials,
)

__all__ = [
    # Models
    "PrismConfig",
    "RoutingConfig",
    "ResilienceConfig",
    "ProviderCredentials",
    "CredentialsConfig",
    "CREDENTIAL_ENV_VARS",
    # Defaults
    "get_config_dir",
    "get_default_config",
    "get_default_credentials",
    # Loader
    "load_config",
    "load_credentials",
    "load_env_files",
    "resolve_credentials",
    "save_config",
    "create_default_config",
    "ensure_config_dir",
    "config_exists",
]
