"""Configuration loading and management for Prism.

Functions:
    load_config: Load configuration from ~/.prism/config.yaml
    load_credentials: Load credentials from ~/.prism/credentials.yaml
    resolve_credentials: Merge credentials.yaml with environment variables
    create_default_config: Create default configuration files
    ensure_config_dir: Ensure ~/.prism/ directory exists
"""

import os
from pathlib import Path
import stat
from typing import Any

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
import yaml

from prism.config.models import (
    CREDENTIAL_ENV_VARS,
    CredentialsConfig,
    PrismConfig,
    ProviderCredentials,
    get_config_dir,
    get_default_config,
    get_default_credentials,
)
from prism.core.errors import ConfigError
from prism.core.security import validate_credential_shape
from prism.observability.logging import get_logger

log = get_logger(__name__)


def load_env_files() -> None:
    """Load .env from the current directory and ~/.prism/.

    Existing environment variables are never overwritten.
    """
    load_dotenv(find_dotenv(usecwd=True))
    load_dotenv(get_config_dir() / ".env")


def ensure_config_dir() -> Path:
    """Create ~/.prism/ and its logs/ subdirectory if missing."""
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "logs").mkdir(exist_ok=True)
    return config_dir


def _set_secure_permissions(file_path: Path) -> None:
    os.chmod(file_path, stat.S_IRUSR | stat.S_IWUSR)


def _dump_yaml(model: BaseModel, path: Path) -> None:
    with path.open("w", encoding="utf-8") as f:
        yaml.dump(
            model.model_dump(mode="json"),
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )


def create_default_config(
    config_dir: Path | None = None,
    *,
    overwrite: bool = False,
) -> tuple[Path, Path]:
    """Create default configuration files.

    credentials.yaml is created with chmod 600.

    Args:
        config_dir: Directory to create files in. Defaults to ~/.prism/
        overwrite: If True, overwrite existing files.

    Returns:
        Tuple of (config_path, credentials_path).

    Raises:
        ConfigError: If files exist and overwrite=False.
    """
    if config_dir is None:
        config_dir = ensure_config_dir()
    else:
        config_dir.mkdir(parents=True, exist_ok=True)

    config_path = config_dir / "config.yaml"
    credentials_path = config_dir / "credentials.yaml"

    if not overwrite:
        for path in (config_path, credentials_path):
            if path.exists():
                raise ConfigError(
                    f"Configuration file already exists: {path}",
                    config_file=str(path),
                )

    _dump_yaml(get_default_config(), config_path)
    _dump_yaml(get_default_credentials(), credentials_path)
    _set_secure_permissions(credentials_path)

    log.info("config.files.created", config_dir=str(config_dir))
    return config_path, credentials_path


def _read_yaml(path: Path, what: str) -> dict[str, Any]:
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Failed to parse {what} file: {e}",
            config_file=str(path),
            details={"yaml_error": str(e)},
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"{what.capitalize()} file must contain a mapping: {path}",
            config_file=str(path),
        )
    return data


def _validation_error(what: str, path: Path, e: PydanticValidationError) -> ConfigError:
    failures = []
    for error in e.errors():
        loc = ".".join(str(x) for x in error["loc"])
        failures.append(f"{loc}: {error['msg']}")
    return ConfigError(
        f"{what.capitalize()} validation failed:\n" + "\n".join(f"  - {f}" for f in failures),
        config_file=str(path),
        details={"validation_errors": failures},
    )


def load_config(config_path: Path | None = None) -> PrismConfig:
    """Load configuration from YAML.

    A missing file yields the default configuration.

    Args:
        config_path: Path to config file. Defaults to ~/.prism/config.yaml.

    Returns:
        Validated PrismConfig instance.

    Raises:
        ConfigError: If the file is malformed or fails validation.
    """
    if config_path is None:
        config_path = get_config_dir() / "config.yaml"

    if not config_path.exists():
        log.debug("config.file.missing", config_file=str(config_path))
        return get_default_config()

    data = _read_yaml(config_path, "configuration")
    try:
        return PrismConfig.model_validate(data)
    except PydanticValidationError as e:
        raise _validation_error("configuration", config_path, e) from e


def load_credentials(credentials_path: Path | None = None) -> CredentialsConfig:
    """Load credentials from YAML.

    A missing file yields an empty CredentialsConfig. A file readable by
    group or others is loaded with a warning.

    Args:
        credentials_path: Path to credentials file.
            Defaults to ~/.prism/credentials.yaml.

    Returns:
        Validated CredentialsConfig instance.

    Raises:
        ConfigError: If the file is malformed or fails validation.
    """
    if credentials_path is None:
        credentials_path = get_config_dir() / "credentials.yaml"

    if not credentials_path.exists():
        return CredentialsConfig()

    if credentials_path.stat().st_mode & (stat.S_IRGRP | stat.S_IROTH):
        log.warning("config.credentials.insecure_permissions", config_file=str(credentials_path))

    data = _read_yaml(credentials_path, "credentials")
    try:
        return CredentialsConfig.model_validate(data)
    except PydanticValidationError as e:
        raise _validation_error("credentials", credentials_path, e) from e


def resolve_credentials(
    credentials: CredentialsConfig | None = None,
    environ: dict[str, str] | None = None,
) -> CredentialsConfig:
    """Merge file credentials with environment variables.

    A file entry wins when its key is shaped like a real credential; any
    backend left without one takes its key from the environment variable
    in CREDENTIAL_ENV_VARS.

    Args:
        credentials: Credentials from the file. Defaults to load_credentials().
        environ: Environment mapping. Defaults to os.environ.

    Returns:
        CredentialsConfig with every usable credential found.
    """
    if credentials is None:
        credentials = load_credentials()
    env = os.environ if environ is None else environ

    providers = dict(credentials.providers)
    for backend, env_var in CREDENTIAL_ENV_VARS.items():
        entry = providers.get(backend)
        if entry is not None and validate_credential_shape(backend.value, entry.api_key):
            continue
        value = env.get(env_var, "").strip()
        if value:
            base_url = entry.base_url if entry else None
            providers[backend] = ProviderCredentials(api_key=value, base_url=base_url)
            log.debug("config.credentials.from_env", backend=backend.value, env_var=env_var)

    return CredentialsConfig(providers=providers)


def save_config(config: PrismConfig, config_path: Path | None = None) -> Path:
    """Write configuration to YAML, replacing the file.

    Args:
        config: Configuration to write.
        config_path: Target path. Defaults to ~/.prism/config.yaml.

    Returns:
        The path written.
    """
    if config_path is None:
        config_path = ensure_config_dir() / "config.yaml"
    else:
        config_path.parent.mkdir(parents=True, exist_ok=True)
    _dump_yaml(config, config_path)
    log.info("config.file.saved", config_file=str(config_path))
    return config_path


def config_exists() -> bool:
    """Return True if both config.yaml and credentials.yaml exist."""
    config_dir = get_config_dir()
    return (config_dir / "config.yaml").exists() and (config_dir / "credentials.yaml").exists()
