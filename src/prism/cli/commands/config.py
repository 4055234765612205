"""Config command group for Prism.

Create the configuration files and show the effective configuration.
"""

from typing import Annotated

import typer

from prism.cli import runtime
from prism.cli.formatters.panels import print_error, print_info, print_success
from prism.cli.formatters.tables import create_key_value_table, print_table
from prism.config.loader import create_default_config, resolve_credentials
from prism.config.models import get_config_dir
from prism.core.errors import ConfigError
from prism.core.security import mask_api_key
from prism.providers.base import BackendId

app = typer.Typer(
    name="config",
    help="Manage Prism configuration.",
    no_args_is_help=True,
)


@app.command()
def init(
    overwrite: Annotated[
        bool,
        typer.Option("--overwrite", help="Replace existing configuration files."),
    ] = False,
) -> None:
    """Create ~/.prism/config.yaml and credentials.yaml (chmod 600)."""
    try:
        config_path, credentials_path = create_default_config(overwrite=overwrite)
    except ConfigError as e:
        print_error(f"{e.message}\nUse --overwrite to replace it.")
        raise typer.Exit(1) from e

    print_success(f"Created {config_path}\nCreated {credentials_path}")
    print_info("Add your API keys to credentials.yaml or export them as environment variables.")


@app.command()
def show() -> None:
    """Display the effective configuration. Credentials are masked."""
    config = runtime.load_settings()
    credentials = resolve_credentials()

    data: dict[str, str] = {
        "config_dir": str(get_config_dir()),
        "default_backend": config.default_backend.value,
        "attempt_timeout_seconds": f"{config.resilience.attempt_timeout_seconds:g}",
        "backend_max_retries": str(config.resilience.backend_max_retries),
        "backend_timeout_seconds": f"{config.resilience.backend_timeout_seconds:g}",
        "log_mode": config.logging.mode.value,
        "log_level": config.logging.log_level,
    }
    for backend in BackendId.concrete():
        entry = credentials.providers.get(backend)
        data[f"{backend.value}.credential"] = mask_api_key(entry.api_key) if entry else "<not set>"
        if backend in config.models:
            data[f"{backend.value}.model"] = config.models[backend]

    print_table(create_key_value_table(data, "Current Configuration"))


__all__ = ["app"]
