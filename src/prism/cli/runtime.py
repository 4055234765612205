"""Process setup shared by CLI commands: env files, config, logging, gateway."""

import typer

from prism.cli.formatters.panels import print_error
from prism.config.loader import load_config, load_env_files, resolve_credentials
from prism.config.models import PrismConfig
from prism.core.errors import ConfigError, NoProviderConfiguredError
from prism.gateway.service import Gateway
from prism.observability.logging import configure_logging, set_console_logging


def load_settings() -> PrismConfig:
    """Load env files and config.yaml, and configure logging.

    Console logging is turned off so log lines do not interleave with
    command output; file logging follows the configuration.

    Raises:
        typer.Exit: With code 1 if the configuration is invalid.
    """
    load_env_files()
    try:
        config = load_config()
    except ConfigError as e:
        print_error(e.message, title="Configuration error")
        raise typer.Exit(1) from e
    configure_logging(config.logging)
    set_console_logging(False)
    return config


def build_gateway() -> Gateway:
    """Build a Gateway from ~/.prism and the environment.

    Raises:
        typer.Exit: With code 1 if configuration fails or no backend has a
            usable credential.
    """
    config = load_settings()
    try:
        return Gateway.from_config(config, resolve_credentials())
    except NoProviderConfiguredError as e:
        print_error(
            f"{e.message}.\nSet GEMINI_API_KEY, DEEPSEEK_API_KEY, ANTHROPIC_API_KEY or "
            "OPENAI_API_KEY, or edit ~/.prism/credentials.yaml.",
            title="No backend configured",
        )
        raise typer.Exit(1) from e
    except ConfigError as e:
        print_error(e.message, title="Configuration error")
        raise typer.Exit(1) from e
