"""Backends command group for Prism.

List registered backends, compare prices, check credentials and choose the
default backend.
"""

import asyncio
from typing import Annotated

import typer

from prism.cli import runtime
from prism.cli.formatters.panels import print_error, print_success, print_warning
from prism.cli.formatters.tables import (
    backends_table,
    costs_table,
    print_table,
    validation_table,
)
from prism.config.loader import load_config, save_config
from prism.core.errors import NotRegisteredError
from prism.providers.base import BackendId

app = typer.Typer(
    name="backends",
    help="Inspect and manage backends.",
    no_args_is_help=True,
)


@app.command("list")
def list_backends() -> None:
    """Show every backend, whether it is configured, and the default."""
    gateway = runtime.build_gateway()
    print_table(backends_table(gateway.list_backends()))


@app.command()
def costs() -> None:
    """Compare default-model prices of the registered backends."""
    gateway = runtime.build_gateway()
    print_table(costs_table(gateway.cost_comparison()))


@app.command()
def validate() -> None:
    """Send a tiny request to each registered backend to check its credential.

    This consumes a small amount of quota per backend.
    """
    gateway = runtime.build_gateway()
    results = asyncio.run(gateway.validate_credentials())
    print_table(validation_table(results))
    if not all(results.values()):
        print_warning("Some credentials failed. Check the keys and account balance.")
        raise typer.Exit(1)


@app.command("set-default")
def set_default(
    backend: Annotated[BackendId, typer.Argument(help="Backend to use as default.")],
) -> None:
    """Make a registered backend the default and save it to config.yaml."""
    if backend is BackendId.AUTO:
        print_error("'auto' is not a backend.")
        raise typer.Exit(1)

    gateway = runtime.build_gateway()
    try:
        gateway.set_default_backend(backend)
    except NotRegisteredError as e:
        registered = ", ".join(e.registered) or "none"
        print_error(f"{e.message}. Registered backends: {registered}")
        raise typer.Exit(1) from e

    config = load_config()
    path = save_config(config.model_copy(update={"default_backend": backend}))
    print_success(f"Default backend set to {backend.value} ({path})")


__all__ = ["app"]
