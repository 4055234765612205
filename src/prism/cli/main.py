"""Prism CLI main entry point.

This module defines the main Typer application and registers all
commands and command groups.
"""

from typing import Annotated

import typer

from prism import __version__
from prism.cli.commands import ask, backends, config
from prism.cli.formatters import console

app = typer.Typer(
    name="prism",
    help="Prism - route prompts across Gemini, DeepSeek, Claude and OpenAI",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("ask")(ask.ask)
app.command("route")(ask.route)
app.add_typer(backends.app, name="backends")
app.add_typer(config.app, name="config")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]Prism[/] version [green]{__version__}[/]")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """Prism - provider routing with fallback across AI backends.

    Use [bold cyan]prism COMMAND --help[/] for command-specific help.
    """


__all__ = ["app", "main"]
