"""Ask and route commands: send a prompt, or preview where it would go."""

import asyncio
from pathlib import Path
from typing import Annotated

import typer

from prism.cli import runtime
from prism.cli.formatters import console
from prism.cli.formatters.panels import print_decision, print_error, print_response
from prism.core.errors import BackendError, NotRegisteredError
from prism.gateway.service import Gateway
from prism.providers.base import BackendId
from prism.routing.roles import Role

RoleOption = Annotated[
    Role,
    typer.Option("--role", "-r", help="Task role; selects the persona and backend preferences."),
]
BackendOption = Annotated[
    BackendId,
    typer.Option("--backend", "-b", help="Backend to try first, or auto."),
]


def _read_context(context: str | None, context_file: Path | None) -> str | None:
    if context and context_file:
        print_error("Use either --context or --context-file, not both.")
        raise typer.Exit(1)
    if context_file:
        return context_file.read_text(encoding="utf-8")
    return context


async def _stream(
    gateway: Gateway, role: Role, prompt: str, context: str | None, backend: BackendId
) -> None:
    async for fragment in gateway.stream(role, prompt, context, backend):
        console.print(fragment, end="", markup=False, highlight=False)
    console.print()


def ask(
    prompt: Annotated[str, typer.Argument(help="Task text.")],
    role: RoleOption = Role.CODER,
    context: Annotated[
        str | None,
        typer.Option("--context", "-c", help="Context placed ahead of the task."),
    ] = None,
    context_file: Annotated[
        Path | None,
        typer.Option(
            "--context-file",
            "-f",
            exists=True,
            dir_okay=False,
            readable=True,
            help="Read context from a file.",
        ),
    ] = None,
    backend: BackendOption = BackendId.AUTO,
    stream: Annotated[
        bool,
        typer.Option("--stream", "-s", help="Stream the answer (single backend, no fallback)."),
    ] = False,
) -> None:
    """Send a prompt to the best available backend.

    Failed backends are retried through their fallback chain unless
    [bold cyan]--stream[/] is given.
    """
    context_text = _read_context(context, context_file)
    gateway = runtime.build_gateway()

    if stream:
        try:
            asyncio.run(_stream(gateway, role, prompt, context_text, backend))
        except (BackendError, NotRegisteredError) as e:
            console.print()
            print_error(e.message, title="Stream failed")
            raise typer.Exit(1) from e
        return

    result = asyncio.run(gateway.complete(role, prompt, context_text, backend))
    if result.is_err:
        print_error(str(result.error), title="Request failed")
        raise typer.Exit(1)
    print_response(result.value)


def route(
    prompt: Annotated[str, typer.Argument(help="Task text.")],
    role: RoleOption = Role.CODER,
    backend: BackendOption = BackendId.AUTO,
) -> None:
    """Show which backend a prompt would be routed to, without sending it."""
    gateway = runtime.build_gateway()
    print_decision(gateway.route(prompt, role, backend))


__all__ = ["ask", "route"]
