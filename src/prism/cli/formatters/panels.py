"""Rich panels for messages and routed answers."""

from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from prism.cli.formatters import console
from prism.resilience.controller import RoutedResponse
from prism.routing.router import RoutingDecision

_STYLES = {
    "info": "blue",
    "warning": "yellow",
    "error": "red",
    "success": "green",
}


def message_panel(message: str, kind: str = "info", title: str | None = None) -> Panel:
    """Create a panel for a status message.

    Args:
        message: Plain text; Rich markup in it is escaped.
        kind: One of info, warning, error, success.
        title: Panel title. Defaults to the capitalised kind.
    """
    color = _STYLES[kind]
    return Panel(
        f"[{kind}]{escape(message)}[/]",
        title=f"[bold {color}]{title or kind.capitalize()}[/]",
        border_style=color,
        expand=False,
    )


def print_info(message: str, title: str = "Info") -> None:
    console.print(message_panel(message, "info", title))


def print_warning(message: str, title: str = "Warning") -> None:
    console.print(message_panel(message, "warning", title))


def print_error(message: str, title: str = "Error") -> None:
    console.print(message_panel(message, "error", title))


def print_success(message: str, title: str = "Success") -> None:
    console.print(message_panel(message, "success", title))


def response_panel(response: RoutedResponse) -> Panel:
    """Answer text framed with the backend, model and estimated usage."""
    usage = response.usage
    subtitle = (
        f"[muted]{usage.input_tokens} in / {usage.output_tokens} out tokens, "
        f"~${response.cost:.6f}[/]"
    )
    return Panel(
        Text(response.text),
        title=f"[highlight]{response.backend.value}[/] [muted]{response.model}[/]",
        subtitle=subtitle,
        border_style="green",
    )


def print_response(response: RoutedResponse) -> None:
    console.print(response_panel(response))


def print_decision(decision: RoutingDecision) -> None:
    """Show a dry-run routing decision."""
    complexity = decision.complexity.value if decision.complexity else "not estimated"
    console.print(
        Panel(
            f"Backend:    [highlight]{decision.backend.value}[/]\n"
            f"Reason:     {decision.reason.value}\n"
            f"Complexity: {complexity}",
            title="[bold blue]Routing decision[/]",
            border_style="blue",
            expand=False,
        )
    )


__all__ = [
    "message_panel",
    "print_info",
    "print_warning",
    "print_error",
    "print_success",
    "response_panel",
    "print_response",
    "print_decision",
]
