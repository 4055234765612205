"""Rich tables for backend listings."""

from collections.abc import Mapping
from typing import Any

from rich.table import Table

from prism.cli.formatters import console
from prism.gateway.models import BackendAvailability, CostComparison
from prism.providers.base import BackendId


def create_table(title: str | None = None, *, show_header: bool = True) -> Table:
    """Create a Rich Table with consistent Prism styling."""
    return Table(
        title=title,
        show_header=show_header,
        border_style="blue",
        header_style="bold cyan",
        row_styles=["", "dim"],
    )


def create_key_value_table(data: Mapping[str, Any], title: str | None = None) -> Table:
    """Two-column table for key-value data."""
    table = create_table(title, show_header=False)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value")
    for key, value in data.items():
        table.add_row(str(key), str(value))
    return table


def backends_table(rows: list[BackendAvailability]) -> Table:
    table = create_table("Backends")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Status", justify="center")
    table.add_column("Default", justify="center")
    for row in rows:
        status = "[success]available[/]" if row.available else "[muted]not configured[/]"
        table.add_row(row.id.value, row.name, status, "*" if row.is_default else "")
    return table


def costs_table(rows: list[CostComparison]) -> Table:
    """Prices per million tokens, cheapest input first."""
    table = create_table("Cost per 1M tokens (USD)")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Model")
    table.add_column("Input", justify="right")
    table.add_column("Output", justify="right")
    for row in sorted(rows, key=lambda r: (r.input_price, r.output_price)):
        table.add_row(
            row.backend.value,
            row.model,
            f"${row.input_price:.3f}",
            f"${row.output_price:.3f}",
        )
    return table


def validation_table(results: Mapping[BackendId, bool]) -> Table:
    table = create_table("Credential check")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Result", justify="center")
    for backend, valid in results.items():
        table.add_row(backend.value, "[success]valid[/]" if valid else "[error]failed[/]")
    return table


def print_table(table: Table) -> None:
    console.print(table)


__all__ = [
    "create_table",
    "create_key_value_table",
    "backends_table",
    "costs_table",
    "validation_table",
    "print_table",
]
