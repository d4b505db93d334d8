"""Rich output formatting for the Cipher CLI.

Table builders with consistent styling, confidence coloring, and the
error/JSON printers shared by every command.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Literal

from rich.console import Console
from rich.table import Table

# =============================================================================
# Shared console instance
# =============================================================================

console = Console()


# =============================================================================
# Formatters
# =============================================================================


def format_percent(value: float | None) -> str:
    if value is None:
        return "-"
    return f"{value * 100:.0f}%"


def format_confidence(value: float | None) -> str:
    """Percentage colored green/yellow/red by strength."""
    if value is None:
        return "[dim]-[/dim]"
    color = "green" if value >= 0.8 else "yellow" if value >= 0.5 else "red"
    return f"[{color}]{format_percent(value)}[/{color}]"


def format_timestamp(dt: datetime | None) -> str:
    if dt is None:
        return "-"
    return dt.strftime("%Y-%m-%d %H:%M:%S UTC")


# =============================================================================
# Table builders
# =============================================================================


def create_handlers_table(title: str = "Registered Handlers") -> Table:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Handler", style="cyan", no_wrap=True)
    table.add_column("Category", width=13)
    table.add_column("Success", justify="right", width=8)
    table.add_column("Confidence", justify="right", width=10)
    table.add_column("Uses", justify="right", width=6)
    table.add_column("Last Used", width=23)
    return table


def create_recommendations_table(title: str = "Ranked Handlers") -> Table:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("#", justify="right", width=3)
    table.add_column("Handler", style="cyan", no_wrap=True)
    table.add_column("Score", justify="right", width=7)
    table.add_column("Est. Success", justify="right", width=12)
    table.add_column("Reasoning", no_wrap=False)
    return table


def create_patterns_table(title: str = "Learned Patterns") -> Table:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Type", style="cyan", width=18)
    table.add_column("Reasoning", no_wrap=False)
    table.add_column("Confidence", justify="right", width=10)
    table.add_column("Scenarios", no_wrap=False)
    return table


def create_simple_table(show_header: bool = False) -> Table:
    """Key-value table without box styling."""
    return Table(show_header=show_header, box=None)


# =============================================================================
# JSON and error output
# =============================================================================


def output_json(data: Any, console_instance: Console | None = None) -> None:
    """Print ``data`` as indented JSON without markup or wrapping."""
    out = console_instance or console
    out.print(
        json.dumps(data, indent=2, default=str),
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


def output_error(
    message: str,
    *,
    error_code: str | None = None,
    hints: list[str] | None = None,
    severity: Literal["error", "warning"] = "error",
    json_output: bool = False,
    console_instance: Console | None = None,
    **json_extras: str | int | float | bool | None,
) -> None:
    """Output a formatted error/warning with optional hints and JSON alternative.

    Args:
        message: The error message to display.
        error_code: Optional error code (e.g., "E101").
        hints: Optional list of hint strings for the user.
        severity: "error" (red) or "warning" (yellow).
        json_output: If True, output as JSON instead of Rich markup.
        console_instance: Console to print to. Defaults to module console.
        **json_extras: Extra key-value pairs included in JSON output only.
    """
    out = console_instance or console
    color = "red" if severity == "error" else "yellow"
    label = "Error" if severity == "error" else "Warning"

    if json_output:
        result: dict[str, Any] = {"success": False, "message": message}
        if error_code:
            result["error_code"] = error_code
        if hints:
            result["hints"] = hints
        result.update(json_extras)
        output_json(result, out)
        return

    if error_code:
        prefix = f"[{color}]{label} [{error_code}]:[/{color}] "
    else:
        prefix = f"[{color}]{label}:[/{color}] "
    out.print(f"{prefix}{message}")

    if hints:
        out.print()
        out.print("[dim]Hints:[/dim]")
        for hint in hints:
            out.print(f"  - {hint}")


__all__ = [
    "console",
    "create_handlers_table",
    "create_patterns_table",
    "create_recommendations_table",
    "create_simple_table",
    "format_confidence",
    "format_percent",
    "format_timestamp",
    "output_error",
    "output_json",
]
