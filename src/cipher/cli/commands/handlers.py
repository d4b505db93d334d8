"""Routing and handler commands for the Cipher CLI.

- `stats`: routing statistics and learning insights
- `handlers`: registered handlers with their current statistics
- `toggle-orchestration`: switch classification and ranking on or off
"""

from __future__ import annotations

import typer

from cipher.registry.models import HandlerCategory

from ..helpers import get_brain
from ..output import (
    console,
    create_handlers_table,
    create_simple_table,
    format_confidence,
    format_percent,
    format_timestamp,
    output_json,
)

# =============================================================================
# stats command
# =============================================================================


def stats(
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output as JSON for machine parsing",
    ),
) -> None:
    """Show routing statistics and what the brain has learned.

    Examples:
        cipher stats
        cipher stats --json
    """
    brain = get_brain(json_output)
    orchestration = brain.get_stats()
    learning = brain.learning_state
    insights = brain.get_insights()

    if json_output:
        output_json(
            {
                "orchestration": orchestration.to_dict(),
                "learning": learning.to_dict(),
                "patterns": brain.pattern_store.pattern_count(),
                "sessions": brain.pattern_store.session_count(),
                "insights": insights,
            }
        )
        return

    console.print("[bold]Cipher Brain Statistics[/bold]\n")

    console.print("[bold cyan]Orchestration[/bold cyan]")
    table = create_simple_table()
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    enabled = "[green]yes[/green]" if orchestration.enabled else "[yellow]no[/yellow]"
    table.add_row("  Enabled", enabled)
    table.add_row("  Registered handlers", str(orchestration.registered_handlers))
    table.add_row("  Total decisions", str(orchestration.total_decisions))
    table.add_row("  Most used handler", orchestration.most_used_handler or "-")
    table.add_row("  Average confidence", format_confidence(orchestration.average_confidence))
    console.print(table)

    console.print("\n[bold cyan]Learning[/bold cyan]")
    table = create_simple_table()
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    enabled = "[green]yes[/green]" if learning.is_learning_enabled else "[yellow]no[/yellow]"
    table.add_row("  Enabled", enabled)
    table.add_row("  Mode", learning.learning_mode.value)
    table.add_row("  Outcomes", str(learning.total_outcomes))
    table.add_row("  Successful", str(learning.successful_outcomes))
    table.add_row("  Patterns learned", str(learning.patterns_learned))
    table.add_row("  Last learned", format_timestamp(learning.last_learning_at))
    console.print(table)

    console.print("\n[bold cyan]Insights[/bold cyan]")
    for insight in insights:
        console.print(f"  - {insight}")


# =============================================================================
# handlers command
# =============================================================================


def handlers(
    category: HandlerCategory | None = typer.Option(
        None, "--category", "-c", help="Only show handlers in this category"
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output as JSON for machine parsing",
    ),
) -> None:
    """List registered handlers and their statistics.

    Examples:
        cipher handlers
        cipher handlers --category music
    """
    brain = get_brain(json_output)
    selected = [
        h for h in brain.registry.all_handlers() if category is None or h.category is category
    ]

    if json_output:
        output_json(
            [
                {
                    "name": h.name,
                    "category": h.category.value,
                    "capabilities": sorted(h.capabilities),
                    **h.statistics(),
                }
                for h in selected
            ]
        )
        return

    table = create_handlers_table()
    for h in selected:
        table.add_row(
            h.name,
            h.category.value,
            format_percent(h.success_rate),
            format_confidence(h.confidence),
            str(h.usage_count),
            format_timestamp(h.last_used),
        )
    console.print(table)


# =============================================================================
# toggle-orchestration command
# =============================================================================


def toggle_orchestration() -> None:
    """Switch orchestration on or off.

    While off, every request is routed to the anchor handlers.
    """
    brain = get_brain()
    enabled = brain.toggle_orchestration()
    state = "[green]enabled[/green]" if enabled else "[yellow]disabled[/yellow]"
    console.print(f"Orchestration {state}")
