"""Analysis commands for the Cipher CLI.

- `classify`: classify a source file without routing it
- `orchestrate`: classify, rank handlers and record the routing decision
"""

from __future__ import annotations

from pathlib import Path

import typer

from cipher.classification.models import ProblemClassification

from ..helpers import get_brain, read_source
from ..output import (
    console,
    create_recommendations_table,
    create_simple_table,
    format_confidence,
    output_json,
)


def _print_classification(classification: ProblemClassification) -> None:
    table = create_simple_table()
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Problem type", f"[cyan]{classification.problem_type.value}[/cyan]")
    table.add_row("Complexity", classification.complexity.value)
    table.add_row("Confidence", format_confidence(classification.confidence))
    table.add_row("Rule", classification.rule_id)
    table.add_row("Indicators", "\n".join(classification.indicators))
    console.print(table)


# =============================================================================
# classify command
# =============================================================================


def classify(
    file_path: Path = typer.Argument(..., help="Path of the source file to classify"),
    code: str | None = typer.Option(
        None,
        "--code",
        "-c",
        help="Source text to classify instead of reading FILE_PATH",
    ),
    action: str | None = typer.Option(
        None,
        "--action",
        "-a",
        help="Requested action, e.g. create-component",
    ),
    explain: bool = typer.Option(
        False,
        "--explain",
        help="Show which rules matched, in priority order",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output as JSON for machine parsing",
    ),
) -> None:
    """Classify a unit of work without choosing a handler.

    Examples:
        cipher classify src/App.tsx
        cipher classify src/Player.tsx --code "const x = 1;;" --json
    """
    source = read_source(file_path, code, json_output)
    brain = get_brain(json_output)
    context = {"action": action} if action else None
    classification = brain.classify(source, str(file_path), context)
    traces = brain.classifier.explain(source, str(file_path), context) if explain else []

    if json_output:
        output = classification.to_dict()
        if explain:
            output["rules"] = [
                {"rule_id": t.rule_id, "matched": t.matched, "indicators": list(t.indicators)}
                for t in traces
            ]
        output_json(output)
        return

    _print_classification(classification)
    if explain:
        console.print("\n[bold]Rule evaluation[/bold]")
        for trace in traces:
            marker = "[green]✓[/green]" if trace.matched else "[dim]·[/dim]"
            winner = " [bold](selected)[/bold]" if trace.rule_id == classification.rule_id else ""
            console.print(f"  {marker} {trace.rule_id}{winner}")


# =============================================================================
# orchestrate command
# =============================================================================


def orchestrate(
    file_path: Path = typer.Argument(..., help="Path of the source file to route"),
    code: str | None = typer.Option(
        None,
        "--code",
        "-c",
        help="Source text to route instead of reading FILE_PATH",
    ),
    action: str | None = typer.Option(
        None,
        "--action",
        "-a",
        help="Requested action, e.g. create-component",
    ),
    sequence: bool = typer.Option(
        False,
        "--sequence",
        "-s",
        help="Also show the handler sequence to run for this work",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output as JSON for machine parsing",
    ),
) -> None:
    """Choose a primary handler and backups for a unit of work.

    The decision is recorded and the primary handler's usage is counted.

    Examples:
        cipher orchestrate src/routes/index.tsx
        cipher orchestrate src/App.tsx --sequence --json
    """
    source = read_source(file_path, code, json_output)
    brain = get_brain(json_output)
    result = brain.orchestrate(source, str(file_path), action)
    handler_sequence = brain.recommend_sequence(source, str(file_path)) if sequence else []

    if json_output:
        output = result.to_dict()
        if sequence:
            output["sequence"] = handler_sequence
        output_json(output)
        return

    console.print(f"[bold]Primary handler:[/bold] [cyan]{result.primary_handler}[/cyan]")
    console.print(f"[bold]Confidence:[/bold] {format_confidence(result.confidence)}")
    console.print(f"[bold]Reasoning:[/bold] {result.reasoning}")
    if result.backup_handlers:
        console.print(f"[bold]Backups:[/bold] {', '.join(result.backup_handlers)}")
    if result.degraded:
        console.print("[yellow]Degraded decision: anchor handlers used[/yellow]")

    console.print()
    _print_classification(result.classification)

    if result.recommendations:
        table = create_recommendations_table()
        for rec in result.recommendations[:10]:
            table.add_row(
                str(rec.execution_order),
                rec.handler_name,
                f"{rec.confidence:.2f}",
                format_confidence(rec.estimated_success_rate),
                rec.reasoning,
            )
        console.print()
        console.print(table)

    if sequence:
        console.print(f"\n[bold]Sequence:[/bold] {' -> '.join(handler_sequence)}")
