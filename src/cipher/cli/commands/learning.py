"""Learning commands for the Cipher CLI.

This module implements commands that feed and inspect the learning loop:
- `outcome`: report how a handler did on a unit of work
- `suggest`: suggestions for a scenario from learned patterns
- `report`: markdown intelligence report
- `train`: learn from the files of an existing workspace
- `toggle-learning`: switch outcome learning on or off
- `reset`: forget everything learned
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.markdown import Markdown

from cipher.learning.harvest import DEFAULT_GLOBS
from cipher.learning.models import OutcomeContext
from cipher.workspace.provider import FilesystemWorkspace

from ..helpers import ErrorMessages, get_brain
from ..output import (
    console,
    create_patterns_table,
    create_simple_table,
    format_confidence,
    output_error,
    output_json,
)

# =============================================================================
# outcome command
# =============================================================================


def outcome(
    handler: str = typer.Argument(..., help="Handler that ran, e.g. quick_file_fix"),
    action: str = typer.Argument(..., help="Action type, e.g. auto-fix or orchestration"),
    success: bool = typer.Option(
        True,
        "--success/--failure",
        help="Whether the handler succeeded",
    ),
    file_name: str | None = typer.Option(None, "--file", "-f", help="File the handler worked on"),
    component_type: str | None = typer.Option(None, "--component", help="Component type"),
    problem_type: str | None = typer.Option(None, "--problem-type", help="Classified problem"),
    primary_handler: str | None = typer.Option(
        None, "--primary", help="Primary handler of the routing decision"
    ),
    before: str | None = typer.Option(None, "--before", help="Source before the change"),
    after: str | None = typer.Option(None, "--after", help="Source after the change"),
    reasoning: str | None = typer.Option(None, "--reasoning", help="Why the change worked"),
    confidence: float | None = typer.Option(
        None, "--confidence", min=0.0, max=1.0, help="Confidence in the learned pattern"
    ),
    scenarios: list[str] = typer.Option(
        [], "--scenario", help="Scenario tag for the pattern (repeatable)"
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output as JSON for machine parsing",
    ),
) -> None:
    """Report a handler outcome so the brain can learn from it.

    Examples:
        cipher outcome quick_file_fix auto-fix --before "x;;" --after "x;"
        cipher outcome smart_file_rebuilder orchestration --failure
    """
    brain = get_brain(json_output)
    if handler not in brain.registry and not json_output:
        output_error(
            f"{ErrorMessages.UNKNOWN_HANDLER}: {handler}",
            error_code="E301",
            hints=["Run 'cipher handlers' to list registered handlers"],
            severity="warning",
        )

    context = OutcomeContext(
        file_name=file_name,
        component_type=component_type,
        confidence=confidence,
        before_state=before,
        after_state=after,
        problem_type=problem_type,
        primary_handler=primary_handler,
        reasoning=reasoning,
        scenarios=tuple(scenarios),
    )
    patterns = brain.record_outcome(handler, action, success, context)

    if json_output:
        output_json(
            {
                "recorded": brain.learning_state.is_learning_enabled,
                "patterns": [p.to_dict() for p in patterns],
            }
        )
        return

    if not brain.learning_state.is_learning_enabled:
        console.print("[yellow]Learning is disabled; outcome not recorded[/yellow]")
        return

    result = "[green]success[/green]" if success else "[red]failure[/red]"
    console.print(f"Recorded {result} for [cyan]{handler}[/cyan] ({action})")
    if patterns:
        table = create_patterns_table("Patterns learned")
        for pattern in patterns:
            table.add_row(
                pattern.pattern_type.value,
                pattern.reasoning,
                format_confidence(pattern.confidence),
                ", ".join(pattern.applicable_scenarios),
            )
        console.print(table)


# =============================================================================
# suggest command
# =============================================================================


def suggest(
    scenario: str = typer.Argument(..., help="Scenario tag, e.g. component-creation"),
    code: str = typer.Option("", "--code", "-c", help="Current source text"),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output as JSON for machine parsing",
    ),
) -> None:
    """Suggestions for a scenario drawn from learned patterns.

    Examples:
        cipher suggest guitar-analysis
        cipher suggest simple-fix --json
    """
    brain = get_brain(json_output)
    suggestions = brain.suggest(code, scenario)

    if json_output:
        output_json({"scenario": scenario, "suggestions": suggestions})
        return

    console.print(f"[bold]Suggestions for[/bold] [cyan]{scenario}[/cyan]")
    for item in suggestions:
        console.print(f"  - {item}")


# =============================================================================
# report command
# =============================================================================


def report(
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write the markdown report to this file"
    ),
    raw: bool = typer.Option(False, "--raw", help="Print markdown source instead of rendering"),
) -> None:
    """Show the intelligence report: learning status, patterns and handler performance.

    Examples:
        cipher report
        cipher report --output brain-report.md
    """
    brain = get_brain()
    text = brain.generate_report()

    if output is not None:
        try:
            output.write_text(text, encoding="utf-8")
        except OSError as e:
            output_error(f"Cannot write report: {e}", error_code="E401")
            raise typer.Exit(1) from None
        console.print(f"Report written to [cyan]{output}[/cyan]")
        return

    if raw:
        console.print(text, markup=False, highlight=False, soft_wrap=True)
    else:
        console.print(Markdown(text))


# =============================================================================
# train command
# =============================================================================


def train(
    root: Path = typer.Argument(
        Path("."),
        help="Workspace root to learn from",
        exists=True,
        file_okay=False,
        dir_okay=True,
    ),
    globs: list[str] = typer.Option(
        [], "--glob", "-g", help="File glob to scan (repeatable, default: JS/TS sources)"
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output as JSON for machine parsing",
    ),
) -> None:
    """Learn from an existing workspace and predict likely issues.

    Examples:
        cipher train ./my-app
        cipher train . --glob "src/**/*.tsx" --json
    """
    brain = get_brain(json_output)
    provider = FilesystemWorkspace(root)
    profile = brain.harvest(provider, tuple(globs) or DEFAULT_GLOBS)
    issues = brain.predict_issues(profile)

    if json_output:
        output_json(
            {
                "profile": profile.to_dict(),
                "predicted_issues": [
                    {
                        "issue_type": i.issue_type,
                        "description": i.description,
                        "severity": i.severity,
                        "confidence": i.confidence,
                        "suggested_action": i.suggested_action,
                    }
                    for i in issues
                ],
            }
        )
        return

    console.print(f"[bold]Workspace profile[/bold] ({root})")
    table = create_simple_table()
    table.add_column("Metric", style="bold")
    table.add_column("Count", justify="right")
    table.add_row("Files scanned", str(profile.files_scanned))
    table.add_row("Components", str(profile.components))
    table.add_row("Hook users", str(profile.hooks))
    table.add_row("Complex files", str(profile.complex_files))
    table.add_row("Test files", str(profile.test_files))
    table.add_row("Typed files", str(profile.typed_files))
    table.add_row("Performance issues", str(profile.performance_issues))
    console.print(table)

    if profile.insights:
        console.print("\n[bold cyan]Insights[/bold cyan]")
        for insight in profile.insights:
            console.print(f"  - {insight}")
    if issues:
        console.print("\n[bold yellow]Predicted issues[/bold yellow]")
        for issue in issues:
            console.print(
                f"  - {issue.description} ({issue.severity}, "
                f"{format_confidence(issue.confidence)}) -> {issue.suggested_action}"
            )


# =============================================================================
# toggle-learning and reset commands
# =============================================================================


def toggle_learning() -> None:
    """Switch outcome learning on or off."""
    brain = get_brain()
    enabled = brain.toggle_learning()
    state = "[green]enabled[/green]" if enabled else "[yellow]disabled[/yellow]"
    console.print(f"Learning {state}")


def reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
) -> None:
    """Forget all learned patterns, counters, decisions and handler statistics."""
    if not yes:
        typer.confirm("Reset everything the brain has learned?", abort=True)
    brain = get_brain()
    brain.reset()
    console.print("[green]Brain state reset[/green]")
