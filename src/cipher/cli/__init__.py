"""Cipher CLI - operator commands over the brain.

The CLI is built with Typer. Global options (logging, config file, state
file) are handled by the app callback before any command runs; each command
module builds its own brain through ``helpers.get_brain``.

Package structure:
    cli/
    ├── __init__.py           # This file - app assembly
    ├── helpers.py            # Logging setup, brain construction, source input
    ├── output.py             # Rich formatting
    └── commands/
        ├── analyze.py        # classify, orchestrate
        ├── handlers.py       # stats, handlers, toggle-orchestration
        └── learning.py       # outcome, suggest, report, train, toggle-learning, reset
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from cipher import __version__

from . import helpers as helpers
from .commands import (
    classify,
    handlers,
    orchestrate,
    outcome,
    report,
    reset,
    stats,
    suggest,
    toggle_learning,
    toggle_orchestration,
    train,
)
from .helpers import (
    configure_global_logging,
    set_config_file,
    set_log_file,
    set_log_format,
    set_log_level,
    set_state_file,
)
from .output import console

# =============================================================================
# Typer app definition
# =============================================================================

app = typer.Typer(
    name="cipher",
    help="Problem classification, handler routing and outcome learning",
    add_completion=False,
)


# =============================================================================
# Global option callbacks
# =============================================================================


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"Cipher Brain v{__version__}")
        raise typer.Exit()


def log_level_callback(value: str | None) -> str | None:
    if value:
        set_log_level(value)
    return value


def log_file_callback(value: Path | None) -> Path | None:
    if value:
        set_log_file(value)
    return value


def log_format_callback(value: str | None) -> str | None:
    if value:
        set_log_format(value)
    return value


def config_callback(value: Path | None) -> Path | None:
    set_config_file(value)
    return value


def state_file_callback(value: Path | None) -> Path | None:
    set_state_file(value)
    return value


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            "-L",
            callback=log_level_callback,
            help="Logging level (DEBUG, INFO, WARNING, ERROR)",
            envvar="CIPHER_LOG_LEVEL",
        ),
    ] = None,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            callback=log_file_callback,
            help="Path for log file output",
            envvar="CIPHER_LOG_FILE",
        ),
    ] = None,
    log_format: Annotated[
        str | None,
        typer.Option(
            "--log-format",
            callback=log_format_callback,
            help="Log format: json, console, or both",
            envvar="CIPHER_LOG_FORMAT",
        ),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            callback=config_callback,
            help="Brain configuration YAML file",
            envvar="CIPHER_CONFIG",
        ),
    ] = None,
    state_file: Annotated[
        Path | None,
        typer.Option(
            "--state-file",
            callback=state_file_callback,
            help="JSON file holding learned state (overrides the config)",
            envvar="CIPHER_STATE_FILE",
        ),
    ] = None,
) -> None:
    """Cipher Brain - classify work, route it to handlers, learn from outcomes."""
    configure_global_logging(console)


# =============================================================================
# Command registration
# =============================================================================

# Analysis
app.command()(classify)
app.command()(orchestrate)

# Routing and handlers
app.command()(stats)
app.command()(handlers)
app.command(name="toggle-orchestration")(toggle_orchestration)

# Learning
app.command()(outcome)
app.command()(suggest)
app.command()(report)
app.command()(train)
app.command(name="toggle-learning")(toggle_learning)
app.command()(reset)


# =============================================================================
# Public API
# =============================================================================

__all__ = [
    "app",
    "main",
    "console",
]
