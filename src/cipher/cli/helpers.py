"""Shared utilities for Cipher CLI commands.

This module contains helpers used across multiple CLI command modules:
- Logging configuration driven by the global options
- Brain construction from the --config and --state-file options
- Reading source text for analysis commands
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console

from cipher.brain import CipherBrain
from cipher.core.config import BrainConfig
from cipher.core.logging import configure_logging, get_logger

from .output import console, output_error

# =============================================================================
# Module-level logger
# =============================================================================

_logger = get_logger("cli")


# =============================================================================
# Error message constants
# =============================================================================


class ErrorMessages:
    """Constants for CLI error messages."""

    CONFIG_LOAD_ERROR = "Error loading config"
    FILE_READ_ERROR = "Cannot read source file"
    UNKNOWN_HANDLER = "Unknown handler"


# =============================================================================
# Logging configuration
# =============================================================================


@dataclass
class CliLoggingConfig:
    """Logging options collected from the global CLI callbacks."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    file: Path | None = None
    format: Literal["json", "console", "both"] = "console"
    configured: bool = False


_log_config = CliLoggingConfig()


def get_log_level() -> str:
    return _log_config.level


def set_log_level(level: str) -> None:
    """Set the log level.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR).
    """
    _log_config.level = level.upper()  # type: ignore[assignment]


def get_log_file() -> Path | None:
    return _log_config.file


def set_log_file(path: Path | None) -> None:
    _log_config.file = path


def get_log_format() -> str:
    return _log_config.format


def set_log_format(fmt: str) -> None:
    _log_config.format = fmt  # type: ignore[assignment]


def configure_global_logging(console: Console) -> None:
    """Configure logging once from the global CLI options.

    Raises:
        typer.Exit: If logging configuration fails.
    """
    if _log_config.configured:
        return

    try:
        configure_logging(
            level=_log_config.level,
            format=_log_config.format,
            file_path=_log_config.file,
        )
        _log_config.configured = True
    except ValueError as e:
        console.print(f"[red]Logging configuration error:[/red] {e}")
        raise typer.Exit(1) from None


def reset_logging_state() -> None:
    """Reset logging state (primarily for testing)."""
    _log_config.level = "WARNING"
    _log_config.file = None
    _log_config.format = "console"
    _log_config.configured = False


# =============================================================================
# Brain construction
# =============================================================================


@dataclass
class CliBrainOptions:
    """Where the CLI loads configuration and keeps brain state."""

    config_file: Path | None = None
    state_file: Path | None = None


_brain_options = CliBrainOptions()


def set_config_file(path: Path | None) -> None:
    _brain_options.config_file = path


def set_state_file(path: Path | None) -> None:
    _brain_options.state_file = path


def reset_brain_options() -> None:
    _brain_options.config_file = None
    _brain_options.state_file = None


def load_config(json_output: bool = False) -> BrainConfig:
    """Load the brain config named by --config, or the defaults.

    Raises:
        typer.Exit: If the config file cannot be read or is invalid.
    """
    config_file = _brain_options.config_file
    try:
        config = BrainConfig.from_yaml(config_file) if config_file else BrainConfig()
    except (OSError, yaml.YAMLError, ValidationError) as e:
        output_error(
            f"{ErrorMessages.CONFIG_LOAD_ERROR}: {e}",
            error_code="E101",
            hints=["Check the YAML syntax and field ranges in the config file"],
            json_output=json_output,
        )
        raise typer.Exit(1) from None

    if _brain_options.state_file is not None:
        storage = config.storage.model_copy(
            update={"backend": "json", "path": _brain_options.state_file}
        )
        config = config.model_copy(update={"storage": storage})
    return config


def get_brain(json_output: bool = False) -> CipherBrain:
    """Build a brain with persisted state loaded."""
    config = load_config(json_output)
    _logger.debug(
        "cli_brain_created",
        backend=config.storage.backend,
        state_path=str(config.storage.path),
    )
    return CipherBrain(config)


# =============================================================================
# Source input
# =============================================================================


def read_source(file_path: Path, code: str | None, json_output: bool = False) -> str:
    """Return ``code`` if given, otherwise the contents of ``file_path``.

    Raises:
        typer.Exit: If the file cannot be read.
    """
    if code is not None:
        return code
    try:
        return file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        output_error(
            f"{ErrorMessages.FILE_READ_ERROR}: {file_path}",
            error_code="E201",
            hints=["Pass the source text with --code to classify a path that does not exist"],
            json_output=json_output,
            reason=str(e),
        )
        raise typer.Exit(1) from None


__all__ = [
    "CliBrainOptions",
    "CliLoggingConfig",
    "ErrorMessages",
    "configure_global_logging",
    "console",
    "get_brain",
    "get_log_file",
    "get_log_format",
    "get_log_level",
    "load_config",
    "read_source",
    "reset_brain_options",
    "reset_logging_state",
    "set_config_file",
    "set_log_file",
    "set_log_format",
    "set_log_level",
    "set_state_file",
]
