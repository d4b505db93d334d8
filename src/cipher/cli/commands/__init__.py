"""CLI command implementations."""

from .analyze import classify, orchestrate
from .handlers import handlers, stats, toggle_orchestration
from .learning import outcome, report, reset, suggest, toggle_learning, train

__all__ = [
    "classify",
    "handlers",
    "orchestrate",
    "outcome",
    "report",
    "reset",
    "stats",
    "suggest",
    "toggle_learning",
    "toggle_orchestration",
    "train",
]
