"""Handler capability models.

A handler is a specialized worker outside the brain. The brain only knows
what it can do (capability tags), how it is described (strengths and
limitations), and how well it has performed so far.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class HandlerCategory(str, Enum):
    """Functional family a handler belongs to."""

    CORE = "core"
    MUSIC = "music"
    ROUTES = "routes"
    DEPLOYMENT = "deployment"
    UTILITIES = "utilities"
    INTELLIGENCE = "intelligence"
    IMPORT_EXPORT = "import-export"


@dataclass
class HandlerCapability:
    """Static description plus mutable statistics for one handler.

    Only ``last_used``, ``confidence``, ``success_rate`` and ``usage_count``
    change after registration, and only through the capability registry.
    """

    name: str
    category: HandlerCategory
    capabilities: frozenset[str]
    strengths: tuple[str, ...] = ()
    limitations: tuple[str, ...] = ()
    success_rate: float = 0.7
    average_execution_time_ms: int = 3000
    last_used: datetime | None = None
    confidence: float | None = None
    usage_count: int = 0

    def __post_init__(self) -> None:
        if self.confidence is None:
            self.confidence = self.success_rate

    def has_any(self, *tags: str) -> bool:
        """True if the handler declares at least one of ``tags``."""
        return any(tag in self.capabilities for tag in tags)

    def statistics(self) -> dict[str, Any]:
        """Mutable statistics in a JSON-serializable form."""
        return {
            "success_rate": self.success_rate,
            "confidence": self.confidence,
            "usage_count": self.usage_count,
            "last_used": self.last_used.isoformat() if self.last_used else None,
        }

    def apply_statistics(self, data: dict[str, Any]) -> None:
        """Restore statistics produced by :meth:`statistics`."""
        if "success_rate" in data:
            self.success_rate = _unit(data["success_rate"])
        if "confidence" in data:
            self.confidence = _unit(data["confidence"])
        if "usage_count" in data:
            self.usage_count = max(0, int(data["usage_count"]))
        last_used = data.get("last_used")
        self.last_used = datetime.fromisoformat(last_used) if last_used else None


def _unit(value: Any) -> float:
    return min(1.0, max(0.0, float(value)))


@dataclass(frozen=True)
class HandlerSeed:
    """One row of the built-in handler catalog."""

    name: str
    category: HandlerCategory
    capabilities: tuple[str, ...]
    strengths: tuple[str, ...] = ()
    limitations: tuple[str, ...] = ()
    success_rate: float = 0.7
    average_execution_time_ms: int = 3000

    def build(self) -> HandlerCapability:
        return HandlerCapability(
            name=self.name,
            category=self.category,
            capabilities=frozenset(self.capabilities),
            strengths=self.strengths,
            limitations=self.limitations,
            success_rate=self.success_rate,
            average_execution_time_ms=self.average_execution_time_ms,
        )
