"""Ranking result models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from cipher.classification.models import ProblemClassification


@dataclass(frozen=True)
class HandlerRecommendation:
    """One scored candidate handler.

    Attributes:
        handler_name: Registered handler name.
        confidence: Score in [0.1, 1.0].
        reasoning: Human-readable explanation of the score.
        estimated_success_rate: Handler success rate times confidence.
        fallback_handlers: Up to two anchor handlers other than this one.
        execution_order: 1-based rank.
    """

    handler_name: str
    confidence: float
    reasoning: str
    estimated_success_rate: float
    fallback_handlers: tuple[str, ...]
    execution_order: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "handler_name": self.handler_name,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
            "estimated_success_rate": self.estimated_success_rate,
            "fallback_handlers": list(self.fallback_handlers),
            "execution_order": self.execution_order,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HandlerRecommendation:
        return cls(
            handler_name=data["handler_name"],
            confidence=float(data["confidence"]),
            reasoning=data.get("reasoning", ""),
            estimated_success_rate=float(data.get("estimated_success_rate", 0.0)),
            fallback_handlers=tuple(data.get("fallback_handlers", ())),
            execution_order=int(data.get("execution_order", 1)),
        )


@dataclass(frozen=True)
class OrchestrationResult:
    """Selected handler, its backups and the evidence behind the choice."""

    primary_handler: str
    backup_handlers: tuple[str, ...]
    reasoning: str
    confidence: float
    classification: ProblemClassification
    recommendations: tuple[HandlerRecommendation, ...] = ()
    degraded: bool = False
    decided_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.primary_handler:
            raise ValueError("primary_handler must not be empty")

    def to_dict(self) -> dict[str, Any]:
        return {
            "primary_handler": self.primary_handler,
            "backup_handlers": list(self.backup_handlers),
            "reasoning": self.reasoning,
            "confidence": self.confidence,
            "classification": self.classification.to_dict(),
            "recommendations": [r.to_dict() for r in self.recommendations],
            "degraded": self.degraded,
            "decided_at": self.decided_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OrchestrationResult:
        decided_at = data.get("decided_at")
        return cls(
            primary_handler=data["primary_handler"],
            backup_handlers=tuple(data.get("backup_handlers", ())),
            reasoning=data.get("reasoning", ""),
            confidence=float(data["confidence"]),
            classification=ProblemClassification.from_dict(data["classification"]),
            recommendations=tuple(
                HandlerRecommendation.from_dict(r) for r in data.get("recommendations", ())
            ),
            degraded=bool(data.get("degraded", False)),
            decided_at=(
                datetime.fromisoformat(decided_at) if decided_at else datetime.now(UTC)
            ),
        )
