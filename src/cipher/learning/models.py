"""Learning data models.

Patterns are immutable once created. Sessions, action statistics and the
learning state are mutable but owned by a single component each.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _parse_dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class PatternType(str, Enum):
    """What a learned pattern captures."""

    CODE_STRUCTURE = "code-structure"
    ERROR_FIX = "error-fix"
    OPTIMIZATION = "optimization"
    COMPONENT_PATTERN = "component-pattern"


class LearningMode(str, Enum):
    """How outcomes feed back into the brain.

    ADAPTIVE: handler statistics and patterns are both updated.
    TRAINING: patterns are derived; handler statistics stay frozen.
    STATIC: only counters and action statistics are recorded.
    """

    ADAPTIVE = "adaptive"
    STATIC = "static"
    TRAINING = "training"


class OutcomeResult(str, Enum):
    """Result reported for a handler run."""

    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class LearningPattern:
    """A previously successful transformation or routing decision."""

    pattern_type: PatternType
    before_state: str
    after_state: str
    reasoning: str
    confidence: float
    applicable_scenarios: tuple[str, ...]
    learned_from: str
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be in [0, 1], got {self.confidence}")

    def matches(self, tag: str) -> bool:
        """True if the pattern applies to ``tag`` or was learned from it."""
        return tag in self.applicable_scenarios or tag in self.learned_from

    def to_dict(self) -> dict[str, Any]:
        return {
            "pattern_type": self.pattern_type.value,
            "before_state": self.before_state,
            "after_state": self.after_state,
            "reasoning": self.reasoning,
            "confidence": self.confidence,
            "applicable_scenarios": list(self.applicable_scenarios),
            "learned_from": self.learned_from,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LearningPattern:
        return cls(
            pattern_type=PatternType(data["pattern_type"]),
            before_state=data.get("before_state", ""),
            after_state=data.get("after_state", ""),
            reasoning=data.get("reasoning", ""),
            confidence=min(1.0, max(0.0, float(data.get("confidence", 0.5)))),
            applicable_scenarios=tuple(data.get("applicable_scenarios", ())),
            learned_from=data.get("learned_from", ""),
            timestamp=_parse_dt(data.get("timestamp")) or _utcnow(),
        )


@dataclass
class LearningSession:
    """Patterns learned from one outcome, grouped by handler."""

    session_id: str
    handler_name: str
    patterns: list[LearningPattern] = field(default_factory=list)
    started_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "handler_name": self.handler_name,
            "patterns": [p.to_dict() for p in self.patterns],
            "started_at": self.started_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LearningSession:
        return cls(
            session_id=data["session_id"],
            handler_name=data.get("handler_name", ""),
            patterns=[LearningPattern.from_dict(p) for p in data.get("patterns", ())],
            started_at=_parse_dt(data.get("started_at")) or _utcnow(),
        )


@dataclass(frozen=True)
class CacheEntry:
    """One recent analysis, kept in the bounded analysis cache."""

    entry_type: str
    data: dict[str, Any]
    timestamp: datetime
    source: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry_type": self.entry_type,
            "data": self.data,
            "timestamp": self.timestamp.isoformat(),
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CacheEntry:
        return cls(
            entry_type=data.get("entry_type", "unknown"),
            data=dict(data.get("data") or {}),
            timestamp=_parse_dt(data.get("timestamp")) or _utcnow(),
            source=data.get("source", ""),
        )


@dataclass
class ActionStats:
    """Success/failure counters and confidence for one action."""

    successes: int = 0
    failures: int = 0
    confidence: float = 0.5
    last_used: datetime | None = None

    @property
    def total(self) -> int:
        return self.successes + self.failures

    @property
    def success_ratio(self) -> float:
        return self.successes / self.total if self.total else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "successes": self.successes,
            "failures": self.failures,
            "confidence": self.confidence,
            "last_used": self.last_used.isoformat() if self.last_used else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ActionStats:
        return cls(
            successes=int(data.get("successes", 0)),
            failures=int(data.get("failures", 0)),
            confidence=float(data.get("confidence", 0.5)),
            last_used=_parse_dt(data.get("last_used")),
        )


@dataclass
class CipherLearningState:
    """Process-wide learning toggle, mode and counters."""

    is_learning_enabled: bool = True
    learning_mode: LearningMode = LearningMode.ADAPTIVE
    total_outcomes: int = 0
    successful_outcomes: int = 0
    failed_outcomes: int = 0
    patterns_learned: int = 0
    last_learning_action: str | None = None
    last_learning_at: datetime | None = None
    last_attempted_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_learning_enabled": self.is_learning_enabled,
            "learning_mode": self.learning_mode.value,
            "total_outcomes": self.total_outcomes,
            "successful_outcomes": self.successful_outcomes,
            "failed_outcomes": self.failed_outcomes,
            "patterns_learned": self.patterns_learned,
            "last_learning_action": self.last_learning_action,
            "last_learning_at": (
                self.last_learning_at.isoformat() if self.last_learning_at else None
            ),
            "last_attempted_at": (
                self.last_attempted_at.isoformat() if self.last_attempted_at else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CipherLearningState:
        return cls(
            is_learning_enabled=bool(data.get("is_learning_enabled", True)),
            learning_mode=LearningMode(data.get("learning_mode", LearningMode.ADAPTIVE.value)),
            total_outcomes=int(data.get("total_outcomes", 0)),
            successful_outcomes=int(data.get("successful_outcomes", 0)),
            failed_outcomes=int(data.get("failed_outcomes", 0)),
            patterns_learned=int(data.get("patterns_learned", 0)),
            last_learning_action=data.get("last_learning_action"),
            last_learning_at=_parse_dt(data.get("last_learning_at")),
            last_attempted_at=_parse_dt(data.get("last_attempted_at")),
        )


@dataclass(frozen=True)
class OutcomeContext:
    """What the caller knows about a finished handler run."""

    file_name: str | None = None
    component_type: str | None = None
    confidence: float | None = None
    before_state: str | None = None
    after_state: str | None = None
    problem_type: str | None = None
    primary_handler: str | None = None
    reasoning: str | None = None
    scenarios: tuple[str, ...] = ()
    execution_time_ms: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def is_descriptive(self) -> bool:
        """True if there is enough context to derive a pattern."""
        return any(
            (
                self.file_name,
                self.component_type,
                self.before_state,
                self.after_state,
                self.problem_type,
            )
        )

    @classmethod
    def from_mapping(cls, data: dict[str, Any] | None) -> OutcomeContext:
        """Build a context from a loose mapping; unknown keys go to ``extra``."""
        if not data:
            return cls()
        known = {
            "file_name",
            "component_type",
            "confidence",
            "before_state",
            "after_state",
            "problem_type",
            "primary_handler",
            "reasoning",
            "scenarios",
            "execution_time_ms",
        }
        confidence = data.get("confidence")
        execution_time = data.get("execution_time_ms")
        return cls(
            file_name=data.get("file_name"),
            component_type=data.get("component_type"),
            confidence=float(confidence) if confidence is not None else None,
            before_state=data.get("before_state"),
            after_state=data.get("after_state"),
            problem_type=data.get("problem_type"),
            primary_handler=data.get("primary_handler"),
            reasoning=data.get("reasoning"),
            scenarios=tuple(data.get("scenarios") or ()),
            execution_time_ms=int(execution_time) if execution_time is not None else None,
            extra={k: v for k, v in data.items() if k not in known},
        )
