"""Classification data models.

A classification is produced fresh for every request and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ProblemType(str, Enum):
    """Kind of work a request represents."""

    SYNTAX_ERROR = "syntax-error"
    STRUCTURAL_ISSUE = "structural-issue"
    OPTIMIZATION_NEEDED = "optimization-needed"
    COMPONENT_CREATION = "component-creation"
    MUSIC_ANALYSIS = "music-analysis"
    GUITAR_ANALYSIS = "guitar-analysis"
    VOCAL_ANALYSIS = "vocal-analysis"
    AUDIO_CREATION = "audio-creation"
    ROUTE_ISSUE = "route-issue"
    ROUTE_HEALTH = "route-health"
    ROUTE_VISUALIZATION = "route-visualization"
    DEPLOYMENT_TASK = "deployment-task"
    TEST_GENERATION = "test-generation"
    PERFORMANCE_ISSUE = "performance-issue"
    COMPLEX_REFACTOR = "complex-refactor"
    SIMPLE_FIX = "simple-fix"
    UNKNOWN = "unknown"


class Complexity(str, Enum):
    """Estimated effort class of a problem."""

    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"
    EXPERT = "expert"

    @property
    def weight(self) -> int:
        """Numeric weight used in learning metadata."""
        return _COMPLEXITY_WEIGHTS[self]


_COMPLEXITY_WEIGHTS = {
    Complexity.SIMPLE: 1,
    Complexity.MODERATE: 3,
    Complexity.COMPLEX: 5,
    Complexity.EXPERT: 7,
}

_FILE_TYPES = {
    "ts": "typescript",
    "tsx": "typescript-react",
    "js": "javascript",
    "jsx": "javascript-react",
    "vue": "vue",
    "md": "markdown",
    "py": "python",
}


def file_type_from_path(file_path: str) -> str:
    """Map a path's extension to a file type name.

    Unmapped extensions are returned lower-cased; paths without an
    extension yield ``"unknown"``.
    """
    name = file_path.rsplit("/", 1)[-1]
    if "." not in name:
        return "unknown"
    extension = name.rsplit(".", 1)[-1].lower()
    if not extension:
        return "unknown"
    return _FILE_TYPES.get(extension, extension)


@dataclass(frozen=True)
class RequestContext:
    """Caller-supplied context for a classification or orchestration request."""

    action: str | None = None
    file_name: str | None = None
    component_type: str | None = None
    user_role: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: dict[str, Any] | None) -> RequestContext:
        """Build a context from a loose mapping; unknown keys go to ``extra``."""
        if not data:
            return cls()
        known = {"action", "file_name", "component_type", "user_role"}
        return cls(
            action=data.get("action"),
            file_name=data.get("file_name"),
            component_type=data.get("component_type"),
            user_role=data.get("user_role"),
            extra={k: v for k, v in data.items() if k not in known},
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = dict(self.extra)
        for key in ("action", "file_name", "component_type", "user_role"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        return result


@dataclass(frozen=True)
class ProblemClassification:
    """Structured description of a problem's type, complexity and evidence.

    Attributes:
        problem_type: The classified kind of problem.
        complexity: Estimated effort class.
        confidence: Confidence in the classification, in [0, 1].
        indicators: Ordered, non-empty evidence strings.
        rule_id: Identifier of the rule that produced this classification.
        context: File path, file type, code length and caller context.
    """

    problem_type: ProblemType
    complexity: Complexity
    confidence: float
    indicators: tuple[str, ...]
    rule_id: str = "default"
    context: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be in [0, 1], got {self.confidence}")
        if not self.indicators:
            raise ValueError("indicators must not be empty")

    @classmethod
    def fallback(cls, reason: str, context: dict[str, Any] | None = None) -> ProblemClassification:
        """The ``unknown``/``moderate``/0.5 classification used after failures."""
        return cls(
            problem_type=ProblemType.UNKNOWN,
            complexity=Complexity.MODERATE,
            confidence=0.5,
            indicators=(reason,),
            rule_id="fallback",
            context=context or {},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "problem_type": self.problem_type.value,
            "complexity": self.complexity.value,
            "confidence": self.confidence,
            "indicators": list(self.indicators),
            "rule_id": self.rule_id,
            "context": dict(self.context),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProblemClassification:
        return cls(
            problem_type=ProblemType(data["problem_type"]),
            complexity=Complexity(data["complexity"]),
            confidence=float(data["confidence"]),
            indicators=tuple(data.get("indicators") or ("restored",)),
            rule_id=data.get("rule_id", "default"),
            context=dict(data.get("context") or {}),
        )
