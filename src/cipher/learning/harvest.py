"""Workspace pattern harvesting and issue prediction.

The harvester scans workspace files through a WorkspaceProvider, profiles
the codebase and records one training outcome per file so the brain learns
from existing code before it is asked to route anything.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from cipher.classification.classifier import ProblemClassifier
from cipher.core.logging import get_logger
from cipher.learning.feedback import FeedbackLoop
from cipher.learning.models import LearningMode, OutcomeContext, OutcomeResult
from cipher.workspace.provider import WorkspaceProvider

_logger = get_logger("harvest")

DEFAULT_GLOBS: tuple[str, ...] = ("**/*.ts", "**/*.tsx", "**/*.js", "**/*.jsx")
HARVEST_HANDLER = "train_brain"
HARVEST_ACTION = "analyze-workspace-file"

COMPLEX_FILE_LENGTH = 1000
PERFORMANCE_FILE_LENGTH = 500
LOW_TEST_RATIO = 0.3
MANY_PERFORMANCE_ISSUES = 5
HIGH_COMPLEXITY_RATIO = 0.4
LARGE_COMPONENT_COUNT = 50
MANY_COMPLEX_FILES = 10


@dataclass
class CodebaseProfile:
    """Counts gathered from a workspace scan."""

    files_scanned: int = 0
    components: int = 0
    hooks: int = 0
    complex_files: int = 0
    test_files: int = 0
    typed_files: int = 0
    performance_issues: int = 0
    problem_types: dict[str, int] = field(default_factory=dict)
    insights: list[str] = field(default_factory=list)

    @property
    def test_ratio(self) -> float:
        return self.test_files / self.components if self.components else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "files_scanned": self.files_scanned,
            "components": self.components,
            "hooks": self.hooks,
            "complex_files": self.complex_files,
            "test_files": self.test_files,
            "typed_files": self.typed_files,
            "performance_issues": self.performance_issues,
            "problem_types": dict(self.problem_types),
            "insights": list(self.insights),
        }


@dataclass(frozen=True)
class PredictedIssue:
    issue_type: str
    description: str
    severity: str
    confidence: float
    suggested_action: str


def profile_file(profile: CodebaseProfile, path: str, text: str) -> None:
    """Add one file's signals to ``profile``."""
    profile.files_scanned += 1
    if "export default function" in text or ("const " in text and "= () =>" in text):
        profile.components += 1
    if "useState" in text or "useEffect" in text:
        profile.hooks += 1
    if len(text) > COMPLEX_FILE_LENGTH:
        profile.complex_files += 1
    if ".test." in path or ".spec." in path:
        profile.test_files += 1
    if path.endswith((".ts", ".tsx")):
        profile.typed_files += 1
    if ".map(" in text and "useMemo" not in text and len(text) > PERFORMANCE_FILE_LENGTH:
        profile.performance_issues += 1


def summarize(profile: CodebaseProfile) -> list[str]:
    insights: list[str] = []
    if profile.components and profile.test_ratio < LOW_TEST_RATIO:
        insights.append("Low test coverage detected - suggest test generation")
    if profile.performance_issues > MANY_PERFORMANCE_ISSUES:
        insights.append("Multiple performance optimization opportunities")
    scanned = profile.files_scanned
    if scanned and profile.complex_files / scanned > HIGH_COMPLEXITY_RATIO:
        insights.append("High complexity - suggest refactoring")
    return insights


class PatternHarvester:
    """Scans a workspace and feeds each file into the learning loop."""

    def __init__(self, classifier: ProblemClassifier, feedback: FeedbackLoop) -> None:
        self._classifier = classifier
        self._feedback = feedback

    def harvest(
        self,
        provider: WorkspaceProvider,
        globs: Iterable[str] = DEFAULT_GLOBS,
    ) -> CodebaseProfile:
        """Profile the workspace and record a training outcome per file.

        Learning runs in training mode for the duration of the scan so that
        existing code does not move handler statistics.
        """
        profile = CodebaseProfile()
        paths: list[str] = []
        for pattern in globs:
            for path in provider.find_files(pattern):
                if path not in paths:
                    paths.append(path)

        previous_mode = self._feedback.state.learning_mode
        self._feedback.set_learning_mode(LearningMode.TRAINING)
        try:
            for path in paths:
                try:
                    text = provider.read_file(path)
                except (OSError, UnicodeDecodeError) as e:
                    _logger.debug("harvest_read_failed", path=path, error=str(e))
                    continue
                profile_file(profile, path, text)
                self._learn_from_file(profile, path, text)
        finally:
            self._feedback.set_learning_mode(previous_mode)

        profile.insights = summarize(profile)
        _logger.info(
            "workspace_harvested",
            files=profile.files_scanned,
            components=profile.components,
            insights=len(profile.insights),
        )
        return profile

    def _learn_from_file(self, profile: CodebaseProfile, path: str, text: str) -> None:
        classification = self._classifier.classify(text, path)
        problem_type = classification.problem_type.value
        profile.problem_types[problem_type] = profile.problem_types.get(problem_type, 0) + 1
        self._feedback.record_outcome(
            HARVEST_HANDLER,
            HARVEST_ACTION,
            OutcomeResult.SUCCESS,
            OutcomeContext(
                file_name=path,
                problem_type=problem_type,
                confidence=classification.confidence,
                reasoning=f"{path} classified as {problem_type}",
                scenarios=(problem_type,),
            ),
        )

    def predict_issues(self, profile: CodebaseProfile) -> list[PredictedIssue]:
        """Issues likely to appear given a workspace profile."""
        issues: list[PredictedIssue] = []
        if (
            profile.components > LARGE_COMPONENT_COUNT
            and self._feedback.pattern_success("bundle-optimization") < 0.5
        ):
            issues.append(
                PredictedIssue(
                    issue_type="performance",
                    description="Large bundle size predicted - suggest code splitting",
                    severity="medium",
                    confidence=0.8,
                    suggested_action="implement-code-splitting",
                )
            )
        if profile.complex_files > MANY_COMPLEX_FILES and profile.test_ratio < LOW_TEST_RATIO:
            issues.append(
                PredictedIssue(
                    issue_type="maintenance",
                    description="High maintenance burden predicted",
                    severity="high",
                    confidence=0.9,
                    suggested_action="increase-test-coverage",
                )
            )
        if profile.performance_issues > MANY_PERFORMANCE_ISSUES:
            issues.append(
                PredictedIssue(
                    issue_type="performance",
                    description="Multiple performance bottlenecks detected",
                    severity="medium",
                    confidence=0.85,
                    suggested_action="run-performance-optimization",
                )
            )
        for issue in issues:
            self._feedback.record_event(f"predict-{issue.issue_type}", True)
        return issues
