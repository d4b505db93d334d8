"""CipherBrain: composition root and public API.

Builds every component from a BrainConfig and a KeyValueStore, wires the
classifier's learning events into the feedback loop, loads persisted state
on construction and saves it after every mutating call.

Persisted sections:
- ``learning_patterns``: patterns, sessions and the analysis cache
- ``learning_state``: learning toggle, mode, counters and action statistics
- ``orchestration_data``: handler statistics, cached decisions, decision count

Example:
    brain = CipherBrain(BrainConfig.from_yaml(Path("cipher.yaml")))
    result = brain.orchestrate(code, "src/App.tsx")
    brain.record_outcome(result.primary_handler, "orchestration", True, {...})
"""

from __future__ import annotations

import threading
import uuid
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any

from cipher.classification.classifier import ProblemClassifier
from cipher.classification.models import ProblemClassification, RequestContext
from cipher.core.config import BrainConfig
from cipher.core.constants import (
    KEY_LEARNING_PATTERNS,
    KEY_LEARNING_STATE,
    KEY_ORCHESTRATION_DATA,
)
from cipher.core.logging import OrchestrationContext, get_logger, with_context
from cipher.learning.feedback import FeedbackLoop
from cipher.learning.harvest import (
    DEFAULT_GLOBS,
    CodebaseProfile,
    PatternHarvester,
    PredictedIssue,
)
from cipher.learning.insights import generate_report, get_insights
from cipher.learning.models import (
    CipherLearningState,
    LearningMode,
    LearningPattern,
    OutcomeContext,
    OutcomeResult,
)
from cipher.learning.store import PatternStore
from cipher.orchestration.orchestrator import OrchestrationStats, Orchestrator
from cipher.ranking.engine import RankingEngine
from cipher.ranking.models import OrchestrationResult
from cipher.ranking.scorer import HandlerScorer
from cipher.registry.registry import CapabilityRegistry, create_default_registry
from cipher.state.base import KeyValueStore
from cipher.state.json_store import JsonFileStore
from cipher.state.memory import InMemoryStore
from cipher.state.snapshot import StatePersistence
from cipher.workspace.provider import WorkspaceProvider

_logger = get_logger("brain")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def create_store(config: BrainConfig) -> KeyValueStore:
    """Build the state store named by ``config.storage``."""
    if config.storage.backend == "memory":
        return InMemoryStore()
    return JsonFileStore(config.storage.path)


class CipherBrain:
    """Facade over the classifier, registry, ranking, orchestration and learning."""

    def __init__(
        self,
        config: BrainConfig | None = None,
        store: KeyValueStore | None = None,
        *,
        registry: CapabilityRegistry | None = None,
        clock: Callable[[], datetime] = _utcnow,
        autoload: bool = True,
    ) -> None:
        self.config = config or BrainConfig()
        learning = self.config.learning

        self.registry = registry or create_default_registry(
            usage_confidence_step=learning.usage_confidence_step,
            success_rate_gain=learning.success_rate_gain,
            success_rate_loss=learning.success_rate_loss,
            confidence_gain=learning.confidence_gain,
            confidence_loss=learning.confidence_loss,
            statistics_floor=learning.statistics_floor,
            clock=clock,
        )
        self.pattern_store = PatternStore(
            pattern_capacity=learning.pattern_capacity,
            session_capacity=learning.session_capacity,
            analysis_capacity=learning.analysis_cache_capacity,
        )
        self.feedback = FeedbackLoop(self.pattern_store, self.registry, learning, clock=clock)
        self.classifier = ProblemClassifier(event_sink=self.feedback.record_event)
        self.ranking = RankingEngine(
            self.registry,
            HandlerScorer(self.config.scoring),
            max_backups=self.config.orchestration.max_backups,
            clock=clock,
        )
        self.orchestrator = Orchestrator(
            self.classifier,
            self.ranking,
            self.registry,
            self.pattern_store,
            self.config.orchestration,
            clock=clock,
        )
        self.harvester = PatternHarvester(self.classifier, self.feedback)

        if store is None:
            store = create_store(self.config)
        self._persistence = StatePersistence(store)
        self._save_lock = threading.Lock()
        self._context = OrchestrationContext(session_id=uuid.uuid4().hex[:12], component="brain")

        if autoload:
            self.load()

    # =========================================================================
    # Routing
    # =========================================================================

    def classify(
        self,
        code: str,
        file_path: str,
        context: RequestContext | dict[str, Any] | None = None,
    ) -> ProblemClassification:
        with with_context(self._request("classifier")):
            return self.classifier.classify(code, file_path, context)

    def orchestrate(
        self,
        code: str,
        file_path: str,
        action: str | None = None,
        context: RequestContext | dict[str, Any] | None = None,
    ) -> OrchestrationResult:
        with with_context(self._request("orchestrator")):
            result = self.orchestrator.orchestrate(code, file_path, action, context)
            if self.orchestrator.enabled:
                self.save()
        return result

    def recommend_sequence(
        self,
        code: str,
        file_path: str,
        context: RequestContext | dict[str, Any] | None = None,
    ) -> list[str]:
        """Handlers to run in order for this unit of work."""
        with with_context(self._request("ranking")):
            classification = self.classifier.classify(code, file_path, context)
            return self.ranking.recommend_sequence(classification)

    def toggle_orchestration(self) -> bool:
        enabled = self.orchestrator.toggle()
        self.save()
        return enabled

    def get_stats(self) -> OrchestrationStats:
        return self.orchestrator.get_stats()

    # =========================================================================
    # Learning
    # =========================================================================

    def record_outcome(
        self,
        handler_name: str,
        action_type: str,
        result: OutcomeResult | str | bool,
        context: OutcomeContext | dict[str, Any] | None = None,
    ) -> list[LearningPattern]:
        """Report how a handler did; returns the patterns learned from it."""
        with with_context(self._request("feedback")):
            patterns = self.feedback.record_outcome(handler_name, action_type, result, context)
            self.save()
        return patterns

    def suggest(self, code: str, scenario_tag: str) -> list[str]:
        return self.feedback.suggest(code, scenario_tag)

    def toggle_learning(self) -> bool:
        enabled = self.feedback.toggle_learning()
        self.save()
        return enabled

    def set_learning_mode(self, mode: LearningMode | str) -> LearningMode:
        new_mode = self.feedback.set_learning_mode(mode)
        self.save()
        return new_mode

    @property
    def learning_state(self) -> CipherLearningState:
        return self.feedback.state

    def get_insights(self) -> list[str]:
        return get_insights(self.feedback, self.pattern_store, self.registry)

    def generate_report(self) -> str:
        return generate_report(self.feedback, self.pattern_store, self.registry)

    def harvest(
        self, provider: WorkspaceProvider, globs: Iterable[str] = DEFAULT_GLOBS
    ) -> CodebaseProfile:
        """Learn from the files of an existing workspace."""
        with with_context(self._request("harvest")):
            profile = self.harvester.harvest(provider, globs)
            self.save()
        return profile

    def predict_issues(self, profile: CodebaseProfile) -> list[PredictedIssue]:
        issues = self.harvester.predict_issues(profile)
        self.save()
        return issues

    def reset(self) -> None:
        """Forget everything learned: patterns, counters, decisions, handler statistics."""
        self.feedback.reset()
        self.orchestrator.clear()
        self.registry.reset_statistics()
        _logger.info("brain_reset")
        self.save()

    # =========================================================================
    # Persistence
    # =========================================================================

    def load(self) -> None:
        """Restore every persisted section that is present and readable.

        A section whose contents cannot be restored is logged and skipped;
        the brain keeps its defaults for that section.
        """
        self._restore_section(KEY_LEARNING_PATTERNS, self.pattern_store.restore)
        self._restore_section(KEY_LEARNING_STATE, self.feedback.restore)
        self._restore_section(KEY_ORCHESTRATION_DATA, self._restore_orchestration)

        _logger.debug(
            "brain_loaded",
            patterns=self.pattern_store.pattern_count(),
            decisions=self.orchestrator.total_decisions,
        )

    def _restore_section(self, key: str, restore: Callable[[dict[str, Any]], None]) -> None:
        data = self._persistence.load_section(key)
        if data is None:
            return
        try:
            restore(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            _logger.warning(
                "state_section_restore_failed",
                key=key,
                error=str(e),
                error_type=type(e).__name__,
            )

    def _restore_orchestration(self, data: dict[str, Any]) -> None:
        restored = self.registry.restore(data.get("handlers") or {})
        self.orchestrator.restore(data)
        _logger.debug("handler_statistics_restored", count=restored)

    def save(self) -> bool:
        """Persist every section. Returns False if any section failed to save."""
        with self._save_lock:
            results = [
                self._persistence.save_section(
                    KEY_LEARNING_PATTERNS, self.pattern_store.snapshot()
                ),
                self._persistence.save_section(KEY_LEARNING_STATE, self.feedback.snapshot()),
                self._persistence.save_section(
                    KEY_ORCHESTRATION_DATA,
                    {"handlers": self.registry.snapshot(), **self.orchestrator.snapshot()},
                ),
            ]
        return all(results)

    def _request(self, component: str) -> OrchestrationContext:
        return self._context.new_request().with_component(component)
