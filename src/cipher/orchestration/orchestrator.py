"""Orchestrator: one classify-then-rank cycle per request.

Flow of ``orchestrate``:
1. Short-circuit with the anchor handlers when orchestration is disabled
2. Classify the request
3. Rank handlers and pick a primary with backups
4. Record usage on the primary, cache the decision, note the analysis

Calls are serialized by an internal lock so registry usage and the decision
cache are updated by one request at a time.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Any

from cipher.classification.classifier import ProblemClassifier
from cipher.classification.models import (
    Complexity,
    ProblemClassification,
    ProblemType,
    RequestContext,
)
from cipher.core.cache import BoundedFifo
from cipher.core.config import OrchestrationConfig
from cipher.core.constants import ANCHOR_HANDLERS, DISABLED_ORCHESTRATION_CONFIDENCE
from cipher.core.logging import get_logger
from cipher.learning.models import CacheEntry
from cipher.learning.store import PatternStore
from cipher.ranking.engine import RankingEngine
from cipher.ranking.models import OrchestrationResult
from cipher.registry.registry import CapabilityRegistry

_logger = get_logger("orchestrator")

ORCHESTRATOR_SOURCE = "orchestrator"


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class OrchestrationStats:
    """Summary of routing activity."""

    registered_handlers: int
    total_decisions: int
    most_used_handler: str | None
    average_confidence: float
    cached_decisions: int = 0
    enabled: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "registered_handlers": self.registered_handlers,
            "total_decisions": self.total_decisions,
            "most_used_handler": self.most_used_handler,
            "average_confidence": self.average_confidence,
            "cached_decisions": self.cached_decisions,
            "enabled": self.enabled,
        }


class Orchestrator:
    """Composes the classifier and ranking engine into routing decisions.

    Example:
        orchestrator = Orchestrator(classifier, engine, registry, store)
        result = orchestrator.orchestrate(code, "src/App.tsx")
        print(result.primary_handler)
    """

    def __init__(
        self,
        classifier: ProblemClassifier,
        ranking_engine: RankingEngine,
        registry: CapabilityRegistry,
        pattern_store: PatternStore,
        config: OrchestrationConfig | None = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.config = config or OrchestrationConfig()
        self._classifier = classifier
        self._engine = ranking_engine
        self._registry = registry
        self._store = pattern_store
        self._clock = clock
        self._enabled = self.config.enabled
        self._decisions: BoundedFifo[str, OrchestrationResult] = BoundedFifo(
            self.config.decision_capacity
        )
        self._total_decisions = 0
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def total_decisions(self) -> int:
        return self._total_decisions

    @property
    def decisions(self) -> list[OrchestrationResult]:
        """Cached decisions, oldest first."""
        return self._decisions.values()

    def decision_keys(self) -> list[str]:
        return list(self._decisions)

    def toggle(self) -> bool:
        """Flip the orchestration-enabled flag and return the new value."""
        with self._lock:
            self._enabled = not self._enabled
        _logger.info("orchestration_toggled", enabled=self._enabled)
        return self._enabled

    def orchestrate(
        self,
        code: str,
        file_path: str,
        action: str | None = None,
        context: RequestContext | dict[str, Any] | None = None,
    ) -> OrchestrationResult:
        """Route one unit of work to a primary handler with backups."""
        request = _merge_action(context, action)
        with self._lock:
            if not self._enabled:
                _logger.debug("orchestration_disabled", file_path=file_path)
                return self._disabled_result(file_path, request)

            classification = self._classifier.classify(code, file_path, request)
            result = self._engine.recommend(classification)
            self._registry.record_usage(result.primary_handler, now=result.decided_at)
            key = self._remember(result)

        _logger.info(
            "orchestration_decided",
            decision=key,
            file_path=file_path,
            problem_type=classification.problem_type.value,
            primary=result.primary_handler,
            backups=list(result.backup_handlers),
            confidence=round(result.confidence, 3),
            degraded=result.degraded,
        )
        return result

    def _remember(self, result: OrchestrationResult) -> str:
        problem_type = result.classification.problem_type.value
        stamp = int(result.decided_at.timestamp() * 1000)
        key = f"{problem_type}-{stamp}"
        if key in self._decisions:
            key = f"{key}-{self._total_decisions}"

        evicted = self._decisions.put(key, result)
        if evicted is not None:
            _logger.debug("decision_evicted", decision=evicted[0])
        self._total_decisions += 1

        self._store.cache_analysis(
            CacheEntry(
                entry_type="classification",
                data={
                    "decision": key,
                    "classification": result.classification.to_dict(),
                    "primary_handler": result.primary_handler,
                    "confidence": result.confidence,
                },
                timestamp=result.decided_at,
                source=ORCHESTRATOR_SOURCE,
            )
        )
        return key

    def _disabled_result(
        self, file_path: str, request: RequestContext
    ) -> OrchestrationResult:
        classification = ProblemClassification(
            problem_type=ProblemType.UNKNOWN,
            complexity=Complexity.MODERATE,
            confidence=DISABLED_ORCHESTRATION_CONFIDENCE,
            indicators=("orchestration disabled",),
            rule_id="disabled",
            context={"file_path": file_path, **request.to_dict()},
        )
        return OrchestrationResult(
            primary_handler=ANCHOR_HANDLERS[0],
            backup_handlers=ANCHOR_HANDLERS[1:],
            reasoning="Orchestration disabled, using anchor handlers",
            confidence=DISABLED_ORCHESTRATION_CONFIDENCE,
            classification=classification,
            degraded=True,
            decided_at=self._clock(),
        )

    def get_stats(self) -> OrchestrationStats:
        most_used = self._registry.most_used()
        decisions = self._decisions.values()
        average = sum(d.confidence for d in decisions) / len(decisions) if decisions else 0.0
        return OrchestrationStats(
            registered_handlers=self._registry.count(),
            total_decisions=self._total_decisions,
            most_used_handler=most_used.name if most_used is not None else None,
            average_confidence=average,
            cached_decisions=len(decisions),
            enabled=self._enabled,
        )

    def clear(self) -> None:
        with self._lock:
            self._decisions.clear()
            self._total_decisions = 0

    def snapshot(self) -> dict[str, Any]:
        return {
            "enabled": self._enabled,
            "total_decisions": self._total_decisions,
            "decisions": {key: result.to_dict() for key, result in self._decisions.items()},
        }

    def restore(self, data: dict[str, Any]) -> None:
        """Reload decisions saved by ``snapshot``. Malformed entries are skipped."""
        decisions: list[tuple[str, OrchestrationResult]] = []
        skipped = 0
        for key, raw in (data.get("decisions") or {}).items():
            try:
                decisions.append((key, OrchestrationResult.from_dict(raw)))
            except (KeyError, TypeError, ValueError, AttributeError):
                skipped += 1
        total = int(data.get("total_decisions", len(decisions)))
        enabled = bool(data["enabled"]) if "enabled" in data else None

        with self._lock:
            self._decisions.clear()
            for key, result in decisions:
                self._decisions.put(key, result)
            self._total_decisions = total
            if enabled is not None:
                self._enabled = enabled
        if skipped:
            _logger.warning("decisions_skipped_on_restore", count=skipped)


def _merge_action(
    context: RequestContext | dict[str, Any] | None, action: str | None
) -> RequestContext:
    if isinstance(context, RequestContext):
        request = context
    else:
        request = RequestContext.from_mapping(context)
    if action and request.action != action:
        request = replace(request, action=action)
    return request
