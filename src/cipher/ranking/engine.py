"""RankingEngine: selects and orders handlers for a classification.

Candidates come from the relevance table; when none match, the anchor
handlers are ranked instead. Any failure while ranking yields the safe
anchor-only result rather than an exception.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from cipher.classification.models import Complexity, ProblemClassification
from cipher.core.constants import (
    ANCHOR_HANDLERS,
    MAX_BACKUP_HANDLERS,
    MAX_FALLBACK_HANDLERS,
    SAFE_RESULT_CONFIDENCE,
)
from cipher.core.errors import RankingError
from cipher.core.logging import get_logger
from cipher.ranking.models import HandlerRecommendation, OrchestrationResult
from cipher.ranking.relevance import relevance_for
from cipher.ranking.scorer import HandlerScorer
from cipher.registry.models import HandlerCapability
from cipher.registry.registry import CapabilityRegistry

_logger = get_logger("ranking")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def anchor_fallbacks(handler_name: str) -> tuple[str, ...]:
    """Anchor handlers other than ``handler_name``, at most two."""
    return tuple(a for a in ANCHOR_HANDLERS if a != handler_name)[:MAX_FALLBACK_HANDLERS]


class RankingEngine:
    """Scores registry handlers for a classification and picks a primary.

    Example:
        engine = RankingEngine(create_default_registry())
        result = engine.recommend(classification)
        print(result.primary_handler, result.backup_handlers)
    """

    def __init__(
        self,
        registry: CapabilityRegistry,
        scorer: HandlerScorer | None = None,
        *,
        max_backups: int = MAX_BACKUP_HANDLERS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._registry = registry
        self._scorer = scorer or HandlerScorer()
        self._max_backups = max_backups
        self._clock = clock

    @property
    def scorer(self) -> HandlerScorer:
        return self._scorer

    def find_candidates(self, classification: ProblemClassification) -> list[HandlerCapability]:
        """Handlers relevant to the problem type, or the anchors if none are.

        Raises:
            RankingError: If the anchor fallback is needed but an anchor is missing.
        """
        rule = relevance_for(classification.problem_type)
        candidates = [h for h in self._registry.all_handlers() if rule.matches(h)]
        if candidates:
            return candidates

        missing = self._registry.missing_anchors()
        if missing:
            raise RankingError(f"anchor handlers not registered: {', '.join(missing)}")
        _logger.debug(
            "no_candidates_using_anchors",
            problem_type=classification.problem_type.value,
        )
        return [h for name in ANCHOR_HANDLERS if (h := self._registry.get(name)) is not None]

    def rank(self, classification: ProblemClassification) -> list[HandlerRecommendation]:
        """Score every candidate and return recommendations, best first.

        Ties keep registry order.
        """
        now = self._clock()
        scored = [
            (handler, self._scorer.score(handler, classification, now))
            for handler in self.find_candidates(classification)
        ]
        scored.sort(key=lambda pair: pair[1], reverse=True)

        return [
            HandlerRecommendation(
                handler_name=handler.name,
                confidence=score,
                reasoning=self._scorer.reasoning(handler, classification),
                estimated_success_rate=handler.success_rate * score,
                fallback_handlers=anchor_fallbacks(handler.name),
                execution_order=rank,
            )
            for rank, (handler, score) in enumerate(scored, start=1)
        ]

    def recommend(self, classification: ProblemClassification) -> OrchestrationResult:
        """Pick a primary handler and backups. Never raises."""
        try:
            recommendations = self.rank(classification)
            if not recommendations:
                raise RankingError("no handlers could be ranked")
        except Exception as e:
            _logger.warning(
                "ranking_failed",
                problem_type=classification.problem_type.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            return self.safe_result(classification)

        primary = recommendations[0]
        backups: list[str] = []
        for rec in recommendations[1:]:
            if len(backups) >= self._max_backups:
                break
            if rec.handler_name != primary.handler_name and rec.handler_name not in backups:
                backups.append(rec.handler_name)

        return OrchestrationResult(
            primary_handler=primary.handler_name,
            backup_handlers=tuple(backups),
            reasoning=primary.reasoning,
            confidence=primary.confidence,
            classification=classification,
            recommendations=tuple(recommendations),
            decided_at=self._clock(),
        )

    def recommend_sequence(self, classification: ProblemClassification) -> list[str]:
        """Handlers to run in order: three for complex work, one otherwise."""
        try:
            recommendations = self.rank(classification)
        except Exception as e:
            _logger.warning("sequence_ranking_failed", error=str(e))
            recommendations = []

        if not recommendations:
            return [ANCHOR_HANDLERS[0]]
        if classification.complexity in (Complexity.COMPLEX, Complexity.EXPERT):
            return [r.handler_name for r in recommendations[:3]]
        return [recommendations[0].handler_name]

    def safe_result(self, classification: ProblemClassification) -> OrchestrationResult:
        """Anchor-only result used when ranking fails."""
        return OrchestrationResult(
            primary_handler=ANCHOR_HANDLERS[0],
            backup_handlers=ANCHOR_HANDLERS[1:],
            reasoning="Ranking unavailable, using anchor handlers",
            confidence=SAFE_RESULT_CONFIDENCE,
            classification=classification,
            degraded=True,
            decided_at=self._clock(),
        )
