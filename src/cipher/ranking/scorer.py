"""Handler scoring against a classification.

The score formula is:
    score = base
          + success_rate × success_rate_weight
          + capability_match × capability_weight
          + complexity_alignment × complexity_weight
          + recent_usage_bonus (if used within recent_usage_days)
          + confidence × confidence_weight

clamped to [min_score, max_score]. Weights come from ScoringConfig.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from cipher.classification.models import Complexity, ProblemClassification
from cipher.core.config import ScoringConfig
from cipher.ranking.relevance import relevance_for
from cipher.registry.models import HandlerCapability


class HandlerScorer:
    """Scores and explains how well a handler fits a classification."""

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or ScoringConfig()

    def score(
        self,
        handler: HandlerCapability,
        classification: ProblemClassification,
        now: datetime,
    ) -> float:
        cfg = self.config
        score = cfg.base
        score += handler.success_rate * cfg.success_rate_weight
        score += self.capability_match(handler, classification) * cfg.capability_weight
        score += self.complexity_alignment(handler, classification) * cfg.complexity_weight
        if self.recently_used(handler, now):
            score += cfg.recent_usage_bonus
        score += (handler.confidence or 0.0) * cfg.confidence_weight
        return min(cfg.max_score, max(cfg.min_score, score))

    def capability_match(
        self, handler: HandlerCapability, classification: ProblemClassification
    ) -> float:
        """Fraction of the problem type's relevant tags the handler declares."""
        relevant = relevance_for(classification.problem_type).relevant_tags
        matches = sum(1 for tag in relevant if tag in handler.capabilities)
        return matches / max(1, len(relevant))

    @staticmethod
    def handler_complexity(handler: HandlerCapability) -> Complexity:
        """Complexity class a handler is built for, inferred from its tags."""
        if handler.has_any("simple-fixes", "quick-repairs"):
            return Complexity.SIMPLE
        if handler.has_any("structural-refactoring", "complex-fixes"):
            return Complexity.COMPLEX
        return Complexity.MODERATE

    def complexity_alignment(
        self, handler: HandlerCapability, classification: ProblemClassification
    ) -> float:
        cfg = self.config
        handler_level = self.handler_complexity(handler)
        problem_level = classification.complexity
        if handler_level is problem_level:
            return cfg.exact_alignment
        if problem_level is Complexity.EXPERT and handler_level is Complexity.COMPLEX:
            return cfg.expert_on_complex_alignment
        if problem_level is Complexity.SIMPLE and handler_level is Complexity.COMPLEX:
            return cfg.simple_on_complex_alignment
        return cfg.default_alignment

    def recently_used(self, handler: HandlerCapability, now: datetime) -> bool:
        if handler.last_used is None:
            return False
        return now - handler.last_used < timedelta(days=self.config.recent_usage_days)

    def reasoning(
        self, handler: HandlerCapability, classification: ProblemClassification
    ) -> str:
        """Explain a handler choice as a comma-separated list of clauses."""
        reasons: list[str] = []

        if handler.success_rate > self.config.high_success_threshold:
            reasons.append(f"High success rate ({round(handler.success_rate * 100)}%)")

        for strength in handler.strengths:
            if _strength_relevant(strength, classification):
                reasons.append(f"Strong in {strength}")

        complexity = classification.complexity
        if complexity in (Complexity.COMPLEX, Complexity.EXPERT) and handler.has_any(
            "structural-refactoring"
        ):
            reasons.append("Handles complex structural changes")
        elif self.handler_complexity(handler) is complexity:
            reasons.append(f"Matches {complexity.value} complexity")

        return ", ".join(reasons) if reasons else "General capability match"


def _strength_relevant(strength: str, classification: ProblemClassification) -> bool:
    keywords = strength.lower()
    indicators = " ".join(classification.indicators).lower()
    first_word = keywords.split(" ")[0]
    return keywords in indicators or (
        bool(first_word) and first_word in classification.problem_type.value
    )
