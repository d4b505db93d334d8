"""Handler scoring and ranking."""

from cipher.ranking.engine import RankingEngine, anchor_fallbacks
from cipher.ranking.models import HandlerRecommendation, OrchestrationResult
from cipher.ranking.relevance import RELEVANCE_TABLE, RelevanceRule, relevance_for
from cipher.ranking.scorer import HandlerScorer

__all__ = [
    "HandlerRecommendation",
    "HandlerScorer",
    "OrchestrationResult",
    "RELEVANCE_TABLE",
    "RankingEngine",
    "RelevanceRule",
    "anchor_fallbacks",
    "relevance_for",
]
