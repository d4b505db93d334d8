"""Outcome feedback, pattern storage and workspace harvesting."""

from cipher.learning.extractors import (
    ActionKind,
    extract_pattern,
    reinforce_routing,
    resolve_action_kind,
)
from cipher.learning.feedback import FeedbackLoop
from cipher.learning.harvest import CodebaseProfile, PatternHarvester, PredictedIssue
from cipher.learning.insights import generate_report, get_insights
from cipher.learning.models import (
    ActionStats,
    CacheEntry,
    CipherLearningState,
    LearningMode,
    LearningPattern,
    LearningSession,
    OutcomeContext,
    OutcomeResult,
    PatternType,
)
from cipher.learning.store import PatternStore

__all__ = [
    "ActionKind",
    "ActionStats",
    "CacheEntry",
    "CipherLearningState",
    "CodebaseProfile",
    "FeedbackLoop",
    "LearningMode",
    "LearningPattern",
    "LearningSession",
    "OutcomeContext",
    "OutcomeResult",
    "PatternHarvester",
    "PatternStore",
    "PatternType",
    "PredictedIssue",
    "extract_pattern",
    "generate_report",
    "get_insights",
    "reinforce_routing",
    "resolve_action_kind",
]
