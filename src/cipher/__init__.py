"""Cipher Brain - problem classification, handler routing and outcome learning."""

__version__ = "0.1.0"

from cipher.brain import CipherBrain, create_store
from cipher.classification import ProblemClassification, ProblemClassifier, ProblemType
from cipher.core.config import BrainConfig
from cipher.learning import FeedbackLoop, OutcomeContext, OutcomeResult, PatternStore
from cipher.orchestration import OrchestrationStats, Orchestrator
from cipher.ranking import OrchestrationResult, RankingEngine
from cipher.registry import CapabilityRegistry, HandlerCapability, create_default_registry

__all__ = [
    "__version__",
    "BrainConfig",
    "CapabilityRegistry",
    "CipherBrain",
    "FeedbackLoop",
    "HandlerCapability",
    "OrchestrationResult",
    "OrchestrationStats",
    "Orchestrator",
    "OutcomeContext",
    "OutcomeResult",
    "PatternStore",
    "ProblemClassification",
    "ProblemClassifier",
    "ProblemType",
    "RankingEngine",
    "create_default_registry",
    "create_store",
]
