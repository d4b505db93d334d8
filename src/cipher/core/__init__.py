"""Core primitives shared across the brain: config, errors, logging, caches."""

from cipher.core.cache import BoundedFifo
from cipher.core.config import (
    BrainConfig,
    LearningConfig,
    LogConfig,
    OrchestrationConfig,
    ScoringConfig,
    StorageConfig,
)
from cipher.core.errors import (
    CipherError,
    ClassificationError,
    HandlerNotFoundError,
    PatternExtractionError,
    PersistenceError,
    RankingError,
    SchemaVersionError,
)
from cipher.core.logging import configure_logging, get_logger

__all__ = [
    "BoundedFifo",
    "BrainConfig",
    "CipherError",
    "ClassificationError",
    "HandlerNotFoundError",
    "LearningConfig",
    "LogConfig",
    "OrchestrationConfig",
    "PatternExtractionError",
    "PersistenceError",
    "RankingError",
    "ScoringConfig",
    "SchemaVersionError",
    "StorageConfig",
    "configure_logging",
    "get_logger",
]
