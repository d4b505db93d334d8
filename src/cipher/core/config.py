"""Brain configuration models.

Defines pydantic models for handler scoring weights, learning behavior,
orchestration, state storage, and structured logging. Every default
reproduces the built-in behavior, so an empty YAML document yields the
stock brain.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, model_validator

from cipher.core.constants import (
    ANALYSIS_CACHE_CAPACITY,
    DECISION_CACHE_CAPACITY,
    MAX_BACKUP_HANDLERS,
    PATTERN_STORE_CAPACITY,
    SESSION_HISTORY_CAPACITY,
)


class ScoringConfig(BaseModel):
    """Weights used to score a candidate handler against a classification.

    score = base
          + success_rate * success_rate_weight
          + capability_match * capability_weight
          + complexity_alignment * complexity_weight
          + recent_usage_bonus (if used within recent_usage_days)
          + confidence * confidence_weight

    The result is clamped to [min_score, max_score].
    """

    base: float = Field(default=0.5, ge=0.0, le=1.0)
    success_rate_weight: float = Field(default=0.3, ge=0.0, le=1.0)
    capability_weight: float = Field(default=0.3, ge=0.0, le=1.0)
    complexity_weight: float = Field(default=0.2, ge=0.0, le=1.0)
    confidence_weight: float = Field(default=0.1, ge=0.0, le=1.0)
    recent_usage_bonus: float = Field(default=0.1, ge=0.0, le=1.0)
    recent_usage_days: float = Field(
        default=7.0,
        gt=0.0,
        description="Window in days within which last use earns the recency bonus",
    )
    min_score: float = Field(default=0.1, ge=0.0, le=1.0)
    max_score: float = Field(default=1.0, ge=0.0, le=1.0)

    exact_alignment: float = Field(default=1.0, ge=0.0, le=1.0)
    expert_on_complex_alignment: float = Field(default=0.9, ge=0.0, le=1.0)
    simple_on_complex_alignment: float = Field(default=0.3, ge=0.0, le=1.0)
    default_alignment: float = Field(default=0.6, ge=0.0, le=1.0)

    high_success_threshold: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Success rate above which reasoning mentions it",
    )

    @model_validator(mode="after")
    def _check_score_bounds(self) -> ScoringConfig:
        if self.min_score > self.max_score:
            raise ValueError(
                f"min_score ({self.min_score}) must not exceed max_score ({self.max_score})"
            )
        return self


class LearningConfig(BaseModel):
    """Configuration for the outcome feedback loop and pattern store."""

    enabled: bool = Field(default=True, description="Record outcomes and learn patterns")
    mode: Literal["adaptive", "static", "training"] = Field(
        default="adaptive",
        description="adaptive updates handler statistics and derives patterns; "
        "training derives patterns only; static records counters only",
    )
    pattern_capacity: int = Field(default=PATTERN_STORE_CAPACITY, gt=0)
    session_capacity: int = Field(default=SESSION_HISTORY_CAPACITY, gt=0)
    analysis_cache_capacity: int = Field(default=ANALYSIS_CACHE_CAPACITY, gt=0)

    usage_confidence_step: float = Field(
        default=0.01,
        ge=0.0,
        le=1.0,
        description="Confidence gained by a handler each time it is selected",
    )
    success_rate_gain: float = Field(default=0.05, ge=0.0, le=1.0)
    success_rate_loss: float = Field(default=0.03, ge=0.0, le=1.0)
    confidence_gain: float = Field(default=0.03, ge=0.0, le=1.0)
    confidence_loss: float = Field(default=0.02, ge=0.0, le=1.0)
    statistics_floor: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Lower bound for handler success rate and confidence after failures",
    )

    action_initial_confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    action_success_step: float = Field(default=0.1, ge=0.0, le=1.0)
    action_failure_step: float = Field(default=0.05, ge=0.0, le=1.0)
    action_confidence_floor: float = Field(default=0.1, ge=0.0, le=1.0)


class OrchestrationConfig(BaseModel):
    """Configuration for the request/response routing cycle."""

    enabled: bool = Field(default=True, description="Classify and rank handlers per request")
    decision_capacity: int = Field(default=DECISION_CACHE_CAPACITY, gt=0)
    max_backups: int = Field(default=MAX_BACKUP_HANDLERS, ge=0, le=10)


class StorageConfig(BaseModel):
    """Where brain state is persisted between runs."""

    backend: Literal["json", "memory"] = Field(default="json")
    path: Path = Field(
        default_factory=lambda: Path.home() / ".cipher" / "brain.json",
        description="State file for the json backend",
    )


class LogConfig(BaseModel):
    """Configuration for structured logging.

    Controls log level, output format, and file rotation settings.
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Minimum log level to capture",
    )
    format: Literal["json", "console", "both"] = Field(
        default="console",
        description="Output format: json for structured, console for human-readable, "
        "both for console to stderr and JSON to file",
    )
    file_path: Path | None = Field(
        default=None,
        description="Path for log file output (required if format='both')",
    )
    max_file_size_mb: int = Field(default=10, gt=0, le=1000)
    backup_count: int = Field(default=3, ge=0, le=100)
    include_timestamps: bool = True
    include_context: bool = Field(
        default=True,
        description="Include session_id and request_id in log entries",
    )

    @model_validator(mode="after")
    def _check_file_path_required(self) -> LogConfig:
        if self.format == "both" and self.file_path is None:
            raise ValueError(f"file_path is required when format='{self.format}'")
        return self


class BrainConfig(BaseModel):
    """Root configuration for a CipherBrain instance."""

    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    learning: LearningConfig = Field(default_factory=LearningConfig)
    orchestration: OrchestrationConfig = Field(default_factory=OrchestrationConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LogConfig = Field(default_factory=LogConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> BrainConfig:
        """Load brain configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data or {})

    @classmethod
    def from_yaml_string(cls, yaml_str: str) -> BrainConfig:
        """Load brain configuration from a YAML string."""
        data = yaml.safe_load(yaml_str)
        return cls.model_validate(data or {})
