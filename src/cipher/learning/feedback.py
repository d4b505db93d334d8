"""FeedbackLoop: turns handler outcomes into patterns and statistics.

Outcome flow:
1. Stamp ``last_attempted_at`` (always, even with learning off)
2. Update counters and per-action statistics
3. Adjust the handler's registry statistics (adaptive mode only)
4. On success with descriptive context, extract a pattern for the action kind
5. On an orchestration success, also reinforce the routing pair
6. Store extracted patterns as one new learning session
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from cipher.core.config import LearningConfig
from cipher.core.constants import SUGGESTION_CANDIDATES, SUGGESTIONS_RETURNED
from cipher.core.errors import PatternExtractionError
from cipher.core.logging import get_logger
from cipher.learning.extractors import extract_pattern, reinforce_routing
from cipher.learning.models import (
    ActionStats,
    CipherLearningState,
    LearningMode,
    LearningPattern,
    OutcomeContext,
    OutcomeResult,
)
from cipher.learning.store import PatternStore
from cipher.registry.registry import CapabilityRegistry

_logger = get_logger("feedback")

ORCHESTRATION_ACTION = "orchestration"

FALLBACK_SUGGESTIONS: dict[str, tuple[str, ...]] = {
    "guitar-analysis": (
        "Consider chord progression analysis",
        "Add tablature support",
        "Implement interactive playback",
    ),
    "component-creation": (
        "Add proper TypeScript interfaces",
        "Include error boundaries",
        "Implement responsive design",
    ),
    "route-analysis": (
        "Check for route dependencies",
        "Verify navigation structure",
        "Add route protection",
    ),
}

GENERIC_SUGGESTIONS: tuple[str, ...] = (
    "Consider following established patterns",
    "Review similar successful implementations",
    "Run a file analysis before larger changes",
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def render_suggestion(pattern: LearningPattern) -> str:
    return f"{pattern.reasoning} ({round(pattern.confidence * 100)}% confidence)"


def _as_result(result: OutcomeResult | str | bool) -> OutcomeResult:
    if isinstance(result, bool):
        return OutcomeResult.SUCCESS if result else OutcomeResult.FAILURE
    return OutcomeResult(result)


def _as_outcome_context(context: OutcomeContext | dict[str, Any] | None) -> OutcomeContext:
    """Coerce a loose context; a malformed one becomes an empty context."""
    if isinstance(context, OutcomeContext):
        return context
    try:
        return OutcomeContext.from_mapping(context)
    except (TypeError, ValueError, AttributeError) as e:
        _logger.warning("outcome_context_malformed", error=str(e), error_type=type(e).__name__)
        return OutcomeContext()


class FeedbackLoop:
    """Records outcomes, learns patterns and produces suggestions.

    Owns the learning state and per-action statistics. Patterns go to the
    PatternStore and handler statistics to the CapabilityRegistry, each
    through their own API.
    """

    def __init__(
        self,
        store: PatternStore,
        registry: CapabilityRegistry,
        config: LearningConfig | None = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.config = config or LearningConfig()
        self._store = store
        self._registry = registry
        self._clock = clock
        self.state = CipherLearningState(
            is_learning_enabled=self.config.enabled,
            learning_mode=LearningMode(self.config.mode),
        )
        self._action_stats: dict[str, ActionStats] = {}

    @property
    def enabled(self) -> bool:
        return self.state.is_learning_enabled

    @property
    def action_stats(self) -> dict[str, ActionStats]:
        return dict(self._action_stats)

    def record_outcome(
        self,
        handler_name: str,
        action_type: str,
        result: OutcomeResult | str | bool,
        context: OutcomeContext | dict[str, Any] | None = None,
    ) -> list[LearningPattern]:
        """Feed one handler outcome back into the brain.

        Returns:
            Patterns learned from this outcome (possibly empty).
        """
        now = self._clock()
        self.state.last_attempted_at = now
        if not self.state.is_learning_enabled:
            _logger.debug("outcome_ignored_learning_disabled", handler=handler_name)
            return []

        outcome = _as_result(result)
        ctx = _as_outcome_context(context)
        success = outcome is OutcomeResult.SUCCESS
        mode = self.state.learning_mode

        self.state.total_outcomes += 1
        if success:
            self.state.successful_outcomes += 1
        else:
            self.state.failed_outcomes += 1
        self.state.last_learning_action = action_type
        self.state.last_learning_at = now
        self._record_action(action_type, success, now)

        if mode is LearningMode.ADAPTIVE:
            self._registry.record_outcome(handler_name, success, now=now)

        _logger.info(
            "outcome_recorded",
            handler=handler_name,
            action=action_type,
            result=outcome.value,
            mode=mode.value,
        )

        if not success or mode is LearningMode.STATIC or not ctx.is_descriptive():
            return []

        patterns = self._extract(handler_name, action_type, ctx, now)
        if patterns:
            session = self._store.record_session(handler_name, patterns)
            self.state.patterns_learned += len(patterns)
            _logger.debug(
                "patterns_learned",
                handler=handler_name,
                count=len(patterns),
                session_id=session.session_id,
            )
        return patterns

    def _extract(
        self, handler_name: str, action_type: str, ctx: OutcomeContext, now: datetime
    ) -> list[LearningPattern]:
        patterns: list[LearningPattern] = []
        try:
            patterns.append(extract_pattern(handler_name, action_type, ctx, now))
        except (PatternExtractionError, TypeError, ValueError, AttributeError) as e:
            _logger.debug("pattern_extraction_skipped", action=action_type, reason=str(e))

        if action_type == ORCHESTRATION_ACTION:
            try:
                patterns.append(reinforce_routing(ctx, now))
            except (PatternExtractionError, TypeError, ValueError, AttributeError) as e:
                _logger.debug("routing_reinforcement_skipped", reason=str(e))
        return patterns

    def record_event(self, action: str, success: bool) -> None:
        """Count an internal event (e.g. a classification) against ``action``."""
        if not self.state.is_learning_enabled:
            return
        self._record_action(action, success, self._clock())

    def _record_action(self, action: str, success: bool, now: datetime) -> None:
        cfg = self.config
        stats = self._action_stats.get(action)
        if stats is None:
            stats = ActionStats(confidence=cfg.action_initial_confidence)
            self._action_stats[action] = stats
        if success:
            stats.successes += 1
            stats.confidence = min(1.0, stats.confidence + cfg.action_success_step)
        else:
            stats.failures += 1
            stats.confidence = max(
                cfg.action_confidence_floor, stats.confidence - cfg.action_failure_step
            )
        stats.last_used = now

    def suggest(self, code: str, scenario_tag: str) -> list[str]:
        """Suggestions for a scenario drawn from learned patterns.

        Selection is by scenario tag; ``code`` is the caller's current source.
        Falls back to fixed suggestions when nothing was learned for the tag.
        """
        candidates = self._store.query(scenario_tag, limit=SUGGESTION_CANDIDATES)
        if candidates:
            return [render_suggestion(p) for p in candidates[:SUGGESTIONS_RETURNED]]
        _logger.debug("suggestions_fallback", scenario=scenario_tag, code_length=len(code))
        return list(FALLBACK_SUGGESTIONS.get(scenario_tag, GENERIC_SUGGESTIONS))

    def toggle_learning(self) -> bool:
        self.state.is_learning_enabled = not self.state.is_learning_enabled
        _logger.info("learning_toggled", enabled=self.state.is_learning_enabled)
        return self.state.is_learning_enabled

    def set_learning_mode(self, mode: LearningMode | str) -> LearningMode:
        self.state.learning_mode = LearningMode(mode)
        return self.state.learning_mode

    def pattern_success(self, fragment: str) -> float:
        """Mean success ratio of actions whose name contains ``fragment``."""
        ratios = [
            stats.success_ratio
            for action, stats in self._action_stats.items()
            if fragment in action and stats.total
        ]
        return sum(ratios) / len(ratios) if ratios else 0.5

    def top_actions(self, limit: int = 5) -> list[tuple[str, ActionStats]]:
        """Actions with the highest confidence, best first."""
        ranked = sorted(self._action_stats.items(), key=lambda kv: kv[1].confidence, reverse=True)
        return ranked[:limit]

    def reset(self) -> None:
        """Forget all learning: counters, action statistics and stored patterns."""
        self.state = CipherLearningState(
            is_learning_enabled=self.config.enabled,
            learning_mode=LearningMode(self.config.mode),
        )
        self._action_stats.clear()
        self._store.clear()
        _logger.info("learning_reset")

    def snapshot(self) -> dict[str, Any]:
        return {
            "state": self.state.to_dict(),
            "action_stats": {k: v.to_dict() for k, v in self._action_stats.items()},
        }

    def restore(self, data: dict[str, Any]) -> None:
        """Replace state and action statistics with a snapshot.

        Nothing is assigned unless the whole snapshot parses.
        """
        state = CipherLearningState.from_dict(data["state"]) if "state" in data else self.state
        action_stats = {
            action: ActionStats.from_dict(raw)
            for action, raw in (data.get("action_stats") or {}).items()
        }
        self.state = state
        self._action_stats = action_stats
