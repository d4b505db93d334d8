"""Tests for the outcome feedback loop."""

import pytest

from cipher.core.config import LearningConfig
from cipher.learning.feedback import GENERIC_SUGGESTIONS, FeedbackLoop
from cipher.learning.models import LearningMode, OutcomeContext, OutcomeResult, PatternType
from cipher.learning.store import PatternStore
from cipher.registry.registry import CapabilityRegistry
from tests.helpers import START, ManualClock

FIX_CONTEXT = {"before_state": "x;;", "after_state": "x;"}


class TestRecordOutcome:
    """Counters, handler statistics and pattern learning per outcome."""

    def test_adaptive_success(
        self,
        feedback: FeedbackLoop,
        registry: CapabilityRegistry,
        pattern_store: PatternStore,
    ) -> None:
        patterns = feedback.record_outcome("quick_file_fix", "auto-fix", True, FIX_CONTEXT)

        assert len(patterns) == 1
        assert patterns[0].pattern_type is PatternType.ERROR_FIX
        assert pattern_store.pattern_count() == 1
        assert pattern_store.session_count() == 1

        state = feedback.state
        assert (state.total_outcomes, state.successful_outcomes, state.failed_outcomes) == (
            1,
            1,
            0,
        )
        assert state.patterns_learned == 1
        assert state.last_learning_action == "auto-fix"
        assert state.last_learning_at == START

        handler = registry.get("quick_file_fix")
        assert handler is not None
        assert handler.success_rate == pytest.approx(0.80)
        assert handler.confidence == pytest.approx(0.78)

    def test_failure(self, feedback: FeedbackLoop, registry: CapabilityRegistry) -> None:
        patterns = feedback.record_outcome("quick_file_fix", "auto-fix", "failure", FIX_CONTEXT)

        assert patterns == []
        assert feedback.state.failed_outcomes == 1
        handler = registry.get("quick_file_fix")
        assert handler is not None
        assert handler.success_rate == pytest.approx(0.72)
        assert feedback.action_stats["auto-fix"].confidence == pytest.approx(0.45)

    def test_accepts_outcome_context(self, feedback: FeedbackLoop) -> None:
        ctx = OutcomeContext(component_type="Card")
        patterns = feedback.record_outcome(
            "smart_file_rebuilder", "create-component", OutcomeResult.SUCCESS, ctx
        )
        assert patterns[0].applicable_scenarios[:2] == ("component-creation", "Card")

    def test_success_without_context_learns_nothing(
        self, feedback: FeedbackLoop, registry: CapabilityRegistry
    ) -> None:
        patterns = feedback.record_outcome("quick_file_fix", "auto-fix", True)

        assert patterns == []
        assert feedback.state.successful_outcomes == 1
        handler = registry.get("quick_file_fix")
        assert handler is not None
        assert handler.success_rate == pytest.approx(0.80)

    def test_incomplete_context_learns_nothing(self, feedback: FeedbackLoop) -> None:
        patterns = feedback.record_outcome(
            "quick_file_fix", "auto-fix", True, {"before_state": "x;;"}
        )
        assert patterns == []
        assert feedback.state.successful_outcomes == 1

    @pytest.mark.parametrize(
        "context",
        [
            {"file_name": "a.ts", "confidence": "high"},
            {"file_name": "a.ts", "execution_time_ms": "slow"},
            {"file_name": "a.ts", "scenarios": 3},
            ["file_name", "a.ts"],
        ],
        ids=["confidence", "execution-time", "scenarios", "not-a-mapping"],
    )
    def test_malformed_context_counts_outcome_without_patterns(
        self, feedback: FeedbackLoop, registry: CapabilityRegistry, context
    ) -> None:
        patterns = feedback.record_outcome("quick_file_fix", "auto-fix", True, context)

        assert patterns == []
        assert feedback.state.total_outcomes == 1
        assert feedback.state.successful_outcomes == 1
        assert feedback.action_stats["auto-fix"].successes == 1
        handler = registry.get("quick_file_fix")
        assert handler is not None
        assert handler.success_rate == pytest.approx(0.80)

    def test_orchestration_reinforces_routing(
        self, feedback: FeedbackLoop, pattern_store: PatternStore
    ) -> None:
        patterns = feedback.record_outcome(
            "smart_file_rebuilder",
            "orchestration",
            True,
            {"problem_type": "structural-issue", "primary_handler": "smart_file_rebuilder"},
        )

        assert [p.learned_from for p in patterns] == [
            "smart_file_rebuilder:orchestration",
            "routing:structural-issue",
        ]
        assert pattern_store.session_count() == 1
        assert feedback.state.patterns_learned == 2

    def test_unknown_handler_still_counted(self, feedback: FeedbackLoop) -> None:
        feedback.record_outcome("no_such_handler", "auto-fix", True, FIX_CONTEXT)
        assert feedback.state.total_outcomes == 1

    def test_invalid_result_rejected(self, feedback: FeedbackLoop) -> None:
        with pytest.raises(ValueError):
            feedback.record_outcome("quick_file_fix", "auto-fix", "maybe")


class TestLearningModes:
    """Adaptive, training and static modes."""

    def test_training_freezes_handler_statistics(
        self, feedback: FeedbackLoop, registry: CapabilityRegistry
    ) -> None:
        feedback.set_learning_mode(LearningMode.TRAINING)
        patterns = feedback.record_outcome("quick_file_fix", "auto-fix", True, FIX_CONTEXT)

        assert len(patterns) == 1
        handler = registry.get("quick_file_fix")
        assert handler is not None
        assert handler.success_rate == 0.75

    def test_static_records_counters_only(
        self,
        feedback: FeedbackLoop,
        registry: CapabilityRegistry,
        pattern_store: PatternStore,
    ) -> None:
        feedback.set_learning_mode("static")
        patterns = feedback.record_outcome("quick_file_fix", "auto-fix", True, FIX_CONTEXT)

        assert patterns == []
        assert pattern_store.pattern_count() == 0
        assert feedback.state.total_outcomes == 1
        assert feedback.action_stats["auto-fix"].successes == 1
        handler = registry.get("quick_file_fix")
        assert handler is not None
        assert handler.success_rate == 0.75

    def test_mode_from_config(
        self, pattern_store: PatternStore, registry: CapabilityRegistry
    ) -> None:
        loop = FeedbackLoop(pattern_store, registry, LearningConfig(mode="training"))
        assert loop.state.learning_mode is LearningMode.TRAINING


class TestLearningToggle:
    """Disabled learning ignores outcomes but stamps the attempt."""

    def test_disabled_ignores_outcome(
        self, feedback: FeedbackLoop, registry: CapabilityRegistry, clock: ManualClock
    ) -> None:
        assert feedback.toggle_learning() is False
        clock.advance(minutes=5)

        patterns = feedback.record_outcome("quick_file_fix", "auto-fix", True, FIX_CONTEXT)

        assert patterns == []
        assert feedback.state.total_outcomes == 0
        assert feedback.state.last_attempted_at == clock.now
        assert feedback.state.last_learning_at is None
        handler = registry.get("quick_file_fix")
        assert handler is not None
        assert handler.success_rate == 0.75

    def test_disabled_ignores_events(self, feedback: FeedbackLoop) -> None:
        feedback.toggle_learning()
        feedback.record_event("classification", True)
        assert feedback.action_stats == {}

    def test_toggle_back(self, feedback: FeedbackLoop) -> None:
        feedback.toggle_learning()
        assert feedback.toggle_learning() is True
        assert feedback.enabled


class TestActionStats:
    """Per-action counters and confidence."""

    def test_confidence_steps(self, feedback: FeedbackLoop) -> None:
        for _ in range(3):
            feedback.record_event("classification", True)
        feedback.record_event("classification", False)

        stats = feedback.action_stats["classification"]
        assert (stats.successes, stats.failures) == (3, 1)
        assert stats.confidence == pytest.approx(0.75)
        assert stats.success_ratio == 0.75
        assert stats.last_used == START

    def test_confidence_bounds(self, feedback: FeedbackLoop) -> None:
        for _ in range(20):
            feedback.record_event("good", True)
            feedback.record_event("bad", False)
        assert feedback.action_stats["good"].confidence == 1.0
        assert feedback.action_stats["bad"].confidence == pytest.approx(0.1)

    def test_pattern_success(self, feedback: FeedbackLoop) -> None:
        assert feedback.pattern_success("predict") == 0.5

        feedback.record_event("predict-bundle", True)
        feedback.record_event("predict-maintenance", False)
        assert feedback.pattern_success("predict") == 0.5
        assert feedback.pattern_success("bundle") == 1.0

    def test_top_actions(self, feedback: FeedbackLoop) -> None:
        feedback.record_event("a", True)
        feedback.record_event("b", True)
        feedback.record_event("b", True)
        feedback.record_event("c", False)
        assert [name for name, _ in feedback.top_actions(limit=2)] == ["b", "a"]


class TestSuggestions:
    """Suggestions come from patterns, else fixed fallbacks."""

    def test_from_patterns(self, feedback: FeedbackLoop) -> None:
        feedback.record_outcome("quick_file_fix", "auto-fix", True, FIX_CONTEXT)
        feedback.record_outcome(
            "auto_fix_current_file", "auto-fix", True, {**FIX_CONTEXT, "confidence": 0.9}
        )

        suggestions = feedback.suggest("x;;", "auto-fix")

        assert suggestions == [
            "Applied fix with auto_fix_current_file (90% confidence)",
            "Applied fix with quick_file_fix (70% confidence)",
        ]

    def test_at_most_three(self, feedback: FeedbackLoop) -> None:
        for _ in range(6):
            feedback.record_outcome("quick_file_fix", "auto-fix", True, FIX_CONTEXT)
        assert len(feedback.suggest("", "simple-fix")) == 3

    def test_known_fallback(self, feedback: FeedbackLoop) -> None:
        suggestions = feedback.suggest("", "guitar-analysis")
        assert suggestions[0] == "Consider chord progression analysis"

    def test_generic_fallback(self, feedback: FeedbackLoop) -> None:
        assert feedback.suggest("", "nothing-learned") == list(GENERIC_SUGGESTIONS)


class TestResetAndSnapshot:
    """Reset forgets everything; snapshot round-trips state."""

    def test_reset(self, feedback: FeedbackLoop, pattern_store: PatternStore) -> None:
        feedback.record_outcome("quick_file_fix", "auto-fix", True, FIX_CONTEXT)
        feedback.toggle_learning()

        feedback.reset()

        assert feedback.state.total_outcomes == 0
        assert feedback.enabled
        assert feedback.action_stats == {}
        assert pattern_store.pattern_count() == 0

    def test_snapshot_restore(
        self,
        feedback: FeedbackLoop,
        pattern_store: PatternStore,
        registry: CapabilityRegistry,
    ) -> None:
        feedback.record_outcome("quick_file_fix", "auto-fix", True, FIX_CONTEXT)
        feedback.set_learning_mode(LearningMode.TRAINING)

        restored = FeedbackLoop(pattern_store, registry)
        restored.restore(feedback.snapshot())

        assert restored.state == feedback.state
        assert restored.action_stats == feedback.action_stats

    def test_restore_is_all_or_nothing(self, feedback: FeedbackLoop) -> None:
        feedback.record_outcome("quick_file_fix", "auto-fix", True, FIX_CONTEXT)
        state = feedback.state
        stats = feedback.action_stats

        with pytest.raises(AttributeError):
            feedback.restore({"state": {"total_outcomes": 9}, "action_stats": {"x": "bad"}})

        assert feedback.state is state
        assert feedback.action_stats == stats
