"""Tests for the orchestrator's routing cycle and decision cache."""

from unittest.mock import MagicMock

import pytest

from cipher.classification.classifier import ProblemClassifier
from cipher.classification.models import ProblemType
from cipher.core.config import OrchestrationConfig
from cipher.learning.store import PatternStore
from cipher.orchestration.orchestrator import Orchestrator
from cipher.ranking.engine import RankingEngine
from cipher.registry.registry import CapabilityRegistry
from cipher.registry.seeds import DEFAULT_HANDLER_SEEDS
from tests.helpers import (
    EMPTY_IMPORT_CODE,
    PLAIN_CODE,
    ROUTE_CODE,
    SIMPLE_FIX_CODE,
    START,
    STRUCTURAL_CODE,
    ManualClock,
)


@pytest.fixture
def orchestrator(
    classifier: ProblemClassifier,
    engine: RankingEngine,
    registry: CapabilityRegistry,
    pattern_store: PatternStore,
    clock: ManualClock,
) -> Orchestrator:
    return Orchestrator(classifier, engine, registry, pattern_store, clock=clock)


class TestOrchestrate:
    """One classify-then-rank cycle per request."""

    def test_structural_decision(self, orchestrator: Orchestrator) -> None:
        result = orchestrator.orchestrate(STRUCTURAL_CODE, "src/Widget.tsx")

        assert result.primary_handler == "smart_file_rebuilder"
        assert result.classification.problem_type is ProblemType.STRUCTURAL_ISSUE
        assert orchestrator.total_decisions == 1

    def test_action_reaches_classifier(self, orchestrator: Orchestrator) -> None:
        result = orchestrator.orchestrate(PLAIN_CODE, "src/a.ts", action="create-component")

        assert result.classification.problem_type is ProblemType.COMPONENT_CREATION
        assert result.classification.context["action"] == "create-component"

    def test_action_overrides_context(self, orchestrator: Orchestrator) -> None:
        result = orchestrator.orchestrate(
            PLAIN_CODE,
            "src/a.ts",
            action="create-component",
            context={"action": "analyze", "user_role": "dev"},
        )
        assert result.classification.context["action"] == "create-component"
        assert result.classification.context["user_role"] == "dev"

    def test_primary_usage_recorded(
        self, orchestrator: Orchestrator, registry: CapabilityRegistry
    ) -> None:
        result = orchestrator.orchestrate(EMPTY_IMPORT_CODE, "src/a.ts")
        handler = registry.get(result.primary_handler)

        assert handler is not None
        assert handler.usage_count == 1
        assert handler.last_used == START
        assert handler.confidence == pytest.approx(0.81)

    def test_analysis_cached(
        self, orchestrator: Orchestrator, pattern_store: PatternStore
    ) -> None:
        orchestrator.orchestrate(ROUTE_CODE, "src/Page.tsx")

        entries = pattern_store.analyses
        assert len(entries) == 1
        assert entries[0].entry_type == "classification"
        assert entries[0].source == "orchestrator"
        assert entries[0].data["classification"]["problem_type"] == "route-issue"


class TestDecisionCache:
    """Decisions are keyed by problem type and time, FIFO bounded."""

    def test_keys_are_unique_for_same_instant(self, orchestrator: Orchestrator) -> None:
        orchestrator.orchestrate(SIMPLE_FIX_CODE, "src/a.ts")
        orchestrator.orchestrate(SIMPLE_FIX_CODE, "src/b.ts")

        stamp = int(START.timestamp() * 1000)
        assert orchestrator.decision_keys() == [
            f"simple-fix-{stamp}",
            f"simple-fix-{stamp}-1",
        ]

    def test_collision_suffix_is_running_total(self, orchestrator: Orchestrator) -> None:
        """The suffix counts all decisions, not only those of the colliding type."""
        orchestrator.orchestrate(STRUCTURAL_CODE, "src/Widget.tsx")
        orchestrator.orchestrate(SIMPLE_FIX_CODE, "src/a.ts")
        orchestrator.orchestrate(SIMPLE_FIX_CODE, "src/b.ts")

        stamp = int(START.timestamp() * 1000)
        assert orchestrator.decision_keys() == [
            f"structural-issue-{stamp}",
            f"simple-fix-{stamp}",
            f"simple-fix-{stamp}-2",
        ]

    def test_eviction_at_capacity(
        self,
        classifier: ProblemClassifier,
        engine: RankingEngine,
        registry: CapabilityRegistry,
        pattern_store: PatternStore,
        clock: ManualClock,
    ) -> None:
        orchestrator = Orchestrator(
            classifier,
            engine,
            registry,
            pattern_store,
            OrchestrationConfig(decision_capacity=2),
            clock=clock,
        )
        for name in ("a", "b", "c"):
            orchestrator.orchestrate(SIMPLE_FIX_CODE, f"src/{name}.ts")

        assert len(orchestrator.decisions) == 2
        assert orchestrator.total_decisions == 3
        paths = [d.classification.context["file_path"] for d in orchestrator.decisions]
        assert paths == ["src/b.ts", "src/c.ts"]

    def test_clear(self, orchestrator: Orchestrator) -> None:
        orchestrator.orchestrate(SIMPLE_FIX_CODE, "src/a.ts")
        orchestrator.clear()
        assert orchestrator.decisions == []
        assert orchestrator.total_decisions == 0


class TestToggle:
    """Disabled orchestration returns the anchors without classifying."""

    def test_disabled_skips_classification(
        self,
        engine: RankingEngine,
        registry: CapabilityRegistry,
        pattern_store: PatternStore,
        clock: ManualClock,
    ) -> None:
        classifier = MagicMock(spec=ProblemClassifier)
        orchestrator = Orchestrator(
            classifier,
            engine,
            registry,
            pattern_store,
            OrchestrationConfig(enabled=False),
            clock=clock,
        )

        result = orchestrator.orchestrate(STRUCTURAL_CODE, "src/Widget.tsx")

        classifier.classify.assert_not_called()
        assert result.primary_handler == "smart_file_rebuilder"
        assert result.backup_handlers == ("auto_fix_current_file", "analyze_current_file")
        assert result.confidence == 0.6
        assert result.classification.problem_type is ProblemType.UNKNOWN
        assert result.classification.indicators == ("orchestration disabled",)
        assert result.degraded
        assert orchestrator.total_decisions == 0
        assert pattern_store.analysis_count() == 0

    def test_toggle_round_trip(self, orchestrator: Orchestrator) -> None:
        assert orchestrator.toggle() is False
        disabled = orchestrator.orchestrate(STRUCTURAL_CODE, "src/Widget.tsx")
        assert disabled.degraded

        assert orchestrator.toggle() is True
        enabled = orchestrator.orchestrate(STRUCTURAL_CODE, "src/Widget.tsx")
        assert not enabled.degraded


class TestStatsAndPersistence:
    """Statistics and snapshot/restore of decisions."""

    def test_stats(self, orchestrator: Orchestrator) -> None:
        orchestrator.orchestrate(STRUCTURAL_CODE, "src/Widget.tsx")
        orchestrator.orchestrate(STRUCTURAL_CODE, "src/Other.tsx")

        stats = orchestrator.get_stats()

        assert stats.registered_handlers == len(DEFAULT_HANDLER_SEEDS)
        assert stats.total_decisions == 2
        assert stats.most_used_handler == "smart_file_rebuilder"
        assert stats.average_confidence == 1.0
        assert stats.cached_decisions == 2
        assert stats.enabled

    def test_empty_stats(self, orchestrator: Orchestrator) -> None:
        stats = orchestrator.get_stats()
        assert stats.total_decisions == 0
        assert stats.average_confidence == 0.0
        assert stats.to_dict()["most_used_handler"] is None

    def test_snapshot_restore(
        self,
        orchestrator: Orchestrator,
        classifier: ProblemClassifier,
        engine: RankingEngine,
        registry: CapabilityRegistry,
        pattern_store: PatternStore,
        clock: ManualClock,
    ) -> None:
        orchestrator.orchestrate(SIMPLE_FIX_CODE, "src/a.ts")
        orchestrator.orchestrate(ROUTE_CODE, "src/Page.tsx")
        orchestrator.toggle()
        snapshot = orchestrator.snapshot()

        restored = Orchestrator(classifier, engine, registry, pattern_store, clock=clock)
        restored.restore(snapshot)

        assert restored.decision_keys() == orchestrator.decision_keys()
        assert restored.decisions == orchestrator.decisions
        assert restored.total_decisions == 2
        assert restored.enabled is False

    def test_restore_skips_malformed(self, orchestrator: Orchestrator) -> None:
        orchestrator.orchestrate(SIMPLE_FIX_CODE, "src/a.ts")
        snapshot = orchestrator.snapshot()
        snapshot["decisions"]["broken"] = {"reasoning": "no primary"}

        orchestrator.restore(snapshot)

        assert "broken" not in orchestrator.decision_keys()
        assert len(orchestrator.decisions) == 1

    def test_restore_rejects_bad_total_without_changes(self, orchestrator: Orchestrator) -> None:
        orchestrator.orchestrate(SIMPLE_FIX_CODE, "src/a.ts")
        before = orchestrator.decision_keys()

        with pytest.raises(ValueError):
            orchestrator.restore({"decisions": {}, "total_decisions": "many"})

        assert orchestrator.decision_keys() == before
        assert orchestrator.total_decisions == 1
