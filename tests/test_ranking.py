"""Tests for handler scoring and ranking."""

from datetime import timedelta

import pytest

from cipher.classification.classifier import ProblemClassifier
from cipher.classification.models import Complexity, ProblemClassification, ProblemType
from cipher.core.config import ScoringConfig
from cipher.core.constants import ANCHOR_HANDLERS
from cipher.ranking.engine import RankingEngine, anchor_fallbacks
from cipher.ranking.models import OrchestrationResult
from cipher.ranking.relevance import RELEVANCE_TABLE, relevance_for
from cipher.ranking.scorer import HandlerScorer
from cipher.registry.registry import CapabilityRegistry
from tests.helpers import (
    EMPTY_IMPORT_CODE,
    SIMPLE_FIX_CODE,
    START,
    STRUCTURAL_CODE,
    ManualClock,
    complex_refactor_code,
)


def _classification(
    problem_type: ProblemType, complexity: Complexity, *indicators: str
) -> ProblemClassification:
    return ProblemClassification(
        problem_type=problem_type,
        complexity=complexity,
        confidence=0.8,
        indicators=indicators or ("test",),
    )


class TestRelevanceTable:
    """Every problem type has a relevance entry."""

    def test_covers_all_problem_types(self) -> None:
        assert set(RELEVANCE_TABLE) == set(ProblemType)

    def test_music_matches_by_category(self, registry: CapabilityRegistry) -> None:
        rule = relevance_for(ProblemType.MUSIC_ANALYSIS)
        handler = registry.get("create_chord_progression")
        assert handler is not None
        assert rule.matches(handler)


class TestHandlerScorer:
    """Score arithmetic, alignment and reasoning."""

    def test_score_components(self, registry: CapabilityRegistry) -> None:
        scorer = HandlerScorer(ScoringConfig(base=0.0))
        handler = registry.get("quick_file_fix")
        assert handler is not None
        classification = _classification(ProblemType.SIMPLE_FIX, Complexity.SIMPLE)

        # 0.75*0.3 + 1.0*0.3 + 1.0*0.2 + 0.75*0.1
        assert scorer.score(handler, classification, START) == pytest.approx(0.8)

    def test_recent_usage_bonus(self, registry: CapabilityRegistry) -> None:
        scorer = HandlerScorer(ScoringConfig(base=0.0))
        handler = registry.get("quick_file_fix")
        assert handler is not None
        classification = _classification(ProblemType.SIMPLE_FIX, Complexity.SIMPLE)

        handler.last_used = START - timedelta(days=2)
        assert scorer.score(handler, classification, START) == pytest.approx(0.9)

        handler.last_used = START - timedelta(days=8)
        assert scorer.score(handler, classification, START) == pytest.approx(0.8)

    def test_score_is_clamped(self, registry: CapabilityRegistry) -> None:
        scorer = HandlerScorer()
        rebuilder = registry.get("smart_file_rebuilder")
        assert rebuilder is not None
        structural = _classification(ProblemType.STRUCTURAL_ISSUE, Complexity.COMPLEX)
        assert scorer.score(rebuilder, structural, START) == 1.0

        floor = HandlerScorer(
            ScoringConfig(
                base=0.0,
                success_rate_weight=0.0,
                capability_weight=0.0,
                complexity_weight=0.0,
                confidence_weight=0.0,
            )
        )
        assert floor.score(rebuilder, structural, START) == 0.1

    @pytest.mark.parametrize(
        ("handler_name", "complexity", "expected"),
        [
            ("smart_file_rebuilder", Complexity.COMPLEX, 1.0),
            ("smart_file_rebuilder", Complexity.EXPERT, 0.9),
            ("smart_file_rebuilder", Complexity.SIMPLE, 0.3),
            ("quick_file_fix", Complexity.SIMPLE, 1.0),
            ("quick_file_fix", Complexity.MODERATE, 0.6),
            ("visualize_routes", Complexity.MODERATE, 1.0),
        ],
    )
    def test_complexity_alignment(
        self,
        registry: CapabilityRegistry,
        handler_name: str,
        complexity: Complexity,
        expected: float,
    ) -> None:
        handler = registry.get(handler_name)
        assert handler is not None
        classification = _classification(ProblemType.UNKNOWN, complexity)
        assert HandlerScorer().complexity_alignment(handler, classification) == expected

    def test_capability_match_ratio(self, registry: CapabilityRegistry) -> None:
        handler = registry.get("quick_file_fix")
        assert handler is not None
        syntax = _classification(ProblemType.SYNTAX_ERROR, Complexity.SIMPLE)
        assert HandlerScorer().capability_match(handler, syntax) == pytest.approx(1 / 3)

    def test_reasoning_clauses(
        self, registry: CapabilityRegistry, classifier: ProblemClassifier
    ) -> None:
        handler = registry.get("quick_file_fix")
        assert handler is not None
        classification = classifier.classify(SIMPLE_FIX_CODE, "src/a.ts")

        reasoning = HandlerScorer().reasoning(handler, classification)

        assert reasoning == "Strong in simple fixes, Matches simple complexity"

    def test_reasoning_high_success_and_structural(self, registry: CapabilityRegistry) -> None:
        handler = registry.get("smart_file_rebuilder")
        assert handler is not None
        classification = _classification(ProblemType.STRUCTURAL_ISSUE, Complexity.COMPLEX)

        reasoning = HandlerScorer().reasoning(handler, classification)

        assert reasoning.startswith("High success rate (85%)")
        assert reasoning.endswith("Handles complex structural changes")

    def test_reasoning_default(self, registry: CapabilityRegistry) -> None:
        handler = registry.get("deploy_beta")
        assert handler is not None
        classification = _classification(ProblemType.UNKNOWN, Complexity.EXPERT)
        assert HandlerScorer().reasoning(handler, classification) == "General capability match"


class TestRankingEngine:
    """Candidate selection and primary/backup choice."""

    def test_structural_routes_to_rebuilder(
        self, engine: RankingEngine, classifier: ProblemClassifier
    ) -> None:
        result = engine.recommend(classifier.classify(STRUCTURAL_CODE, "src/Widget.tsx"))

        assert result.primary_handler == "smart_file_rebuilder"
        assert result.backup_handlers == ()
        assert result.confidence == 1.0
        assert not result.degraded

    def test_syntax_error_ranks_auto_fix_first(
        self, engine: RankingEngine, classifier: ProblemClassifier
    ) -> None:
        result = engine.recommend(classifier.classify(EMPTY_IMPORT_CODE, "src/a.ts"))

        assert result.primary_handler == "auto_fix_current_file"
        assert set(result.backup_handlers) == {"quick_file_fix", "self_repair"}
        assert result.primary_handler not in result.backup_handlers

    def test_recommendations_are_ordered(
        self, engine: RankingEngine, classifier: ProblemClassifier
    ) -> None:
        recommendations = engine.rank(classifier.classify(EMPTY_IMPORT_CODE, "src/a.ts"))

        assert [r.execution_order for r in recommendations] == list(
            range(1, len(recommendations) + 1)
        )
        scores = [r.confidence for r in recommendations]
        assert scores == sorted(scores, reverse=True)
        for rec in recommendations:
            assert 0.1 <= rec.confidence <= 1.0
            assert rec.handler_name not in rec.fallback_handlers
            assert len(rec.fallback_handlers) <= 2

    def test_max_backups(self, registry: CapabilityRegistry, clock: ManualClock) -> None:
        engine = RankingEngine(registry, max_backups=1, clock=clock)
        result = engine.recommend(_classification(ProblemType.MUSIC_ANALYSIS, Complexity.MODERATE))
        assert len(result.backup_handlers) == 1

    def test_decided_at_uses_clock(self, engine: RankingEngine) -> None:
        result = engine.recommend(_classification(ProblemType.ROUTE_ISSUE, Complexity.MODERATE))
        assert result.decided_at == START

    def test_missing_anchors_yield_safe_result(self, clock: ManualClock) -> None:
        engine = RankingEngine(CapabilityRegistry(clock=clock), clock=clock)
        result = engine.recommend(_classification(ProblemType.UNKNOWN, Complexity.MODERATE))

        assert result.primary_handler == "smart_file_rebuilder"
        assert result.backup_handlers == ("auto_fix_current_file", "analyze_current_file")
        assert result.confidence == 0.5
        assert result.degraded
        assert result.recommendations == ()

    def test_anchor_fallbacks(self) -> None:
        assert anchor_fallbacks("smart_file_rebuilder") == ANCHOR_HANDLERS[1:]
        assert anchor_fallbacks("zip_file") == ANCHOR_HANDLERS[:2]


class TestRecommendSequence:
    """Sequences are longer for complex work."""

    def test_simple_work_single_handler(
        self, engine: RankingEngine, classifier: ProblemClassifier
    ) -> None:
        classification = classifier.classify(EMPTY_IMPORT_CODE, "src/a.ts")
        assert engine.recommend_sequence(classification) == ["auto_fix_current_file"]

    def test_expert_work_up_to_three(self, engine: RankingEngine) -> None:
        classification = _classification(ProblemType.MUSIC_ANALYSIS, Complexity.EXPERT)
        sequence = engine.recommend_sequence(classification)
        assert len(sequence) == 3

    def test_complex_refactor_sequence(
        self, engine: RankingEngine, classifier: ProblemClassifier
    ) -> None:
        classification = classifier.classify(complex_refactor_code(), "src/big.js")
        assert engine.recommend_sequence(classification) == ["smart_file_rebuilder"]

    def test_empty_registry_uses_first_anchor(self, clock: ManualClock) -> None:
        engine = RankingEngine(CapabilityRegistry(clock=clock), clock=clock)
        classification = _classification(ProblemType.UNKNOWN, Complexity.COMPLEX)
        assert engine.recommend_sequence(classification) == ["smart_file_rebuilder"]


class TestOrchestrationResultModel:
    """Serialization of OrchestrationResult."""

    def test_dict_round_trip(self, engine: RankingEngine, classifier: ProblemClassifier) -> None:
        result = engine.recommend(classifier.classify(EMPTY_IMPORT_CODE, "src/a.ts"))
        assert OrchestrationResult.from_dict(result.to_dict()) == result

    def test_primary_required(self) -> None:
        with pytest.raises(ValueError):
            OrchestrationResult(
                primary_handler="",
                backup_handlers=(),
                reasoning="",
                confidence=0.5,
                classification=_classification(ProblemType.UNKNOWN, Complexity.SIMPLE),
            )
