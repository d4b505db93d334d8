"""Per-problem-type handler relevance table.

For each problem type the table says which handlers are candidates (by
category or by capability tag) and which tags count toward the capability
match ratio. Every ProblemType has an entry.
"""

from __future__ import annotations

from dataclasses import dataclass

from cipher.classification.models import ProblemType
from cipher.registry.models import HandlerCapability, HandlerCategory


@dataclass(frozen=True)
class RelevanceRule:
    """Candidate filter and relevant tags for one problem type."""

    categories: frozenset[HandlerCategory] = frozenset()
    match_tags: frozenset[str] = frozenset()
    relevant_tags: tuple[str, ...] = ()

    def matches(self, handler: HandlerCapability) -> bool:
        return handler.category in self.categories or bool(
            handler.capabilities & self.match_tags
        )


def _rule(
    match: tuple[str, ...],
    relevant: tuple[str, ...],
    categories: tuple[HandlerCategory, ...] = (),
) -> RelevanceRule:
    return RelevanceRule(frozenset(categories), frozenset(match), relevant)


_MUSIC = (HandlerCategory.MUSIC,)
_ROUTES = (HandlerCategory.ROUTES,)
_FIX_TAGS = ("simple-fixes", "auto-repair", "syntax-fixes")
_STRUCTURAL_TAGS = ("structural-refactoring", "complex-fixes")

RELEVANCE_TABLE: dict[ProblemType, RelevanceRule] = {
    ProblemType.STRUCTURAL_ISSUE: _rule(
        _STRUCTURAL_TAGS, ("structural-refactoring", "complex-fixes", "hook-restructuring")
    ),
    ProblemType.COMPLEX_REFACTOR: _rule(
        _STRUCTURAL_TAGS, ("structural-refactoring", "complex-fixes", "hook-restructuring")
    ),
    ProblemType.SYNTAX_ERROR: _rule(_FIX_TAGS, ("simple-fixes", "syntax-fixes", "auto-repair")),
    ProblemType.SIMPLE_FIX: _rule(_FIX_TAGS, ("simple-fixes", "pattern-matching", "quick-repairs")),
    ProblemType.COMPONENT_CREATION: _rule(
        ("component-creation", "code-generation"), ("component-creation", "code-generation")
    ),
    ProblemType.MUSIC_ANALYSIS: _rule(
        ("guitar-analysis", "music-components"),
        ("guitar-analysis", "vocal-analysis", "music-components", "audio-creation"),
        _MUSIC,
    ),
    ProblemType.GUITAR_ANALYSIS: _rule(
        ("guitar-analysis", "music-components"),
        ("guitar-analysis", "chord-detection", "music-components"),
        _MUSIC,
    ),
    ProblemType.VOCAL_ANALYSIS: _rule(
        ("vocal-analysis",), ("vocal-analysis", "music-components", "audio-creation"), _MUSIC
    ),
    ProblemType.AUDIO_CREATION: _rule(
        ("audio-creation", "music-generation"),
        ("audio-creation", "music-generation", "code-generation"),
        _MUSIC,
    ),
    ProblemType.ROUTE_ISSUE: _rule(
        ("route-analysis",), ("route-analysis", "navigation-repair"), _ROUTES
    ),
    ProblemType.ROUTE_HEALTH: _rule(
        ("route-analysis", "health-audit"), ("route-analysis", "health-audit"), _ROUTES
    ),
    ProblemType.ROUTE_VISUALIZATION: _rule(
        ("route-visualization",), ("route-visualization", "route-analysis"), _ROUTES
    ),
    ProblemType.DEPLOYMENT_TASK: _rule(
        ("deployment",), ("deployment", "build-verification"), (HandlerCategory.DEPLOYMENT,)
    ),
    ProblemType.TEST_GENERATION: _rule(
        ("test-generation",), ("test-generation", "code-generation")
    ),
    ProblemType.PERFORMANCE_ISSUE: _rule(
        ("performance-analysis", "optimization"), ("performance-analysis", "optimization")
    ),
    ProblemType.OPTIMIZATION_NEEDED: _rule(
        ("optimization", "performance-analysis"), ("optimization", "performance-analysis")
    ),
    ProblemType.UNKNOWN: _rule(
        ("structural-refactoring", "file-analysis"), ("file-analysis", "general-purpose")
    ),
}


def relevance_for(problem_type: ProblemType) -> RelevanceRule:
    return RELEVANCE_TABLE[problem_type]
