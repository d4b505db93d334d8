"""Pattern extraction strategies keyed by action kind.

Each extractor shapes a LearningPattern from a successful outcome. An
extractor raises PatternExtractionError when the outcome context lacks the
fields it needs; the feedback loop treats that as "no pattern".
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from enum import Enum

from cipher.classification.models import file_type_from_path
from cipher.core.constants import TRUNCATE_STATE_CHARS
from cipher.core.errors import PatternExtractionError
from cipher.learning.models import LearningPattern, OutcomeContext, PatternType

DEFAULT_PATTERN_CONFIDENCE = 0.7


class ActionKind(str, Enum):
    """Families of actions that shape patterns differently."""

    FILE_ANALYSIS = "file-analysis"
    COMPONENT_CREATION = "component-creation"
    AUTO_FIX = "auto-fix"
    OPTIMIZATION = "optimization"
    MUSIC_ANALYSIS = "music-analysis"
    ROUTE_ANALYSIS = "route-analysis"
    ORCHESTRATION = "orchestration"
    GENERIC = "generic"


# First match wins; music before analysis so "analyze-guitar" is a music action
_KIND_KEYWORDS: tuple[tuple[ActionKind, tuple[str, ...]], ...] = (
    (ActionKind.ORCHESTRATION, ("orchestration",)),
    (ActionKind.MUSIC_ANALYSIS, ("music", "guitar", "vocal", "chord", "audio")),
    (ActionKind.ROUTE_ANALYSIS, ("route", "navigation")),
    (ActionKind.OPTIMIZATION, ("optimi", "performance")),
    (ActionKind.AUTO_FIX, ("fix", "repair")),
    (ActionKind.COMPONENT_CREATION, ("component", "create", "generate")),
    (ActionKind.FILE_ANALYSIS, ("analy", "classif")),
)


def resolve_action_kind(action_type: str) -> ActionKind:
    """Map a free-form action type to the strategy that shapes its pattern."""
    action = action_type.lower()
    for kind, keywords in _KIND_KEYWORDS:
        if any(keyword in action for keyword in keywords):
            return kind
    return ActionKind.GENERIC


def _truncate(text: str | None) -> str:
    if not text:
        return ""
    return text if len(text) <= TRUNCATE_STATE_CHARS else text[:TRUNCATE_STATE_CHARS] + "..."


def _scenarios(*tags: str | None, extra: tuple[str, ...] = ()) -> tuple[str, ...]:
    seen: list[str] = []
    for tag in (*tags, *extra):
        if tag and tag not in seen:
            seen.append(tag)
    return tuple(seen)


def _require(value: str | None, field_name: str, kind: ActionKind) -> str:
    if not value:
        raise PatternExtractionError(f"{kind.value} outcome requires {field_name}")
    return value


def _confidence(context: OutcomeContext) -> float:
    if context.confidence is None:
        return DEFAULT_PATTERN_CONFIDENCE
    return min(1.0, max(0.0, context.confidence))


Extractor = Callable[[str, str, OutcomeContext, datetime], LearningPattern]


def _extract_file_analysis(
    handler: str, action: str, ctx: OutcomeContext, now: datetime
) -> LearningPattern:
    file_name = _require(ctx.file_name, "file_name", ActionKind.FILE_ANALYSIS)
    file_type = file_type_from_path(file_name)
    return LearningPattern(
        pattern_type=PatternType.CODE_STRUCTURE,
        before_state=_truncate(ctx.before_state or file_name),
        after_state=_truncate(ctx.after_state or "analysis completed"),
        reasoning=ctx.reasoning or f"Analyzed {file_type} file {file_name}",
        confidence=_confidence(ctx),
        applicable_scenarios=_scenarios("file-analysis", file_type, extra=ctx.scenarios),
        learned_from=f"{handler}:{action}",
        timestamp=now,
    )


def _extract_component(
    handler: str, action: str, ctx: OutcomeContext, now: datetime
) -> LearningPattern:
    component = ctx.component_type or ctx.file_name
    component = _require(component, "component_type or file_name", ActionKind.COMPONENT_CREATION)
    return LearningPattern(
        pattern_type=PatternType.COMPONENT_PATTERN,
        before_state=_truncate(ctx.before_state),
        after_state=_truncate(ctx.after_state or component),
        reasoning=ctx.reasoning or f"Created {component} component",
        confidence=_confidence(ctx),
        applicable_scenarios=_scenarios(
            "component-creation", ctx.component_type, extra=ctx.scenarios
        ),
        learned_from=f"{handler}:{action}",
        timestamp=now,
    )


def _extract_auto_fix(
    handler: str, action: str, ctx: OutcomeContext, now: datetime
) -> LearningPattern:
    before = _require(ctx.before_state, "before_state", ActionKind.AUTO_FIX)
    after = _require(ctx.after_state, "after_state", ActionKind.AUTO_FIX)
    return LearningPattern(
        pattern_type=PatternType.ERROR_FIX,
        before_state=_truncate(before),
        after_state=_truncate(after),
        reasoning=ctx.reasoning or f"Applied fix with {handler}",
        confidence=_confidence(ctx),
        applicable_scenarios=_scenarios(
            "auto-fix", ctx.problem_type or "simple-fix", extra=ctx.scenarios
        ),
        learned_from=f"{handler}:{action}",
        timestamp=now,
    )


def _extract_optimization(
    handler: str, action: str, ctx: OutcomeContext, now: datetime
) -> LearningPattern:
    subject = _require(
        ctx.before_state or ctx.file_name, "before_state or file_name", ActionKind.OPTIMIZATION
    )
    return LearningPattern(
        pattern_type=PatternType.OPTIMIZATION,
        before_state=_truncate(subject),
        after_state=_truncate(ctx.after_state or "optimized"),
        reasoning=ctx.reasoning or f"Optimized with {handler}",
        confidence=_confidence(ctx),
        applicable_scenarios=_scenarios(
            "optimization", "performance-issue", extra=ctx.scenarios
        ),
        learned_from=f"{handler}:{action}",
        timestamp=now,
    )


def _extract_music(
    handler: str, action: str, ctx: OutcomeContext, now: datetime
) -> LearningPattern:
    subject = _require(
        ctx.file_name or ctx.component_type,
        "file_name or component_type",
        ActionKind.MUSIC_ANALYSIS,
    )
    return LearningPattern(
        pattern_type=PatternType.CODE_STRUCTURE,
        before_state=_truncate(ctx.before_state or subject),
        after_state=_truncate(ctx.after_state or "music analysis completed"),
        reasoning=ctx.reasoning or f"Music analysis of {subject}",
        confidence=_confidence(ctx),
        applicable_scenarios=_scenarios(
            "music-analysis", "guitar-analysis", ctx.component_type, extra=ctx.scenarios
        ),
        learned_from=f"{handler}:{action}",
        timestamp=now,
    )


def _extract_route(
    handler: str, action: str, ctx: OutcomeContext, now: datetime
) -> LearningPattern:
    file_name = _require(ctx.file_name, "file_name", ActionKind.ROUTE_ANALYSIS)
    return LearningPattern(
        pattern_type=PatternType.CODE_STRUCTURE,
        before_state=_truncate(ctx.before_state or file_name),
        after_state=_truncate(ctx.after_state or "routes verified"),
        reasoning=ctx.reasoning or f"Route analysis of {file_name}",
        confidence=_confidence(ctx),
        applicable_scenarios=_scenarios("route-analysis", extra=ctx.scenarios),
        learned_from=f"{handler}:{action}",
        timestamp=now,
    )


def _extract_orchestration(
    handler: str, action: str, ctx: OutcomeContext, now: datetime
) -> LearningPattern:
    subject = _require(
        ctx.file_name or ctx.problem_type, "file_name or problem_type", ActionKind.ORCHESTRATION
    )
    primary = ctx.primary_handler or handler
    return LearningPattern(
        pattern_type=PatternType.CODE_STRUCTURE,
        before_state=_truncate(ctx.before_state or subject),
        after_state=_truncate(ctx.after_state or f"handled by {primary}"),
        reasoning=ctx.reasoning or f"Orchestrated {subject} to {primary}",
        confidence=_confidence(ctx),
        applicable_scenarios=_scenarios("orchestration", ctx.problem_type, extra=ctx.scenarios),
        learned_from=f"{handler}:{action}",
        timestamp=now,
    )


def _extract_generic(
    handler: str, action: str, ctx: OutcomeContext, now: datetime
) -> LearningPattern:
    subject = ctx.before_state or ctx.file_name or ctx.component_type or ctx.problem_type
    subject = _require(subject, "any descriptive field", ActionKind.GENERIC)
    return LearningPattern(
        pattern_type=PatternType.CODE_STRUCTURE,
        before_state=_truncate(subject),
        after_state=_truncate(ctx.after_state or "success"),
        reasoning=ctx.reasoning or f"{action} succeeded with {handler}",
        confidence=_confidence(ctx),
        applicable_scenarios=_scenarios(action, ctx.problem_type, extra=ctx.scenarios),
        learned_from=f"{handler}:{action}",
        timestamp=now,
    )


EXTRACTORS: dict[ActionKind, Extractor] = {
    ActionKind.FILE_ANALYSIS: _extract_file_analysis,
    ActionKind.COMPONENT_CREATION: _extract_component,
    ActionKind.AUTO_FIX: _extract_auto_fix,
    ActionKind.OPTIMIZATION: _extract_optimization,
    ActionKind.MUSIC_ANALYSIS: _extract_music,
    ActionKind.ROUTE_ANALYSIS: _extract_route,
    ActionKind.ORCHESTRATION: _extract_orchestration,
    ActionKind.GENERIC: _extract_generic,
}


def extract_pattern(
    handler_name: str,
    action_type: str,
    context: OutcomeContext,
    now: datetime,
) -> LearningPattern:
    """Shape a pattern for a successful outcome.

    Raises:
        PatternExtractionError: If the context lacks required fields.
    """
    kind = resolve_action_kind(action_type)
    return EXTRACTORS[kind](handler_name, action_type, context, now)


def reinforce_routing(context: OutcomeContext, now: datetime) -> LearningPattern:
    """Pattern recording that ``problem_type`` was well served by ``primary_handler``.

    Raises:
        PatternExtractionError: If either side of the pair is missing.
    """
    problem_type = _require(context.problem_type, "problem_type", ActionKind.ORCHESTRATION)
    primary = _require(context.primary_handler, "primary_handler", ActionKind.ORCHESTRATION)
    return LearningPattern(
        pattern_type=PatternType.CODE_STRUCTURE,
        before_state=problem_type,
        after_state=primary,
        reasoning=f"Route {problem_type} to {primary}",
        confidence=_confidence(context),
        applicable_scenarios=_scenarios(problem_type, "routing"),
        learned_from=f"routing:{problem_type}",
        timestamp=now,
    )
