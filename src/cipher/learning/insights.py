"""Human-readable insights and the markdown intelligence report."""

from __future__ import annotations

from collections import Counter

from cipher.learning.feedback import FeedbackLoop
from cipher.learning.models import LearningPattern
from cipher.learning.store import PatternStore
from cipher.registry.registry import CapabilityRegistry

ROUTING_PREFIX = "routing:"
REPORT_TOP_N = 5
MIN_PATTERNS_FOR_MATURITY = 10


def _pct(value: float) -> int:
    return round(value * 100)


def routing_patterns(store: PatternStore) -> list[LearningPattern]:
    return [p for p in store.patterns if p.learned_from.startswith(ROUTING_PREFIX)]


def top_routes(store: PatternStore, limit: int = REPORT_TOP_N) -> list[tuple[str, str, int]]:
    """Most reinforced (problem_type, handler, count) routing pairs."""
    counts = Counter((p.before_state, p.after_state) for p in routing_patterns(store))
    return [(problem, handler, n) for (problem, handler), n in counts.most_common(limit)]


def get_insights(
    feedback: FeedbackLoop, store: PatternStore, registry: CapabilityRegistry
) -> list[str]:
    insights: list[str] = []

    top = feedback.top_actions(limit=1)
    if top:
        action, stats = top[0]
        insights.append(
            f"Most successful action: {action} ({_pct(stats.confidence)}% confidence)"
        )

    routes = top_routes(store, limit=1)
    if routes:
        problem, handler, count = routes[0]
        insights.append(f"Best route: {problem} -> {handler} ({count} reinforcements)")

    most_used = registry.most_used()
    if most_used is not None:
        insights.append(f"Most used handler: {most_used.name} ({most_used.usage_count} uses)")

    state = feedback.state
    status = "active" if state.is_learning_enabled else "disabled"
    insights.append(f"Learning {status} ({state.learning_mode.value} mode)")
    insights.append(f"Patterns learned: {store.pattern_count()}")
    insights.append(f"Learning sessions: {store.session_count()}")
    return insights


def _recommendations(feedback: FeedbackLoop, store: PatternStore) -> list[str]:
    recommendations: list[str] = []
    if feedback.pattern_success("test-generation") < 0.5:
        recommendations.append("Consider running more test generation to improve coverage")
    if store.pattern_count() < MIN_PATTERNS_FOR_MATURITY:
        recommendations.append("Keep reporting outcomes so the brain can learn patterns")
    routes = top_routes(store, limit=1)
    if not routes:
        recommendations.append("Report orchestration outcomes to develop routing patterns")
    elif routes[0][2] >= 3:
        problem, handler, _ = routes[0]
        recommendations.append(f"Reliable route discovered: {problem} -> {handler}")
    return recommendations


def generate_report(
    feedback: FeedbackLoop, store: PatternStore, registry: CapabilityRegistry
) -> str:
    """Markdown report of learning status, patterns and handler performance."""
    lines: list[str] = ["# Cipher Brain Intelligence Report", "", "## Learning Status"]
    lines.extend(f"- {insight}" for insight in get_insights(feedback, store, registry))

    lines += ["", "## Top Action Patterns"]
    top_actions = feedback.top_actions(REPORT_TOP_N)
    if top_actions:
        lines.extend(
            f"- **{action}**: {stats.successes} successes, {stats.failures} failures "
            f"({_pct(stats.confidence)}% confidence)"
            for action, stats in top_actions
        )
    else:
        lines.append("- No action patterns recorded yet")

    lines += ["", "## Top Routing Patterns"]
    routes = top_routes(store)
    if routes:
        lines.extend(
            f"- **{problem}**: {handler} ({count} reinforcements)"
            for problem, handler, count in routes
        )
    else:
        lines.append("- No routing patterns learned yet")

    lines += ["", "## Handler Performance"]
    handlers = sorted(registry.all_handlers(), key=lambda h: h.success_rate, reverse=True)
    lines.extend(
        f"- **{h.name}**: {_pct(h.success_rate)}% success, "
        f"{_pct(h.confidence or 0.0)}% confidence, {h.usage_count} uses, {h.category.value}"
        for h in handlers[:REPORT_TOP_N]
    )

    lines += ["", "## Recommendations"]
    recommendations = _recommendations(feedback, store)
    if recommendations:
        lines.extend(f"- {r}" for r in recommendations)
    else:
        lines.append("- Current patterns look healthy")

    return "\n".join(lines) + "\n"
