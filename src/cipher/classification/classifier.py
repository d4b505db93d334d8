"""ProblemClassifier: turns (code, path, context) into a ProblemClassification.

Evaluation walks the rule table in order and stops at the first match. The
classifier never raises; any failure while evaluating rules produces the
``unknown`` fallback classification.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from cipher.classification.models import (
    ProblemClassification,
    RequestContext,
    file_type_from_path,
)
from cipher.classification.rules import DEFAULT_RULES, ClassificationRule, RuleInput
from cipher.core.errors import ClassificationError
from cipher.core.logging import get_logger

_logger = get_logger("classifier")

CLASSIFICATION_EVENT = "classification"

EventSink = Callable[[str, bool], None]
"""Receives (action, success) after every classification."""


@dataclass(frozen=True)
class RuleTrace:
    """Result of evaluating one rule, as reported by ``explain``."""

    rule_id: str
    matched: bool
    indicators: tuple[str, ...] = ()


class ProblemClassifier:
    """Deterministic, first-match-wins problem classifier.

    Example:
        classifier = ProblemClassifier()
        result = classifier.classify('import x from "";', "src/App.tsx")
        assert result.problem_type is ProblemType.SYNTAX_ERROR
    """

    def __init__(
        self,
        rules: Sequence[ClassificationRule] = DEFAULT_RULES,
        event_sink: EventSink | None = None,
    ) -> None:
        if not rules:
            raise ValueError("at least one classification rule is required")
        self._rules = tuple(rules)
        self._event_sink = event_sink

    @property
    def rules(self) -> tuple[ClassificationRule, ...]:
        return self._rules

    def set_event_sink(self, sink: EventSink | None) -> None:
        self._event_sink = sink

    def classify(
        self,
        code: str,
        file_path: str,
        context: RequestContext | dict[str, Any] | None = None,
    ) -> ProblemClassification:
        """Classify a unit of work. Never raises."""
        classification_context: dict[str, Any] = {"file_path": file_path}
        try:
            request = _as_request_context(context)
            classification_context = self._build_context(code, file_path, request)
            rule_input = RuleInput(code, file_path, request)
            classification = self._evaluate(rule_input, classification_context)
        except Exception as e:
            _logger.warning(
                "classification_failed",
                file_path=file_path,
                error=str(e),
                error_type=type(e).__name__,
            )
            self._emit(success=False)
            return ProblemClassification.fallback("classification error", classification_context)

        _logger.debug(
            "problem_classified",
            file_path=file_path,
            problem_type=classification.problem_type.value,
            rule_id=classification.rule_id,
            confidence=classification.confidence,
        )
        self._emit(success=True)
        return classification

    def explain(
        self,
        code: str,
        file_path: str,
        context: RequestContext | dict[str, Any] | None = None,
    ) -> list[RuleTrace]:
        """Evaluate every rule independently, ignoring priority.

        Useful to see which lower-priority rules a winning rule shadowed.
        """
        rule_input = RuleInput(code, file_path, _as_request_context(context))
        traces: list[RuleTrace] = []
        for rule in self._rules:
            indicators = rule.evaluate(rule_input)
            traces.append(
                RuleTrace(rule.rule_id, indicators is not None, tuple(indicators or ()))
            )
        return traces

    def _evaluate(
        self, rule_input: RuleInput, classification_context: dict[str, Any]
    ) -> ProblemClassification:
        for rule in self._rules:
            indicators = rule.evaluate(rule_input)
            if indicators is None:
                continue
            return ProblemClassification(
                problem_type=rule.problem_type,
                complexity=rule.complexity,
                confidence=rule.confidence,
                indicators=tuple(indicators),
                rule_id=rule.rule_id,
                context=classification_context,
            )
        raise ClassificationError("no classification rule matched")

    @staticmethod
    def _build_context(
        code: str, file_path: str, request: RequestContext
    ) -> dict[str, Any]:
        return {
            **request.to_dict(),
            "file_path": file_path,
            "file_type": file_type_from_path(file_path),
            "code_length": len(code),
        }

    def _emit(self, success: bool) -> None:
        if self._event_sink is None:
            return
        try:
            self._event_sink(CLASSIFICATION_EVENT, success)
        except Exception as e:
            _logger.warning("classification_event_failed", error=str(e))


def _as_request_context(context: RequestContext | dict[str, Any] | None) -> RequestContext:
    if isinstance(context, RequestContext):
        return context
    return RequestContext.from_mapping(context)
