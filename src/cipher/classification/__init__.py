"""Problem classification: an ordered, first-match-wins rule table."""

from cipher.classification.classifier import (
    CLASSIFICATION_EVENT,
    ProblemClassifier,
    RuleTrace,
)
from cipher.classification.models import (
    Complexity,
    ProblemClassification,
    ProblemType,
    RequestContext,
    file_type_from_path,
)
from cipher.classification.rules import DEFAULT_RULES, ClassificationRule, RuleInput

__all__ = [
    "CLASSIFICATION_EVENT",
    "ClassificationRule",
    "Complexity",
    "DEFAULT_RULES",
    "ProblemClassification",
    "ProblemClassifier",
    "ProblemType",
    "RequestContext",
    "RuleInput",
    "RuleTrace",
    "file_type_from_path",
]
