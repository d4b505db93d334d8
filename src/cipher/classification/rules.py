"""Ordered classification rule table.

Rules are evaluated top to bottom and the first rule whose detector returns
evidence wins. The order is part of the contract: a conditional hook in a
music component is a structural issue, not a music problem.

Detectors are pure functions of the input; they never consult a clock or
any mutable state.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field

from cipher.classification.models import Complexity, ProblemType, RequestContext


@dataclass(frozen=True)
class RuleInput:
    """Everything a detector may look at."""

    code: str
    file_path: str
    context: RequestContext = field(default_factory=RequestContext)

    @property
    def code_lower(self) -> str:
        return self.code.lower()

    @property
    def path_lower(self) -> str:
        return self.file_path.lower()


Detector = Callable[[RuleInput], list[str]]


@dataclass(frozen=True)
class ClassificationRule:
    """One row of the rule table.

    Attributes:
        rule_id: Stable identifier, reported on the classification.
        problem_type: Type assigned when the rule matches.
        complexity: Complexity assigned when the rule matches.
        confidence: Confidence assigned when the rule matches.
        indicators: Static evidence always reported for this rule.
        detector: Returns dynamic evidence; an empty list means no match.
    """

    rule_id: str
    problem_type: ProblemType
    complexity: Complexity
    confidence: float
    indicators: tuple[str, ...]
    detector: Detector

    def evaluate(self, rule_input: RuleInput) -> list[str] | None:
        """Return the full indicator list if the rule matches, else None."""
        evidence = self.detector(rule_input)
        if not evidence:
            return None
        return [*self.indicators, *evidence]


# =============================================================================
# Keyword tables
# =============================================================================

MUSIC_KEYWORDS: tuple[str, ...] = (
    "guitar",
    "vocal",
    "audio",
    "music",
    "chord",
    "note",
    "sound",
    "theory",
    "tab",
)

# Case-sensitive: "Link" is a component name, not the word "link"
ROUTE_INDICATORS: tuple[str, ...] = (
    "route",
    "router",
    "navigation",
    "Link",
    "useNavigate",
    "useParams",
)

_EMPTY_IMPORT = re.compile(r"""from\s*(""|'')""")
_FUNCTION_DEF = re.compile(
    r"\bfunction\b|\bdef\s+\w+|=\s*(?:async\s*)?\([^()]*\)\s*(?::\s*[\w<>\[\]| ]+)?\s*=>"
)
_TYPE_DEF = re.compile(r"\binterface\s+\w+|\btype\s+\w+\s*=|\benum\s+\w+")
_IMPORT_STMT = re.compile(r"^\s*(?:import\s|from\s+\S+\s+import\s)", re.MULTILINE)
_CLASS_DEF = re.compile(r"\bclass\s+\w+")
_METHOD_DEF = re.compile(
    r"^\s+(?:(?:public|private|protected|static|async|get|set)\s+)*"
    r"(?!(?:if|for|while|switch|catch|return)\b)\w+\s*\([^()]*\)\s*(?::[^{\n]*)?\{"
    r"|^\s+(?:async\s+)?def\s+\w+",
    re.MULTILINE,
)

COMPLEX_REFACTOR_MIN_LENGTH = 1000
SIMPLE_FIX_MAX_LENGTH = 500
LARGE_STATE_COMPONENT_LENGTH = 500


# =============================================================================
# Detectors
# =============================================================================


def detect_conditional_hooks(rule_input: RuleInput) -> list[str]:
    code = rule_input.code
    if "if (" not in code:
        return []
    hooks = [hook for hook in ("useState", "useEffect") if hook in code]
    return [f"{hook} used alongside conditionals" for hook in hooks]


def detect_empty_import(rule_input: RuleInput) -> list[str]:
    code = rule_input.code
    if "import" in code and _EMPTY_IMPORT.search(code):
        return ["Import statement with empty module path"]
    return []


def detect_unbalanced_delimiters(rule_input: RuleInput) -> list[str]:
    code = rule_input.code
    evidence: list[str] = []
    for opening, closing, label in (("{", "}", "braces"), ("(", ")", "parentheses")):
        opened, closed = code.count(opening), code.count(closing)
        if opened != closed:
            evidence.append(f"Unbalanced {label} ({opened} opening, {closed} closing)")
    return evidence


def detect_component_request(rule_input: RuleInput) -> list[str]:
    if rule_input.context.action == "create-component":
        return ["Action requested: create-component"]
    if not rule_input.code.strip():
        return ["Empty source"]
    return []


def detect_music_domain(rule_input: RuleInput) -> list[str]:
    path, code = rule_input.path_lower, rule_input.code_lower
    hits = [kw for kw in MUSIC_KEYWORDS if kw in path or kw in code]
    return [f"Music keyword: {kw}" for kw in hits]


def detect_performance_issues(rule_input: RuleInput) -> list[str]:
    code = rule_input.code
    checks = (
        (".map(" in code and "useMemo" not in code, "List rendering without useMemo"),
        ("onClick" in code and "useCallback" not in code, "Inline handlers without useCallback"),
        (
            "useState" in code
            and len(code) > LARGE_STATE_COMPONENT_LENGTH
            and "React.memo" not in code,
            "Large stateful component without React.memo",
        ),
        (len(code.split("useEffect")) > 3, "Multiple useEffect hooks"),
    )
    evidence = [message for matched, message in checks if matched]
    return evidence if len(evidence) >= 2 else []


def detect_route_code(rule_input: RuleInput) -> list[str]:
    path, code = rule_input.file_path, rule_input.code
    hits = [ind for ind in ROUTE_INDICATORS if ind in path or ind in code]
    return [f"Route indicator: {ind}" for ind in hits]


def _max_class_methods(code: str) -> int:
    starts = [m.start() for m in _CLASS_DEF.finditer(code)]
    best = 0
    for i, start in enumerate(starts):
        end = starts[i + 1] if i + 1 < len(starts) else len(code)
        best = max(best, len(_METHOD_DEF.findall(code[start:end])))
    return best


def detect_complex_refactor(rule_input: RuleInput) -> list[str]:
    code = rule_input.code
    if len(code) <= COMPLEX_REFACTOR_MIN_LENGTH:
        return []
    functions = len(_FUNCTION_DEF.findall(code))
    types = len(_TYPE_DEF.findall(code))
    imports = len(_IMPORT_STMT.findall(code))
    methods = _max_class_methods(code)
    checks = (
        (functions > 5, f"{functions} function definitions"),
        (types > 3, f"{types} type definitions"),
        (imports > 10, f"{imports} import statements"),
        (methods > 5, f"Class with {methods} methods"),
    )
    evidence = [message for matched, message in checks if matched]
    return evidence if len(evidence) >= 2 else []


def detect_simple_issues(rule_input: RuleInput) -> list[str]:
    code = rule_input.code
    checks = (
        (";;" in code, "Double semicolon"),
        ("missing" in code, "Missing reference noted"),
        ("undefined" in code and len(code) < SIMPLE_FIX_MAX_LENGTH, "Undefined value"),
    )
    return [message for matched, message in checks if matched]


def detect_always(rule_input: RuleInput) -> list[str]:
    return ["No specific problem pattern detected"]


# =============================================================================
# Default table (order is priority)
# =============================================================================

DEFAULT_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        rule_id="conditional-hooks",
        problem_type=ProblemType.STRUCTURAL_ISSUE,
        complexity=Complexity.COMPLEX,
        confidence=0.9,
        indicators=("Conditional hooks detected", "Requires structural refactoring"),
        detector=detect_conditional_hooks,
    ),
    ClassificationRule(
        rule_id="empty-import",
        problem_type=ProblemType.SYNTAX_ERROR,
        complexity=Complexity.SIMPLE,
        confidence=0.85,
        indicators=("Missing import paths",),
        detector=detect_empty_import,
    ),
    ClassificationRule(
        rule_id="unbalanced-delimiters",
        problem_type=ProblemType.SYNTAX_ERROR,
        complexity=Complexity.SIMPLE,
        confidence=0.8,
        indicators=("Syntax imbalance detected",),
        detector=detect_unbalanced_delimiters,
    ),
    ClassificationRule(
        rule_id="component-request",
        problem_type=ProblemType.COMPONENT_CREATION,
        complexity=Complexity.MODERATE,
        confidence=0.9,
        indicators=("New component creation requested",),
        detector=detect_component_request,
    ),
    ClassificationRule(
        rule_id="music-domain",
        problem_type=ProblemType.MUSIC_ANALYSIS,
        complexity=Complexity.MODERATE,
        confidence=0.85,
        indicators=("Music-related code detected",),
        detector=detect_music_domain,
    ),
    ClassificationRule(
        rule_id="performance",
        problem_type=ProblemType.PERFORMANCE_ISSUE,
        complexity=Complexity.MODERATE,
        confidence=0.8,
        indicators=("Performance optimization opportunities",),
        detector=detect_performance_issues,
    ),
    ClassificationRule(
        rule_id="route",
        problem_type=ProblemType.ROUTE_ISSUE,
        complexity=Complexity.MODERATE,
        confidence=0.85,
        indicators=("Route or navigation related",),
        detector=detect_route_code,
    ),
    ClassificationRule(
        rule_id="complex-refactor",
        problem_type=ProblemType.COMPLEX_REFACTOR,
        complexity=Complexity.EXPERT,
        confidence=0.7,
        indicators=("Large multi-concern file",),
        detector=detect_complex_refactor,
    ),
    ClassificationRule(
        rule_id="simple-fix",
        problem_type=ProblemType.SIMPLE_FIX,
        complexity=Complexity.SIMPLE,
        confidence=0.8,
        indicators=("Simple fixes detected",),
        detector=detect_simple_issues,
    ),
    ClassificationRule(
        rule_id="default",
        problem_type=ProblemType.UNKNOWN,
        complexity=Complexity.MODERATE,
        confidence=0.5,
        indicators=(),
        detector=detect_always,
    ),
)
