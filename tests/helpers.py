"""Shared test helpers for Cipher tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

START = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


class ManualClock:
    """Clock that only moves when told to; every call returns the current time."""

    def __init__(self, start: datetime = START, step: timedelta | None = None) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        if self.step is not None:
            self.now = self.now + self.step
        return current

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


# Snippets chosen so exactly one rule family fires for each.
STRUCTURAL_CODE = (
    "function Widget() {\n"
    "  if (ready) {\n"
    "    const [count, setCount] = useState(0);\n"
    "  }\n"
    "  return null;\n"
    "}\n"
)
EMPTY_IMPORT_CODE = 'import Widget from "";\n'
UNBALANCED_CODE = "function f() {\n  return 1;\n"
PERFORMANCE_CODE = (
    "const items = list.map((i) => i);\n"
    "const b = <button onClick={go} />;\n"
)
ROUTE_CODE = "const params = useParams();\n"
SIMPLE_FIX_CODE = "const a = 1;;\n"
PLAIN_CODE = "const a = 1;\n"


def complex_refactor_code() -> str:
    """Long file with many imports and functions and no other signal."""
    imports = "".join(f"import x{i} from './m{i}';\n" for i in range(12))
    functions = "".join(
        f"function helper{i}(value) {{\n  return value + {i};\n}}\n" for i in range(30)
    )
    return imports + functions
