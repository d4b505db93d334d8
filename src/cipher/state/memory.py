"""In-memory key-value store.

Useful for tests and for hosts that do not want state written to disk.
"""

import copy
from typing import Any

from cipher.state.base import KeyValueStore


class InMemoryStore(KeyValueStore):
    """Stores deep copies of values in a dict without filesystem I/O."""

    def __init__(self) -> None:
        self.values: dict[str, Any] = {}

    def get(self, key: str) -> Any | None:
        value = self.values.get(key)
        return copy.deepcopy(value)

    def set(self, key: str, value: Any) -> None:
        self.values[key] = copy.deepcopy(value)

    def keys(self) -> list[str]:
        return list(self.values)
