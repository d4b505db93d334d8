"""Bounded insertion-ordered containers.

Every bounded collection in the brain (decision cache, analysis cache,
session history) is a ``BoundedFifo``: inserting past capacity evicts the
oldest key. Re-inserting an existing key replaces its value but keeps its
original position.
"""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Iterator
from typing import Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class BoundedFifo(Generic[K, V]):
    """Mapping with a fixed capacity and first-in-first-out eviction."""

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._items: OrderedDict[K, V] = OrderedDict()

    @property
    def capacity(self) -> int:
        return self._capacity

    def put(self, key: K, value: V) -> tuple[K, V] | None:
        """Insert or replace a value.

        Returns:
            The evicted (key, value) pair, or None if nothing was evicted.
        """
        if key in self._items:
            self._items[key] = value
            return None
        self._items[key] = value
        if len(self._items) > self._capacity:
            return self._items.popitem(last=False)
        return None

    def get(self, key: K, default: V | None = None) -> V | None:
        return self._items.get(key, default)

    def values(self) -> list[V]:
        return list(self._items.values())

    def items(self) -> list[tuple[K, V]]:
        return list(self._items.items())

    def newest(self, n: int) -> list[V]:
        """Return up to ``n`` most recently inserted values, newest first."""
        return list(reversed(self._items.values()))[:n]

    def clear(self) -> None:
        self._items.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[K]:
        return iter(self._items)
