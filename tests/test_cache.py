"""Tests for the bounded FIFO container."""

import pytest

from cipher.core.cache import BoundedFifo


class TestBoundedFifo:
    """Tests for insertion-ordered eviction."""

    def test_rejects_non_positive_capacity(self) -> None:
        with pytest.raises(ValueError):
            BoundedFifo(0)

    def test_evicts_oldest_past_capacity(self) -> None:
        fifo: BoundedFifo[str, int] = BoundedFifo(3)
        for i, key in enumerate("abc"):
            assert fifo.put(key, i) is None

        evicted = fifo.put("d", 3)

        assert evicted == ("a", 0)
        assert list(fifo) == ["b", "c", "d"]
        assert len(fifo) == 3

    def test_replacing_key_keeps_position(self) -> None:
        """Updating an existing key does not count as a new insertion."""
        fifo: BoundedFifo[str, int] = BoundedFifo(2)
        fifo.put("a", 1)
        fifo.put("b", 2)

        assert fifo.put("a", 10) is None
        assert fifo.get("a") == 10

        fifo.put("c", 3)
        assert "a" not in fifo
        assert fifo.items() == [("b", 2), ("c", 3)]

    def test_newest_returns_most_recent_first(self) -> None:
        fifo: BoundedFifo[int, str] = BoundedFifo(5)
        for i in range(4):
            fifo.put(i, f"v{i}")

        assert fifo.newest(2) == ["v3", "v2"]
        assert fifo.newest(10) == ["v3", "v2", "v1", "v0"]

    def test_clear_empties(self) -> None:
        fifo: BoundedFifo[str, int] = BoundedFifo(2)
        fifo.put("a", 1)
        fifo.clear()
        assert len(fifo) == 0
        assert fifo.get("a") is None
