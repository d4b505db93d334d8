"""PatternStore: bounded storage for learned patterns, sessions and analyses.

All three collections are FIFO-bounded:
- patterns: ``pattern_capacity`` most recent
- sessions: ``session_capacity`` most recent, one per learning outcome
- analysis cache: ``analysis_capacity`` most recent entries
"""

from __future__ import annotations

import uuid
from collections import deque
from collections.abc import Iterable
from typing import Any

from cipher.core.cache import BoundedFifo
from cipher.core.constants import (
    ANALYSIS_CACHE_CAPACITY,
    PATTERN_STORE_CAPACITY,
    SESSION_HISTORY_CAPACITY,
)
from cipher.core.logging import get_logger
from cipher.learning.models import CacheEntry, LearningPattern, LearningSession

_logger = get_logger("pattern_store")


class PatternStore:
    """Owns learned patterns, learning sessions and the recent-analysis cache."""

    def __init__(
        self,
        pattern_capacity: int = PATTERN_STORE_CAPACITY,
        session_capacity: int = SESSION_HISTORY_CAPACITY,
        analysis_capacity: int = ANALYSIS_CACHE_CAPACITY,
    ) -> None:
        self._patterns: deque[LearningPattern] = deque(maxlen=pattern_capacity)
        self._sessions: BoundedFifo[str, LearningSession] = BoundedFifo(session_capacity)
        self._analysis: BoundedFifo[str, CacheEntry] = BoundedFifo(analysis_capacity)

    # ------------------------------------------------------------------
    # Patterns and sessions
    # ------------------------------------------------------------------

    def add_pattern(self, pattern: LearningPattern) -> None:
        if len(self._patterns) == self._patterns.maxlen:
            _logger.debug("pattern_evicted", learned_from=self._patterns[0].learned_from)
        self._patterns.append(pattern)

    def record_session(
        self, handler_name: str, patterns: Iterable[LearningPattern]
    ) -> LearningSession:
        """Store patterns and group them in a new session for ``handler_name``."""
        session = LearningSession(session_id=uuid.uuid4().hex, handler_name=handler_name)
        for pattern in patterns:
            self.add_pattern(pattern)
            session.patterns.append(pattern)
        evicted = self._sessions.put(session.session_id, session)
        if evicted is not None:
            _logger.debug("session_evicted", session_id=evicted[0])
        return session

    def query(self, tag: str, limit: int | None = None) -> list[LearningPattern]:
        """Patterns matching ``tag``, most confident first."""
        matching = [p for p in self._patterns if p.matches(tag)]
        matching.sort(key=lambda p: p.confidence, reverse=True)
        return matching if limit is None else matching[:limit]

    @property
    def patterns(self) -> list[LearningPattern]:
        return list(self._patterns)

    @property
    def sessions(self) -> list[LearningSession]:
        return self._sessions.values()

    def sessions_for(self, handler_name: str) -> list[LearningSession]:
        return [s for s in self._sessions.values() if s.handler_name == handler_name]

    # ------------------------------------------------------------------
    # Analysis cache
    # ------------------------------------------------------------------

    def cache_analysis(self, entry: CacheEntry) -> str:
        """Add an analysis entry, evicting the oldest past capacity.

        Returns:
            The cache key assigned to the entry.
        """
        key = f"{entry.entry_type}-{uuid.uuid4().hex[:12]}"
        self._analysis.put(key, entry)
        return key

    @property
    def analyses(self) -> list[CacheEntry]:
        return self._analysis.values()

    def analysis_keys(self) -> list[str]:
        return list(self._analysis)

    # ------------------------------------------------------------------
    # Counts, persistence, reset
    # ------------------------------------------------------------------

    def pattern_count(self) -> int:
        return len(self._patterns)

    def session_count(self) -> int:
        return len(self._sessions)

    def analysis_count(self) -> int:
        return len(self._analysis)

    def snapshot(self) -> dict[str, Any]:
        return {
            "patterns": [p.to_dict() for p in self._patterns],
            "sessions": [s.to_dict() for s in self._sessions.values()],
            "analysis_cache": [
                {"key": key, **entry.to_dict()} for key, entry in self._analysis.items()
            ],
        }

    def restore(self, data: dict[str, Any]) -> None:
        """Replace contents with a snapshot. Malformed entries are skipped."""
        patterns: list[LearningPattern] = []
        for raw in data.get("patterns", ()):
            try:
                patterns.append(LearningPattern.from_dict(raw))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                _logger.warning("restore_pattern_skipped", error=str(e))
        sessions: list[LearningSession] = []
        for raw in data.get("sessions", ()):
            try:
                sessions.append(LearningSession.from_dict(raw))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                _logger.warning("restore_session_skipped", error=str(e))
        analyses: list[tuple[str, CacheEntry]] = []
        for raw in data.get("analysis_cache", ()):
            try:
                entry = CacheEntry.from_dict(raw)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                _logger.warning("restore_analysis_skipped", error=str(e))
                continue
            key = raw.get("key") or f"{entry.entry_type}-{uuid.uuid4().hex[:12]}"
            analyses.append((key, entry))

        self.clear()
        self._patterns.extend(patterns)
        for session in sessions:
            self._sessions.put(session.session_id, session)
        for key, entry in analyses:
            self._analysis.put(key, entry)

    def clear(self) -> None:
        self._patterns.clear()
        self._sessions.clear()
        self._analysis.clear()
