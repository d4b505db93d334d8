"""Registry of known handlers and their performance statistics.

Provides a central place to register and look up handlers. The
create_default_registry() factory returns a registry with the built-in
handler catalog pre-registered.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import UTC, datetime
from typing import Any

from cipher.core.constants import ANCHOR_HANDLERS
from cipher.core.logging import get_logger
from cipher.registry.models import HandlerCapability

_logger = get_logger("registry")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CapabilityRegistry:
    """Registry of handler capabilities.

    Owns every handler's mutable statistics; other components read handlers
    but change them only through ``record_usage`` and ``record_outcome``.

    Example:
        registry = CapabilityRegistry()
        registry.register(HandlerCapability("quick_file_fix", ...))
        registry.record_usage("quick_file_fix")
    """

    def __init__(
        self,
        *,
        usage_confidence_step: float = 0.01,
        success_rate_gain: float = 0.05,
        success_rate_loss: float = 0.03,
        confidence_gain: float = 0.03,
        confidence_loss: float = 0.02,
        statistics_floor: float = 0.1,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._handlers: dict[str, HandlerCapability] = {}
        self._initial: dict[str, dict[str, Any]] = {}
        self._usage_confidence_step = usage_confidence_step
        self._success_rate_gain = success_rate_gain
        self._success_rate_loss = success_rate_loss
        self._confidence_gain = confidence_gain
        self._confidence_loss = confidence_loss
        self._statistics_floor = statistics_floor
        self._clock = clock

    def register(self, capability: HandlerCapability) -> None:
        """Register a handler, replacing any handler with the same name."""
        if capability.name in self._handlers:
            _logger.debug("handler_replaced", handler=capability.name)
        self._handlers[capability.name] = capability
        self._initial[capability.name] = capability.statistics()

    def get(self, name: str) -> HandlerCapability | None:
        return self._handlers.get(name)

    def all_handlers(self) -> list[HandlerCapability]:
        """Get all registered handlers in registration order."""
        return list(self._handlers.values())

    def count(self) -> int:
        return len(self._handlers)

    def missing_anchors(self) -> list[str]:
        """Anchor handler names that are not registered."""
        return [name for name in ANCHOR_HANDLERS if name not in self._handlers]

    def record_usage(self, name: str, now: datetime | None = None) -> bool:
        """Mark a handler as selected.

        Stamps ``last_used``, bumps ``usage_count`` and raises confidence by a
        small step, saturating at 1.0.

        Returns:
            False if the handler is not registered.
        """
        handler = self._handlers.get(name)
        if handler is None:
            _logger.warning("usage_for_unknown_handler", handler=name)
            return False
        handler.last_used = now or self._clock()
        handler.usage_count += 1
        handler.confidence = min(1.0, (handler.confidence or 0.0) + self._usage_confidence_step)
        return True

    def record_outcome(self, name: str, success: bool, now: datetime | None = None) -> bool:
        """Adjust a handler's success rate and confidence after an outcome.

        Returns:
            False if the handler is not registered.
        """
        handler = self._handlers.get(name)
        if handler is None:
            _logger.debug("outcome_for_unknown_handler", handler=name)
            return False

        confidence = handler.confidence or 0.0
        if success:
            handler.success_rate = min(1.0, handler.success_rate + self._success_rate_gain)
            handler.confidence = min(1.0, confidence + self._confidence_gain)
        else:
            handler.success_rate = max(
                self._statistics_floor, handler.success_rate - self._success_rate_loss
            )
            handler.confidence = max(self._statistics_floor, confidence - self._confidence_loss)
        handler.last_used = now or self._clock()

        _logger.debug(
            "handler_statistics_updated",
            handler=name,
            success=success,
            success_rate=round(handler.success_rate, 3),
            confidence=round(handler.confidence, 3),
        )
        return True

    def most_used(self) -> HandlerCapability | None:
        """Handler with the highest usage count, or None if none was used."""
        used = [h for h in self._handlers.values() if h.usage_count > 0]
        if not used:
            return None
        return max(used, key=lambda h: h.usage_count)

    def snapshot(self) -> dict[str, dict[str, Any]]:
        """Mutable statistics of every handler keyed by name."""
        return {name: handler.statistics() for name, handler in self._handlers.items()}

    def restore(self, data: dict[str, dict[str, Any]]) -> int:
        """Apply persisted statistics; unknown handler names are skipped.

        Returns:
            Number of handlers restored.
        """
        restored = 0
        for name, stats in data.items():
            handler = self._handlers.get(name)
            if handler is None:
                _logger.debug("restore_skipped_unknown_handler", handler=name)
                continue
            try:
                handler.apply_statistics(stats)
            except (TypeError, ValueError) as e:
                _logger.warning("restore_handler_failed", handler=name, error=str(e))
                continue
            restored += 1
        return restored

    def reset_statistics(self) -> None:
        """Return every handler to the statistics it was registered with."""
        for name, stats in self._initial.items():
            self._handlers[name].apply_statistics(stats)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __iter__(self) -> Iterator[HandlerCapability]:
        return iter(list(self._handlers.values()))

    def __len__(self) -> int:
        return len(self._handlers)


def create_default_registry(**kwargs: Any) -> CapabilityRegistry:
    """Create a registry with the built-in handler catalog.

    Keyword arguments are passed to :class:`CapabilityRegistry`.
    """
    from cipher.registry.seeds import DEFAULT_HANDLER_SEEDS

    registry = CapabilityRegistry(**kwargs)
    for seed in DEFAULT_HANDLER_SEEDS:
        registry.register(seed.build())
    return registry
