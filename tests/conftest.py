"""Pytest fixtures for Cipher tests."""

import logging
from collections.abc import Generator

import pytest
import structlog

from cipher.brain import CipherBrain
from cipher.classification.classifier import ProblemClassifier
from cipher.core.config import BrainConfig
from cipher.learning.feedback import FeedbackLoop
from cipher.learning.store import PatternStore
from cipher.ranking.engine import RankingEngine
from cipher.registry.registry import CapabilityRegistry, create_default_registry
from cipher.state.memory import InMemoryStore

from tests.helpers import ManualClock


@pytest.fixture(autouse=True)
def reset_logging_state() -> Generator[None, None, None]:
    """Reset logging and CLI option state before and after each test."""
    import cipher.cli.helpers as cli_helpers

    cli_helpers.reset_logging_state()
    cli_helpers.reset_brain_options()
    structlog.reset_defaults()

    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers[:]
    for handler in original_handlers:
        root_logger.removeHandler(handler)

    yield

    cli_helpers.reset_logging_state()
    cli_helpers.reset_brain_options()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in original_handlers:
        root_logger.addHandler(handler)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def registry(clock: ManualClock) -> CapabilityRegistry:
    return create_default_registry(clock=clock)


@pytest.fixture
def pattern_store() -> PatternStore:
    return PatternStore()


@pytest.fixture
def feedback(
    pattern_store: PatternStore, registry: CapabilityRegistry, clock: ManualClock
) -> FeedbackLoop:
    return FeedbackLoop(pattern_store, registry, clock=clock)


@pytest.fixture
def classifier() -> ProblemClassifier:
    return ProblemClassifier()


@pytest.fixture
def engine(registry: CapabilityRegistry, clock: ManualClock) -> RankingEngine:
    return RankingEngine(registry, clock=clock)


@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def brain(memory_store: InMemoryStore) -> CipherBrain:
    """Brain backed by an in-memory store with a clock advancing 1s per call."""
    from datetime import timedelta

    return CipherBrain(
        BrainConfig(),
        memory_store,
        clock=ManualClock(step=timedelta(seconds=1)),
    )
