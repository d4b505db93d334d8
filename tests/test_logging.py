"""Tests for cipher.core.logging module."""

from __future__ import annotations

import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest
import structlog

from cipher.brain import CipherBrain
from cipher.core.config import LogConfig
from cipher.core.logging import (
    SENSITIVE_PATTERNS,
    CipherLogger,
    OrchestrationContext,
    _add_context,
    _sanitize_event_dict,
    _sanitize_value,
    configure_logging,
    get_current_context,
    get_logger,
    with_context,
)
from cipher.state.json_store import JsonFileStore
from cipher.state.memory import InMemoryStore
from cipher.state.snapshot import StatePersistence
from tests.helpers import SIMPLE_FIX_CODE


class CapturingHandler(logging.Handler):
    """Collects rendered log messages."""

    def __init__(self) -> None:
        super().__init__()
        self.messages: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.messages.append(record.getMessage())

    def entries(self) -> list[dict]:
        return [json.loads(message) for message in self.messages]


@pytest.fixture
def captured() -> CapturingHandler:
    """JSON logging at DEBUG with a capturing handler on the root logger."""
    configure_logging(level="DEBUG", format="json", include_timestamps=False)
    handler = CapturingHandler()
    logging.getLogger().addHandler(handler)
    return handler


class TestSensitivePatterns:
    """Tests for sensitive field detection and sanitization."""

    def test_known_sensitive_patterns(self):
        """Test that common sensitive patterns are included."""
        assert "api_key" in SENSITIVE_PATTERNS
        assert "token" in SENSITIVE_PATTERNS
        assert "password" in SENSITIVE_PATTERNS

    def test_sanitize_value_redacts_compound_keys(self):
        """Test that key names containing a sensitive pattern are redacted."""
        assert _sanitize_value("GITHUB_TOKEN", "abc") == "[REDACTED]"
        assert _sanitize_value("db_password", "hunter2") == "[REDACTED]"

    def test_sanitize_value_preserves_safe_values(self):
        """Test that routing fields pass through."""
        assert _sanitize_value("handler", "quick_file_fix") == "quick_file_fix"
        assert _sanitize_value("confidence", 0.8) == 0.8

    def test_sanitize_event_dict_handles_nested_dicts(self):
        """Test that nested dicts are sanitized one level deep."""
        event_dict = {
            "event": "outcome_recorded",
            "context": {"api_key": "sk-1", "file_name": "a.ts"},
        }
        result = _sanitize_event_dict(None, "info", event_dict)

        assert result["context"]["api_key"] == "[REDACTED]"
        assert result["context"]["file_name"] == "a.ts"


class TestCipherLogger:
    """Tests for the CipherLogger wrapper."""

    def test_get_logger_creates_cipher_logger(self):
        """Test that get_logger returns a component-bound CipherLogger."""
        logger = get_logger("classifier")
        assert isinstance(logger, CipherLogger)
        assert logger.component == "classifier"

    def test_initial_context_is_bound(self):
        """Test that get_logger keeps initial context next to the component."""
        logger = get_logger("ranking", handler="zip_file")
        assert logger._context == {"component": "ranking", "handler": "zip_file"}


class TestConfigureLogging:
    """Tests for the configure_logging function."""

    def test_configure_sets_log_level(self):
        """Test that the root logger level follows the configured level."""
        configure_logging(level="DEBUG", format="console")
        assert logging.getLogger().level == logging.DEBUG

    def test_configure_with_file_path(self, tmp_path: Path):
        """Test that format='both' creates the log directory and a rotating file handler."""
        log_file = tmp_path / "logs" / "cipher.log"

        configure_logging(level="INFO", format="both", file_path=log_file)

        assert log_file.parent.exists()
        file_handlers = [
            h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)
        ]
        assert [Path(h.baseFilename) for h in file_handlers] == [log_file]

    def test_configure_both_requires_file_path(self):
        """Test that format='both' requires file_path."""
        with pytest.raises(ValueError, match="file_path is required"):
            configure_logging(level="INFO", format="both", file_path=None)

    def test_configure_removes_existing_handlers(self):
        """Test that configure_logging replaces root handlers."""
        root_logger = logging.getLogger()
        existing_handler = logging.StreamHandler()
        root_logger.addHandler(existing_handler)

        configure_logging(level="INFO", format="console")

        assert existing_handler not in root_logger.handlers
        assert len(root_logger.handlers) == 1

    def test_json_entries_include_component(self, captured: CapturingHandler):
        """Test that rendered entries carry the event and component fields."""
        get_logger("registry").info("handler_registered", handler="zip_file")

        (entry,) = captured.entries()
        assert entry["event"] == "handler_registered"
        assert entry["component"] == "registry"
        assert entry["handler"] == "zip_file"
        assert entry["level"] == "info"

    def test_level_filters_entries(self):
        """Test that entries below the configured level are dropped."""
        configure_logging(level="WARNING", format="json")
        handler = CapturingHandler()
        logging.getLogger().addHandler(handler)

        logger = get_logger("brain")
        logger.info("ignored")
        logger.warning("kept")

        assert [e["event"] for e in handler.entries()] == ["kept"]


class TestLogConfigModel:
    """Tests for the LogConfig pydantic model."""

    def test_default_values(self):
        """Test LogConfig default values."""
        config = LogConfig()

        assert config.level == "WARNING"
        assert config.format == "console"
        assert config.file_path is None
        assert config.max_file_size_mb == 10
        assert config.backup_count == 3

    def test_both_requires_file_path(self):
        """Test that format='both' without a file path is rejected."""
        with pytest.raises(ValueError, match="file_path is required"):
            LogConfig(format="both")

    def test_level_validation(self):
        """Test that unknown levels are rejected."""
        with pytest.raises(ValueError):
            LogConfig(level="TRACE")  # type: ignore[arg-type]


class TestOrchestrationContext:
    """Tests for context correlation across one brain call."""

    def test_new_request_keeps_session(self):
        """Test that new_request changes only the request id."""
        ctx = OrchestrationContext(session_id="cli", component="brain")
        sibling = ctx.new_request()

        assert sibling.session_id == "cli"
        assert sibling.component == "brain"
        assert sibling.request_id != ctx.request_id

    def test_with_context_sets_and_restores(self):
        """Test that with_context restores the previous context on exit."""
        with with_context(OrchestrationContext(session_id="outer")) as outer:
            with with_context(OrchestrationContext(session_id="inner")) as inner:
                assert get_current_context() is inner

            assert get_current_context() is outer

        assert get_current_context() is None

    def test_with_context_restores_on_exception(self):
        """Test that context is reset even when the block raises."""
        with pytest.raises(RuntimeError):
            with with_context(OrchestrationContext(session_id="s")):
                raise RuntimeError("boom")
        assert get_current_context() is None

    def test_add_context_preserves_explicit_values(self):
        """Test that explicit event fields take precedence over context fields."""
        with with_context(OrchestrationContext(session_id="s1", component="ctx-component")):
            result = _add_context(None, "info", {"event": "x", "component": "explicit"})

        assert result["component"] == "explicit"
        assert result["session_id"] == "s1"
        assert "request_id" in result

    def test_add_context_without_context(self):
        """Test that _add_context leaves the event unchanged with no context."""
        assert _add_context(None, "info", {"event": "x"}) == {"event": "x"}


class TestBrainLogging:
    """Brain operations emit correlated structured events."""

    def test_orchestration_logged_with_session(self, captured: CapturingHandler):
        """Test that a routing decision is logged with session and request ids."""
        brain = CipherBrain(store=InMemoryStore())
        brain.orchestrate(SIMPLE_FIX_CODE, "src/a.ts")

        decided = [e for e in captured.entries() if e["event"] == "orchestration_decided"]
        assert len(decided) == 1
        entry = decided[0]
        assert entry["component"] == "orchestrator"
        assert entry["problem_type"] == "simple-fix"
        assert entry["primary"] == "auto_fix_current_file"
        assert entry["session_id"]
        assert entry["request_id"]

    def test_outcome_logged(self, captured: CapturingHandler):
        """Test that recorded outcomes are logged at info level."""
        brain = CipherBrain(store=InMemoryStore())
        brain.record_outcome("quick_file_fix", "auto-fix", False)

        (entry,) = [e for e in captured.entries() if e["event"] == "outcome_recorded"]
        assert entry["handler"] == "quick_file_fix"
        assert entry["result"] == "failure"
        assert entry["mode"] == "adaptive"

    def test_failed_save_logged_as_error(self, captured: CapturingHandler, tmp_path: Path):
        """Test that a state section that cannot be written is logged at error level."""
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        persistence = StatePersistence(JsonFileStore(blocker / "brain.json"))

        assert persistence.save_section("learning_state", {"a": 1}) is False

        (entry,) = [e for e in captured.entries() if e["event"] == "state_save_failed"]
        assert entry["level"] == "error"
        assert entry["key"] == "learning_state"

    def test_unconfigured_logging_still_routes(self):
        """Test that default structlog config does not break brain calls."""
        structlog.reset_defaults()
        brain = CipherBrain(store=InMemoryStore())
        result = brain.orchestrate(SIMPLE_FIX_CODE, "src/a.ts")
        assert result.primary_handler == "auto_fix_current_file"
