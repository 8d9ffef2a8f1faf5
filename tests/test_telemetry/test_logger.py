"""Tests for the SDK's structured logging configuration."""

import json
import logging
import pathlib
from collections.abc import Iterator

import pytest
import structlog

import watchpost.telemetry.logger as logger_module
from watchpost.telemetry import EVENT_CAPTURED, configure_logging, get_logger


@pytest.fixture
def log_dir(tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[pathlib.Path]:
    """Route SDK diagnostics to a temporary JSONL file at DEBUG level."""
    directory = tmp_path / "logs"
    monkeypatch.setattr(logger_module, "_get_log_dir", lambda: directory)
    monkeypatch.setattr(logger_module, "_get_log_level", lambda: "DEBUG")
    monkeypatch.setattr(logger_module, "_get_log_format", lambda: "json")
    structlog.reset_defaults()
    configure_logging()
    yield directory
    sdk_logger = logging.getLogger("watchpost")
    for handler in sdk_logger.handlers:
        handler.close()
    sdk_logger.handlers.clear()
    structlog.reset_defaults()


def _last_entry(directory: pathlib.Path) -> dict:
    lines = (directory / "watchpost.jsonl").read_text(encoding="utf-8").splitlines()
    assert lines
    return json.loads(lines[-1])


class TestLoggerConfiguration:
    """Test logger configuration and setup."""

    def test_get_logger_configures_on_first_call(self) -> None:
        """Test that get_logger configures structlog when needed."""
        structlog.reset_defaults()
        log = get_logger("watchpost.test")
        assert structlog.is_configured()
        assert hasattr(log, "info")
        assert hasattr(log, "warning")

    def test_only_sdk_logger_is_touched(self) -> None:
        """Test that the host's root logger keeps its handlers."""
        root_handlers = list(logging.root.handlers)
        configure_logging()
        assert logging.root.handlers == root_handlers
        assert logging.getLogger("watchpost").propagate is False

    def test_emits_structured_json(self, log_dir: pathlib.Path) -> None:
        """Test that events are written as JSON lines with their fields."""
        log = get_logger("watchpost.capture")
        log.info(EVENT_CAPTURED, event_id="abc", level_name="error")

        entry = _last_entry(log_dir)
        assert entry["event"] == "event_captured"
        assert entry["event_id"] == "abc"
        assert entry["component"] == "capture"
        assert "timestamp" in entry

    def test_timestamp_is_utc(self, log_dir: pathlib.Path) -> None:
        """Test that log entries carry a UTC ISO timestamp."""
        get_logger("watchpost.test").info("tick")
        timestamp = _last_entry(log_dir)["timestamp"]
        assert "T" in timestamp
        assert timestamp.endswith("Z") or timestamp.endswith("+00:00")

    def test_nested_module_component(self, log_dir: pathlib.Path) -> None:
        """Test that the component is the last segment of the logger name."""
        get_logger("watchpost.tracing.tracer").info("transaction_started")
        assert _last_entry(log_dir)["component"] == "tracer"

    def test_plain_stdlib_records_are_rendered(self, log_dir: pathlib.Path) -> None:
        """Test that non-structlog records under watchpost are formatted too."""
        logging.getLogger("watchpost.raw").warning("plain message")
        entry = _last_entry(log_dir)
        assert entry["event"] == "plain message"
        assert entry["component"] == "raw"

    def test_creates_log_directory(self, log_dir: pathlib.Path) -> None:
        """Test that the log directory is created on configuration."""
        assert log_dir.exists()
