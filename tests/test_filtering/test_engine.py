"""Tests for the admission filter."""

import asyncio

from watchpost.config.models import FilterRules, TracingOptions
from watchpost.filtering.engine import FilterEngine, exception_type_name


class PaymentDeclinedError(Exception):
    """Application error used as a filter target."""


class TestExceptionTypeName:
    """Test qualified exception names."""

    def test_builtin_uses_bare_name(self) -> None:
        """Test that builtin exceptions are named without a module."""
        assert exception_type_name(ValueError("x")) == "ValueError"

    def test_other_exceptions_are_qualified(self) -> None:
        """Test that non-builtin exceptions carry their module."""
        name = exception_type_name(PaymentDeclinedError())
        assert name.endswith(".PaymentDeclinedError")
        assert name != "PaymentDeclinedError"


class TestExceptionFiltering:
    """Test exception admission."""

    def test_default_rules_ignore_cancellation(self) -> None:
        """Test that asyncio cancellation is ignored via its package alias."""
        engine = FilterEngine(FilterRules())
        assert engine.should_capture_exception(asyncio.CancelledError()) is False
        assert engine.should_capture_exception(KeyboardInterrupt()) is False

    def test_regular_exception_is_admitted(self) -> None:
        """Test that an unrelated exception passes."""
        engine = FilterEngine(FilterRules())
        assert engine.should_capture_exception(RuntimeError("boom")) is True

    def test_ignore_by_bare_class_name(self) -> None:
        """Test that an ignore rule may name only the class."""
        engine = FilterEngine(FilterRules(ignore_exception_types=["PaymentDeclinedError"]))
        assert engine.should_capture_exception(PaymentDeclinedError()) is False

    def test_ignore_by_message_pattern(self) -> None:
        """Test that an exception message matching an ignore pattern is rejected."""
        engine = FilterEngine(FilterRules(ignore_messages=["*connection reset*"]))
        assert engine.should_capture_exception(OSError("Connection reset by peer")) is False
        assert engine.should_capture_exception(OSError("disk full")) is True


class TestMessageAndStatusFiltering:
    """Test message and HTTP status admission."""

    def test_ignored_status_code_rejects_message(self) -> None:
        """Test that a 404 is filtered while a 500 is admitted."""
        engine = FilterEngine(FilterRules())
        assert engine.should_capture_message("not found", status_code=404) is False
        assert engine.should_capture_message("server error", status_code=500) is True

    def test_should_capture_status_code(self) -> None:
        """Test that only non-ignored error statuses warrant an event."""
        engine = FilterEngine(FilterRules())
        assert engine.should_capture_status_code(200) is False
        assert engine.should_capture_status_code(404) is False
        assert engine.should_capture_status_code(500) is True

    def test_ignored_message_pattern(self) -> None:
        """Test that a message matching a pattern is rejected."""
        engine = FilterEngine(FilterRules(ignore_messages=["heartbeat*"]))
        assert engine.should_capture_message("Heartbeat ok") is False


class TestRequestAndTransactionFiltering:
    """Test request and transaction exclusion."""

    def test_ignored_url(self) -> None:
        """Test that a request to an ignored URL is excluded."""
        engine = FilterEngine(FilterRules(ignore_urls=["/internal/*"]))
        assert engine.should_ignore_request("/internal/metrics") is True
        assert engine.should_ignore_request("/orders") is False

    def test_health_check_user_agent_is_ignored(self) -> None:
        """Test that load balancer health checks are excluded by default."""
        engine = FilterEngine(FilterRules())
        assert engine.should_ignore_request("/orders", "kube-probe/1.29") is True
        assert engine.should_ignore_request("/orders", "Mozilla/5.0") is False
        assert engine.should_ignore_request("/orders", None) is False

    def test_health_transactions_are_ignored(self) -> None:
        """Test that health endpoints are excluded from tracing by default."""
        engine = FilterEngine(FilterRules(), TracingOptions())
        assert engine.should_ignore_transaction("/health/live") is True
        assert engine.should_ignore_transaction("GET /orders") is False

    def test_ignored_transaction_pattern(self) -> None:
        """Test that a configured transaction pattern is excluded."""
        engine = FilterEngine(FilterRules(), TracingOptions(ignore_transactions=["cron.*"]))
        assert engine.should_ignore_transaction("cron.cleanup") is True
