"""
Tests for structured logging configuration.
"""

import logging

import structlog
from structlog.contextvars import get_contextvars

from apps.core.logging import (
    REDACTED,
    _add_trace_id,
    _convert_duration_to_nanoseconds,
    _redact_sensitive_fields,
    bind_contextvars,
    clear_contextvars,
    configure_logging,
    get_logger,
)


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_logging_json_format(self):
        """JSON output installs a single stdout handler on the root logger."""
        configure_logging(json_format=True, log_level="INFO")

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.INFO
        assert structlog.is_configured()

    def test_configure_logging_console_format(self):
        """Console output honors the requested level."""
        configure_logging(json_format=False, log_level="DEBUG")

        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        configure_logging(json_format=True, log_level="CHATTY")

        assert logging.getLogger().level == logging.INFO


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger_returns_bound_logger(self):
        logger = get_logger("test.module")
        assert logger is not None

    def test_get_logger_with_none_name(self):
        logger = get_logger(None)
        assert logger is not None


class TestContextVars:
    """Tests for context variable binding."""

    def setup_method(self):
        clear_contextvars()

    def teardown_method(self):
        clear_contextvars()

    def test_bind_contextvars_adds_context(self):
        bind_contextvars(trace_id="abc123", api_key_id=4)

        ctx = get_contextvars()
        assert ctx.get("trace_id") == "abc123"
        assert ctx.get("api_key_id") == 4

    def test_bind_contextvars_with_dotted_keys(self):
        """Dotted keys are passed through unchanged."""
        bind_contextvars(**{"client.ip": "192.0.2.1", "http.method": "GET"})

        ctx = get_contextvars()
        assert ctx.get("client.ip") == "192.0.2.1"
        assert ctx.get("http.method") == "GET"

    def test_clear_contextvars_removes_context(self):
        bind_contextvars(trace_id="abc123")
        clear_contextvars()

        assert get_contextvars().get("trace_id") is None


class TestProcessors:
    """Tests for the custom processors in the chain."""

    def test_correlation_id_renamed_to_trace_id(self):
        event = _add_trace_id(None, "info", {"event": "x", "correlation_id": 123})

        assert event == {"event": "x", "trace_id": "123"}

    def test_duration_ms_converted_to_nanoseconds(self):
        event = _convert_duration_to_nanoseconds(None, "info", {"duration_ms": 150.5})

        assert event == {"duration": 150_500_000}

    def test_sensitive_values_redacted(self):
        event = _redact_sensitive_fields(
            None,
            "info",
            {"event": "x", "api_key": "s3cret", "email": "jan@example.nl", "api_key_id": 4},
        )

        assert event["api_key"] == REDACTED
        assert event["email"] == REDACTED
        assert event["api_key_id"] == 4

    def test_empty_sensitive_values_left_alone(self):
        event = _redact_sensitive_fields(None, "info", {"secret": ""})

        assert event["secret"] == ""


class TestLogOutput:
    """Tests for actual log output."""

    def setup_method(self):
        clear_contextvars()
        configure_logging(json_format=True, log_level="DEBUG")

    def teardown_method(self):
        clear_contextvars()

    def test_event_reaches_stdlib(self, caplog):
        logger = get_logger("test.json_output")

        with caplog.at_level(logging.DEBUG, logger="test.json_output"):
            logger.info("member_lookup_completed", found=True)

        assert len(caplog.records) > 0
        assert "member_lookup_completed" in caplog.text
