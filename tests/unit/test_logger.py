"""Unit tests for logging infrastructure."""

import json
import logging
import sys

import pytest

from fridgepal.utils.logger import JSONFormatter, RichTextFormatter, get_logger, logger, request_context


def make_record(msg="Test message", level=logging.INFO, name="test_logger", exc_info=None):
    return logging.LogRecord(
        name=name,
        level=level,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


@pytest.fixture
def fresh_logger_name():
    """Unique logger name whose handlers are removed after the test."""
    name = "fridgepal_test_logger"
    logging.getLogger(name).handlers.clear()
    yield name
    logging.getLogger(name).handlers.clear()


class TestRequestContext:
    """Test extraction of request context extras."""

    def test_only_present_fields_in_order(self):
        """Test that missing extras are skipped and order follows CONTEXT_FIELDS."""
        record = make_record()
        record.attempt = 2
        record.request_id = "req-9"

        assert list(request_context(record).items()) == [("request_id", "req-9"), ("attempt", 2)]

    def test_no_extras(self):
        """Test a plain record."""
        assert request_context(make_record()) == {}


class TestJSONFormatter:
    """Test JSONFormatter produces valid JSON output."""

    def test_json_formatter_outputs_valid_json(self):
        """Test that JSONFormatter produces valid JSON."""
        parsed = json.loads(JSONFormatter().format(make_record()))

        assert parsed["level"] == "INFO"
        assert parsed["logger"] == "test_logger"
        assert parsed["message"] == "Test message"
        assert "timestamp" in parsed

    def test_json_formatter_includes_exception_traceback(self):
        """Test that JSONFormatter includes exception traceback when present."""
        try:
            raise ValueError("Test error")
        except ValueError:
            record = make_record("Error occurred", logging.ERROR, exc_info=sys.exc_info())

        parsed = json.loads(JSONFormatter().format(record))

        assert "ValueError" in parsed["exception"]

    def test_json_formatter_includes_retry_context(self):
        """Test that request_id and attempt extras are copied into the JSON."""
        record = make_record()
        record.request_id = "req-123"
        record.attempt = 2

        parsed = json.loads(JSONFormatter().format(record))

        assert parsed["request_id"] == "req-123"
        assert parsed["attempt"] == 2

    def test_json_formatter_omits_missing_context(self):
        """Test that absent extras do not appear as keys."""
        parsed = json.loads(JSONFormatter().format(make_record()))

        assert "request_id" not in parsed
        assert "attempt" not in parsed


class TestRichTextFormatter:
    """Test RichTextFormatter produces colored text output."""

    def test_rich_text_formatter_includes_level_logger_and_message(self):
        """Test that the level, logger name and message all appear."""
        output = RichTextFormatter().format(make_record("Custom message", name="my_logger"))

        assert "INFO" in output
        assert "my_logger" in output
        assert "Custom message" in output

    def test_rich_text_formatter_includes_icon_per_level(self):
        """Test that each level gets its icon."""
        formatter = RichTextFormatter()

        for level, icon in RichTextFormatter.ICONS.items():
            output = formatter.format(make_record(level=getattr(logging, level)))
            assert icon in output

    def test_rich_text_formatter_appends_context(self):
        """Test that context extras are rendered as a key=value suffix."""
        record = make_record()
        record.request_id = "abc"
        record.attempt = 3

        output = RichTextFormatter().format(record)

        assert "[request_id=abc attempt=3]" in output

    def test_rich_text_formatter_includes_exception_traceback(self):
        """Test that RichTextFormatter includes exception traceback."""
        try:
            raise RuntimeError("Test error")
        except RuntimeError:
            record = make_record("Error occurred", logging.ERROR, exc_info=sys.exc_info())

        output = RichTextFormatter().format(record)

        assert "RuntimeError" in output
        assert "Test error" in output


class TestGetLogger:
    """Test get_logger function."""

    def test_get_logger_is_idempotent(self, fresh_logger_name):
        """Test that calling twice returns the same logger with one handler."""
        first = get_logger(fresh_logger_name)
        second = get_logger(fresh_logger_name)

        assert first is second
        assert len(second.handlers) == 1

    def test_get_logger_respects_log_level_env(self, monkeypatch, fresh_logger_name):
        """Test that get_logger respects LOG_LEVEL environment variable."""
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        assert get_logger(fresh_logger_name).level == logging.DEBUG

    def test_invalid_log_level_defaults_to_info(self, monkeypatch, fresh_logger_name):
        """Test that invalid LOG_LEVEL defaults to INFO."""
        monkeypatch.setenv("LOG_LEVEL", "INVALID")

        assert get_logger(fresh_logger_name).level == logging.INFO

    def test_log_type_json_selects_json_formatter(self, monkeypatch, fresh_logger_name):
        """Test that LOG_TYPE=json installs JSONFormatter."""
        monkeypatch.setenv("LOG_TYPE", "json")

        handler = get_logger(fresh_logger_name).handlers[0]

        assert isinstance(handler.formatter, JSONFormatter)

    def test_log_type_defaults_to_text(self, monkeypatch, fresh_logger_name):
        """Test that LOG_TYPE defaults to text."""
        monkeypatch.delenv("LOG_TYPE", raising=False)

        handler = get_logger(fresh_logger_name).handlers[0]

        assert isinstance(handler.formatter, RichTextFormatter)


class TestModuleLevelLogger:
    """Test module-level logger instance."""

    def test_logger_is_configured(self):
        """Test that the package logger is named and has a handler."""
        assert isinstance(logger, logging.Logger)
        assert logger.name == "fridgepal"
        assert len(logger.handlers) > 0

    def test_noisy_third_party_loggers_are_quieted(self):
        """Test that SDK and HTTP client loggers are raised to WARNING."""
        assert logging.getLogger("google.genai").level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING
