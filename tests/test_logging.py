"""Tests for structured logging configuration."""

import json
import logging
import sys

import pytest

from urlfilter.core.config import UrlFilterSettings
from urlfilter.core.logging import (
    LOGGER_NAME,
    ContextFilter,
    JSONFormatter,
    get_log_context,
    get_logger,
    get_logging_config,
    setup_logging,
)
from urlfilter.rules import RuleLoader
from urlfilter.services import UrlFilter


def make_record(msg="Test message", level=logging.INFO, exc_info=None):
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


@pytest.fixture
def reset_package_logger():
    """Undo dictConfig changes to the package logger after a test."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


class TestJSONFormatter:
    """Test JSON formatter for structured logging."""

    def test_basic_json_format(self):
        """Test basic JSON formatting."""
        data = json.loads(JSONFormatter().format(make_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "test"
        assert data["message"] == "Test message"
        assert "timestamp" in data
        assert data["source"]["file"] == "test.py"
        assert data["source"]["line"] == 1

    def test_json_format_with_context(self):
        """Test decision context fields become top-level keys."""
        record = make_record("URL discarded (rule)")
        record.url = "https://example.org/wiki"
        record.matcher = "fast"
        record.rule_ordinal = 3
        record.decision = "denied"
        record.duration_ms = 1.5

        data = json.loads(JSONFormatter().format(record))

        assert data["url"] == "https://example.org/wiki"
        assert data["matcher"] == "fast"
        assert data["rule_ordinal"] == 3
        assert data["decision"] == "denied"
        assert data["duration_ms"] == 1.5
        assert "extra" not in data

    def test_none_context_values_omitted(self):
        """Test defaults added by ContextFilter do not show up."""
        record = make_record()
        ContextFilter().filter(record)

        data = json.loads(JSONFormatter().format(record))

        assert "url" not in data
        assert "rule_ordinal" not in data

    def test_json_format_with_extra_fields(self):
        """Test unknown attributes are grouped under extra."""
        record = make_record("Custom event")
        record.custom_field = "custom_value"
        record.another_field = 42

        data = json.loads(JSONFormatter().format(record))

        assert data["extra"]["custom_field"] == "custom_value"
        assert data["extra"]["another_field"] == 42

    def test_json_format_with_exception(self):
        """Test JSON formatting with exception info."""
        try:
            raise ValueError("Test error")
        except ValueError:
            record = make_record("Error occurred", logging.ERROR, sys.exc_info())

        data = json.loads(JSONFormatter().format(record))

        exception_text = "".join(data["exception"])
        assert "ValueError" in exception_text
        assert "Test error" in exception_text

    def test_json_format_unicode(self):
        """Test non-ASCII URLs are written unescaped."""
        data = json.loads(JSONFormatter().format(make_record("https://例え.jp/パス")))
        assert data["message"] == "https://例え.jp/パス"


class TestContextFilter:
    """Test context filter for adding default fields."""

    def test_adds_default_fields(self):
        """Test that context filter adds every context field."""
        record = make_record()

        assert ContextFilter().filter(record) is True
        for field in JSONFormatter.CONTEXT_FIELDS:
            assert getattr(record, field) is None

    def test_preserves_existing_values(self):
        """Test that context filter preserves existing values."""
        record = make_record()
        record.url = "https://example.org/"
        record.reason = "default"

        ContextFilter().filter(record)

        assert record.url == "https://example.org/"
        assert record.reason == "default"


class TestGetLoggingConfig:
    """Test logging configuration generation."""

    def test_default_text_format(self):
        """Test default text format configuration."""
        config = get_logging_config(UrlFilterSettings(_env_file=None))

        assert "standard" in config["formatters"]
        assert "structured" in config["formatters"]
        assert "json" not in config["formatters"]
        assert config["handlers"]["console"]["formatter"] == "standard"
        assert config["handlers"]["console"]["level"] == "INFO"

    def test_structured_format(self):
        """Test structured format configuration."""
        settings = UrlFilterSettings(_env_file=None, log_format="structured", log_level="debug")
        config = get_logging_config(settings)

        assert config["handlers"]["console"]["formatter"] == "structured"
        assert config["handlers"]["console"]["level"] == "DEBUG"

    def test_json_format(self):
        """Test JSON format configuration."""
        settings = UrlFilterSettings(_env_file=None, log_format="json", log_level="WARNING")
        config = get_logging_config(settings)

        assert "json" in config["formatters"]
        assert config["handlers"]["console"]["formatter"] == "json"
        assert config["loggers"][LOGGER_NAME]["level"] == "WARNING"

    def test_context_filter_added(self):
        """Test that context filter is added to handlers."""
        config = get_logging_config(UrlFilterSettings(_env_file=None))

        assert "context" in config["filters"]
        assert "context" in config["handlers"]["console"]["filters"]

    def test_reads_environment_by_default(self, monkeypatch):
        """Test settings come from the environment when none are passed."""
        monkeypatch.setenv("URLFILTER_LOG_FORMAT", "json")
        monkeypatch.chdir("/")
        config = get_logging_config()
        assert config["handlers"]["console"]["formatter"] == "json"


class TestGetLogger:
    """Test get_logger function."""

    def test_get_logger_default_name(self):
        """Test getting logger with default name."""
        assert get_logger().name == "urlfilter"

    def test_get_logger_custom_name(self):
        """Test getting logger with custom name."""
        assert get_logger("custom.module").name == "custom.module"


class TestGetLogContext:
    """Test get_log_context helper function."""

    def test_basic_context(self):
        """Test creating basic log context."""
        context = get_log_context(url="https://a.org/", matcher="regex", rule_ordinal=0)

        assert context == {"url": "https://a.org/", "matcher": "regex", "rule_ordinal": 0}

    def test_context_filters_none(self):
        """Test that None values are filtered out."""
        context = get_log_context(url="https://a.org/", decision=None, reason="default")

        assert "decision" not in context
        assert context["reason"] == "default"

    def test_context_with_extra(self):
        """Test context with extra custom fields."""
        context = get_log_context(url="https://a.org/", rule_line=7, duration_ms=0.2)

        assert context["rule_line"] == 7
        assert context["duration_ms"] == 0.2


class TestInjectedLoggers:
    """Loggers handed to components receive their records."""

    def test_filter_decisions_logged_with_context(self, caplog):
        """Test decision records carry the matched rule."""
        logger = logging.getLogger("tests.filter.injected")
        caplog.set_level(logging.DEBUG, logger=logger.name)
        url_filter = UrlFilter.from_rules_text("+keep\n-", logger=logger)

        url_filter.evaluate("https://example.org/drop")

        records = [r for r in caplog.records if getattr(r, "decision", None) == "denied"]
        assert len(records) == 1
        assert records[0].name == logger.name
        assert records[0].rule_ordinal == 1
        assert records[0].rule_line == 2
        assert records[0].url == "https://example.org/drop"

    def test_two_filters_log_independently(self, caplog):
        """Test two filters with different loggers do not share records."""
        first = logging.getLogger("tests.filter.first")
        second = logging.getLogger("tests.filter.second")
        caplog.set_level(logging.WARNING, logger=second.name)
        caplog.set_level(logging.DEBUG, logger=first.name)

        UrlFilter.from_rules_text("+", logger=first).evaluate("https://a.org/")
        UrlFilter.from_rules_text("+", logger=second).evaluate("https://a.org/")

        names = {r.name for r in caplog.records}
        assert first.name in names
        assert second.name not in names

    def test_loader_uses_package_logger_by_default(self):
        """Test components default to loggers under the package name."""
        assert RuleLoader().logger.name.startswith(LOGGER_NAME)


class TestIntegration:
    """Integration tests for logging system."""

    def test_json_logging_output(self, capsys, reset_package_logger):
        """Test actual JSON logging output on stderr."""
        settings = UrlFilterSettings(_env_file=None, log_format="json", log_level="INFO")
        setup_logging(settings)
        logger = get_logger("urlfilter.integration")

        logger.info(
            "Integration test",
            extra=get_log_context(url="https://example.org/", matcher="fast", reason="rule"),
        )

        output = capsys.readouterr().err
        data = json.loads(output.strip().splitlines()[-1])

        assert data["level"] == "INFO"
        assert data["logger"] == "urlfilter.integration"
        assert data["message"] == "Integration test"
        assert data["url"] == "https://example.org/"
        assert data["matcher"] == "fast"
        assert data["reason"] == "rule"
