"""Structured logging configuration for the URL filter.

This module provides a structured logging setup using Python's standard
logging module with JSON formatting for production environments. Loggers are
handed to the loader, matcher factories and filters explicitly, so several
filter instances can log with different configurations side by side.
"""

import json
import logging
import logging.config
import sys
import traceback
from datetime import datetime
from typing import Any, Dict, Optional

from urlfilter.core.config import UrlFilterSettings

LOGGER_NAME = "urlfilter"


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Outputs log records as JSON objects for consumption by log aggregation
    systems.

    Attributes:
        fields: List of fields to include in JSON output
    """

    STANDARD_FIELDS = ["name", "levelname", "message", "timestamp"]

    # Contextual fields for filter decisions
    CONTEXT_FIELDS = [
        "url",           # URL being evaluated
        "matcher",       # Matcher back-end (regex, fast)
        "rule_ordinal",  # Ordinal of the deciding rule
        "rule_line",     # Source line of the deciding rule
        "decision",      # allowed | denied | no_rule_matched
        "reason",        # Why the decision was taken
        "rule_count",    # Size of a compiled rule set
        "duration_ms",   # Elapsed time in milliseconds
    ]

    _RECORD_ATTRS = frozenset((
        "name", "msg", "args", "levelname", "levelno", "pathname",
        "filename", "module", "exc_info", "exc_text", "stack_info",
        "lineno", "funcName", "created", "msecs", "relativeCreated",
        "thread", "threadName", "processName", "process", "message",
        "asctime", "timestamp", "logger", "level", "source", "taskName",
    ))

    def __init__(
        self,
        fields: Optional[list] = None,
        datefmt: Optional[str] = None,
    ):
        """Initialize JSON formatter.

        Args:
            fields: Custom fields to include (defaults to all standard + context)
            datefmt: Date format string (ISO8601 by default)
        """
        super().__init__(datefmt=datefmt)
        self.fields = fields or (self.STANDARD_FIELDS + self.CONTEXT_FIELDS)

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {}

        record.message = record.getMessage()

        log_data["timestamp"] = datetime.now().astimezone().isoformat()
        log_data["level"] = record.levelname
        log_data["logger"] = record.name
        log_data["message"] = record.message

        log_data["source"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
        }

        for field in self.CONTEXT_FIELDS:
            if hasattr(record, field):
                value = getattr(record, field)
                if value is not None:
                    log_data[field] = value

        for key, value in record.__dict__.items():
            if key in self._RECORD_ATTRS or key in self.CONTEXT_FIELDS:
                continue
            log_data.setdefault("extra", {})[key] = value

        if record.exc_info and record.exc_info != (None, None, None):
            log_data["exception"] = traceback.format_exception(*record.exc_info)

        return json.dumps(log_data, default=str, ensure_ascii=False)


class ContextFilter(logging.Filter):
    """Logging filter that adds contextual fields to log records.

    Adds default values for url, matcher, rule_ordinal and the other
    contextual fields if not already present in the log record.
    """

    CONTEXT_DEFAULTS = {field: None for field in JSONFormatter.CONTEXT_FIELDS}

    def filter(self, record: logging.LogRecord) -> bool:
        for field, default in self.CONTEXT_DEFAULTS.items():
            if not hasattr(record, field):
                setattr(record, field, default)
        return True


def get_logging_config(settings: UrlFilterSettings | None = None) -> Dict[str, Any]:
    """Get logging configuration dictionary.

    Args:
        settings: Settings to read log level and format from

    Returns:
        Logging configuration dict compatible with logging.config.dictConfig
    """
    settings = settings or UrlFilterSettings()
    log_format = settings.log_format.lower()
    log_level = settings.log_level.upper()

    formatters: Dict[str, Any] = {
        "standard": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        },
        "structured": {
            "format": (
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
                " - matcher=%(matcher)s - rule_ordinal=%(rule_ordinal)s"
                " - reason=%(reason)s"
            )
        },
    }

    if log_format == "json":
        formatters["json"] = {
            "()": "urlfilter.core.logging.JSONFormatter",
        }
        default_formatter = "json"
    else:
        default_formatter = "structured" if log_format == "structured" else "standard"

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": {
            "context": {
                "()": "urlfilter.core.logging.ContextFilter",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": log_level,
                "formatter": default_formatter,
                "stream": sys.stderr,
                "filters": ["context"],
            },
        },
        "loggers": {
            LOGGER_NAME: {
                "level": log_level,
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }


def setup_logging(settings: UrlFilterSettings | None = None) -> None:
    """Configure logging for an application embedding the filter."""
    logging.config.dictConfig(get_logging_config(settings))


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Get a logger instance with the specified name.

    Args:
        name: Logger name, defaults to "urlfilter"

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def get_log_context(
    url: Optional[str] = None,
    matcher: Optional[str] = None,
    rule_ordinal: Optional[int] = None,
    decision: Optional[str] = None,
    reason: Optional[str] = None,
    **extra,
) -> Dict[str, Any]:
    """Create a log context dictionary for use with the extra parameter.

    Example:
        >>> logger.debug(
        ...     "URL denied",
        ...     extra=get_log_context(url=url, rule_ordinal=3, decision="denied"),
        ... )
    """
    context = {
        "url": url,
        "matcher": matcher,
        "rule_ordinal": rule_ordinal,
        "decision": decision,
        "reason": reason,
    }
    context.update(extra)
    return {k: v for k, v in context.items() if v is not None}
