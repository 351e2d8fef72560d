"""Core utilities for the URL filter."""

from urlfilter.core.config import UrlFilterSettings, get_settings
from urlfilter.core.logging import get_log_context, get_logger, setup_logging

__all__ = [
    "UrlFilterSettings",
    "get_settings",
    "get_logger",
    "get_log_context",
    "setup_logging",
]
