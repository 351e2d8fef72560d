"""Services package for the URL filter.

This package provides:
- Length guard for oversized URLs
- UrlFilter orchestration over a compiled rule set
"""

from urlfilter.services.length_guard import (
    REASON_PATH_TOO_LONG,
    REASON_QUERY_TOO_LONG,
    REASON_URL_TOO_LONG,
    LengthGuard,
    LengthGuardConfig,
)
from urlfilter.services.url_filter import (
    REASON_DEFAULT,
    REASON_RULE,
    UrlFilter,
    UrlParts,
    split_url,
)

__all__ = [
    "LengthGuard",
    "LengthGuardConfig",
    "REASON_URL_TOO_LONG",
    "REASON_PATH_TOO_LONG",
    "REASON_QUERY_TOO_LONG",
    "REASON_DEFAULT",
    "REASON_RULE",
    "UrlFilter",
    "UrlParts",
    "split_url",
]
