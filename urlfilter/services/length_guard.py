"""Length-based rejection of oversized URLs.

Runs before any rule is evaluated and bounds the worst-case cost of a single
filter call.
"""

from dataclasses import dataclass
from typing import Optional

from urlfilter.core.config import UrlFilterSettings

REASON_URL_TOO_LONG = "url_too_long"
REASON_PATH_TOO_LONG = "path_too_long"
REASON_QUERY_TOO_LONG = "query_too_long"


@dataclass(frozen=True)
class LengthGuardConfig:
    """Length limits; None means unlimited for that dimension."""
    max_url_length: Optional[int] = None
    max_path_length: Optional[int] = None
    max_query_length: Optional[int] = None

    def __post_init__(self):
        for name in ("max_url_length", "max_path_length", "max_query_length"):
            value = getattr(self, name)
            if value is not None and value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value}")

    @classmethod
    def from_settings(cls, settings: UrlFilterSettings) -> "LengthGuardConfig":
        return cls(
            max_url_length=settings.max_url_length,
            max_path_length=settings.max_path_length,
            max_query_length=settings.max_query_length,
        )

    @property
    def enabled(self) -> bool:
        return any(
            v is not None
            for v in (self.max_url_length, self.max_path_length, self.max_query_length)
        )


class LengthGuard:
    """Checks URL, path and query lengths against independent limits."""

    def __init__(self, config: LengthGuardConfig | None = None):
        self.config = config or LengthGuardConfig()

    def check(self, full_length: int, path_length: int, query_length: int) -> Optional[str]:
        """Check lengths in order: full URL, path, query.

        Returns:
            Rejection reason, or None if the URL may proceed to the rules
        """
        config = self.config
        if config.max_url_length is not None and full_length > config.max_url_length:
            return REASON_URL_TOO_LONG
        if config.max_path_length is not None and path_length > config.max_path_length:
            return REASON_PATH_TOO_LONG
        if config.max_query_length is not None and query_length > config.max_query_length:
            return REASON_QUERY_TOO_LONG
        return None
