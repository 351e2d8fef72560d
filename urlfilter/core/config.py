from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class UrlFilterSettings(BaseSettings):
    """URL filter settings loaded from environment variables.

    All settings can be configured via ``URLFILTER_*`` environment variables
    or a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="URLFILTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Rule source. Inline rules take precedence over the file.
    rules: str | None = None
    rules_file: str | None = None

    # Matcher back-end
    matcher: Literal["regex", "fast"] = "regex"
    regex_dotall: bool = False  # Only used by the regex back-end

    # Length limits (None = unlimited)
    max_url_length: int | None = None
    max_path_length: int | None = None
    max_query_length: int | None = None

    # Decision when no rule matches. False keeps the legacy deny behaviour.
    default_accept: bool = False

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "text"  # text | structured | json

    @field_validator("max_url_length", "max_path_length", "max_query_length")
    @classmethod
    def validate_length_positive(cls, v: int | None) -> int | None:
        """Validate length limits are positive when set."""
        if v is not None and v < 1:
            raise ValueError("length limits must be at least 1")
        return v

    @field_validator("matcher", mode="before")
    @classmethod
    def normalize_matcher(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("text", "structured", "json"):
            raise ValueError("log_format must be one of: text, structured, json")
        return v

    @field_validator("rules", "rules_file", mode="before")
    @classmethod
    def empty_as_none(cls, v: object) -> object:
        # URLFILTER_RULES="" means "not configured"
        if isinstance(v, str) and not v.strip():
            return None
        return v


def get_settings() -> UrlFilterSettings:
    """Build settings from the current environment."""
    return UrlFilterSettings()
