"""Configuration management using Pydantic Settings."""

from typing import ClassVar

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from activity_report.shared.exceptions import ConfigError

# Singleton instance
_settings: "Settings | None" = None


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # GitHub configuration
    github_token: str
    github_graphql_url: str = "https://api.github.com/graphql"
    tracked_github_users: str = ""  # Comma-separated list

    # Report defaults
    report_since: str = ""  # ISO date, e.g. 2024-01-01
    enrich_reports: bool = False
    lookback_months: int = 1
    plain_title_max_chars: int = 50

    # Application settings
    log_level: str = "INFO"

    # Valid log levels
    VALID_LOG_LEVELS: ClassVar[set[str]] = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        v_upper = v.upper()
        if v_upper not in cls.VALID_LOG_LEVELS:
            raise ConfigError(
                f"Invalid log level: {v}. Must be one of {', '.join(cls.VALID_LOG_LEVELS)}"
            )
        return v_upper

    @field_validator("lookback_months")
    @classmethod
    def validate_lookback_months(cls, v: int) -> int:
        """Validate contribution look-back is within 0-12 months."""
        if not 0 <= v <= 12:
            raise ConfigError(f"Look-back must be between 0 and 12 months, got {v}")
        return v

    @field_validator("plain_title_max_chars")
    @classmethod
    def validate_plain_title_max_chars(cls, v: int) -> int:
        """Validate plain-text title budget (10-500 characters)."""
        if not 10 <= v <= 500:
            raise ConfigError(f"Plain title budget must be 10-500 characters, got {v}")
        return v


def get_settings() -> Settings:
    """Get or create the global Settings instance (cached singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings()  # type: ignore[call-arg]
    return _settings
