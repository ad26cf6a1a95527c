"""
Configuration settings for the MatchPulse live-score polling core.
Uses pydantic-settings for validation and environment variable loading.
"""

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PollingIntervals(BaseSettings):
    """
    Polling cadence tiers (milliseconds unless noted).

    Live tiers tighten as a match approaches added time; the background
    multiplier slows every task that opted into it while the app is not
    in the foreground.
    """

    # Live match tiers
    live_critical_ms: int = 15_000    # 85+ minutes, critical moments
    live_important_ms: int = 20_000   # 75-84 minutes
    live_active_ms: int = 30_000      # Normal live match
    live_halftime_ms: int = 120_000   # Halftime break

    # Pre-match
    match_not_started_ms: int = 60_000

    # List screens
    live_list_ms: int = 30_000        # Live matches list
    today_fixtures_ms: int = 60_000   # Today's fixtures

    # Background mode - slower, never stopped
    background_multiplier: int = 3

    # Minute thresholds for the live tiers
    critical_minute: int = 85
    important_minute: int = 75

    @field_validator(
        "live_critical_ms",
        "live_important_ms",
        "live_active_ms",
        "live_halftime_ms",
        "match_not_started_ms",
        "live_list_ms",
        "today_fixtures_ms",
    )
    @classmethod
    def _positive_interval(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("polling interval must be positive")
        return value

    @field_validator("background_multiplier")
    @classmethod
    def _multiplier_slows_down(cls, value: int) -> int:
        if value < 1:
            raise ValueError("background multiplier must be >= 1")
        return value

    @model_validator(mode="after")
    def _thresholds_ordered(self) -> "PollingIntervals":
        if self.important_minute > self.critical_minute:
            raise ValueError("important_minute must not exceed critical_minute")
        return self


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore"
    )

    # Debug settings
    debug: bool = False
    log_level: str = "INFO"
    json_logs: bool = False

    # Sub-settings
    polling: PollingIntervals = Field(default_factory=PollingIntervals)


# Global settings instance
settings = Settings()
