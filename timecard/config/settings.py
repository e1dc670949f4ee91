"""
Configuration Management for Timecard

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from decimal import Decimal
from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class UnmarkedEntriesPolicy(str, Enum):
    """
    What to do with stored entries when no usable period marker exists.

    Older builds of the tracker disagreed here, so the choice is explicit.
    """
    ADOPT = "adopt"      # Keep them in the newly adopted period
    DISCARD = "discard"  # Treat them as stale and drop them


class TrackerSettings(BaseSettings):
    """
    Main tracker settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="TIMECARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Billing
    default_hourly_rate: Decimal = Field(
        default=Decimal("18"),
        gt=0,
        description="Hourly rate used when a timed entry does not supply one"
    )

    # Persistence
    data_dir: Path = Field(
        default=Path(".timecard"),
        description="Directory holding the JSON records"
    )
    entries_key: str = Field(
        default="entries",
        min_length=1,
        description="Record name for the current period's entries"
    )
    period_key: str = Field(
        default="month",
        min_length=1,
        description="Record name for the current period marker"
    )
    archive_key: str = Field(
        default="archive",
        min_length=1,
        description="Record name for the archive list"
    )

    # Rollover
    unmarked_entries_policy: UnmarkedEntriesPolicy = Field(
        default=UnmarkedEntriesPolicy.ADOPT,
        description="Handling of stored entries that have no period marker"
    )

    # Notifications
    notify_enabled: bool = Field(
        default=False,
        description="Push new entries to Google Sheets"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum log level"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept standard logging level names."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets notification sink configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )
    entries_sheet_name: str = Field(
        default="TimeCards",
        description="Name of the sheet new entries are appended to"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before enabling notifications."
            )
        return v


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily so the tracker runs without Sheets configured

    @property
    def tracker(self) -> TrackerSettings:
        return TrackerSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.tracker
        results["tracker"] = True
    except Exception as e:
        results["tracker"] = False
        results["tracker_error"] = str(e)

    try:
        _ = settings.google_sheets
        results["google_sheets"] = True
    except Exception as e:
        results["google_sheets"] = False
        results["google_sheets_error"] = str(e)

    return results
