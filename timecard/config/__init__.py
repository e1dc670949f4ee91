"""Configuration package."""

from timecard.config.settings import (
    GoogleSheetsSettings,
    Settings,
    TrackerSettings,
    UnmarkedEntriesPolicy,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "GoogleSheetsSettings",
    "Settings",
    "TrackerSettings",
    "UnmarkedEntriesPolicy",
    "get_settings",
    "validate_all_settings",
]
