"""
Notification Services Package

Mirrors newly created entries to an external sink, fire-and-forget.
"""

from timecard.services.notify.interface import (
    EntrySink,
    NotificationError,
    NullEntrySink,
    SinkConfigurationError,
)
from timecard.services.notify.google_sheets import (
    ENTRY_COLUMNS,
    GoogleSheetsClient,
    GoogleSheetsEntrySink,
    entry_to_row,
)
from timecard.services.notify.notifier import EntryNotifier

__all__ = [
    # Interface
    "EntrySink",
    "NotificationError",
    "NullEntrySink",
    "SinkConfigurationError",
    # Google Sheets implementation
    "ENTRY_COLUMNS",
    "GoogleSheetsClient",
    "GoogleSheetsEntrySink",
    "entry_to_row",
    # Dispatch
    "EntryNotifier",
]
