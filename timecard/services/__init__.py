"""Services package."""

from timecard.services.notify import (
    EntryNotifier,
    EntrySink,
    GoogleSheetsEntrySink,
    NotificationError,
    NullEntrySink,
)
from timecard.services.storage import (
    ConnectionError,
    CorruptRecordError,
    InMemoryKeyValueStore,
    JsonFileStore,
    KeyValueStore,
    StorageError,
    TrackerStateRepository,
)

__all__ = [
    # Notification services
    "EntryNotifier",
    "EntrySink",
    "GoogleSheetsEntrySink",
    "NotificationError",
    "NullEntrySink",
    # Storage services
    "ConnectionError",
    "CorruptRecordError",
    "InMemoryKeyValueStore",
    "JsonFileStore",
    "KeyValueStore",
    "StorageError",
    "TrackerStateRepository",
]
