"""
Storage Services Package

Provides the abstract key-value interface, local implementations, and the
repository that maps tracker state onto named records.
"""

from timecard.services.storage.interface import (
    ConnectionError,
    CorruptRecordError,
    KeyValueStore,
    StorageError,
)
from timecard.services.storage.local import (
    InMemoryKeyValueStore,
    JsonFileStore,
)
from timecard.services.storage.repository import TrackerStateRepository

__all__ = [
    # Interface
    "KeyValueStore",
    # Exceptions
    "ConnectionError",
    "CorruptRecordError",
    "StorageError",
    # Implementations
    "InMemoryKeyValueStore",
    "JsonFileStore",
    "TrackerStateRepository",
]
