"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the records in a local directory today
2. Use in-memory storage for testing
3. Swap in another key-value backend later
4. Keep the tracker decoupled from where bytes live

The interface is intentionally tiny. The tracker stores three named
records as UTF-8 JSON text and nothing else.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """
    Abstract interface for a text key-value store.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read a record.

        Args:
            key: Record name

        Returns:
            The stored text, or None if the record does not exist

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Write a record, replacing any previous value.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a record. Missing records are ignored."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptRecordError(StorageError):
    """A record exists but does not decode to the expected shape."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Record '{key}' is corrupt: {reason}")


class ConnectionError(StorageError):
    """Could not reach the storage backend."""
    pass
