"""
Notification Sink Interface

A sink receives each newly created entry exactly once, best-effort.
The tracker never reads anything back from it.
"""

from abc import ABC, abstractmethod

from timecard.models.entry import Entry


class EntrySink(ABC):
    """Abstract destination for new entries."""

    @abstractmethod
    def push(self, entry: Entry) -> None:
        """
        Deliver one entry.

        Raises:
            NotificationError: If delivery fails
        """
        pass


class NullEntrySink(EntrySink):
    """Sink used when notifications are disabled."""

    def push(self, entry: Entry) -> None:
        return None


class NotificationError(Exception):
    """Base exception for notification delivery."""
    pass


class SinkConfigurationError(NotificationError):
    """The sink is misconfigured (missing credentials, unknown sheet). Not retried."""
    pass
