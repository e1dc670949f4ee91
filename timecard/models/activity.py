"""
Activity Models for Timecard

Every change to the ledger or the archive produces an ActivityEvent.
Events are written to the structured log so the history of a period can
be reconstructed when a total looks wrong.

DESIGN DECISION: Events are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class ActivityEventType(str, Enum):
    """Types of events we record."""
    # Ledger
    ENTRY_ADDED = "entry_added"
    ENTRY_EDITED = "entry_edited"
    ENTRY_DELETED = "entry_deleted"
    ENTRY_REJECTED = "entry_rejected"

    # Rollover
    PERIOD_ADOPTED = "period_adopted"
    PERIOD_SEALED = "period_sealed"

    # Storage
    RECORD_RECOVERED = "record_recovered"
    SAVE_FAILED = "save_failed"

    # Notifications
    NOTIFICATION_SENT = "notification_sent"
    NOTIFICATION_FAILED = "notification_failed"


class ActivitySeverity(str, Enum):
    """Severity level for activity events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ActivityEvent(BaseModel):
    """A single recorded action."""

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )
    event_type: ActivityEventType
    severity: ActivitySeverity = ActivitySeverity.INFO

    # Which entry or period this is about
    entry_id: Optional[int] = None
    period: Optional[str] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entry_id": self.entry_id,
            "period": self.period,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }
