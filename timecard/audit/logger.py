"""
Activity Logger

DESIGN DECISION: Every change to the ledger or archive is logged.
This provides:
1. Traceability of every amount that ends up in an archive record
2. Debugging capability when a stored record had to be recovered
3. Visibility into notifications that failed silently

The activity logger:
- Is synchronous, like the rest of the core
- Never raises (logging must not break a write)
"""

import logging
from typing import Optional

import structlog

from timecard.models.activity import (
    ActivityEvent,
    ActivityEventType,
    ActivitySeverity,
)
from timecard.models.entry import Entry, ValidationIssue
from timecard.models.period import ArchiveRecord, Period


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through the stdlib root logger at `level`."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))


class ActivityLogger:
    """
    Central activity logging service.

    Renders ActivityEvents as JSON lines through structlog.
    """

    def __init__(self, logger_name: Optional[str] = None):
        self._logger = structlog.get_logger(logger_name or "timecard")

    def log(self, event: ActivityEvent) -> None:
        """Log an activity event at the level matching its severity."""
        log_dict = event.to_log_dict()

        if event.severity == ActivitySeverity.ERROR:
            self._logger.error("activity_event", **log_dict)
        elif event.severity == ActivitySeverity.WARNING:
            self._logger.warning("activity_event", **log_dict)
        elif event.severity == ActivitySeverity.DEBUG:
            self._logger.debug("activity_event", **log_dict)
        else:
            self._logger.info("activity_event", **log_dict)

    def log_entry_added(self, entry: Entry) -> None:
        self.log(ActivityEvent(
            event_type=ActivityEventType.ENTRY_ADDED,
            entry_id=entry.id,
            description=f"Entry added: {entry.group_key}",
            details={
                "mode": entry.billing.mode,
                "minutes": str(entry.minutes),
                "amount": str(entry.amount),
            },
        ))

    def log_entry_edited(self, before: Entry, after: Entry) -> None:
        self.log(ActivityEvent(
            event_type=ActivityEventType.ENTRY_EDITED,
            entry_id=after.id,
            description=f"Entry edited: {after.group_key}",
            details={
                "old_amount": str(before.amount),
                "new_amount": str(after.amount),
            },
        ))

    def log_entry_deleted(self, entry: Entry) -> None:
        self.log(ActivityEvent(
            event_type=ActivityEventType.ENTRY_DELETED,
            entry_id=entry.id,
            description=f"Entry deleted: {entry.group_key}",
            details={"amount": str(entry.amount)},
        ))

    def log_entry_rejected(self, issues: list[ValidationIssue]) -> None:
        self.log(ActivityEvent(
            event_type=ActivityEventType.ENTRY_REJECTED,
            severity=ActivitySeverity.WARNING,
            description="Entry input rejected",
            details={"issues": [issue.model_dump() for issue in issues]},
        ))

    def log_period_adopted(self, period: Period) -> None:
        self.log(ActivityEvent(
            event_type=ActivityEventType.PERIOD_ADOPTED,
            period=period.label,
            description=f"Current period is now {period.label}",
        ))

    def log_period_sealed(self, record: ArchiveRecord) -> None:
        self.log(ActivityEvent(
            event_type=ActivityEventType.PERIOD_SEALED,
            period=record.period.label,
            description=f"Period sealed: {record.period.label}",
            details={
                "entry_count": record.summary.entry_count,
                "total_minutes": str(record.summary.total_minutes),
                "total_amount": str(record.summary.total_amount),
            },
        ))

    def log_record_recovered(self, key: str, error: str) -> None:
        """A stored record was unreadable and replaced by its empty default."""
        self.log(ActivityEvent(
            event_type=ActivityEventType.RECORD_RECOVERED,
            severity=ActivitySeverity.WARNING,
            description=f"Record '{key}' unreadable, using empty default",
            details={"key": key},
            error_message=error,
        ))

    def log_save_failed(self, key: str, error: str) -> None:
        self.log(ActivityEvent(
            event_type=ActivityEventType.SAVE_FAILED,
            severity=ActivitySeverity.ERROR,
            description=f"Could not write record '{key}'",
            details={"key": key},
            error_message=error,
        ))

    def log_notification_sent(self, entry_id: int) -> None:
        self.log(ActivityEvent(
            event_type=ActivityEventType.NOTIFICATION_SENT,
            severity=ActivitySeverity.DEBUG,
            entry_id=entry_id,
            description="Entry pushed to notification sink",
        ))

    def log_notification_failed(self, entry_id: int, error: str) -> None:
        self.log(ActivityEvent(
            event_type=ActivityEventType.NOTIFICATION_FAILED,
            severity=ActivitySeverity.WARNING,
            entry_id=entry_id,
            description="Entry push failed (ignored)",
            error_message=error,
        ))
