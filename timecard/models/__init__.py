"""
Data Models Package

This package contains all Pydantic models used by Timecard.
All data flowing through the tracker must conform to these schemas.
"""

from timecard.models.entry import (
    OTHER_CATEGORY,
    BillingMode,
    CategoryTotals,
    Entry,
    EntryInput,
    FlatRate,
    FlatRateInput,
    Timed,
    TimedInput,
    Totals,
    ValidationIssue,
    round_money,
)
from timecard.models.period import (
    ArchiveRecord,
    Period,
    PeriodMarker,
    PeriodSummary,
    TrackerState,
)
from timecard.models.activity import (
    ActivityEvent,
    ActivityEventType,
    ActivitySeverity,
)

__all__ = [
    # Entry models
    "OTHER_CATEGORY",
    "BillingMode",
    "CategoryTotals",
    "Entry",
    "EntryInput",
    "FlatRate",
    "FlatRateInput",
    "Timed",
    "TimedInput",
    "Totals",
    "ValidationIssue",
    "round_money",
    # Period models
    "ArchiveRecord",
    "Period",
    "PeriodMarker",
    "PeriodSummary",
    "TrackerState",
    # Activity models
    "ActivityEvent",
    "ActivityEventType",
    "ActivitySeverity",
]
