"""Period rollover and archival package."""

from timecard.archive.archiver import (
    ArchiverState,
    ArchiverStateError,
    PeriodArchiver,
    ReconcileResult,
    year_from_entries,
)

__all__ = [
    "ArchiverState",
    "ArchiverStateError",
    "PeriodArchiver",
    "ReconcileResult",
    "year_from_entries",
]
