"""
Period Archiver

Single-writer state machine that keeps exactly one period current and
seals the outgoing period before anything is written against the new one.

States:
    UNINITIALIZED --reconcile_on_load--> RECONCILED

ARCHIVE BEFORE MUTATE:
Any path that can add an entry calls reconcile_before_write first, so an
entry is never attributed to a period that has already been archived.

IDEMPOTENCE:
Reconciling again with the same observed period compares period values
and does nothing. No record is ever produced twice for the same crossing.

All methods are pure with respect to their inputs: they return new lists
and never mutate what they are given.
"""

from collections.abc import Sequence
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from timecard.config import UnmarkedEntriesPolicy
from timecard.ledger import compute_category_totals, compute_totals
from timecard.models.entry import Entry
from timecard.models.period import (
    ArchiveRecord,
    Period,
    PeriodMarker,
    PeriodSummary,
)


# Date formats seen in stored entries: ISO from this version, and the
# browser locale format written by the first version.
_ENTRY_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%d/%m/%Y", "%d.%m.%Y")


class ArchiverState(str, Enum):
    UNINITIALIZED = "uninitialized"
    RECONCILED = "reconciled"


class ArchiverStateError(Exception):
    """A write-time reconcile was attempted before the load-time one."""
    pass


class ReconcileResult(BaseModel):
    """
    State after a reconcile. `sealed` is the record created, if any;
    `discarded` counts stored entries dropped because their period was
    already in the archive.
    """
    model_config = ConfigDict(frozen=True)

    entries: list[Entry]
    period: Period
    archive: list[ArchiveRecord]
    sealed: Optional[ArchiveRecord] = None
    discarded: int = 0

    @property
    def changed(self) -> bool:
        return self.sealed is not None


def year_from_entries(entries: Sequence[Entry]) -> Optional[int]:
    """Year of the first entry's date, if it can be parsed."""
    if not entries:
        return None
    raw = entries[0].date.strip()
    for fmt in _ENTRY_DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).year
        except ValueError:
            continue
    return None


class PeriodArchiver:
    """
    Detects month rollover and seals the outgoing period.

    Args:
        unmarked_policy: What to do with stored entries when no period
            marker could be read. ADOPT keeps them in the new period,
            DISCARD drops them. Neither archives them, since their period
            is unknown.
    """

    def __init__(
        self,
        unmarked_policy: UnmarkedEntriesPolicy = UnmarkedEntriesPolicy.ADOPT,
    ):
        self._unmarked_policy = unmarked_policy
        self._state = ArchiverState.UNINITIALIZED

    @property
    def state(self) -> ArchiverState:
        return self._state

    def seal(
        self,
        entries: Sequence[Entry],
        period: Union[PeriodMarker, Period],
        year: Optional[int] = None,
    ) -> ArchiveRecord:
        """
        Build the sealed summary of one period.

        `year` fills in a marker that has none; a full Period keeps its own.
        """
        if isinstance(period, Period):
            resolved = period
        else:
            if period.year is None and year is None:
                raise ValueError("A year is required to seal a marker without one")
            resolved = period.resolve(year)

        totals = compute_totals(entries)
        summary = PeriodSummary(
            entry_count=len(entries),
            total_minutes=totals.total_minutes,
            total_amount=totals.total_amount,
            by_category=compute_category_totals(entries),
        )
        return ArchiveRecord(period=resolved, summary=summary)

    def reconcile_on_load(
        self,
        stored_entries: Sequence[Entry],
        stored_period: Optional[PeriodMarker],
        stored_archive: Sequence[ArchiveRecord],
        observed_period: Period,
    ) -> ReconcileResult:
        """
        Settle persisted state against the real current period at startup.

        - No marker: first run. Adopt the observed period; keep or drop the
          stored entries per policy. Nothing is archived.
        - Same period: pass through.
        - Different period with entries: seal them under the stored period.
          A marker without a year takes it from the first entry's date,
          else from the observed period. If the last archive record already
          covers that period, a rollover was stored only partly: the entries
          were sealed before and are dropped instead.
        - Different period, no entries: adopt the observed period.
        """
        entries = list(stored_entries)
        archive = list(stored_archive)
        self._state = ArchiverState.RECONCILED

        if stored_period is None:
            if self._unmarked_policy == UnmarkedEntriesPolicy.DISCARD:
                entries = []
            return ReconcileResult(
                entries=entries,
                period=observed_period,
                archive=archive,
            )

        if stored_period.matches(observed_period):
            return ReconcileResult(
                entries=entries,
                period=stored_period.resolve(observed_period.year),
                archive=archive,
            )

        if not entries:
            return ReconcileResult(
                entries=[],
                period=observed_period,
                archive=archive,
            )

        year = year_from_entries(entries) or observed_period.year
        if archive and archive[-1].period == stored_period.resolve(year):
            return ReconcileResult(
                entries=[],
                period=observed_period,
                archive=archive,
                discarded=len(entries),
            )

        record = self.seal(entries, stored_period, year)
        return ReconcileResult(
            entries=[],
            period=observed_period,
            archive=archive + [record],
            sealed=record,
        )

    def reconcile_before_write(
        self,
        current_entries: Sequence[Entry],
        current_period: Period,
        archive: Sequence[ArchiveRecord],
        observed_period: Period,
    ) -> ReconcileResult:
        """
        Guard against a session left open across a month boundary.

        Called immediately before every add. A no-op when the observed
        period is still the current one; otherwise the current period is
        sealed, even when it holds no entries.

        Raises:
            ArchiverStateError: If reconcile_on_load has not run yet
        """
        if self._state != ArchiverState.RECONCILED:
            raise ArchiverStateError("reconcile_on_load must run before any write")

        if current_period == observed_period:
            return ReconcileResult(
                entries=list(current_entries),
                period=current_period,
                archive=list(archive),
            )

        record = self.seal(current_entries, current_period)
        return ReconcileResult(
            entries=[],
            period=observed_period,
            archive=list(archive) + [record],
            sealed=record,
        )
