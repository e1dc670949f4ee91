"""
Main Orchestrator for Timecard

This module ties together all the components and defines the flows for:
1. Startup (load records -> reconcile period -> populate ledger)
2. Add (validate -> reconcile period -> add -> persist -> notify)
3. Edit / delete (mutate -> persist)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Rollover is settled before any entry is added (archive before mutate)
- The reconcile + add pair runs under one lock, so a second writer can
  never observe a stale period between the two steps
- Storage and notification failures are logged, never raised
"""

import threading
from functools import partial
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from timecard.archive import PeriodArchiver, ReconcileResult
from timecard.audit import ActivityLogger, configure_logging
from timecard.clock import Clock, SystemClock
from timecard.config import TrackerSettings, get_settings
from timecard.ledger import Ledger
from timecard.models.entry import CategoryTotals, Entry, Totals
from timecard.models.period import ArchiveRecord, Period
from timecard.services.notify import (
    EntryNotifier,
    EntrySink,
    GoogleSheetsEntrySink,
    NullEntrySink,
)
from timecard.services.storage import (
    JsonFileStore,
    KeyValueStore,
    StorageError,
    TrackerStateRepository,
)
from timecard.validation import ValidationError, validate_entry_input


# Record names tracked as unsaved after a failed write
_ARCHIVE = "archive"
_ENTRIES = "entries"
_PERIOD = "period"


class TimeTracker:
    """
    The tracker as the presentation layer sees it.

    Flow for add_entry:
    1. Validate input (nothing changes if this fails)
    2. Reconcile period -> seal and clear if the month has moved on
    3. Add to ledger
    4. Persist
    5. Hand the entry to the notifier (fire-and-forget)
    """

    def __init__(
        self,
        repository: TrackerStateRepository,
        archiver: Optional[PeriodArchiver] = None,
        clock: Optional[Clock] = None,
        notifier: Optional[EntryNotifier] = None,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._repository = repository
        self._archiver = archiver or PeriodArchiver()
        self._clock = clock or SystemClock()
        self._activity = activity_logger or ActivityLogger()
        self._notifier = notifier or EntryNotifier(
            NullEntrySink(),
            activity_logger=self._activity,
        )

        self._lock = threading.RLock()
        self._ledger = Ledger(clock=self._clock)
        self._period: Optional[Period] = None
        self._archive: list[ArchiveRecord] = []
        self._loaded = False
        self._unsaved: set[str] = set()
        # A new marker is in memory but the store may still hold the old one
        self._rollover_unsaved = False

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def entries(self) -> tuple[Entry, ...]:
        self._ensure_loaded()
        return self._ledger.entries

    @property
    def period(self) -> Period:
        self._ensure_loaded()
        return self._period

    @property
    def archive(self) -> tuple[ArchiveRecord, ...]:
        """Oldest first."""
        self._ensure_loaded()
        return tuple(self._archive)

    def totals(self) -> Totals:
        self._ensure_loaded()
        return self._ledger.totals()

    def totals_by_category(self) -> dict[str, CategoryTotals]:
        self._ensure_loaded()
        return self._ledger.totals_by_category()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def _observed_period(self) -> Period:
        return Period.from_date(self._clock.today())

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()

    def load(self) -> None:
        """Read stored records and settle them against today's period."""
        with self._lock:
            state = self._repository.load()
            result = self._archiver.reconcile_on_load(
                state.entries,
                state.period,
                state.archive,
                self._observed_period(),
            )

            self._ledger = Ledger(result.entries, clock=self._clock)
            self._period = result.period
            self._archive = list(result.archive)
            self._loaded = True
            self._unsaved = set()

            if result.sealed is not None:
                self._activity.log_period_sealed(result.sealed)
            if result.discarded:
                self._activity.log_record_recovered(
                    self._repository.entries_key,
                    f"dropped {result.discarded} entries of an already archived period",
                )

            marker = result.period.to_marker()
            if state.period != marker:
                self._activity.log_period_adopted(result.period)
            self._rollover_unsaved = (
                state.period is not None and not state.period.matches(result.period)
            )

            if (
                result.sealed is not None
                or state.period != marker
                or len(result.entries) != len(state.entries)
            ):
                self._persist(entries=True, period=True, archive=True)

    def reconcile(self) -> Optional[ArchiveRecord]:
        """
        Roll the period over now if the month has changed.

        Returns the record sealed, if any. Calling it repeatedly within the
        same month does nothing.
        """
        with self._lock:
            self._ensure_loaded()
            return self._apply_rollover(
                self._archiver.reconcile_before_write(
                    self._ledger.entries,
                    self._period,
                    self._archive,
                    self._observed_period(),
                )
            )

    def _apply_rollover(self, result: ReconcileResult) -> Optional[ArchiveRecord]:
        if result.period == self._period:
            return None

        if result.sealed is not None:
            self._archive = list(result.archive)
            self._ledger.clear()
            self._activity.log_period_sealed(result.sealed)

        self._period = result.period
        self._rollover_unsaved = True
        self._activity.log_period_adopted(result.period)
        self._persist(entries=True, period=True, archive=result.sealed is not None)
        return result.sealed

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_entry(self, data: Any) -> Entry:
        """
        Record a new entry in the current period.

        Raises:
            ValidationError: If the input is incomplete or malformed
        """
        try:
            entry_input = validate_entry_input(data)
        except ValidationError as e:
            self._activity.log_entry_rejected(e.issues)
            raise

        with self._lock:
            self.reconcile()
            entry = self._ledger.add(entry_input)
            self._activity.log_entry_added(entry)
            self._persist(entries=True)

        self._notifier.notify(entry)
        return entry

    def edit_entry(self, entry_id: int, data: Any) -> Entry:
        """
        Raises:
            NotFoundError: If the entry is no longer in the current period
            ValidationError: If the input is incomplete or malformed
        """
        with self._lock:
            self._ensure_loaded()
            before = self._ledger.get(entry_id)
            try:
                updated = self._ledger.edit(entry_id, data)
            except ValidationError as e:
                self._activity.log_entry_rejected(e.issues)
                raise
            self._activity.log_entry_edited(before, updated)
            self._persist(entries=True)
            return updated

    def delete_entry(self, entry_id: int) -> None:
        """Delete an entry; unknown ids are ignored."""
        with self._lock:
            self._ensure_loaded()
            removed = self._ledger.delete(entry_id)
            if removed is not None:
                self._activity.log_entry_deleted(removed)
                self._persist(entries=True)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def _persist(
        self,
        entries: bool = False,
        period: bool = False,
        archive: bool = False,
    ) -> None:
        """
        Write the requested records, plus any left over from a failed write.

        Records go archive, entries, period, and writing stops at the first
        failure, so the stored marker never moves past entries that were not
        saved. While a rollover is only partly stored, entries of the new
        period are written after the new marker, behind a cleared list, so
        the old period's entries never sit under the new marker.

        In-memory state stays authoritative when a write fails; the next
        persist retries whatever is still unsaved.
        """
        for name, requested in (
            (_ARCHIVE, archive),
            (_ENTRIES, entries),
            (_PERIOD, period),
        ):
            if requested:
                self._unsaved.add(name)

        repo = self._repository
        save_archive = partial(repo.save_archive, list(self._archive))
        save_period = partial(repo.save_period, self._period.to_marker())
        save_entries = partial(repo.save_entries, list(self._ledger.entries))
        clear_entries = partial(repo.save_entries, [])

        steps = []
        if _ARCHIVE in self._unsaved:
            steps.append((_ARCHIVE, repo.archive_key, save_archive))
        if self._rollover_unsaved and self._ledger.entries:
            steps.append((None, repo.entries_key, clear_entries))
            steps.append((_PERIOD, repo.period_key, save_period))
            if _ENTRIES in self._unsaved:
                steps.append((_ENTRIES, repo.entries_key, save_entries))
        else:
            if _ENTRIES in self._unsaved:
                steps.append((_ENTRIES, repo.entries_key, save_entries))
            if _PERIOD in self._unsaved:
                steps.append((_PERIOD, repo.period_key, save_period))

        for name, key, write in steps:
            try:
                write()
            except StorageError as e:
                self._activity.log_save_failed(key, str(e))
                return
            self._unsaved.discard(name)
            if name == _PERIOD:
                self._rollover_unsaved = False

    def close(self) -> None:
        """Wait for queued notifications to finish."""
        self._notifier.shutdown(wait=True)


def create_tracker(
    settings: Optional[TrackerSettings] = None,
    store: Optional[KeyValueStore] = None,
    clock: Optional[Clock] = None,
    sink: Optional[EntrySink] = None,
) -> TimeTracker:
    """
    Factory function to create a tracker with its default components.

    Args:
        settings: Tracker settings; loaded from the environment if omitted
        store: Key-value store; a JsonFileStore under settings.data_dir if omitted
        clock: Clock; the system clock if omitted
        sink: Notification sink; Google Sheets when enabled in settings,
              otherwise a no-op sink
    """
    settings = settings or get_settings().tracker
    configure_logging(settings.log_level)
    activity_logger = ActivityLogger()

    if sink is None:
        sink = NullEntrySink()
        if settings.notify_enabled:
            try:
                sink = GoogleSheetsEntrySink()
            except PydanticValidationError as e:
                # Sheets not configured - continue without notifications
                activity_logger.log_notification_failed(0, f"Google Sheets not configured: {e}")

    repository = TrackerStateRepository(
        store or JsonFileStore(settings.data_dir),
        activity_logger=activity_logger,
        entries_key=settings.entries_key,
        period_key=settings.period_key,
        archive_key=settings.archive_key,
    )

    tracker = TimeTracker(
        repository=repository,
        archiver=PeriodArchiver(settings.unmarked_entries_policy),
        clock=clock,
        notifier=EntryNotifier(sink, activity_logger=activity_logger),
        activity_logger=activity_logger,
    )
    tracker.load()
    return tracker
