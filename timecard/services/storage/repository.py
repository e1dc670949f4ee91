"""
Tracker State Repository

Reads and writes the three persisted records:

    entries  - list of Entry, newest first
    month    - the current period marker, {"month": m, "year": y}
    archive  - list of ArchiveRecord, oldest first

DESIGN DECISION: Each record is loaded independently.
A corrupt `entries` record must not stop the archive from loading, so
every read failure (backend error, bad JSON, wrong shape) falls back to
that record's empty default and is logged. Within the entries record each
entry is validated on its own, so one bad entry only costs itself.
Nothing here raises on load.
"""

import json
from typing import Any, Callable, Optional, TypeVar

from pydantic import TypeAdapter, ValidationError

from timecard.audit import ActivityLogger
from timecard.models.entry import Entry
from timecard.models.period import ArchiveRecord, PeriodMarker, TrackerState
from timecard.services.storage.interface import (
    CorruptRecordError,
    KeyValueStore,
    StorageError,
)


T = TypeVar("T")

_ENTRIES = TypeAdapter(list[Entry])
_ARCHIVE = TypeAdapter(list[ArchiveRecord])


def _parse_period(raw: Any) -> PeriodMarker:
    marker = PeriodMarker.parse(raw)
    if marker is None:
        raise ValueError(f"not a period marker: {raw!r}")
    return marker


class TrackerStateRepository:
    """Persists TrackerState into a KeyValueStore."""

    def __init__(
        self,
        store: KeyValueStore,
        activity_logger: Optional[ActivityLogger] = None,
        entries_key: str = "entries",
        period_key: str = "month",
        archive_key: str = "archive",
    ):
        self._store = store
        self._activity = activity_logger or ActivityLogger()
        self.entries_key = entries_key
        self.period_key = period_key
        self.archive_key = archive_key

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def _decode(self, key: str, parse: Callable[[Any], T]) -> Optional[T]:
        """
        Read and parse one record.

        Returns None when the record does not exist.

        Raises:
            StorageError: If the backend fails or the record is corrupt
        """
        text = self._store.get(key)
        if text is None:
            return None
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise CorruptRecordError(key, f"invalid JSON: {e}")
        try:
            return parse(raw)
        except (ValidationError, ValueError, TypeError) as e:
            raise CorruptRecordError(key, str(e))

    def _load_record(self, key: str, parse: Callable[[Any], T], default: T) -> T:
        try:
            value = self._decode(key, parse)
        except StorageError as e:
            self._activity.log_record_recovered(key, str(e))
            return default
        return default if value is None else value

    def _parse_entries(self, raw: Any) -> list[Entry]:
        """
        Validate entries one at a time.

        An entry that fails validation (older versions accepted zero or
        negative minutes) is dropped and logged; the rest still load.
        """
        if not isinstance(raw, list):
            raise ValueError(f"expected a list of entries, got {type(raw).__name__}")
        entries = []
        for index, item in enumerate(raw):
            try:
                entries.append(Entry.model_validate(item))
            except ValidationError as e:
                self._activity.log_record_recovered(f"{self.entries_key}[{index}]", str(e))
        return entries

    def load_entries(self) -> list[Entry]:
        return self._load_record(self.entries_key, self._parse_entries, [])

    def load_period(self) -> Optional[PeriodMarker]:
        return self._load_record(self.period_key, _parse_period, None)

    def load_archive(self) -> list[ArchiveRecord]:
        return self._load_record(self.archive_key, _ARCHIVE.validate_python, [])

    def load(self) -> TrackerState:
        """Load all three records. Never raises."""
        return TrackerState(
            entries=self.load_entries(),
            period=self.load_period(),
            archive=self.load_archive(),
        )

    # -------------------------------------------------------------------------
    # Saving
    # -------------------------------------------------------------------------

    def _write(self, key: str, value: Any) -> None:
        self._store.set(key, json.dumps(value, ensure_ascii=False))

    def save_entries(self, entries: list[Entry]) -> None:
        """Raises StorageError if the write fails."""
        self._write(self.entries_key, _ENTRIES.dump_python(entries, mode="json"))

    def save_period(self, period: Optional[PeriodMarker]) -> None:
        """Raises StorageError if the write fails."""
        if period is None:
            self._store.delete(self.period_key)
            return
        self._write(self.period_key, period.model_dump(mode="json"))

    def save_archive(self, archive: list[ArchiveRecord]) -> None:
        """Raises StorageError if the write fails."""
        self._write(self.archive_key, _ARCHIVE.dump_python(archive, mode="json"))

    def save(self, state: TrackerState) -> None:
        """
        Write all three records.

        The archive is written first so a sealed period is on disk before
        the entries that fed it are cleared.
        """
        self.save_archive(state.archive)
        self.save_period(state.period)
        self.save_entries(state.entries)
