"""Tests for key-value stores and the state repository."""

import json
from decimal import Decimal

import pytest

from timecard.models import (
    ArchiveRecord,
    Entry,
    FlatRate,
    Period,
    PeriodMarker,
    PeriodSummary,
    TrackerState,
)
from timecard.services.storage import (
    ConnectionError,
    InMemoryKeyValueStore,
    JsonFileStore,
    KeyValueStore,
    StorageError,
    TrackerStateRepository,
)


def make_entry(entry_id: int = 1) -> Entry:
    return Entry(
        id=entry_id,
        date="2024-03-01",
        category="Design",
        billing=FlatRate(rate_amount=Decimal("500")),
        amount=Decimal("500"),
    )


def make_record(month: int = 1) -> ArchiveRecord:
    return ArchiveRecord(
        period=Period(month=month, year=2024),
        summary=PeriodSummary(entry_count=2, total_minutes=Decimal(90), total_amount=Decimal("27.00")),
    )


class BrokenStore(KeyValueStore):
    """Store whose reads fail for selected keys."""

    def __init__(self, broken: set[str], data: dict[str, str]):
        self._broken = broken
        self._data = data

    def get(self, key):
        if key in self._broken:
            raise ConnectionError("store unavailable")
        return self._data.get(key)

    def set(self, key, value):
        raise ConnectionError("read-only")

    def delete(self, key):
        pass


class TestInMemoryStore:
    def test_get_set_delete(self):
        store = InMemoryKeyValueStore()
        assert store.get("entries") is None
        store.set("entries", "[]")
        assert store.get("entries") == "[]"
        store.delete("entries")
        store.delete("entries")
        assert store.get("entries") is None


class TestJsonFileStore:
    def test_round_trip(self, tmp_path):
        store = JsonFileStore(tmp_path / "data")
        store.set("archive", '[{"label": "März"}]')
        assert store.get("archive") == '[{"label": "März"}]'
        assert (tmp_path / "data" / "archive.json").read_text(encoding="utf-8") == '[{"label": "März"}]'

    def test_missing_record(self, tmp_path):
        assert JsonFileStore(tmp_path).get("month") is None

    def test_overwrite_leaves_no_temp_files(self, tmp_path):
        store = JsonFileStore(tmp_path)
        store.set("month", "1")
        store.set("month", "2")
        assert store.get("month") == "2"
        assert [p.name for p in tmp_path.iterdir()] == ["month.json"]

    def test_rejects_path_like_keys(self, tmp_path):
        with pytest.raises(StorageError):
            JsonFileStore(tmp_path).get("../secrets")

    def test_invalid_utf8_is_storage_error(self, tmp_path):
        (tmp_path / "entries.json").write_bytes(b"\xff\xfe\x00")
        with pytest.raises(StorageError):
            JsonFileStore(tmp_path).get("entries")


class TestRepositoryLoad:
    """Tests for per-record recovery on load."""

    def test_empty_store_gives_defaults(self, repository):
        state = repository.load()
        assert state == TrackerState()

    def test_round_trip(self, repository):
        state = TrackerState(
            entries=[make_entry(2), make_entry(1)],
            period=PeriodMarker(month=2, year=2024),
            archive=[make_record()],
        )
        repository.save(state)
        assert repository.load() == state

    def test_period_is_stored_as_month_year_pair(self, repository, store):
        repository.save_period(PeriodMarker(month=2, year=2024))
        assert json.loads(store.get("month")) == {"month": 2, "year": 2024}

    def test_amounts_are_stored_as_two_decimal_strings(self, repository, store):
        repository.save_entries([make_entry()])
        assert json.loads(store.get("entries"))[0]["amount"] == "500.00"

    def test_corrupt_entries_keep_archive(self, repository, store):
        """A corrupt entries record yields an empty ledger, archive untouched."""
        repository.save_archive([make_record()])
        repository.save_period(PeriodMarker(month=2, year=2024))
        store.set("entries", "{not json")

        state = repository.load()

        assert state.entries == []
        assert state.archive == [make_record()]
        assert state.period == PeriodMarker(month=2, year=2024)

    def test_wrong_shape_entries_recovered(self, repository, store):
        store.set("entries", json.dumps([{"id": "x", "billing": {"mode": "hourly"}}]))
        repository.save_archive([make_record()])
        state = repository.load()
        assert state.entries == []
        assert len(state.archive) == 1

    def test_corrupt_archive_keeps_entries(self, repository, store):
        repository.save_entries([make_entry()])
        store.set("archive", '"oops"')
        state = repository.load()
        assert state.entries == [make_entry()]
        assert state.archive == []

    def test_unparseable_period_is_absent(self, repository, store):
        store.set("month", '"March"')
        assert repository.load().period is None

    def test_legacy_integer_month(self, repository, store):
        store.set("month", "2")
        assert repository.load().period == PeriodMarker(month=2)

    def test_legacy_entries_load(self, repository, store):
        store.set("entries", json.dumps([{
            "id": 1710000000000,
            "date": "3/9/2024",
            "workType": "Class",
            "minutes": 60,
            "payRate": 18,
            "total": "18.00",
        }]))
        entries = repository.load().entries
        assert len(entries) == 1
        assert entries[0].amount == Decimal("18.00")

    def test_mixed_legacy_list_keeps_valid_entries(self, repository, store):
        """A zero-minute entry from the first version does not sink the rest."""
        store.set("entries", json.dumps([
            {"id": 2, "date": "3/10/2024", "workType": "Class",
             "minutes": 0, "payRate": 18, "total": "0.00"},
            {"id": 1, "date": "3/9/2024", "workType": "Class",
             "minutes": 60, "payRate": 18, "total": "18.00"},
        ]))
        repository.save_archive([make_record()])

        state = repository.load()

        assert [e.id for e in state.entries] == [1]
        assert state.entries[0].amount == Decimal("18.00")
        assert state.archive == [make_record()]

    def test_non_list_entries_record_is_recovered(self, repository, store):
        store.set("entries", json.dumps({"id": 1}))
        assert repository.load().entries == []

    def test_unavailable_store_falls_back_per_record(self):
        data = {"archive": json.dumps([make_record().model_dump(mode="json")])}
        repository = TrackerStateRepository(BrokenStore({"entries", "month"}, data))
        state = repository.load()
        assert state.entries == []
        assert state.period is None
        assert state.archive == [make_record()]

    def test_custom_keys(self, store):
        repository = TrackerStateRepository(
            store, entries_key="tc_entries", period_key="tc_month", archive_key="tc_archive"
        )
        repository.save_period(PeriodMarker(month=0, year=2025))
        assert store.get("tc_month") is not None
        assert store.get("month") is None


class TestRepositorySave:
    def test_save_none_period_deletes_marker(self, repository, store):
        repository.save_period(PeriodMarker(month=2, year=2024))
        repository.save_period(None)
        assert store.get("month") is None

    def test_save_failure_raises_storage_error(self):
        repository = TrackerStateRepository(BrokenStore(set(), {}))
        with pytest.raises(StorageError):
            repository.save_entries([make_entry()])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
