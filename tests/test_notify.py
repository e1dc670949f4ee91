"""
Tests for the notification sink and notifier.

No real Google Sheets calls (use mocks).
"""

from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from timecard.config import GoogleSheetsSettings
from timecard.models import Entry, FlatRate, Timed
from timecard.services.notify import (
    ENTRY_COLUMNS,
    EntryNotifier,
    EntrySink,
    GoogleSheetsClient,
    GoogleSheetsEntrySink,
    NotificationError,
    SinkConfigurationError,
    entry_to_row,
)


def timed_entry() -> Entry:
    return Entry(
        id=42,
        date="2024-03-15",
        category="Class Time",
        billing=Timed(minutes=Decimal("90"), hourly_rate=Decimal("18")),
        amount=Decimal("27"),
        earned_to_date=Decimal("45"),
    )


class FailingSink(EntrySink):
    def push(self, entry):
        raise NotificationError("sheet unavailable")


class TestEntryToRow:
    def test_timed_row(self):
        row = entry_to_row(timed_entry())
        assert len(row) == len(ENTRY_COLUMNS)
        assert row == ["42", "2024-03-15", "Class Time", "timed", "90", "18", "", "27.00", "45.00"]

    def test_flat_rate_row(self):
        entry = Entry(
            id=7,
            date="2024-03-15",
            category="Design",
            billing=FlatRate(rate_amount=Decimal("500")),
            amount=Decimal("500"),
        )
        row = entry_to_row(entry)
        assert row[3:] == ["flat_rate", "", "", "500", "500.00", ""]


class TestGoogleSheetsEntrySink:
    def test_push_appends_row(self):
        client = MagicMock()
        sheet = client.get_entries_sheet.return_value

        GoogleSheetsEntrySink(client).push(timed_entry())

        sheet.append_row.assert_called_once_with(
            entry_to_row(timed_entry()), value_input_option="USER_ENTERED"
        )


    def test_missing_credentials_is_not_retried(self, tmp_path):
        credentials = tmp_path / "service_account.json"
        credentials.write_text("{}")
        settings = GoogleSheetsSettings(
            credentials_path=str(credentials), spreadsheet_id="sheet-id"
        )
        sink = GoogleSheetsEntrySink(GoogleSheetsClient(settings))

        with patch(
            "timecard.services.notify.google_sheets.Credentials.from_service_account_file",
            side_effect=FileNotFoundError(str(credentials)),
        ) as load_credentials:
            with pytest.raises(SinkConfigurationError):
                sink.push(timed_entry())

        assert load_credentials.call_count == 1

    def test_missing_spreadsheet_is_not_retried(self):
        client = MagicMock()
        client.get_entries_sheet.side_effect = SinkConfigurationError("Spreadsheet not found")

        with pytest.raises(SinkConfigurationError):
            GoogleSheetsEntrySink(client).push(timed_entry())

        assert client.get_entries_sheet.call_count == 1


class TestEntryNotifier:
    def test_pushes_entry(self, sink, immediate_executor):
        notifier = EntryNotifier(sink, executor=immediate_executor)

        future = notifier.notify(timed_entry())

        assert future.result() is True
        assert sink.pushed == [timed_entry()]

    def test_failure_is_swallowed(self, immediate_executor):
        notifier = EntryNotifier(FailingSink(), executor=immediate_executor)
        future = notifier.notify(timed_entry())
        assert future.result() is False

    def test_background_worker(self, sink):
        notifier = EntryNotifier(sink)
        notifier.notify(timed_entry())
        notifier.shutdown(wait=True)
        assert sink.pushed == [timed_entry()]

    def test_notify_after_shutdown_returns_none(self, sink):
        notifier = EntryNotifier(sink)
        notifier.shutdown()
        assert notifier.notify(timed_entry()) is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
