"""
Google Sheets Notification Sink

DESIGN DECISION: New entries are mirrored to a Google Sheet because:
1. The user can see every session from a phone without opening the app
2. The sheet doubles as an off-device copy of each entry
3. No server to run

The sheet is write-only from the tracker's point of view. Rows are
appended and never read back, so a failed append only loses the mirror
row, never ledger data.
"""

from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import (
    retry,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from timecard.config import GoogleSheetsSettings, get_settings
from timecard.models.entry import Entry, Timed
from timecard.services.notify.interface import (
    EntrySink,
    NotificationError,
    SinkConfigurationError,
)


# Column layout of the entries sheet
ENTRY_COLUMNS = [
    "id",
    "date",
    "category",
    "mode",
    "minutes",
    "hourly_rate",
    "rate_amount",
    "amount",
    "earned_to_date",
]


def entry_to_row(entry: Entry) -> list:
    """Convert an Entry to a spreadsheet row."""
    billing = entry.billing
    return [
        str(entry.id),
        entry.date,
        entry.category,
        billing.mode,
        str(billing.minutes) if isinstance(billing, Timed) else "",
        str(billing.hourly_rate) if isinstance(billing, Timed) else "",
        "" if isinstance(billing, Timed) else str(billing.rate_amount),
        str(entry.amount),
        str(entry.earned_to_date) if entry.earned_to_date is not None else "",
    ]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_not_exception_type(SinkConfigurationError),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise SinkConfigurationError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise NotificationError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise SinkConfigurationError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_entries_sheet(self) -> gspread.Worksheet:
        """Get or create the entries worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.entries_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.entries_sheet_name,
                rows=1000,
                cols=len(ENTRY_COLUMNS),
            )
            sheet.append_row(ENTRY_COLUMNS)
        return sheet


class GoogleSheetsEntrySink(EntrySink):
    """Appends one row per new entry."""

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=5),
        retry=retry_if_not_exception_type(SinkConfigurationError),
        reraise=True,
    )
    def _append(self, row: list) -> None:
        sheet = self._client.get_entries_sheet()
        sheet.append_row(row, value_input_option="USER_ENTERED")

    def push(self, entry: Entry) -> None:
        try:
            self._append(entry_to_row(entry))
        except NotificationError:
            raise
        except Exception as e:
            raise NotificationError(f"Failed to append entry {entry.id}: {e}")
