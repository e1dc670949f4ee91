"""
Period and Archive Models

A period is one calendar month. Exactly one period is current at a time;
when the calendar moves on, the outgoing period's entries are sealed into
an ArchiveRecord that never changes afterwards.

DESIGN DECISION: The persisted marker stores (month, year).
The first version of the tracker only stored the month index, which made
two periods twelve months apart indistinguishable. Markers without a year
are still readable; they match on month alone.
"""

import calendar
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from timecard.models.entry import CategoryTotals, Entry


class Period(BaseModel):
    """A calendar month. `month` is a 0-based index (0 = January)."""
    model_config = ConfigDict(frozen=True)

    month: int = Field(..., ge=0, le=11)
    year: int = Field(..., ge=1)

    @classmethod
    def from_date(cls, day: date) -> "Period":
        return cls(month=day.month - 1, year=day.year)

    @property
    def label(self) -> str:
        return f"{calendar.month_name[self.month + 1]} {self.year}"

    def to_marker(self) -> "PeriodMarker":
        return PeriodMarker(month=self.month, year=self.year)


class PeriodMarker(BaseModel):
    """The stored pointer to the current period."""
    model_config = ConfigDict(frozen=True)

    month: int = Field(..., ge=0, le=11)
    year: Optional[int] = Field(default=None, ge=1)

    @classmethod
    def parse(cls, raw: Any) -> Optional["PeriodMarker"]:
        """
        Parse a decoded JSON value into a marker.

        Returns None for anything unusable, which callers treat as
        "no marker stored".
        """
        if raw is None or isinstance(raw, bool):
            return None
        if isinstance(raw, str):
            raw = raw.strip()
            if not raw.lstrip("-").isdigit():
                return None
            raw = int(raw)
        if isinstance(raw, int):
            raw = {"month": raw}
        try:
            return cls.model_validate(raw)
        except ValidationError:
            return None

    def matches(self, period: Period) -> bool:
        if self.month != period.month:
            return False
        return self.year is None or self.year == period.year

    def resolve(self, year: int) -> Period:
        """Turn the marker into a full period, filling a missing year."""
        return Period(month=self.month, year=self.year if self.year is not None else year)


class PeriodSummary(BaseModel):
    """Aggregate computed once when a period is sealed."""
    model_config = ConfigDict(frozen=True)

    entry_count: int = Field(default=0, ge=0)
    total_minutes: Decimal = Decimal(0)
    total_amount: Decimal = Decimal("0.00")
    by_category: dict[str, CategoryTotals] = Field(default_factory=dict)


class ArchiveRecord(BaseModel):
    """
    A sealed snapshot of exactly one past period.

    CRITICAL: Once created, a record is never mutated or deleted.
    """
    model_config = ConfigDict(frozen=True)

    period: Period
    summary: PeriodSummary


class TrackerState(BaseModel):
    """Everything the tracker persists, as one explicit object."""

    entries: list[Entry] = Field(default_factory=list)
    period: Optional[PeriodMarker] = None
    archive: list[ArchiveRecord] = Field(default_factory=list)
