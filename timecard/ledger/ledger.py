"""
Ledger

The mutable list of entries for the current period, newest first,
plus the totals derived from it.

DESIGN DECISION: The ledger knows nothing about periods or storage.
The tracker asks the archiver to settle the period first and persists
afterwards; the ledger only validates, computes and keeps order.
"""

from collections.abc import Iterable
from decimal import Decimal
from typing import Any, Optional

from timecard.clock import Clock, SystemClock
from timecard.models.entry import (
    CategoryTotals,
    Entry,
    Totals,
    round_money,
)
from timecard.validation import validate_entry_input


class NotFoundError(Exception):
    """The entry id is not in the current period (stale reference)."""

    def __init__(self, entry_id: int):
        self.entry_id = entry_id
        super().__init__(f"No entry with id {entry_id} in the current period")


def compute_totals(entries: Iterable[Entry]) -> Totals:
    """Minutes come from timed entries only; amounts from every entry."""
    total_minutes = Decimal(0)
    total_amount = Decimal(0)
    for entry in entries:
        total_minutes += entry.minutes
        total_amount += entry.amount
    return Totals(total_minutes=total_minutes, total_amount=round_money(total_amount))


def compute_category_totals(entries: Iterable[Entry]) -> dict[str, CategoryTotals]:
    """Same rules as compute_totals, grouped by category."""
    grouped: dict[str, tuple[Decimal, Decimal]] = {}
    for entry in entries:
        minutes, amount = grouped.get(entry.group_key, (Decimal(0), Decimal(0)))
        grouped[entry.group_key] = (minutes + entry.minutes, amount + entry.amount)

    return {
        category: CategoryTotals(minutes=minutes, amount=round_money(amount))
        for category, (minutes, amount) in grouped.items()
    }


class Ledger:
    """Entries of the current period."""

    def __init__(
        self,
        entries: Iterable[Entry] = (),
        clock: Optional[Clock] = None,
    ):
        self._entries: list[Entry] = list(entries)
        self._clock = clock or SystemClock()

    @property
    def entries(self) -> tuple[Entry, ...]:
        """Newest first."""
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, entry_id: int) -> Optional[Entry]:
        index = self._index_of(entry_id)
        return self._entries[index] if index is not None else None

    def _index_of(self, entry_id: int) -> Optional[int]:
        for index, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return index
        return None

    def _next_id(self) -> int:
        """
        Millisecond timestamp, bumped past the highest existing id.

        Two adds within the same millisecond (or a clock that went
        backwards) would otherwise produce a duplicate.
        """
        candidate = self._clock.now_ms()
        if self._entries:
            highest = max(entry.id for entry in self._entries)
            if candidate <= highest:
                candidate = highest + 1
        return candidate

    def add(self, data: Any) -> Entry:
        """
        Validate input, compute its amount and record it at the front.

        Raises:
            ValidationError: If the input is incomplete or malformed
        """
        entry_input = validate_entry_input(data)
        billing = entry_input.to_billing()
        amount = billing.compute_amount()

        entry = Entry(
            id=self._next_id(),
            date=entry_input.date or self._clock.today().isoformat(),
            category=entry_input.category,
            billing=billing,
            amount=amount,
            earned_to_date=self.totals().total_amount + amount,
        )
        self._entries.insert(0, entry)
        return entry

    def edit(self, entry_id: int, data: Any) -> Entry:
        """
        Replace an entry's category and billing, keeping its id and position.

        The stored date is kept unless the input supplies a new one.

        Raises:
            NotFoundError: If the id is not in the current period
            ValidationError: If the input is incomplete or malformed
        """
        index = self._index_of(entry_id)
        if index is None:
            raise NotFoundError(entry_id)

        entry_input = validate_entry_input(data)
        current = self._entries[index]
        billing = entry_input.to_billing()

        updated = Entry(
            id=current.id,
            date=entry_input.date or current.date,
            category=entry_input.category,
            billing=billing,
            amount=billing.compute_amount(),
            earned_to_date=current.earned_to_date,
        )
        self._entries[index] = updated
        return updated

    def delete(self, entry_id: int) -> Optional[Entry]:
        """Remove an entry. Unknown ids are ignored; returns what was removed."""
        index = self._index_of(entry_id)
        if index is None:
            return None
        return self._entries.pop(index)

    def totals(self) -> Totals:
        return compute_totals(self._entries)

    def totals_by_category(self) -> dict[str, CategoryTotals]:
        return compute_category_totals(self._entries)

    def clear(self) -> None:
        self._entries.clear()
