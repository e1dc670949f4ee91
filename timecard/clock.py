"""
Clock abstraction.

Rollover and entry ids depend on the current time; injecting the clock lets
tests cross a month boundary without waiting for one.
"""

import time
from datetime import date, datetime, timedelta
from typing import Optional, Protocol


class Clock(Protocol):
    """Source of the current date and a millisecond timestamp."""

    def today(self) -> date: ...

    def now_ms(self) -> int: ...


class SystemClock:
    """The real clock."""

    def today(self) -> date:
        return date.today()

    def now_ms(self) -> int:
        return time.time_ns() // 1_000_000


class FixedClock:
    """
    A clock that only moves when told to.

    `now_ms` returns the same value until `advance` or `set` is called,
    which is exactly the situation the ledger's id perturbation handles.
    """

    def __init__(self, current: datetime):
        self._current = current

    @classmethod
    def on(cls, year: int, month: int, day: int = 1) -> "FixedClock":
        return cls(datetime(year, month, day, 12, 0, 0))

    def today(self) -> date:
        return self._current.date()

    def now_ms(self) -> int:
        return int(self._current.timestamp() * 1000)

    def set(self, current: datetime) -> None:
        self._current = current

    def advance(
        self,
        days: int = 0,
        seconds: float = 0,
        milliseconds: Optional[int] = None,
    ) -> None:
        self._current += timedelta(
            days=days,
            seconds=seconds,
            milliseconds=milliseconds or 0,
        )
