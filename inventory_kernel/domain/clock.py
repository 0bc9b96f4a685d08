"""
Injectable time source for the ledger.

Services stamp ``StockMovement.occurred_at`` from the clock they were built
with and never read the system time themselves, so tests can pin movement
timestamps exactly.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone

DEFAULT_EPOCH = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class Clock(ABC):
    """Source of timezone-aware timestamps."""

    @abstractmethod
    def now(self) -> datetime:
        ...


class SystemClock(Clock):
    """Wall-clock UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Clock that only moves when told to.

    ``now()`` keeps returning the same instant until ``advance``, ``tick``
    or ``set_time`` changes it.  Naive datetimes are rejected so movement
    timestamps stay comparable with SystemClock output.
    """

    def __init__(self, start: datetime | None = None):
        self._current = DEFAULT_EPOCH
        if start is not None:
            self.set_time(start)

    def now(self) -> datetime:
        return self._current

    def set_time(self, time: datetime) -> None:
        if time.tzinfo is None:
            raise ValueError("DeterministicClock requires a timezone-aware datetime")
        self._current = time

    def advance(self, seconds: int | float | timedelta = 1) -> datetime:
        """Move forward by a number of seconds or a timedelta; returns the new time."""
        step = seconds if isinstance(seconds, timedelta) else timedelta(seconds=seconds)
        self._current += step
        return self._current

    def tick(self) -> datetime:
        return self.advance(1)
