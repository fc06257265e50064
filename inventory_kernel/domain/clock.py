"""
Clock -- injectable time source.

Responsibility:
    Services stamp movements with ``clock.now()`` instead of calling
    ``datetime.now()`` so that tests can pin movement dates and assert on
    history ordering.

Architecture position:
    Kernel > Domain -- no I/O except SystemClock, the one sanctioned
    boundary for wall-clock time.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """
    Abstract clock interface.

    Guarantees:
        ``now()`` returns a timezone-aware UTC ``datetime``.
    """

    @abstractmethod
    def now(self) -> datetime:
        ...


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Test clock with controlled time.

    ``now()`` returns the same value until ``advance()``, ``tick()`` or
    ``set_time()`` moves it.
    """

    DEFAULT_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __init__(self, fixed_time: datetime | None = None):
        self._time = fixed_time or self.DEFAULT_TIME

    def now(self) -> datetime:
        return self._time

    def set_time(self, time: datetime) -> None:
        self._time = time

    def advance(self, seconds: int = 1) -> None:
        self._time = self._time + timedelta(seconds=seconds)

    def tick(self) -> datetime:
        """Advance by one second and return the new time."""
        self.advance(1)
        return self._time


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to a naive timestamp (SQLite returns them naive)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
