"""
polycache - Clock

All expiry math is relative to a clock. Time points are timezone-aware
UTC datetimes; they order naturally and shift with timedelta.
"""

from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Supplies the current time point."""

    def now(self) -> datetime:
        """Return the current time as an aware UTC datetime."""
        ...


class SystemClock:
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class FrozenClock:
    """
    A clock that only moves when told to.

    Used by tests and by callers that need deterministic expiry decisions.
    """

    def __init__(self, start: datetime | None = None):
        if start is None:
            start = datetime.now(UTC)
        elif start.tzinfo is None:
            start = start.replace(tzinfo=UTC)
        self._now = start
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            return self._now

    def set(self, time_point: datetime) -> None:
        """Jump to an absolute time point."""
        if time_point.tzinfo is None:
            time_point = time_point.replace(tzinfo=UTC)
        with self._lock:
            self._now = time_point

    def advance(self, seconds: float) -> datetime:
        """Move the clock forward (or backward, for negative values) and return the new time."""
        with self._lock:
            self._now = self._now + timedelta(seconds=seconds)
            return self._now
