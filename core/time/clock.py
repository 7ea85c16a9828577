"""
Structa Core Time — Clock
===========================
The store and the reporting aggregator never call datetime.now()
themselves. Each takes a Clock at construction and reads "now"
from it: updated_at stamps, processed_at on delivery, synthetic
movement dates and elapsed-day figures all go through this seam.

Usage:
    clock = FixedClock(datetime(2024, 7, 1, tzinfo=timezone.utc))
    store = ConstructionStore(clock=clock)
    clock.advance(days=30)
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    def now_utc(self) -> datetime:
        ...  # pragma: no cover


class SystemClock:
    """Wall-clock time in UTC."""

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Pinned time; moves only when advanced."""

    def __init__(self, fixed_dt: datetime) -> None:
        if fixed_dt.tzinfo is None:
            raise ValueError("FixedClock requires timezone-aware datetime.")
        self._current = fixed_dt

    def now_utc(self) -> datetime:
        return self._current

    def advance(self, seconds: float = 0, *, days: float = 0) -> None:
        self._current += timedelta(days=days, seconds=seconds)


_SYSTEM_CLOCK = SystemClock()


def get_default_clock() -> Clock:
    """Clock used by collaborators constructed without one."""
    return _SYSTEM_CLOCK
