"""
Structa Core Time — Temporal Helpers
======================================
Pure functions for date-range filtering and elapsed-time math.
All functions take explicit datetime arguments — no hidden clock access.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


# ══════════════════════════════════════════════════════════════
# DATE RANGE — closed interval, either side may be open
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DateRange:
    """
    A closed interval [start, end] where either bound may be None.

    Invariant: start <= end when both are given.
    """

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValueError(
                f"DateRange start ({self.start}) must be <= end ({self.end})."
            )

    @property
    def is_open(self) -> bool:
        """True when neither bound is set (the range matches everything)."""
        return self.start is None and self.end is None

    def starts_within(self, dt: datetime) -> bool:
        """Lower-bound check only: dt >= start (or no start)."""
        return self.start is None or dt >= self.start

    def ends_within(self, dt: datetime) -> bool:
        """Upper-bound check only: dt <= end (or no end)."""
        return self.end is None or dt <= self.end

    def contains(self, dt: datetime) -> bool:
        """Check if datetime falls within the range (inclusive)."""
        return self.starts_within(dt) and self.ends_within(dt)


# ══════════════════════════════════════════════════════════════
# PURE TEMPORAL FUNCTIONS
# ══════════════════════════════════════════════════════════════

def whole_days_between(earlier: datetime, later: datetime) -> int:
    """
    Whole days elapsed from `earlier` to `later`, floored.

    Negative when `later` precedes `earlier`.
    """
    return (later - earlier).days
