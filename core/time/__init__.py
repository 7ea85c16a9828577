"""
Structa Core Time — Public API
================================
Clock seam and date-range helpers.
"""

from core.time.clock import Clock, FixedClock, SystemClock, get_default_clock
from core.time.temporal import DateRange, whole_days_between

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "get_default_clock",
    "DateRange",
    "whole_days_between",
]
