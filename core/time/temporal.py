"""
Hotel Pricing Core Time — Temporal Helpers
============================================
Pure functions for stay and calendar date logic.
All functions take explicit date arguments; no hidden clock access.

A stay is the half-open interval [check_in, check_out): the check-out
day is never a billable night.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator, List, Optional, Union

DateLike = Union[date, datetime]

_SECONDS_PER_DAY = 86400


# ══════════════════════════════════════════════════════════════
# DATE WINDOW (closed interval [start, end])
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DateWindow:
    """
    A closed calendar interval [start, end].

    end=None means open-ended (valid from start onwards).
    Invariant: start <= end when end is set (enforced at construction).
    """

    start: date
    end: Optional[date] = None

    def __post_init__(self) -> None:
        if self.end is not None and self.start > self.end:
            raise ValueError(
                f"DateWindow start ({self.start}) must be <= end ({self.end})."
            )

    def contains(self, day: DateLike) -> bool:
        """Check if a day falls within the window (inclusive)."""
        d = as_date(day)
        if d < self.start:
            return False
        return self.end is None or d <= self.end

    def overlaps(self, other: DateWindow) -> bool:
        """Check if two windows overlap."""
        if self.end is not None and other.start > self.end:
            return False
        if other.end is not None and self.start > other.end:
            return False
        return True


# ══════════════════════════════════════════════════════════════
# PURE TEMPORAL FUNCTIONS
# ══════════════════════════════════════════════════════════════

def as_date(value: DateLike) -> date:
    """Drop the time-of-day component, if any."""
    if isinstance(value, datetime):
        return value.date()
    return value


def is_aware(value: DateLike) -> bool:
    """True for a datetime carrying a UTC offset."""
    return isinstance(value, datetime) and value.utcoffset() is not None


def nights_between(check_in: DateLike, check_out: DateLike) -> int:
    """
    Number of billable nights: ceil((check_out - check_in) / 1 day).

    A partial day counts as a full night. The result may be zero or
    negative; callers decide whether that is acceptable. Mixing a naive
    and a timezone-aware datetime raises ValueError.
    """
    if isinstance(check_in, datetime) and isinstance(check_out, datetime):
        if is_aware(check_in) != is_aware(check_out):
            raise ValueError(
                "check_in and check_out must both be timezone-aware or both naive."
            )
        delta = check_out - check_in
        return math.ceil(delta.total_seconds() / _SECONDS_PER_DAY)
    return (as_date(check_out) - as_date(check_in)).days


def stay_nights(check_in: DateLike, nights: int) -> Iterator[date]:
    """Yield the calendar date of each night of a stay."""
    first = as_date(check_in)
    for offset in range(nights):
        yield first + timedelta(days=offset)


def stay_night_list(check_in: DateLike, check_out: DateLike) -> List[date]:
    return list(stay_nights(check_in, max(nights_between(check_in, check_out), 0)))


def month_day_key(value: DateLike) -> str:
    """'MM-DD' key, comparable lexically across a single year."""
    d = as_date(value)
    return f"{d.month:02d}-{d.day:02d}"
