"""
Hotel Pricing Engine — Seasonal Calendar
==========================================
Two independent calendars:

    1. Rate periods A/B/C/D, configured as 'MM-DD' spans. A span whose
       start sorts after its end wraps the year boundary
       (e.g. 12-30 → 01-02).
    2. Tourism tax brackets: HIGH for the configured months
       (April–September by default), LOW otherwise.

A date no span covers falls back to period A. Pricing must never
block a booking on calendar misconfiguration; `resolve()` reports
the miss so the caller can flag it.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Tuple

from core.config.rules import TourismTaxRule
from core.time.temporal import DateLike, as_date, month_day_key
from engines.hotel_pricing.models import SeasonalPeriod, TourismTaxBracket

logger = logging.getLogger("hotel_pricing.calendar")

FALLBACK_PERIOD = SeasonalPeriod.A

_MONTH_DAY = re.compile(r"^(0[1-9]|1[0-2])-(0[1-9]|[12][0-9]|3[01])$")


@dataclass(frozen=True)
class SeasonRange:
    """A month-day span mapped to a rate period. Both ends inclusive."""

    period: SeasonalPeriod
    start: str  # 'MM-DD'
    end: str    # 'MM-DD'

    def __post_init__(self) -> None:
        for name in ("start", "end"):
            value = getattr(self, name)
            if not isinstance(value, str) or not _MONTH_DAY.match(value):
                raise ValueError(f"{name} must be 'MM-DD', got {value!r}.")

    @property
    def wraps_year(self) -> bool:
        return self.start > self.end

    def matches(self, day: DateLike) -> bool:
        key = month_day_key(day)
        if self.wraps_year:
            return key >= self.start or key <= self.end
        return self.start <= key <= self.end


class SeasonalCalendar:
    """Date → rate period and tourism tax bracket. Read-only after construction."""

    def __init__(
        self,
        ranges: Iterable[SeasonRange],
        tourism_tax: TourismTaxRule = TourismTaxRule(),
    ) -> None:
        self._ranges: Tuple[SeasonRange, ...] = tuple(ranges)
        self._high_months = frozenset(tourism_tax.high_season_months)

    @property
    def ranges(self) -> Tuple[SeasonRange, ...]:
        return self._ranges

    def resolve(self, day: DateLike) -> Tuple[SeasonalPeriod, bool]:
        """(period, matched). matched=False means the fallback was used."""
        for season in self._ranges:
            if season.matches(day):
                return season.period, True
        logger.warning(
            f"No seasonal range covers {month_day_key(day)}; "
            f"falling back to period {FALLBACK_PERIOD.value}."
        )
        return FALLBACK_PERIOD, False

    def period_for(self, day: DateLike) -> SeasonalPeriod:
        return self.resolve(day)[0]

    def tourism_tax_bracket(self, day: DateLike) -> TourismTaxBracket:
        if as_date(day).month in self._high_months:
            return TourismTaxBracket.HIGH
        return TourismTaxBracket.LOW

    def is_high_season(self, day: DateLike) -> bool:
        return self.tourism_tax_bracket(day) is TourismTaxBracket.HIGH
