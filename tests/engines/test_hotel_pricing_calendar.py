"""
Hotel Pricing — Seasonal Calendar and Rate Table Tests
========================================================
"""

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from core.policy.exceptions import ValidationError
from engines.hotel_pricing.calendar import SeasonalCalendar, SeasonRange
from engines.hotel_pricing.defaults import (
    ROOM_RATES_2026,
    SEASON_RANGES_2026,
    default_calendar,
)
from engines.hotel_pricing.models import (
    PricingTier,
    RoomPricingProfile,
    SeasonalPeriod,
    TourismTaxBracket,
)
from engines.hotel_pricing.rates import RateTable

A, B, C, D = SeasonalPeriod.A, SeasonalPeriod.B, SeasonalPeriod.C, SeasonalPeriod.D


def all_days(year):
    day = date(year, 1, 1)
    while day.year == year:
        yield day
        day += timedelta(days=1)


# ══════════════════════════════════════════════════════════════
# SEASON RANGE
# ══════════════════════════════════════════════════════════════

class TestSeasonRange:
    def test_plain_range_inclusive(self):
        season = SeasonRange(D, "07-10", "08-31")
        assert season.matches(date(2026, 7, 10))
        assert season.matches(date(2026, 8, 31))
        assert not season.matches(date(2026, 7, 9))
        assert not season.matches(date(2026, 9, 1))

    def test_year_wrap(self):
        season = SeasonRange(B, "12-30", "01-02")
        assert season.wraps_year
        for day in (date(2026, 12, 30), date(2026, 12, 31),
                    date(2027, 1, 1), date(2027, 1, 2)):
            assert season.matches(day)
        assert not season.matches(date(2027, 1, 3))
        assert not season.matches(date(2026, 12, 29))

    def test_ignores_time_of_day(self):
        season = SeasonRange(D, "07-10", "08-31")
        assert season.matches(datetime(2026, 8, 31, 23, 59))

    @pytest.mark.parametrize("bad", ["7-10", "13-01", "07/10", "07-32", ""])
    def test_invalid_format(self, bad):
        with pytest.raises(ValueError, match="MM-DD"):
            SeasonRange(A, bad, "08-31")


# ══════════════════════════════════════════════════════════════
# SEASONAL CALENDAR
# ══════════════════════════════════════════════════════════════

class TestSeasonalCalendar:
    @pytest.mark.parametrize("year", [2026, 2028])
    def test_every_day_has_exactly_one_period(self, year):
        calendar = default_calendar()
        for day in all_days(year):
            matching = [s for s in SEASON_RANGES_2026 if s.matches(day)]
            assert len(matching) == 1, day
            period, matched = calendar.resolve(day)
            assert matched
            assert period in (A, B, C, D)

    @pytest.mark.parametrize("day,expected", [
        (date(2026, 1, 2), B),
        (date(2026, 1, 3), A),
        (date(2026, 4, 1), A),
        (date(2026, 4, 2), B),
        (date(2026, 5, 22), C),
        (date(2026, 7, 10), D),
        (date(2026, 8, 31), D),
        (date(2026, 9, 1), C),
        (date(2026, 9, 27), B),
        (date(2026, 10, 25), A),
        (date(2026, 12, 30), B),
    ])
    def test_default_periods(self, day, expected):
        assert default_calendar().period_for(day) == expected

    def test_unmatched_date_falls_back_to_a(self, caplog):
        calendar = SeasonalCalendar([SeasonRange(D, "07-10", "08-31")])
        with caplog.at_level("WARNING", logger="hotel_pricing.calendar"):
            period, matched = calendar.resolve(date(2026, 2, 1))
        assert period == A
        assert not matched
        assert "falling back to period A" in caplog.text

    def test_tourism_bracket_independent_of_period(self):
        calendar = default_calendar()
        assert calendar.tourism_tax_bracket(date(2026, 4, 1)) == TourismTaxBracket.HIGH
        assert calendar.period_for(date(2026, 4, 1)) == A
        assert calendar.tourism_tax_bracket(date(2026, 9, 30)) == TourismTaxBracket.HIGH
        assert calendar.tourism_tax_bracket(date(2026, 10, 1)) == TourismTaxBracket.LOW
        assert calendar.tourism_tax_bracket(date(2026, 3, 31)) == TourismTaxBracket.LOW
        assert calendar.is_high_season(datetime(2026, 7, 15, 14))


# ══════════════════════════════════════════════════════════════
# RATE TABLE
# ══════════════════════════════════════════════════════════════

def rate_table():
    return RateTable(ROOM_RATES_2026, Decimal("100.00"))


class TestRateTable:
    def test_base_rate(self):
        assert rate_table().base_rate("double", D) == Decimal("90")
        assert rate_table().base_rate("rooftop-apartment", A) == Decimal("250")

    def test_percentage_tier_multiplies(self):
        tier = PricingTier(tier_id="agency", name="Agency",
                           seasonal_values={D: Decimal("0.85")})
        assert rate_table().base_rate("double", D, tier) == Decimal("76.50")

    def test_unit_tier_value_of_one_is_unchanged(self):
        tier = PricingTier(tier_id="std", name="Standard",
                           seasonal_values={D: Decimal("1.0")})
        assert rate_table().base_rate("single", D, tier) == Decimal("144")

    def test_absolute_tier_overrides(self):
        tier = PricingTier(tier_id="corp", name="Corporate", is_percentage=False,
                           seasonal_values={D: Decimal("75")})
        assert rate_table().base_rate("double", D, tier) == Decimal("75")

    def test_tier_without_period_value_leaves_rate(self):
        tier = PricingTier(tier_id="corp", name="Corporate",
                           seasonal_values={A: Decimal("0.5")})
        assert rate_table().base_rate("double", C, tier) == Decimal("69")

    def test_unknown_room_type_falls_back(self, caplog):
        with caplog.at_level("WARNING", logger="hotel_pricing.rates"):
            quote = rate_table().quote("penthouse", D)
        assert quote.uses_fallback
        assert quote.amount == Decimal("100.00")
        assert "penthouse" in quote.fallback_reason
        assert "fallback rate" in caplog.text

    def test_missing_period_rate_falls_back(self):
        table = RateTable({"double": {A: Decimal("47")}}, Decimal("100.00"))
        quote = table.quote("double", D)
        assert quote.uses_fallback
        assert quote.amount == Decimal("100.00")

    def test_fallback_ignores_tier(self):
        tier = PricingTier(tier_id="agency", name="Agency",
                           seasonal_values={D: Decimal("0.5")})
        assert rate_table().base_rate("penthouse", D, tier) == Decimal("100.00")

    def test_non_period_raises(self):
        with pytest.raises(ValidationError, match="UNKNOWN_SEASONAL_PERIOD"):
            rate_table().quote("double", "E")

    def test_from_profiles_first_profile_wins(self):
        table = RateTable.from_profiles([
            RoomPricingProfile("101", "double", {D: Decimal("90")}),
            RoomPricingProfile("102", "double", {D: Decimal("95")}),
        ], Decimal("100"))
        assert table.base_rate("double", D) == Decimal("90")
        assert table.room_types() == ["double"]
