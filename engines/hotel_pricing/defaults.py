"""
Hotel Pricing Engine — 2026 House Configuration
=================================================
Seasonal calendar, room rate sheets and standard tiers for the 2026
season. Rates are VAT-inclusive; per person except the rooftop
apartment (room 401), which is priced per unit.

Calendar note: period A starts on 01-03 so the new-year span of
period B (12-30 → 01-02) hands over without a gap.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Dict, Mapping, Tuple

from core.config.rules import DEFAULT_PRICING_RULES, PricingRules
from core.time.temporal import DateWindow
from engines.hotel_pricing.calendar import SeasonalCalendar, SeasonRange
from engines.hotel_pricing.models import (
    PricingTier,
    RoomPricingProfile,
    SeasonalPeriod,
)
from engines.hotel_pricing.store import InMemoryPricingStore

A, B, C, D = SeasonalPeriod.A, SeasonalPeriod.B, SeasonalPeriod.C, SeasonalPeriod.D

SEASON_RANGES_2026: Tuple[SeasonRange, ...] = (
    SeasonRange(A, "01-03", "04-01"),
    SeasonRange(A, "10-25", "12-29"),
    SeasonRange(B, "04-02", "05-21"),
    SeasonRange(B, "09-27", "10-24"),
    SeasonRange(B, "12-30", "01-02"),
    SeasonRange(C, "05-22", "07-09"),
    SeasonRange(C, "09-01", "09-26"),
    SeasonRange(D, "07-10", "08-31"),
)


def _sheet(a, b, c, d) -> Dict[SeasonalPeriod, Decimal]:
    return {A: Decimal(a), B: Decimal(b), C: Decimal(c), D: Decimal(d)}


ROOM_RATES_2026: Mapping[str, Dict[SeasonalPeriod, Decimal]] = {
    "big-double": _sheet(56, 70, 87, 106),
    "big-single": _sheet(83, 108, 139, 169),
    "double": _sheet(47, 57, 69, 90),
    "triple": _sheet(47, 57, 69, 90),
    "single": _sheet(70, 88, 110, 144),
    "family": _sheet(47, 57, 69, 90),
    "apartment": _sheet(47, 57, 69, 90),
    "rooftop-apartment": _sheet(250, 300, 360, 450),
}

FIXED_UNIT_ROOM_ID = "401"

_YEAR_2026 = DateWindow(date(2026, 1, 1), date(2026, 12, 31))
_YEAR_2025 = DateWindow(date(2025, 1, 1), date(2025, 12, 31))

PRICING_TIERS_2026: Tuple[PricingTier, ...] = (
    PricingTier(
        tier_id="2026-standard",
        name="2026 Standard",
        seasonal_values={A: Decimal("1.0"), B: Decimal("1.0"),
                         C: Decimal("1.0"), D: Decimal("1.0")},
        validity=_YEAR_2026,
        is_default=True,
        description="Standard pricing for the 2026 season.",
    ),
    PricingTier(
        tier_id="2025-standard",
        name="2025 Standard",
        seasonal_values={A: Decimal("1.0"), B: Decimal("1.0"),
                         C: Decimal("1.0"), D: Decimal("1.0")},
        validity=_YEAR_2025,
        description="2025 pricing, same rates as 2026.",
    ),
    PricingTier(
        tier_id="agency-tui",
        name="TUI Agency Rates",
        seasonal_values={A: Decimal("0.85"), B: Decimal("0.90"),
                         C: Decimal("0.95"), D: Decimal("0.90")},
        validity=_YEAR_2026,
        description="Tour operator rates.",
    ),
    PricingTier(
        tier_id="agency-local",
        name="Local Travel Agency",
        seasonal_values={A: Decimal("0.80"), B: Decimal("0.85"),
                         C: Decimal("0.90"), D: Decimal("0.85")},
        validity=_YEAR_2026,
        description="Rates for Croatian travel agencies.",
    ),
)


def default_calendar(rules: PricingRules = DEFAULT_PRICING_RULES) -> SeasonalCalendar:
    return SeasonalCalendar(SEASON_RANGES_2026, rules.tourism_tax)


def room_profile(room_id: str, room_type: str, **kwargs) -> RoomPricingProfile:
    """Profile using the 2026 sheet for its room type."""
    return RoomPricingProfile(
        room_id=room_id,
        room_type=room_type,
        seasonal_rates=dict(ROOM_RATES_2026[room_type]),
        **kwargs,
    )


def default_store() -> InMemoryPricingStore:
    """One sample room per type plus the rooftop apartment and standard tiers."""
    rooms = [
        room_profile(f"{room_type}-sample", room_type)
        for room_type in ROOM_RATES_2026
        if room_type != "rooftop-apartment"
    ]
    rooms.append(room_profile(
        FIXED_UNIT_ROOM_ID, "rooftop-apartment",
        is_fixed_per_unit=True, max_occupancy=2, room_number="401",
    ))
    return InMemoryPricingStore(rooms=rooms, tiers=PRICING_TIERS_2026)
