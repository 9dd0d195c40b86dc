"""
Hotel Pricing Engine — Rate Table
===================================
Room type × seasonal period → nightly base rate, with an optional
pricing tier overlay.

Missing data never raises: an unknown room type or a period without
a rate yields the configured fallback rate, flagged on the quote so
the caller can mark the result for staff review.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, Mapping, Optional

from core.policy.exceptions import reject
from core.policy.rejection import ReasonCode
from engines.hotel_pricing.models import (
    PricingTier,
    RoomPricingProfile,
    SeasonalPeriod,
)

logger = logging.getLogger("hotel_pricing.rates")


@dataclass(frozen=True)
class RateQuote:
    amount: Decimal        # after tier overlay
    base_amount: Decimal   # before tier overlay
    period: SeasonalPeriod
    uses_fallback: bool = False
    fallback_reason: str = ""


class RateTable:
    def __init__(
        self,
        rates_by_room_type: Mapping[str, Mapping[SeasonalPeriod, Decimal]],
        fallback_rate: Decimal,
    ) -> None:
        self._rates: Dict[str, Dict[SeasonalPeriod, Decimal]] = {
            room_type: dict(rates) for room_type, rates in rates_by_room_type.items()
        }
        self._fallback_rate = fallback_rate

    @classmethod
    def from_profiles(
        cls, profiles: Iterable[RoomPricingProfile], fallback_rate: Decimal
    ) -> RateTable:
        """First profile of each room type defines that type's rate sheet."""
        rates: Dict[str, Mapping[SeasonalPeriod, Decimal]] = {}
        for profile in profiles:
            rates.setdefault(profile.room_type, profile.seasonal_rates)
        return cls(rates, fallback_rate)

    @classmethod
    def for_profile(
        cls, profile: RoomPricingProfile, fallback_rate: Decimal
    ) -> RateTable:
        """Single-sheet table holding one room's own seasonal rates."""
        return cls({profile.room_type: profile.seasonal_rates}, fallback_rate)

    @property
    def fallback_rate(self) -> Decimal:
        return self._fallback_rate

    def room_types(self):
        return sorted(self._rates)

    def quote(
        self,
        room_type: str,
        period: SeasonalPeriod,
        tier: Optional[PricingTier] = None,
    ) -> RateQuote:
        if not isinstance(period, SeasonalPeriod):
            raise reject(
                ReasonCode.UNKNOWN_SEASONAL_PERIOD,
                f"'{period}' is not a seasonal period.",
                "rate_table_lookup",
            )

        sheet = self._rates.get(room_type)
        if sheet is None:
            reason = f"room type '{room_type}' has no rate sheet"
            base = None
        else:
            base = sheet.get(period)
            reason = f"room type '{room_type}' has no rate for period {period.value}"

        if base is None:
            logger.warning(f"{reason}; using fallback rate {self._fallback_rate}.")
            return RateQuote(
                amount=self._fallback_rate,
                base_amount=self._fallback_rate,
                period=period,
                uses_fallback=True,
                fallback_reason=reason,
            )

        amount = tier.apply(base, period) if tier is not None else base
        return RateQuote(amount=amount, base_amount=base, period=period)

    def base_rate(
        self,
        room_type: str,
        period: SeasonalPeriod,
        tier: Optional[PricingTier] = None,
    ) -> Decimal:
        return self.quote(room_type, period, tier).amount
