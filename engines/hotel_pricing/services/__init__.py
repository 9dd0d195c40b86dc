"""
Hotel Pricing Engine — Reservation Pricing Service
====================================================
Whole-stay price for a reservation:

    1. nights = ceil((check_out - check_in) / 1 day); <= 0 is rejected
    2. period = seasonal period of the check-in date, for the whole
       stay (no pro-rating across a period boundary)
    3. base rate = rate table lookup with the selected tier overlay
    4. accommodation = per person with child discounts, or per unit
    5. short-stay supplement on the post-discount accommodation
    6. accommodation total = net accommodation + supplement
    7. services = tourism tax + parking + pets + towels
    8. grand total = accommodation total + services
    9. VAT extracted from the totals for reporting, never added

Rejections come back as PricingOutcome.rejected(reason).
Missing room, rate, tier or calendar data prices with a fallback
and marks the result `uses_fallback` with a REVIEW finding.

Stateless between calls: one engine may serve concurrent callers.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Tuple

from core.config.rules import DEFAULT_PRICING_RULES, PricingRules, VatCategory
from core.policy.exceptions import ValidationError
from core.policy.result import PolicyFinding, missing_configuration
from core.time.temporal import DateLike, as_date, nights_between
from engines.hotel_pricing.accommodation import AccommodationPricer
from engines.hotel_pricing.calendar import SeasonalCalendar
from engines.hotel_pricing.defaults import default_calendar
from engines.hotel_pricing.fees import ServiceFeeCalculator
from engines.hotel_pricing.models import (
    AccommodationPrice,
    Child,
    PricingOutcome,
    PricingResult,
    PricingTier,
    ReservationPricingParams,
    RoomPricingProfile,
    SeasonalPeriod,
    ServiceCharges,
    ServiceSelections,
    TourismTaxBracket,
    VatBreakdown,
)
from engines.hotel_pricing.policies import (
    ChildDiscountPolicy,
    evaluate_booking_policies,
    occupancy_policy,
    service_quantity_policy,
    stay_dates_policy,
    stay_length_policy,
)
from engines.hotel_pricing.rates import RateQuote, RateTable
from engines.hotel_pricing.store import PricingConfigStore

logger = logging.getLogger("hotel_pricing.engine")

UNKNOWN_ROOM_TYPE = "unknown"


@dataclass(frozen=True)
class PricedBlock:
    """Accommodation and services for a run of nights at one rate."""

    accommodation: AccommodationPrice
    short_stay_supplement: Decimal
    services: ServiceCharges

    @property
    def accommodation_total(self) -> Decimal:
        return self.accommodation.net + self.short_stay_supplement

    @property
    def total(self) -> Decimal:
        return self.accommodation_total + self.services.total


class ReservationPricingEngine:
    def __init__(
        self,
        store: PricingConfigStore,
        rules: PricingRules = DEFAULT_PRICING_RULES,
        calendar: Optional[SeasonalCalendar] = None,
        rate_table: Optional[RateTable] = None,
        child_policy: Optional[ChildDiscountPolicy] = None,
    ) -> None:
        if calendar is None:
            calendar = default_calendar(rules)
        self._store = store
        self._rules = rules
        self._calendar = calendar
        self._rates = rate_table
        self._accommodation = AccommodationPricer(
            child_policy or ChildDiscountPolicy(rules.child_discount_bands)
        )
        self._fees = ServiceFeeCalculator(rules)

    @property
    def rules(self) -> PricingRules:
        return self._rules

    @property
    def calendar(self) -> SeasonalCalendar:
        return self._calendar

    @property
    def fees(self) -> ServiceFeeCalculator:
        return self._fees

    # ── public API ────────────────────────────────────────────

    def calculate(
        self, params: ReservationPricingParams, extract_vat: bool = True
    ) -> PricingOutcome:
        try:
            result = self._calculate(params, extract_vat)
        except ValidationError as exc:
            logger.info(
                f"Pricing rejected for room {params.room_id}: "
                f"[{exc.reason.code}] {exc.reason.message}"
            )
            return PricingOutcome.rejected(exc.reason)
        return PricingOutcome.accepted(result)

    def quick_rate(
        self, room_type: str, period: SeasonalPeriod, tier_id: Optional[str] = None
    ) -> Decimal:
        """Nightly rate for display; falls back silently."""
        tier = self._store.get_tier(tier_id) if tier_id else None
        rates = self._rates or RateTable.from_profiles(
            self._store.list_rooms(), self._rules.fallback_nightly_rate
        )
        return rates.base_rate(room_type, period, tier)

    # ── resolution helpers (shared with the daily expander) ───

    def validate(self, params: ReservationPricingParams) -> int:
        """Return the night count or raise ValidationError."""
        reason = stay_dates_policy(params.check_in, params.check_out)
        if reason is not None:
            raise ValidationError(reason)
        nights = nights_between(params.check_in, params.check_out)
        reason = (
            stay_length_policy(nights)
            or occupancy_policy(params.adults, params.children)
            or service_quantity_policy(params.services)
        )
        if reason is not None:
            raise ValidationError(reason)
        return nights

    def resolve_room(
        self, room_id: str
    ) -> Tuple[RoomPricingProfile, Tuple[PolicyFinding, ...]]:
        room = self._store.get_room(room_id)
        if room is not None:
            return room, ()
        logger.warning(f"Room '{room_id}' not configured; pricing per person at fallback rate.")
        fallback = RoomPricingProfile(
            room_id=room_id or UNKNOWN_ROOM_TYPE, room_type=UNKNOWN_ROOM_TYPE,
        )
        return fallback, (missing_configuration(
            "ROOM_NOT_FOUND",
            f"room '{room_id}' has no pricing profile; fallback pricing used.",
            room_id=room_id,
        ),)

    def resolve_tier(
        self, tier_id: Optional[str]
    ) -> Tuple[Optional[PricingTier], Tuple[PolicyFinding, ...]]:
        if not tier_id:
            return self._store.get_default_tier(), ()
        tier = self._store.get_tier(tier_id)
        if tier is not None:
            return tier, ()
        logger.warning(f"Pricing tier '{tier_id}' not found; pricing without a tier.")
        return None, (missing_configuration(
            "TIER_NOT_FOUND",
            f"pricing tier '{tier_id}' not found; room rates used unchanged.",
            tier_id=tier_id,
        ),)

    def resolve_period(
        self, day: DateLike
    ) -> Tuple[SeasonalPeriod, TourismTaxBracket, Tuple[PolicyFinding, ...]]:
        period, matched = self._calendar.resolve(day)
        bracket = self._calendar.tourism_tax_bracket(day)
        if matched:
            return period, bracket, ()
        return period, bracket, (missing_configuration(
            "SEASON_NOT_CONFIGURED",
            f"no seasonal range covers {as_date(day):%m-%d}; "
            f"period {period.value} used.",
            date=as_date(day).isoformat(),
        ),)

    def quote_rate(
        self,
        room: RoomPricingProfile,
        period: SeasonalPeriod,
        tier: Optional[PricingTier],
    ) -> Tuple[RateQuote, Tuple[PolicyFinding, ...]]:
        if self._rates is not None:
            quote = self._rates.quote(room.room_type, period, tier)
        else:
            quote = RateTable.for_profile(
                room, self._rules.fallback_nightly_rate
            ).quote(room.room_type, period, tier)
        if not quote.uses_fallback:
            return quote, ()
        return quote, (missing_configuration(
            "ROOM_RATE_MISSING",
            f"{quote.fallback_reason}; fallback rate {quote.amount} used.",
            room_type=room.room_type,
            period=period.value,
        ),)

    def price_block(
        self,
        room: RoomPricingProfile,
        base_rate: Decimal,
        nights: int,
        adults: int,
        children: Tuple[Child, ...],
        services: ServiceSelections,
        bracket: TourismTaxBracket,
        vip_discount_percent: Decimal,
        stay_nights: int,
        include_pet_fee: bool = True,
    ) -> PricedBlock:
        """
        Steps 4–8 for `nights` nights. `stay_nights` is the length of
        the whole stay, which decides the short-stay supplement.
        """
        accommodation = self._accommodation.price(
            room, base_rate, nights, adults, children, vip_discount_percent,
        )
        supplement = self._fees.short_stay_supplement(accommodation.net, stay_nights)
        services_charged = self._fees.charges(
            adults, children, nights, bracket, services,
            room.is_fixed_per_unit, include_pet_fee=include_pet_fee,
        )
        return PricedBlock(accommodation, supplement, services_charged)

    def vat_breakdown(
        self, accommodation_total: Decimal, services: ServiceCharges
    ) -> VatBreakdown:
        rule = self._rules.vat_rule(VatCategory.ACCOMMODATION)
        return VatBreakdown(
            accommodation_vat=rule.extract_included(accommodation_total),
            services_vat=services.vat_amount,
        )

    # ── internals ─────────────────────────────────────────────

    def _calculate(
        self, params: ReservationPricingParams, extract_vat: bool
    ) -> PricingResult:
        nights = self.validate(params)
        findings: List[PolicyFinding] = []

        room, found = self.resolve_room(params.room_id)
        findings += found
        tier, found = self.resolve_tier(params.pricing_tier_id)
        findings += found
        period, bracket, found = self.resolve_period(params.check_in)
        findings += found
        quote, found = self.quote_rate(room, period, tier)
        findings += found

        findings += evaluate_booking_policies(
            room, tier, params.check_in, nights, params.guest_count,
            self._rules.fixed_unit,
        )

        block = self.price_block(
            room, quote.amount, nights, params.adults, tuple(params.children),
            params.services, bracket, params.vip_discount_percent, nights,
        )
        accommodation_total = block.accommodation_total
        vat = self.vat_breakdown(accommodation_total, block.services) if extract_vat else None

        logger.debug(
            f"Priced room {room.room_id}: {nights} nights, period {period.value}, "
            f"rate {quote.amount}, total {block.total}"
        )

        return PricingResult(
            room_id=room.room_id,
            room_type=room.room_type,
            is_fixed_per_unit=room.is_fixed_per_unit,
            check_in=as_date(params.check_in),
            check_out=as_date(params.check_out),
            nights=nights,
            seasonal_period=period,
            tourism_bracket=bracket,
            pricing_tier_id=tier.tier_id if tier is not None else None,
            base_rate=quote.amount,
            accommodation=block.accommodation,
            short_stay_supplement=block.short_stay_supplement,
            accommodation_total=accommodation_total,
            services=block.services,
            vat=vat,
            grand_total=block.total,
            findings=tuple(findings),
        )
