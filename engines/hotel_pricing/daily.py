"""
Hotel Pricing Engine — Daily Pricing Expander
===============================================
Splits a reservation into one priced line per night so staff can
edit a single night's occupancy (a child leaving early, a parking
spot for two nights only) and re-price it independently.

Period handling (PeriodMode):
    FROZEN_AT_CHECK_IN (default) — every night uses the check-in
        date's rate period and tourism tax bracket, matching the
        whole-stay engine. Constant occupancy therefore reconciles
        exactly with ReservationPricingEngine.calculate().
    PER_NIGHT — each night resolves its own period and bracket.
        Stays that cross a period boundary will not reconcile; the
        mismatch is reported as a finding.

Stay-level rules are distributed, not re-applied per night:
    - the short-stay supplement is judged on the total stay length
    - the flat pet fee is charged on the first night pets are present
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from core.config.rules import VatCategory
from core.policy.exceptions import ValidationError, reject
from core.policy.rejection import ReasonCode, RejectionReason
from core.policy.result import FindingKind, PolicyFinding, Severity
from core.time.temporal import as_date, stay_nights
from engines.hotel_pricing.models import (
    AccommodationPrice,
    Child,
    PricingResult,
    ReservationPricingParams,
    SeasonalPeriod,
    ServiceCharges,
    ServiceSelections,
    TourismTaxBracket,
    VatBreakdown,
    money_str,
)
from engines.hotel_pricing.policies import (
    evaluate_booking_policies,
    occupancy_policy,
    service_quantity_policy,
)
from engines.hotel_pricing.services import ReservationPricingEngine

logger = logging.getLogger("hotel_pricing.daily")

ZERO = Decimal("0")
DEFAULT_TOLERANCE = Decimal("0.01")


class PeriodMode(Enum):
    FROZEN_AT_CHECK_IN = "FROZEN_AT_CHECK_IN"
    PER_NIGHT = "PER_NIGHT"


# ══════════════════════════════════════════════════════════════
# DATA MODEL
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class NightOccupancy:
    """Who stays, and which services are used, on one night."""

    stay_date: date
    adults: int
    children: Tuple[Child, ...] = ()
    services: ServiceSelections = field(default_factory=ServiceSelections)
    notes: str = ""

    @property
    def guest_count(self) -> int:
        return self.adults + len(self.children)


@dataclass(frozen=True)
class DailyPricingLine:
    stay_date: date
    occupancy: NightOccupancy
    seasonal_period: SeasonalPeriod
    tourism_bracket: TourismTaxBracket
    base_rate: Decimal
    accommodation: AccommodationPrice
    short_stay_supplement: Decimal
    services: ServiceCharges
    editable: bool = True

    @property
    def net_accommodation(self) -> Decimal:
        return self.accommodation.net

    @property
    def accommodation_total(self) -> Decimal:
        return self.accommodation.net + self.short_stay_supplement

    @property
    def daily_total(self) -> Decimal:
        return self.accommodation_total + self.services.total

    def to_payload(self) -> dict:
        """One persisted row per stay night."""
        return {
            "stay_date": self.stay_date.isoformat(),
            "adults_present": self.occupancy.adults,
            "children_present": [
                c.child_id if c.child_id is not None else c.age
                for c in self.occupancy.children
            ],
            "parking_spots": self.occupancy.services.parking_spots,
            "pets_present": self.occupancy.services.has_pets,
            "towel_rentals": self.occupancy.services.towels_per_day,
            "seasonal_period": self.seasonal_period.value,
            "base_rate": money_str(self.base_rate),
            "base_accommodation": money_str(self.accommodation.gross),
            "discounts": money_str(self.accommodation.total_discounts),
            "net_accommodation": money_str(self.accommodation.net),
            "short_stay_supplement": money_str(self.short_stay_supplement),
            "service_fees": {
                c.code.lower(): money_str(c.amount) for c in self.services.items()
            },
            "daily_total": money_str(self.daily_total),
            "editable": self.editable,
        }


@dataclass(frozen=True)
class DailySummary:
    total_nights: int
    total_accommodation: Decimal
    total_services: Decimal
    grand_total: Decimal
    vat: VatBreakdown


@dataclass(frozen=True)
class DailyPricingResult:
    room_id: str
    check_in: date
    check_out: date
    period_mode: PeriodMode
    lines: Tuple[DailyPricingLine, ...]
    summary: DailySummary
    findings: Tuple[PolicyFinding, ...] = ()

    @property
    def daily_breakdown(self) -> Tuple[DailyPricingLine, ...]:
        return self.lines

    @property
    def uses_fallback(self) -> bool:
        return any(f.is_fallback for f in self.findings)

    @property
    def reconciled(self) -> bool:
        return not any(
            f.kind == FindingKind.RECONCILIATION_MISMATCH for f in self.findings
        )

    def line_for(self, day) -> Optional[DailyPricingLine]:
        d = as_date(day)
        for line in self.lines:
            if line.stay_date == d:
                return line
        return None

    def to_payload(self) -> dict:
        return {
            "room_id": self.room_id,
            "check_in": self.check_in.isoformat(),
            "check_out": self.check_out.isoformat(),
            "period_mode": self.period_mode.value,
            "daily_breakdown": [line.to_payload() for line in self.lines],
            "summary": {
                "total_nights": self.summary.total_nights,
                "total_accommodation": money_str(self.summary.total_accommodation),
                "total_services": money_str(self.summary.total_services),
                "grand_total": money_str(self.summary.grand_total),
                "vat": self.summary.vat.to_payload(),
            },
            "uses_fallback": self.uses_fallback,
            "findings": [f.to_dict() for f in self.findings],
        }


@dataclass(frozen=True)
class DailyPricingOutcome:
    result: Optional[DailyPricingResult] = None
    reason: Optional[RejectionReason] = None

    def __post_init__(self):
        if (self.result is None) == (self.reason is None):
            raise ValueError("DailyPricingOutcome needs exactly one of result or reason.")

    @property
    def is_accepted(self) -> bool:
        return self.result is not None

    @property
    def is_rejected(self) -> bool:
        return self.reason is not None

    def unwrap(self) -> DailyPricingResult:
        if self.reason is not None:
            raise ValidationError(self.reason)
        return self.result


# ══════════════════════════════════════════════════════════════
# RECONCILIATION
# ══════════════════════════════════════════════════════════════

def reconcile(
    daily: DailyPricingResult,
    stay: PricingResult,
    tolerance: Decimal = DEFAULT_TOLERANCE,
) -> Optional[PolicyFinding]:
    """Compare the daily aggregate with the whole-stay total."""
    difference = daily.summary.grand_total - stay.grand_total
    if abs(difference) <= tolerance:
        return None
    logger.warning(
        f"Daily pricing for room {daily.room_id} ({daily.check_in} → "
        f"{daily.check_out}) totals {daily.summary.grand_total}, whole stay "
        f"{stay.grand_total} (difference {difference})."
    )
    return PolicyFinding(
        code="DAILY_TOTAL_MISMATCH",
        message=(f"daily breakdown differs from the stay total by "
                 f"{money_str(difference)}."),
        severity=Severity.REVIEW,
        kind=FindingKind.RECONCILIATION_MISMATCH,
        metadata={
            "daily_total": str(daily.summary.grand_total),
            "stay_total": str(stay.grand_total),
            "tolerance": str(tolerance),
        },
    )


# ══════════════════════════════════════════════════════════════
# EXPANDER
# ══════════════════════════════════════════════════════════════

class DailyPricingExpander:
    def __init__(
        self,
        engine: ReservationPricingEngine,
        period_mode: PeriodMode = PeriodMode.FROZEN_AT_CHECK_IN,
        tolerance: Decimal = DEFAULT_TOLERANCE,
    ) -> None:
        self._engine = engine
        self._period_mode = period_mode
        self._tolerance = tolerance

    def expand(
        self,
        params: ReservationPricingParams,
        per_day_occupancy: Optional[Iterable[NightOccupancy]] = None,
    ) -> DailyPricingOutcome:
        try:
            result = self._expand(params, tuple(per_day_occupancy or ()))
        except ValidationError as exc:
            logger.info(
                f"Daily pricing rejected for room {params.room_id}: "
                f"[{exc.reason.code}] {exc.reason.message}"
            )
            return DailyPricingOutcome(reason=exc.reason)
        return DailyPricingOutcome(result=result)

    @staticmethod
    def default_occupancy(params: ReservationPricingParams, day: date) -> NightOccupancy:
        return NightOccupancy(
            stay_date=day,
            adults=params.adults,
            children=tuple(params.children),
            services=params.services,
        )

    def _expand(
        self,
        params: ReservationPricingParams,
        overrides: Tuple[NightOccupancy, ...],
    ) -> DailyPricingResult:
        engine = self._engine
        nights = engine.validate(params)
        night_dates = list(stay_nights(params.check_in, nights))
        by_date = self._index_overrides(overrides, set(night_dates))

        findings: List[PolicyFinding] = []
        room, found = engine.resolve_room(params.room_id)
        _merge(findings, found)
        tier, found = engine.resolve_tier(params.pricing_tier_id)
        _merge(findings, found)
        stay_period, stay_bracket, found = engine.resolve_period(params.check_in)
        _merge(findings, found)

        lines: List[DailyPricingLine] = []
        pets_charged = False
        max_guests = 0
        for day in night_dates:
            occupancy = by_date.get(day) or self.default_occupancy(params, day)
            max_guests = max(max_guests, occupancy.guest_count)

            if self._period_mode is PeriodMode.PER_NIGHT:
                period, bracket, found = engine.resolve_period(day)
                _merge(findings, found)
            else:
                period, bracket = stay_period, stay_bracket

            quote, found = engine.quote_rate(room, period, tier)
            _merge(findings, found)

            charge_pets = occupancy.services.has_pets and not pets_charged
            block = engine.price_block(
                room, quote.amount, 1, occupancy.adults, occupancy.children,
                occupancy.services, bracket, params.vip_discount_percent,
                stay_nights=nights, include_pet_fee=charge_pets,
            )
            pets_charged = pets_charged or charge_pets

            lines.append(DailyPricingLine(
                stay_date=day,
                occupancy=occupancy,
                seasonal_period=period,
                tourism_bracket=bracket,
                base_rate=quote.amount,
                accommodation=block.accommodation,
                short_stay_supplement=block.short_stay_supplement,
                services=block.services,
            ))

        _merge(findings, evaluate_booking_policies(
            room, tier, params.check_in, nights, max_guests,
            engine.rules.fixed_unit,
        ))

        daily = DailyPricingResult(
            room_id=room.room_id,
            check_in=as_date(params.check_in),
            check_out=as_date(params.check_out),
            period_mode=self._period_mode,
            lines=tuple(lines),
            summary=self._summarize(lines),
            findings=tuple(findings),
        )

        if overrides:
            return daily

        stay = engine.calculate(params)
        mismatch = reconcile(daily, stay.unwrap(), self._tolerance)
        if mismatch is None:
            return daily
        return DailyPricingResult(
            room_id=daily.room_id,
            check_in=daily.check_in,
            check_out=daily.check_out,
            period_mode=daily.period_mode,
            lines=daily.lines,
            summary=daily.summary,
            findings=daily.findings + (mismatch,),
        )

    def _index_overrides(
        self, overrides: Tuple[NightOccupancy, ...], nights: set
    ) -> Dict[date, NightOccupancy]:
        by_date: Dict[date, NightOccupancy] = {}
        for night in overrides:
            day = as_date(night.stay_date)
            if day not in nights:
                raise reject(
                    ReasonCode.NIGHT_OUTSIDE_STAY,
                    f"{day.isoformat()} is not a night of this stay.",
                    "daily_pricing_expander",
                )
            if day in by_date:
                raise reject(
                    ReasonCode.DUPLICATE_NIGHT_OVERRIDE,
                    f"{day.isoformat()} has more than one occupancy override.",
                    "daily_pricing_expander",
                )
            reason = (
                occupancy_policy(night.adults, night.children)
                or service_quantity_policy(night.services)
            )
            if reason is not None:
                raise ValidationError(reason)
            by_date[day] = night
        return by_date

    def _summarize(self, lines: List[DailyPricingLine]) -> DailySummary:
        total_accommodation = sum((l.accommodation_total for l in lines), ZERO)
        total_services = sum((l.services.total for l in lines), ZERO)
        services_vat = sum((l.services.vat_amount for l in lines), ZERO)
        rule = self._engine.rules.vat_rule(VatCategory.ACCOMMODATION)
        return DailySummary(
            total_nights=len(lines),
            total_accommodation=total_accommodation,
            total_services=total_services,
            grand_total=total_accommodation + total_services,
            vat=VatBreakdown(
                accommodation_vat=rule.extract_included(total_accommodation),
                services_vat=services_vat,
            ),
        )


def _merge(findings: List[PolicyFinding], new: Iterable[PolicyFinding]) -> None:
    seen = {(f.code, f.message) for f in findings}
    for finding in new:
        if (finding.code, finding.message) not in seen:
            findings.append(finding)
            seen.add((finding.code, finding.message))
