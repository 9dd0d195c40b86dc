"""
Hotel Pricing Engine — Policies
=================================
ChildDiscountPolicy: age band → share of a child's accommodation
waived.

Input checks return Optional[RejectionReason] (None = valid).
Booking checks return Optional[str] (None = passes); the engine turns
each message into a WARN finding and still prices the stay, since
the caller chose the room and tier explicitly.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from core.config.rules import (
    DEFAULT_CHILD_DISCOUNT_BANDS,
    ChildDiscountBand,
    FixedUnitRule,
)
from core.policy.exceptions import reject
from core.policy.rejection import ReasonCode, RejectionReason
from core.policy.result import FindingKind, PolicyFinding, Severity
from core.time.temporal import DateLike, is_aware
from engines.hotel_pricing.models import (
    Child,
    PricingTier,
    RoomPricingProfile,
    ServiceSelections,
)

ZERO = Decimal("0")


# ══════════════════════════════════════════════════════════════
# CHILD DISCOUNT POLICY
# ══════════════════════════════════════════════════════════════

class ChildDiscountPolicy:
    """
    Bands are ordered by max_age; the first band with age < max_age
    applies. Ages past the last band pay the full adult share.

    Default bands: <3 free, 3-6 50%, 7-13 30%, 14+ full price.
    """

    def __init__(
        self, bands: Sequence[ChildDiscountBand] = DEFAULT_CHILD_DISCOUNT_BANDS
    ) -> None:
        bands = tuple(bands)
        for prev, cur in zip(bands, bands[1:]):
            if cur.max_age <= prev.max_age:
                raise ValueError("Child discount bands must have increasing max_age.")
            if cur.fraction > prev.fraction:
                raise ValueError(
                    "Child discount fractions must not increase with age."
                )
        self._bands: Tuple[ChildDiscountBand, ...] = bands

    @property
    def bands(self) -> Tuple[ChildDiscountBand, ...]:
        return self._bands

    def band_for(self, age: int) -> Optional[ChildDiscountBand]:
        if age < 0:
            raise reject(
                ReasonCode.INVALID_CHILD_AGE,
                f"child age must be >= 0, got {age}.",
                "child_discount_policy",
            )
        for band in self._bands:
            if age < band.max_age:
                return band
        return None

    def discount_fraction(self, age: int) -> Decimal:
        band = self.band_for(age)
        return band.fraction if band is not None else ZERO

    def band_code(self, age: int) -> Optional[str]:
        """CHILD_<from>_<to> for the band the age falls in."""
        band = self.band_for(age)
        if band is None:
            return None
        lower = 0
        for b in self._bands:
            if b is band:
                break
            lower = b.max_age
        return f"CHILD_{lower}_{band.max_age}"


# ══════════════════════════════════════════════════════════════
# INPUT VALIDATION
# ══════════════════════════════════════════════════════════════

def stay_dates_policy(check_in: DateLike, check_out: DateLike) -> Optional[RejectionReason]:
    if (
        isinstance(check_in, datetime)
        and isinstance(check_out, datetime)
        and is_aware(check_in) != is_aware(check_out)
    ):
        return RejectionReason(
            code=ReasonCode.INVALID_DATE_RANGE,
            message="check-in and check-out must both carry a timezone or neither.",
            policy_name="stay_dates_policy",
        )
    return None


def stay_length_policy(nights: int) -> Optional[RejectionReason]:
    if nights <= 0:
        return RejectionReason(
            code=ReasonCode.INVALID_DATE_RANGE,
            message=f"check-out must be after check-in (got {nights} nights).",
            policy_name="stay_length_policy",
        )
    return None


def occupancy_policy(adults: int, children: Iterable[Child]) -> Optional[RejectionReason]:
    if adults < 0:
        return RejectionReason(
            code=ReasonCode.NEGATIVE_OCCUPANCY,
            message=f"adults cannot be negative (got {adults}).",
            policy_name="occupancy_policy",
        )
    for child in children:
        if child.age < 0:
            return RejectionReason(
                code=ReasonCode.INVALID_CHILD_AGE,
                message=f"child age must be >= 0, got {child.age}.",
                policy_name="occupancy_policy",
            )
    return None


def service_quantity_policy(services: ServiceSelections) -> Optional[RejectionReason]:
    for name in ("parking_spots", "pet_count", "towels_per_day"):
        value = getattr(services, name)
        if value < 0:
            return RejectionReason(
                code=ReasonCode.INVALID_SERVICE_QUANTITY,
                message=f"{name} cannot be negative (got {value}).",
                policy_name="service_quantity_policy",
            )
    return None


# ══════════════════════════════════════════════════════════════
# BOOKING CHECKS (non-blocking)
# ══════════════════════════════════════════════════════════════

def tier_must_be_active_policy(tier: PricingTier) -> Optional[str]:
    if not tier.is_active:
        return f"pricing tier '{tier.tier_id}' is inactive."
    return None


def tier_must_cover_date_policy(tier: PricingTier, check_in: DateLike) -> Optional[str]:
    if tier.validity is not None and not tier.validity.contains(check_in):
        return (f"pricing tier '{tier.tier_id}' is not valid on "
                f"{check_in:%Y-%m-%d}.")
    return None


def tier_must_cover_room_type_policy(tier: PricingTier, room_type: str) -> Optional[str]:
    if not tier.covers_room_type(room_type):
        return (f"pricing tier '{tier.tier_id}' does not apply to "
                f"room type '{room_type}'.")
    return None


def tier_stay_length_policy(tier: PricingTier, nights: int) -> Optional[str]:
    if tier.min_stay is not None and nights < tier.min_stay:
        return (f"pricing tier '{tier.tier_id}' requires at least "
                f"{tier.min_stay} nights (got {nights}).")
    if tier.max_stay is not None and nights > tier.max_stay:
        return (f"pricing tier '{tier.tier_id}' allows at most "
                f"{tier.max_stay} nights (got {nights}).")
    return None


def fixed_unit_minimum_stay_policy(
    room: RoomPricingProfile, nights: int, rule: FixedUnitRule
) -> Optional[str]:
    if room.is_fixed_per_unit and nights < rule.minimum_stay:
        return (f"room '{room.room_id}' requires a minimum "
                f"{rule.minimum_stay} night stay (got {nights}).")
    return None


def occupancy_within_capacity_policy(
    room: RoomPricingProfile, guests: int
) -> Optional[str]:
    if room.max_occupancy is not None and guests > room.max_occupancy:
        return (f"room '{room.room_id}' sleeps {room.max_occupancy}, "
                f"{guests} guests requested.")
    return None


def evaluate_booking_policies(
    room: RoomPricingProfile,
    tier: Optional[PricingTier],
    check_in: DateLike,
    nights: int,
    guests: int,
    fixed_unit: FixedUnitRule,
) -> Tuple[PolicyFinding, ...]:
    checks: List[Tuple[str, Optional[str]]] = [
        ("FIXED_UNIT_MINIMUM_STAY",
         fixed_unit_minimum_stay_policy(room, nights, fixed_unit)),
        ("OCCUPANCY_EXCEEDED",
         occupancy_within_capacity_policy(room, guests)),
    ]
    if tier is not None:
        checks += [
            ("TIER_INACTIVE", tier_must_be_active_policy(tier)),
            ("TIER_OUT_OF_VALIDITY", tier_must_cover_date_policy(tier, check_in)),
            ("TIER_ROOM_TYPE_MISMATCH",
             tier_must_cover_room_type_policy(tier, room.room_type)),
            ("TIER_STAY_LENGTH", tier_stay_length_policy(tier, nights)),
        ]
    return tuple(
        PolicyFinding(
            code=code,
            message=message,
            severity=Severity.WARN,
            kind=FindingKind.POLICY_WARNING,
        )
        for code, message in checks
        if message is not None
    )
