"""
Hotel Pricing Engine — Data Model
===================================
Immutable value objects for pricing inputs and outputs.

Inputs (configured once, read-only during pricing):
    RoomPricingProfile, PricingTier
Per-calculation inputs:
    ReservationPricingParams (stay, occupancy, ServiceSelections, tier id)
Outputs (never mutated; a recalculation produces a new object):
    PricingResult, wrapped in PricingOutcome

All amounts are VAT-inclusive Decimals in major currency units,
kept unrounded until `to_payload()`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from core.config.rules import to_decimal
from core.policy.exceptions import ValidationError
from core.policy.rejection import RejectionReason
from core.policy.result import PolicyFinding
from core.time.temporal import DateLike, DateWindow, as_date

CENT = Decimal("0.01")
ZERO = Decimal("0")


def money(value: Decimal) -> Decimal:
    """Round to cents. Presentation boundary only."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def money_str(value: Decimal) -> str:
    return str(money(value))


# ══════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════

class SeasonalPeriod(Enum):
    A = "A"  # Winter / early spring
    B = "B"  # Spring / late fall / new year
    C = "C"  # Early summer / early fall
    D = "D"  # Peak summer


class TourismTaxBracket(Enum):
    HIGH = "HIGH"  # April–September
    LOW = "LOW"


def _period_map(raw: Mapping[Any, Any]) -> Dict[SeasonalPeriod, Decimal]:
    return {
        (k if isinstance(k, SeasonalPeriod) else SeasonalPeriod(str(k).upper())):
            to_decimal(v)
        for k, v in raw.items()
        if v is not None
    }


# ══════════════════════════════════════════════════════════════
# CONFIGURATION RECORDS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RoomPricingProfile:
    """
    Pricing-relevant view of a room.

    seasonal_rates: nightly amount per period. Per person for standard
    rooms, per unit when is_fixed_per_unit (the apartment).
    """

    room_id: str
    room_type: str
    seasonal_rates: Mapping[SeasonalPeriod, Decimal] = field(default_factory=dict)
    is_fixed_per_unit: bool = False
    max_occupancy: Optional[int] = None
    room_number: str = ""

    def __post_init__(self) -> None:
        if not self.room_id:
            raise ValueError("room_id must be a non-empty string.")
        if not self.room_type:
            raise ValueError("room_type must be a non-empty string.")
        if self.max_occupancy is not None and self.max_occupancy <= 0:
            raise ValueError("max_occupancy must be > 0 when set.")
        for period, rate in self.seasonal_rates.items():
            if not isinstance(period, SeasonalPeriod):
                raise ValueError(f"Unknown seasonal period key: {period!r}.")
            if rate < 0:
                raise ValueError(f"Rate for period {period.value} must be >= 0.")

    def rate_for(self, period: SeasonalPeriod) -> Optional[Decimal]:
        return self.seasonal_rates.get(period)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> RoomPricingProfile:
        """
        Build from a persistence row. Accepts either
        {"seasonal_rates": {"A": 47, ...}} or flat seasonal_rate_a..d keys.
        """
        if "seasonal_rates" in payload:
            rates = _period_map(payload["seasonal_rates"])
        else:
            rates = _period_map({
                p.value: payload.get(f"seasonal_rate_{p.value.lower()}")
                for p in SeasonalPeriod
            })
        max_occ = payload.get("max_occupancy")
        return cls(
            room_id=str(payload["room_id"]),
            room_type=str(payload["room_type"]),
            seasonal_rates=rates,
            is_fixed_per_unit=bool(payload.get("is_fixed_per_unit", False)),
            max_occupancy=int(max_occ) if max_occ is not None else None,
            room_number=str(payload.get("room_number", "")),
        )


@dataclass(frozen=True)
class PricingTier:
    """
    Named rate overlay selected explicitly by the caller (corporate,
    agency, yearly standard).

    is_percentage=True:  seasonal_values are multipliers on the room
                         rate (Decimal("0.85") = 15% off).
    is_percentage=False: seasonal_values replace the nightly rate.
    A period without a value leaves the room rate unchanged.
    """

    tier_id: str
    name: str
    seasonal_values: Mapping[SeasonalPeriod, Decimal] = field(default_factory=dict)
    is_percentage: bool = True
    validity: Optional[DateWindow] = None
    room_types: Tuple[str, ...] = ()  # empty = every room type
    min_stay: Optional[int] = None
    max_stay: Optional[int] = None
    is_default: bool = False
    is_active: bool = True
    description: str = ""

    def __post_init__(self) -> None:
        if not self.tier_id:
            raise ValueError("tier_id must be a non-empty string.")
        for period, value in self.seasonal_values.items():
            if not isinstance(period, SeasonalPeriod):
                raise ValueError(f"Unknown seasonal period key: {period!r}.")
            if value < 0:
                raise ValueError(f"Tier value for period {period.value} must be >= 0.")
        if (self.min_stay is not None and self.max_stay is not None
                and self.min_stay > self.max_stay):
            raise ValueError("min_stay cannot exceed max_stay.")

    def apply(self, rate: Decimal, period: SeasonalPeriod) -> Decimal:
        value = self.seasonal_values.get(period)
        if value is None:
            return rate
        if self.is_percentage:
            return rate * value
        return value

    def covers_room_type(self, room_type: str) -> bool:
        return not self.room_types or room_type in self.room_types

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> PricingTier:
        if "seasonal_values" in payload:
            values = _period_map(payload["seasonal_values"])
        else:
            values = _period_map({
                p.value: payload.get(f"seasonal_rate_{p.value.lower()}")
                for p in SeasonalPeriod
            })
        valid_from = payload.get("valid_from")
        validity = None
        if valid_from is not None:
            valid_to = payload.get("valid_to")
            validity = DateWindow(
                start=_parse_date(valid_from),
                end=_parse_date(valid_to) if valid_to is not None else None,
            )
        min_stay = payload.get("min_stay")
        max_stay = payload.get("max_stay")
        return cls(
            tier_id=str(payload["tier_id"]),
            name=str(payload.get("name", payload["tier_id"])),
            seasonal_values=values,
            is_percentage=bool(payload.get(
                "is_percentage", payload.get("is_percentage_discount", True)
            )),
            validity=validity,
            room_types=tuple(payload.get("room_types", ())),
            min_stay=int(min_stay) if min_stay is not None else None,
            max_stay=int(max_stay) if max_stay is not None else None,
            is_default=bool(payload.get("is_default", False)),
            is_active=bool(payload.get("is_active", True)),
            description=str(payload.get("description", "")),
        )


def _parse_date(value: Any) -> date:
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    return as_date(value)


# ══════════════════════════════════════════════════════════════
# CALCULATION INPUTS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Child:
    """A child occupant. Age is fixed for the calculation call."""

    age: int
    child_id: Optional[str] = None
    name: str = ""


@dataclass(frozen=True)
class ServiceSelections:
    """
    Ancillary services. Never receive child discounts.

    towels_per_day: towels rented for each night of the stay; the
    stay is billed towels_per_day × nights towel-days.
    pet_count is kept for display even when the fee is flat.
    """

    parking_spots: int = 0
    has_pets: bool = False
    pet_count: int = 0
    towels_per_day: int = 0

    @property
    def effective_pet_count(self) -> int:
        if not self.has_pets:
            return 0
        return max(self.pet_count, 1)


@dataclass(frozen=True)
class ReservationPricingParams:
    room_id: str
    check_in: DateLike
    check_out: DateLike
    adults: int
    children: Tuple[Child, ...] = ()
    services: ServiceSelections = field(default_factory=ServiceSelections)
    pricing_tier_id: Optional[str] = None
    vip_discount_percent: Decimal = ZERO

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "vip_discount_percent", to_decimal(self.vip_discount_percent)
        )
        object.__setattr__(self, "children", tuple(self.children))

    @property
    def guest_count(self) -> int:
        return self.adults + len(self.children)


# ══════════════════════════════════════════════════════════════
# CALCULATION OUTPUTS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DiscountLine:
    code: str       # CHILD_0_3 | CHILD_3_7 | CHILD_7_14 | VIP
    label: str
    count: int
    amount: Decimal

    def to_payload(self) -> dict:
        return {
            "code": self.code,
            "label": self.label,
            "count": self.count,
            "amount": money_str(self.amount),
        }


@dataclass(frozen=True)
class AccommodationPrice:
    base_rate: Decimal
    nights: int
    persons: int
    gross: Decimal
    discounts: Tuple[DiscountLine, ...]
    net: Decimal

    @property
    def total_discounts(self) -> Decimal:
        return sum((d.amount for d in self.discounts), ZERO)

    def discount(self, code: str) -> Decimal:
        return sum((d.amount for d in self.discounts if d.code == code), ZERO)


@dataclass(frozen=True)
class ChargeComponent:
    """Part of a charge billed at one unit rate (e.g. children 12-17)."""

    label: str
    count: int
    unit_rate: Decimal
    amount: Decimal

    def to_payload(self) -> dict:
        return {
            "label": self.label,
            "count": self.count,
            "unit_rate": money_str(self.unit_rate),
            "amount": money_str(self.amount),
        }


@dataclass(frozen=True)
class ServiceCharge:
    """One ancillary line with its own VAT-rate tag."""

    code: str
    label: str
    quantity: Decimal
    unit_rate: Decimal
    amount: Decimal
    vat_rate: Decimal
    components: Tuple[ChargeComponent, ...] = ()

    @property
    def vat_amount(self) -> Decimal:
        if not self.vat_rate:
            return ZERO
        return self.amount * self.vat_rate / (Decimal("1") + self.vat_rate)

    def to_payload(self) -> dict:
        return {
            "code": self.code,
            "label": self.label,
            "quantity": str(self.quantity),
            "unit_rate": money_str(self.unit_rate),
            "amount": money_str(self.amount),
            "vat_rate": str(self.vat_rate),
            "vat_amount": money_str(self.vat_amount),
            "components": [c.to_payload() for c in self.components],
        }


@dataclass(frozen=True)
class ServiceCharges:
    tourism_tax: ServiceCharge
    parking: ServiceCharge
    pets: ServiceCharge
    towels: ServiceCharge

    def items(self) -> Tuple[ServiceCharge, ...]:
        return (self.tourism_tax, self.parking, self.pets, self.towels)

    @property
    def total(self) -> Decimal:
        return sum((c.amount for c in self.items()), ZERO)

    @property
    def vat_amount(self) -> Decimal:
        return sum((c.vat_amount for c in self.items()), ZERO)


@dataclass(frozen=True)
class VatBreakdown:
    """Reporting only. Already contained in the totals, never added."""

    accommodation_vat: Decimal
    services_vat: Decimal

    @property
    def total_vat(self) -> Decimal:
        return self.accommodation_vat + self.services_vat

    def to_payload(self) -> dict:
        return {
            "accommodation_vat": money_str(self.accommodation_vat),
            "services_vat": money_str(self.services_vat),
            "total_vat": money_str(self.total_vat),
        }


@dataclass(frozen=True)
class PricingResult:
    room_id: str
    room_type: str
    is_fixed_per_unit: bool
    check_in: date
    check_out: date
    nights: int
    seasonal_period: SeasonalPeriod
    tourism_bracket: TourismTaxBracket
    pricing_tier_id: Optional[str]
    base_rate: Decimal
    accommodation: AccommodationPrice
    short_stay_supplement: Decimal
    accommodation_total: Decimal
    services: ServiceCharges
    vat: Optional[VatBreakdown]
    grand_total: Decimal
    findings: Tuple[PolicyFinding, ...] = ()

    @property
    def net_accommodation(self) -> Decimal:
        return self.accommodation.net

    @property
    def is_short_stay(self) -> bool:
        return self.short_stay_supplement > 0

    @property
    def uses_fallback(self) -> bool:
        return any(f.is_fallback for f in self.findings)

    @property
    def net_of_vat(self) -> Decimal:
        if self.vat is None:
            return self.grand_total
        return self.grand_total - self.vat.total_vat

    def to_payload(self) -> dict:
        """Frozen price snapshot, rounded to cents."""
        return {
            "room_id": self.room_id,
            "room_type": self.room_type,
            "is_fixed_per_unit": self.is_fixed_per_unit,
            "check_in": self.check_in.isoformat(),
            "check_out": self.check_out.isoformat(),
            "nights": self.nights,
            "seasonal_period": self.seasonal_period.value,
            "tourism_bracket": self.tourism_bracket.value,
            "pricing_tier_id": self.pricing_tier_id,
            "base_rate": money_str(self.base_rate),
            "accommodation": {
                "gross": money_str(self.accommodation.gross),
                "discounts": [d.to_payload() for d in self.accommodation.discounts],
                "total_discounts": money_str(self.accommodation.total_discounts),
                "net": money_str(self.accommodation.net),
            },
            "short_stay_supplement": money_str(self.short_stay_supplement),
            "accommodation_total": money_str(self.accommodation_total),
            "services": [c.to_payload() for c in self.services.items()],
            "services_total": money_str(self.services.total),
            "vat": self.vat.to_payload() if self.vat is not None else None,
            "grand_total": money_str(self.grand_total),
            "uses_fallback": self.uses_fallback,
            "findings": [f.to_dict() for f in self.findings],
        }


@dataclass(frozen=True)
class PricingOutcome:
    """
    Exactly one of result / reason is set.

    Invariants:
        - accepted → result set, reason None
        - rejected → reason set, result None
    """

    result: Optional[PricingResult] = None
    reason: Optional[RejectionReason] = None

    def __post_init__(self):
        if (self.result is None) == (self.reason is None):
            raise ValueError("PricingOutcome needs exactly one of result or reason.")

    @classmethod
    def accepted(cls, result: PricingResult) -> PricingOutcome:
        return cls(result=result)

    @classmethod
    def rejected(cls, reason: RejectionReason) -> PricingOutcome:
        return cls(reason=reason)

    @property
    def is_accepted(self) -> bool:
        return self.result is not None

    @property
    def is_rejected(self) -> bool:
        return self.reason is not None

    def unwrap(self) -> PricingResult:
        """Return the result or raise the ValidationError it stands for."""
        if self.reason is not None:
            raise ValidationError(self.reason)
        return self.result
