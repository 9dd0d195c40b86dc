"""
Hotel Pricing Core Config — Admin-Configurable Rules
======================================================
Doctrine: No pricing constants inside engine logic.
VAT rates, tourism tax, service fees, child discount bands and the
short-stay and fixed-unit rules come from this typed configuration,
never from literals in calculation code.

Every field has a default matching the 2026 Croatian house rules,
so `PricingRules()` is a complete, valid configuration.
All monetary values are Decimal.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Tuple


def to_decimal(value: Any) -> Decimal:
    """Convert config/payload numbers without float artefacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


# ══════════════════════════════════════════════════════════════
# VAT RULE
# ══════════════════════════════════════════════════════════════

class VatCategory:
    """Charge categories that carry their own VAT rate."""
    ACCOMMODATION = "accommodation"
    PARKING = "parking"
    PETS = "pets"
    TOWELS = "towels"
    TOURISM_TAX = "tourism_tax"

    ALL = frozenset({"accommodation", "parking", "pets", "towels", "tourism_tax"})


@dataclass(frozen=True)
class VatRule:
    """
    VAT rate for one charge category.

    Prices are VAT-inclusive: the rule extracts the VAT portion for
    reporting and never adds it on top.
    """

    category: str
    rate: Decimal  # Decimal("0.13") means 13%
    description: str = ""

    def __post_init__(self) -> None:
        if not 0 <= self.rate <= 1:
            raise ValueError(f"VAT rate must be between 0 and 1, got {self.rate}.")

    def extract_included(self, amount: Decimal) -> Decimal:
        """VAT contained in a VAT-inclusive amount: amount × r / (1 + r)."""
        if not self.rate:
            return Decimal("0")
        return amount * self.rate / (Decimal("1") + self.rate)


DEFAULT_VAT_RULES: Tuple[VatRule, ...] = (
    VatRule(VatCategory.ACCOMMODATION, Decimal("0.13"), "Accommodation 13%"),
    VatRule(VatCategory.PARKING, Decimal("0.25"), "Parking 25%"),
    VatRule(VatCategory.PETS, Decimal("0.25"), "Pet fee 25%"),
    VatRule(VatCategory.TOWELS, Decimal("0.25"), "Towel rental 25%"),
    VatRule(VatCategory.TOURISM_TAX, Decimal("0"), "Tourism tax carries no VAT"),
)


# ══════════════════════════════════════════════════════════════
# TOURISM TAX RULE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TourismTaxRule:
    """
    Per-person, per-night municipal tax.

    Children below `child_free_below_age` pay nothing, children from
    that age up to `adult_age` pay `child_rate_fraction` of the rate,
    everyone from `adult_age` pays the full rate.
    """

    high_season_rate: Decimal = Decimal("1.50")
    low_season_rate: Decimal = Decimal("1.10")
    high_season_months: Tuple[int, ...] = (4, 5, 6, 7, 8, 9)
    child_free_below_age: int = 12
    adult_age: int = 18
    child_rate_fraction: Decimal = Decimal("0.5")

    def __post_init__(self) -> None:
        if self.high_season_rate < 0 or self.low_season_rate < 0:
            raise ValueError("Tourism tax rates must be >= 0.")
        if not 0 <= self.child_free_below_age <= self.adult_age:
            raise ValueError(
                "child_free_below_age must be between 0 and adult_age."
            )
        if not 0 <= self.child_rate_fraction <= 1:
            raise ValueError("child_rate_fraction must be between 0 and 1.")
        if any(m < 1 or m > 12 for m in self.high_season_months):
            raise ValueError("high_season_months must be calendar months 1-12.")

    def rate(self, high_season: bool) -> Decimal:
        return self.high_season_rate if high_season else self.low_season_rate

    def age_fraction(self, age: int) -> Decimal:
        """Share of the full rate a guest of this age pays."""
        if age < self.child_free_below_age:
            return Decimal("0")
        if age < self.adult_age:
            return self.child_rate_fraction
        return Decimal("1")


# ══════════════════════════════════════════════════════════════
# SERVICE FEES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ServiceFeeRule:
    """Ancillary service prices (VAT-inclusive)."""

    parking_per_night: Decimal = Decimal("7.00")
    pet_per_stay: Decimal = Decimal("20.00")
    towel_per_day: Decimal = Decimal("5.00")
    pet_fee_per_pet: bool = False  # True: pet_per_stay × pet count

    def __post_init__(self) -> None:
        for name in ("parking_per_night", "pet_per_stay", "towel_per_day"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0.")


# ══════════════════════════════════════════════════════════════
# CHILD DISCOUNT BANDS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ChildDiscountBand:
    """Children younger than `max_age` get `fraction` off their share."""

    max_age: int
    fraction: Decimal
    label: str = ""

    def __post_init__(self) -> None:
        if self.max_age <= 0:
            raise ValueError(f"max_age must be > 0, got {self.max_age}.")
        if not 0 <= self.fraction <= 1:
            raise ValueError(
                f"Discount fraction must be between 0 and 1, got {self.fraction}."
            )


DEFAULT_CHILD_DISCOUNT_BANDS: Tuple[ChildDiscountBand, ...] = (
    ChildDiscountBand(3, Decimal("1.0"), "0-3"),
    ChildDiscountBand(7, Decimal("0.5"), "3-7"),
    ChildDiscountBand(14, Decimal("0.3"), "7-14"),
)


# ══════════════════════════════════════════════════════════════
# STAY RULES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ShortStayRule:
    """Surcharge on post-discount accommodation below a night threshold."""

    threshold_nights: int = 3
    rate: Decimal = Decimal("0.20")

    def __post_init__(self) -> None:
        if self.threshold_nights < 0:
            raise ValueError("threshold_nights must be >= 0.")
        if self.rate < 0:
            raise ValueError("Short-stay rate must be >= 0.")


@dataclass(frozen=True)
class FixedUnitRule:
    """House rules for the room priced as a whole unit (the apartment)."""

    included_parking_spaces: int = 3
    minimum_stay: int = 4

    def __post_init__(self) -> None:
        if self.included_parking_spaces < 0 or self.minimum_stay < 0:
            raise ValueError("Fixed-unit limits must be >= 0.")


# ══════════════════════════════════════════════════════════════
# AGGREGATE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PricingRules:
    """Complete, closed pricing configuration."""

    vat_rules: Tuple[VatRule, ...] = DEFAULT_VAT_RULES
    tourism_tax: TourismTaxRule = field(default_factory=TourismTaxRule)
    service_fees: ServiceFeeRule = field(default_factory=ServiceFeeRule)
    child_discount_bands: Tuple[ChildDiscountBand, ...] = DEFAULT_CHILD_DISCOUNT_BANDS
    short_stay: ShortStayRule = field(default_factory=ShortStayRule)
    fixed_unit: FixedUnitRule = field(default_factory=FixedUnitRule)
    fallback_nightly_rate: Decimal = Decimal("100.00")
    currency: str = "EUR"

    def __post_init__(self) -> None:
        categories = [r.category for r in self.vat_rules]
        if len(categories) != len(set(categories)):
            raise ValueError("Each VAT category may be configured only once.")
        if self.fallback_nightly_rate < 0:
            raise ValueError("fallback_nightly_rate must be >= 0.")

    def vat_rule(self, category: str) -> VatRule:
        """VAT rule for a category; unconfigured categories carry 0%."""
        for rule in self.vat_rules:
            if rule.category == category:
                return rule
        return VatRule(category, Decimal("0"))

    def vat_rate(self, category: str) -> Decimal:
        return self.vat_rule(category).rate

    @classmethod
    def from_mapping(cls, payload: Optional[Mapping[str, Any]]) -> PricingRules:
        """
        Build rules from an admin payload. Missing sections keep defaults.

        Example:
            {
                "vat_rates": {"accommodation": "0.13", "parking": "0.25"},
                "tourism_tax": {"high": "1.50", "low": "1.10"},
                "service_fees": {"parking_per_night": 7, "pet_fee_per_pet": False},
                "child_discounts": [{"max_age": 3, "fraction": "1.0"}, ...],
                "short_stay": {"threshold_nights": 3, "rate": "0.20"},
                "fixed_unit": {"included_parking_spaces": 3, "minimum_stay": 4},
                "fallback_nightly_rate": "100.00",
            }
        """
        payload = payload or {}
        rules = cls()
        changes: Dict[str, Any] = {}

        if "vat_rates" in payload:
            merged = {r.category: r for r in rules.vat_rules}
            for category, rate in payload["vat_rates"].items():
                merged[category] = VatRule(category, to_decimal(rate))
            changes["vat_rules"] = tuple(merged.values())

        if "tourism_tax" in payload:
            raw = payload["tourism_tax"]
            tax = rules.tourism_tax
            changes["tourism_tax"] = replace(
                tax,
                high_season_rate=to_decimal(raw.get("high", tax.high_season_rate)),
                low_season_rate=to_decimal(raw.get("low", tax.low_season_rate)),
                high_season_months=tuple(
                    raw.get("high_season_months", tax.high_season_months)
                ),
                child_free_below_age=int(
                    raw.get("child_free_below_age", tax.child_free_below_age)
                ),
                adult_age=int(raw.get("adult_age", tax.adult_age)),
                child_rate_fraction=to_decimal(
                    raw.get("child_rate_fraction", tax.child_rate_fraction)
                ),
            )

        if "service_fees" in payload:
            raw = payload["service_fees"]
            fees = rules.service_fees
            changes["service_fees"] = ServiceFeeRule(
                parking_per_night=to_decimal(
                    raw.get("parking_per_night", fees.parking_per_night)
                ),
                pet_per_stay=to_decimal(raw.get("pet_per_stay", fees.pet_per_stay)),
                towel_per_day=to_decimal(raw.get("towel_per_day", fees.towel_per_day)),
                pet_fee_per_pet=bool(raw.get("pet_fee_per_pet", fees.pet_fee_per_pet)),
            )

        if "child_discounts" in payload:
            changes["child_discount_bands"] = tuple(
                ChildDiscountBand(
                    max_age=int(band["max_age"]),
                    fraction=to_decimal(band["fraction"]),
                    label=band.get("label", ""),
                )
                for band in payload["child_discounts"]
            )

        if "short_stay" in payload:
            raw = payload["short_stay"]
            changes["short_stay"] = ShortStayRule(
                threshold_nights=int(
                    raw.get("threshold_nights", rules.short_stay.threshold_nights)
                ),
                rate=to_decimal(raw.get("rate", rules.short_stay.rate)),
            )

        if "fixed_unit" in payload:
            raw = payload["fixed_unit"]
            changes["fixed_unit"] = FixedUnitRule(
                included_parking_spaces=int(raw.get(
                    "included_parking_spaces",
                    rules.fixed_unit.included_parking_spaces,
                )),
                minimum_stay=int(raw.get("minimum_stay", rules.fixed_unit.minimum_stay)),
            )

        if "fallback_nightly_rate" in payload:
            changes["fallback_nightly_rate"] = to_decimal(payload["fallback_nightly_rate"])

        if "currency" in payload:
            changes["currency"] = str(payload["currency"])

        return replace(rules, **changes)


DEFAULT_PRICING_RULES = PricingRules()
