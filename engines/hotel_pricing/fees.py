"""
Hotel Pricing Engine — Service Fees
=====================================
Tourism tax, parking, pets, towels and the short-stay supplement.

Rules:
- Service fees never receive child discounts.
- Tourism tax is age-adjusted per person per night and carries no VAT.
- Parking is per spot per night; the fixed-unit room includes a
  number of spots for free.
- The pet fee is flat per stay (per pet only when configured).
- The short-stay supplement is a share of the post-discount
  accommodation, charged only below the night threshold.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional, Tuple

from core.config.rules import PricingRules, VatCategory
from engines.hotel_pricing.models import (
    ChargeComponent,
    Child,
    ServiceCharge,
    ServiceCharges,
    ServiceSelections,
    TourismTaxBracket,
)

ZERO = Decimal("0")


class ServiceFeeCalculator:
    def __init__(self, rules: PricingRules) -> None:
        self._rules = rules

    # ── tourism tax ───────────────────────────────────────────

    def tourism_rate(self, bracket: TourismTaxBracket) -> Decimal:
        return self._rules.tourism_tax.rate(bracket is TourismTaxBracket.HIGH)

    def tourism_tax(
        self,
        adults: int,
        children: Iterable[Child],
        nights: int,
        bracket: TourismTaxBracket,
    ) -> Decimal:
        tax = self._rules.tourism_tax
        rate = self.tourism_rate(bracket)
        persons = Decimal(adults) + sum(
            (tax.age_fraction(child.age) for child in children), ZERO
        )
        return persons * rate * nights

    def tourism_tax_components(
        self,
        adults: int,
        children: Iterable[Child],
        nights: int,
        bracket: TourismTaxBracket,
    ) -> Tuple[ChargeComponent, ...]:
        """
        Split by age bracket: full rate (adults and children of adult
        age), reduced rate, and exempt children. Amounts sum to
        tourism_tax().
        """
        tax = self._rules.tourism_tax
        rate = self.tourism_rate(bracket)
        children = tuple(children)
        full = adults + sum(1 for c in children if c.age >= tax.adult_age)
        reduced = sum(
            1 for c in children
            if tax.child_free_below_age <= c.age < tax.adult_age
        )
        exempt = len(children) - (full - adults) - reduced
        child_rate = rate * tax.child_rate_fraction

        components = []
        if full:
            components.append(ChargeComponent(
                "Adults", full, rate, full * rate * nights,
            ))
        if reduced:
            components.append(ChargeComponent(
                f"Children {tax.child_free_below_age}-{tax.adult_age - 1}",
                reduced, child_rate, reduced * child_rate * nights,
            ))
        if exempt:
            components.append(ChargeComponent(
                f"Children under {tax.child_free_below_age}", exempt, ZERO, ZERO,
            ))
        return tuple(components)

    def tourism_tax_charge(
        self,
        adults: int,
        children: Iterable[Child],
        nights: int,
        bracket: TourismTaxBracket,
    ) -> ServiceCharge:
        children = tuple(children)
        rate = self.tourism_rate(bracket)
        return ServiceCharge(
            code="TOURISM_TAX",
            label="Tourism tax",
            quantity=Decimal(nights),
            unit_rate=rate,
            amount=self.tourism_tax(adults, children, nights, bracket),
            vat_rate=self._rules.vat_rate(VatCategory.TOURISM_TAX),
            components=self.tourism_tax_components(
                adults, children, nights, bracket
            ),
        )

    # ── parking ───────────────────────────────────────────────

    def chargeable_spots(self, spots: int, is_fixed_unit: bool) -> int:
        if is_fixed_unit:
            return max(0, spots - self._rules.fixed_unit.included_parking_spaces)
        return max(0, spots)

    def parking_fee(self, spots: int, nights: int, is_fixed_unit: bool) -> Decimal:
        charged = self.chargeable_spots(spots, is_fixed_unit)
        return charged * self._rules.service_fees.parking_per_night * nights

    def parking_charge(self, spots: int, nights: int, is_fixed_unit: bool) -> ServiceCharge:
        return ServiceCharge(
            code="PARKING",
            label="Parking",
            quantity=Decimal(self.chargeable_spots(spots, is_fixed_unit) * nights),
            unit_rate=self._rules.service_fees.parking_per_night,
            amount=self.parking_fee(spots, nights, is_fixed_unit),
            vat_rate=self._rules.vat_rate(VatCategory.PARKING),
        )

    # ── pets ──────────────────────────────────────────────────

    def pet_fee(self, has_pets: bool, pet_count: int = 1) -> Decimal:
        if not has_pets:
            return ZERO
        fees = self._rules.service_fees
        if fees.pet_fee_per_pet:
            return fees.pet_per_stay * max(pet_count, 1)
        return fees.pet_per_stay

    def pet_charge(self, has_pets: bool, pet_count: int = 1) -> ServiceCharge:
        return ServiceCharge(
            code="PETS",
            label="Pet fee",
            quantity=Decimal(max(pet_count, 1) if has_pets else 0),
            unit_rate=self._rules.service_fees.pet_per_stay,
            amount=self.pet_fee(has_pets, pet_count),
            vat_rate=self._rules.vat_rate(VatCategory.PETS),
        )

    # ── towels ────────────────────────────────────────────────

    def towel_fee(self, days: int) -> Decimal:
        return max(days, 0) * self._rules.service_fees.towel_per_day

    def towel_charge(self, days: int) -> ServiceCharge:
        return ServiceCharge(
            code="TOWELS",
            label="Towel rental",
            quantity=Decimal(max(days, 0)),
            unit_rate=self._rules.service_fees.towel_per_day,
            amount=self.towel_fee(days),
            vat_rate=self._rules.vat_rate(VatCategory.TOWELS),
        )

    # ── short stay ────────────────────────────────────────────

    def short_stay_supplement(
        self,
        net_accommodation: Decimal,
        nights: int,
        threshold_nights: Optional[int] = None,
        rate: Optional[Decimal] = None,
    ) -> Decimal:
        rule = self._rules.short_stay
        threshold = rule.threshold_nights if threshold_nights is None else threshold_nights
        if nights >= threshold:
            return ZERO
        return net_accommodation * (rule.rate if rate is None else rate)

    # ── combined ──────────────────────────────────────────────

    def charges(
        self,
        adults: int,
        children: Iterable[Child],
        nights: int,
        bracket: TourismTaxBracket,
        services: ServiceSelections,
        is_fixed_unit: bool,
        include_pet_fee: bool = True,
    ) -> ServiceCharges:
        """All ancillary charges for `nights` nights of a stay."""
        children = tuple(children)
        return ServiceCharges(
            tourism_tax=self.tourism_tax_charge(adults, children, nights, bracket),
            parking=self.parking_charge(services.parking_spots, nights, is_fixed_unit),
            pets=self.pet_charge(
                services.has_pets and include_pet_fee,
                services.effective_pet_count,
            ),
            towels=self.towel_charge(services.towels_per_day * nights),
        )
