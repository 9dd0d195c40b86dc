"""
Hotel Pricing — Policy, Fee and Accommodation Tests
=====================================================
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from core.config.rules import (
    DEFAULT_PRICING_RULES,
    ChildDiscountBand,
    FixedUnitRule,
    PricingRules,
    ServiceFeeRule,
)
from core.policy.exceptions import ValidationError
from core.policy.rejection import ReasonCode
from core.policy.result import FindingKind, Severity
from core.time.temporal import DateWindow
from engines.hotel_pricing.accommodation import AccommodationPricer
from engines.hotel_pricing.fees import ServiceFeeCalculator
from engines.hotel_pricing.models import (
    Child,
    PricingTier,
    RoomPricingProfile,
    SeasonalPeriod,
    ServiceSelections,
    TourismTaxBracket,
)
from engines.hotel_pricing.policies import (
    ChildDiscountPolicy,
    evaluate_booking_policies,
    occupancy_policy,
    service_quantity_policy,
    stay_dates_policy,
    stay_length_policy,
)

D = SeasonalPeriod.D
HIGH, LOW = TourismTaxBracket.HIGH, TourismTaxBracket.LOW

DOUBLE = RoomPricingProfile("101", "double", {D: Decimal("100")})
APARTMENT = RoomPricingProfile(
    "401", "rooftop-apartment", {D: Decimal("300")},
    is_fixed_per_unit=True, max_occupancy=2,
)


# ══════════════════════════════════════════════════════════════
# CHILD DISCOUNT POLICY
# ══════════════════════════════════════════════════════════════

class TestChildDiscountPolicy:
    @pytest.mark.parametrize("age,expected", [
        (0, "1.0"), (2, "1.0"), (3, "0.5"), (6, "0.5"),
        (7, "0.3"), (13, "0.3"), (14, "0"), (40, "0"),
    ])
    def test_fractions(self, age, expected):
        assert ChildDiscountPolicy().discount_fraction(age) == Decimal(expected)

    def test_non_increasing_in_age(self):
        policy = ChildDiscountPolicy()
        fractions = [policy.discount_fraction(age) for age in range(0, 18)]
        assert all(a >= b for a, b in zip(fractions, fractions[1:]))
        assert fractions[0] > fractions[3] > fractions[7] > fractions[14]

    def test_band_codes(self):
        policy = ChildDiscountPolicy()
        assert policy.band_code(1) == "CHILD_0_3"
        assert policy.band_code(5) == "CHILD_3_7"
        assert policy.band_code(10) == "CHILD_7_14"
        assert policy.band_code(15) is None

    def test_configurable_seven_to_fourteen_band(self):
        policy = ChildDiscountPolicy((
            ChildDiscountBand(3, Decimal("1.0")),
            ChildDiscountBand(7, Decimal("0.5")),
            ChildDiscountBand(14, Decimal("0.2")),
        ))
        assert policy.discount_fraction(9) == Decimal("0.2")

    def test_negative_age_rejected(self):
        with pytest.raises(ValidationError) as exc:
            ChildDiscountPolicy().discount_fraction(-1)
        assert exc.value.code == ReasonCode.INVALID_CHILD_AGE

    def test_unordered_bands_rejected(self):
        with pytest.raises(ValueError, match="increasing max_age"):
            ChildDiscountPolicy((
                ChildDiscountBand(7, Decimal("0.5")),
                ChildDiscountBand(3, Decimal("1.0")),
            ))

    def test_increasing_fraction_rejected(self):
        with pytest.raises(ValueError, match="must not increase"):
            ChildDiscountPolicy((
                ChildDiscountBand(3, Decimal("0.5")),
                ChildDiscountBand(7, Decimal("1.0")),
            ))


# ══════════════════════════════════════════════════════════════
# INPUT AND BOOKING CHECKS
# ══════════════════════════════════════════════════════════════

class TestInputPolicies:
    def test_zero_nights(self):
        reason = stay_length_policy(0)
        assert reason.code == ReasonCode.INVALID_DATE_RANGE

    def test_valid_stay(self):
        assert stay_length_policy(1) is None

    def test_mixed_timezone_stay_dates(self):
        naive = datetime(2026, 7, 15, 14, 0)
        aware = datetime(2026, 7, 17, 10, 0, tzinfo=timezone.utc)
        reason = stay_dates_policy(naive, aware)
        assert reason.code == ReasonCode.INVALID_DATE_RANGE
        assert reason.policy_name == "stay_dates_policy"
        assert stay_dates_policy(aware, naive) is not None

    def test_consistent_stay_dates(self):
        aware = datetime(2026, 7, 17, 10, 0, tzinfo=timezone.utc)
        assert stay_dates_policy(date(2026, 7, 15), aware) is None
        assert stay_dates_policy(aware, aware) is None
        assert stay_dates_policy(datetime(2026, 7, 15), datetime(2026, 7, 17)) is None

    def test_negative_adults(self):
        assert occupancy_policy(-1, ()).code == ReasonCode.NEGATIVE_OCCUPANCY

    def test_negative_child_age(self):
        assert occupancy_policy(2, (Child(-3),)).code == ReasonCode.INVALID_CHILD_AGE

    def test_negative_service_quantity(self):
        reason = service_quantity_policy(ServiceSelections(parking_spots=-1))
        assert reason.code == ReasonCode.INVALID_SERVICE_QUANTITY
        assert "parking_spots" in reason.message


class TestBookingPolicies:
    def test_clean_booking_has_no_findings(self):
        assert evaluate_booking_policies(
            DOUBLE, None, date(2026, 7, 15), 4, 2, FixedUnitRule(),
        ) == ()

    def test_apartment_minimum_stay_and_capacity_warn(self):
        findings = evaluate_booking_policies(
            APARTMENT, None, date(2026, 7, 15), 3, 3, FixedUnitRule(),
        )
        codes = {f.code for f in findings}
        assert codes == {"FIXED_UNIT_MINIMUM_STAY", "OCCUPANCY_EXCEEDED"}
        assert all(f.severity == Severity.WARN for f in findings)
        assert all(f.kind == FindingKind.POLICY_WARNING for f in findings)

    def test_tier_checks(self):
        tier = PricingTier(
            tier_id="corp", name="Corporate", is_active=False,
            validity=DateWindow(date(2025, 1, 1), date(2025, 12, 31)),
            room_types=("single",), min_stay=7,
        )
        findings = evaluate_booking_policies(
            DOUBLE, tier, date(2026, 7, 15), 4, 2, FixedUnitRule(),
        )
        assert {f.code for f in findings} == {
            "TIER_INACTIVE", "TIER_OUT_OF_VALIDITY",
            "TIER_ROOM_TYPE_MISMATCH", "TIER_STAY_LENGTH",
        }


# ══════════════════════════════════════════════════════════════
# SERVICE FEES
# ══════════════════════════════════════════════════════════════

class TestServiceFees:
    def _fees(self, rules=DEFAULT_PRICING_RULES):
        return ServiceFeeCalculator(rules)

    def test_tourism_tax_adults(self):
        assert self._fees().tourism_tax(2, (), 4, HIGH) == Decimal("12.00")
        assert self._fees().tourism_tax(2, (), 4, LOW) == Decimal("8.80")

    def test_tourism_tax_child_brackets(self):
        children = (Child(5), Child(12), Child(17))
        # 1 adult + 0 + 0.5 + 0.5 = 2 persons at 1.50 for 2 nights
        assert self._fees().tourism_tax(1, children, 2, HIGH) == Decimal("6.00")

    def test_tourism_tax_itemized_by_age(self):
        children = (Child(5), Child(12), Child(17), Child(19))
        charge = self._fees().tourism_tax_charge(2, children, 3, HIGH)
        adults, teens, under = charge.components
        assert (adults.label, adults.count, adults.amount) == ("Adults", 3, Decimal("13.50"))
        assert (teens.label, teens.count) == ("Children 12-17", 2)
        assert teens.unit_rate == Decimal("0.75")
        assert teens.amount == Decimal("4.50")
        assert (under.label, under.count, under.amount) == ("Children under 12", 1, Decimal("0"))
        assert sum(c.amount for c in charge.components) == charge.amount == Decimal("18.00")

    def test_tourism_tax_components_in_payload(self):
        charge = self._fees().tourism_tax_charge(2, (), 1, HIGH)
        assert charge.to_payload()["components"] == [{
            "label": "Adults", "count": 2, "unit_rate": "1.50", "amount": "3.00",
        }]

    def test_parking(self):
        assert self._fees().parking_fee(2, 3, is_fixed_unit=False) == Decimal("42.00")

    def test_fixed_unit_parking_allowance(self):
        fees = self._fees()
        assert fees.parking_fee(3, 5, is_fixed_unit=True) == Decimal("0")
        assert fees.parking_fee(4, 5, is_fixed_unit=True) == Decimal("35.00")

    def test_pet_fee_flat_per_stay(self):
        assert self._fees().pet_fee(True, pet_count=3) == Decimal("20.00")
        assert self._fees().pet_fee(False, pet_count=3) == Decimal("0")

    def test_pet_fee_per_pet_switch(self):
        rules = PricingRules(service_fees=ServiceFeeRule(pet_fee_per_pet=True))
        assert self._fees(rules).pet_fee(True, pet_count=3) == Decimal("60.00")

    def test_towels_per_day_times_nights(self):
        charges = self._fees().charges(
            2, (), 4, HIGH, ServiceSelections(towels_per_day=2), False,
        )
        assert charges.towels.amount == Decimal("40.00")
        assert charges.towels.quantity == Decimal("8")

    def test_short_stay_supplement_boundary(self):
        fees = self._fees()
        net = Decimal("200")
        assert fees.short_stay_supplement(net, 1) == Decimal("40.00")
        assert fees.short_stay_supplement(net, 2) == Decimal("40.00")
        assert fees.short_stay_supplement(net, 3) == Decimal("0")
        assert fees.short_stay_supplement(net, 4) == Decimal("0")

    def test_service_vat_rates(self):
        charges = self._fees().charges(
            2, (), 1, HIGH,
            ServiceSelections(parking_spots=1, has_pets=True, towels_per_day=1),
            False,
        )
        assert charges.tourism_tax.vat_amount == Decimal("0")
        assert charges.parking.vat_rate == Decimal("0.25")
        # 7 + 20 + 5 = 32 VAT-inclusive at 25%
        assert charges.vat_amount == Decimal("6.4")

    def test_pet_fee_can_be_suppressed(self):
        charges = self._fees().charges(
            1, (), 1, HIGH, ServiceSelections(has_pets=True), False,
            include_pet_fee=False,
        )
        assert charges.pets.amount == Decimal("0")


# ══════════════════════════════════════════════════════════════
# ACCOMMODATION
# ══════════════════════════════════════════════════════════════

class TestAccommodationPricer:
    def _pricer(self):
        return AccommodationPricer(ChildDiscountPolicy())

    def test_per_person(self):
        price = self._pricer().price(DOUBLE, Decimal("100"), 4, 2)
        assert price.gross == Decimal("800")
        assert price.net == Decimal("800")
        assert price.persons == 2
        assert price.discounts == ()

    def test_child_discounts_itemized_by_band(self):
        children = (Child(1), Child(2), Child(5), Child(10), Child(15))
        price = self._pricer().price(DOUBLE, Decimal("100"), 2, 2, children)
        assert price.gross == Decimal("1400")
        assert price.discount("CHILD_0_3") == Decimal("400")
        assert price.discount("CHILD_3_7") == Decimal("100")
        assert price.discount("CHILD_7_14") == Decimal("60")
        assert price.net == Decimal("840")
        infants = next(d for d in price.discounts if d.code == "CHILD_0_3")
        assert infants.count == 2
        assert infants.label == "Children 0-3 (free)"

    @pytest.mark.parametrize("adults,children", [
        (1, ()), (4, ()), (2, (Child(5), Child(10))),
    ])
    def test_fixed_unit_ignores_occupants(self, adults, children):
        price = self._pricer().price(APARTMENT, Decimal("300"), 3, adults, children)
        assert price.net == Decimal("900")
        assert price.discounts == ()

    def test_vip_after_child_discounts(self):
        price = self._pricer().price(
            DOUBLE, Decimal("100"), 1, 1, (Child(5),), vip_discount_percent=Decimal("10"),
        )
        # 200 gross - 50 child = 150; 10% of 150 = 15
        assert price.discount("VIP") == Decimal("15")
        assert price.net == Decimal("135")

    def test_float_vip_discount_accepted(self):
        price = self._pricer().price(
            DOUBLE, Decimal("100"), 1, 1, (Child(5),), vip_discount_percent=10.0,
        )
        assert price.discount("VIP") == Decimal("15")
        assert price.net == Decimal("135")

    def test_zero_nights_rejected(self):
        with pytest.raises(ValidationError, match="INVALID_DATE_RANGE"):
            self._pricer().price(DOUBLE, Decimal("100"), 0, 2)

    def test_vip_out_of_range(self):
        with pytest.raises(ValidationError, match="INVALID_DISCOUNT"):
            self._pricer().price(DOUBLE, Decimal("100"), 1, 2,
                                 vip_discount_percent=Decimal("120"))
