"""
Hotel Pricing — Configuration Store and Breakdown Display Tests
=================================================================
"""

from datetime import date
from decimal import Decimal

import pytest

from engines.hotel_pricing.defaults import (
    FIXED_UNIT_ROOM_ID,
    PRICING_TIERS_2026,
    ROOM_RATES_2026,
    default_store,
)
from engines.hotel_pricing.models import (
    Child,
    PricingTier,
    ReservationPricingParams,
    RoomPricingProfile,
    SeasonalPeriod,
    ServiceSelections,
)
from engines.hotel_pricing.presentation import format_breakdown
from engines.hotel_pricing.services import ReservationPricingEngine
from engines.hotel_pricing.store import InMemoryPricingStore

A, D = SeasonalPeriod.A, SeasonalPeriod.D


# ══════════════════════════════════════════════════════════════
# PAYLOAD LOADERS
# ══════════════════════════════════════════════════════════════

class TestPayloadLoaders:
    def test_room_from_flat_columns(self):
        room = RoomPricingProfile.from_payload({
            "room_id": "12", "room_type": "double",
            "seasonal_rate_a": 47, "seasonal_rate_b": "57",
            "seasonal_rate_c": 69.0, "seasonal_rate_d": None,
            "max_occupancy": "3",
        })
        assert room.rate_for(A) == Decimal("47")
        assert room.rate_for(SeasonalPeriod.C) == Decimal("69.0")
        assert room.rate_for(D) is None
        assert room.max_occupancy == 3
        assert not room.is_fixed_per_unit

    def test_room_from_nested_rates(self):
        room = RoomPricingProfile.from_payload({
            "room_id": "401", "room_type": "rooftop-apartment",
            "seasonal_rates": {"d": "450"}, "is_fixed_per_unit": True,
        })
        assert room.rate_for(D) == Decimal("450")
        assert room.is_fixed_per_unit

    def test_tier_from_payload(self):
        tier = PricingTier.from_payload({
            "tier_id": "corp", "name": "Corporate",
            "seasonal_values": {"A": "0.8"},
            "valid_from": "2026-01-01T00:00:00Z", "valid_to": "2026-06-30",
            "room_types": ["double"], "min_stay": 2,
        })
        assert tier.apply(Decimal("50"), A) == Decimal("40.0")
        assert tier.validity.contains(date(2026, 6, 30))
        assert not tier.validity.contains(date(2026, 7, 1))
        assert tier.covers_room_type("double")
        assert not tier.covers_room_type("single")
        assert tier.min_stay == 2

    def test_invalid_records(self):
        with pytest.raises(ValueError, match="room_type"):
            RoomPricingProfile("1", "")
        with pytest.raises(ValueError, match=">= 0"):
            RoomPricingProfile("1", "double", {A: Decimal("-1")})
        with pytest.raises(ValueError, match="min_stay"):
            PricingTier(tier_id="t", name="T", min_stay=5, max_stay=2)


# ══════════════════════════════════════════════════════════════
# IN-MEMORY STORE
# ══════════════════════════════════════════════════════════════

class TestInMemoryPricingStore:
    def test_queries(self):
        store = InMemoryPricingStore()
        store.load_payloads(
            rooms=[{"room_id": "7", "room_type": "single", "seasonal_rates": {"A": 70}}],
            tiers=[{"tier_id": "std", "is_default": True}],
        )
        assert store.get_room("7").room_type == "single"
        assert store.get_room("8") is None
        assert store.get_tier("std").name == "std"
        assert store.get_default_tier().tier_id == "std"
        assert len(store.list_rooms()) == 1
        assert len(store.list_tiers()) == 1

    def test_single_default_tier(self):
        store = InMemoryPricingStore(tiers=[
            PricingTier(tier_id="a", name="A", is_default=True),
        ])
        with pytest.raises(ValueError, match="already the default"):
            store.add_tier(PricingTier(tier_id="b", name="B", is_default=True))

    def test_no_default_tier(self):
        assert InMemoryPricingStore().get_default_tier() is None

    def test_house_store(self):
        store = default_store()
        apartment = store.get_room(FIXED_UNIT_ROOM_ID)
        assert apartment.is_fixed_per_unit
        assert apartment.max_occupancy == 2
        assert len(store.list_rooms()) == len(ROOM_RATES_2026)
        assert store.get_default_tier().tier_id == "2026-standard"
        assert len(store.list_tiers()) == len(PRICING_TIERS_2026)
        assert store.get_tier("agency-tui").apply(Decimal("100"), A) == Decimal("85.00")


# ══════════════════════════════════════════════════════════════
# BREAKDOWN DISPLAY
# ══════════════════════════════════════════════════════════════

class TestFormatBreakdown:
    def _result(self, nights=2, **kwargs):
        store = InMemoryPricingStore(rooms=[
            RoomPricingProfile("101", "double", {D: Decimal("33.33")}),
        ])
        return ReservationPricingEngine(store).calculate(ReservationPricingParams(
            room_id="101", check_in=date(2026, 7, 15),
            check_out=date(2026, 7, 15 + nights), adults=2, **kwargs,
        )).unwrap()

    def test_lines_and_rounding(self):
        result = self._result(
            children=(Child(1), Child(2)),
            services=ServiceSelections(parking_spots=1),
        )
        display = format_breakdown(result)
        labels = [line.label for line in display.lines]
        assert labels[0].startswith("Room rate (€33.33 × 2 nights × 4 persons)")
        assert "Children 0-3 (free) × 2" in labels
        assert "Short stay supplement" in labels
        assert "Tourism tax" in labels
        assert "Parking" in labels
        assert "Pet fee" not in labels
        tax_at = labels.index("Tourism tax")
        detail = display.lines[tax_at + 1]
        assert detail.label == "Adults × 2"
        assert detail.is_detail
        assert detail.amount == Decimal("6.00")
        # exempt children carry no amount and get no line
        assert not any(l.startswith("Children under") for l in labels)
        assert labels[-1].startswith("VAT included")
        discount = next(l for l in display.lines if l.is_discount)
        assert discount.amount == Decimal("133.32")
        for line in display.lines:
            assert line.amount == line.amount.quantize(Decimal("0.01"))
        assert display.grand_total == Decimal("179.98")

    def test_render(self):
        display = format_breakdown(self._result(nights=3), currency="EUR ")
        text = display.render(currency="EUR ")
        assert text.splitlines()[0] == "3 nights · period D · EUR 33.33/night"
        assert text.splitlines()[-1] == "Total: EUR 208.98"
        assert "  Adults × 2: EUR 9.00" in text.splitlines()
        assert "Short stay supplement" not in text
