"""
Hotel Pricing Engine — Configuration Store
============================================
Read-only source of room profiles and pricing tiers.

The persistence layer implements PricingConfigStore; the in-memory
store serves tests, bootstrap and callers that load rows up front.
Pricing never writes to the store.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol

from engines.hotel_pricing.models import PricingTier, RoomPricingProfile


# ══════════════════════════════════════════════════════════════
# STORE PROTOCOL
# ══════════════════════════════════════════════════════════════

class PricingConfigStore(Protocol):
    def get_room(self, room_id: str) -> Optional[RoomPricingProfile]:
        ...  # pragma: no cover

    def list_rooms(self) -> List[RoomPricingProfile]:
        ...  # pragma: no cover

    def get_tier(self, tier_id: str) -> Optional[PricingTier]:
        ...  # pragma: no cover

    def get_default_tier(self) -> Optional[PricingTier]:
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# IN-MEMORY STORE
# ══════════════════════════════════════════════════════════════

class InMemoryPricingStore:
    """
    Dict-backed store.

    Invariant: at most one tier is marked default.
    """

    def __init__(
        self,
        rooms: Iterable[RoomPricingProfile] = (),
        tiers: Iterable[PricingTier] = (),
    ) -> None:
        self._rooms: Dict[str, RoomPricingProfile] = {}
        self._tiers: Dict[str, PricingTier] = {}
        for room in rooms:
            self.add_room(room)
        for tier in tiers:
            self.add_tier(tier)

    def add_room(self, room: RoomPricingProfile) -> None:
        self._rooms[room.room_id] = room

    def add_tier(self, tier: PricingTier) -> None:
        if tier.is_default:
            current = self.get_default_tier()
            if current is not None and current.tier_id != tier.tier_id:
                raise ValueError(
                    f"Tier '{current.tier_id}' is already the default; "
                    f"cannot also mark '{tier.tier_id}' as default."
                )
        self._tiers[tier.tier_id] = tier

    def load_payloads(
        self,
        rooms: Iterable[Mapping[str, Any]] = (),
        tiers: Iterable[Mapping[str, Any]] = (),
    ) -> None:
        """Load persistence-shaped rows."""
        for row in rooms:
            self.add_room(RoomPricingProfile.from_payload(row))
        for row in tiers:
            self.add_tier(PricingTier.from_payload(row))

    # ── queries ───────────────────────────────────────────────

    def get_room(self, room_id: str) -> Optional[RoomPricingProfile]:
        return self._rooms.get(room_id)

    def list_rooms(self) -> List[RoomPricingProfile]:
        return list(self._rooms.values())

    def get_tier(self, tier_id: str) -> Optional[PricingTier]:
        return self._tiers.get(tier_id)

    def list_tiers(self) -> List[PricingTier]:
        return list(self._tiers.values())

    def get_default_tier(self) -> Optional[PricingTier]:
        for tier in self._tiers.values():
            if tier.is_default:
                return tier
        return None
