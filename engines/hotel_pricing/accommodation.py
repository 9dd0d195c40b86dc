"""
Hotel Pricing Engine — Accommodation Pricer
=============================================
Net accommodation cost for a stay at a resolved nightly base rate.

Two modes:
    Fixed per unit (apartment):
        gross = rate × nights, occupants ignored, no child discounts.
    Per person:
        gross = rate × nights × (adults + children)
        each child: rate × nights × discount_fraction(age), itemized
        by age band.

An optional VIP percentage applies to the post-child accommodation
in both modes.
"""

from __future__ import annotations

from collections import OrderedDict
from decimal import Decimal
from typing import Dict, Iterable, List, Tuple

from core.config.rules import to_decimal
from core.policy.exceptions import ValidationError, reject
from core.policy.rejection import ReasonCode
from engines.hotel_pricing.models import (
    AccommodationPrice,
    Child,
    DiscountLine,
    RoomPricingProfile,
)
from engines.hotel_pricing.policies import (
    ChildDiscountPolicy,
    occupancy_policy,
    stay_length_policy,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


class AccommodationPricer:
    def __init__(self, child_policy: ChildDiscountPolicy) -> None:
        self._child_policy = child_policy

    def price(
        self,
        room: RoomPricingProfile,
        base_rate: Decimal,
        nights: int,
        adults: int,
        children: Iterable[Child] = (),
        vip_discount_percent: Decimal = ZERO,
    ) -> AccommodationPrice:
        """Raises ValidationError for nights <= 0 or invalid occupancy."""
        children = tuple(children)
        vip_discount_percent = to_decimal(vip_discount_percent)

        reason = stay_length_policy(nights) or occupancy_policy(adults, children)
        if reason is not None:
            raise ValidationError(reason)
        if not 0 <= vip_discount_percent <= 100:
            raise reject(
                ReasonCode.INVALID_DISCOUNT,
                f"VIP discount must be between 0 and 100%, got {vip_discount_percent}.",
                "accommodation_pricer",
            )

        discounts: List[DiscountLine] = []
        persons = adults + len(children)
        if room.is_fixed_per_unit:
            gross = base_rate * nights
        else:
            gross = base_rate * nights * persons
            discounts.extend(self._child_discounts(base_rate, nights, children))

        after_children = gross - sum((d.amount for d in discounts), ZERO)

        if vip_discount_percent:
            vip = after_children * vip_discount_percent / HUNDRED
            discounts.append(DiscountLine(
                code="VIP",
                label=f"VIP discount ({vip_discount_percent}%)",
                count=1,
                amount=vip,
            ))

        total_discounts = sum((d.amount for d in discounts), ZERO)
        return AccommodationPrice(
            base_rate=base_rate,
            nights=nights,
            persons=persons,
            gross=gross,
            discounts=tuple(discounts),
            net=gross - total_discounts,
        )

    def _child_discounts(
        self, base_rate: Decimal, nights: int, children: Tuple[Child, ...]
    ) -> Tuple[DiscountLine, ...]:
        per_band: Dict[str, List] = OrderedDict()
        for child in children:
            fraction = self._child_policy.discount_fraction(child.age)
            if not fraction:
                continue
            code = self._child_policy.band_code(child.age)
            entry = per_band.setdefault(code, [0, ZERO, fraction])
            entry[0] += 1
            entry[1] += base_rate * nights * fraction

        return tuple(
            DiscountLine(
                code=code,
                label=_band_label(code, fraction),
                count=count,
                amount=amount,
            )
            for code, (count, amount, fraction) in per_band.items()
        )


def _band_label(code: str, fraction: Decimal) -> str:
    _, lower, upper = code.split("_")
    if fraction == 1:
        return f"Children {lower}-{upper} (free)"
    return f"Children {lower}-{upper} discount ({fraction * HUNDRED:.0f}%)"
