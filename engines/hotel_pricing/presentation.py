"""
Hotel Pricing Engine — Breakdown Display
==========================================
Turns a PricingResult into labelled, cent-rounded lines for a quote
screen or a printed offer. Amounts are rounded here and nowhere
earlier; the totals are rounded once, not summed from rounded lines.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Tuple

from engines.hotel_pricing.models import PricingResult, money


@dataclass(frozen=True)
class BreakdownLine:
    label: str
    amount: Decimal
    is_discount: bool = False
    is_detail: bool = False  # itemizes the line above; not part of the total

    def render(self, currency: str = "€") -> str:
        sign = "-" if self.is_discount else ""
        indent = "  " if self.is_detail else ""
        return f"{indent}{self.label}: {sign}{currency}{self.amount}"


@dataclass(frozen=True)
class BreakdownDisplay:
    summary: str
    lines: Tuple[BreakdownLine, ...]
    grand_total: Decimal

    def render(self, currency: str = "€") -> str:
        body = [self.summary] + [line.render(currency) for line in self.lines]
        body.append(f"Total: {currency}{self.grand_total}")
        return "\n".join(body)


def format_breakdown(result: PricingResult, currency: str = "€") -> BreakdownDisplay:
    acc = result.accommodation
    lines: List[BreakdownLine] = []

    if result.is_fixed_per_unit:
        rate_label = f"Room rate ({currency}{money(result.base_rate)} × {result.nights} nights)"
    else:
        rate_label = (f"Room rate ({currency}{money(result.base_rate)} × "
                      f"{result.nights} nights × {acc.persons} persons)")
    lines.append(BreakdownLine(rate_label, money(acc.gross)))

    for discount in acc.discounts:
        label = discount.label
        if discount.count > 1:
            label = f"{label} × {discount.count}"
        lines.append(BreakdownLine(label, money(discount.amount), is_discount=True))

    if result.is_short_stay:
        lines.append(BreakdownLine(
            "Short stay supplement", money(result.short_stay_supplement),
        ))

    for charge in result.services.items():
        if not charge.amount:
            continue
        lines.append(BreakdownLine(charge.label, money(charge.amount)))
        for part in charge.components:
            if part.amount:
                lines.append(BreakdownLine(
                    f"{part.label} × {part.count}", money(part.amount), is_detail=True,
                ))

    if result.vat is not None:
        lines.append(BreakdownLine(
            f"VAT included ({currency}{money(result.vat.accommodation_vat)} "
            f"accommodation, {currency}{money(result.vat.services_vat)} services)",
            money(result.vat.total_vat),
        ))

    summary = (f"{result.nights} nights · period {result.seasonal_period.value} · "
               f"{currency}{money(result.base_rate)}/night")
    return BreakdownDisplay(
        summary=summary,
        lines=tuple(lines),
        grand_total=money(result.grand_total),
    )
