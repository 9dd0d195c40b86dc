"""
Hotel Pricing Core Config — Public API
========================================
Admin-configurable pricing rules (VAT, tourism tax, fees, bands).
Doctrine: No pricing constants in engine logic.
"""

from core.config.rules import (
    DEFAULT_CHILD_DISCOUNT_BANDS,
    DEFAULT_PRICING_RULES,
    DEFAULT_VAT_RULES,
    ChildDiscountBand,
    FixedUnitRule,
    PricingRules,
    ServiceFeeRule,
    ShortStayRule,
    TourismTaxRule,
    VatCategory,
    VatRule,
    to_decimal,
)

__all__ = [
    "ChildDiscountBand",
    "DEFAULT_CHILD_DISCOUNT_BANDS",
    "DEFAULT_PRICING_RULES",
    "DEFAULT_VAT_RULES",
    "FixedUnitRule",
    "PricingRules",
    "ServiceFeeRule",
    "ShortStayRule",
    "TourismTaxRule",
    "VatCategory",
    "VatRule",
    "to_decimal",
]
