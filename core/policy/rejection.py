"""
Hotel Pricing Policy — Rejection Model
========================================
Structured rejection reasons for pricing calculations that cannot run.

Every rejection must be:
- Deterministic (same input → same rejection)
- Machine-readable (reason code)
- Human-readable (message)
"""

from __future__ import annotations

from dataclasses import dataclass


# ══════════════════════════════════════════════════════════════
# REJECTION REASON (frozen explanation structure)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for a rejected calculation.

    Fields:
        code:        Machine-readable rejection code (e.g. 'INVALID_DATE_RANGE').
        message:     Human-readable explanation.
        policy_name: Name of the check that caused rejection.
    """

    code: str
    message: str
    policy_name: str

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
        }


# ══════════════════════════════════════════════════════════════
# STANDARD REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """
    Known rejection codes.

    Convention: SCREAMING_SNAKE_CASE.
    """

    # ── Stay ──────────────────────────────────────────────────
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    NIGHT_OUTSIDE_STAY = "NIGHT_OUTSIDE_STAY"
    DUPLICATE_NIGHT_OVERRIDE = "DUPLICATE_NIGHT_OVERRIDE"

    # ── Occupancy ─────────────────────────────────────────────
    NEGATIVE_OCCUPANCY = "NEGATIVE_OCCUPANCY"
    INVALID_CHILD_AGE = "INVALID_CHILD_AGE"

    # ── Services ──────────────────────────────────────────────
    INVALID_SERVICE_QUANTITY = "INVALID_SERVICE_QUANTITY"
    INVALID_DISCOUNT = "INVALID_DISCOUNT"

    # ── Defects ───────────────────────────────────────────────
    UNKNOWN_SEASONAL_PERIOD = "UNKNOWN_SEASONAL_PERIOD"
