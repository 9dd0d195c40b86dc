"""
Hotel Pricing Policy — Public API
===================================
Findings (non-fatal), rejection reasons, and the validation error.

Policy is evaluation, not execution.
Explanation is mandatory.
"""

from core.policy.exceptions import ValidationError, reject
from core.policy.rejection import ReasonCode, RejectionReason
from core.policy.result import (
    FindingKind,
    PolicyFinding,
    Severity,
    missing_configuration,
)

__all__ = [
    # ── Findings ──────────────────────────────────────────────
    "FindingKind",
    "PolicyFinding",
    "Severity",
    "missing_configuration",
    # ── Rejections ────────────────────────────────────────────
    "ReasonCode",
    "RejectionReason",
    # ── Exceptions ────────────────────────────────────────────
    "ValidationError",
    "reject",
]
