"""
Hotel Pricing Policy — Finding Models
=======================================
PolicyFinding: a single non-fatal observation attached to a pricing result.

Graduated enforcement:
    BLOCK   → calculation rejected (carried by RejectionReason, not here)
    WARN    → calculation proceeds, finding attached
    REVIEW  → calculation proceeds, result must be checked by staff

These are pure data structures. No side effects. No persistence.
"""

from __future__ import annotations

from dataclasses import dataclass, field


# ══════════════════════════════════════════════════════════════
# SEVERITY LEVELS
# ══════════════════════════════════════════════════════════════

class Severity:
    """Graduated enforcement levels."""
    BLOCK = "BLOCK"
    WARN = "WARN"
    REVIEW = "REVIEW"

    ALL = frozenset({"BLOCK", "WARN", "REVIEW"})


class FindingKind:
    """What a finding is about."""
    MISSING_CONFIGURATION = "MISSING_CONFIGURATION"
    POLICY_WARNING = "POLICY_WARNING"
    RECONCILIATION_MISMATCH = "RECONCILIATION_MISMATCH"

    ALL = frozenset({
        "MISSING_CONFIGURATION", "POLICY_WARNING", "RECONCILIATION_MISMATCH",
    })


# ══════════════════════════════════════════════════════════════
# POLICY FINDING
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PolicyFinding:
    """
    Non-fatal outcome of a pricing check.

    Fields:
        code:      Machine-readable code (e.g. 'ROOM_RATE_MISSING').
        message:   Human-readable explanation for front-desk staff.
        severity:  WARN | REVIEW (BLOCK is reserved for rejections).
        kind:      MISSING_CONFIGURATION | POLICY_WARNING |
                   RECONCILIATION_MISMATCH.
        metadata:  Structured data for audit/explainability.

    A MISSING_CONFIGURATION finding means a fallback value was used
    and the price must not be presented as authoritative.
    """

    code: str
    message: str
    severity: str = Severity.WARN
    kind: str = FindingKind.POLICY_WARNING
    metadata: dict = field(default_factory=dict)

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if self.severity not in Severity.ALL:
            raise ValueError(
                f"severity '{self.severity}' not valid. "
                f"Must be one of: {sorted(Severity.ALL)}"
            )

        if self.kind not in FindingKind.ALL:
            raise ValueError(
                f"kind '{self.kind}' not valid. "
                f"Must be one of: {sorted(FindingKind.ALL)}"
            )

    @property
    def is_fallback(self) -> bool:
        return self.kind == FindingKind.MISSING_CONFIGURATION

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "severity": self.severity,
            "kind": self.kind,
            "metadata": dict(self.metadata),
        }


def missing_configuration(code: str, message: str, **metadata) -> PolicyFinding:
    """Build a REVIEW finding for a fallback value."""
    return PolicyFinding(
        code=code,
        message=message,
        severity=Severity.REVIEW,
        kind=FindingKind.MISSING_CONFIGURATION,
        metadata=metadata,
    )
