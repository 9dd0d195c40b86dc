"""
Hotel Pricing Policy — Exceptions
===================================
ValidationError is raised by pricing components when an input makes
the calculation meaningless. Orchestrators catch it and hand the
caller a rejected outcome; it never escapes as an unhandled fault.
"""

from __future__ import annotations

from core.policy.rejection import RejectionReason


class ValidationError(Exception):
    """Input rejected; carries the structured reason."""

    def __init__(self, reason: RejectionReason):
        self.reason = reason
        super().__init__(f"[{reason.code}] {reason.message}")

    @property
    def code(self) -> str:
        return self.reason.code


def reject(code: str, message: str, policy_name: str) -> ValidationError:
    """Build a ValidationError ready to raise."""
    return ValidationError(RejectionReason(
        code=code, message=message, policy_name=policy_name,
    ))
