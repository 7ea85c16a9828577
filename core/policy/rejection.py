"""
Structa Policy — Rejection Model
==================================
A policy answers "may this mutation happen?" with None (yes) or
a RejectionReason (no). The store raises MutationRejectedError
carrying the reason, so callers can branch on `code` while
users read `message`.
"""

from __future__ import annotations

from dataclasses import dataclass


class RejectionCode:
    """Codes the store's policies can refuse a mutation with."""

    PURCHASE_ALREADY_DELIVERED = "PURCHASE_ALREADY_DELIVERED"
    PURCHASE_STATUS_BACKWARD = "PURCHASE_STATUS_BACKWARD"


@dataclass(frozen=True)
class RejectionReason:
    """
    Why a mutation was refused.

    `policy_name` is the function that refused, so a rejection
    surfacing in logs can be traced back to its rule.
    """

    code: str
    message: str
    policy_name: str

    def __post_init__(self):
        for name in ("code", "message", "policy_name"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"{name} must be a non-empty string.")

    def describe(self) -> str:
        return f"{self.code}: {self.message}"

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
        }
