"""
Structa Procurement Engine — Policies
=======================================
Purchase status rules. Policies return Optional[RejectionReason];
None means the mutation is allowed.

Status order: pending → approved → delivered.
Forward moves (including skipping a step) and same-status updates
are allowed. Backward moves are refused; in particular a purchase
that could leave `delivered` and come back would reconcile twice.
"""

from __future__ import annotations

from typing import Optional

from core.policy import RejectionCode, RejectionReason
from core.primitives import Purchase, PurchaseStatus

STATUS_ORDER = {
    PurchaseStatus.PENDING: 0,
    PurchaseStatus.APPROVED: 1,
    PurchaseStatus.DELIVERED: 2,
}


def purchase_status_transition_policy(
    current: Purchase,
    target_status: PurchaseStatus,
) -> Optional[RejectionReason]:
    """Refuse any move backwards along pending → approved → delivered."""
    if STATUS_ORDER[target_status] >= STATUS_ORDER[current.status]:
        return None

    if current.status == PurchaseStatus.DELIVERED:
        return RejectionReason(
            code=RejectionCode.PURCHASE_ALREADY_DELIVERED,
            message=(
                f"Purchase '{current.id}' is delivered and cannot move "
                f"back to {target_status.value}."
            ),
            policy_name="purchase_status_transition_policy",
        )

    return RejectionReason(
        code=RejectionCode.PURCHASE_STATUS_BACKWARD,
        message=(
            f"Purchase '{current.id}' cannot move from "
            f"{current.status.value} back to {target_status.value}."
        ),
        policy_name="purchase_status_transition_policy",
    )


def delivery_requires_reconciliation(
    current: Purchase,
    updated: Purchase,
) -> bool:
    """
    True when this update is the one that delivers the purchase.

    The stored status decides, never the incoming one: a second
    `delivered` update is a no-op for stock. processed_at guards
    records seeded as already reconciled.
    """
    if updated.status != PurchaseStatus.DELIVERED:
        return False
    if current.status == PurchaseStatus.DELIVERED:
        return False
    return current.processed_at is None

