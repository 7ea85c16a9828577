"""
Structa Procurement Engine — Delivery Records & Notifications
===============================================================
Builders for the records that delivery reconciliation emits:
one synthetic IN stock movement per purchase item, and one
summary notification per delivered purchase.
"""

from __future__ import annotations

from datetime import datetime

from core.config import ReconciliationRule
from core.notifications import Notification, NotificationKind
from core.primitives import MovementKind, Purchase, PurchaseItem, StockMovement
from core.primitives.values import new_id


def delivery_reason(purchase: Purchase) -> str:
    return f"Delivery of purchase {purchase.reference}"


def build_delivery_movement(
    purchase: Purchase,
    item: PurchaseItem,
    *,
    rule: ReconciliationRule,
    now: datetime,
) -> StockMovement:
    return StockMovement(
        id=new_id("mov"),
        material_id=item.material_id,
        project_id=purchase.project_id,
        kind=MovementKind.IN,
        quantity=item.quantity,
        reason=delivery_reason(purchase),
        date=now,
        performed_by=rule.performed_by,
        created_at=now,
        updated_at=now,
    )


def build_delivery_notification(
    purchase: Purchase,
    item_count: int,
    *,
    rule: ReconciliationRule,
) -> Notification:
    noun = "item" if item_count == 1 else "items"
    return Notification(
        kind=NotificationKind.SUCCESS,
        title=rule.notification_title,
        message=(
            f"Stock updated automatically with {item_count} {noun} "
            f"from purchase {purchase.reference}"
        ),
        auto_close=True,
        duration_ms=rule.notification_duration_ms,
    )
