"""
Structa Procurement Engine — Delivery Reconciliation
======================================================
When a purchase becomes `delivered`:
1. Every item increments its material's stock_quantity
2. Every item appends one IN stock movement
3. One summary notification is produced

reconcile() is pure. It returns the new material and movement
collections; the store commits them together with the updated
purchase, then publishes the notification. Whether reconciliation
should run at all is decided by
engines.procurement.policies.delivery_requires_reconciliation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Dict, Optional, Sequence, Tuple

from core.config import DEFAULT_SETTINGS, StoreSettings
from core.notifications import Notification
from core.primitives import Material, Purchase, StockMovement
from engines.procurement.events import (
    build_delivery_movement,
    build_delivery_notification,
)

logger = logging.getLogger("structa.procurement")


@dataclass(frozen=True)
class ReconciliationResult:
    materials: Tuple[Material, ...]
    stock_movements: Tuple[StockMovement, ...]
    item_count: int
    notification: Notification


class DeliveryReconciler:
    """Turns a delivered purchase into stock increments and movements."""

    def __init__(self, settings: Optional[StoreSettings] = None):
        self._settings = settings or DEFAULT_SETTINGS

    def reconcile(
        self,
        purchase: Purchase,
        materials: Sequence[Material],
        movements: Sequence[StockMovement],
        now: datetime,
    ) -> ReconciliationResult:
        rule = self._settings.reconciliation
        index: Dict[str, int] = {m.id: i for i, m in enumerate(materials)}
        updated_materials = list(materials)
        appended = []

        for item in purchase.items:
            position = index.get(item.material_id)
            if position is None:
                logger.warning(
                    f"Purchase {purchase.id} item {item.id} references unknown "
                    f"material {item.material_id}; movement recorded, stock unchanged"
                )
            else:
                material = updated_materials[position]
                updated_materials[position] = replace(
                    material,
                    stock_quantity=material.stock_quantity + item.quantity,
                    updated_at=now,
                )
            appended.append(
                build_delivery_movement(purchase, item, rule=rule, now=now)
            )

        item_count = len(purchase.items)
        logger.info(
            f"Reconciled delivery of purchase {purchase.id}: "
            f"{item_count} item(s) added to stock"
        )
        return ReconciliationResult(
            materials=tuple(updated_materials),
            stock_movements=tuple(movements) + tuple(appended),
            item_count=item_count,
            notification=build_delivery_notification(
                purchase, item_count, rule=rule,
            ),
        )
