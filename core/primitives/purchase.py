"""
Structa Purchase Primitive — Material Orders
==============================================
A Purchase is an order of materials from a supplier, composed of
line items, moving through pending → approved → delivered.

total_cost equals the sum of the items' line totals at creation.
The store does not re-validate it on read.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional, Tuple

from core.primitives.values import (
    dec_str,
    iso,
    new_id,
    require_datetime,
    require_optional_datetimes,
    require_text,
    to_decimal,
    to_enum,
    to_optional_decimal,
)


class PurchaseStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DELIVERED = "delivered"


# ══════════════════════════════════════════════════════════════
# PURCHASE ITEM
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PurchaseItem:
    """One order line. line_total defaults to quantity × unit_price."""
    id: str
    purchase_id: str
    material_id: str
    quantity: Decimal
    unit_price: Decimal
    line_total: Optional[Decimal] = None

    def __post_init__(self):
        require_text(self.id, "id")
        require_text(self.material_id, "material_id")
        object.__setattr__(self, "quantity", to_decimal(self.quantity, "quantity"))
        object.__setattr__(
            self, "unit_price", to_decimal(self.unit_price, "unit_price")
        )
        if self.quantity <= 0:
            raise ValueError("quantity must be positive.")
        if self.line_total is None:
            object.__setattr__(self, "line_total", self.quantity * self.unit_price)
        else:
            object.__setattr__(
                self, "line_total", to_decimal(self.line_total, "line_total")
            )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "purchase_id": self.purchase_id,
            "material_id": self.material_id,
            "quantity": str(self.quantity),
            "unit_price": str(self.unit_price),
            "line_total": str(self.line_total),
        }


# ══════════════════════════════════════════════════════════════
# PURCHASE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Purchase:
    """
    Purchase order.

    processed_at is set once, by delivery reconciliation.
    """
    id: str
    project_id: str
    supplier: str
    purchase_date: datetime
    items: Tuple[PurchaseItem, ...] = ()
    total_cost: Optional[Decimal] = None
    invoice_number: Optional[str] = None
    status: PurchaseStatus = PurchaseStatus.PENDING
    processed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        require_text(self.id, "id")
        require_text(self.project_id, "project_id")
        require_datetime(self.purchase_date, "purchase_date")
        require_optional_datetimes(
            self, "processed_at", "created_at", "updated_at",
        )
        object.__setattr__(self, "items", tuple(self.items))
        object.__setattr__(
            self, "status", to_enum(PurchaseStatus, self.status, "status")
        )
        if self.total_cost is None:
            object.__setattr__(self, "total_cost", self.items_total)
        else:
            object.__setattr__(
                self, "total_cost", to_optional_decimal(self.total_cost, "total_cost")
            )

    @property
    def items_total(self) -> Decimal:
        return sum((item.line_total for item in self.items), Decimal(0))

    @property
    def is_delivered(self) -> bool:
        return self.status == PurchaseStatus.DELIVERED

    @property
    def reference(self) -> str:
        """Invoice number when known, otherwise '#<id>'."""
        if self.invoice_number:
            return f"(Invoice: {self.invoice_number})"
        return f"#{self.id}"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "supplier": self.supplier,
            "purchase_date": iso(self.purchase_date),
            "total_cost": dec_str(self.total_cost),
            "invoice_number": self.invoice_number,
            "status": self.status.value,
            "items": [item.to_dict() for item in self.items],
            "processed_at": iso(self.processed_at),
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }


def build_purchase(
    *,
    purchase_id: str,
    project_id: str,
    supplier: str,
    purchase_date: datetime,
    lines: Iterable[Tuple[str, object, object]],
    invoice_number: Optional[str] = None,
    status: PurchaseStatus = PurchaseStatus.PENDING,
    created_at: Optional[datetime] = None,
) -> Purchase:
    """
    Build a Purchase from (material_id, quantity, unit_price) lines.

    Line totals and the purchase total are computed here, which is
    the consistency the editing screens are expected to keep.
    """
    items = tuple(
        PurchaseItem(
            id=new_id("item"),
            purchase_id=purchase_id,
            material_id=material_id,
            quantity=quantity,
            unit_price=unit_price,
        )
        for material_id, quantity, unit_price in lines
    )
    return Purchase(
        id=purchase_id,
        project_id=project_id,
        supplier=supplier,
        purchase_date=purchase_date,
        items=items,
        invoice_number=invoice_number,
        status=status,
        created_at=created_at,
        updated_at=created_at,
    )
