"""
Structa Material Primitive — Catalog Item with Tracked Stock
==============================================================
stock_quantity is the current on-hand level. It changes through
stock movements and purchase delivery reconciliation.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from core.primitives.values import (
    iso,
    require_optional_datetimes,
    require_text,
    to_decimal,
)


@dataclass(frozen=True)
class Material:
    id: str
    name: str
    unit: str
    supplier: str
    unit_price: Decimal
    category: str
    stock_quantity: Decimal = Decimal(0)
    min_stock_quantity: Decimal = Decimal(0)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        require_text(self.id, "id")
        require_text(self.name, "name")
        require_optional_datetimes(self, "created_at", "updated_at")
        for name in ("unit_price", "stock_quantity", "min_stock_quantity"):
            object.__setattr__(self, name, to_decimal(getattr(self, name), name))
        if self.unit_price < 0:
            raise ValueError("unit_price must not be negative.")

    @property
    def stock_value(self) -> Decimal:
        return self.unit_price * self.stock_quantity

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "unit": self.unit,
            "supplier": self.supplier,
            "unit_price": str(self.unit_price),
            "category": self.category,
            "stock_quantity": str(self.stock_quantity),
            "min_stock_quantity": str(self.min_stock_quantity),
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
