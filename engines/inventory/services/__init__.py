"""
Structa Inventory Engine — Stock Services
===========================================
Pure functions over materials and stock movements:
stock-level classification, movement application and
consumption rankings.

Low stock means stock <= minimum (LowStockRule, inclusive by
default). Every screen, KPI and report uses this one rule.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

from core.config import LowStockRule
from core.primitives import Material, MovementKind, StockMovement


class StockLevel(Enum):
    OUT_OF_STOCK = "out_of_stock"
    LOW = "low"
    NORMAL = "normal"


# ══════════════════════════════════════════════════════════════
# CLASSIFICATION
# ══════════════════════════════════════════════════════════════

def is_low_stock(material: Material, rule: LowStockRule) -> bool:
    return rule.is_low(material.stock_quantity, material.min_stock_quantity)


def classify_stock(material: Material, rule: LowStockRule) -> StockLevel:
    if material.stock_quantity <= 0:
        return StockLevel.OUT_OF_STOCK
    if is_low_stock(material, rule):
        return StockLevel.LOW
    return StockLevel.NORMAL


def low_stock_materials(
    materials: Iterable[Material], rule: LowStockRule,
) -> List[Material]:
    """Materials at or below minimum, out-of-stock ones included."""
    return [m for m in materials if is_low_stock(m, rule)]


def out_of_stock_materials(materials: Iterable[Material]) -> List[Material]:
    return [m for m in materials if m.stock_quantity <= 0]


# ══════════════════════════════════════════════════════════════
# MOVEMENT APPLICATION
# ══════════════════════════════════════════════════════════════

def apply_movement(
    material: Material, movement: StockMovement, now: datetime,
) -> Material:
    """Return the material with the movement's net change applied."""
    if movement.material_id != material.id:
        raise ValueError(
            f"Movement {movement.id} is for material {movement.material_id}, "
            f"not {material.id}."
        )
    return replace(
        material,
        stock_quantity=material.stock_quantity + movement.net_quantity_change,
        updated_at=now,
    )


def last_movement_date(
    movements: Iterable[StockMovement], material_id: str,
) -> Optional[datetime]:
    dates = [m.date for m in movements if m.material_id == material_id]
    return max(dates) if dates else None


# ══════════════════════════════════════════════════════════════
# STATS & RANKINGS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class InventoryStats:
    total_materials: int
    low_stock: int
    out_of_stock: int
    total_value: Decimal


def inventory_stats(
    materials: Sequence[Material], rule: LowStockRule,
) -> InventoryStats:
    """Low counts materials at/below minimum that still have stock."""
    return InventoryStats(
        total_materials=len(materials),
        low_stock=sum(
            1 for m in materials
            if classify_stock(m, rule) == StockLevel.LOW
        ),
        out_of_stock=len(out_of_stock_materials(materials)),
        total_value=sum((m.stock_value for m in materials), Decimal(0)),
    )


@dataclass(frozen=True)
class ConsumptionRow:
    material_id: str
    material_name: str
    quantity: Decimal
    value: Decimal


def top_consumed_materials(
    movements: Iterable[StockMovement],
    materials: Sequence[Material],
    limit: int,
) -> List[ConsumptionRow]:
    """
    Rank materials by total OUT quantity, descending.

    Movements for unknown materials are ignored. Ties keep the order
    in which the material was first consumed.
    """
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValueError(f"limit must be an integer >= 1, got {limit!r}.")
    by_id: Dict[str, Material] = {m.id: m for m in materials}
    totals: Dict[str, Decimal] = {}

    for movement in movements:
        if movement.kind != MovementKind.OUT:
            continue
        if movement.material_id not in by_id:
            continue
        totals[movement.material_id] = (
            totals.get(movement.material_id, Decimal(0)) + movement.quantity
        )

    ranked = sorted(totals.items(), key=lambda kv: kv[1], reverse=True)[:limit]
    return [
        ConsumptionRow(
            material_id=material_id,
            material_name=by_id[material_id].name,
            quantity=quantity,
            value=quantity * by_id[material_id].unit_price,
        )
        for material_id, quantity in ranked
    ]
