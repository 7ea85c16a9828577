"""
Structa Stock Movement Primitive
==================================
A recorded increment (IN) or decrement (OUT) of a material's
stock, tied to a project and optionally to one of its phases.

RULES:
- Quantities are always positive; direction comes from `kind`
- A movement never cascades to other entities
- Movements are only changed through explicit update/delete

This file contains NO persistence logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from core.primitives.values import (
    iso,
    require_datetime,
    require_optional_datetimes,
    require_text,
    to_decimal,
    to_enum,
)


class MovementKind(Enum):
    IN = "in"
    OUT = "out"


@dataclass(frozen=True)
class StockMovement:
    """
    Single stock movement record.

    Fields:
        id:            Unique identifier
        material_id:   Material moved
        project_id:    Project the movement is booked against
        kind:          in | out
        quantity:      Amount moved (always positive)
        reason:        Free-text audit reason
        date:          When the movement happened
        performed_by:  Person (or system sentinel) responsible
        phase_id:      Phase the material was used on (optional)
    """
    id: str
    material_id: str
    project_id: str
    kind: MovementKind
    quantity: Decimal
    reason: str
    date: datetime
    performed_by: str
    phase_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        require_text(self.id, "id")
        require_text(self.material_id, "material_id")
        require_datetime(self.date, "date")
        require_optional_datetimes(self, "created_at", "updated_at")
        object.__setattr__(self, "kind", to_enum(MovementKind, self.kind, "kind"))
        object.__setattr__(self, "quantity", to_decimal(self.quantity, "quantity"))
        if self.quantity <= 0:
            raise ValueError("quantity must be positive.")

    @property
    def net_quantity_change(self) -> Decimal:
        """Positive = stock increased, negative = stock decreased."""
        if self.kind == MovementKind.IN:
            return self.quantity
        return -self.quantity

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "material_id": self.material_id,
            "project_id": self.project_id,
            "phase_id": self.phase_id,
            "kind": self.kind.value,
            "quantity": str(self.quantity),
            "reason": self.reason,
            "date": iso(self.date),
            "performed_by": self.performed_by,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
