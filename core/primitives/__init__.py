"""
Structa Core Primitives — Construction Domain Records
=======================================================
Primitives are the shared building blocks every engine consumes.
They are:

- Pure Python
- Immutable (frozen dataclasses; updates produce a new record)
- Validated at construction (ValueError on malformed input)

Primitives:
    project   — construction job ("obra")
    phase     — unit of work within a project ("etapa")
    material  — catalog item with tracked stock
    stock     — stock movement (in/out)
    purchase  — purchase order and its line items
"""

from core.primitives.material import Material
from core.primitives.phase import Phase
from core.primitives.project import Project, ProjectStatus
from core.primitives.purchase import (
    Purchase,
    PurchaseItem,
    PurchaseStatus,
    build_purchase,
)
from core.primitives.stock import MovementKind, StockMovement

__all__ = [
    "Project",
    "ProjectStatus",
    "Phase",
    "Material",
    "StockMovement",
    "MovementKind",
    "Purchase",
    "PurchaseItem",
    "PurchaseStatus",
    "build_purchase",
]
