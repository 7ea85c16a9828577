"""
Structa Construction — Cascade Policy
=======================================
Which dependents go when a parent record is deleted.

    project        → its phases, stock movements and purchases
    phase          → stock movements referencing the phase
    material       → stock movements referencing the material
    stock_movement → nothing else
    purchase       → nothing else (items are owned by the purchase)

plan_delete() is pure: it returns the post-delete snapshot and
the removal counts. The store swaps the whole snapshot in at once,
so no partially cascaded state is ever observable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple

from engines.construction.snapshot import StoreSnapshot

# entity_type → (owning collection, display label)
ENTITY_COLLECTIONS: Dict[str, Tuple[str, str]] = {
    "project": ("projects", "Project"),
    "phase": ("phases", "Phase"),
    "material": ("materials", "Material"),
    "stock_movement": ("stock_movements", "Stock movement"),
    "purchase": ("purchases", "Purchase"),
}

# entity_type → {collection: attribute compared against the deleted id}
CASCADE_RULES: Dict[str, Dict[str, str]] = {
    "project": {
        "projects": "id",
        "phases": "project_id",
        "stock_movements": "project_id",
        "purchases": "project_id",
    },
    "phase": {
        "phases": "id",
        "stock_movements": "phase_id",
    },
    "material": {
        "materials": "id",
        "stock_movements": "material_id",
    },
    "stock_movement": {
        "stock_movements": "id",
    },
    "purchase": {
        "purchases": "id",
    },
}


@dataclass(frozen=True)
class CascadePlan:
    entity_type: str
    entity_id: str
    after: StoreSnapshot
    removed: Dict[str, int] = field(default_factory=dict)

    @property
    def dependents_removed(self) -> int:
        """Records removed besides the target itself."""
        return sum(self.removed.values()) - 1


def plan_delete(
    snapshot: StoreSnapshot, entity_type: str, entity_id: str,
) -> CascadePlan:
    rules = CASCADE_RULES.get(entity_type)
    if rules is None:
        raise ValueError(f"Unknown entity type: {entity_type}")

    collections = {
        name: getattr(snapshot, name)
        for name in ("projects", "phases", "materials", "stock_movements", "purchases")
    }
    removed: Dict[str, int] = {}

    for collection, attr in rules.items():
        before = collections[collection]
        kept = tuple(r for r in before if getattr(r, attr) != entity_id)
        removed[collection] = len(before) - len(kept)
        collections[collection] = kept

    return CascadePlan(
        entity_type=entity_type,
        entity_id=entity_id,
        after=StoreSnapshot(**collections),
        removed=removed,
    )
