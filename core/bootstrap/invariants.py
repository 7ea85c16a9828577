"""
Structa Bootstrap — Invariant Checks
======================================
Each function verifies one store law over a snapshot.
If any check fails → StoreIntegrityError is raised.

These checks do NOT:
- Auto-fix anything
- Drop orphaned records
- Recompute totals
"""

import logging

from core.bootstrap.errors import StoreIntegrityError
from core.primitives.phase import COMPLETE

logger = logging.getLogger("structa.bootstrap")


# ══════════════════════════════════════════════════════════════
# CHECK 1: Unique ids per collection
# ══════════════════════════════════════════════════════════════

def check_unique_ids(snapshot):
    for name in ("projects", "phases", "materials", "stock_movements", "purchases"):
        seen = set()
        for record in getattr(snapshot, name):
            if record.id in seen:
                raise StoreIntegrityError(
                    invariant="UNIQUE_IDS",
                    detail=f"{name} holds id '{record.id}' more than once.",
                )
            seen.add(record.id)

    logger.debug("✓ Ids unique per collection.")


# ══════════════════════════════════════════════════════════════
# CHECK 2: No orphaned records
# ══════════════════════════════════════════════════════════════

def check_no_orphans(snapshot):
    """
    Every phase, movement and purchase points at an existing
    project; every movement at an existing material and, when
    set, an existing phase.
    """
    project_ids = {p.id for p in snapshot.projects}
    phase_ids = {p.id for p in snapshot.phases}
    material_ids = {m.id for m in snapshot.materials}

    for phase in snapshot.phases:
        if phase.project_id not in project_ids:
            raise StoreIntegrityError(
                invariant="NO_ORPHANS",
                detail=f"Phase '{phase.id}' references missing project '{phase.project_id}'.",
            )

    for movement in snapshot.stock_movements:
        if movement.project_id not in project_ids:
            raise StoreIntegrityError(
                invariant="NO_ORPHANS",
                detail=(
                    f"Stock movement '{movement.id}' references missing "
                    f"project '{movement.project_id}'."
                ),
            )
        if movement.material_id not in material_ids:
            raise StoreIntegrityError(
                invariant="NO_ORPHANS",
                detail=(
                    f"Stock movement '{movement.id}' references missing "
                    f"material '{movement.material_id}'."
                ),
            )
        if movement.phase_id is not None and movement.phase_id not in phase_ids:
            raise StoreIntegrityError(
                invariant="NO_ORPHANS",
                detail=(
                    f"Stock movement '{movement.id}' references missing "
                    f"phase '{movement.phase_id}'."
                ),
            )

    for purchase in snapshot.purchases:
        if purchase.project_id not in project_ids:
            raise StoreIntegrityError(
                invariant="NO_ORPHANS",
                detail=(
                    f"Purchase '{purchase.id}' references missing "
                    f"project '{purchase.project_id}'."
                ),
            )

    logger.debug("✓ No orphaned records.")


# ══════════════════════════════════════════════════════════════
# CHECK 3: Phase progress bounds
# ══════════════════════════════════════════════════════════════

def check_progress_bounds(snapshot):
    for phase in snapshot.phases:
        if not 0 <= phase.progress <= COMPLETE:
            raise StoreIntegrityError(
                invariant="PROGRESS_BOUNDS",
                detail=f"Phase '{phase.id}' progress {phase.progress} outside 0–100.",
            )

    logger.debug("✓ Phase progress within bounds.")


# ══════════════════════════════════════════════════════════════
# CHECK 4: Purchase totals
# ══════════════════════════════════════════════════════════════

def check_purchase_totals(snapshot):
    """
    total_cost equals the sum of line totals, and each line total
    equals quantity × unit price. Purchases without items are
    skipped: their total stands on its own.
    """
    for purchase in snapshot.purchases:
        if not purchase.items:
            continue
        for item in purchase.items:
            if item.line_total != item.quantity * item.unit_price:
                raise StoreIntegrityError(
                    invariant="PURCHASE_TOTALS",
                    detail=(
                        f"Purchase '{purchase.id}' item '{item.id}' line total "
                        f"{item.line_total} != {item.quantity} × {item.unit_price}."
                    ),
                )
        if purchase.total_cost != purchase.items_total:
            raise StoreIntegrityError(
                invariant="PURCHASE_TOTALS",
                detail=(
                    f"Purchase '{purchase.id}' total {purchase.total_cost} "
                    f"!= items total {purchase.items_total}."
                ),
            )

    logger.debug("✓ Purchase totals consistent.")
