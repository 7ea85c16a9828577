"""
Structa Construction — Aggregate Store
========================================
The sole mutator of the five collections: projects, phases,
materials, stock movements and purchases.

Lifecycle: construct → seed → serve queries/mutations → discard.

Mutation discipline:
- Every mutation builds the complete next StoreSnapshot first,
  then swaps it in with a single assignment. A failed mutation
  leaves every collection untouched.
- update_* / delete_* on an unknown id raise EntityNotFoundError.
- Notifications are published only after the swap.
- Derived values (progress, counts, low stock) are recomputed on
  every call from the current snapshot. Nothing is cached.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional, Tuple

from core.config import DEFAULT_SETTINGS, StoreSettings
from core.notifications import Notification, NotificationBus
from core.primitives import (
    Material,
    Phase,
    Project,
    Purchase,
    StockMovement,
)
from core.primitives.values import new_id, round_half_up
from core.time import Clock, get_default_clock
from engines.construction.errors import EntityNotFoundError, MutationRejectedError
from engines.construction.events import (
    build_created_notification,
    build_deleted_notification,
    build_low_stock_notification,
)
from engines.construction.policies import ENTITY_COLLECTIONS, plan_delete
from engines.construction.snapshot import ScopeFilter, StoreSnapshot, apply_scope
from engines.inventory.services import (
    ConsumptionRow,
    apply_movement,
    is_low_stock,
    low_stock_materials,
    out_of_stock_materials,
    top_consumed_materials,
)
from engines.procurement.policies import (
    delivery_requires_reconciliation,
    purchase_status_transition_policy,
)
from engines.procurement.services import DeliveryReconciler

logger = logging.getLogger("structa.store")

_RECORD_TYPES = {
    "project": Project,
    "phase": Phase,
    "material": Material,
    "stock_movement": StockMovement,
    "purchase": Purchase,
}


class ConstructionStore:
    """
    In-memory aggregate store.

    Usage:
        store = ConstructionStore(clock=FixedClock(now))
        store.seed(seed_dataset())
        store.update_purchase("1", status="delivered")
    """

    def __init__(
        self,
        *,
        clock: Optional[Clock] = None,
        settings: Optional[StoreSettings] = None,
        notifier: Optional[NotificationBus] = None,
    ):
        self._clock = clock or get_default_clock()
        self._settings = settings or DEFAULT_SETTINGS
        self._notifier = notifier or NotificationBus()
        self._reconciler = DeliveryReconciler(self._settings)
        self._state = StoreSnapshot()

    # ══════════════════════════════════════════════════════════
    # LIFECYCLE & VIEWS
    # ══════════════════════════════════════════════════════════

    def seed(self, dataset: StoreSnapshot) -> None:
        """Replace every collection with `dataset`."""
        self._state = StoreSnapshot(
            projects=dataset.projects,
            phases=dataset.phases,
            materials=dataset.materials,
            stock_movements=dataset.stock_movements,
            purchases=dataset.purchases,
        )
        logger.info(
            f"Store seeded: {len(self._state.projects)} projects, "
            f"{len(self._state.phases)} phases, "
            f"{len(self._state.materials)} materials, "
            f"{len(self._state.stock_movements)} movements, "
            f"{len(self._state.purchases)} purchases"
        )

    def snapshot(self) -> StoreSnapshot:
        return self._state

    def filtered_snapshot(self, scope: ScopeFilter) -> StoreSnapshot:
        return apply_scope(self._state, scope)

    @property
    def settings(self) -> StoreSettings:
        return self._settings

    @property
    def notifier(self) -> NotificationBus:
        return self._notifier

    @property
    def projects(self) -> Tuple[Project, ...]:
        return self._state.projects

    @property
    def phases(self) -> Tuple[Phase, ...]:
        return self._state.phases

    @property
    def materials(self) -> Tuple[Material, ...]:
        return self._state.materials

    @property
    def stock_movements(self) -> Tuple[StockMovement, ...]:
        return self._state.stock_movements

    @property
    def purchases(self) -> Tuple[Purchase, ...]:
        return self._state.purchases

    def get_project(self, project_id: str) -> Optional[Project]:
        return self._find("project", project_id)

    def get_phase(self, phase_id: str) -> Optional[Phase]:
        return self._find("phase", phase_id)

    def get_material(self, material_id: str) -> Optional[Material]:
        return self._find("material", material_id)

    def get_stock_movement(self, movement_id: str) -> Optional[StockMovement]:
        return self._find("stock_movement", movement_id)

    def get_purchase(self, purchase_id: str) -> Optional[Purchase]:
        return self._find("purchase", purchase_id)

    # ══════════════════════════════════════════════════════════
    # PROJECTS
    # ══════════════════════════════════════════════════════════

    def add_project(self, project: Project) -> Project:
        return self._add("project", project)

    def update_project(self, project_id: str, **changes: Any) -> Project:
        return self._update("project", project_id, changes)

    def delete_project(self, project_id: str) -> None:
        self._delete("project", project_id)

    # ══════════════════════════════════════════════════════════
    # PHASES
    # ══════════════════════════════════════════════════════════

    def add_phase(self, phase: Phase) -> Phase:
        return self._add("phase", phase)

    def update_phase(self, phase_id: str, **changes: Any) -> Phase:
        return self._update("phase", phase_id, changes)

    def delete_phase(self, phase_id: str) -> None:
        self._delete("phase", phase_id)

    # ══════════════════════════════════════════════════════════
    # MATERIALS
    # ══════════════════════════════════════════════════════════

    def add_material(self, material: Material) -> Material:
        return self._add("material", material)

    def update_material(self, material_id: str, **changes: Any) -> Material:
        return self._update("material", material_id, changes)

    def delete_material(self, material_id: str) -> None:
        self._delete("material", material_id)

    # ══════════════════════════════════════════════════════════
    # STOCK MOVEMENTS
    # ══════════════════════════════════════════════════════════

    def add_stock_movement(self, movement: StockMovement) -> StockMovement:
        """Append the movement only. Material stock is not touched."""
        return self._add("stock_movement", movement)

    def update_stock_movement(
        self, movement_id: str, **changes: Any,
    ) -> StockMovement:
        return self._update("stock_movement", movement_id, changes)

    def delete_stock_movement(self, movement_id: str) -> None:
        self._delete("stock_movement", movement_id)

    def record_stock_movement(self, movement: StockMovement) -> StockMovement:
        """
        Append the movement and apply it to the material's stock.

        A movement for an unknown material is still recorded; stock is
        left as is. Publishes a low-stock warning when the material ends
        at or below its minimum.
        """
        self._require_type("stock_movement", movement)
        now = self._now()
        movement = self._stamped(movement, now)

        materials = self._state.materials
        material = self._state.find_material(movement.material_id)
        adjusted: Optional[Material] = None
        if material is None:
            logger.warning(
                f"Stock movement {movement.id} references unknown material "
                f"{movement.material_id}; stock unchanged"
            )
        else:
            adjusted = apply_movement(material, movement, now)
            materials = _swap(materials, material, adjusted)

        self._state = replace(
            self._state,
            materials=materials,
            stock_movements=self._state.stock_movements + (movement,),
        )
        logger.info(
            f"Recorded {movement.kind.value} movement {movement.id}: "
            f"{movement.quantity} of material {movement.material_id}"
        )

        self._publish(build_created_notification("stock_movement", movement))
        if adjusted is not None and is_low_stock(adjusted, self._settings.low_stock):
            logger.warning(
                f"Material {adjusted.id} is low on stock: "
                f"{adjusted.stock_quantity} <= {adjusted.min_stock_quantity}"
            )
            self._publish(build_low_stock_notification(adjusted))
        return movement

    # ══════════════════════════════════════════════════════════
    # PURCHASES
    # ══════════════════════════════════════════════════════════

    def add_purchase(self, purchase: Purchase) -> Purchase:
        return self._add("purchase", purchase)

    def update_purchase(self, purchase_id: str, **changes: Any) -> Purchase:
        """
        Merge `changes` into the purchase.

        The transition into `delivered` reconciles stock exactly once:
        the stored status is read before the merge, and the updated
        purchase, materials and movements are committed together.
        Moving backwards raises MutationRejectedError.
        """
        current = self._get_or_raise("purchase", purchase_id)
        now = self._now()
        updated = self._merged(current, changes, now)

        rejection = purchase_status_transition_policy(current, updated.status)
        if rejection is not None:
            logger.warning(
                f"Purchase {purchase_id} update rejected: {rejection.code}"
            )
            raise MutationRejectedError(rejection)

        next_state = {}
        notification: Optional[Notification] = None

        if delivery_requires_reconciliation(current, updated):
            result = self._reconciler.reconcile(
                updated,
                self._state.materials,
                self._state.stock_movements,
                now,
            )
            updated = replace(updated, processed_at=now)
            next_state["materials"] = result.materials
            next_state["stock_movements"] = result.stock_movements
            notification = result.notification
        elif updated.is_delivered and "status" in changes:
            logger.debug(
                f"Purchase {purchase_id} already delivered; reconciliation skipped"
            )

        next_state["purchases"] = _swap(self._state.purchases, current, updated)
        self._state = replace(self._state, **next_state)
        logger.info(f"Updated purchase {purchase_id} (status={updated.status.value})")

        if notification is not None:
            self._publish(notification)
        return updated

    def delete_purchase(self, purchase_id: str) -> None:
        self._delete("purchase", purchase_id)

    # ══════════════════════════════════════════════════════════
    # PHASE QUERIES
    # ══════════════════════════════════════════════════════════

    def get_phases_by_project(self, project_id: str) -> List[Phase]:
        return list(self._state.phases_of(project_id))

    def get_project_progress(self, project_id: str) -> int:
        """Mean phase progress, rounded half-up. 0 without phases."""
        return project_progress(self._state.phases_of(project_id))

    def get_completed_phase_count(self, project_id: str) -> int:
        return sum(1 for p in self._state.phases_of(project_id) if p.is_complete)

    def get_total_phase_count(self, project_id: str) -> int:
        return len(self._state.phases_of(project_id))

    def get_next_phase(self, project_id: str) -> Optional[Phase]:
        """
        Incomplete phase with the earliest start_date.

        Dated phases come before undated ones; ties keep insertion
        order. None when every phase is complete or none exist.
        """
        pending = [p for p in self._state.phases_of(project_id) if not p.is_complete]
        if not pending:
            return None
        dated = [p for p in pending if p.start_date is not None]
        if not dated:
            return pending[0]
        # min() keeps the first of equal keys
        return min(dated, key=lambda p: p.start_date)

    def create_default_phase_template(self, project_id: str) -> List[Phase]:
        """Insert the template phases, progress 0, in template order."""
        if self.get_project(project_id) is None:
            raise EntityNotFoundError("project", project_id)

        now = self._now()
        created = [
            Phase(
                id=new_id("phase"),
                name=entry.name,
                description=entry.description,
                project_id=project_id,
                progress=0,
                created_at=now,
                updated_at=now,
            )
            for entry in self._settings.phase_template
        ]
        self._state = replace(
            self._state, phases=self._state.phases + tuple(created),
        )
        logger.info(
            f"Created {len(created)} template phases for project {project_id}"
        )
        return created

    # ══════════════════════════════════════════════════════════
    # STOCK QUERIES
    # ══════════════════════════════════════════════════════════

    def get_low_stock_materials(self) -> List[Material]:
        return low_stock_materials(self._state.materials, self._settings.low_stock)

    def get_out_of_stock_materials(self) -> List[Material]:
        return out_of_stock_materials(self._state.materials)

    def get_top_consumed_materials(
        self, limit: Optional[int] = None,
    ) -> List[ConsumptionRow]:
        return top_consumed_materials(
            self._state.stock_movements,
            self._state.materials,
            limit if limit is not None else self._settings.top_consumed_limit,
        )

    # ══════════════════════════════════════════════════════════
    # INTERNALS
    # ══════════════════════════════════════════════════════════

    def _now(self) -> datetime:
        return self._clock.now_utc()

    def _collection(self, entity_type: str) -> Tuple[Any, ...]:
        return getattr(self._state, ENTITY_COLLECTIONS[entity_type][0])

    def _find(self, entity_type: str, entity_id: str):
        for record in self._collection(entity_type):
            if record.id == entity_id:
                return record
        return None

    def _get_or_raise(self, entity_type: str, entity_id: str):
        record = self._find(entity_type, entity_id)
        if record is None:
            logger.warning(f"{entity_type} {entity_id} not found")
            raise EntityNotFoundError(entity_type, entity_id)
        return record

    @staticmethod
    def _require_type(entity_type: str, record: Any) -> None:
        expected = _RECORD_TYPES[entity_type]
        if not isinstance(record, expected):
            raise TypeError(
                f"Expected {expected.__name__}, got {type(record).__name__}."
            )

    @staticmethod
    def _stamped(record, now: datetime):
        """Fill in missing created_at / updated_at."""
        created = record.created_at or now
        return replace(
            record, created_at=created, updated_at=record.updated_at or created,
        )

    @staticmethod
    def _merged(record, changes: dict, now: datetime):
        if "id" in changes:
            raise ValueError("id cannot be changed.")
        return replace(record, **{**changes, "updated_at": now})

    def _add(self, entity_type: str, record):
        self._require_type(entity_type, record)
        record = self._stamped(record, self._now())
        collection = ENTITY_COLLECTIONS[entity_type][0]
        self._state = replace(
            self._state,
            **{collection: self._collection(entity_type) + (record,)},
        )
        logger.info(f"Added {entity_type} {record.id}")
        self._publish(build_created_notification(entity_type, record))
        return record

    def _update(self, entity_type: str, entity_id: str, changes: dict):
        current = self._get_or_raise(entity_type, entity_id)
        updated = self._merged(current, changes, self._now())
        collection = ENTITY_COLLECTIONS[entity_type][0]
        self._state = replace(
            self._state,
            **{collection: _swap(self._collection(entity_type), current, updated)},
        )
        logger.info(
            f"Updated {entity_type} {entity_id}: {', '.join(sorted(changes)) or 'no fields'}"
        )
        return updated

    def _delete(self, entity_type: str, entity_id: str) -> None:
        target = self._get_or_raise(entity_type, entity_id)
        plan = plan_delete(self._state, entity_type, entity_id)
        self._state = plan.after
        logger.info(
            f"Deleted {entity_type} {entity_id} "
            f"({plan.dependents_removed} dependent record(s) removed)"
        )
        self._publish(build_deleted_notification(target, plan))

    def _publish(self, notification: Notification) -> None:
        self._notifier.publish(notification)


# ══════════════════════════════════════════════════════════════
# PURE HELPERS
# ══════════════════════════════════════════════════════════════

def _swap(records: Tuple[Any, ...], current, updated) -> Tuple[Any, ...]:
    """Replace `current` (by identity) with `updated`, keeping position."""
    return tuple(updated if r is current else r for r in records)


def project_progress(phases) -> int:
    """Rounded (half-up) arithmetic mean of phase progress; 0 if empty."""
    phases = list(phases)
    if not phases:
        return 0
    mean = Decimal(sum(p.progress for p in phases)) / Decimal(len(phases))
    return int(round_half_up(mean))
