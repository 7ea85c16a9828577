"""
Structa Dashboard Projection — Read Model
===========================================
Derived figures for the dashboard screen, computed on demand
from a StoreSnapshot. Nothing is cached; the dataset is small
and in-memory.

Project scope ("all" or one project id) narrows the snapshot the
way the dashboard selector does: the project, its phases and
purchases, and the stock movements booked on its phases.
Materials are never narrowed.

Usage:
    model = DashboardReadModel(settings)
    view = model.scope(store.snapshot(), "1")
    model.kpis(view).average_progress
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional

from core.config import DEFAULT_SETTINGS, StoreSettings
from core.primitives import MovementKind, ProjectStatus
from engines.construction.services import project_progress
from engines.construction.snapshot import StoreSnapshot
from engines.inventory.services import (
    ConsumptionRow,
    InventoryStats,
    inventory_stats,
    low_stock_materials,
    top_consumed_materials,
)

ALL_PROJECTS = "all"


@dataclass(frozen=True)
class DashboardKPIs:
    total_projects: int
    in_progress_projects: int
    completed_projects: int
    total_spent: Decimal
    low_stock_materials: int
    completed_phases: int
    total_phases: int
    average_progress: int


@dataclass(frozen=True)
class CategoryCost:
    category: str
    value: Decimal


@dataclass(frozen=True)
class PhaseCost:
    phase_id: str
    phase_name: str
    value: Decimal


class DashboardReadModel:

    def __init__(self, settings: Optional[StoreSettings] = None):
        self._settings = settings or DEFAULT_SETTINGS

    def scope(
        self, snapshot: StoreSnapshot, project_id: Optional[str] = ALL_PROJECTS,
    ) -> StoreSnapshot:
        if not project_id or project_id == ALL_PROJECTS:
            return snapshot
        phases = snapshot.phases_of(project_id)
        phase_ids = {p.id for p in phases}
        return StoreSnapshot(
            projects=tuple(p for p in snapshot.projects if p.id == project_id),
            phases=phases,
            materials=snapshot.materials,
            stock_movements=tuple(
                m for m in snapshot.stock_movements if m.phase_id in phase_ids
            ),
            purchases=snapshot.purchases_of(project_id),
        )

    def kpis(self, snapshot: StoreSnapshot) -> DashboardKPIs:
        projects = snapshot.projects
        return DashboardKPIs(
            total_projects=len(projects),
            in_progress_projects=sum(
                1 for p in projects if p.status == ProjectStatus.IN_PROGRESS
            ),
            completed_projects=sum(
                1 for p in projects if p.status == ProjectStatus.COMPLETED
            ),
            total_spent=sum(
                (p.total_cost or Decimal(0) for p in snapshot.purchases), Decimal(0),
            ),
            low_stock_materials=len(
                low_stock_materials(snapshot.materials, self._settings.low_stock)
            ),
            completed_phases=sum(1 for p in snapshot.phases if p.is_complete),
            total_phases=len(snapshot.phases),
            average_progress=project_progress(snapshot.phases),
        )

    def cost_by_category(self, snapshot: StoreSnapshot) -> List[CategoryCost]:
        """
        Purchase spend per material category, in first-seen order.

        Only purchases of projects in the snapshot count. Items of
        unknown materials, and purchases with no items at all, are
        booked under the uncategorized label.
        """
        other = self._settings.uncategorized_label
        project_ids = {p.id for p in snapshot.projects}
        totals: Dict[str, Decimal] = {}

        for purchase in snapshot.purchases:
            if purchase.project_id not in project_ids:
                continue
            if not purchase.items:
                totals[other] = totals.get(other, Decimal(0)) + (
                    purchase.total_cost or Decimal(0)
                )
                continue
            for item in purchase.items:
                material = snapshot.find_material(item.material_id)
                category = material.category if material and material.category else other
                totals[category] = totals.get(category, Decimal(0)) + item.line_total

        return [CategoryCost(category=c, value=v) for c, v in totals.items()]

    def cost_by_phase(self, snapshot: StoreSnapshot) -> List[PhaseCost]:
        """Σ(out quantity × unit price) of the movements booked on each phase."""
        rows = []
        for phase in snapshot.phases:
            value = Decimal(0)
            for movement in snapshot.stock_movements:
                if movement.phase_id != phase.id or movement.kind != MovementKind.OUT:
                    continue
                material = snapshot.find_material(movement.material_id)
                if material is not None:
                    value += material.unit_price * movement.quantity
            rows.append(PhaseCost(phase_id=phase.id, phase_name=phase.name, value=value))
        return rows

    def top_consumed_materials(
        self, snapshot: StoreSnapshot, limit: Optional[int] = None,
    ) -> List[ConsumptionRow]:
        return top_consumed_materials(
            snapshot.stock_movements,
            snapshot.materials,
            limit if limit is not None else self._settings.top_consumed_limit,
        )

    def inventory_stats(self, snapshot: StoreSnapshot) -> InventoryStats:
        return inventory_stats(snapshot.materials, self._settings.low_stock)
