"""
Structa Construction — Store Snapshot & Scope Filter
======================================================
StoreSnapshot is an immutable view of the five collections.
ScopeFilter narrows a snapshot by project, date range and
project status.

The same apply_scope() serves live store views
(ConstructionStore.filtered_snapshot) and report exports
(ReportingAggregator.filter), so identical criteria always give
identical result sets.

Date rules:
- Project:        start_date >= start; (actual or expected) end <= end
- Phase:          start_date >= start, end_date <= end; a missing date passes
- Purchase:       purchase_date within range
- StockMovement:  date within range
- Material:       never filtered
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from core.primitives import (
    Material,
    Phase,
    Project,
    ProjectStatus,
    Purchase,
    StockMovement,
)
from core.primitives.values import require_optional_datetimes, to_enum
from core.time import DateRange


@dataclass(frozen=True)
class StoreSnapshot:
    projects: Tuple[Project, ...] = ()
    phases: Tuple[Phase, ...] = ()
    materials: Tuple[Material, ...] = ()
    stock_movements: Tuple[StockMovement, ...] = ()
    purchases: Tuple[Purchase, ...] = ()

    def __post_init__(self):
        for name in ("projects", "phases", "materials", "stock_movements", "purchases"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    def find_material(self, material_id: str) -> Optional[Material]:
        for material in self.materials:
            if material.id == material_id:
                return material
        return None

    def phases_of(self, project_id: str) -> Tuple[Phase, ...]:
        return tuple(p for p in self.phases if p.project_id == project_id)

    def purchases_of(self, project_id: str) -> Tuple[Purchase, ...]:
        return tuple(p for p in self.purchases if p.project_id == project_id)


@dataclass(frozen=True)
class ScopeFilter:
    """Empty filter (all None) matches everything."""

    project_id: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    status: Optional[ProjectStatus] = None

    def __post_init__(self):
        require_optional_datetimes(self, "start", "end")
        if self.status is not None:
            object.__setattr__(
                self, "status", to_enum(ProjectStatus, self.status, "status")
            )
        # Validates start <= end.
        DateRange(self.start, self.end)

    @property
    def date_range(self) -> DateRange:
        return DateRange(self.start, self.end)


def _project_passes(project: Project, scope: ScopeFilter, window: DateRange) -> bool:
    if not window.starts_within(project.start_date):
        return False
    if not window.ends_within(project.end_date_for_filtering):
        return False
    if scope.project_id and project.id != scope.project_id:
        return False
    if scope.status is not None and project.status != scope.status:
        return False
    return True


def _phase_passes(phase: Phase, scope: ScopeFilter, window: DateRange) -> bool:
    if phase.start_date is not None and not window.starts_within(phase.start_date):
        return False
    if phase.end_date is not None and not window.ends_within(phase.end_date):
        return False
    if scope.project_id and phase.project_id != scope.project_id:
        return False
    return True


def apply_scope(snapshot: StoreSnapshot, scope: ScopeFilter) -> StoreSnapshot:
    """Return a new snapshot holding only the records that pass `scope`."""
    window = scope.date_range
    pid = scope.project_id

    return StoreSnapshot(
        projects=tuple(
            p for p in snapshot.projects if _project_passes(p, scope, window)
        ),
        phases=tuple(
            p for p in snapshot.phases if _phase_passes(p, scope, window)
        ),
        materials=snapshot.materials,
        stock_movements=tuple(
            m for m in snapshot.stock_movements
            if window.contains(m.date) and (not pid or m.project_id == pid)
        ),
        purchases=tuple(
            p for p in snapshot.purchases
            if window.contains(p.purchase_date) and (not pid or p.project_id == pid)
        ),
    )
