"""
Structa Reporting Engine — Reporting Aggregator
=================================================
Pure reductions of a StoreSnapshot into report rows.

Every method reads; none mutates. Callers pass a snapshot that is
already scoped (see filter()), so the report and the live view
built from the same ScopeFilter always agree.

Rounding is half-up throughout:
    average progress    → whole percent
    productivity rate   → 2 decimal places
    percent of budget   → 2 decimal places
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from core.config import DEFAULT_SETTINGS, StoreSettings
from core.primitives import ProjectStatus
from core.primitives.values import CENT, round_half_up, to_enum
from core.time import Clock, get_default_clock, whole_days_between
from engines.construction.services import project_progress
from engines.construction.snapshot import ScopeFilter, StoreSnapshot, apply_scope
from engines.inventory.services import is_low_stock, last_movement_date
from engines.reporting.models import REPORT_TITLES, Report, ReportTable, ReportType

logger = logging.getLogger("structa.reporting")

# Report filters are the live-view scope filter, by construction.
ReportFilters = ScopeFilter

LOW = "Low"
NORMAL = "Normal"
NOT_AVAILABLE = "N/A"
ZERO_RATE = Decimal("0.00")


# ══════════════════════════════════════════════════════════════
# ROW TYPES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class GeneralSummary:
    total_projects: int
    projects_by_status: Dict[str, int] = field(default_factory=dict)
    total_phases: int = 0
    total_materials: int = 0
    total_purchase_cost: Decimal = Decimal(0)

    @property
    def active_projects(self) -> int:
        return self.projects_by_status.get(ProjectStatus.IN_PROGRESS.value, 0)

    @property
    def completed_projects(self) -> int:
        return self.projects_by_status.get(ProjectStatus.COMPLETED.value, 0)


@dataclass(frozen=True)
class CostRow:
    project_id: str
    project_name: str
    budget: Decimal
    actual_cost: Decimal
    variance: Decimal
    percent_used: Decimal


@dataclass(frozen=True)
class ProgressRow:
    project_id: str
    project_name: str
    total_phases: int
    completed_phases: int
    average_progress: int
    status: ProjectStatus


@dataclass(frozen=True)
class ProductivityRow:
    project_id: str
    project_name: str
    elapsed_days: int
    completed_phases: int
    productivity_rate: Decimal


@dataclass(frozen=True)
class MaterialUsageRow:
    material_id: str
    material_name: str
    unit: str
    total_quantity_purchased: Decimal
    total_value: Decimal
    current_stock: Decimal


@dataclass(frozen=True)
class StockStatusRow:
    material_id: str
    material_name: str
    current_stock: Decimal
    min_stock: Decimal
    status: str
    last_movement_date: Optional[datetime]


# ══════════════════════════════════════════════════════════════
# AGGREGATOR
# ══════════════════════════════════════════════════════════════

class ReportingAggregator:
    """
    Reduces snapshots into report rows and tables.

    The clock is read only for elapsed-day math and the
    generated_at stamp.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        settings: Optional[StoreSettings] = None,
    ):
        self._clock = clock or get_default_clock()
        self._settings = settings or DEFAULT_SETTINGS

    def filter(
        self, snapshot: StoreSnapshot, filters: Optional[ScopeFilter] = None,
    ) -> StoreSnapshot:
        if filters is None:
            return snapshot
        return apply_scope(snapshot, filters)

    # ── reductions ────────────────────────────────────────────

    def general_summary(self, snapshot: StoreSnapshot) -> GeneralSummary:
        by_status = {status.value: 0 for status in ProjectStatus}
        for project in snapshot.projects:
            by_status[project.status.value] += 1
        return GeneralSummary(
            total_projects=len(snapshot.projects),
            projects_by_status=by_status,
            total_phases=len(snapshot.phases),
            total_materials=len(snapshot.materials),
            total_purchase_cost=sum(
                (p.total_cost or Decimal(0) for p in snapshot.purchases),
                Decimal(0),
            ),
        )

    def cost_analysis(self, snapshot: StoreSnapshot) -> List[CostRow]:
        rows = []
        for project in snapshot.projects:
            budget = project.budget or Decimal(0)
            actual = sum(
                (p.total_cost or Decimal(0) for p in snapshot.purchases_of(project.id)),
                Decimal(0),
            )
            if budget > 0:
                percent = round_half_up(actual / budget * 100, CENT)
            else:
                percent = ZERO_RATE
            rows.append(CostRow(
                project_id=project.id,
                project_name=project.name,
                budget=budget,
                actual_cost=actual,
                variance=budget - actual,
                percent_used=percent,
            ))
        return rows

    def progress_analysis(self, snapshot: StoreSnapshot) -> List[ProgressRow]:
        rows = []
        for project in snapshot.projects:
            phases = snapshot.phases_of(project.id)
            rows.append(ProgressRow(
                project_id=project.id,
                project_name=project.name,
                total_phases=len(phases),
                completed_phases=sum(1 for p in phases if p.is_complete),
                average_progress=project_progress(phases),
                status=project.status,
            ))
        return rows

    def productivity_analysis(
        self, snapshot: StoreSnapshot,
    ) -> List[ProductivityRow]:
        """Completed phases per `productivity_window_days` (30 by default)."""
        now = self._clock.now_utc()
        window = self._settings.productivity_window_days
        rows = []
        for project in snapshot.projects:
            elapsed = whole_days_between(project.start_date, now)
            completed = sum(
                1 for p in snapshot.phases_of(project.id) if p.is_complete
            )
            if elapsed > 0:
                rate = round_half_up(
                    Decimal(completed * window) / Decimal(elapsed), CENT,
                )
            else:
                rate = ZERO_RATE
            rows.append(ProductivityRow(
                project_id=project.id,
                project_name=project.name,
                elapsed_days=elapsed,
                completed_phases=completed,
                productivity_rate=rate,
            ))
        return rows

    def material_usage(self, snapshot: StoreSnapshot) -> List[MaterialUsageRow]:
        quantities: Dict[str, Decimal] = {}
        values: Dict[str, Decimal] = {}
        for purchase in snapshot.purchases:
            for item in purchase.items:
                quantities[item.material_id] = (
                    quantities.get(item.material_id, Decimal(0)) + item.quantity
                )
                values[item.material_id] = (
                    values.get(item.material_id, Decimal(0)) + item.line_total
                )

        return [
            MaterialUsageRow(
                material_id=m.id,
                material_name=m.name,
                unit=m.unit,
                total_quantity_purchased=quantities.get(m.id, Decimal(0)),
                total_value=values.get(m.id, Decimal(0)),
                current_stock=m.stock_quantity,
            )
            for m in snapshot.materials
        ]

    def stock_status(self, snapshot: StoreSnapshot) -> List[StockStatusRow]:
        rule = self._settings.low_stock
        return [
            StockStatusRow(
                material_id=m.id,
                material_name=m.name,
                current_stock=m.stock_quantity,
                min_stock=m.min_stock_quantity,
                status=LOW if is_low_stock(m, rule) else NORMAL,
                last_movement_date=last_movement_date(snapshot.stock_movements, m.id),
            )
            for m in snapshot.materials
        ]

    # ── tabular output ────────────────────────────────────────

    def generate(
        self,
        report_type,
        snapshot: StoreSnapshot,
        filters: Optional[ScopeFilter] = None,
    ) -> Report:
        """Filter `snapshot`, then build the tables for `report_type`."""
        report_type = to_enum(ReportType, report_type, "report_type")
        scoped = self.filter(snapshot, filters)
        builder = _TABLE_BUILDERS[report_type]
        tables = builder(self, scoped)
        logger.debug(
            f"Generated {report_type.value} report: "
            f"{len(tables)} table(s), {sum(len(t.rows) for t in tables)} row(s)"
        )
        return Report(
            report_type=report_type,
            title=REPORT_TITLES[report_type],
            generated_at=self._clock.now_utc(),
            tables=tables,
        )

    def suggested_filename(self, report_type, extension: str) -> str:
        """e.g. report-costs-2024-07-01.pdf"""
        report_type = to_enum(ReportType, report_type, "report_type")
        extension = extension.lstrip(".")
        if not extension:
            raise ValueError("extension must be non-empty string.")
        day = self._clock.now_utc().date().isoformat()
        return f"report-{report_type.value}-{day}.{extension}"

    def _general_tables(self, snapshot: StoreSnapshot) -> Tuple[ReportTable, ...]:
        summary = self.general_summary(snapshot)
        costs = {row.project_id: row.actual_cost for row in self.cost_analysis(snapshot)}
        return (
            ReportTable(
                name="Summary",
                headers=("Metric", "Value"),
                rows=(
                    ("Total projects", summary.total_projects),
                    ("Active projects", summary.active_projects),
                    ("Completed projects", summary.completed_projects),
                    ("Total phases", summary.total_phases),
                    ("Total materials", summary.total_materials),
                    ("Total costs", summary.total_purchase_cost),
                ),
            ),
            ReportTable(
                name="Projects",
                headers=(
                    "Name", "Location", "Start date", "Expected end",
                    "Status", "Budget", "Total cost",
                ),
                rows=tuple(
                    (
                        p.name,
                        p.location,
                        _day(p.start_date),
                        _day(p.expected_end_date),
                        p.status.value,
                        p.budget if p.budget is not None else Decimal(0),
                        costs[p.id],
                    )
                    for p in snapshot.projects
                ),
            ),
        )

    def _cost_tables(self, snapshot: StoreSnapshot) -> Tuple[ReportTable, ...]:
        return (ReportTable(
            name="Costs",
            headers=("Project", "Budget", "Actual cost", "Variance", "Percent used"),
            rows=tuple(
                (r.project_name, r.budget, r.actual_cost, r.variance, f"{r.percent_used}%")
                for r in self.cost_analysis(snapshot)
            ),
        ),)

    def _progress_tables(self, snapshot: StoreSnapshot) -> Tuple[ReportTable, ...]:
        return (ReportTable(
            name="Progress",
            headers=(
                "Project", "Total phases", "Completed phases",
                "Average progress", "Status",
            ),
            rows=tuple(
                (
                    r.project_name, r.total_phases, r.completed_phases,
                    f"{r.average_progress}%", r.status.value,
                )
                for r in self.progress_analysis(snapshot)
            ),
        ),)

    def _productivity_tables(
        self, snapshot: StoreSnapshot,
    ) -> Tuple[ReportTable, ...]:
        return (ReportTable(
            name="Productivity",
            headers=(
                "Project", "Elapsed days", "Completed phases",
                "Productivity (phases/month)",
            ),
            rows=tuple(
                (r.project_name, r.elapsed_days, r.completed_phases, r.productivity_rate)
                for r in self.productivity_analysis(snapshot)
            ),
        ),)

    def _material_tables(self, snapshot: StoreSnapshot) -> Tuple[ReportTable, ...]:
        return (ReportTable(
            name="Materials",
            headers=(
                "Material", "Unit", "Total purchased",
                "Total value", "Current stock",
            ),
            rows=tuple(
                (
                    r.material_name, r.unit, r.total_quantity_purchased,
                    r.total_value, r.current_stock,
                )
                for r in self.material_usage(snapshot)
            ),
        ),)

    def _stock_tables(self, snapshot: StoreSnapshot) -> Tuple[ReportTable, ...]:
        return (ReportTable(
            name="Stock",
            headers=(
                "Material", "Current stock", "Minimum stock",
                "Status", "Last movement",
            ),
            rows=tuple(
                (
                    r.material_name, r.current_stock, r.min_stock, r.status,
                    _day(r.last_movement_date) if r.last_movement_date else NOT_AVAILABLE,
                )
                for r in self.stock_status(snapshot)
            ),
        ),)


def _day(dt: datetime) -> str:
    return dt.date().isoformat()


_TABLE_BUILDERS = {
    ReportType.GENERAL: ReportingAggregator._general_tables,
    ReportType.COSTS: ReportingAggregator._cost_tables,
    ReportType.PROGRESS: ReportingAggregator._progress_tables,
    ReportType.PRODUCTIVITY: ReportingAggregator._productivity_tables,
    ReportType.MATERIALS: ReportingAggregator._material_tables,
    ReportType.STOCK: ReportingAggregator._stock_tables,
}
