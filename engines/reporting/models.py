"""
Structa Reporting Engine — Report Shapes
==========================================
Tabular structures handed to the report-rendering collaborator.
The aggregator knows nothing about PDF or spreadsheet layout;
a renderer walks `Report.tables` and lays each one out.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Tuple


class ReportType(Enum):
    GENERAL = "general"
    COSTS = "costs"
    PROGRESS = "progress"
    PRODUCTIVITY = "productivity"
    MATERIALS = "materials"
    STOCK = "stock"


REPORT_TITLES: Dict[ReportType, str] = {
    ReportType.GENERAL: "General Report",
    ReportType.COSTS: "Cost Report",
    ReportType.PROGRESS: "Progress Report",
    ReportType.PRODUCTIVITY: "Productivity Report",
    ReportType.MATERIALS: "Materials Report",
    ReportType.STOCK: "Stock Report",
}


@dataclass(frozen=True)
class ReportTable:
    name: str
    headers: Tuple[str, ...]
    rows: Tuple[Tuple[Any, ...], ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "headers", tuple(self.headers))
        object.__setattr__(self, "rows", tuple(tuple(r) for r in self.rows))
        for row in self.rows:
            if len(row) != len(self.headers):
                raise ValueError(
                    f"Table '{self.name}': row has {len(row)} cells, "
                    f"expected {len(self.headers)}."
                )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "headers": list(self.headers),
            "rows": [[_cell(v) for v in row] for row in self.rows],
        }


@dataclass(frozen=True)
class Report:
    report_type: ReportType
    title: str
    generated_at: datetime
    tables: Tuple[ReportTable, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "tables", tuple(self.tables))

    def table(self, name: str) -> ReportTable:
        for t in self.tables:
            if t.name == name:
                return t
        raise KeyError(name)

    def to_dict(self) -> dict:
        return {
            "report_type": self.report_type.value,
            "title": self.title,
            "generated_at": self.generated_at.isoformat(),
            "tables": [t.to_dict() for t in self.tables],
        }


def _cell(value: Any) -> Any:
    if isinstance(value, (int, str)) or value is None:
        return value
    return str(value)
