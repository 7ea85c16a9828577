"""
Structa Project Primitive — Construction Job ("obra")
======================================================
A Project is tracked through its phases, purchases and budget.

Deleting a Project cascades to its Phases, Stock Movements and
Purchases (see engines.construction.policies).

This file contains NO persistence logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from core.primitives.values import (
    dec_str,
    iso,
    require_datetime,
    require_optional_datetimes,
    require_text,
    to_enum,
    to_optional_decimal,
)


class ProjectStatus(Enum):
    PLANNED = "planned"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Project:
    """
    Construction project record.

    Fields:
        id:                 Opaque unique identifier
        name:               Display name
        location:           Site address / description
        start_date:         When work started (or is planned to start)
        expected_end_date:  Planned completion
        owner:              Responsible person
        status:             planned | in-progress | completed
        actual_end_date:    Real completion, once finished
        budget:             Approved budget (optional)
        total_cost:         Cost recorded on the project itself (optional)
    """
    id: str
    name: str
    location: str
    start_date: datetime
    expected_end_date: datetime
    owner: str
    status: ProjectStatus = ProjectStatus.PLANNED
    actual_end_date: Optional[datetime] = None
    budget: Optional[Decimal] = None
    total_cost: Optional[Decimal] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        require_text(self.id, "id")
        require_text(self.name, "name")
        require_datetime(self.start_date, "start_date")
        require_datetime(self.expected_end_date, "expected_end_date")
        require_optional_datetimes(
            self, "actual_end_date", "created_at", "updated_at",
        )
        object.__setattr__(
            self, "status", to_enum(ProjectStatus, self.status, "status")
        )
        object.__setattr__(
            self, "budget", to_optional_decimal(self.budget, "budget")
        )
        object.__setattr__(
            self, "total_cost", to_optional_decimal(self.total_cost, "total_cost")
        )

    @property
    def end_date_for_filtering(self) -> datetime:
        """Actual end when finished, otherwise the expected end."""
        return self.actual_end_date or self.expected_end_date

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "location": self.location,
            "start_date": iso(self.start_date),
            "expected_end_date": iso(self.expected_end_date),
            "actual_end_date": iso(self.actual_end_date),
            "owner": self.owner,
            "status": self.status.value,
            "budget": dec_str(self.budget),
            "total_cost": dec_str(self.total_cost),
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
