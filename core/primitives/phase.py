"""
Structa Phase Primitive — Unit of Work ("etapa")
==================================================
A Phase belongs to exactly one Project and carries a 0–100
progress value. A Project's progress is the rounded mean of its
phases' progress.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from core.primitives.values import iso, require_optional_datetimes, require_text

COMPLETE = 100


@dataclass(frozen=True)
class Phase:
    id: str
    name: str
    project_id: str
    description: str = ""
    progress: int = 0
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    photos: Tuple[str, ...] = ()
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        require_text(self.id, "id")
        require_text(self.name, "name")
        require_text(self.project_id, "project_id")
        require_optional_datetimes(
            self, "start_date", "end_date", "created_at", "updated_at",
        )
        if (
            isinstance(self.progress, bool)
            or not isinstance(self.progress, int)
            or not 0 <= self.progress <= COMPLETE
        ):
            raise ValueError(
                f"progress must be integer between 0 and 100, got {self.progress!r}."
            )
        object.__setattr__(self, "photos", tuple(self.photos))

    @property
    def is_complete(self) -> bool:
        return self.progress == COMPLETE

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "project_id": self.project_id,
            "progress": self.progress,
            "start_date": iso(self.start_date),
            "end_date": iso(self.end_date),
            "photos": list(self.photos),
            "notes": self.notes,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
