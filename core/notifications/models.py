"""
Structa Notifications — Event Description
===========================================
Fire-and-forget notification handed to the presentation layer.
No acknowledgment contract.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.primitives.values import to_enum


class NotificationKind(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    title: str
    message: str
    auto_close: Optional[bool] = None
    duration_ms: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "kind", to_enum(NotificationKind, self.kind, "kind"))
        if not self.title or not isinstance(self.title, str):
            raise ValueError("title must be non-empty string.")

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "title": self.title,
            "message": self.message,
            "auto_close": self.auto_close,
            "duration_ms": self.duration_ms,
        }
