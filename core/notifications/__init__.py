"""
Structa Notifications — Public API
====================================
Decouples the domain layer from whatever shows messages to users.
"""

from core.notifications.bus import NotificationBus, PublishResult
from core.notifications.errors import (
    DuplicateListenerError,
    NotificationError,
    UnknownListenerError,
)
from core.notifications.models import Notification, NotificationKind

__all__ = [
    "Notification",
    "NotificationKind",
    "NotificationBus",
    "PublishResult",
    "NotificationError",
    "DuplicateListenerError",
    "UnknownListenerError",
]
