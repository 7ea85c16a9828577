"""
Structa Notifications — Bus
=============================
Routes Notification descriptions to subscribed listeners.

Publish behavior:
1. Call listeners sequentially, in subscription order
2. Catch listener exceptions per listener
3. Log failure
4. Continue to next listener
5. NEVER roll back the store mutation that produced the notification

This module does NOT:
- Render toasts or panels
- Queue, retry or persist notifications
- Interpret notification meaning

The store mutation is already committed when a notification is
published. A broken listener must not undo it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List

from core.notifications.errors import DuplicateListenerError, UnknownListenerError
from core.notifications.models import Notification

logger = logging.getLogger("structa.notifications")

Listener = Callable[[Notification], None]


def _listener_name(listener: Listener) -> str:
    return getattr(listener, "__qualname__", str(listener))


@dataclass
class PublishResult:
    title: str
    listeners_notified: int = 0
    listeners_failed: int = 0
    failures: List[dict] = field(default_factory=list)


class NotificationBus:
    """In-memory listener list. Multiple listeners allowed, no duplicates."""

    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            raise DuplicateListenerError(_listener_name(listener))
        self._listeners.append(listener)
        logger.debug(f"Subscribed notification listener {_listener_name(listener)}")

    def unsubscribe(self, listener: Listener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            raise UnknownListenerError(_listener_name(listener)) from None

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def publish(self, notification: Notification) -> PublishResult:
        """
        Deliver a notification to every listener.

        This method NEVER raises. Listener failures are caught,
        logged and reported in the result.
        """
        result = PublishResult(title=notification.title)

        if not self._listeners:
            logger.debug(f"No listeners for notification '{notification.title}'")
            return result

        for listener in list(self._listeners):
            name = _listener_name(listener)
            try:
                listener(notification)
                result.listeners_notified += 1
            except Exception as exc:
                result.listeners_failed += 1
                result.failures.append({
                    "listener": name,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                })
                logger.error(
                    f"Notification listener failed: {name} for "
                    f"'{notification.title}': {exc}",
                    exc_info=True,
                )

        logger.debug(
            f"Published '{notification.title}' ({notification.kind.value}): "
            f"{result.listeners_notified} notified, "
            f"{result.listeners_failed} failed"
        )
        return result
