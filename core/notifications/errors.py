"""
Structa Notifications — Errors
================================
Registration errors only. Delivery failures are never raised.
"""


class NotificationError(Exception):
    """Base error for notification wiring."""
    pass


class DuplicateListenerError(NotificationError):
    """Same listener subscribed twice."""

    def __init__(self, listener_name: str):
        self.listener_name = listener_name
        super().__init__(f"Listener '{listener_name}' is already subscribed.")


class UnknownListenerError(NotificationError):
    """Unsubscribe of a listener that was never subscribed."""

    def __init__(self, listener_name: str):
        self.listener_name = listener_name
        super().__init__(f"Listener '{listener_name}' is not subscribed.")
