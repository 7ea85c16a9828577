"""
Structa Construction — Lifecycle Notifications
================================================
Notification builders for creation and deletion flows.
The store publishes these after the mutation is committed.
"""

from __future__ import annotations

from core.notifications import Notification, NotificationKind
from engines.construction.policies import CascadePlan, ENTITY_COLLECTIONS


def _label(entity_type: str) -> str:
    return ENTITY_COLLECTIONS[entity_type][1]


def display_name(record) -> str:
    """Best human-facing handle for a record."""
    return getattr(record, "name", None) or f"#{record.id}"


def build_created_notification(entity_type: str, record) -> Notification:
    label = _label(entity_type)
    return Notification(
        kind=NotificationKind.SUCCESS,
        title=f"{label} created",
        message=f"{label} {display_name(record)} was created.",
        auto_close=True,
    )


def build_deleted_notification(record, plan: CascadePlan) -> Notification:
    label = _label(plan.entity_type)
    message = f"{label} {display_name(record)} was deleted."
    if plan.dependents_removed > 0:
        message += f" {plan.dependents_removed} related record(s) removed."
    return Notification(
        kind=NotificationKind.SUCCESS,
        title=f"{label} deleted",
        message=message,
        auto_close=True,
    )


def build_low_stock_notification(material) -> Notification:
    return Notification(
        kind=NotificationKind.WARNING,
        title="Low stock",
        message=(
            f"{material.name} has {material.stock_quantity} {material.unit} "
            f"left (minimum {material.min_stock_quantity})."
        ),
        auto_close=False,
    )
