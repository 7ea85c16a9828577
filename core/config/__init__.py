"""
Structa Core Config — Public API
==================================
Store rules (low-stock threshold, reconciliation identity,
default phase template, dashboard limits).
"""

from core.config.rules import (
    DEFAULT_PHASE_TEMPLATE,
    DEFAULT_SETTINGS,
    LowStockRule,
    PhaseTemplateEntry,
    ReconciliationRule,
    StoreSettings,
)

__all__ = [
    "LowStockRule",
    "ReconciliationRule",
    "PhaseTemplateEntry",
    "DEFAULT_PHASE_TEMPLATE",
    "StoreSettings",
    "DEFAULT_SETTINGS",
]
