"""
Structa Core Config — Store Rules
===================================
Tunable business rules, kept out of engine logic.
The store, the reconciliation rule, the reporting aggregator and
the dashboard all receive the same StoreSettings instance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Tuple


# ══════════════════════════════════════════════════════════════
# LOW STOCK RULE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LowStockRule:
    """
    When is a material's stock "low"?

    inclusive=True  → stock <= minimum (used everywhere by default)
    inclusive=False → stock <  minimum
    """

    inclusive: bool = True

    def is_low(self, stock: Decimal, minimum: Decimal) -> bool:
        if self.inclusive:
            return stock <= minimum
        return stock < minimum


# ══════════════════════════════════════════════════════════════
# RECONCILIATION RULE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ReconciliationRule:
    """Identity stamped on movements created by purchase delivery."""

    performed_by: str = "System - Automatic Delivery"
    notification_title: str = "Purchase Delivered"
    notification_duration_ms: int = 6000

    def __post_init__(self) -> None:
        if not self.performed_by:
            raise ValueError("performed_by must be non-empty string.")


# ══════════════════════════════════════════════════════════════
# DEFAULT PHASE TEMPLATE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PhaseTemplateEntry:
    name: str
    description: str


DEFAULT_PHASE_TEMPLATE: Tuple[PhaseTemplateEntry, ...] = (
    PhaseTemplateEntry("Foundation", "Excavation and foundation construction"),
    PhaseTemplateEntry("Structure", "Reinforced concrete structure"),
    PhaseTemplateEntry("Masonry", "Masonry wall construction"),
    PhaseTemplateEntry("Finishing", "Painting and final finishes"),
)


# ══════════════════════════════════════════════════════════════
# STORE SETTINGS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class StoreSettings:
    low_stock: LowStockRule = field(default_factory=LowStockRule)
    reconciliation: ReconciliationRule = field(default_factory=ReconciliationRule)
    phase_template: Tuple[PhaseTemplateEntry, ...] = DEFAULT_PHASE_TEMPLATE
    top_consumed_limit: int = 5
    productivity_window_days: int = 30
    uncategorized_label: str = "Other"

    def __post_init__(self) -> None:
        if not self.phase_template:
            raise ValueError("phase_template must have at least one entry.")
        if self.top_consumed_limit < 1:
            raise ValueError(
                f"top_consumed_limit must be >= 1, got {self.top_consumed_limit}."
            )
        if self.productivity_window_days < 1:
            raise ValueError(
                "productivity_window_days must be >= 1, "
                f"got {self.productivity_window_days}."
            )


DEFAULT_SETTINGS = StoreSettings()
