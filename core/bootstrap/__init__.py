"""
Structa Bootstrap — Seed & Integrity
======================================
Builds the demo dataset and refuses datasets that break store
invariants.
"""

from core.bootstrap.errors import StoreIntegrityError
from core.bootstrap.seed import build_seeded_store, seed_dataset
from core.bootstrap.self_check import run_integrity_checks

__all__ = [
    "StoreIntegrityError",
    "build_seeded_store",
    "run_integrity_checks",
    "seed_dataset",
]
