"""
Structa Bootstrap — Integrity Check Orchestrator
==================================================
Runs all invariant checks over a dataset before a store serves it.
If any check fails → StoreIntegrityError propagates.

Check order:
1. Unique ids per collection
2. No orphaned records
3. Phase progress bounds
4. Purchase totals

No auto-fix. No fallback. No silence.
"""

import logging

from core.bootstrap.invariants import (
    check_no_orphans,
    check_progress_bounds,
    check_purchase_totals,
    check_unique_ids,
)

logger = logging.getLogger("structa.bootstrap")


def run_integrity_checks(snapshot):
    """Execute all store invariant checks over `snapshot`."""
    logger.info("═══ Structa integrity check starting ═══")

    check_unique_ids(snapshot)
    check_no_orphans(snapshot)
    check_progress_bounds(snapshot)
    check_purchase_totals(snapshot)

    logger.info("═══ Structa integrity check PASSED ═══")
