"""
Tests for core.bootstrap — demo dataset and integrity checks.
"""

from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from core.bootstrap import (
    StoreIntegrityError,
    build_seeded_store,
    run_integrity_checks,
    seed_dataset,
)
from core.primitives import Phase, PurchaseStatus
from core.time import FixedClock

NOW = datetime(2024, 7, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestSeedDataset:
    def test_collection_sizes(self):
        data = seed_dataset()
        assert len(data.projects) == 3
        assert len(data.phases) == 4
        assert len(data.materials) == 4
        assert len(data.stock_movements) == 2
        assert len(data.purchases) == 1

    def test_seed_passes_integrity_checks(self):
        run_integrity_checks(seed_dataset())

    def test_seeded_purchase_already_reconciled(self):
        purchase = seed_dataset().purchases[0]
        assert purchase.status == PurchaseStatus.DELIVERED
        assert purchase.processed_at is not None
        assert purchase.total_cost == Decimal("2850.00")

    def test_fresh_records_every_call(self):
        assert seed_dataset() == seed_dataset()


class TestIntegrityChecks:
    def test_orphan_phase_refused(self):
        data = seed_dataset()
        broken = replace(
            data,
            phases=data.phases + (Phase(id="99", name="Ghost", project_id="404"),),
        )
        with pytest.raises(StoreIntegrityError) as exc:
            run_integrity_checks(broken)
        assert exc.value.invariant == "NO_ORPHANS"
        assert "404" in exc.value.detail

    def test_duplicate_ids_refused(self):
        data = seed_dataset()
        broken = replace(data, materials=data.materials + (data.materials[0],))
        with pytest.raises(StoreIntegrityError, match="UNIQUE_IDS"):
            run_integrity_checks(broken)

    def test_inconsistent_purchase_total_refused(self):
        data = seed_dataset()
        bad = replace(data.purchases[0], total_cost=Decimal("1"))
        with pytest.raises(StoreIntegrityError, match="PURCHASE_TOTALS"):
            run_integrity_checks(replace(data, purchases=(bad,)))

    def test_movement_with_unknown_material_refused(self):
        data = seed_dataset()
        bad = replace(data.stock_movements[0], material_id="404")
        broken = replace(data, stock_movements=(bad,) + data.stock_movements[1:])
        with pytest.raises(StoreIntegrityError, match="material '404'"):
            run_integrity_checks(broken)


class TestBuildSeededStore:
    def test_store_serves_seed(self):
        store = build_seeded_store(clock=FixedClock(NOW))
        assert store.get_project("1").name == "Residencial Alpha"
        assert store.get_project_progress("1") == 68

    def test_broken_dataset_never_served(self):
        data = seed_dataset()
        broken = replace(
            data,
            phases=data.phases + (Phase(id="99", name="Ghost", project_id="404"),),
        )
        with pytest.raises(StoreIntegrityError):
            build_seeded_store(dataset=broken)
