"""Structa aggregate store tests: CRUD, cascades, phase queries, stock."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

NOW = datetime(2024, 7, 1, 12, 0, 0, tzinfo=timezone.utc)


def _store(notifier=None):
    from core.bootstrap import build_seeded_store
    from core.time import FixedClock

    return build_seeded_store(clock=FixedClock(NOW), notifier=notifier)


def _empty_store(notifier=None):
    from core.time import FixedClock
    from engines.construction.services import ConstructionStore

    return ConstructionStore(clock=FixedClock(NOW), notifier=notifier)


def _project(project_id="p1", **overrides):
    from core.primitives import Project

    fields = dict(
        id=project_id,
        name="Obra Delta",
        location="Centro",
        start_date=datetime(2024, 5, 1, tzinfo=timezone.utc),
        expected_end_date=datetime(2025, 5, 1, tzinfo=timezone.utc),
        owner="Ana Costa",
    )
    fields.update(overrides)
    return Project(**fields)


def _phase(phase_id, project_id="p1", progress=0, start=None):
    from core.primitives import Phase

    return Phase(
        id=phase_id, name=f"Phase {phase_id}", project_id=project_id,
        progress=progress, start_date=start,
    )


def _movement(movement_id, material_id="1", kind="out", quantity=10, **overrides):
    from core.primitives import StockMovement

    fields = dict(
        id=movement_id, material_id=material_id, project_id="1", kind=kind,
        quantity=quantity, reason="Used on site", date=NOW,
        performed_by="Maria Santos",
    )
    fields.update(overrides)
    return StockMovement(**fields)


class Recorder:
    def __init__(self):
        self.notifications = []

    def __call__(self, notification):
        self.notifications.append(notification)


def _bus():
    from core.notifications import NotificationBus

    bus = NotificationBus()
    recorder = Recorder()
    bus.subscribe(recorder)
    return bus, recorder


class TestLifecycle:
    def test_empty_store(self):
        store = _empty_store()
        assert store.projects == ()
        assert store.get_project("1") is None

    def test_seed_replaces_collections(self):
        from core.bootstrap import seed_dataset

        store = _empty_store()
        store.seed(seed_dataset())
        assert len(store.materials) == 4
        store.seed(seed_dataset())
        assert len(store.materials) == 4

    def test_snapshot_is_stable_after_mutation(self):
        store = _store()
        before = store.snapshot()
        store.delete_project("1")
        assert len(before.projects) == 3
        assert len(store.snapshot().projects) == 2


class TestCrud:
    def test_add_stamps_missing_timestamps(self):
        store = _empty_store()
        project = store.add_project(_project())
        assert project.created_at == NOW
        assert project.updated_at == NOW
        assert store.get_project("p1") == project

    def test_add_keeps_given_timestamps(self):
        created = datetime(2024, 1, 1, tzinfo=timezone.utc)
        store = _empty_store()
        project = store.add_project(_project(created_at=created))
        assert project.created_at == created
        assert project.updated_at == created

    def test_add_rejects_wrong_record_type(self):
        store = _empty_store()
        with pytest.raises(TypeError, match="Expected Phase"):
            store.add_phase(_project())

    def test_update_merges_and_refreshes_updated_at(self):
        store = _store()
        updated = store.update_project("2", status="in-progress", owner="Ana Costa")
        assert updated.owner == "Ana Costa"
        assert updated.status.value == "in-progress"
        assert updated.updated_at == NOW
        assert updated.name == "Comercial Beta"
        assert store.get_project("2") == updated

    def test_update_keeps_collection_order(self):
        store = _store()
        store.update_material("2", unit_price="8.10")
        assert [m.id for m in store.materials] == ["1", "2", "3", "4"]
        assert store.get_material("2").unit_price == Decimal("8.10")

    def test_update_cannot_change_id(self):
        store = _store()
        with pytest.raises(ValueError, match="id cannot be changed"):
            store.update_phase("1", id="99")

    def test_invalid_update_leaves_store_untouched(self):
        store = _store()
        before = store.snapshot()
        with pytest.raises(ValueError, match="progress"):
            store.update_phase("2", progress=120)
        assert store.snapshot() == before

    @pytest.mark.parametrize("entity", [
        "project", "phase", "material", "stock_movement", "purchase",
    ])
    def test_unknown_id_raises_not_found(self, entity):
        from engines.construction.errors import EntityNotFoundError

        store = _store()
        before = store.snapshot()
        with pytest.raises(EntityNotFoundError) as exc:
            getattr(store, f"update_{entity}")("404", notes="x")
        assert exc.value.entity_type == entity
        assert exc.value.entity_id == "404"
        with pytest.raises(EntityNotFoundError):
            getattr(store, f"delete_{entity}")("404")
        assert store.snapshot() == before

    def test_create_and_delete_notify(self):
        bus, recorder = _bus()
        store = _empty_store(notifier=bus)
        store.add_project(_project())
        store.delete_project("p1")
        kinds = [(n.kind.value, n.title) for n in recorder.notifications]
        assert kinds == [("success", "Project created"), ("success", "Project deleted")]


class TestCascades:
    def test_delete_project_removes_dependents(self):
        store = _store()
        store.delete_project("1")
        assert store.get_project("1") is None
        assert all(p.project_id != "1" for p in store.phases)
        assert all(m.project_id != "1" for m in store.stock_movements)
        assert all(p.project_id != "1" for p in store.purchases)
        assert [p.id for p in store.phases] == ["4"]
        assert len(store.materials) == 4

    def test_delete_phase_removes_its_movements_only(self):
        store = _store()
        store.add_stock_movement(_movement("m-x", phase_id="2"))
        store.delete_phase("1")
        assert [m.id for m in store.stock_movements] == ["m-x"]
        assert [p.id for p in store.phases] == ["2", "3", "4"]
        assert len(store.projects) == 3

    def test_delete_material_removes_its_movements(self):
        store = _store()
        store.add_stock_movement(_movement("m-x", material_id="2"))
        store.delete_material("1")
        assert [m.id for m in store.stock_movements] == ["m-x"]

    def test_delete_movement_and_purchase_do_not_cascade(self):
        store = _store()
        store.delete_stock_movement("1")
        store.delete_purchase("1")
        assert [m.id for m in store.stock_movements] == ["2"]
        assert store.purchases == ()
        assert len(store.materials) == 4

    def test_deleted_notification_counts_dependents(self):
        bus, recorder = _bus()
        store = _store(notifier=bus)
        store.delete_project("1")
        # 3 phases + 2 movements + 1 purchase
        assert "6 related record(s) removed" in recorder.notifications[-1].message


class TestPhaseQueries:
    def test_phases_by_project_in_insertion_order(self):
        store = _store()
        assert [p.id for p in store.get_phases_by_project("1")] == ["1", "2", "3"]
        assert store.get_phases_by_project("404") == []

    def test_progress_rounds_mean(self):
        store = _store()
        assert store.get_project_progress("1") == 68
        assert store.get_project_progress("2") == 0
        assert store.get_project_progress("3") == 0

    def test_progress_rounds_half_up(self):
        store = _empty_store()
        store.add_project(_project())
        store.add_phase(_phase("a", progress=50))
        store.add_phase(_phase("b", progress=51))
        assert store.get_project_progress("p1") == 51

    def test_phase_counts(self):
        store = _store()
        assert store.get_completed_phase_count("1") == 1
        assert store.get_total_phase_count("1") == 3
        assert store.get_completed_phase_count("404") == 0

    def test_next_phase_earliest_start(self):
        store = _store()
        assert store.get_next_phase("1").id == "2"

    def test_next_phase_without_dates_uses_insertion_order(self):
        store = _store()
        assert store.get_next_phase("2").id == "4"

    def test_next_phase_ties_keep_insertion_order(self):
        start = datetime(2024, 6, 1, tzinfo=timezone.utc)
        store = _empty_store()
        store.add_project(_project())
        store.add_phase(_phase("late", start=datetime(2024, 9, 1, tzinfo=timezone.utc)))
        store.add_phase(_phase("first", start=start))
        store.add_phase(_phase("second", start=start))
        assert store.get_next_phase("p1").id == "first"

    def test_next_phase_none_when_all_complete(self):
        store = _empty_store()
        store.add_project(_project())
        store.add_phase(_phase("a", progress=100))
        assert store.get_next_phase("p1") is None
        assert store.get_next_phase("404") is None

    def test_default_template(self):
        store = _store()
        created = store.create_default_phase_template("2")
        assert [p.name for p in created] == [
            "Foundation", "Structure", "Masonry", "Finishing",
        ]
        assert all(p.progress == 0 and p.project_id == "2" for p in created)
        assert store.get_total_phase_count("2") == 5
        assert [p.id for p in store.phases[-4:]] == [p.id for p in created]

    def test_default_template_requires_project(self):
        from engines.construction.errors import EntityNotFoundError

        store = _store()
        with pytest.raises(EntityNotFoundError):
            store.create_default_phase_template("404")


class TestStock:
    def test_add_movement_leaves_stock_alone(self):
        store = _store()
        store.add_stock_movement(_movement("m-x", quantity=100))
        assert store.get_material("1").stock_quantity == Decimal("150")

    def test_record_out_movement_decrements(self):
        store = _store()
        store.record_stock_movement(_movement("m-x", quantity=30))
        assert store.get_material("1").stock_quantity == Decimal("120")
        assert store.get_material("1").updated_at == NOW
        assert store.get_stock_movement("m-x") is not None

    def test_record_in_movement_increments(self):
        store = _store()
        store.record_stock_movement(_movement("m-x", material_id="4", kind="in", quantity=7))
        assert store.get_material("4").stock_quantity == Decimal("15")

    def test_record_movement_warns_on_low_stock(self):
        bus, recorder = _bus()
        store = _store(notifier=bus)
        store.record_stock_movement(_movement("m-x", quantity=100))
        warnings = [n for n in recorder.notifications if n.kind.value == "warning"]
        assert len(warnings) == 1
        assert "Cimento CP-II-Z-32" in warnings[0].message

    def test_record_movement_for_unknown_material_keeps_stock(self):
        store = _store()
        before = store.materials
        store.record_stock_movement(_movement("m-x", material_id="404"))
        assert store.materials == before
        assert store.get_stock_movement("m-x").material_id == "404"

    def test_low_and_out_of_stock(self):
        store = _store()
        assert [m.id for m in store.get_low_stock_materials()] == ["4"]
        store.update_material("3", stock_quantity=0)
        assert [m.id for m in store.get_out_of_stock_materials()] == ["3"]
        assert [m.id for m in store.get_low_stock_materials()] == ["3", "4"]

    def test_top_consumed(self):
        store = _store()
        store.add_stock_movement(_movement("m-x", material_id="2", quantity=400))
        rows = store.get_top_consumed_materials()
        assert [(r.material_id, r.quantity) for r in rows] == [
            ("2", Decimal("400")), ("1", Decimal("50")),
        ]
        assert rows[1].value == Decimal("1425.00")

    def test_top_consumed_explicit_limit(self):
        store = _store()
        store.add_stock_movement(_movement("m-x", material_id="2", quantity=400))
        assert [r.material_id for r in store.get_top_consumed_materials(1)] == ["2"]

    def test_top_consumed_zero_limit_rejected(self):
        with pytest.raises(ValueError, match="limit"):
            _store().get_top_consumed_materials(0)


class TestFilteredSnapshot:
    def test_scope_by_project(self):
        from engines.construction.snapshot import ScopeFilter

        store = _store()
        view = store.filtered_snapshot(ScopeFilter(project_id="2"))
        assert [p.id for p in view.projects] == ["2"]
        assert [p.id for p in view.phases] == ["4"]
        assert view.purchases == ()
        assert len(view.materials) == 4

    def test_scope_by_status(self):
        from engines.construction.snapshot import ScopeFilter

        store = _store()
        view = store.filtered_snapshot(ScopeFilter(status="completed"))
        assert [p.id for p in view.projects] == ["3"]

    def test_naive_bound_rejected(self):
        from engines.construction.snapshot import ScopeFilter

        with pytest.raises(ValueError, match="start must be timezone-aware"):
            ScopeFilter(start=datetime(2024, 7, 1))

    def test_date_scope_over_added_project(self):
        from engines.construction.snapshot import ScopeFilter

        store = _empty_store()
        store.add_project(_project())
        view = store.filtered_snapshot(ScopeFilter(start=NOW))
        assert view.projects == ()
        view = store.filtered_snapshot(
            ScopeFilter(start=datetime(2024, 4, 1, tzinfo=timezone.utc)),
        )
        assert [p.id for p in view.projects] == ["p1"]

    def test_naive_date_update_leaves_store_untouched(self):
        store = _empty_store()
        store.add_project(_project())
        before = store.snapshot()
        with pytest.raises(ValueError, match="actual_end_date"):
            store.update_project("p1", actual_end_date=datetime(2024, 9, 1))
        assert store.snapshot() == before
