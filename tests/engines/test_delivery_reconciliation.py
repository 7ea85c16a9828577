"""Structa delivery reconciliation tests: purchase → stock, exactly once."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

NOW = datetime(2024, 7, 1, 12, 0, 0, tzinfo=timezone.utc)


def _material(material_id="m1", stock=150, minimum=50):
    from core.primitives import Material

    return Material(
        id=material_id, name="Cimento CP-II-Z-32", unit="sc",
        supplier="Votorantim Cimentos", unit_price="28.50",
        category="Cimento e Argamassa",
        stock_quantity=stock, min_stock_quantity=minimum,
    )


def _purchase(purchase_id="c1", lines=(("m1", 100, "28.50"),), **kwargs):
    from core.primitives import build_purchase

    return build_purchase(
        purchase_id=purchase_id,
        project_id="p1",
        supplier="Votorantim Cimentos",
        purchase_date=datetime(2024, 6, 20, tzinfo=timezone.utc),
        lines=lines,
        **kwargs,
    )


def _store(*materials, purchase=None):
    from core.notifications import NotificationBus
    from core.primitives import Project
    from core.time import FixedClock
    from engines.construction.services import ConstructionStore

    bus = NotificationBus()
    received = []
    bus.subscribe(received.append)
    store = ConstructionStore(clock=FixedClock(NOW), notifier=bus)
    store.add_project(Project(
        id="p1", name="Residencial Alpha", location="Centro",
        start_date=datetime(2024, 1, 15, tzinfo=timezone.utc),
        expected_end_date=datetime(2024, 12, 15, tzinfo=timezone.utc),
        owner="João Silva",
    ))
    for material in materials or (_material(),):
        store.add_material(material)
    store.add_purchase(purchase or _purchase())
    received.clear()
    return store, received


class TestTransitionPolicy:
    def test_forward_and_same_status_allowed(self):
        from engines.procurement.policies import purchase_status_transition_policy
        from core.primitives import PurchaseStatus

        pending = _purchase()
        for target in PurchaseStatus:
            assert purchase_status_transition_policy(pending, target) is None

    def test_leaving_delivered_rejected(self):
        from engines.procurement.policies import purchase_status_transition_policy
        from core.primitives import PurchaseStatus

        delivered = _purchase(status=PurchaseStatus.DELIVERED)
        rejection = purchase_status_transition_policy(delivered, PurchaseStatus.PENDING)
        assert rejection.code == "PURCHASE_ALREADY_DELIVERED"
        assert purchase_status_transition_policy(
            delivered, PurchaseStatus.DELIVERED,
        ) is None

    def test_approved_back_to_pending_rejected(self):
        from engines.procurement.policies import purchase_status_transition_policy
        from core.primitives import PurchaseStatus

        approved = _purchase(status=PurchaseStatus.APPROVED)
        rejection = purchase_status_transition_policy(approved, PurchaseStatus.PENDING)
        assert rejection.code == "PURCHASE_STATUS_BACKWARD"


class TestReconciler:
    def test_pure_result(self):
        from engines.procurement.services import DeliveryReconciler

        materials = (_material(),)
        result = DeliveryReconciler().reconcile(_purchase(), materials, (), NOW)

        assert materials[0].stock_quantity == Decimal("150")
        assert result.materials[0].stock_quantity == Decimal("250")
        assert result.item_count == 1
        movement = result.stock_movements[0]
        assert movement.kind.value == "in"
        assert movement.quantity == Decimal("100")
        assert movement.project_id == "p1"
        assert movement.date == NOW
        assert movement.performed_by == "System - Automatic Delivery"
        assert movement.reason == "Delivery of purchase #c1"

    def test_invoice_in_reason(self):
        from engines.procurement.services import DeliveryReconciler

        result = DeliveryReconciler().reconcile(
            _purchase(invoice_number="NF-001234"), (_material(),), (), NOW,
        )
        assert result.stock_movements[0].reason == (
            "Delivery of purchase (Invoice: NF-001234)"
        )

    def test_unknown_material_still_logged_as_movement(self, caplog):
        from engines.procurement.services import DeliveryReconciler

        purchase = _purchase(lines=(("m1", 10, 1), ("ghost", 5, 1)))
        result = DeliveryReconciler().reconcile(purchase, (_material(),), (), NOW)

        assert result.materials[0].stock_quantity == Decimal("160")
        assert [m.material_id for m in result.stock_movements] == ["m1", "ghost"]
        assert "ghost" in caplog.text

    def test_custom_actor(self):
        from core.config import ReconciliationRule, StoreSettings
        from engines.procurement.services import DeliveryReconciler

        settings = StoreSettings(
            reconciliation=ReconciliationRule(performed_by="Warehouse bot"),
        )
        result = DeliveryReconciler(settings).reconcile(
            _purchase(), (_material(),), (), NOW,
        )
        assert result.stock_movements[0].performed_by == "Warehouse bot"


class TestStoreDelivery:
    def test_delivery_increments_stock_once(self):
        store, _ = _store()
        store.update_purchase("c1", status="delivered")

        assert store.get_material("m1").stock_quantity == Decimal("250")
        assert len(store.stock_movements) == 1
        movement = store.stock_movements[0]
        assert (movement.material_id, movement.kind.value, movement.quantity) == (
            "m1", "in", Decimal("100"),
        )

        store.update_purchase("c1", status="delivered")
        assert store.get_material("m1").stock_quantity == Decimal("250")
        assert len(store.stock_movements) == 1

    def test_processed_at_stamped(self):
        store, _ = _store()
        delivered = store.update_purchase("c1", status="delivered")
        assert delivered.processed_at == NOW
        assert store.get_purchase("c1").processed_at == NOW

    def test_pending_approved_delivered_path(self):
        store, _ = _store()
        store.update_purchase("c1", status="approved")
        assert store.get_material("m1").stock_quantity == Decimal("150")
        store.update_purchase("c1", status="delivered")
        assert store.get_material("m1").stock_quantity == Decimal("250")

    def test_other_fields_on_delivered_purchase(self):
        store, _ = _store()
        store.update_purchase("c1", status="delivered")
        updated = store.update_purchase("c1", status="delivered", invoice_number="NF-9")
        assert updated.invoice_number == "NF-9"
        assert store.get_material("m1").stock_quantity == Decimal("250")

    def test_reset_from_delivered_rejected(self):
        from engines.construction.errors import MutationRejectedError

        store, _ = _store()
        store.update_purchase("c1", status="delivered")
        before = store.snapshot()
        with pytest.raises(MutationRejectedError) as exc:
            store.update_purchase("c1", status="pending")
        assert exc.value.rejection.code == "PURCHASE_ALREADY_DELIVERED"
        assert store.snapshot() == before

    def test_multiple_items_sum_per_material(self):
        purchase = _purchase(lines=(("m1", 100, "28.50"), ("m1", 20, "28.50"), ("m2", 5, 1)))
        store, _ = _store(_material("m1"), _material("m2", stock=0), purchase=purchase)
        store.update_purchase("c1", status="delivered")
        assert store.get_material("m1").stock_quantity == Decimal("270")
        assert store.get_material("m2").stock_quantity == Decimal("5")
        assert len(store.stock_movements) == 3

    def test_merged_items_are_reconciled(self):
        replacement = _purchase(lines=(("m1", 40, "28.50"),))
        store, _ = _store()
        store.update_purchase("c1", status="delivered", items=replacement.items)
        assert store.get_material("m1").stock_quantity == Decimal("190")

    def test_summary_notification(self):
        store, received = _store()
        store.update_purchase("c1", status="delivered")

        assert len(received) == 1
        note = received[0]
        assert note.kind.value == "success"
        assert note.title == "Purchase Delivered"
        assert "1 item " in note.message
        assert note.auto_close is True
        assert note.duration_ms == 6000

    def test_plural_item_count(self):
        purchase = _purchase(lines=(("m1", 1, 1), ("m1", 2, 1)))
        store, received = _store(purchase=purchase)
        store.update_purchase("c1", status="delivered")
        assert "2 items" in received[0].message

    def test_no_notification_on_repeat(self):
        store, received = _store()
        store.update_purchase("c1", status="delivered")
        store.update_purchase("c1", status="delivered")
        assert len(received) == 1

    def test_broken_listener_does_not_undo_delivery(self):
        store, _ = _store()

        def broken(notification):
            raise RuntimeError("panel unavailable")

        store.notifier.subscribe(broken)
        store.update_purchase("c1", status="delivered")
        assert store.get_material("m1").stock_quantity == Decimal("250")

    def test_seeded_delivered_purchase_not_reconciled_again(self):
        from core.bootstrap import build_seeded_store
        from core.time import FixedClock

        store = build_seeded_store(clock=FixedClock(NOW))
        store.update_purchase("1", status="delivered")
        assert store.get_material("1").stock_quantity == Decimal("150")
        assert len(store.stock_movements) == 2
