"""
Structa Bootstrap — Demo Dataset
==================================
The fixed dataset every store starts from when nothing else is
supplied. There is no persistence: restarting the process brings
these records back exactly.

The seeded purchase is already delivered and already reconciled
(processed_at is set), so re-saving it as delivered never adds stock.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal

from core.bootstrap.self_check import run_integrity_checks
from core.primitives import (
    Material,
    MovementKind,
    Phase,
    Project,
    ProjectStatus,
    Purchase,
    PurchaseItem,
    PurchaseStatus,
    StockMovement,
)
from engines.construction.services import ConstructionStore
from engines.construction.snapshot import StoreSnapshot

logger = logging.getLogger("structa.bootstrap")


def _at(year, month, day, hour=0):
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


def seed_dataset() -> StoreSnapshot:
    projects = (
        Project(
            id="1",
            name="Residencial Alpha",
            location="Bairro Centro, Cidade A",
            start_date=_at(2024, 1, 15),
            expected_end_date=_at(2024, 12, 15),
            owner="João Silva",
            status=ProjectStatus.IN_PROGRESS,
            budget=Decimal("2500000"),
            total_cost=Decimal("1800000"),
            created_at=_at(2024, 1, 10, 10),
            updated_at=_at(2024, 1, 15, 10),
        ),
        Project(
            id="2",
            name="Comercial Beta",
            location="Zona Industrial, Cidade B",
            start_date=_at(2024, 3, 1),
            expected_end_date=_at(2025, 1, 30),
            owner="Maria Santos",
            status=ProjectStatus.PLANNED,
            budget=Decimal("3200000"),
            created_at=_at(2024, 2, 15, 10),
            updated_at=_at(2024, 2, 20, 10),
        ),
        Project(
            id="3",
            name="Residencial Gamma",
            location="Bairro Jardim, Cidade A",
            start_date=_at(2023, 8, 15),
            expected_end_date=_at(2024, 6, 15),
            actual_end_date=_at(2024, 6, 30),
            owner="Carlos Oliveira",
            status=ProjectStatus.COMPLETED,
            budget=Decimal("1800000"),
            total_cost=Decimal("1750000"),
            created_at=_at(2023, 8, 10, 10),
            updated_at=_at(2024, 7, 1, 10),
        ),
    )

    phases = (
        Phase(
            id="1",
            name="Foundation",
            description="Excavation and foundation construction",
            project_id="1",
            progress=100,
            start_date=_at(2024, 1, 15),
            end_date=_at(2024, 2, 28),
            photos=("foto1.jpg", "foto2.jpg"),
            notes="Foundation finished without incident",
            created_at=_at(2024, 1, 15, 10),
            updated_at=_at(2024, 1, 15, 10),
        ),
        Phase(
            id="2",
            name="Structure",
            description="Reinforced concrete structure",
            project_id="1",
            progress=75,
            start_date=_at(2024, 3, 1, 10),
            photos=("foto3.jpg",),
            notes="Structure under way, on schedule",
            created_at=_at(2024, 3, 1, 10),
            updated_at=_at(2024, 3, 1, 10),
        ),
        Phase(
            id="3",
            name="Masonry",
            description="Masonry wall construction",
            project_id="1",
            progress=30,
            start_date=_at(2024, 4, 15, 10),
            created_at=_at(2024, 4, 15, 10),
            updated_at=_at(2024, 4, 15, 10),
        ),
        Phase(
            id="4",
            name="Foundation",
            description="Excavation and foundation construction",
            project_id="2",
            progress=0,
            notes="Waiting for work to start",
            created_at=_at(2024, 3, 1, 10),
            updated_at=_at(2024, 3, 1, 10),
        ),
    )

    catalog_date = _at(2024, 1, 1, 10)
    materials = (
        Material(
            id="1", name="Cimento CP-II-Z-32", unit="sc",
            supplier="Votorantim Cimentos", unit_price=Decimal("28.50"),
            category="Cimento e Argamassa",
            stock_quantity=Decimal("150"), min_stock_quantity=Decimal("50"),
            created_at=catalog_date, updated_at=catalog_date,
        ),
        Material(
            id="2", name="Aço CA-50 Ø 8mm", unit="kg",
            supplier="Gerdau", unit_price=Decimal("7.80"),
            category="Estrutura Metálica",
            stock_quantity=Decimal("2500"), min_stock_quantity=Decimal("1000"),
            created_at=catalog_date, updated_at=catalog_date,
        ),
        Material(
            id="3", name="Areia Média", unit="m³",
            supplier="Mineração São João", unit_price=Decimal("95.00"),
            category="Cimento e Argamassa",
            stock_quantity=Decimal("25"), min_stock_quantity=Decimal("10"),
            created_at=catalog_date, updated_at=catalog_date,
        ),
        Material(
            id="4", name="Brita 1", unit="m³",
            supplier="Mineração São João", unit_price=Decimal("85.00"),
            category="Cimento e Argamassa",
            stock_quantity=Decimal("8"), min_stock_quantity=Decimal("15"),
            created_at=catalog_date, updated_at=catalog_date,
        ),
    )

    stock_movements = (
        StockMovement(
            id="1", material_id="1", project_id="1", phase_id="1",
            kind=MovementKind.IN, quantity=Decimal("100"),
            reason="Purchase for project", date=_at(2024, 1, 10, 10),
            performed_by="João Silva",
            created_at=_at(2024, 1, 10, 10), updated_at=_at(2024, 1, 10, 10),
        ),
        StockMovement(
            id="2", material_id="1", project_id="1", phase_id="1",
            kind=MovementKind.OUT, quantity=Decimal("50"),
            reason="Used on foundation", date=_at(2024, 1, 15, 10),
            performed_by="Maria Santos",
            created_at=_at(2024, 1, 15, 10), updated_at=_at(2024, 1, 15, 10),
        ),
    )

    purchases = (
        Purchase(
            id="1",
            project_id="1",
            supplier="Votorantim Cimentos",
            purchase_date=_at(2024, 1, 15, 10),
            items=(
                PurchaseItem(
                    id="1", purchase_id="1", material_id="1",
                    quantity=Decimal("100"), unit_price=Decimal("28.50"),
                    line_total=Decimal("2850.00"),
                ),
            ),
            total_cost=Decimal("2850.00"),
            invoice_number="NF-001234",
            status=PurchaseStatus.DELIVERED,
            processed_at=_at(2024, 1, 20, 10),
            created_at=_at(2024, 1, 10, 10),
            updated_at=_at(2024, 1, 20, 10),
        ),
    )

    return StoreSnapshot(
        projects=projects,
        phases=phases,
        materials=materials,
        stock_movements=stock_movements,
        purchases=purchases,
    )


def build_seeded_store(*, clock=None, settings=None, notifier=None, dataset=None):
    """
    Construct a store and seed it.

    The dataset (the demo data unless given) is integrity-checked
    first; a broken dataset raises StoreIntegrityError and no store
    is returned.
    """
    dataset = dataset if dataset is not None else seed_dataset()
    run_integrity_checks(dataset)

    store = ConstructionStore(clock=clock, settings=settings, notifier=notifier)
    store.seed(dataset)
    logger.info("Seeded store ready.")
    return store
