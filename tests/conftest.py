"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Callable, Coroutine
from pathlib import Path
from typing import Any

import pytest

from src.application.services import reset_services
from src.config import reset_settings
from src.core.entities import InventoryEvent, ItemDraft, MaterialKind
from src.core.services import (
    DepreciationService,
    InventoryService,
    MovementService,
    ReservationService,
    RetryPolicy,
)
from src.infrastructure.events import InMemoryEventBus
from src.infrastructure.storage.sqlite import ConnectionPool, SQLiteUnitOfWork
from src.infrastructure.storage.sqlite.migrations import initialize_database
from tests.catalog import (
    ACTOR_ID,
    AGRO_SUPPLIER,
    CLOSED_WAREHOUSE,
    FERTILIZER_CATEGORY,
    FIELD_WAREHOUSE,
    MAIN_WAREHOUSE,
)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point settings at a temp dir and drop cached singletons."""
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "data"))
    reset_settings()
    reset_services()
    yield
    reset_settings()
    reset_services()


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "inventory.db"


@pytest.fixture
async def migrated_db(temp_db_path: Path) -> Path:
    """Temporary database with every migration applied."""
    results = await initialize_database(temp_db_path, create_backup_before=False)
    assert all(r.success for r in results)
    return temp_db_path


@pytest.fixture
async def pool(migrated_db: Path) -> AsyncGenerator[ConnectionPool, None]:
    pool = ConnectionPool(migrated_db, pool_size=3, busy_timeout=5000)
    await pool.initialize()
    yield pool
    await pool.close()


@pytest.fixture
async def catalog(pool: ConnectionPool) -> ConnectionPool:
    """Seed warehouses, a category and a supplier."""
    async with pool.acquire() as conn:
        await conn.executemany(
            "INSERT INTO warehouses (id, name, is_active) VALUES (?, ?, ?)",
            [
                (MAIN_WAREHOUSE, "Main barn", 1),
                (FIELD_WAREHOUSE, "Field shed", 1),
                (CLOSED_WAREHOUSE, "Old silo", 0),
            ],
        )
        await conn.execute(
            "INSERT INTO categories (id, name) VALUES (?, ?)",
            (FERTILIZER_CATEGORY, "Fertilizers"),
        )
        await conn.execute(
            "INSERT INTO suppliers (id, name) VALUES (?, ?)",
            (AGRO_SUPPLIER, "Agroinsumos del Valle"),
        )
    return pool


@pytest.fixture
def uow(catalog: ConnectionPool) -> SQLiteUnitOfWork:
    return SQLiteUnitOfWork(catalog)


@pytest.fixture
def event_bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def published(event_bus: InMemoryEventBus) -> list[InventoryEvent]:
    """Events delivered on the bus, in order."""
    received: list[InventoryEvent] = []

    async def record(event: InventoryEvent) -> None:
        received.append(event)

    event_bus.subscribe(record)
    return received


@pytest.fixture
def retry_policy() -> RetryPolicy:
    return RetryPolicy(retries=2, delay=0.001, multiplier=2.0)


@pytest.fixture
def movement_service(uow, event_bus, retry_policy) -> MovementService:
    return MovementService(uow, event_bus, retry_policy)


@pytest.fixture
def inventory_service(uow, movement_service, event_bus, retry_policy) -> InventoryService:
    return InventoryService(uow, movement_service, event_bus, retry_policy)


@pytest.fixture
def reservation_service(uow, movement_service, event_bus, retry_policy) -> ReservationService:
    return ReservationService(uow, movement_service, event_bus, retry_policy)


@pytest.fixture
def depreciation_service(uow, event_bus, retry_policy) -> DepreciationService:
    return DepreciationService(uow, event_bus, retry_policy)


@pytest.fixture
def make_consumable(
    inventory_service: InventoryService,
) -> Callable[..., Coroutine[Any, Any, Any]]:
    """Factory registering a solid consumable priced per gram."""

    async def make(
        name: str = "Urea 46%",
        stock: float = 100.0,
        unit_price: float = 10.0,
        min_stock: float = 0.0,
        **overrides: Any,
    ):
        draft = ItemDraft(
            name=name,
            material_kind=overrides.pop("material_kind", MaterialKind.SOLID),
            packaging_unit=overrides.pop("packaging_unit", "g"),
            packaging_quantity=overrides.pop("packaging_quantity", 1.0),
            initial_stock_packaging=stock,
            unit_price_packaging=unit_price,
            min_stock=min_stock,
            warehouse_id=overrides.pop("warehouse_id", MAIN_WAREHOUSE),
            category_id=overrides.pop("category_id", FERTILIZER_CATEGORY),
            supplier_id=overrides.pop("supplier_id", AGRO_SUPPLIER),
            **overrides,
        )
        return await inventory_service.create_item(draft, actor_id=ACTOR_ID)

    return make
