"""Tests for SQLiteStockItemStore."""

from datetime import date

import pytest

from src.core.entities import InventoryItem, ItemKind, ItemQuery, ItemStatus, MaterialKind
from src.core.exceptions import ConcurrencyConflictError
from src.infrastructure.storage.sqlite import ConnectionPool, SQLiteStockItemStore
from tests.catalog import FERTILIZER_CATEGORY, FIELD_WAREHOUSE, MAIN_WAREHOUSE


def make_item(**kwargs) -> InventoryItem:
    defaults = {
        "name": "Triple superphosphate",
        "packaging_unit": "kg",
        "packaging_quantity": 50.0,
        "conversion_factor": 50000.0,
        "stock_usage": 100000.0,
        "stock_packaging": 2.0,
        "unit_cost_usage": 0.01,
        "inventory_value": 1000.0,
        "min_stock": 10000.0,
        "warehouse_id": MAIN_WAREHOUSE,
        "category_id": FERTILIZER_CATEGORY,
    }
    defaults.update(kwargs)
    return InventoryItem(**defaults)


class TestCreateAndGet:
    async def test_round_trip(self, catalog: ConnectionPool):
        async with catalog.transaction() as conn:
            store = SQLiteStockItemStore(conn)
            created = await store.create_item(
                make_item(
                    material_kind=MaterialKind.SOLID,
                    acquired_on=date(2024, 3, 1),
                    description="Granulated",
                )
            )
            assert created.id is not None

            loaded = await store.get_item(created.id)

        assert loaded is not None
        assert loaded.name == "Triple superphosphate"
        assert loaded.conversion_factor == 50000.0
        assert loaded.stock_usage == 100000.0
        assert loaded.acquired_on == date(2024, 3, 1)
        assert loaded.status is ItemStatus.AVAILABLE
        assert loaded.version == 0
        assert not loaded.is_deleted
        assert loaded.created_at.tzinfo is not None

    async def test_missing_item(self, catalog: ConnectionPool):
        async with catalog.acquire() as conn:
            assert await SQLiteStockItemStore(conn).get_item(999) is None

    async def test_deleted_hidden_unless_requested(self, catalog: ConnectionPool):
        async with catalog.transaction() as conn:
            store = SQLiteStockItemStore(conn)
            item = await store.create_item(make_item())
            item.mark_deleted()
            await store.update_item(item)

            assert await store.get_item(item.id) is None
            deleted = await store.get_item(item.id, include_deleted=True)

        assert deleted is not None
        assert deleted.is_deleted
        assert deleted.deleted_at is not None


class TestCompareAndWrite:
    async def test_update_bumps_version(self, catalog: ConnectionPool):
        async with catalog.transaction() as conn:
            store = SQLiteStockItemStore(conn)
            item = await store.create_item(make_item())
            item.stock_usage = 50000.0
            updated = await store.update_item(item)
            assert updated.version == 1

            loaded = await store.get_item(item.id)
        assert loaded.version == 1
        assert loaded.stock_usage == 50000.0

    async def test_stale_version_conflicts(self, catalog: ConnectionPool):
        async with catalog.transaction() as conn:
            store = SQLiteStockItemStore(conn)
            item = await store.create_item(make_item())
            stale = item.model_copy()

            item.stock_usage = 1.0
            await store.update_item(item)

            stale.stock_usage = 2.0
            with pytest.raises(ConcurrencyConflictError):
                await store.update_item(stale)

            loaded = await store.get_item(item.id)
        assert loaded.stock_usage == 1.0


class TestListing:
    @pytest.fixture
    async def seeded(self, catalog: ConnectionPool):
        async with catalog.transaction() as conn:
            store = SQLiteStockItemStore(conn)
            await store.create_item(make_item(name="Urea", stock_usage=5000.0))
            await store.create_item(
                make_item(name="Copper oxychloride", warehouse_id=FIELD_WAREHOUSE)
            )
            await store.create_item(
                make_item(
                    name="Backpack sprayer",
                    item_kind=ItemKind.FIXED_ASSET,
                    stock_usage=1.0,
                    min_stock=0.0,
                )
            )
            gone = await store.create_item(make_item(name="Old lime"))
            gone.mark_deleted()
            await store.update_item(gone)
        return catalog

    async def test_filters(self, seeded: ConnectionPool):
        async with seeded.acquire() as conn:
            store = SQLiteStockItemStore(conn)

            all_items = await store.list_items(ItemQuery())
            assert [i.name for i in all_items] == [
                "Backpack sprayer",
                "Copper oxychloride",
                "Urea",
            ]

            assets = await store.list_items(ItemQuery(item_kind=ItemKind.FIXED_ASSET))
            assert [i.name for i in assets] == ["Backpack sprayer"]

            field = await store.list_items(ItemQuery(warehouse_id=FIELD_WAREHOUSE))
            assert [i.name for i in field] == ["Copper oxychloride"]

            text = await store.list_items(ItemQuery(text="copper"))
            assert len(text) == 1

            deleted = await store.list_items(ItemQuery(deleted_only=True))
            assert [i.name for i in deleted] == ["Old lime"]

            page = await store.list_items(ItemQuery(limit=1, offset=1))
            assert [i.name for i in page] == ["Copper oxychloride"]

    async def test_low_stock_only_consumables(self, seeded: ConnectionPool):
        async with seeded.acquire() as conn:
            low = await SQLiteStockItemStore(conn).list_low_stock()
        assert [i.name for i in low] == ["Urea"]


class TestNoHardDelete:
    async def test_delete_rejected(self, catalog: ConnectionPool):
        import aiosqlite

        async with catalog.transaction() as conn:
            item = await SQLiteStockItemStore(conn).create_item(make_item())

        async with catalog.acquire() as conn:
            with pytest.raises(aiosqlite.IntegrityError):
                await conn.execute("DELETE FROM inventory_items WHERE id = ?", (item.id,))
