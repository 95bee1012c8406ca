"""Catalog existence checks against the warehouse, supplier and category tables."""

import aiosqlite

from src.core.interfaces.inventory_store import ICatalogLookup


class SQLiteCatalogLookup(ICatalogLookup):
    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def _exists(self, sql: str, ref_id: int) -> bool:
        cursor = await self._conn.execute(sql, (ref_id,))
        return await cursor.fetchone() is not None

    async def warehouse_exists(self, warehouse_id: int) -> bool:
        return await self._exists(
            "SELECT 1 FROM warehouses WHERE id = ? AND is_active = 1", warehouse_id
        )

    async def supplier_exists(self, supplier_id: int) -> bool:
        return await self._exists(
            "SELECT 1 FROM suppliers WHERE id = ? AND is_active = 1", supplier_id
        )

    async def category_exists(self, category_id: int) -> bool:
        return await self._exists("SELECT 1 FROM categories WHERE id = ?", category_id)
