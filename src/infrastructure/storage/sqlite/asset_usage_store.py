"""SQLite implementation of fixed-asset usage records."""

import aiosqlite

from src.core.entities.inventory import AssetUsageRecord, utcnow
from src.core.interfaces.inventory_store import IAssetUsageStore
from src.infrastructure.storage.sqlite.rows import parse_datetime, to_iso


class SQLiteAssetUsageStore(IAssetUsageStore):
    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def append(self, record: AssetUsageRecord) -> AssetUsageRecord:
        cursor = await self._conn.execute(
            """
            INSERT INTO asset_usage_records (
                item_id, hours, depreciation_generated, book_value_before,
                book_value_after, activity_id, actor_id, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.item_id,
                record.hours,
                record.depreciation_generated,
                record.book_value_before,
                record.book_value_after,
                record.activity_id,
                record.actor_id,
                to_iso(record.created_at),
            ),
        )
        return record.model_copy(update={"id": cursor.lastrowid})

    async def list_for_item(
        self, item_id: int, limit: int = 100, offset: int = 0
    ) -> list[AssetUsageRecord]:
        cursor = await self._conn.execute(
            """
            SELECT * FROM asset_usage_records
            WHERE item_id = ?
            ORDER BY id DESC
            LIMIT ? OFFSET ?
            """,
            (item_id, limit, offset),
        )
        rows = await cursor.fetchall()
        return [
            AssetUsageRecord(
                id=row["id"],
                item_id=row["item_id"],
                hours=float(row["hours"]),
                depreciation_generated=float(row["depreciation_generated"]),
                book_value_before=float(row["book_value_before"]),
                book_value_after=float(row["book_value_after"]),
                activity_id=row["activity_id"],
                actor_id=row["actor_id"],
                created_at=parse_datetime(row["created_at"]) or utcnow(),
            )
            for row in rows
        ]
