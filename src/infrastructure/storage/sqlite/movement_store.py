"""SQLite implementation of the append-only movement ledger."""

from typing import Any

import aiosqlite

from src.config import get_logger
from src.core.entities.inventory import MovementEntry, MovementQuery, MovementType, utcnow
from src.core.interfaces.inventory_store import IMovementLedger
from src.infrastructure.storage.sqlite.rows import parse_datetime, to_iso

logger = get_logger(__name__)


class SQLiteMovementLedger(IMovementLedger):
    """Ledger rows are inserted only; triggers reject UPDATE and DELETE."""

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def append(self, entry: MovementEntry) -> MovementEntry:
        cursor = await self._conn.execute(
            """
            INSERT INTO inventory_movements (
                item_id, type, usage_qty, packaging_qty, unit_cost_usage,
                total_cost, resulting_inventory_value, source_warehouse_id,
                dest_warehouse_id, activity_id, reservation_id, actor_id,
                note, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                entry.item_id,
                entry.type.value,
                entry.usage_qty,
                entry.packaging_qty,
                entry.unit_cost_usage,
                entry.total_cost,
                entry.resulting_inventory_value,
                entry.source_warehouse_id,
                entry.dest_warehouse_id,
                entry.activity_id,
                entry.reservation_id,
                entry.actor_id,
                entry.note,
                to_iso(entry.created_at),
            ),
        )
        stored = entry.model_copy(update={"id": cursor.lastrowid})
        logger.info(
            "stock_movement_recorded",
            movement_id=stored.id,
            item_id=stored.item_id,
            type=stored.type.value,
            qty=stored.usage_qty,
        )
        return stored

    async def get(self, movement_id: int) -> MovementEntry | None:
        cursor = await self._conn.execute(
            "SELECT * FROM inventory_movements WHERE id = ?", (movement_id,)
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_movement(row)

    async def list_for_item(
        self, item_id: int, limit: int = 100, offset: int = 0
    ) -> list[MovementEntry]:
        """Get movements for an item, newest first."""
        cursor = await self._conn.execute(
            """
            SELECT * FROM inventory_movements
            WHERE item_id = ?
            ORDER BY id DESC
            LIMIT ? OFFSET ?
            """,
            (item_id, limit, offset),
        )
        rows = await cursor.fetchall()
        return [self._row_to_movement(row) for row in rows]

    async def list_for_replay(self, item_id: int) -> list[MovementEntry]:
        cursor = await self._conn.execute(
            "SELECT * FROM inventory_movements WHERE item_id = ? ORDER BY id ASC",
            (item_id,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_movement(row) for row in rows]

    async def search(self, query: MovementQuery) -> list[MovementEntry]:
        clauses: list[str] = []
        params: list[Any] = []

        if query.item_id is not None:
            clauses.append("m.item_id = ?")
            params.append(query.item_id)
        if query.type is not None:
            clauses.append("m.type = ?")
            params.append(query.type.value)
        if query.date_from is not None:
            clauses.append("m.created_at >= ?")
            params.append(to_iso(query.date_from))
        if query.date_to is not None:
            clauses.append("m.created_at <= ?")
            params.append(to_iso(query.date_to))
        if not query.include_deleted_items:
            clauses.append("i.deleted_at IS NULL")

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        cursor = await self._conn.execute(
            f"""
            SELECT m.* FROM inventory_movements m
            JOIN inventory_items i ON i.id = m.item_id
            {where}
            ORDER BY m.id DESC
            LIMIT ? OFFSET ?
            """,
            (*params, query.limit, query.offset),
        )
        rows = await cursor.fetchall()
        return [self._row_to_movement(row) for row in rows]

    async def count_for_item(self, item_id: int) -> int:
        cursor = await self._conn.execute(
            "SELECT COUNT(*) FROM inventory_movements WHERE item_id = ?", (item_id,)
        )
        row = await cursor.fetchone()
        return row[0] if row else 0

    @staticmethod
    def _row_to_movement(row: aiosqlite.Row) -> MovementEntry:
        """Convert a database row to a MovementEntry."""
        return MovementEntry(
            id=row["id"],
            item_id=row["item_id"],
            type=MovementType(row["type"]),
            usage_qty=float(row["usage_qty"]),
            packaging_qty=float(row["packaging_qty"]),
            unit_cost_usage=float(row["unit_cost_usage"]),
            total_cost=float(row["total_cost"]),
            resulting_inventory_value=float(row["resulting_inventory_value"]),
            source_warehouse_id=row["source_warehouse_id"],
            dest_warehouse_id=row["dest_warehouse_id"],
            activity_id=row["activity_id"],
            reservation_id=row["reservation_id"],
            actor_id=row["actor_id"],
            note=row["note"],
            created_at=parse_datetime(row["created_at"]) or utcnow(),
        )
