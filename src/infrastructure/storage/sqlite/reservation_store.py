"""SQLite implementation of reservation storage."""

from typing import Any

import aiosqlite

from src.config import get_logger
from src.core.entities.inventory import Reservation, ReservationStatus, utcnow
from src.core.interfaces.inventory_store import IReservationStore
from src.infrastructure.storage.sqlite.rows import parse_datetime, to_iso

logger = get_logger(__name__)


class SQLiteReservationStore(IReservationStore):
    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def create(self, reservation: Reservation) -> Reservation:
        cursor = await self._conn.execute(
            """
            INSERT INTO reservations (
                item_id, quantity, reason, status, actor_id, activity_id,
                reserved_at, closed_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                reservation.item_id,
                reservation.quantity,
                reservation.reason,
                reservation.status.value,
                reservation.actor_id,
                reservation.activity_id,
                to_iso(reservation.reserved_at),
                to_iso(reservation.closed_at),
            ),
        )
        reservation.id = cursor.lastrowid
        logger.info(
            "reservation_stored",
            reservation_id=reservation.id,
            item_id=reservation.item_id,
            quantity=reservation.quantity,
        )
        return reservation

    async def get(self, reservation_id: int) -> Reservation | None:
        cursor = await self._conn.execute(
            "SELECT * FROM reservations WHERE id = ?", (reservation_id,)
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_reservation(row)

    async def update(self, reservation: Reservation) -> Reservation:
        """Persist a status transition. Closed reservations are rejected by trigger."""
        await self._conn.execute(
            "UPDATE reservations SET status = ?, closed_at = ? WHERE id = ?",
            (
                reservation.status.value,
                to_iso(reservation.closed_at),
                reservation.id,
            ),
        )
        return reservation

    async def list_reservations(
        self,
        status: ReservationStatus | None = None,
        item_id: int | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Reservation]:
        """List reservations, newest first."""
        clauses: list[str] = []
        params: list[Any] = []
        if status is not None:
            clauses.append("status = ?")
            params.append(status.value)
        if item_id is not None:
            clauses.append("item_id = ?")
            params.append(item_id)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        cursor = await self._conn.execute(
            f"""
            SELECT * FROM reservations
            {where}
            ORDER BY id DESC
            LIMIT ? OFFSET ?
            """,
            (*params, limit, offset),
        )
        rows = await cursor.fetchall()
        return [self._row_to_reservation(row) for row in rows]

    async def list_by_activity(self, activity_id: int) -> list[Reservation]:
        cursor = await self._conn.execute(
            "SELECT * FROM reservations WHERE activity_id = ? ORDER BY id DESC",
            (activity_id,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_reservation(row) for row in rows]

    async def count_active_for_item(self, item_id: int) -> int:
        cursor = await self._conn.execute(
            "SELECT COUNT(*) FROM reservations WHERE item_id = ? AND status = ?",
            (item_id, ReservationStatus.ACTIVE.value),
        )
        row = await cursor.fetchone()
        return row[0] if row else 0

    @staticmethod
    def _row_to_reservation(row: aiosqlite.Row) -> Reservation:
        return Reservation(
            id=row["id"],
            item_id=row["item_id"],
            quantity=float(row["quantity"]),
            reason=row["reason"],
            status=ReservationStatus(row["status"]),
            actor_id=row["actor_id"],
            activity_id=row["activity_id"],
            reserved_at=parse_datetime(row["reserved_at"]) or utcnow(),
            closed_at=parse_datetime(row["closed_at"]),
        )
