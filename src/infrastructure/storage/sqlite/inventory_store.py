"""SQLite implementation of inventory item storage."""

from typing import Any

import aiosqlite

from src.config import get_logger
from src.core.entities.inventory import (
    ActiveState,
    DeletedState,
    InventoryItem,
    ItemKind,
    ItemQuery,
    ItemStatus,
    MaterialKind,
    utcnow,
)
from src.core.exceptions import ConcurrencyConflictError
from src.core.interfaces.inventory_store import IStockItemStore
from src.infrastructure.storage.sqlite.rows import (
    optional_float,
    parse_date,
    parse_datetime,
    to_iso,
)

logger = get_logger(__name__)

_ITEM_COLUMNS = (
    "name",
    "description",
    "material_kind",
    "item_kind",
    "packaging_type",
    "packaging_unit",
    "packaging_quantity",
    "usage_unit",
    "conversion_factor",
    "stock_usage",
    "stock_packaging",
    "reserved_usage",
    "min_stock",
    "unit_cost_usage",
    "inventory_value",
    "warehouse_id",
    "category_id",
    "supplier_id",
    "acquisition_cost",
    "residual_value",
    "useful_life_hours",
    "hours_used",
    "accumulated_depreciation",
    "acquired_on",
    "last_maintenance_on",
    "decommissioned_at",
    "decommission_reason",
    "status",
    "deleted_at",
    "created_by",
    "updated_at",
)


class SQLiteStockItemStore(IStockItemStore):
    """SQLite implementation of inventory item storage, bound to one connection."""

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def create_item(self, item: InventoryItem) -> InventoryItem:
        """Create a new inventory item."""
        now = utcnow()
        item.created_at = now
        item.updated_at = now
        values = self._item_values(item)
        placeholders = ", ".join("?" for _ in _ITEM_COLUMNS)
        cursor = await self._conn.execute(
            f"""
            INSERT INTO inventory_items ({", ".join(_ITEM_COLUMNS)}, version, created_at)
            VALUES ({placeholders}, ?, ?)
            """,
            (*values, item.version, to_iso(item.created_at)),
        )
        item.id = cursor.lastrowid
        logger.info(
            "inventory_item_created",
            item_id=item.id,
            item_kind=item.item_kind.value,
            name=item.name,
        )
        return item

    async def get_item(
        self, item_id: int, include_deleted: bool = False
    ) -> InventoryItem | None:
        """Get inventory item by ID."""
        sql = "SELECT * FROM inventory_items WHERE id = ?"
        if not include_deleted:
            sql += " AND deleted_at IS NULL"
        cursor = await self._conn.execute(sql, (item_id,))
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_inventory_item(row)

    async def update_item(self, item: InventoryItem) -> InventoryItem:
        """Compare-and-write update on the version column."""
        item.updated_at = utcnow()
        assignments = ", ".join(f"{col} = ?" for col in _ITEM_COLUMNS)
        cursor = await self._conn.execute(
            f"""
            UPDATE inventory_items SET {assignments}, version = version + 1
            WHERE id = ? AND version = ?
            """,
            (*self._item_values(item), item.id, item.version),
        )
        if cursor.rowcount == 0:
            logger.warning(
                "inventory_item_version_conflict",
                item_id=item.id,
                expected_version=item.version,
            )
            raise ConcurrencyConflictError(item.id, item.version)

        item.version += 1
        logger.debug("inventory_item_updated", item_id=item.id, version=item.version)
        return item

    async def list_items(self, query: ItemQuery) -> list[InventoryItem]:
        """List inventory items matching the query."""
        clauses = ["deleted_at IS NOT NULL" if query.deleted_only else "deleted_at IS NULL"]
        params: list[Any] = []

        if query.item_kind is not None:
            clauses.append("item_kind = ?")
            params.append(query.item_kind.value)
        if query.warehouse_id is not None:
            clauses.append("warehouse_id = ?")
            params.append(query.warehouse_id)
        if query.category_id is not None:
            clauses.append("category_id = ?")
            params.append(query.category_id)
        if query.supplier_id is not None:
            clauses.append("supplier_id = ?")
            params.append(query.supplier_id)
        if query.text:
            clauses.append("(name LIKE ? OR description LIKE ?)")
            pattern = f"%{query.text}%"
            params.extend([pattern, pattern])

        cursor = await self._conn.execute(
            f"""
            SELECT * FROM inventory_items
            WHERE {" AND ".join(clauses)}
            ORDER BY name, id
            LIMIT ? OFFSET ?
            """,
            (*params, query.limit, query.offset),
        )
        rows = await cursor.fetchall()
        return [self._row_to_inventory_item(row) for row in rows]

    async def list_low_stock(
        self, limit: int = 100, offset: int = 0
    ) -> list[InventoryItem]:
        """List active consumables whose available stock is at or below min_stock."""
        cursor = await self._conn.execute(
            """
            SELECT * FROM inventory_items
            WHERE item_kind = ?
              AND deleted_at IS NULL
              AND (stock_usage - reserved_usage) <= min_stock
            ORDER BY (stock_usage - reserved_usage) ASC, id
            LIMIT ? OFFSET ?
            """,
            (ItemKind.CONSUMABLE.value, limit, offset),
        )
        rows = await cursor.fetchall()
        return [self._row_to_inventory_item(row) for row in rows]

    @staticmethod
    def _item_values(item: InventoryItem) -> tuple:
        return (
            item.name,
            item.description,
            item.material_kind.value,
            item.item_kind.value,
            item.packaging_type,
            item.packaging_unit,
            item.packaging_quantity,
            item.usage_unit,
            item.conversion_factor,
            item.stock_usage,
            item.stock_packaging,
            item.reserved_usage,
            item.min_stock,
            item.unit_cost_usage,
            item.inventory_value,
            item.warehouse_id,
            item.category_id,
            item.supplier_id,
            item.acquisition_cost,
            item.residual_value,
            item.useful_life_hours,
            item.hours_used,
            item.accumulated_depreciation,
            to_iso(item.acquired_on),
            to_iso(item.last_maintenance_on),
            to_iso(item.decommissioned_at),
            item.decommission_reason,
            item.status.value,
            to_iso(item.deleted_at),
            item.created_by,
            to_iso(item.updated_at),
        )

    @staticmethod
    def _row_to_inventory_item(row: aiosqlite.Row) -> InventoryItem:
        """Convert a database row to an InventoryItem entity."""
        deleted_at = parse_datetime(row["deleted_at"])
        lifecycle = DeletedState(at=deleted_at) if deleted_at else ActiveState()

        return InventoryItem(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            material_kind=MaterialKind(row["material_kind"]),
            item_kind=ItemKind(row["item_kind"]),
            packaging_type=row["packaging_type"],
            packaging_unit=row["packaging_unit"],
            packaging_quantity=float(row["packaging_quantity"]),
            usage_unit=row["usage_unit"],
            conversion_factor=float(row["conversion_factor"]),
            stock_usage=float(row["stock_usage"]),
            stock_packaging=float(row["stock_packaging"]),
            reserved_usage=float(row["reserved_usage"]),
            min_stock=float(row["min_stock"]),
            unit_cost_usage=float(row["unit_cost_usage"]),
            inventory_value=float(row["inventory_value"]),
            warehouse_id=row["warehouse_id"],
            category_id=row["category_id"],
            supplier_id=row["supplier_id"],
            acquisition_cost=optional_float(row["acquisition_cost"]),
            residual_value=optional_float(row["residual_value"]),
            useful_life_hours=optional_float(row["useful_life_hours"]),
            hours_used=float(row["hours_used"]),
            accumulated_depreciation=float(row["accumulated_depreciation"]),
            acquired_on=parse_date(row["acquired_on"]),
            last_maintenance_on=parse_date(row["last_maintenance_on"]),
            decommissioned_at=parse_datetime(row["decommissioned_at"]),
            decommission_reason=row["decommission_reason"],
            status=ItemStatus(row["status"]),
            lifecycle=lifecycle,
            created_by=row["created_by"],
            version=row["version"],
            created_at=parse_datetime(row["created_at"]) or utcnow(),
            updated_at=parse_datetime(row["updated_at"]) or utcnow(),
        )
