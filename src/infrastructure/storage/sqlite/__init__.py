"""SQLite storage implementations."""

from src.infrastructure.storage.sqlite.asset_usage_store import SQLiteAssetUsageStore
from src.infrastructure.storage.sqlite.catalog_store import SQLiteCatalogLookup
from src.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_pool,
)
from src.infrastructure.storage.sqlite.inventory_store import SQLiteStockItemStore
from src.infrastructure.storage.sqlite.movement_store import SQLiteMovementLedger
from src.infrastructure.storage.sqlite.reservation_store import SQLiteReservationStore
from src.infrastructure.storage.sqlite.unit_of_work import (
    SQLiteTransaction,
    SQLiteUnitOfWork,
)

__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    # Store classes
    "SQLiteStockItemStore",
    "SQLiteMovementLedger",
    "SQLiteReservationStore",
    "SQLiteAssetUsageStore",
    "SQLiteCatalogLookup",
    # Unit of work
    "SQLiteTransaction",
    "SQLiteUnitOfWork",
]
