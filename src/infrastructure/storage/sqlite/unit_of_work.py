"""SQLite unit of work over the connection pool."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiosqlite

from src.core.interfaces.unit_of_work import ITransaction, IUnitOfWork
from src.infrastructure.storage.sqlite.asset_usage_store import SQLiteAssetUsageStore
from src.infrastructure.storage.sqlite.catalog_store import SQLiteCatalogLookup
from src.infrastructure.storage.sqlite.connection import ConnectionPool
from src.infrastructure.storage.sqlite.inventory_store import SQLiteStockItemStore
from src.infrastructure.storage.sqlite.movement_store import SQLiteMovementLedger
from src.infrastructure.storage.sqlite.reservation_store import SQLiteReservationStore


class SQLiteTransaction(ITransaction):
    """Stores sharing one pooled connection."""

    def __init__(self, conn: aiosqlite.Connection):
        self._items = SQLiteStockItemStore(conn)
        self._movements = SQLiteMovementLedger(conn)
        self._reservations = SQLiteReservationStore(conn)
        self._usage = SQLiteAssetUsageStore(conn)
        self._catalog = SQLiteCatalogLookup(conn)

    @property
    def items(self) -> SQLiteStockItemStore:
        return self._items

    @property
    def movements(self) -> SQLiteMovementLedger:
        return self._movements

    @property
    def reservations(self) -> SQLiteReservationStore:
        return self._reservations

    @property
    def usage(self) -> SQLiteAssetUsageStore:
        return self._usage

    @property
    def catalog(self) -> SQLiteCatalogLookup:
        return self._catalog


class SQLiteUnitOfWork(IUnitOfWork):
    """
    Write transactions start with BEGIN IMMEDIATE, which takes SQLite's
    database-wide write lock before anything is read. Mutations on the same
    item are therefore serialized, and the version check on item rows guards
    against writers outside this pool.
    """

    def __init__(self, pool: ConnectionPool):
        self.pool = pool

    @asynccontextmanager
    async def begin(self) -> AsyncIterator[SQLiteTransaction]:
        async with self.pool.transaction() as conn:
            yield SQLiteTransaction(conn)

    @asynccontextmanager
    async def read(self) -> AsyncIterator[SQLiteTransaction]:
        async with self.pool.acquire() as conn:
            yield SQLiteTransaction(conn)
