"""Storage infrastructure implementations."""

from src.infrastructure.storage.sqlite import (
    ConnectionPool,
    SQLiteUnitOfWork,
    close_pool,
    get_pool,
)

__all__ = [
    "ConnectionPool",
    "SQLiteUnitOfWork",
    "get_pool",
    "close_pool",
]
