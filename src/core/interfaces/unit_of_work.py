"""
Abstract unit of work.

A transaction hands out stores bound to one connection, so item, ledger,
reservation and usage writes commit or roll back together.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager

from src.core.interfaces.inventory_store import (
    IAssetUsageStore,
    ICatalogLookup,
    IMovementLedger,
    IReservationStore,
    IStockItemStore,
)


class ITransaction(ABC):
    """Stores scoped to a single transaction."""

    @property
    @abstractmethod
    def items(self) -> IStockItemStore:
        pass

    @property
    @abstractmethod
    def movements(self) -> IMovementLedger:
        pass

    @property
    @abstractmethod
    def reservations(self) -> IReservationStore:
        pass

    @property
    @abstractmethod
    def usage(self) -> IAssetUsageStore:
        pass

    @property
    @abstractmethod
    def catalog(self) -> ICatalogLookup:
        pass


class IUnitOfWork(ABC):
    """Factory for transactions."""

    @abstractmethod
    def begin(self) -> AbstractAsyncContextManager[ITransaction]:
        """
        Open a write transaction.

        Holds the write lock for the duration. Commits on clean exit and
        rolls back if the block raises.
        """
        pass

    @abstractmethod
    def read(self) -> AbstractAsyncContextManager[ITransaction]:
        """Open a read-only session without taking the write lock."""
        pass
