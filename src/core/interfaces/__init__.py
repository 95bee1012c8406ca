"""Core interfaces (ports) for dependency injection."""

from src.core.interfaces.events import IEventPublisher
from src.core.interfaces.inventory_store import (
    IAssetUsageStore,
    ICatalogLookup,
    IMovementLedger,
    IReservationStore,
    IStockItemStore,
)
from src.core.interfaces.unit_of_work import ITransaction, IUnitOfWork

__all__ = [
    # Storage interfaces
    "IStockItemStore",
    "IMovementLedger",
    "IReservationStore",
    "IAssetUsageStore",
    "ICatalogLookup",
    # Transactions
    "ITransaction",
    "IUnitOfWork",
    # Notifications
    "IEventPublisher",
]
