"""Abstract interfaces for inventory storage."""

from abc import ABC, abstractmethod

from src.core.entities.inventory import (
    AssetUsageRecord,
    InventoryItem,
    ItemQuery,
    MovementEntry,
    MovementQuery,
    Reservation,
    ReservationStatus,
)


class IStockItemStore(ABC):
    """Interface for inventory item persistence."""

    @abstractmethod
    async def create_item(self, item: InventoryItem) -> InventoryItem:
        """Create a new inventory item."""
        pass

    @abstractmethod
    async def get_item(
        self, item_id: int, include_deleted: bool = False
    ) -> InventoryItem | None:
        """Get inventory item by ID. Soft-deleted items are hidden by default."""
        pass

    @abstractmethod
    async def update_item(self, item: InventoryItem) -> InventoryItem:
        """
        Compare-and-write update.

        Writes only if the stored version equals item.version and returns the
        item with its version bumped. Raises ConcurrencyConflictError otherwise.
        """
        pass

    @abstractmethod
    async def list_items(self, query: ItemQuery) -> list[InventoryItem]:
        """List inventory items matching the query."""
        pass

    @abstractmethod
    async def list_low_stock(
        self, limit: int = 100, offset: int = 0
    ) -> list[InventoryItem]:
        """List active consumables whose available stock is at or below min_stock."""
        pass


class IMovementLedger(ABC):
    """Append-only store of stock movements."""

    @abstractmethod
    async def append(self, entry: MovementEntry) -> MovementEntry:
        """Persist a new ledger entry."""
        pass

    @abstractmethod
    async def get(self, movement_id: int) -> MovementEntry | None:
        pass

    @abstractmethod
    async def list_for_item(
        self, item_id: int, limit: int = 100, offset: int = 0
    ) -> list[MovementEntry]:
        """Get movements for an item, newest first."""
        pass

    @abstractmethod
    async def list_for_replay(self, item_id: int) -> list[MovementEntry]:
        """Get every movement for an item, oldest first."""
        pass

    @abstractmethod
    async def search(self, query: MovementQuery) -> list[MovementEntry]:
        """Search movements by item, type and date range, newest first."""
        pass

    @abstractmethod
    async def count_for_item(self, item_id: int) -> int:
        pass


class IReservationStore(ABC):
    """Interface for reservation persistence."""

    @abstractmethod
    async def create(self, reservation: Reservation) -> Reservation:
        pass

    @abstractmethod
    async def get(self, reservation_id: int) -> Reservation | None:
        pass

    @abstractmethod
    async def update(self, reservation: Reservation) -> Reservation:
        """Persist a status transition."""
        pass

    @abstractmethod
    async def list_reservations(
        self,
        status: ReservationStatus | None = None,
        item_id: int | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Reservation]:
        """List reservations, newest first."""
        pass

    @abstractmethod
    async def list_by_activity(self, activity_id: int) -> list[Reservation]:
        pass

    @abstractmethod
    async def count_active_for_item(self, item_id: int) -> int:
        pass


class IAssetUsageStore(ABC):
    """Append-only store of fixed-asset usage records."""

    @abstractmethod
    async def append(self, record: AssetUsageRecord) -> AssetUsageRecord:
        pass

    @abstractmethod
    async def list_for_item(
        self, item_id: int, limit: int = 100, offset: int = 0
    ) -> list[AssetUsageRecord]:
        """Get usage records for an asset, newest first."""
        pass


class ICatalogLookup(ABC):
    """Existence checks against the warehouse, supplier and category catalogs."""

    @abstractmethod
    async def warehouse_exists(self, warehouse_id: int) -> bool:
        pass

    @abstractmethod
    async def supplier_exists(self, supplier_id: int) -> bool:
        pass

    @abstractmethod
    async def category_exists(self, category_id: int) -> bool:
        pass
