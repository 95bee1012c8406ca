"""Core domain entities."""

from src.core.entities.events import EventType, InventoryEvent
from src.core.entities.inventory import (
    ActiveState,
    AssetUsageRecord,
    DeletedState,
    DepreciationResult,
    FixedAssetDraft,
    InventoryItem,
    ItemDraft,
    ItemKind,
    ItemPatch,
    ItemQuery,
    ItemStatus,
    MaterialKind,
    MovementEntry,
    MovementQuery,
    MovementType,
    ReconciliationResult,
    Reservation,
    ReservationStatus,
)

__all__ = [
    # Items
    "InventoryItem",
    "ItemKind",
    "ItemStatus",
    "MaterialKind",
    "ActiveState",
    "DeletedState",
    "ItemDraft",
    "FixedAssetDraft",
    "ItemPatch",
    "ItemQuery",
    # Ledger
    "MovementEntry",
    "MovementType",
    "MovementQuery",
    "ReconciliationResult",
    # Reservations
    "Reservation",
    "ReservationStatus",
    # Depreciation
    "AssetUsageRecord",
    "DepreciationResult",
    # Notifications
    "EventType",
    "InventoryEvent",
]
