"""
Domain exceptions for the inventory ledger.

Every rejected operation raises one of these; the enclosing transaction is
rolled back before the error reaches the caller.
"""

from typing import Any


class InventoryError(Exception):
    """Base exception for all inventory errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for boundary responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Lookup Exceptions
class NotFoundError(InventoryError):
    """Base exception for missing records."""

    pass


class ItemNotFoundError(NotFoundError):
    """Inventory item does not exist or is soft-deleted."""

    def __init__(self, item_id: int):
        super().__init__(
            f"Inventory item not found: {item_id}",
            code="ITEM_NOT_FOUND",
            details={"item_id": item_id},
        )


class ReservationNotFoundError(NotFoundError):
    """Reservation does not exist."""

    def __init__(self, reservation_id: int):
        super().__init__(
            f"Reservation not found: {reservation_id}",
            code="RESERVATION_NOT_FOUND",
            details={"reservation_id": reservation_id},
        )


class MovementNotFoundError(NotFoundError):
    """Ledger entry does not exist."""

    def __init__(self, movement_id: int):
        super().__init__(
            f"Movement not found: {movement_id}",
            code="MOVEMENT_NOT_FOUND",
            details={"movement_id": movement_id},
        )


# Stock Exceptions
class InsufficientStockError(InventoryError):
    """Requested quantity exceeds the available or reservable balance."""

    def __init__(
        self,
        item_id: int,
        requested: float,
        available: float,
        unit: str | None = None,
    ):
        suffix = f" {unit}" if unit else ""
        super().__init__(
            f"Insufficient stock for item {item_id}: "
            f"requested {requested}{suffix}, available {available}{suffix}",
            code="INSUFFICIENT_STOCK",
            details={
                "item_id": item_id,
                "requested": requested,
                "available": available,
                "unit": unit,
            },
        )


class InvalidReferenceError(InventoryError):
    """A catalog id (warehouse, supplier, category) does not resolve."""

    def __init__(self, reference: str, ref_id: Any):
        super().__init__(
            f"Unknown {reference}: {ref_id}",
            code="INVALID_REFERENCE",
            details={"reference": reference, "id": ref_id},
        )


class InvalidTransferError(InventoryError):
    """Bad warehouse pairing on a TRANSFER movement."""

    def __init__(self, reason: str, **details: Any):
        super().__init__(
            f"Invalid transfer: {reason}",
            code="INVALID_TRANSFER",
            details={"reason": reason, **details},
        )


class InvalidStateError(InventoryError):
    """Illegal lifecycle transition."""

    def __init__(self, reason: str, **details: Any):
        super().__init__(
            f"Invalid state: {reason}",
            code="INVALID_STATE",
            details={"reason": reason, **details},
        )


class AssetUnavailableError(InventoryError):
    """Fixed asset is not free to reserve."""

    def __init__(self, item_id: int, status: str):
        super().__init__(
            f"Fixed asset {item_id} is not available (status: {status})",
            code="ASSET_UNAVAILABLE",
            details={"item_id": item_id, "status": status},
        )


# Validation Exceptions
class ValidationError(InventoryError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


# Storage Exceptions
class StorageError(InventoryError):
    """Base exception for storage operations."""

    pass


class ConcurrencyConflictError(StorageError):
    """Compare-and-write found a newer version of the row."""

    def __init__(self, item_id: int, expected_version: int):
        super().__init__(
            f"Inventory item {item_id} was modified concurrently "
            f"(expected version {expected_version})",
            code="CONCURRENCY_CONFLICT",
            details={"item_id": item_id, "expected_version": expected_version},
        )


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )
