"""Response DTOs for inventory operations.

Flat, serializable views of the domain records.
"""

from datetime import date, datetime

from pydantic import BaseModel

from src.core.entities.inventory import InventoryItem, MovementEntry


class InventoryItemResponse(BaseModel):
    """Inventory item response DTO."""

    id: int
    name: str
    item_kind: str
    material_kind: str
    status: str
    packaging_unit: str
    packaging_quantity: float
    usage_unit: str
    conversion_factor: float
    stock_usage: float
    stock_packaging: float
    reserved_usage: float
    available_usage: float
    unit_cost_usage: float
    inventory_value: float
    warehouse_id: int
    category_id: int
    supplier_id: int | None = None
    hours_used: float = 0.0
    accumulated_depreciation: float = 0.0
    last_maintenance_on: date | None = None
    deleted_at: datetime | None = None
    version: int
    updated_at: datetime

    @classmethod
    def from_entity(cls, item: InventoryItem) -> "InventoryItemResponse":
        return cls(
            id=item.id,  # type: ignore[arg-type]
            name=item.name,
            item_kind=item.item_kind.value,
            material_kind=item.material_kind.value,
            status=item.status.value,
            packaging_unit=item.packaging_unit,
            packaging_quantity=item.packaging_quantity,
            usage_unit=item.usage_unit,
            conversion_factor=item.conversion_factor,
            stock_usage=item.stock_usage,
            stock_packaging=item.stock_packaging,
            reserved_usage=item.reserved_usage,
            available_usage=item.available_usage,
            unit_cost_usage=item.unit_cost_usage,
            inventory_value=item.inventory_value,
            warehouse_id=item.warehouse_id,
            category_id=item.category_id,
            supplier_id=item.supplier_id,
            hours_used=item.hours_used,
            accumulated_depreciation=item.accumulated_depreciation,
            last_maintenance_on=item.last_maintenance_on,
            deleted_at=item.deleted_at,
            version=item.version,
            updated_at=item.updated_at,
        )


class StockMovementResponse(BaseModel):
    """Stock movement response DTO."""

    id: int
    item_id: int
    movement_type: str
    usage_qty: float
    packaging_qty: float
    unit_cost_usage: float
    total_cost: float
    resulting_inventory_value: float
    activity_id: int | None = None
    reservation_id: int | None = None
    note: str | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, entry: MovementEntry) -> "StockMovementResponse":
        return cls(
            id=entry.id,  # type: ignore[arg-type]
            item_id=entry.item_id,
            movement_type=entry.type.value,
            usage_qty=entry.usage_qty,
            packaging_qty=entry.packaging_qty,
            unit_cost_usage=entry.unit_cost_usage,
            total_cost=entry.total_cost,
            resulting_inventory_value=entry.resulting_inventory_value,
            activity_id=entry.activity_id,
            reservation_id=entry.reservation_id,
            note=entry.note,
            created_at=entry.created_at,
        )


class ReceiveStockResponse(BaseModel):
    """Response for stock receive operation."""

    inventory_item: InventoryItemResponse
    movement: StockMovementResponse


class IssueStockResponse(BaseModel):
    """Response for stock issue operation."""

    inventory_item: InventoryItemResponse
    movement: StockMovementResponse


class InventoryStatusResponse(BaseModel):
    """Paginated inventory status response."""

    items: list[InventoryItemResponse]
    total: int
