"""Inventory domain entities.

Stock lives in usage units (grams for solids, cm3 for liquids). The item row
is a cache of the movement ledger: every stock change is a MovementEntry.
"""

from datetime import UTC, date, datetime
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(UTC)


class MaterialKind(str, Enum):
    """Physical state of a material, which fixes its usage unit."""

    SOLID = "solid"
    LIQUID = "liquid"


class ItemKind(str, Enum):
    """Consumable supply or depreciable fixed asset."""

    CONSUMABLE = "CONSUMABLE"
    FIXED_ASSET = "FIXED_ASSET"


class ItemStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    LOW_STOCK = "LOW_STOCK"
    OUT_OF_STOCK = "OUT_OF_STOCK"
    IN_USE = "IN_USE"
    RESERVED = "RESERVED"
    MAINTENANCE = "MAINTENANCE"
    DECOMMISSIONED = "DECOMMISSIONED"


class MovementType(str, Enum):
    """Closed set of ledger entry types."""

    REGISTER = "REGISTER"
    RECEIPT = "RECEIPT"
    CONSUME = "CONSUME"
    ISSUE = "ISSUE"
    RESERVATION_USE = "RESERVATION_USE"
    ADJUSTMENT = "ADJUSTMENT"
    TRANSFER = "TRANSFER"
    DELETE = "DELETE"
    RESTORE = "RESTORE"

    @property
    def is_inbound(self) -> bool:
        """Entry adds stock and may re-price it."""
        return self in (MovementType.REGISTER, MovementType.RECEIPT)

    @property
    def is_outbound(self) -> bool:
        """Entry removes stock at the current unit cost."""
        return self in (
            MovementType.CONSUME,
            MovementType.ISSUE,
            MovementType.RESERVATION_USE,
        )

    @property
    def changes_stock(self) -> bool:
        return self.is_inbound or self.is_outbound or self is MovementType.ADJUSTMENT

    def signed_quantity(self, usage_qty: float) -> float:
        """Effect of an entry of this type on stock_usage."""
        if self.is_inbound:
            return usage_qty
        if self.is_outbound:
            return -usage_qty
        if self is MovementType.ADJUSTMENT:
            return usage_qty  # may be negative
        return 0.0


class ReservationStatus(str, Enum):
    """ACTIVE -> RELEASED | USED, both terminal."""

    ACTIVE = "ACTIVE"
    RELEASED = "RELEASED"
    USED = "USED"


class ActiveState(BaseModel):
    kind: Literal["active"] = "active"


class DeletedState(BaseModel):
    kind: Literal["deleted"] = "deleted"
    at: datetime


ItemLifecycle = Annotated[ActiveState | DeletedState, Field(discriminator="kind")]


class InventoryItem(BaseModel):
    """A consumable supply or a fixed asset, with its current stock and value."""

    id: int | None = None
    name: str
    description: str | None = None

    # Classification
    material_kind: MaterialKind = MaterialKind.SOLID
    item_kind: ItemKind = ItemKind.CONSUMABLE

    # Packaging
    packaging_type: str | None = None  # e.g. sack, drum, bottle
    packaging_unit: str = "g"
    packaging_quantity: float = 1.0
    usage_unit: str = "g"
    conversion_factor: float = 1.0

    # Stock, in usage units
    stock_usage: float = 0.0
    stock_packaging: float = 0.0
    reserved_usage: float = 0.0
    min_stock: float = 0.0

    # Valuation
    unit_cost_usage: float = 0.0
    inventory_value: float = 0.0

    # Catalog references
    warehouse_id: int
    category_id: int
    supplier_id: int | None = None

    # Fixed-asset fields
    acquisition_cost: float | None = None
    residual_value: float | None = None
    useful_life_hours: float | None = None
    hours_used: float = 0.0
    accumulated_depreciation: float = 0.0
    acquired_on: date | None = None
    last_maintenance_on: date | None = None
    decommissioned_at: datetime | None = None
    decommission_reason: str | None = None

    status: ItemStatus = ItemStatus.AVAILABLE
    lifecycle: ItemLifecycle = Field(default_factory=ActiveState)

    created_by: int | None = None
    version: int = 0
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def is_deleted(self) -> bool:
        return isinstance(self.lifecycle, DeletedState)

    @property
    def deleted_at(self) -> datetime | None:
        if isinstance(self.lifecycle, DeletedState):
            return self.lifecycle.at
        return None

    @property
    def is_fixed_asset(self) -> bool:
        return self.item_kind is ItemKind.FIXED_ASSET

    @property
    def available_usage(self) -> float:
        """Stock that is neither consumed nor held by a reservation."""
        return self.stock_usage - self.reserved_usage

    @property
    def unit_cost_packaging(self) -> float:
        return self.unit_cost_usage * self.conversion_factor

    @property
    def book_value(self) -> float:
        """Acquisition cost less accumulated depreciation, floored at zero.

        Items without an acquisition cost are valued at stock x unit cost.
        """
        if self.acquisition_cost is None:
            return self.stock_usage * self.unit_cost_usage
        return max(0.0, self.acquisition_cost - self.accumulated_depreciation)

    def recompute_inventory_value(self) -> float:
        if self.is_fixed_asset and self.acquisition_cost is not None:
            self.inventory_value = self.book_value
        else:
            self.inventory_value = self.stock_usage * self.unit_cost_usage
        return self.inventory_value

    def mark_deleted(self, at: datetime | None = None) -> None:
        self.lifecycle = DeletedState(at=at or utcnow())

    def mark_restored(self) -> None:
        self.lifecycle = ActiveState()


class MovementEntry(BaseModel):
    """Immutable ledger fact: stock of an item changed by a quantity, for a reason."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    item_id: int
    type: MovementType
    usage_qty: float
    packaging_qty: float = 0.0
    unit_cost_usage: float = 0.0
    total_cost: float = 0.0
    resulting_inventory_value: float = 0.0
    source_warehouse_id: int | None = None
    dest_warehouse_id: int | None = None
    activity_id: int | None = None
    reservation_id: int | None = None
    actor_id: int
    note: str | None = None
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def stock_effect(self) -> float:
        return self.type.signed_quantity(self.usage_qty)


class Reservation(BaseModel):
    """A hold on stock placed before it is definitely consumed."""

    id: int | None = None
    item_id: int
    quantity: float
    reason: str = ""
    status: ReservationStatus = ReservationStatus.ACTIVE
    actor_id: int
    activity_id: int | None = None
    reserved_at: datetime = Field(default_factory=utcnow)
    closed_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status is ReservationStatus.ACTIVE


class AssetUsageRecord(BaseModel):
    """One registered usage of a fixed asset and the depreciation it generated."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    item_id: int
    hours: float
    depreciation_generated: float
    book_value_before: float
    book_value_after: float
    activity_id: int | None = None
    actor_id: int | None = None
    created_at: datetime = Field(default_factory=utcnow)


class ItemQuery(BaseModel):
    """Filters for listing inventory items."""

    item_kind: ItemKind | None = None
    warehouse_id: int | None = None
    category_id: int | None = None
    supplier_id: int | None = None
    text: str | None = None
    deleted_only: bool = False
    limit: int = 100
    offset: int = 0


class MovementQuery(BaseModel):
    """Filters for searching the ledger."""

    item_id: int | None = None
    type: MovementType | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    include_deleted_items: bool = False
    limit: int = 100
    offset: int = 0


class ItemDraft(BaseModel):
    """Input for registering a new consumable supply."""

    name: str = Field(..., min_length=1)
    description: str | None = None
    material_kind: MaterialKind = MaterialKind.SOLID
    item_kind: ItemKind = ItemKind.CONSUMABLE
    packaging_type: str | None = None
    packaging_unit: str = "g"
    packaging_quantity: float = Field(default=1.0, gt=0)
    conversion_factor: float | None = Field(default=None, gt=0)
    initial_stock_packaging: float = Field(default=0.0, ge=0)
    unit_price_packaging: float = Field(default=0.0, ge=0)
    min_stock: float = Field(default=0.0, ge=0)
    warehouse_id: int
    category_id: int
    supplier_id: int | None = None
    acquisition_cost: float | None = Field(default=None, ge=0)
    residual_value: float | None = Field(default=None, ge=0)
    useful_life_hours: float | None = Field(default=None, gt=0)
    acquired_on: date | None = None


class FixedAssetDraft(BaseModel):
    """Input for registering one or more identical fixed assets."""

    name: str = Field(..., min_length=1)
    description: str | None = None
    material_kind: MaterialKind = MaterialKind.SOLID
    packaging_type: str | None = None
    acquisition_cost: float = Field(..., ge=0)
    residual_value: float = Field(default=0.0, ge=0)
    useful_life_hours: float = Field(..., gt=0)
    acquired_on: date | None = None
    warehouse_id: int
    category_id: int
    supplier_id: int | None = None


class ItemPatch(BaseModel):
    """Editable item fields. Stock and valuation change only through movements."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    material_kind: MaterialKind | None = None
    packaging_type: str | None = None
    packaging_unit: str | None = None
    packaging_quantity: float | None = Field(default=None, gt=0)
    min_stock: float | None = Field(default=None, ge=0)
    warehouse_id: int | None = None
    category_id: int | None = None
    supplier_id: int | None = None
    acquisition_cost: float | None = Field(default=None, ge=0)
    residual_value: float | None = Field(default=None, ge=0)
    useful_life_hours: float | None = Field(default=None, gt=0)
    acquired_on: date | None = None


class DepreciationResult(BaseModel):
    """Outcome of one registered asset usage."""

    item_id: int
    hours: float
    generated: float
    accumulated: float
    book_value: float
    hours_used: float
    status: ItemStatus
    usage_record_id: int | None = None


class ReconciliationResult(BaseModel):
    """Cached stock compared with the stock replayed from the ledger."""

    item_id: int
    cached_stock: float
    ledger_stock: float
    entries: int

    @property
    def difference(self) -> float:
        return self.cached_stock - self.ledger_stock

    @property
    def consistent(self) -> bool:
        return abs(self.difference) < 1e-9
