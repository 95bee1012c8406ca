"""
Inventory service.

Owns item creation, editing and the fixed-asset lifecycle, validates catalog
references, and delegates every stock change to the movement service.
"""

from collections.abc import Callable
from datetime import date

from src.config import get_logger
from src.core.entities.events import EventType, InventoryEvent
from src.core.entities.inventory import (
    FixedAssetDraft,
    InventoryItem,
    ItemDraft,
    ItemKind,
    ItemPatch,
    ItemQuery,
    ItemStatus,
    MovementEntry,
    MovementType,
    utcnow,
)
from src.core.exceptions import (
    InvalidReferenceError,
    InvalidStateError,
    ItemNotFoundError,
    ValidationError,
)
from src.core.interfaces.events import IEventPublisher
from src.core.interfaces.unit_of_work import ITransaction, IUnitOfWork
from src.core.services.conversion import resolve_conversion
from src.core.services.movement_service import (
    MovementCommand,
    MovementService,
    movement_event,
)
from src.core.services.transactional import RetryPolicy, TransactionalService

logger = get_logger(__name__)

FIXED_ASSET_PACKAGING_UNIT = "unit"
FIXED_ASSET_USAGE_UNIT = "hour"

# Patch fields that change how packages convert to usage units
_CONVERSION_FIELDS = {"material_kind", "packaging_unit", "packaging_quantity"}
_REQUIRED_FIELDS = {
    "name",
    "material_kind",
    "packaging_unit",
    "packaging_quantity",
    "min_stock",
    "warehouse_id",
    "category_id",
}


def item_event(event_type: EventType, item: InventoryItem) -> InventoryEvent:
    return InventoryEvent(
        type=event_type,
        item_id=item.id,
        payload=item.model_dump(mode="json"),
    )


class InventoryService(TransactionalService):
    """Item lifecycle and catalog-reference validation."""

    def __init__(
        self,
        uow: IUnitOfWork,
        movements: MovementService,
        publisher: IEventPublisher | None = None,
        retry_policy: RetryPolicy | None = None,
    ):
        super().__init__(uow, publisher, retry_policy)
        self.movements = movements

    async def _check_references(
        self,
        tx: ITransaction,
        warehouse_id: int | None = None,
        category_id: int | None = None,
        supplier_id: int | None = None,
    ) -> None:
        if warehouse_id is not None and not await tx.catalog.warehouse_exists(warehouse_id):
            raise InvalidReferenceError("warehouse", warehouse_id)
        if category_id is not None and not await tx.catalog.category_exists(category_id):
            raise InvalidReferenceError("category", category_id)
        if supplier_id is not None and not await tx.catalog.supplier_exists(supplier_id):
            raise InvalidReferenceError("supplier", supplier_id)

    # Creation

    async def create_item(self, draft: ItemDraft, actor_id: int) -> InventoryItem:
        """
        Register an item with its initial stock.

        The item is stored empty and the initial stock is posted as one
        REGISTER entry, so replaying the ledger from zero reproduces it.

        Raises:
            InvalidReferenceError: Unknown warehouse, category or supplier
        """
        if draft.conversion_factor is not None:
            factor = draft.conversion_factor
            usage_unit = resolve_conversion(draft.material_kind, draft.packaging_unit, 1).usage_unit
        else:
            conversion = resolve_conversion(
                draft.material_kind, draft.packaging_unit, draft.packaging_quantity
            )
            factor = conversion.factor
            usage_unit = conversion.usage_unit

        unit_cost = draft.unit_price_packaging / factor
        initial_usage = draft.initial_stock_packaging * factor

        async def operation(tx: ITransaction) -> tuple[InventoryItem, MovementEntry]:
            await self._check_references(
                tx, draft.warehouse_id, draft.category_id, draft.supplier_id
            )
            item = await tx.items.create_item(
                InventoryItem(
                    name=draft.name,
                    description=draft.description,
                    material_kind=draft.material_kind,
                    item_kind=draft.item_kind,
                    packaging_type=draft.packaging_type,
                    packaging_unit=draft.packaging_unit.strip().lower(),
                    packaging_quantity=draft.packaging_quantity,
                    usage_unit=usage_unit,
                    conversion_factor=factor,
                    unit_cost_usage=unit_cost,
                    min_stock=draft.min_stock,
                    warehouse_id=draft.warehouse_id,
                    category_id=draft.category_id,
                    supplier_id=draft.supplier_id,
                    acquisition_cost=draft.acquisition_cost,
                    residual_value=draft.residual_value,
                    useful_life_hours=draft.useful_life_hours,
                    acquired_on=draft.acquired_on,
                    status=ItemStatus.OUT_OF_STOCK
                    if draft.item_kind is ItemKind.CONSUMABLE
                    else ItemStatus.AVAILABLE,
                    created_by=actor_id,
                )
            )
            entry, item = await self.movements.apply(
                tx,
                item,
                MovementCommand(
                    type=MovementType.REGISTER,
                    actor_id=actor_id,
                    usage_qty=initial_usage,
                    packaging_qty=draft.initial_stock_packaging,
                    unit_cost=unit_cost,
                    note="Initial stock",
                ),
            )
            return item, entry

        item, entry = await self._in_transaction(operation)
        await self._publish(item_event(EventType.ITEM_CREATED, item), movement_event(entry))
        return item

    async def create_fixed_asset(
        self, draft: FixedAssetDraft, actor_id: int, count: int = 1
    ) -> list[InventoryItem]:
        """
        Register count identical unit assets, each with stock 1.

        Names get a " (n)" suffix when more than one is created.
        """
        if count < 1:
            raise ValidationError("count", "must be at least 1", count)

        async def operation(tx: ITransaction) -> list[tuple[InventoryItem, MovementEntry]]:
            await self._check_references(
                tx, draft.warehouse_id, draft.category_id, draft.supplier_id
            )
            created = []
            for i in range(count):
                name = f"{draft.name} ({i + 1})" if count > 1 else draft.name
                item = await tx.items.create_item(
                    InventoryItem(
                        name=name,
                        description=draft.description,
                        material_kind=draft.material_kind,
                        item_kind=ItemKind.FIXED_ASSET,
                        packaging_type=draft.packaging_type,
                        packaging_unit=FIXED_ASSET_PACKAGING_UNIT,
                        packaging_quantity=1.0,
                        usage_unit=FIXED_ASSET_USAGE_UNIT,
                        conversion_factor=1.0,
                        unit_cost_usage=draft.acquisition_cost,
                        warehouse_id=draft.warehouse_id,
                        category_id=draft.category_id,
                        supplier_id=draft.supplier_id,
                        acquisition_cost=draft.acquisition_cost,
                        residual_value=draft.residual_value,
                        useful_life_hours=draft.useful_life_hours,
                        acquired_on=draft.acquired_on or date.today(),
                        status=ItemStatus.AVAILABLE,
                        created_by=actor_id,
                    )
                )
                entry, item = await self.movements.apply(
                    tx,
                    item,
                    MovementCommand(
                        type=MovementType.REGISTER,
                        actor_id=actor_id,
                        usage_qty=1.0,
                        packaging_qty=1.0,
                        unit_cost=draft.acquisition_cost,
                        note="Fixed asset registered",
                    ),
                )
                created.append((item, entry))
            return created

        created = await self._in_transaction(operation)
        logger.info("fixed_assets_created", name=draft.name, count=count)
        for item, entry in created:
            await self._publish(item_event(EventType.ITEM_CREATED, item), movement_event(entry))
        return [item for item, _ in created]

    # Editing

    async def update_item(
        self, item_id: int, patch: ItemPatch, actor_id: int
    ) -> InventoryItem:
        """
        Apply a patch of descriptive fields.

        A packaging change re-derives the conversion factor. A warehouse
        change is posted as a TRANSFER entry in the same transaction.

        Raises:
            ItemNotFoundError: Item missing or soft-deleted
            InvalidReferenceError: Unknown warehouse, category or supplier
            InvalidStateError: Material kind changed on an item holding stock
        """
        changes = patch.model_dump(exclude_unset=True)
        for field in _REQUIRED_FIELDS:
            if field in changes and changes[field] is None:
                raise ValidationError(field, "cannot be cleared")
        new_warehouse = changes.pop("warehouse_id", None)

        async def operation(
            tx: ITransaction,
        ) -> tuple[InventoryItem, MovementEntry | None]:
            item = await tx.items.get_item(item_id)
            if item is None:
                raise ItemNotFoundError(item_id)

            await self._check_references(
                tx,
                category_id=changes.get("category_id"),
                supplier_id=changes.get("supplier_id"),
            )

            kind = changes.get("material_kind")
            if kind is not None and kind != item.material_kind and item.stock_usage > 0:
                # Stock and unit cost are held in the old usage unit
                raise InvalidStateError(
                    "material kind cannot change while the item holds stock",
                    item_id=item_id,
                    stock_usage=item.stock_usage,
                )

            conversion_changed = any(
                field in changes and changes[field] != getattr(item, field)
                for field in _CONVERSION_FIELDS
            )
            for field, value in changes.items():
                setattr(item, field, value)

            if conversion_changed and item.item_kind is ItemKind.CONSUMABLE:
                conversion = resolve_conversion(
                    item.material_kind, item.packaging_unit, item.packaging_quantity
                )
                item.packaging_unit = item.packaging_unit.strip().lower()
                item.conversion_factor = conversion.factor
                item.usage_unit = conversion.usage_unit
                item.stock_packaging = item.stock_usage / item.conversion_factor
            item.recompute_inventory_value()

            if new_warehouse is not None and new_warehouse != item.warehouse_id:
                entry, item = await self.movements.apply(
                    tx,
                    item,
                    MovementCommand(
                        type=MovementType.TRANSFER,
                        actor_id=actor_id,
                        source_warehouse_id=item.warehouse_id,
                        dest_warehouse_id=new_warehouse,
                        note="Warehouse changed",
                    ),
                )
                return item, entry

            return await tx.items.update_item(item), None

        item, entry = await self._in_transaction(operation)
        logger.info("inventory_item_patched", item_id=item_id, fields=sorted(changes))
        events = [item_event(EventType.ITEM_UPDATED, item)]
        if entry is not None:
            events.append(movement_event(entry))
        await self._publish(*events)
        return item

    async def soft_delete_item(
        self, item_id: int, actor_id: int, note: str | None = None
    ) -> MovementEntry:
        """
        Soft-delete an item by posting a DELETE entry.

        Raises:
            InvalidStateError: Item already deleted or holding active reservations
        """
        return await self.movements.post_movement(
            item_id, MovementType.DELETE, 0.0, actor_id, note=note
        )

    async def restore_item(
        self, item_id: int, actor_id: int, note: str | None = None
    ) -> MovementEntry:
        """Undo a soft delete by posting a RESTORE entry."""
        return await self.movements.post_movement(
            item_id, MovementType.RESTORE, 0.0, actor_id, note=note
        )

    # Fixed-asset lifecycle

    async def _change_asset(
        self, item_id: int, mutate: Callable[[InventoryItem], None]
    ) -> InventoryItem:
        async def operation(tx: ITransaction) -> InventoryItem:
            item = await tx.items.get_item(item_id)
            if item is None:
                raise ItemNotFoundError(item_id)
            if item.item_kind is not ItemKind.FIXED_ASSET:
                raise ValidationError("item_id", "operation applies to fixed assets only", item_id)
            mutate(item)
            item.recompute_inventory_value()
            return await tx.items.update_item(item)

        item = await self._in_transaction(operation)
        await self._publish(item_event(EventType.ITEM_UPDATED, item))
        return item

    async def start_maintenance(
        self,
        item_id: int,
        cost: float | None = None,
        description: str | None = None,
    ) -> InventoryItem:
        """Send an asset to maintenance. Reserved or decommissioned assets are refused."""

        def mutate(item: InventoryItem) -> None:
            if item.status in (
                ItemStatus.RESERVED,
                ItemStatus.DECOMMISSIONED,
                ItemStatus.MAINTENANCE,
            ):
                raise InvalidStateError(
                    f"asset cannot enter maintenance from {item.status.value}",
                    item_id=item.id,
                )
            item.status = ItemStatus.MAINTENANCE
            item.last_maintenance_on = date.today()

        item = await self._change_asset(item_id, mutate)
        logger.info(
            "maintenance_started",
            item_id=item_id,
            cost=cost,
            description=description,
        )
        return item

    async def finish_maintenance(self, item_id: int) -> InventoryItem:
        def mutate(item: InventoryItem) -> None:
            if item.status is not ItemStatus.MAINTENANCE:
                raise InvalidStateError("asset is not in maintenance", item_id=item.id)
            item.status = ItemStatus.AVAILABLE

        item = await self._change_asset(item_id, mutate)
        logger.info("maintenance_finished", item_id=item_id)
        return item

    async def decommission_asset(self, item_id: int, reason: str) -> InventoryItem:
        """Write an asset off manually."""
        if not reason or not reason.strip():
            raise ValidationError("reason", "a decommission reason is required", reason)

        def mutate(item: InventoryItem) -> None:
            if item.status in (ItemStatus.DECOMMISSIONED, ItemStatus.RESERVED):
                raise InvalidStateError(
                    f"asset cannot be decommissioned from {item.status.value}",
                    item_id=item.id,
                )
            item.status = ItemStatus.DECOMMISSIONED
            item.decommissioned_at = utcnow()
            item.decommission_reason = reason.strip()

        item = await self._change_asset(item_id, mutate)
        logger.info("asset_decommissioned", item_id=item_id, reason=reason)
        return item

    # Queries

    async def get_item(self, item_id: int, include_deleted: bool = False) -> InventoryItem:
        async with self.uow.read() as tx:
            item = await tx.items.get_item(item_id, include_deleted=include_deleted)
        if item is None:
            raise ItemNotFoundError(item_id)
        return item

    async def list_items(self, query: ItemQuery | None = None) -> list[InventoryItem]:
        async with self.uow.read() as tx:
            return await tx.items.list_items(query or ItemQuery())

    async def stock_alerts(self, limit: int = 100, offset: int = 0) -> list[InventoryItem]:
        """Consumables whose available stock is at or below their minimum."""
        async with self.uow.read() as tx:
            return await tx.items.list_low_stock(limit=limit, offset=offset)
