"""
Movement service.

Validates and posts ledger entries. Each posting updates the item's stock,
cost and value and appends exactly one MovementEntry in the same transaction.
"""

from dataclasses import dataclass

from src.config import get_logger, log_context
from src.core.entities.events import EventType, InventoryEvent
from src.core.entities.inventory import (
    InventoryItem,
    ItemKind,
    ItemStatus,
    MovementEntry,
    MovementQuery,
    MovementType,
    ReconciliationResult,
    utcnow,
)
from src.core.exceptions import (
    InsufficientStockError,
    InvalidReferenceError,
    InvalidStateError,
    InvalidTransferError,
    ItemNotFoundError,
    MovementNotFoundError,
    ValidationError,
)
from src.core.interfaces.unit_of_work import ITransaction
from src.core.services.costing import weighted_average_cost
from src.core.services.transactional import TransactionalService

logger = get_logger(__name__)

# Float noise tolerated when comparing quantities
QUANTITY_EPSILON = 1e-9

_LIFECYCLE_EVENTS = {
    MovementType.DELETE: EventType.ITEM_DELETED,
    MovementType.RESTORE: EventType.ITEM_RESTORED,
}


@dataclass
class MovementCommand:
    """A requested stock change, before validation."""

    type: MovementType
    actor_id: int
    usage_qty: float = 0.0
    packaging_qty: float | None = None
    unit_cost: float | None = None
    note: str | None = None
    activity_id: int | None = None
    source_warehouse_id: int | None = None
    dest_warehouse_id: int | None = None
    reservation_id: int | None = None


def parse_movement_type(value: MovementType | str) -> MovementType:
    """Coerce a movement type, rejecting unknown values."""
    if isinstance(value, MovementType):
        return value
    try:
        return MovementType(str(value).upper())
    except ValueError:
        raise ValidationError("type", "unknown movement type", value) from None


def consumable_status(stock_usage: float, free_usage: float, min_stock: float) -> ItemStatus:
    """Stock status of a consumable."""
    if stock_usage <= QUANTITY_EPSILON:
        return ItemStatus.OUT_OF_STOCK
    if free_usage <= min_stock:
        return ItemStatus.LOW_STOCK
    return ItemStatus.AVAILABLE


def movement_event(entry: MovementEntry) -> InventoryEvent:
    return InventoryEvent(
        type=EventType.MOVEMENT_POSTED,
        item_id=entry.item_id,
        payload=entry.model_dump(mode="json"),
    )


class MovementService(TransactionalService):
    """
    Posts stock movements.

    Other services post movements inside their own transactions through
    prepare() and record(); post_movement() is the public entry point.
    """

    async def post_movement(
        self,
        item_id: int,
        movement_type: MovementType | str,
        usage_qty: float,
        actor_id: int,
        packaging_qty: float | None = None,
        unit_cost: float | None = None,
        note: str | None = None,
        activity_id: int | None = None,
        source_warehouse_id: int | None = None,
        dest_warehouse_id: int | None = None,
    ) -> MovementEntry:
        """
        Validate and post one movement.

        Raises:
            ItemNotFoundError: Item missing or soft-deleted
            InsufficientStockError: Decrease exceeds available stock
            InvalidTransferError: Bad warehouse pairing
            InvalidStateError: DELETE/RESTORE on the wrong lifecycle state
            ValidationError: Malformed quantity or type
        """
        command = MovementCommand(
            type=parse_movement_type(movement_type),
            actor_id=actor_id,
            usage_qty=usage_qty,
            packaging_qty=packaging_qty,
            unit_cost=unit_cost,
            note=note,
            activity_id=activity_id,
            source_warehouse_id=source_warehouse_id,
            dest_warehouse_id=dest_warehouse_id,
        )
        if command.type is MovementType.RESERVATION_USE:
            raise ValidationError(
                "type", "reservation use is posted by confirming a reservation", command.type.value
            )
        self.validate_command(command)

        async def operation(tx: ITransaction) -> MovementEntry:
            item = await tx.items.get_item(item_id, include_deleted=True)
            item = self._check_lifecycle(item_id, item, command.type)
            entry, _ = await self.apply(tx, item, command)
            return entry

        with log_context(item_id=item_id, movement_type=command.type.value):
            entry = await self._in_transaction(operation)

        events = [movement_event(entry)]
        if entry.type in _LIFECYCLE_EVENTS:
            events.append(InventoryEvent(type=_LIFECYCLE_EVENTS[entry.type], item_id=entry.item_id))
        await self._publish(*events)
        return entry

    async def consume_supply(
        self,
        item_id: int,
        usage_qty: float,
        activity_id: int | None,
        actor_id: int,
        note: str | None = None,
    ) -> MovementEntry:
        """Consume a supply at its current unit cost on behalf of an activity."""
        return await self.post_movement(
            item_id,
            MovementType.CONSUME,
            usage_qty,
            actor_id,
            note=note,
            activity_id=activity_id,
        )

    @staticmethod
    def validate_command(command: MovementCommand) -> None:
        t = command.type
        if t is MovementType.REGISTER:
            if command.usage_qty < 0:
                raise ValidationError("usage_qty", "must not be negative", command.usage_qty)
        elif t.is_inbound or t.is_outbound:
            if command.usage_qty <= 0:
                raise ValidationError("usage_qty", "must be greater than zero", command.usage_qty)
        elif t is MovementType.ADJUSTMENT:
            if command.usage_qty == 0:
                raise ValidationError("usage_qty", "adjustment must not be zero", command.usage_qty)
        if command.packaging_qty is not None and command.packaging_qty < 0:
            raise ValidationError("packaging_qty", "must not be negative", command.packaging_qty)
        if command.unit_cost is not None and command.unit_cost < 0:
            raise ValidationError("unit_cost", "must not be negative", command.unit_cost)

    @staticmethod
    def _check_lifecycle(
        item_id: int, item: InventoryItem | None, movement_type: MovementType
    ) -> InventoryItem:
        if item is None:
            raise ItemNotFoundError(item_id)
        if item.is_deleted:
            if movement_type is MovementType.DELETE:
                raise InvalidStateError("item is already deleted", item_id=item_id)
            if movement_type is not MovementType.RESTORE:
                raise ItemNotFoundError(item_id)
        elif movement_type is MovementType.RESTORE:
            raise InvalidStateError("item is not deleted", item_id=item_id)
        return item

    async def apply(
        self, tx: ITransaction, item: InventoryItem, command: MovementCommand
    ) -> tuple[MovementEntry, InventoryItem]:
        """Apply a validated command to a loaded item and persist both."""
        entry = await self.prepare(tx, item, command)
        return await self.record(tx, item, entry)

    async def prepare(
        self, tx: ITransaction, item: InventoryItem, command: MovementCommand
    ) -> MovementEntry:
        """
        Mutate the in-memory item for a command and build its ledger entry.

        Nothing is written; call record() to persist.
        """
        t = command.type
        qty = command.usage_qty if t.changes_stock else 0.0
        entry_cost = item.unit_cost_usage

        if t.is_inbound:
            incoming_cost = command.unit_cost or 0.0
            item.unit_cost_usage = weighted_average_cost(
                item.stock_usage, item.unit_cost_usage, qty, incoming_cost
            )
            item.stock_usage += qty
            if incoming_cost > 0:
                entry_cost = incoming_cost

        elif t.is_outbound or (t is MovementType.ADJUSTMENT and qty < 0):
            self._check_sufficient(item, t, abs(qty), command.packaging_qty)
            item.stock_usage = max(0.0, item.stock_usage - abs(qty))

        elif t is MovementType.ADJUSTMENT:
            item.stock_usage += qty

        elif t is MovementType.TRANSFER:
            await self._check_transfer(tx, item, command)
            item.warehouse_id = command.dest_warehouse_id

        elif t is MovementType.DELETE:
            active = await tx.reservations.count_active_for_item(item.id)
            if active:
                raise InvalidStateError(
                    "item has active reservations", item_id=item.id, active=active
                )
            item.mark_deleted()

        elif t is MovementType.RESTORE:
            item.mark_restored()

        if t.changes_stock:
            item.stock_packaging = item.stock_usage / item.conversion_factor
            if item.item_kind is ItemKind.CONSUMABLE:
                item.status = consumable_status(
                    item.stock_usage, item.available_usage, item.min_stock
                )
        item.recompute_inventory_value()

        packaging_qty = command.packaging_qty
        if packaging_qty is None:
            packaging_qty = abs(qty) / item.conversion_factor

        return MovementEntry(
            item_id=item.id,
            type=t,
            usage_qty=qty,
            packaging_qty=packaging_qty,
            unit_cost_usage=entry_cost,
            total_cost=abs(qty) * entry_cost,
            resulting_inventory_value=item.inventory_value,
            source_warehouse_id=command.source_warehouse_id if t is MovementType.TRANSFER else None,
            dest_warehouse_id=command.dest_warehouse_id if t is MovementType.TRANSFER else None,
            activity_id=command.activity_id,
            reservation_id=command.reservation_id,
            actor_id=command.actor_id,
            note=command.note,
            created_at=utcnow(),
        )

    async def record(
        self, tx: ITransaction, item: InventoryItem, entry: MovementEntry
    ) -> tuple[MovementEntry, InventoryItem]:
        item = await tx.items.update_item(item)
        entry = await tx.movements.append(entry)
        logger.info(
            "movement_posted",
            movement_id=entry.id,
            item_id=item.id,
            movement_type=entry.type.value,
            usage_qty=entry.usage_qty,
            stock_usage=item.stock_usage,
            unit_cost_usage=item.unit_cost_usage,
        )
        return entry, item

    @staticmethod
    def _check_sufficient(
        item: InventoryItem,
        movement_type: MovementType,
        amount: float,
        packaging_qty: float | None,
    ) -> None:
        # Reserved stock backs a reservation use; everything else draws on free stock
        if movement_type is MovementType.RESERVATION_USE:
            available = item.stock_usage
        else:
            available = item.available_usage
        if amount - available > QUANTITY_EPSILON:
            raise InsufficientStockError(item.id, amount, max(available, 0.0), item.usage_unit)
        if packaging_qty is not None and packaging_qty - item.stock_packaging > QUANTITY_EPSILON:
            raise InsufficientStockError(
                item.id, packaging_qty, item.stock_packaging, item.packaging_unit
            )

    @staticmethod
    async def _check_transfer(
        tx: ITransaction, item: InventoryItem, command: MovementCommand
    ) -> None:
        source = command.source_warehouse_id
        dest = command.dest_warehouse_id
        if source is None or dest is None:
            raise InvalidTransferError("source and destination warehouses are required")
        if source == dest:
            raise InvalidTransferError("source and destination must differ", warehouse_id=source)
        if item.warehouse_id != source:
            raise InvalidTransferError(
                "item is not in the source warehouse",
                item_id=item.id,
                current_warehouse_id=item.warehouse_id,
                source_warehouse_id=source,
            )
        if not await tx.catalog.warehouse_exists(dest):
            raise InvalidReferenceError("warehouse", dest)

    # Queries

    async def get_movement(self, movement_id: int) -> MovementEntry:
        async with self.uow.read() as tx:
            entry = await tx.movements.get(movement_id)
        if entry is None:
            raise MovementNotFoundError(movement_id)
        return entry

    async def list_movements(
        self, item_id: int, limit: int = 100, offset: int = 0
    ) -> list[MovementEntry]:
        """Movements of an item, newest first. Kept after the item is soft-deleted."""
        async with self.uow.read() as tx:
            return await tx.movements.list_for_item(item_id, limit=limit, offset=offset)

    async def search_movements(self, query: MovementQuery) -> list[MovementEntry]:
        async with self.uow.read() as tx:
            return await tx.movements.search(query)

    async def has_movements(self, item_id: int) -> bool:
        async with self.uow.read() as tx:
            return await tx.movements.count_for_item(item_id) > 0

    async def replay_stock(self, item_id: int) -> float:
        """Recompute an item's stock from its ledger, starting at zero."""
        async with self.uow.read() as tx:
            entries = await tx.movements.list_for_replay(item_id)
        return sum((entry.stock_effect for entry in entries), 0.0)

    async def reconcile(self, item_id: int) -> ReconciliationResult:
        async with self.uow.read() as tx:
            item = await tx.items.get_item(item_id, include_deleted=True)
            if item is None:
                raise ItemNotFoundError(item_id)
            entries = await tx.movements.list_for_replay(item_id)

        result = ReconciliationResult(
            item_id=item_id,
            cached_stock=item.stock_usage,
            ledger_stock=sum((entry.stock_effect for entry in entries), 0.0),
            entries=len(entries),
        )
        if not result.consistent:
            logger.warning(
                "ledger_mismatch",
                item_id=item_id,
                cached_stock=result.cached_stock,
                ledger_stock=result.ledger_stock,
            )
        return result
