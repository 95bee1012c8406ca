"""
Reservation service.

Two-phase stock allocation: reserve() places a hold, then exactly one of
release() or use() closes it. ACTIVE -> RELEASED | USED, both terminal.
"""

from src.config import get_logger, log_context
from src.core.entities.events import EventType, InventoryEvent
from src.core.entities.inventory import (
    InventoryItem,
    ItemKind,
    ItemStatus,
    MovementEntry,
    MovementType,
    Reservation,
    ReservationStatus,
    utcnow,
)
from src.core.exceptions import (
    AssetUnavailableError,
    InsufficientStockError,
    InvalidStateError,
    ItemNotFoundError,
    ReservationNotFoundError,
    ValidationError,
)
from src.core.interfaces.events import IEventPublisher
from src.core.interfaces.unit_of_work import ITransaction, IUnitOfWork
from src.core.services.movement_service import (
    QUANTITY_EPSILON,
    MovementCommand,
    MovementService,
    consumable_status,
    movement_event,
)
from src.core.services.transactional import RetryPolicy, TransactionalService

logger = get_logger(__name__)


class ReservationService(TransactionalService):
    """Implements the reserve -> use/release protocol."""

    def __init__(
        self,
        uow: IUnitOfWork,
        movements: MovementService,
        publisher: IEventPublisher | None = None,
        retry_policy: RetryPolicy | None = None,
    ):
        super().__init__(uow, publisher, retry_policy)
        self.movements = movements

    async def reserve(
        self,
        item_id: int,
        quantity: float,
        reason: str,
        actor_id: int,
        activity_id: int | None = None,
    ) -> Reservation:
        """
        Place a hold on stock.

        Consumables need quantity <= stock_usage - reserved_usage. Fixed
        assets must be AVAILABLE and move to RESERVED; a unique asset
        (stock 1) is held whole.

        Raises:
            ItemNotFoundError: Item missing or soft-deleted
            InsufficientStockError: Quantity exceeds the reservable balance
            AssetUnavailableError: Fixed asset is not AVAILABLE
        """
        if quantity <= 0:
            raise ValidationError("quantity", "must be greater than zero", quantity)

        async def operation(tx: ITransaction) -> Reservation:
            item = await tx.items.get_item(item_id)
            if item is None:
                raise ItemNotFoundError(item_id)

            held = self._hold(item, quantity)
            await tx.items.update_item(item)
            return await tx.reservations.create(
                Reservation(
                    item_id=item_id,
                    quantity=held,
                    reason=reason,
                    actor_id=actor_id,
                    activity_id=activity_id,
                )
            )

        with log_context(item_id=item_id):
            reservation = await self._in_transaction(operation)
        logger.info(
            "reservation_created",
            reservation_id=reservation.id,
            item_id=item_id,
            quantity=reservation.quantity,
            activity_id=activity_id,
        )
        await self._publish(
            InventoryEvent(
                type=EventType.RESERVATION_CREATED,
                item_id=item_id,
                payload=reservation.model_dump(mode="json"),
            )
        )
        return reservation

    @staticmethod
    def _hold(item: InventoryItem, quantity: float) -> float:
        """Apply a hold to the in-memory item. Returns the quantity held."""
        if item.item_kind is ItemKind.FIXED_ASSET:
            if item.status is not ItemStatus.AVAILABLE:
                raise AssetUnavailableError(item.id, item.status.value)
            item.status = ItemStatus.RESERVED
            if item.stock_usage == 1:
                item.reserved_usage = 1.0
                return 1.0

        available = item.available_usage
        if quantity - available > QUANTITY_EPSILON:
            raise InsufficientStockError(item.id, quantity, max(available, 0.0), item.usage_unit)
        item.reserved_usage += quantity

        if item.item_kind is ItemKind.CONSUMABLE and item.available_usage <= item.min_stock:
            item.status = ItemStatus.LOW_STOCK
        return quantity

    async def _load_active(
        self, tx: ITransaction, reservation_id: int
    ) -> tuple[Reservation, InventoryItem]:
        reservation = await tx.reservations.get(reservation_id)
        if reservation is None:
            raise ReservationNotFoundError(reservation_id)
        if not reservation.is_active:
            raise InvalidStateError(
                "reservation is not active",
                reservation_id=reservation_id,
                status=reservation.status.value,
            )
        item = await tx.items.get_item(reservation.item_id, include_deleted=True)
        if item is None:
            raise ItemNotFoundError(reservation.item_id)
        return reservation, item

    async def release(self, reservation_id: int) -> Reservation:
        """
        Release an ACTIVE reservation without touching stock.

        Raises:
            ReservationNotFoundError: Unknown reservation
            InvalidStateError: Reservation already RELEASED or USED
        """

        async def operation(tx: ITransaction) -> Reservation:
            reservation, item = await self._load_active(tx, reservation_id)

            item.reserved_usage = max(0.0, item.reserved_usage - reservation.quantity)
            if item.item_kind is ItemKind.FIXED_ASSET:
                if item.status is ItemStatus.RESERVED and item.reserved_usage <= QUANTITY_EPSILON:
                    item.status = ItemStatus.AVAILABLE
            else:
                item.status = consumable_status(
                    item.stock_usage, item.available_usage, item.min_stock
                )
            await tx.items.update_item(item)

            reservation.status = ReservationStatus.RELEASED
            reservation.closed_at = utcnow()
            return await tx.reservations.update(reservation)

        with log_context(reservation_id=reservation_id):
            reservation = await self._in_transaction(operation)
        logger.info(
            "reservation_released",
            reservation_id=reservation.id,
            item_id=reservation.item_id,
            quantity=reservation.quantity,
        )
        await self._publish(
            InventoryEvent(
                type=EventType.RESERVATION_RELEASED,
                item_id=reservation.item_id,
                payload=reservation.model_dump(mode="json"),
            )
        )
        return reservation

    async def use(self, reservation_id: int) -> Reservation:
        """
        Confirm an ACTIVE reservation: stock and the hold both drop by the
        reserved quantity and one RESERVATION_USE entry is posted.

        Raises:
            ReservationNotFoundError: Unknown reservation
            InvalidStateError: Reservation already RELEASED or USED
            InsufficientStockError: Stock would go negative
        """

        async def operation(tx: ITransaction) -> tuple[Reservation, MovementEntry]:
            reservation, item = await self._load_active(tx, reservation_id)

            item.reserved_usage = max(0.0, item.reserved_usage - reservation.quantity)
            entry = await self.movements.prepare(
                tx,
                item,
                MovementCommand(
                    type=MovementType.RESERVATION_USE,
                    actor_id=reservation.actor_id,
                    usage_qty=reservation.quantity,
                    activity_id=reservation.activity_id,
                    reservation_id=reservation.id,
                    note=f"Reservation #{reservation.id} used. Reason: {reservation.reason}",
                ),
            )
            if item.item_kind is ItemKind.CONSUMABLE:
                item.status = consumable_status(item.stock_usage, item.stock_usage, item.min_stock)
            else:
                item.status = ItemStatus.IN_USE
            entry, _ = await self.movements.record(tx, item, entry)

            reservation.status = ReservationStatus.USED
            reservation.closed_at = utcnow()
            await tx.reservations.update(reservation)
            return reservation, entry

        with log_context(reservation_id=reservation_id):
            reservation, entry = await self._in_transaction(operation)
        logger.info(
            "reservation_used",
            reservation_id=reservation.id,
            item_id=reservation.item_id,
            quantity=reservation.quantity,
            movement_id=entry.id,
        )
        await self._publish(
            movement_event(entry),
            InventoryEvent(
                type=EventType.RESERVATION_USED,
                item_id=reservation.item_id,
                payload=reservation.model_dump(mode="json"),
            ),
        )
        return reservation

    # Queries

    async def get_reservation(self, reservation_id: int) -> Reservation:
        async with self.uow.read() as tx:
            reservation = await tx.reservations.get(reservation_id)
        if reservation is None:
            raise ReservationNotFoundError(reservation_id)
        return reservation

    async def list_reservations(
        self,
        status: ReservationStatus | None = None,
        item_id: int | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Reservation]:
        """Reservations, newest first."""
        async with self.uow.read() as tx:
            return await tx.reservations.list_reservations(
                status=status, item_id=item_id, limit=limit, offset=offset
            )

    async def list_by_activity(self, activity_id: int) -> list[Reservation]:
        async with self.uow.read() as tx:
            return await tx.reservations.list_by_activity(activity_id)
