"""End-to-end checks of the stock ledger against a real database."""

import asyncio

import pytest

from src.core.entities import (
    EventType,
    FixedAssetDraft,
    ItemStatus,
    MovementQuery,
    MovementType,
)
from src.core.exceptions import (
    AssetUnavailableError,
    InsufficientStockError,
    InvalidStateError,
    MovementNotFoundError,
    ReservationNotFoundError,
)
from tests.catalog import ACTOR_ID, FERTILIZER_CATEGORY, MAIN_WAREHOUSE


class TestWeightedAverageCost:
    async def test_receipt_blends_unit_cost(
        self, make_consumable, movement_service, inventory_service
    ):
        item = await make_consumable(stock=100.0, unit_price=10.0)

        entry = await movement_service.post_movement(
            item.id, MovementType.RECEIPT, 50.0, ACTOR_ID, unit_cost=16.0
        )
        item = await inventory_service.get_item(item.id)

        assert item.stock_usage == pytest.approx(150.0)
        assert item.unit_cost_usage == pytest.approx(12.0)
        assert item.inventory_value == pytest.approx(1800.0)
        assert entry.unit_cost_usage == pytest.approx(16.0)
        assert entry.resulting_inventory_value == pytest.approx(1800.0)

    async def test_free_receipt_keeps_cost(
        self, make_consumable, movement_service, inventory_service
    ):
        item = await make_consumable(stock=100.0, unit_price=10.0)

        await movement_service.post_movement(item.id, "receipt", 20.0, ACTOR_ID)
        item = await inventory_service.get_item(item.id)

        assert item.stock_usage == pytest.approx(120.0)
        assert item.unit_cost_usage == pytest.approx(10.0)


class TestInsufficientStock:
    async def test_rejected_consume_changes_nothing(
        self, make_consumable, movement_service, inventory_service
    ):
        item = await make_consumable(stock=100.0)

        with pytest.raises(InsufficientStockError) as exc_info:
            await movement_service.consume_supply(item.id, 150.0, activity_id=12, actor_id=ACTOR_ID)

        assert exc_info.value.details["available"] == pytest.approx(100.0)
        after = await inventory_service.get_item(item.id)
        assert after.stock_usage == pytest.approx(100.0)
        assert after.version == item.version
        assert len(await movement_service.list_movements(item.id)) == 1

    async def test_reserved_stock_is_not_issuable(
        self, make_consumable, movement_service, reservation_service
    ):
        item = await make_consumable(stock=100.0)
        await reservation_service.reserve(item.id, 30.0, "Spraying plot 2", ACTOR_ID)

        with pytest.raises(InsufficientStockError):
            await movement_service.post_movement(item.id, MovementType.ISSUE, 80.0, ACTOR_ID)

        entry = await movement_service.post_movement(item.id, MovementType.ISSUE, 70.0, ACTOR_ID)
        assert entry.usage_qty == pytest.approx(70.0)

    async def test_stock_never_negative(self, make_consumable, movement_service, inventory_service):
        item = await make_consumable(stock=10.0)

        await movement_service.post_movement(item.id, MovementType.CONSUME, 10.0, ACTOR_ID)
        with pytest.raises(InsufficientStockError):
            await movement_service.post_movement(item.id, MovementType.ADJUSTMENT, -1.0, ACTOR_ID)

        item = await inventory_service.get_item(item.id)
        assert item.stock_usage == 0.0
        assert item.status.value == "OUT_OF_STOCK"


class TestReservationProtocol:
    async def test_reserve_then_release_restores_balance(
        self, make_consumable, reservation_service, inventory_service, movement_service
    ):
        item = await make_consumable(stock=100.0)

        reservation = await reservation_service.reserve(item.id, 40.0, "Planting", ACTOR_ID)
        held = await inventory_service.get_item(item.id)
        assert held.reserved_usage == pytest.approx(40.0)
        assert held.available_usage == pytest.approx(60.0)

        released = await reservation_service.release(reservation.id)
        after = await inventory_service.get_item(item.id)

        assert released.status.value == "RELEASED"
        assert after.stock_usage == pytest.approx(100.0)
        assert after.reserved_usage == pytest.approx(0.0)
        assert len(await movement_service.list_movements(item.id)) == 1

    async def test_double_release_rejected(self, make_consumable, reservation_service):
        item = await make_consumable()
        reservation = await reservation_service.reserve(item.id, 5.0, "Test", ACTOR_ID)
        await reservation_service.release(reservation.id)

        with pytest.raises(InvalidStateError):
            await reservation_service.release(reservation.id)
        with pytest.raises(InvalidStateError):
            await reservation_service.use(reservation.id)

    async def test_use_posts_one_entry(
        self, make_consumable, reservation_service, inventory_service, movement_service
    ):
        item = await make_consumable(stock=100.0, unit_price=10.0)
        reservation = await reservation_service.reserve(
            item.id, 30.0, "Fertigation", ACTOR_ID, activity_id=44
        )

        used = await reservation_service.use(reservation.id)
        after = await inventory_service.get_item(item.id)
        entries = await movement_service.list_movements(item.id)

        assert used.status.value == "USED"
        assert after.stock_usage == pytest.approx(70.0)
        assert after.reserved_usage == pytest.approx(0.0)
        uses = [e for e in entries if e.type is MovementType.RESERVATION_USE]
        assert len(uses) == 1
        assert uses[0].usage_qty == pytest.approx(30.0)
        assert uses[0].reservation_id == reservation.id
        assert uses[0].activity_id == 44
        assert uses[0].total_cost == pytest.approx(300.0)

        with pytest.raises(InvalidStateError):
            await reservation_service.use(reservation.id)

    async def test_reservation_use_not_postable_directly(self, make_consumable, movement_service):
        from src.core.exceptions import ValidationError

        item = await make_consumable()
        with pytest.raises(ValidationError):
            await movement_service.post_movement(
                item.id, MovementType.RESERVATION_USE, 1.0, ACTOR_ID
            )


class TestReplay:
    async def test_ledger_reproduces_cached_stock(
        self, make_consumable, movement_service, reservation_service
    ):
        item = await make_consumable(stock=100.0)
        await movement_service.post_movement(
            item.id, MovementType.RECEIPT, 50.0, ACTOR_ID, unit_cost=12.0
        )
        await movement_service.post_movement(item.id, MovementType.CONSUME, 20.0, ACTOR_ID)
        await movement_service.post_movement(item.id, MovementType.ADJUSTMENT, -5.0, ACTOR_ID)
        await movement_service.post_movement(item.id, MovementType.ADJUSTMENT, 3.0, ACTOR_ID)
        reservation = await reservation_service.reserve(item.id, 8.0, "Nursery", ACTOR_ID)
        await reservation_service.use(reservation.id)

        result = await movement_service.reconcile(item.id)

        assert result.consistent
        assert result.ledger_stock == pytest.approx(120.0)
        assert result.entries == 6
        assert await movement_service.replay_stock(item.id) == pytest.approx(120.0)

    async def test_mismatch_detected(self, make_consumable, movement_service, catalog):
        item = await make_consumable(stock=100.0)
        async with catalog.acquire() as conn:
            await conn.execute(
                "UPDATE inventory_items SET stock_usage = 90 WHERE id = ?", (item.id,)
            )

        result = await movement_service.reconcile(item.id)

        assert not result.consistent
        assert result.difference == pytest.approx(-10.0)


class TestEvents:
    async def test_published_after_commit(self, make_consumable, movement_service, published):
        item = await make_consumable()
        published.clear()

        await movement_service.post_movement(item.id, MovementType.ISSUE, 1.0, ACTOR_ID)
        with pytest.raises(InsufficientStockError):
            await movement_service.post_movement(item.id, MovementType.ISSUE, 1000.0, ACTOR_ID)

        assert [e.type for e in published] == [EventType.MOVEMENT_POSTED]
        assert published[0].payload["type"] == "ISSUE"

    async def test_creation_events(self, make_consumable, published):
        item = await make_consumable()
        assert [e.type for e in published] == [EventType.ITEM_CREATED, EventType.MOVEMENT_POSTED]
        assert all(e.item_id == item.id for e in published)


class TestQueries:
    async def test_movement_lookups(self, make_consumable, movement_service):
        urea = await make_consumable()
        sulfur = await make_consumable(name="Sulfur 90%")
        issued = await movement_service.post_movement(urea.id, MovementType.ISSUE, 4.0, ACTOR_ID)

        loaded = await movement_service.get_movement(issued.id)
        assert loaded.type is MovementType.ISSUE
        assert loaded.usage_qty == pytest.approx(4.0)
        assert await movement_service.has_movements(sulfur.id)
        assert not await movement_service.has_movements(9999)

        found = await movement_service.search_movements(
            MovementQuery(item_id=urea.id, type=MovementType.ISSUE)
        )
        assert [e.id for e in found] == [issued.id]

        with pytest.raises(MovementNotFoundError):
            await movement_service.get_movement(9999)

    async def test_reservation_lookups(self, make_consumable, reservation_service):
        item = await make_consumable()
        reservation = await reservation_service.reserve(
            item.id, 5.0, "Plot 7", ACTOR_ID, activity_id=70
        )

        loaded = await reservation_service.get_reservation(reservation.id)
        assert loaded.quantity == pytest.approx(5.0)
        assert loaded.reason == "Plot 7"

        with pytest.raises(ReservationNotFoundError):
            await reservation_service.get_reservation(9999)


@pytest.fixture
async def sprayer(inventory_service):
    [asset] = await inventory_service.create_fixed_asset(
        FixedAssetDraft(
            name="Boom sprayer",
            acquisition_cost=1000.0,
            residual_value=100.0,
            useful_life_hours=100.0,
            warehouse_id=MAIN_WAREHOUSE,
            category_id=FERTILIZER_CATEGORY,
        ),
        actor_id=ACTOR_ID,
    )
    return asset


class TestFixedAssetReservations:
    async def test_reserved_asset_is_unavailable(self, sprayer, reservation_service):
        await reservation_service.reserve(sprayer.id, 1.0, "Block A", ACTOR_ID)

        with pytest.raises(AssetUnavailableError) as exc_info:
            await reservation_service.reserve(sprayer.id, 1.0, "Block B", ACTOR_ID)
        assert exc_info.value.details["status"] == "RESERVED"

    async def test_release_frees_asset(self, sprayer, reservation_service, inventory_service):
        reservation = await reservation_service.reserve(sprayer.id, 1.0, "Block A", ACTOR_ID)
        held = await inventory_service.get_item(sprayer.id)
        assert held.status is ItemStatus.RESERVED
        assert held.reserved_usage == pytest.approx(1.0)

        await reservation_service.release(reservation.id)
        after = await inventory_service.get_item(sprayer.id)

        assert after.status is ItemStatus.AVAILABLE
        assert after.reserved_usage == 0.0
        assert after.stock_usage == pytest.approx(1.0)

    async def test_use_puts_asset_in_use(
        self, sprayer, reservation_service, inventory_service, movement_service
    ):
        first = await reservation_service.reserve(sprayer.id, 1.0, "Block A", ACTOR_ID)
        await reservation_service.release(first.id)
        second = await reservation_service.reserve(
            sprayer.id, 1.0, "Block C", ACTOR_ID, activity_id=9
        )

        await reservation_service.use(second.id)
        after = await inventory_service.get_item(sprayer.id)
        entries = await movement_service.list_movements(sprayer.id)

        assert after.status is ItemStatus.IN_USE
        assert after.reserved_usage == 0.0
        assert after.acquisition_cost == pytest.approx(1000.0)
        assert entries[0].type is MovementType.RESERVATION_USE
        assert entries[0].activity_id == 9

    async def test_consumable_hold_down_to_minimum_is_low_stock(
        self, make_consumable, reservation_service, inventory_service
    ):
        item = await make_consumable(stock=100.0, min_stock=20.0)
        assert item.status is ItemStatus.AVAILABLE

        await reservation_service.reserve(item.id, 80.0, "Plot 3", ACTOR_ID)
        after = await inventory_service.get_item(item.id)

        assert after.status is ItemStatus.LOW_STOCK
        assert after.available_usage == pytest.approx(20.0)


class TestConcurrentReservations:
    async def test_parallel_holds_never_overbook(
        self, make_consumable, reservation_service, inventory_service
    ):
        item = await make_consumable(stock=100.0)

        results = await asyncio.gather(
            *(
                reservation_service.reserve(item.id, 30.0, f"Crew {n}", ACTOR_ID)
                for n in range(5)
            ),
            return_exceptions=True,
        )
        placed = [r for r in results if not isinstance(r, Exception)]
        rejected = [r for r in results if isinstance(r, Exception)]
        after = await inventory_service.get_item(item.id)

        assert len(placed) == 3
        assert all(isinstance(e, InsufficientStockError) for e in rejected)
        assert len(rejected) == 2
        assert after.reserved_usage == pytest.approx(90.0)
        assert after.reserved_usage <= after.stock_usage
