"""Tests for the in-process event bus."""

from src.core.entities import EventType, InventoryEvent
from src.infrastructure.events import InMemoryEventBus, NullEventPublisher


def created(item_id: int = 1) -> InventoryEvent:
    return InventoryEvent(type=EventType.ITEM_CREATED, item_id=item_id)


class TestInMemoryEventBus:
    async def test_typed_and_wildcard_subscribers(self):
        bus = InMemoryEventBus()
        typed: list[InventoryEvent] = []
        everything: list[InventoryEvent] = []

        async def on_created(event):
            typed.append(event)

        async def on_any(event):
            everything.append(event)

        bus.subscribe(on_created, EventType.ITEM_CREATED)
        bus.subscribe(on_any)

        await bus.publish(created())
        await bus.publish(InventoryEvent(type=EventType.MOVEMENT_POSTED, item_id=1))

        assert [e.type for e in typed] == [EventType.ITEM_CREATED]
        assert [e.type for e in everything] == [
            EventType.ITEM_CREATED,
            EventType.MOVEMENT_POSTED,
        ]

    async def test_unsubscribe(self):
        bus = InMemoryEventBus()
        received: list[InventoryEvent] = []

        async def handler(event):
            received.append(event)

        bus.subscribe(handler)
        bus.unsubscribe(handler)
        bus.unsubscribe(handler)  # no-op when absent

        await bus.publish(created())
        assert received == []

    async def test_failing_subscriber_does_not_propagate(self):
        bus = InMemoryEventBus()
        received: list[InventoryEvent] = []

        async def broken(event):
            raise RuntimeError("subscriber down")

        async def healthy(event):
            received.append(event)

        bus.subscribe(broken)
        bus.subscribe(healthy)

        await bus.publish(created(5))

        assert [e.item_id for e in received] == [5]


async def test_null_publisher_discards():
    assert await NullEventPublisher().publish(created()) is None
