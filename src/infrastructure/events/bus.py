"""
In-process change-notification bus.

Subscribers are async callables keyed by event type. A failing subscriber is
logged and skipped; it never fails the mutation that produced the event.
"""

from collections import defaultdict
from collections.abc import Awaitable, Callable

from src.config import get_logger
from src.core.entities.events import EventType, InventoryEvent
from src.core.interfaces.events import IEventPublisher

logger = get_logger(__name__)

Subscriber = Callable[[InventoryEvent], Awaitable[None]]


class InMemoryEventBus(IEventPublisher):
    def __init__(self) -> None:
        self._subscribers: dict[EventType | None, list[Subscriber]] = defaultdict(list)

    def subscribe(self, handler: Subscriber, event_type: EventType | None = None) -> None:
        """Register a handler for one event type, or for all types when None."""
        self._subscribers[event_type].append(handler)

    def unsubscribe(self, handler: Subscriber, event_type: EventType | None = None) -> None:
        handlers = self._subscribers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    async def publish(self, event: InventoryEvent) -> None:
        handlers = [*self._subscribers.get(event.type, []), *self._subscribers.get(None, [])]
        for handler in handlers:
            try:
                await handler(event)
            except Exception as e:
                logger.error(
                    "event_delivery_failed",
                    event_type=event.type.value,
                    item_id=event.item_id,
                    error=str(e),
                )
        logger.debug(
            "event_published",
            event_type=event.type.value,
            item_id=event.item_id,
            subscribers=len(handlers),
        )


class NullEventPublisher(IEventPublisher):
    """Discards events."""

    async def publish(self, event: InventoryEvent) -> None:
        return None
