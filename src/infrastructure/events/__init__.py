"""Change-notification infrastructure."""

from src.infrastructure.events.bus import InMemoryEventBus, NullEventPublisher

__all__ = [
    "InMemoryEventBus",
    "NullEventPublisher",
]
