"""Abstract interface for change notifications."""

from abc import ABC, abstractmethod

from src.core.entities.events import InventoryEvent


class IEventPublisher(ABC):
    """Delivers committed inventory events to observers."""

    @abstractmethod
    async def publish(self, event: InventoryEvent) -> None:
        """Publish one event. Must not raise on observer failure."""
        pass
