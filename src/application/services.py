"""
Service factory functions for dependency injection.

This module provides factory functions that wire infrastructure
implementations to core services. Use cases should import from here.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from typing import TYPE_CHECKING

from src.config import get_settings
from src.core.services import (
    DepreciationService,
    InventoryService,
    MovementService,
    ReservationService,
    RetryPolicy,
)

if TYPE_CHECKING:
    from src.core.interfaces import IEventPublisher, IUnitOfWork
    from src.infrastructure.events import InMemoryEventBus


# Singleton instances
_unit_of_work: "IUnitOfWork | None" = None
_event_bus: "InMemoryEventBus | None" = None
_movement_service: MovementService | None = None
_inventory_service: InventoryService | None = None
_reservation_service: ReservationService | None = None
_depreciation_service: DepreciationService | None = None


def get_retry_policy() -> RetryPolicy:
    """Build the version-conflict retry policy from settings."""
    settings = get_settings().inventory
    return RetryPolicy(
        retries=settings.conflict_retries,
        delay=settings.retry_delay,
        multiplier=settings.retry_multiplier,
    )


async def get_unit_of_work() -> "IUnitOfWork":
    """Get or create the SQLite unit of work over the global pool."""
    global _unit_of_work

    if _unit_of_work is None:
        # Lazy import infrastructure to avoid circular imports
        from src.infrastructure.storage.sqlite import SQLiteUnitOfWork, get_pool

        _unit_of_work = SQLiteUnitOfWork(await get_pool())
    return _unit_of_work


def get_event_bus() -> "InMemoryEventBus":
    """Get or create the in-process event bus."""
    global _event_bus

    if _event_bus is None:
        from src.infrastructure.events import InMemoryEventBus

        _event_bus = InMemoryEventBus()
    return _event_bus


async def get_movement_service(
    uow: "IUnitOfWork | None" = None,
    publisher: "IEventPublisher | None" = None,
) -> MovementService:
    """
    Get or create MovementService instance.

    Creates infrastructure dependencies if not provided.
    Overrides bypass the singleton.

    Args:
        uow: Optional unit of work override
        publisher: Optional event publisher override

    Returns:
        Configured MovementService
    """
    global _movement_service

    if _movement_service is not None and uow is None and publisher is None:
        return _movement_service

    service = MovementService(
        uow=uow or await get_unit_of_work(),
        publisher=publisher or get_event_bus(),
        retry_policy=get_retry_policy(),
    )

    if uow is None and publisher is None:
        _movement_service = service

    return service


async def get_inventory_service(
    uow: "IUnitOfWork | None" = None,
    publisher: "IEventPublisher | None" = None,
) -> InventoryService:
    """Get or create InventoryService instance."""
    global _inventory_service

    if _inventory_service is not None and uow is None and publisher is None:
        return _inventory_service

    service = InventoryService(
        uow=uow or await get_unit_of_work(),
        movements=await get_movement_service(uow, publisher),
        publisher=publisher or get_event_bus(),
        retry_policy=get_retry_policy(),
    )

    if uow is None and publisher is None:
        _inventory_service = service

    return service


async def get_reservation_service(
    uow: "IUnitOfWork | None" = None,
    publisher: "IEventPublisher | None" = None,
) -> ReservationService:
    """Get or create ReservationService instance."""
    global _reservation_service

    if _reservation_service is not None and uow is None and publisher is None:
        return _reservation_service

    service = ReservationService(
        uow=uow or await get_unit_of_work(),
        movements=await get_movement_service(uow, publisher),
        publisher=publisher or get_event_bus(),
        retry_policy=get_retry_policy(),
    )

    if uow is None and publisher is None:
        _reservation_service = service

    return service


async def get_depreciation_service(
    uow: "IUnitOfWork | None" = None,
    publisher: "IEventPublisher | None" = None,
) -> DepreciationService:
    """
    Get or create DepreciationService instance.

    The decommission policy comes from INVENTORY_REJECT_USAGE_AFTER_DECOMMISSION.
    """
    global _depreciation_service

    if _depreciation_service is not None and uow is None and publisher is None:
        return _depreciation_service

    service = DepreciationService(
        uow=uow or await get_unit_of_work(),
        publisher=publisher or get_event_bus(),
        retry_policy=get_retry_policy(),
        reject_usage_after_decommission=(
            get_settings().inventory.reject_usage_after_decommission
        ),
    )

    if uow is None and publisher is None:
        _depreciation_service = service

    return service


def reset_services() -> None:
    """Reset all service singletons (for testing)."""
    global _unit_of_work, _event_bus, _movement_service
    global _inventory_service, _reservation_service, _depreciation_service

    _unit_of_work = None
    _event_bus = None
    _movement_service = None
    _inventory_service = None
    _reservation_service = None
    _depreciation_service = None
