"""
Application layer - Use cases, DTOs, and service factories.

This layer orchestrates business logic by:
1. Defining request/response DTOs for inventory workflows
2. Implementing use cases that coordinate core services
3. Providing factory functions for dependency injection
"""

from src.application.dto.requests import IssueStockRequest, ReceiveStockRequest
from src.application.dto.responses import (
    InventoryItemResponse,
    InventoryStatusResponse,
    IssueStockResponse,
    ReceiveStockResponse,
    StockMovementResponse,
)
from src.application.services import (
    get_depreciation_service,
    get_event_bus,
    get_inventory_service,
    get_movement_service,
    get_reservation_service,
    get_unit_of_work,
    reset_services,
)
from src.application.use_cases import (
    InventoryStatusUseCase,
    IssueStockUseCase,
    ReceiveStockUseCase,
)

__all__ = [
    # Request DTOs
    "ReceiveStockRequest",
    "IssueStockRequest",
    # Response DTOs
    "InventoryItemResponse",
    "StockMovementResponse",
    "ReceiveStockResponse",
    "IssueStockResponse",
    "InventoryStatusResponse",
    # Service factories
    "get_unit_of_work",
    "get_event_bus",
    "get_movement_service",
    "get_inventory_service",
    "get_reservation_service",
    "get_depreciation_service",
    "reset_services",
    # Use cases
    "ReceiveStockUseCase",
    "IssueStockUseCase",
    "InventoryStatusUseCase",
]
