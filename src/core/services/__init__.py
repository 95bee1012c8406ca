"""
Core business logic services.

Layer-pure services that depend only on:
- src/core/entities/*
- src/core/interfaces/*
- src/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from src.core.services.conversion import ConversionResult, resolve_conversion
from src.core.services.costing import (
    apply_depreciation,
    book_value,
    per_hour_depreciation,
    remaining_life_percent,
    weighted_average_cost,
)
from src.core.services.depreciation_service import DepreciationService
from src.core.services.inventory_service import InventoryService
from src.core.services.movement_service import MovementCommand, MovementService
from src.core.services.reservation_service import ReservationService
from src.core.services.transactional import RetryPolicy

__all__ = [
    # Conversion
    "ConversionResult",
    "resolve_conversion",
    # Costing
    "weighted_average_cost",
    "per_hour_depreciation",
    "apply_depreciation",
    "book_value",
    "remaining_life_percent",
    # Services
    "InventoryService",
    "MovementService",
    "MovementCommand",
    "ReservationService",
    "DepreciationService",
    "RetryPolicy",
]
