"""
Application use cases.

Each use case orchestrates core services for one workflow and
converts its result into response DTOs.
"""

from src.application.use_cases.inventory_status import InventoryStatusUseCase
from src.application.use_cases.issue_stock import IssueStockResult, IssueStockUseCase
from src.application.use_cases.receive_stock import (
    ReceiveStockResult,
    ReceiveStockUseCase,
)

__all__ = [
    "ReceiveStockUseCase",
    "ReceiveStockResult",
    "IssueStockUseCase",
    "IssueStockResult",
    "InventoryStatusUseCase",
]
