"""Data Transfer Objects.

Request DTOs: Validate and parse incoming requests.
Response DTOs: Structure and serialize results.
"""

from src.application.dto.requests import IssueStockRequest, ReceiveStockRequest
from src.application.dto.responses import (
    InventoryItemResponse,
    InventoryStatusResponse,
    IssueStockResponse,
    ReceiveStockResponse,
    StockMovementResponse,
)

__all__ = [
    # Requests
    "ReceiveStockRequest",
    "IssueStockRequest",
    # Responses
    "InventoryItemResponse",
    "StockMovementResponse",
    "ReceiveStockResponse",
    "IssueStockResponse",
    "InventoryStatusResponse",
]
