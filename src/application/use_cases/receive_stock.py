"""Receive Stock Use Case: RECEIPT movement priced per package."""

from dataclasses import dataclass

from src.application.dto.requests import ReceiveStockRequest
from src.application.dto.responses import (
    InventoryItemResponse,
    ReceiveStockResponse,
    StockMovementResponse,
)
from src.config import get_logger
from src.core.entities.inventory import InventoryItem, MovementEntry, MovementType
from src.core.exceptions import ValidationError
from src.core.services import InventoryService, MovementService

logger = get_logger(__name__)


@dataclass
class ReceiveStockResult:
    """Result of receiving stock."""

    inventory_item: InventoryItem
    movement: MovementEntry


class ReceiveStockUseCase:
    """Receive purchased packages and fold their price into the average cost."""

    def __init__(
        self,
        inventory_service: InventoryService | None = None,
        movement_service: MovementService | None = None,
    ):
        self._inventory_service = inventory_service
        self._movement_service = movement_service

    async def _get_inventory_service(self) -> InventoryService:
        if self._inventory_service is None:
            from src.application.services import get_inventory_service

            self._inventory_service = await get_inventory_service()
        return self._inventory_service

    async def _get_movement_service(self) -> MovementService:
        if self._movement_service is None:
            from src.application.services import get_movement_service

            self._movement_service = await get_movement_service()
        return self._movement_service

    async def execute(self, request: ReceiveStockRequest) -> ReceiveStockResult:
        """Execute receive stock use case."""
        logger.info(
            "receive_stock_started",
            item_id=request.item_id,
            packages=request.packages,
        )

        inventory = await self._get_inventory_service()
        movements = await self._get_movement_service()

        # 1. Packages -> usage units at the item's factor
        item = await inventory.get_item(request.item_id)
        if item.is_fixed_asset:
            raise ValidationError("item_id", "fixed assets are registered, not received", item.id)
        factor = item.conversion_factor
        usage_qty = request.packages * factor
        unit_cost = request.unit_price_packaging / factor if request.unit_price_packaging > 0 else None

        # 2. Post the receipt
        note = request.notes
        if request.reference:
            note = f"{request.reference}: {note}" if note else request.reference
        movement = await movements.post_movement(
            request.item_id,
            MovementType.RECEIPT,
            usage_qty,
            request.actor_id,
            packaging_qty=request.packages,
            unit_cost=unit_cost,
            note=note,
        )

        item = await inventory.get_item(request.item_id)

        logger.info(
            "receive_stock_complete",
            item_id=item.id,
            stock_usage=item.stock_usage,
            unit_cost_usage=round(item.unit_cost_usage, 6),
        )

        return ReceiveStockResult(inventory_item=item, movement=movement)

    def to_response(self, result: ReceiveStockResult) -> ReceiveStockResponse:
        """Convert result to response DTO."""
        return ReceiveStockResponse(
            inventory_item=InventoryItemResponse.from_entity(result.inventory_item),
            movement=StockMovementResponse.from_entity(result.movement),
        )
