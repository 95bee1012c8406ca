"""Issue Stock Use Case: ISSUE or CONSUME movement with balance check."""

from dataclasses import dataclass

from src.application.dto.requests import IssueStockRequest
from src.application.dto.responses import (
    InventoryItemResponse,
    IssueStockResponse,
    StockMovementResponse,
)
from src.config import get_logger
from src.core.entities.inventory import InventoryItem, MovementEntry, MovementType
from src.core.services import InventoryService, MovementService

logger = get_logger(__name__)


@dataclass
class IssueStockResult:
    """Result of issuing stock."""

    inventory_item: InventoryItem
    movement: MovementEntry


class IssueStockUseCase:
    """Issue stock against its free balance."""

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

    async def execute(self, request: IssueStockRequest) -> IssueStockResult:
        """
        Execute issue stock use case.

        With an activity the movement is a CONSUME charged to it,
        otherwise a plain ISSUE.

        Raises:
            InsufficientStockError: If the free balance is too small
        """
        logger.info(
            "issue_stock_started",
            item_id=request.item_id,
            usage_qty=request.usage_qty,
            activity_id=request.activity_id,
        )

        movements = await self._get_movement_service()
        if request.activity_id is not None:
            movement = await movements.consume_supply(
                request.item_id,
                request.usage_qty,
                request.activity_id,
                request.actor_id,
                note=request.notes,
            )
        else:
            movement = await movements.post_movement(
                request.item_id,
                MovementType.ISSUE,
                request.usage_qty,
                request.actor_id,
                note=request.notes,
            )

        inventory = await self._get_inventory_service()
        item = await inventory.get_item(request.item_id)

        logger.info(
            "issue_stock_complete",
            item_id=item.id,
            stock_usage=item.stock_usage,
            movement_type=movement.type.value,
        )

        return IssueStockResult(inventory_item=item, movement=movement)

    def to_response(self, result: IssueStockResult) -> IssueStockResponse:
        """Convert result to response DTO."""
        return IssueStockResponse(
            inventory_item=InventoryItemResponse.from_entity(result.inventory_item),
            movement=StockMovementResponse.from_entity(result.movement),
        )
