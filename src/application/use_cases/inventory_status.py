"""Inventory Status Use Case: paged item listing or low-stock alerts."""

from src.application.dto.responses import InventoryItemResponse, InventoryStatusResponse
from src.config import get_logger, get_settings
from src.core.entities.inventory import InventoryItem, ItemQuery
from src.core.services import InventoryService

logger = get_logger(__name__)


class InventoryStatusUseCase:
    """List inventory items, optionally only those needing restock."""

    def __init__(self, inventory_service: InventoryService | None = None):
        self._inventory_service = inventory_service

    async def _get_inventory_service(self) -> InventoryService:
        if self._inventory_service is None:
            from src.application.services import get_inventory_service

            self._inventory_service = await get_inventory_service()
        return self._inventory_service

    async def execute(
        self,
        query: ItemQuery | None = None,
        alerts_only: bool = False,
    ) -> list[InventoryItem]:
        service = await self._get_inventory_service()
        if query is None:
            query = ItemQuery(limit=get_settings().inventory.default_list_limit)

        if alerts_only:
            items = await service.stock_alerts(limit=query.limit, offset=query.offset)
        else:
            items = await service.list_items(query)

        logger.debug("inventory_status_listed", count=len(items), alerts_only=alerts_only)
        return items

    def to_response(self, items: list[InventoryItem]) -> InventoryStatusResponse:
        return InventoryStatusResponse(
            items=[InventoryItemResponse.from_entity(item) for item in items],
            total=len(items),
        )
