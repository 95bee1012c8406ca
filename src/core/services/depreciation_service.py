"""Usage-based depreciation of fixed assets."""

from src.config import get_logger, log_context
from src.core.entities.events import EventType, InventoryEvent
from src.core.entities.inventory import (
    AssetUsageRecord,
    DepreciationResult,
    InventoryItem,
    ItemKind,
    ItemStatus,
    utcnow,
)
from src.core.exceptions import InvalidStateError, ItemNotFoundError, ValidationError
from src.core.interfaces.events import IEventPublisher
from src.core.interfaces.unit_of_work import ITransaction, IUnitOfWork
from src.core.services import costing
from src.core.services.transactional import RetryPolicy, TransactionalService

logger = get_logger(__name__)


class DepreciationService(TransactionalService):
    """
    Applies straight-line depreciation per usage hour.

    per_hour = (acquisition_cost - residual_value) / max(useful_life_hours, 1)

    An asset whose hours reach its useful life is DECOMMISSIONED. Whether
    later usage on a decommissioned asset is rejected is a policy switch.
    """

    def __init__(
        self,
        uow: IUnitOfWork,
        publisher: IEventPublisher | None = None,
        retry_policy: RetryPolicy | None = None,
        reject_usage_after_decommission: bool = False,
    ):
        super().__init__(uow, publisher, retry_policy)
        self.reject_usage_after_decommission = reject_usage_after_decommission

    async def register_usage(
        self,
        item_id: int,
        hours: float,
        activity_id: int | None = None,
        actor_id: int | None = None,
    ) -> DepreciationResult:
        """
        Depreciate a fixed asset for hours of use.

        Raises:
            ItemNotFoundError: Item missing or soft-deleted
            ValidationError: Non-positive hours, or item is not a fixed asset
            InvalidStateError: Asset decommissioned and policy rejects usage
        """
        if hours <= 0:
            raise ValidationError("hours", "must be greater than zero", hours)

        async def operation(tx: ITransaction) -> DepreciationResult:
            item = await tx.items.get_item(item_id)
            if item is None:
                raise ItemNotFoundError(item_id)
            self._check_depreciable(item)

            before = item.book_value
            step = costing.apply_depreciation(
                acquisition_cost=item.acquisition_cost,
                residual_value=item.residual_value,
                useful_life_hours=item.useful_life_hours,
                hours_used=item.hours_used,
                accumulated_depreciation=item.accumulated_depreciation,
                hours=hours,
            )
            item.hours_used = step.hours_used
            item.accumulated_depreciation = step.accumulated
            item.recompute_inventory_value()

            if step.life_exhausted:
                item.status = ItemStatus.DECOMMISSIONED
                if item.decommissioned_at is None:
                    item.decommissioned_at = utcnow()
            elif item.status is ItemStatus.AVAILABLE:
                item.status = ItemStatus.IN_USE

            await tx.items.update_item(item)
            record = await tx.usage.append(
                AssetUsageRecord(
                    item_id=item_id,
                    hours=hours,
                    depreciation_generated=step.generated,
                    book_value_before=before,
                    book_value_after=step.book_value,
                    activity_id=activity_id,
                    actor_id=actor_id,
                )
            )
            return DepreciationResult(
                item_id=item_id,
                hours=hours,
                generated=step.generated,
                accumulated=step.accumulated,
                book_value=step.book_value,
                hours_used=step.hours_used,
                status=item.status,
                usage_record_id=record.id,
            )

        with log_context(item_id=item_id):
            result = await self._in_transaction(operation)
        logger.info(
            "asset_usage_registered",
            item_id=item_id,
            hours=hours,
            generated=result.generated,
            book_value=result.book_value,
            status=result.status.value,
        )
        await self._publish(
            InventoryEvent(
                type=EventType.ASSET_USAGE_REGISTERED,
                item_id=item_id,
                payload=result.model_dump(mode="json"),
            )
        )
        return result

    def _check_depreciable(self, item: InventoryItem) -> None:
        if item.item_kind is not ItemKind.FIXED_ASSET:
            raise ValidationError("item_id", "depreciation applies to fixed assets only", item.id)
        if item.acquisition_cost is None:
            raise ValidationError(
                "acquisition_cost", "fixed asset has no acquisition cost", item.id
            )
        if (
            self.reject_usage_after_decommission
            and item.status is ItemStatus.DECOMMISSIONED
        ):
            raise InvalidStateError("asset is decommissioned", item_id=item.id)

    async def list_usage(
        self, item_id: int, limit: int = 100, offset: int = 0
    ) -> list[AssetUsageRecord]:
        """Usage records of an asset, newest first."""
        async with self.uow.read() as tx:
            return await tx.usage.list_for_item(item_id, limit=limit, offset=offset)

    @staticmethod
    def book_value(item: InventoryItem) -> float:
        return item.book_value

    @staticmethod
    def remaining_life_percent(item: InventoryItem) -> float:
        return costing.remaining_life_percent(item.useful_life_hours, item.hours_used)
