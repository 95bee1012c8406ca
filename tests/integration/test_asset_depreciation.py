"""Usage-based depreciation of fixed assets."""

import pytest

from src.core.entities import FixedAssetDraft, ItemStatus
from src.core.exceptions import InvalidStateError, ItemNotFoundError, ValidationError
from src.core.services import DepreciationService
from tests.catalog import ACTOR_ID, FERTILIZER_CATEGORY, MAIN_WAREHOUSE


@pytest.fixture
async def tractor(inventory_service):
    [asset] = await inventory_service.create_fixed_asset(
        FixedAssetDraft(
            name="Tractor",
            acquisition_cost=1000.0,
            residual_value=100.0,
            useful_life_hours=100.0,
            warehouse_id=MAIN_WAREHOUSE,
            category_id=FERTILIZER_CATEGORY,
        ),
        actor_id=ACTOR_ID,
    )
    return asset


class TestRegisterUsage:
    async def test_partial_usage(self, depreciation_service, inventory_service, tractor):
        result = await depreciation_service.register_usage(tractor.id, 10.0, activity_id=3)

        assert result.generated == pytest.approx(90.0)
        assert result.accumulated == pytest.approx(90.0)
        assert result.book_value == pytest.approx(910.0)
        assert result.status is ItemStatus.IN_USE

        item = await inventory_service.get_item(tractor.id)
        assert item.hours_used == pytest.approx(10.0)
        assert item.inventory_value == pytest.approx(910.0)
        assert DepreciationService.remaining_life_percent(item) == pytest.approx(90.0)

    async def test_full_life_decommissions(self, depreciation_service, inventory_service, tractor):
        result = await depreciation_service.register_usage(tractor.id, 100.0)

        assert result.generated == pytest.approx(900.0)
        assert result.accumulated == pytest.approx(900.0)
        assert result.book_value == pytest.approx(100.0)
        assert result.status is ItemStatus.DECOMMISSIONED

        item = await inventory_service.get_item(tractor.id)
        assert item.decommissioned_at is not None
        assert DepreciationService.book_value(item) == pytest.approx(100.0)

    async def test_usage_records_kept(self, depreciation_service, tractor):
        await depreciation_service.register_usage(tractor.id, 4.0)
        second = await depreciation_service.register_usage(tractor.id, 6.0)

        records = await depreciation_service.list_usage(tractor.id)

        assert [r.id for r in records][0] == second.usage_record_id
        assert records[0].book_value_before == pytest.approx(964.0)
        assert records[0].book_value_after == pytest.approx(910.0)

    async def test_rejects_bad_input(self, depreciation_service, make_consumable, tractor):
        with pytest.raises(ValidationError):
            await depreciation_service.register_usage(tractor.id, 0.0)

        supply = await make_consumable()
        with pytest.raises(ValidationError):
            await depreciation_service.register_usage(supply.id, 1.0)

        with pytest.raises(ItemNotFoundError):
            await depreciation_service.register_usage(404, 1.0)


class TestDecommissionedPolicy:
    async def test_usage_allowed_by_default(self, depreciation_service, tractor):
        await depreciation_service.register_usage(tractor.id, 100.0)

        result = await depreciation_service.register_usage(tractor.id, 1.0)

        assert result.status is ItemStatus.DECOMMISSIONED
        assert result.hours_used == pytest.approx(101.0)

    async def test_usage_rejected_when_configured(self, uow, event_bus, retry_policy, tractor):
        strict = DepreciationService(
            uow, event_bus, retry_policy, reject_usage_after_decommission=True
        )
        await strict.register_usage(tractor.id, 100.0)

        with pytest.raises(InvalidStateError):
            await strict.register_usage(tractor.id, 1.0)
