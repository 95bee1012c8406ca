"""Tests for the ledger-specific logging processors."""

import structlog

from src.config import log_context
from src.config.logging import render_ledger_values
from src.core.entities import ItemStatus, MovementType


class TestRenderLedgerValues:
    def test_enums_logged_by_value(self):
        event = render_ledger_values(
            None,
            "info",
            {
                "event": "movement_posted",
                "movement_type": MovementType.RECEIPT,
                "status": ItemStatus.LOW_STOCK,
            },
        )
        assert event["movement_type"] == "RECEIPT"
        assert event["status"] == "LOW_STOCK"

    def test_quantities_rounded(self):
        event = render_ledger_values(
            None,
            "info",
            {"event": "movement_posted", "usage_qty": 0.1 + 0.2, "item_id": 3, "note": "x"},
        )
        assert event["usage_qty"] == 0.3
        assert event["item_id"] == 3
        assert event["note"] == "x"


class TestLogContext:
    def test_binds_only_inside_block(self):
        structlog.contextvars.clear_contextvars()

        with log_context(item_id=7, movement_type="ISSUE"):
            assert structlog.contextvars.get_contextvars() == {
                "item_id": 7,
                "movement_type": "ISSUE",
            }

        assert structlog.contextvars.get_contextvars() == {}
