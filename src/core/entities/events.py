"""Change notifications published after an inventory mutation commits."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from src.core.entities.inventory import utcnow


class EventType(str, Enum):
    ITEM_CREATED = "item.created"
    ITEM_UPDATED = "item.updated"
    ITEM_DELETED = "item.deleted"
    ITEM_RESTORED = "item.restored"
    MOVEMENT_POSTED = "movement.posted"
    RESERVATION_CREATED = "reservation.created"
    RESERVATION_RELEASED = "reservation.released"
    RESERVATION_USED = "reservation.used"
    ASSET_USAGE_REGISTERED = "asset.usage_registered"


class InventoryEvent(BaseModel):
    """A committed change, as seen by observers."""

    type: EventType
    item_id: int | None = None
    payload: dict[str, Any] = Field(default_factory=dict)
    occurred_at: datetime = Field(default_factory=utcnow)
