"""Request DTOs for inventory operations.

Pydantic v2 models validating input before it reaches a use case.
"""

from pydantic import BaseModel, Field


class ReceiveStockRequest(BaseModel):
    """Request to receive purchased stock (RECEIPT movement)."""

    item_id: int = Field(..., description="Inventory item ID")
    packages: float = Field(..., gt=0, description="Number of packages received")
    unit_price_packaging: float = Field(
        default=0.0,
        ge=0,
        description="Price per package; 0 keeps the current unit cost",
    )
    actor_id: int = Field(..., description="User posting the receipt")
    reference: str | None = Field(default=None, description="PO or invoice reference")
    notes: str | None = Field(default=None, description="Additional notes")


class IssueStockRequest(BaseModel):
    """Request to take stock out, in usage units (ISSUE or CONSUME movement)."""

    item_id: int = Field(..., description="Inventory item ID")
    usage_qty: float = Field(..., gt=0, description="Quantity in usage units (g, cm3)")
    actor_id: int = Field(..., description="User posting the issue")
    activity_id: int | None = Field(
        default=None,
        description="Consuming activity; when set the movement is a CONSUME",
    )
    notes: str | None = Field(default=None, description="Additional notes")
