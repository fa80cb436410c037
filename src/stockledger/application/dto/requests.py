"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.

Quantities are decimals. Their sign and range rules depend on the
movement type and are enforced by the ledger, not here.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from stockledger.core.entities.inventory import MovementType
from stockledger.core.entities.reorder import ReorderAction, ReorderStatus

# --- Movements ---


class RecordMovementRequest(BaseModel):
    """Request to record one stock movement."""

    material_id: str = Field(..., description="Material catalog ID")
    type: MovementType = Field(..., description="Movement type")
    quantity: Decimal = Field(
        ...,
        description=(
            "Magnitude for PURCHASE/SALE/TRANSFER/LOSS/RETURN; "
            "signed correction for ADJUSTMENT"
        ),
        examples=["3", "-1.5"],
    )
    unit_cost: Decimal | None = Field(default=None, ge=0, description="Cost per unit")
    reference: str | None = Field(default=None, description="Document or order reference")
    notes: str | None = Field(default=None, description="Additional notes")


class ListMovementsRequest(BaseModel):
    """Filter for listing movements (newest first)."""

    material_id: str | None = Field(default=None, description="Only this material")
    type: MovementType | None = Field(default=None, description="Only this movement type")
    start: datetime | None = Field(default=None, description="Recorded at or after")
    end: datetime | None = Field(default=None, description="Recorded at or before")
    limit: int = Field(default=100, ge=1, le=1000)
    offset: int = Field(default=0, ge=0)


# --- Reorder requests ---


class CreateReorderRequestRequest(BaseModel):
    """Request to open a reorder request."""

    material_id: str = Field(..., description="Material catalog ID")
    requested_quantity: Decimal = Field(..., description="Quantity to reorder (positive)")
    notes: str | None = Field(default=None, description="Additional notes")


class TransitionReorderRequestRequest(BaseModel):
    """Apply a workflow action to a reorder request."""

    action: ReorderAction = Field(..., description="approve, reject, order, receive or cancel")
    rejection_reason: str | None = Field(default=None, description="Required for reject")
    order_number: str | None = Field(
        default=None, description="Required for order", examples=["PO-100"]
    )
    notes: str | None = Field(default=None, description="Replaces the request notes")


class ListReorderRequestsRequest(BaseModel):
    """Filter for listing reorder requests (newest first)."""

    material_id: str | None = Field(default=None, description="Only this material")
    status: ReorderStatus | None = Field(default=None, description="Only this status")
    start: datetime | None = Field(default=None, description="Requested at or after")
    end: datetime | None = Field(default=None, description="Requested at or before")
    limit: int = Field(default=100, ge=1, le=1000)
    offset: int = Field(default=0, ge=0)
