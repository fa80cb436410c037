"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from stockledger.core.entities import (
    InventoryMovement,
    MovementSummary,
    ReorderRequest,
    ReorderSummary,
    StockAssessment,
    allowed_actions,
)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: str | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INSUFFICIENT_STOCK)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)


# --- Stock ---


class StockStatusResponse(BaseModel):
    """Alert band of a material."""

    material_id: str
    status: str = Field(..., description="low, normal or high")
    current_stock: Decimal
    min_stock_level: Decimal | None = None
    max_stock_level: Decimal | None = None
    high_threshold: Decimal | None = None
    suggested_quantity: Decimal | None = Field(
        default=None, description="Reorder hint, only for low stock"
    )

    @classmethod
    def from_assessment(cls, a: StockAssessment) -> "StockStatusResponse":
        return cls(
            material_id=a.material_id,
            status=a.status.value,
            current_stock=a.current_stock,
            min_stock_level=a.min_stock_level,
            max_stock_level=a.max_stock_level,
            high_threshold=a.high_threshold,
            suggested_quantity=a.suggested_quantity,
        )


class MaterialStockResponse(BaseModel):
    """Cached stock of one material with its alert band."""

    material_id: str
    name: str
    unit: str
    current_stock: Decimal
    stock_value: Decimal
    is_enabled: bool
    stock_status: StockStatusResponse


class StockAlertListResponse(BaseModel):
    """Low-stock materials, lowest stock first."""

    alerts: list[StockStatusResponse]
    total: int


class ReconciliationResponse(BaseModel):
    """Cached counter vs. ledger sum."""

    material_id: str
    cached_stock: Decimal
    ledger_stock: Decimal
    drift: Decimal
    movement_count: int
    consistent: bool
    repaired: bool


# --- Movements ---


class MovementResponse(BaseModel):
    """One ledger row."""

    id: str
    material_id: str
    type: str
    quantity: Decimal = Field(..., description="Signed effect on stock")
    unit_cost: Decimal | None = None
    total_cost: Decimal | None = None
    reference: str | None = None
    notes: str | None = None
    recorded_by: str | None = None
    reorder_request_id: str | None = None
    recorded_at: datetime

    @classmethod
    def from_entity(cls, m: InventoryMovement) -> "MovementResponse":
        return cls(
            id=m.id or "",
            material_id=m.material_id,
            type=m.type.value,
            quantity=m.quantity,
            unit_cost=m.unit_cost,
            total_cost=m.total_cost,
            reference=m.reference,
            notes=m.notes,
            recorded_by=m.recorded_by,
            reorder_request_id=m.reorder_request_id,
            recorded_at=m.recorded_at,
        )


class MovementTypeSummaryResponse(BaseModel):
    count: int
    quantity: Decimal
    cost: Decimal


class MovementSummaryResponse(BaseModel):
    """Aggregate over the returned movements."""

    total_movements: int
    total_quantity: Decimal
    total_cost: Decimal
    by_type: dict[str, MovementTypeSummaryResponse] = Field(default_factory=dict)

    @classmethod
    def from_summary(cls, s: MovementSummary) -> "MovementSummaryResponse":
        return cls(
            total_movements=s.total_movements,
            total_quantity=s.total_quantity,
            total_cost=s.total_cost,
            by_type={
                k: MovementTypeSummaryResponse(count=v.count, quantity=v.quantity, cost=v.cost)
                for k, v in s.by_type.items()
            },
        )


class RecordMovementResponse(BaseModel):
    """A committed movement and the material's new stock."""

    movement: MovementResponse
    current_stock: Decimal
    stock_status: StockStatusResponse | None = None


class MovementListResponse(BaseModel):
    movements: list[MovementResponse]
    summary: MovementSummaryResponse
    limit: int
    offset: int


# --- Reorder requests ---


class ReorderRequestResponse(BaseModel):
    """A reorder request and the actions it accepts next."""

    id: str
    material_id: str
    requested_quantity: Decimal
    status: str
    notes: str | None = None
    order_number: str | None = None
    rejection_reason: str | None = None
    requested_by: str | None = None
    approved_by: str | None = None
    rejected_by: str | None = None
    cancelled_by: str | None = None
    received_by: str | None = None
    requested_at: datetime
    approved_at: datetime | None = None
    rejected_at: datetime | None = None
    ordered_at: datetime | None = None
    received_at: datetime | None = None
    cancelled_at: datetime | None = None
    allowed_actions: list[str] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, r: ReorderRequest) -> "ReorderRequestResponse":
        return cls(
            **r.model_dump(exclude={"id", "status"}),
            id=r.id or "",
            status=r.status.value,
            allowed_actions=[a.value for a in allowed_actions(r.status)],
        )


class ReorderStatusSummaryResponse(BaseModel):
    count: int
    total_quantity: Decimal


class ReorderSummaryResponse(BaseModel):
    total_requests: int
    by_status: dict[str, ReorderStatusSummaryResponse] = Field(default_factory=dict)

    @classmethod
    def from_summary(cls, s: ReorderSummary) -> "ReorderSummaryResponse":
        return cls(
            total_requests=s.total_requests,
            by_status={
                k: ReorderStatusSummaryResponse(count=v.count, total_quantity=v.total_quantity)
                for k, v in s.by_status.items()
            },
        )


class ReorderRequestListResponse(BaseModel):
    requests: list[ReorderRequestResponse]
    summary: ReorderSummaryResponse
    limit: int
    offset: int


class TransitionReorderRequestResponse(BaseModel):
    """Outcome of a workflow action; receipt includes its movement."""

    request: ReorderRequestResponse
    previous_status: str
    movement: MovementResponse | None = None
    stock_status: StockStatusResponse | None = None
