"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from stockledger.application.dto.requests import (
    CreateReorderRequestRequest,
    ListMovementsRequest,
    ListReorderRequestsRequest,
    RecordMovementRequest,
    TransitionReorderRequestRequest,
)
from stockledger.application.dto.responses import (
    ErrorResponse,
    HealthResponse,
    MaterialStockResponse,
    MovementListResponse,
    MovementResponse,
    MovementSummaryResponse,
    ReconciliationResponse,
    RecordMovementResponse,
    ReorderRequestListResponse,
    ReorderRequestResponse,
    ReorderSummaryResponse,
    StockAlertListResponse,
    StockStatusResponse,
    TransitionReorderRequestResponse,
)

__all__ = [
    # Requests
    "RecordMovementRequest",
    "ListMovementsRequest",
    "CreateReorderRequestRequest",
    "TransitionReorderRequestRequest",
    "ListReorderRequestsRequest",
    # Responses
    "HealthResponse",
    "ErrorResponse",
    "StockStatusResponse",
    "MaterialStockResponse",
    "StockAlertListResponse",
    "ReconciliationResponse",
    "MovementResponse",
    "MovementSummaryResponse",
    "RecordMovementResponse",
    "MovementListResponse",
    "ReorderRequestResponse",
    "ReorderSummaryResponse",
    "ReorderRequestListResponse",
    "TransitionReorderRequestResponse",
]
