"""Inventory ledger endpoints: movements, stock and alerts."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from stockledger.api.dependencies import (
    get_actor,
    get_evaluate_stock_status_use_case,
    get_list_movements_use_case,
    get_reconcile_stock_use_case,
    get_record_movement_use_case,
)
from stockledger.application.dto.requests import ListMovementsRequest, RecordMovementRequest
from stockledger.application.dto.responses import (
    ErrorResponse,
    MaterialStockResponse,
    MovementListResponse,
    ReconciliationResponse,
    RecordMovementResponse,
    StockAlertListResponse,
)
from stockledger.application.use_cases import (
    EvaluateStockStatusUseCase,
    ListMovementsUseCase,
    ReconcileStockUseCase,
    RecordMovementUseCase,
)
from stockledger.core.entities.actor import Actor
from stockledger.core.entities.inventory import MovementType

router = APIRouter(prefix="/api/inventory", tags=["inventory"])


@router.post(
    "/movements",
    response_model=RecordMovementResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def record_movement(
    request: RecordMovementRequest,
    actor: Actor = Depends(get_actor),
    use_case: RecordMovementUseCase = Depends(get_record_movement_use_case),
) -> RecordMovementResponse:
    """Record a stock movement; the sign is derived from its type."""
    result = await use_case.execute(request, actor)
    return use_case.to_response(result)


@router.get("/movements", response_model=MovementListResponse)
async def list_movements(
    material_id: str | None = None,
    type: MovementType | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    use_case: ListMovementsUseCase = Depends(get_list_movements_use_case),
) -> MovementListResponse:
    """List movements, newest first, with a per-type summary."""
    request = ListMovementsRequest(
        material_id=material_id,
        type=type,
        start=start,
        end=end,
        limit=limit,
        offset=offset,
    )
    result = await use_case.execute(request)
    return use_case.to_response(result, request)


@router.get(
    "/materials/{material_id}/stock",
    response_model=MaterialStockResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_material_stock(
    material_id: str,
    use_case: EvaluateStockStatusUseCase = Depends(get_evaluate_stock_status_use_case),
) -> MaterialStockResponse:
    """Current stock of a material and its alert band."""
    result = await use_case.execute(material_id)
    return use_case.to_response(result)


@router.post(
    "/materials/{material_id}/reconcile",
    response_model=ReconciliationResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def reconcile_material_stock(
    material_id: str,
    repair: bool = True,
    use_case: ReconcileStockUseCase = Depends(get_reconcile_stock_use_case),
) -> ReconciliationResponse:
    """Re-sum the ledger and, unless repair=false, fix a drifted counter."""
    result = await use_case.execute(material_id, repair=repair)
    return use_case.to_response(result)


@router.get("/alerts", response_model=StockAlertListResponse)
async def list_stock_alerts(
    use_case: EvaluateStockStatusUseCase = Depends(get_evaluate_stock_status_use_case),
) -> StockAlertListResponse:
    """Low-stock materials with suggested reorder quantities."""
    alerts = await use_case.low_stock()
    return use_case.to_alert_response(alerts)
