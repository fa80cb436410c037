"""Reorder request workflow endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from stockledger.api.dependencies import (
    get_actor,
    get_create_reorder_request_use_case,
    get_get_reorder_request_use_case,
    get_list_reorder_requests_use_case,
    get_transition_reorder_request_use_case,
)
from stockledger.application.dto.requests import (
    CreateReorderRequestRequest,
    ListReorderRequestsRequest,
    TransitionReorderRequestRequest,
)
from stockledger.application.dto.responses import (
    ErrorResponse,
    ReorderRequestListResponse,
    ReorderRequestResponse,
    TransitionReorderRequestResponse,
)
from stockledger.application.use_cases import (
    CreateReorderRequestUseCase,
    GetReorderRequestUseCase,
    ListReorderRequestsUseCase,
    TransitionReorderRequestUseCase,
)
from stockledger.core.entities.actor import Actor
from stockledger.core.entities.reorder import ReorderStatus

router = APIRouter(prefix="/api/inventory/reorder-requests", tags=["reorder"])


@router.post(
    "",
    response_model=ReorderRequestResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def create_reorder_request(
    request: CreateReorderRequestRequest,
    actor: Actor = Depends(get_actor),
    use_case: CreateReorderRequestUseCase = Depends(get_create_reorder_request_use_case),
) -> ReorderRequestResponse:
    """Open a PENDING reorder request."""
    result = await use_case.execute(request, actor)
    return use_case.to_response(result)


@router.get("", response_model=ReorderRequestListResponse)
async def list_reorder_requests(
    material_id: str | None = None,
    status: ReorderStatus | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    use_case: ListReorderRequestsUseCase = Depends(get_list_reorder_requests_use_case),
) -> ReorderRequestListResponse:
    """List reorder requests, newest first, with a per-status summary."""
    request = ListReorderRequestsRequest(
        material_id=material_id,
        status=status,
        start=start,
        end=end,
        limit=limit,
        offset=offset,
    )
    result = await use_case.execute(request)
    return use_case.to_response(result, request)


@router.get(
    "/{request_id}",
    response_model=ReorderRequestResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_reorder_request(
    request_id: str,
    use_case: GetReorderRequestUseCase = Depends(get_get_reorder_request_use_case),
) -> ReorderRequestResponse:
    """Get one reorder request."""
    result = await use_case.execute(request_id)
    return use_case.to_response(result)


@router.post(
    "/{request_id}/transition",
    response_model=TransitionReorderRequestResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def transition_reorder_request(
    request_id: str,
    request: TransitionReorderRequestRequest,
    actor: Actor = Depends(get_actor),
    use_case: TransitionReorderRequestUseCase = Depends(get_transition_reorder_request_use_case),
) -> TransitionReorderRequestResponse:
    """Apply approve / reject / order / receive / cancel."""
    result = await use_case.execute(request_id, request, actor)
    return use_case.to_response(result)
