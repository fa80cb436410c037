"""List / Get Reorder Requests Use Cases."""

from stockledger.application.dto.requests import ListReorderRequestsRequest
from stockledger.application.dto.responses import (
    ReorderRequestListResponse,
    ReorderRequestResponse,
    ReorderSummaryResponse,
)
from stockledger.core.entities.reorder import ReorderFilter, ReorderRequest
from stockledger.core.services.reorder_workflow import ReorderPage, ReorderWorkflowService


class _WorkflowUseCase:
    def __init__(self, workflow_service: ReorderWorkflowService | None = None):
        self._workflow_service = workflow_service

    async def _get_workflow_service(self) -> ReorderWorkflowService:
        if self._workflow_service is None:
            from stockledger.application.services import get_reorder_workflow_service

            self._workflow_service = await get_reorder_workflow_service()
        return self._workflow_service


class ListReorderRequestsUseCase(_WorkflowUseCase):
    """List reorder requests newest first, with a per-status summary."""

    async def execute(self, request: ListReorderRequestsRequest) -> ReorderPage:
        service = await self._get_workflow_service()
        filters = ReorderFilter(
            material_id=request.material_id,
            status=request.status,
            start=request.start,
            end=request.end,
        )
        return await service.list_requests(filters, limit=request.limit, offset=request.offset)

    def to_response(
        self, result: ReorderPage, request: ListReorderRequestsRequest
    ) -> ReorderRequestListResponse:
        return ReorderRequestListResponse(
            requests=[ReorderRequestResponse.from_entity(r) for r in result.requests],
            summary=ReorderSummaryResponse.from_summary(result.summary),
            limit=request.limit,
            offset=request.offset,
        )


class GetReorderRequestUseCase(_WorkflowUseCase):
    """Read one reorder request."""

    async def execute(self, request_id: str) -> ReorderRequest:
        service = await self._get_workflow_service()
        return await service.get_request(request_id)

    def to_response(self, result: ReorderRequest) -> ReorderRequestResponse:
        return ReorderRequestResponse.from_entity(result)
