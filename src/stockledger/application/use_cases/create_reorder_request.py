"""Create Reorder Request Use Case."""

from stockledger.application.dto.requests import CreateReorderRequestRequest
from stockledger.application.dto.responses import ReorderRequestResponse
from stockledger.config import get_logger
from stockledger.core.entities.actor import Actor
from stockledger.core.entities.reorder import ReorderRequest
from stockledger.core.services.reorder_workflow import ReorderWorkflowService

logger = get_logger(__name__)


class CreateReorderRequestUseCase:
    """Open a PENDING reorder request for a material."""

    def __init__(self, workflow_service: ReorderWorkflowService | None = None):
        self._workflow_service = workflow_service

    async def _get_workflow_service(self) -> ReorderWorkflowService:
        if self._workflow_service is None:
            from stockledger.application.services import get_reorder_workflow_service

            self._workflow_service = await get_reorder_workflow_service()
        return self._workflow_service

    async def execute(
        self, request: CreateReorderRequestRequest, actor: Actor | None = None
    ) -> ReorderRequest:
        service = await self._get_workflow_service()
        return await service.create_request(
            material_id=request.material_id,
            requested_quantity=request.requested_quantity,
            notes=request.notes,
            actor=actor,
        )

    def to_response(self, result: ReorderRequest) -> ReorderRequestResponse:
        return ReorderRequestResponse.from_entity(result)
