"""Transition Reorder Request Use Case."""

from stockledger.application.dto.requests import TransitionReorderRequestRequest
from stockledger.application.dto.responses import (
    MovementResponse,
    ReorderRequestResponse,
    StockStatusResponse,
    TransitionReorderRequestResponse,
)
from stockledger.core.entities.actor import Actor
from stockledger.core.entities.reorder import TransitionPayload
from stockledger.core.services.reorder_workflow import ReorderWorkflowService, TransitionOutcome


class TransitionReorderRequestUseCase:
    """Apply approve / reject / order / receive / cancel to a request."""

    def __init__(self, workflow_service: ReorderWorkflowService | None = None):
        self._workflow_service = workflow_service

    async def _get_workflow_service(self) -> ReorderWorkflowService:
        if self._workflow_service is None:
            from stockledger.application.services import get_reorder_workflow_service

            self._workflow_service = await get_reorder_workflow_service()
        return self._workflow_service

    async def execute(
        self,
        request_id: str,
        request: TransitionReorderRequestRequest,
        actor: Actor,
    ) -> TransitionOutcome:
        service = await self._get_workflow_service()
        payload = TransitionPayload(
            rejection_reason=request.rejection_reason,
            order_number=request.order_number,
            notes=request.notes,
        )
        return await service.transition(request_id, request.action, actor, payload)

    def to_response(self, result: TransitionOutcome) -> TransitionReorderRequestResponse:
        return TransitionReorderRequestResponse(
            request=ReorderRequestResponse.from_entity(result.request),
            previous_status=result.previous_status.value,
            movement=MovementResponse.from_entity(result.movement) if result.movement else None,
            stock_status=(
                StockStatusResponse.from_assessment(result.assessment)
                if result.assessment
                else None
            ),
        )
