"""Record Movement Use Case."""

from stockledger.application.dto.requests import RecordMovementRequest
from stockledger.application.dto.responses import (
    MovementResponse,
    RecordMovementResponse,
    StockStatusResponse,
)
from stockledger.config import get_logger
from stockledger.core.entities.actor import Actor
from stockledger.core.services.movement_ledger import LedgerCommit, MovementLedgerService

logger = get_logger(__name__)


class RecordMovementUseCase:
    """Append a movement to the ledger and update the material's stock."""

    def __init__(self, ledger_service: MovementLedgerService | None = None):
        self._ledger_service = ledger_service

    async def _get_ledger_service(self) -> MovementLedgerService:
        if self._ledger_service is None:
            from stockledger.application.services import get_movement_ledger_service

            self._ledger_service = await get_movement_ledger_service()
        return self._ledger_service

    async def execute(self, request: RecordMovementRequest, actor: Actor | None = None) -> LedgerCommit:
        """Execute record movement use case."""
        logger.info(
            "record_movement_started",
            material_id=request.material_id,
            type=request.type.value,
            quantity=str(request.quantity),
        )
        service = await self._get_ledger_service()
        return await service.record_movement(
            material_id=request.material_id,
            movement_type=request.type,
            quantity=request.quantity,
            unit_cost=request.unit_cost,
            reference=request.reference,
            notes=request.notes,
            actor=actor,
        )

    def to_response(self, result: LedgerCommit) -> RecordMovementResponse:
        """Convert result to API response."""
        return RecordMovementResponse(
            movement=MovementResponse.from_entity(result.movement),
            current_stock=result.material.current_stock,
            stock_status=(
                StockStatusResponse.from_assessment(result.assessment)
                if result.assessment
                else None
            ),
        )
