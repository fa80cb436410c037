"""List Movements Use Case."""

from stockledger.application.dto.requests import ListMovementsRequest
from stockledger.application.dto.responses import (
    MovementListResponse,
    MovementResponse,
    MovementSummaryResponse,
)
from stockledger.core.entities.inventory import MovementFilter
from stockledger.core.services.movement_ledger import MovementLedgerService, MovementPage


class ListMovementsUseCase:
    """List ledger rows newest first, with a per-type summary."""

    def __init__(self, ledger_service: MovementLedgerService | None = None):
        self._ledger_service = ledger_service

    async def _get_ledger_service(self) -> MovementLedgerService:
        if self._ledger_service is None:
            from stockledger.application.services import get_movement_ledger_service

            self._ledger_service = await get_movement_ledger_service()
        return self._ledger_service

    async def execute(self, request: ListMovementsRequest) -> MovementPage:
        service = await self._get_ledger_service()
        filters = MovementFilter(
            material_id=request.material_id,
            type=request.type,
            start=request.start,
            end=request.end,
        )
        return await service.list_movements(filters, limit=request.limit, offset=request.offset)

    def to_response(self, result: MovementPage, request: ListMovementsRequest) -> MovementListResponse:
        return MovementListResponse(
            movements=[MovementResponse.from_entity(m) for m in result.movements],
            summary=MovementSummaryResponse.from_summary(result.summary),
            limit=request.limit,
            offset=request.offset,
        )
