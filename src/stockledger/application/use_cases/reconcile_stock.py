"""Reconcile Stock Use Case."""

from stockledger.application.dto.responses import ReconciliationResponse
from stockledger.config import get_logger
from stockledger.core.entities.stock import StockReconciliation
from stockledger.core.services.movement_ledger import MovementLedgerService

logger = get_logger(__name__)


class ReconcileStockUseCase:
    """Check the cached counter against the ledger, optionally repairing it."""

    def __init__(self, ledger_service: MovementLedgerService | None = None):
        self._ledger_service = ledger_service

    async def _get_ledger_service(self) -> MovementLedgerService:
        if self._ledger_service is None:
            from stockledger.application.services import get_movement_ledger_service

            self._ledger_service = await get_movement_ledger_service()
        return self._ledger_service

    async def execute(self, material_id: str, repair: bool = True) -> StockReconciliation:
        service = await self._get_ledger_service()
        if repair:
            return await service.recompute_from_ledger(material_id)
        return await service.reconcile(material_id)

    def to_response(self, result: StockReconciliation) -> ReconciliationResponse:
        return ReconciliationResponse(
            material_id=result.material_id,
            cached_stock=result.cached_stock,
            ledger_stock=result.ledger_stock,
            drift=result.drift,
            movement_count=result.movement_count,
            consistent=result.consistent,
            repaired=result.repaired,
        )
