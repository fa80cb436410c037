"""Evaluate Stock Status Use Case."""

from dataclasses import dataclass

from stockledger.application.dto.responses import (
    MaterialStockResponse,
    StockAlertListResponse,
    StockStatusResponse,
)
from stockledger.core.entities.material import Material
from stockledger.core.entities.stock import StockAssessment
from stockledger.core.services.movement_ledger import MovementLedgerService


@dataclass
class StockStatusResult:
    material: Material
    assessment: StockAssessment


class EvaluateStockStatusUseCase:
    """Alert band for one material, or the low-stock list for all of them."""

    def __init__(self, ledger_service: MovementLedgerService | None = None):
        self._ledger_service = ledger_service

    async def _get_ledger_service(self) -> MovementLedgerService:
        if self._ledger_service is None:
            from stockledger.application.services import get_movement_ledger_service

            self._ledger_service = await get_movement_ledger_service()
        return self._ledger_service

    async def execute(self, material_id: str) -> StockStatusResult:
        service = await self._get_ledger_service()
        material = await service.get_material(material_id, require_enabled=False)
        assessment = await service.evaluate(material_id)
        return StockStatusResult(material=material, assessment=assessment)

    async def low_stock(self) -> list[StockAssessment]:
        service = await self._get_ledger_service()
        return await service.low_stock()

    def to_response(self, result: StockStatusResult) -> MaterialStockResponse:
        m = result.material
        return MaterialStockResponse(
            material_id=m.id or "",
            name=m.name,
            unit=m.unit,
            current_stock=m.current_stock,
            stock_value=m.stock_value,
            is_enabled=m.is_enabled,
            stock_status=StockStatusResponse.from_assessment(result.assessment),
        )

    def to_alert_response(self, alerts: list[StockAssessment]) -> StockAlertListResponse:
        return StockAlertListResponse(
            alerts=[StockStatusResponse.from_assessment(a) for a in alerts],
            total=len(alerts),
        )
