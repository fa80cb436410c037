"""Tests for RecordMovementUseCase and ListMovementsUseCase."""

from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from stockledger.application.dto.requests import ListMovementsRequest, RecordMovementRequest
from stockledger.application.use_cases.list_movements import ListMovementsUseCase
from stockledger.application.use_cases.record_movement import RecordMovementUseCase
from stockledger.core.entities import (
    InventoryMovement,
    MovementFilter,
    MovementSummary,
    MovementType,
)
from stockledger.core.exceptions import InsufficientStockError
from stockledger.core.services.movement_ledger import LedgerCommit, MovementPage
from stockledger.core.services.stock_alerts import evaluate_stock_status


@pytest.fixture
def mock_ledger_service():
    return AsyncMock()


def _sale(quantity: str = "-4") -> InventoryMovement:
    return InventoryMovement(
        id="MOV-1",
        material_id="MAT-001",
        type=MovementType.SALE,
        quantity=Decimal(quantity),
        reference="FAC-9",
        recorded_at=datetime(2026, 3, 1, 12, 0, tzinfo=UTC),
    )


class TestRecordMovementUseCase:
    async def test_passes_request_through(self, mock_ledger_service, sample_material, worker):
        material = sample_material.model_copy(update={"current_stock": Decimal("6")})
        mock_ledger_service.record_movement.return_value = LedgerCommit(
            movement=_sale(), material=material, assessment=evaluate_stock_status(material)
        )
        use_case = RecordMovementUseCase(ledger_service=mock_ledger_service)

        request = RecordMovementRequest(
            material_id="MAT-001", type=MovementType.SALE, quantity=Decimal("4"), reference="FAC-9"
        )
        result = await use_case.execute(request, actor=worker)

        mock_ledger_service.record_movement.assert_awaited_once_with(
            material_id="MAT-001",
            movement_type=MovementType.SALE,
            quantity=Decimal("4"),
            unit_cost=None,
            reference="FAC-9",
            notes=None,
            actor=worker,
        )
        response = use_case.to_response(result)
        assert response.movement.quantity == Decimal("-4")
        assert response.current_stock == Decimal("6")
        assert response.stock_status.status == "normal"

    async def test_errors_propagate(self, mock_ledger_service):
        mock_ledger_service.record_movement.side_effect = InsufficientStockError(
            "MAT-001", Decimal("40"), Decimal("10")
        )
        use_case = RecordMovementUseCase(ledger_service=mock_ledger_service)

        with pytest.raises(InsufficientStockError):
            await use_case.execute(
                RecordMovementRequest(
                    material_id="MAT-001", type=MovementType.SALE, quantity=Decimal("40")
                )
            )

    def test_negative_unit_cost_rejected(self):
        with pytest.raises(ValueError):
            RecordMovementRequest(
                material_id="MAT-001",
                type=MovementType.PURCHASE,
                quantity=Decimal("1"),
                unit_cost=Decimal("-1"),
            )


class TestListMovementsUseCase:
    async def test_builds_filter_and_summary(self, mock_ledger_service):
        movements = [_sale("-4"), _sale("-1")]
        mock_ledger_service.list_movements.return_value = MovementPage(
            movements=movements, summary=MovementSummary.from_movements(movements)
        )
        use_case = ListMovementsUseCase(ledger_service=mock_ledger_service)
        request = ListMovementsRequest(material_id="MAT-001", type=MovementType.SALE, limit=10)

        result = await use_case.execute(request)
        response = use_case.to_response(result, request)

        filters = mock_ledger_service.list_movements.call_args.args[0]
        assert filters == MovementFilter(material_id="MAT-001", type=MovementType.SALE)
        assert mock_ledger_service.list_movements.call_args.kwargs == {"limit": 10, "offset": 0}
        assert len(response.movements) == 2
        assert response.summary.total_quantity == Decimal("-5")
        assert response.summary.by_type["SALE"].count == 2
