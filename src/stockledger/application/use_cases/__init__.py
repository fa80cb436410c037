"""
Use cases - Application business logic.

Each use case orchestrates core services to fulfill a specific
business operation. Use cases are the only entry point for API handlers.
"""

from stockledger.application.use_cases.create_reorder_request import (
    CreateReorderRequestUseCase,
)
from stockledger.application.use_cases.evaluate_stock_status import (
    EvaluateStockStatusUseCase,
    StockStatusResult,
)
from stockledger.application.use_cases.list_movements import ListMovementsUseCase
from stockledger.application.use_cases.list_reorder_requests import (
    GetReorderRequestUseCase,
    ListReorderRequestsUseCase,
)
from stockledger.application.use_cases.reconcile_stock import ReconcileStockUseCase
from stockledger.application.use_cases.record_movement import RecordMovementUseCase
from stockledger.application.use_cases.transition_reorder_request import (
    TransitionReorderRequestUseCase,
)

__all__ = [
    "RecordMovementUseCase",
    "ListMovementsUseCase",
    "EvaluateStockStatusUseCase",
    "StockStatusResult",
    "ReconcileStockUseCase",
    "CreateReorderRequestUseCase",
    "TransitionReorderRequestUseCase",
    "ListReorderRequestsUseCase",
    "GetReorderRequestUseCase",
]
