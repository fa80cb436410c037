"""
Application layer - Use cases, DTOs, and service factories.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services
3. Providing factory functions for dependency injection

Use cases are the only entry point for API handlers.
"""

from stockledger.application.services import (
    get_movement_ledger_service,
    get_reorder_workflow_service,
    reset_services,
)
from stockledger.application.use_cases import (
    CreateReorderRequestUseCase,
    EvaluateStockStatusUseCase,
    GetReorderRequestUseCase,
    ListMovementsUseCase,
    ListReorderRequestsUseCase,
    ReconcileStockUseCase,
    RecordMovementUseCase,
    TransitionReorderRequestUseCase,
)

__all__ = [
    # Use Cases
    "RecordMovementUseCase",
    "ListMovementsUseCase",
    "EvaluateStockStatusUseCase",
    "ReconcileStockUseCase",
    "CreateReorderRequestUseCase",
    "TransitionReorderRequestUseCase",
    "ListReorderRequestsUseCase",
    "GetReorderRequestUseCase",
    # Service factories
    "get_movement_ledger_service",
    "get_reorder_workflow_service",
    "reset_services",
]
