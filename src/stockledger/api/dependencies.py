"""
Dependency injection container for FastAPI.

Provides the calling actor and use case instances to route handlers.
"""

from fastapi import Header

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
from stockledger.core.entities.actor import Actor


# Actor dependency
def get_actor(
    x_actor_id: str = Header(default="anonymous", description="Authenticated user ID"),
    x_actor_role: str = Header(default="WORKER", description="Role of the authenticated user"),
) -> Actor:
    """Actor as asserted by the authenticating gateway."""
    return Actor(id=x_actor_id, role=x_actor_role)


# Movement use case dependencies
def get_record_movement_use_case() -> RecordMovementUseCase:
    """Get record movement use case."""
    return RecordMovementUseCase()


def get_list_movements_use_case() -> ListMovementsUseCase:
    """Get list movements use case."""
    return ListMovementsUseCase()


# Stock use case dependencies
def get_evaluate_stock_status_use_case() -> EvaluateStockStatusUseCase:
    """Get evaluate stock status use case."""
    return EvaluateStockStatusUseCase()


def get_reconcile_stock_use_case() -> ReconcileStockUseCase:
    """Get reconcile stock use case."""
    return ReconcileStockUseCase()


# Reorder use case dependencies
def get_create_reorder_request_use_case() -> CreateReorderRequestUseCase:
    """Get create reorder request use case."""
    return CreateReorderRequestUseCase()


def get_transition_reorder_request_use_case() -> TransitionReorderRequestUseCase:
    """Get transition reorder request use case."""
    return TransitionReorderRequestUseCase()


def get_list_reorder_requests_use_case() -> ListReorderRequestsUseCase:
    """Get list reorder requests use case."""
    return ListReorderRequestsUseCase()


def get_get_reorder_request_use_case() -> GetReorderRequestUseCase:
    """Get single reorder request use case."""
    return GetReorderRequestUseCase()
