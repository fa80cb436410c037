"""
Service factory functions for dependency injection.

This module wires the SQLite stores to the core services. Use cases
import from here.

The ledger and the workflow share one KeyedLock, so a reorder receipt
and a direct movement on the same material wait for each other.
"""

from typing import TYPE_CHECKING

from stockledger.config import get_settings
from stockledger.core.services import (
    KeyedLock,
    MovementLedgerService,
    ReorderWorkflowService,
    StockAlertEvaluator,
)

if TYPE_CHECKING:
    from stockledger.core.interfaces import ILedgerStore, IMaterialStore, IReorderStore


# Singleton service instances
_locks: KeyedLock | None = None
_alert_evaluator: StockAlertEvaluator | None = None
_ledger_service: MovementLedgerService | None = None
_workflow_service: ReorderWorkflowService | None = None


def get_locks() -> KeyedLock:
    """Process-wide lock registry for materials and reorder requests."""
    global _locks
    if _locks is None:
        _locks = KeyedLock()
    return _locks


def get_stock_alert_evaluator() -> StockAlertEvaluator:
    """Get or create the StockAlertEvaluator configured from settings."""
    global _alert_evaluator
    if _alert_evaluator is None:
        inventory = get_settings().inventory
        _alert_evaluator = StockAlertEvaluator(
            high_multiplier=inventory.high_stock_multiplier,
            target_multiplier=inventory.reorder_target_multiplier,
        )
    return _alert_evaluator


async def get_movement_ledger_service(
    material_store: "IMaterialStore | None" = None,
    ledger_store: "ILedgerStore | None" = None,
) -> MovementLedgerService:
    """
    Get or create MovementLedgerService instance.

    Creates infrastructure dependencies if not provided. Passing a store
    builds a fresh, uncached service around it.

    Args:
        material_store: Optional material catalog override
        ledger_store: Optional ledger store override

    Returns:
        Configured MovementLedgerService
    """
    global _ledger_service

    overridden = material_store is not None or ledger_store is not None
    if _ledger_service is not None and not overridden:
        return _ledger_service

    # Lazy import infrastructure to avoid circular imports
    from stockledger.infrastructure.storage.sqlite import (
        get_ledger_store,
        get_material_store,
    )

    inventory = get_settings().inventory
    service = MovementLedgerService(
        material_store=material_store or await get_material_store(),
        ledger_store=ledger_store or await get_ledger_store(),
        alert_evaluator=get_stock_alert_evaluator(),
        locks=get_locks(),
        adjustment_limit=inventory.adjustment_limit,
        adjustment_floor_enabled=inventory.adjustment_floor_enabled,
    )

    if not overridden:
        _ledger_service = service
    return service


async def get_reorder_workflow_service(
    reorder_store: "IReorderStore | None" = None,
    ledger_service: MovementLedgerService | None = None,
) -> ReorderWorkflowService:
    """
    Get or create ReorderWorkflowService instance.

    Args:
        reorder_store: Optional reorder store override
        ledger_service: Optional ledger service override

    Returns:
        Configured ReorderWorkflowService
    """
    global _workflow_service

    overridden = reorder_store is not None or ledger_service is not None
    if _workflow_service is not None and not overridden:
        return _workflow_service

    from stockledger.infrastructure.storage.sqlite import get_reorder_store

    inventory = get_settings().inventory
    service = ReorderWorkflowService(
        reorder_store=reorder_store or await get_reorder_store(),
        ledger=ledger_service or await get_movement_ledger_service(),
        locks=get_locks(),
        approver_roles=inventory.approver_roles,
        allow_duplicate_pending=inventory.allow_duplicate_pending,
    )

    if not overridden:
        _workflow_service = service
    return service


def reset_services() -> None:
    """
    Reset all singleton service instances.

    Useful for testing or when configuration changes.
    """
    global _locks
    global _alert_evaluator
    global _ledger_service
    global _workflow_service

    _locks = None
    _alert_evaluator = None
    _ledger_service = None
    _workflow_service = None


__all__ = [
    "get_locks",
    "get_stock_alert_evaluator",
    "get_movement_ledger_service",
    "get_reorder_workflow_service",
    "reset_services",
]
