"""Core domain services (layer-pure, no infrastructure imports)."""

from stockledger.core.services.keyed_lock import KeyedLock
from stockledger.core.services.movement_ledger import (
    LedgerCommit,
    MovementLedgerService,
    MovementPage,
)
from stockledger.core.services.reorder_workflow import (
    ReorderPage,
    ReorderWorkflowService,
    TransitionOutcome,
)
from stockledger.core.services.stock_alerts import (
    StockAlertEvaluator,
    evaluate_stock_status,
    high_threshold,
    suggest_reorder_quantity,
)

__all__ = [
    "KeyedLock",
    "MovementLedgerService",
    "LedgerCommit",
    "MovementPage",
    "ReorderWorkflowService",
    "TransitionOutcome",
    "ReorderPage",
    "StockAlertEvaluator",
    "evaluate_stock_status",
    "high_threshold",
    "suggest_reorder_quantity",
]
