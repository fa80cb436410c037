"""Core domain entities."""

from stockledger.core.entities.actor import SYSTEM_ACTOR, Actor
from stockledger.core.entities.inventory import (
    DEPLETING_TYPES,
    INCREASING_TYPES,
    InventoryMovement,
    MovementFilter,
    MovementSummary,
    MovementType,
    MovementTypeSummary,
    derive_signed_quantity,
)
from stockledger.core.entities.material import Material
from stockledger.core.entities.reorder import (
    TERMINAL_STATUSES,
    TRANSITIONS,
    ReorderAction,
    ReorderFilter,
    ReorderRequest,
    ReorderStatus,
    ReorderStatusSummary,
    ReorderSummary,
    TransitionPayload,
    allowed_actions,
    next_status,
)
from stockledger.core.entities.stock import (
    StockAssessment,
    StockReconciliation,
    StockStatus,
)

__all__ = [
    # Actor
    "Actor",
    "SYSTEM_ACTOR",
    # Material
    "Material",
    # Movement entities
    "InventoryMovement",
    "MovementType",
    "MovementFilter",
    "MovementSummary",
    "MovementTypeSummary",
    "INCREASING_TYPES",
    "DEPLETING_TYPES",
    "derive_signed_quantity",
    # Reorder entities
    "ReorderRequest",
    "ReorderStatus",
    "ReorderAction",
    "ReorderFilter",
    "ReorderSummary",
    "ReorderStatusSummary",
    "TransitionPayload",
    "TRANSITIONS",
    "TERMINAL_STATUSES",
    "next_status",
    "allowed_actions",
    # Stock entities
    "StockStatus",
    "StockAssessment",
    "StockReconciliation",
]
