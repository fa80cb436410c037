"""Core interfaces (ports) for dependency injection."""

from stockledger.core.interfaces.ledger_store import ILedgerStore
from stockledger.core.interfaces.material_store import IMaterialStore
from stockledger.core.interfaces.reorder_store import IReorderStore

__all__ = [
    "IMaterialStore",
    "ILedgerStore",
    "IReorderStore",
]
