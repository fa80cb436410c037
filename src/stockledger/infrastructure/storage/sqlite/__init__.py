"""SQLite storage implementations."""

from stockledger.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
    get_write_transaction,
)
from stockledger.infrastructure.storage.sqlite.ledger_store import SQLiteLedgerStore
from stockledger.infrastructure.storage.sqlite.material_store import SQLiteMaterialStore
from stockledger.infrastructure.storage.sqlite.reorder_store import SQLiteReorderStore

# Singleton instances
_material_store: SQLiteMaterialStore | None = None
_ledger_store: SQLiteLedgerStore | None = None
_reorder_store: SQLiteReorderStore | None = None


async def get_material_store() -> SQLiteMaterialStore:
    """Get singleton material store instance."""
    global _material_store
    if _material_store is None:
        _material_store = SQLiteMaterialStore()
    return _material_store


async def get_ledger_store() -> SQLiteLedgerStore:
    """Get singleton ledger store instance."""
    global _ledger_store
    if _ledger_store is None:
        _ledger_store = SQLiteLedgerStore()
    return _ledger_store


async def get_reorder_store() -> SQLiteReorderStore:
    """Get singleton reorder store instance."""
    global _reorder_store
    if _reorder_store is None:
        _reorder_store = SQLiteReorderStore()
    return _reorder_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    "get_write_transaction",
    # Store classes
    "SQLiteMaterialStore",
    "SQLiteLedgerStore",
    "SQLiteReorderStore",
    # Factory functions
    "get_material_store",
    "get_ledger_store",
    "get_reorder_store",
]
