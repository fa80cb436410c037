"""Fixtures wiring the real services to a temporary SQLite database."""

from collections.abc import AsyncIterator
from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

import stockledger.infrastructure.storage.sqlite.connection as conn_module
from stockledger.core.entities import Material, MovementType
from stockledger.core.services import KeyedLock, MovementLedgerService, ReorderWorkflowService
from stockledger.infrastructure.storage.sqlite import (
    SQLiteLedgerStore,
    SQLiteMaterialStore,
    SQLiteReorderStore,
    close_pool,
)
from stockledger.infrastructure.storage.sqlite.migrations.migrator import initialize_database


@pytest.fixture
async def ledger_db(tmp_path: Path) -> AsyncIterator[Path]:
    db_path = tmp_path / "ledger.db"
    await initialize_database(db_path, create_backup_before=False)

    settings = MagicMock()
    settings.storage.db_path = db_path
    settings.storage.pool_size = 4
    settings.storage.busy_timeout = 10000

    conn_module._pool = None
    with patch.object(conn_module, "get_settings", return_value=settings):
        try:
            yield db_path
        finally:
            await close_pool()


@pytest.fixture
def locks() -> KeyedLock:
    return KeyedLock()


@pytest.fixture
def ledger(ledger_db, locks) -> MovementLedgerService:
    return MovementLedgerService(SQLiteMaterialStore(), SQLiteLedgerStore(), locks=locks)


@pytest.fixture
def workflow(ledger, locks) -> ReorderWorkflowService:
    return ReorderWorkflowService(SQLiteReorderStore(), ledger, locks=locks)


@pytest.fixture
async def stocked_cement(ledger, admin) -> Material:
    """Cement with min level 5 and ten units booked in."""
    await SQLiteMaterialStore().create_material(
        Material(
            id="MAT-001",
            name="Cemento gris",
            unit="kg",
            unit_cost=Decimal("12.50"),
            min_stock_level=Decimal("5"),
        )
    )
    commit = await ledger.record_movement(
        "MAT-001", MovementType.PURCHASE, Decimal("10"), reference="opening", actor=admin
    )
    return commit.material
