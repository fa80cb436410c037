"""Pytest fixtures for SQLite storage tests."""

from collections.abc import AsyncGenerator
from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

import stockledger.infrastructure.storage.sqlite.connection as conn_module
from stockledger.core.entities import Material
from stockledger.infrastructure.storage.sqlite.connection import close_pool
from stockledger.infrastructure.storage.sqlite.material_store import SQLiteMaterialStore
from stockledger.infrastructure.storage.sqlite.migrations.migrator import initialize_database


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
async def initialized_db(temp_db_path: Path) -> Path:
    """Temporary database with every migration applied."""
    results = await initialize_database(temp_db_path, create_backup_before=False)
    assert all(r.success for r in results)
    return temp_db_path


@pytest.fixture
def mock_settings(temp_db_path: Path):
    """Mock settings with temp database path."""
    mock = MagicMock()
    mock.storage.db_path = temp_db_path
    mock.storage.pool_size = 2
    mock.storage.busy_timeout = 5000
    return mock


@pytest.fixture
async def db(initialized_db: Path, mock_settings) -> AsyncGenerator[Path, None]:
    """Point the global pool at the temporary database for one test."""
    conn_module._pool = None
    with patch.object(conn_module, "get_settings", return_value=mock_settings):
        try:
            yield initialized_db
        finally:
            await close_pool()


@pytest.fixture
async def cement(db) -> Material:
    """A stored material: min 5, no max, zero stock."""
    return await SQLiteMaterialStore().create_material(
        Material(
            id="MAT-001",
            name="Cemento gris",
            unit="kg",
            unit_cost=Decimal("12.50"),
            min_stock_level=Decimal("5"),
        )
    )


@pytest.fixture
async def pipe(db) -> Material:
    """A second stored material with both thresholds."""
    return await SQLiteMaterialStore().create_material(
        Material(
            id="MAT-002",
            name="Tubo PVC 2in",
            unit="m",
            unit_cost=Decimal("3.20"),
            min_stock_level=Decimal("10"),
            max_stock_level=Decimal("50"),
        )
    )
