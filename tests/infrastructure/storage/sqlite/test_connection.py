"""Unit tests for SQLite connection pool."""

import asyncio
from pathlib import Path
from unittest.mock import patch

import aiosqlite
import pytest

import stockledger.infrastructure.storage.sqlite.connection as conn_module
from stockledger.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_write_transaction,
)

_INSERT_MATERIAL = """
    INSERT INTO materials (id, name, created_at, updated_at)
    VALUES (?, 'Arena', '2026-01-01T00:00:00.000000+00:00', '2026-01-01T00:00:00.000000+00:00')
"""


async def _count_materials(conn: aiosqlite.Connection, material_id: str) -> int:
    cursor = await conn.execute("SELECT COUNT(*) FROM materials WHERE id = ?", (material_id,))
    row = await cursor.fetchone()
    return row[0]


class TestConnectionPoolInit:
    """Tests for ConnectionPool initialization."""

    def test_defaults(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path)
        assert pool.db_path == temp_db_path
        assert pool.pool_size == 5
        assert pool.busy_timeout == 30000
        assert pool._initialized is False

    async def test_initialize_creates_directory(self, tmp_path: Path):
        db_path = tmp_path / "subdir" / "nested" / "test.db"
        pool = ConnectionPool(db_path, pool_size=1)

        await pool.initialize()
        assert db_path.parent.exists()
        await pool.close()

    async def test_initialize_idempotent(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=2)

        await pool.initialize()
        await pool.initialize()

        assert len(pool._connections) == 2
        await pool.close()

    async def test_connection_pragmas(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path)
        conn = await pool._create_connection()

        cursor = await conn.execute("PRAGMA journal_mode")
        assert (await cursor.fetchone())[0].lower() == "wal"
        cursor = await conn.execute("PRAGMA foreign_keys")
        assert (await cursor.fetchone())[0] == 1
        assert conn.row_factory == aiosqlite.Row
        await conn.close()


class TestConnectionPoolAcquire:
    """Tests for ConnectionPool.acquire()."""

    async def test_acquire_returns_connection_to_pool(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)
        await pool.initialize()

        async with pool.acquire():
            assert pool._pool.qsize() == 0

        assert pool._pool.qsize() == 1
        await pool.close()

    async def test_acquire_returns_on_exception(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)

        with pytest.raises(ValueError):
            async with pool.acquire():
                raise ValueError("Test error")

        assert pool._pool.qsize() == 1
        await pool.close()

    async def test_acquire_blocks_when_pool_exhausted(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)
        await pool.initialize()

        async with pool.acquire():
            with pytest.raises(asyncio.TimeoutError):
                async with asyncio.timeout(0.1):
                    async with pool.acquire():
                        pass

        await pool.close()


class TestConnectionPoolTransaction:
    """Tests for ConnectionPool.transaction()."""

    async def test_commits_on_success(self, initialized_db: Path):
        pool = ConnectionPool(initialized_db, pool_size=1)

        async with pool.transaction() as conn:
            await conn.execute(_INSERT_MATERIAL, ("MAT-T1",))

        async with pool.acquire() as conn:
            assert await _count_materials(conn, "MAT-T1") == 1
        await pool.close()

    async def test_rolls_back_on_exception(self, initialized_db: Path):
        pool = ConnectionPool(initialized_db, pool_size=1)

        with pytest.raises(ValueError):
            async with pool.transaction() as conn:
                await conn.execute(_INSERT_MATERIAL, ("MAT-T2",))
                raise ValueError("Force rollback")

        async with pool.acquire() as conn:
            assert await _count_materials(conn, "MAT-T2") == 0
        await pool.close()

    async def test_immediate_takes_write_lock(self, initialized_db: Path):
        pool = ConnectionPool(initialized_db, pool_size=1)

        async with pool.transaction(immediate=True) as conn:
            assert conn.in_transaction
            async with aiosqlite.connect(initialized_db, timeout=0) as other:
                with pytest.raises(aiosqlite.OperationalError, match="locked"):
                    await other.execute("BEGIN IMMEDIATE")

        await pool.close()

    async def test_immediate_rolls_back_on_exception(self, initialized_db: Path):
        pool = ConnectionPool(initialized_db, pool_size=1)

        with pytest.raises(RuntimeError):
            async with pool.transaction(immediate=True) as conn:
                await conn.execute(_INSERT_MATERIAL, ("MAT-T3",))
                raise RuntimeError("boom")

        async with pool.acquire() as conn:
            assert await _count_materials(conn, "MAT-T3") == 0
            assert not conn.in_transaction
        await pool.close()

    async def test_cancelled_block_rolls_back_and_releases_lock(self, initialized_db: Path):
        pool = ConnectionPool(initialized_db, pool_size=1)
        inserted = asyncio.Event()

        async def writer():
            async with pool.transaction(immediate=True) as conn:
                await conn.execute(_INSERT_MATERIAL, ("MAT-T5",))
                inserted.set()
                await asyncio.sleep(30)

        task = asyncio.create_task(writer())
        await inserted.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        async with pool.transaction(immediate=True) as conn:
            assert await _count_materials(conn, "MAT-T5") == 0
            await conn.execute(_INSERT_MATERIAL, ("MAT-T6",))

        async with pool.acquire() as conn:
            assert await _count_materials(conn, "MAT-T6") == 1
        await pool.close()

    async def test_open_transaction_discarded_on_return(self, initialized_db: Path):
        pool = ConnectionPool(initialized_db, pool_size=1)

        async with pool.acquire() as conn:
            await conn.execute("BEGIN IMMEDIATE")
            await conn.execute(_INSERT_MATERIAL, ("MAT-T7",))

        async with pool.acquire() as conn:
            assert not conn.in_transaction
            assert await _count_materials(conn, "MAT-T7") == 0
        async with aiosqlite.connect(initialized_db, timeout=0) as other:
            await other.execute("BEGIN IMMEDIATE")
            await other.rollback()
        await pool.close()


class TestConnectionPoolClose:
    """Tests for ConnectionPool.close()."""

    async def test_close_resets_pool(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=2)
        await pool.initialize()

        await pool.close()

        assert len(pool._connections) == 0
        assert pool._initialized is False
        assert pool._pool.qsize() == 0

    async def test_reinitialize_after_close(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=2)
        await pool.initialize()
        await pool.close()

        await pool.initialize()

        assert pool._pool.qsize() == 2
        await pool.close()

    async def test_close_safe_when_not_initialized(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)
        await pool.close()


class TestGlobalPool:
    """Tests for the module-level pool helpers."""

    async def test_get_pool_returns_same_instance(self, mock_settings):
        conn_module._pool = None

        with patch.object(conn_module, "get_settings", return_value=mock_settings):
            pool1 = await get_pool()
            pool2 = await get_pool()

            assert pool1 is pool2
            assert pool1.db_path == mock_settings.storage.db_path
            await close_pool()

        assert conn_module._pool is None

    async def test_close_pool_safe_when_none(self):
        conn_module._pool = None
        await close_pool()

    async def test_get_write_transaction_commits(self, mock_settings, initialized_db: Path):
        conn_module._pool = None
        mock_settings.storage.db_path = initialized_db

        with patch.object(conn_module, "get_settings", return_value=mock_settings):
            try:
                async with get_write_transaction() as conn:
                    await conn.execute(_INSERT_MATERIAL, ("MAT-T4",))

                async with get_connection() as conn:
                    assert await _count_materials(conn, "MAT-T4") == 1
            finally:
                await close_pool()
