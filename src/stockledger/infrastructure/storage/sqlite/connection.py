"""
Pooled aiosqlite connections for the ledger database.

Every connection runs in WAL mode with foreign keys enforced. Writes that
read a stock counter before updating it go through ``transaction(immediate=True)``
so the database write lock is held from the first statement; readers keep
working against the last committed snapshot meanwhile.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from stockledger.config import get_logger, get_settings

logger = get_logger(__name__)

_LEDGER_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA foreign_keys=ON",
)


async def open_ledger_connection(db_path: Path, busy_timeout: int) -> aiosqlite.Connection:
    """Open one connection with the pragmas every ledger connection needs."""
    conn = await aiosqlite.connect(db_path)
    for pragma in _LEDGER_PRAGMAS:
        await conn.execute(pragma)
    await conn.execute(f"PRAGMA busy_timeout={int(busy_timeout)}")
    conn.row_factory = aiosqlite.Row
    return conn


class ConnectionPool:
    """
    Fixed-size pool of ledger connections.

    Connections are opened lazily on first use and handed out through an
    ``asyncio.Queue``; a caller waits when all of them are checked out.
    """

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 5,
        busy_timeout: int = 30000,
    ):
        self.db_path = db_path
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout

        self._pool: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue(maxsize=pool_size)
        self._connections: list[aiosqlite.Connection] = []
        self._initialized = False
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        async with self._lock:
            if self._initialized:
                return

            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            while len(self._connections) < self.pool_size:
                conn = await self._create_connection()
                self._connections.append(conn)
                self._pool.put_nowait(conn)

            self._initialized = True
            logger.info(
                "ledger_pool_opened",
                db_path=str(self.db_path),
                pool_size=self.pool_size,
            )

    async def _create_connection(self) -> aiosqlite.Connection:
        return await open_ledger_connection(self.db_path, self.busy_timeout)

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Check a connection out for the duration of the block.

        A connection is never handed back with a transaction still open.
        """
        if not self._initialized:
            await self.initialize()

        conn = await self._pool.get()
        try:
            yield conn
        finally:
            try:
                if conn.in_transaction:
                    await conn.rollback()
                    logger.warning("ledger_connection_reset", db_path=str(self.db_path))
            finally:
                self._pool.put_nowait(conn)

    @asynccontextmanager
    async def transaction(self, immediate: bool = False) -> AsyncIterator[aiosqlite.Connection]:
        """
        Run the block as one transaction: commit on exit, roll back on error.

        ``immediate`` issues BEGIN IMMEDIATE so no other connection can commit
        between this transaction's first read and its commit.
        """
        async with self.acquire() as conn:
            try:
                if immediate:
                    await conn.execute("BEGIN IMMEDIATE")
                yield conn
            except BaseException as exc:
                # CancelledError too: an aborted block never commits any part
                await conn.rollback()
                logger.debug("ledger_transaction_rolled_back", error_type=type(exc).__name__)
                raise
            await conn.commit()

    async def close(self) -> None:
        async with self._lock:
            while self._connections:
                await self._connections.pop().close()
            self._pool = asyncio.Queue(maxsize=self.pool_size)
            self._initialized = False
            logger.info("ledger_pool_closed", db_path=str(self.db_path))


_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Process-wide pool built from ``StorageSettings``."""
    global _pool
    if _pool is None:
        storage = get_settings().storage
        _pool = ConnectionPool(
            db_path=storage.db_path,
            pool_size=storage.pool_size,
            busy_timeout=storage.busy_timeout,
        )
        await _pool.initialize()
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


@asynccontextmanager
async def get_connection() -> AsyncIterator[aiosqlite.Connection]:
    """Read connection from the process-wide pool."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


@asynccontextmanager
async def get_transaction() -> AsyncIterator[aiosqlite.Connection]:
    """Deferred transaction: for writes that do not depend on a prior read."""
    pool = await get_pool()
    async with pool.transaction() as conn:
        yield conn


@asynccontextmanager
async def get_write_transaction() -> AsyncIterator[aiosqlite.Connection]:
    """Immediate transaction: for read-then-write on stock counters and request status."""
    pool = await get_pool()
    async with pool.transaction(immediate=True) as conn:
        yield conn
