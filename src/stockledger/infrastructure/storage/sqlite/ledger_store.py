"""
SQLite implementation of the movement ledger.

A movement insert and the matching stock update always share one
``BEGIN IMMEDIATE`` transaction. The stock update is a compare-and-swap
on ``materials.stock_version``; if another writer got there first the
transaction is rolled back and ConcurrencyConflictError is raised.
"""

from collections.abc import AsyncIterator
from datetime import UTC, datetime
from decimal import Decimal

import aiosqlite

from stockledger.config import get_logger
from stockledger.core.entities.inventory import (
    InventoryMovement,
    MovementFilter,
    MovementType,
)
from stockledger.core.entities.material import Material
from stockledger.core.exceptions import ConcurrencyConflictError, MaterialNotFoundError
from stockledger.core.interfaces.ledger_store import ILedgerStore
from stockledger.infrastructure.storage.sqlite.codec import (
    decimal_to_text,
    generate_id,
    text_to_decimal,
    text_to_timestamp,
    timestamp_to_text,
)
from stockledger.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_write_transaction,
)
from stockledger.infrastructure.storage.sqlite.material_store import row_to_material

logger = get_logger(__name__)


async def _bump_stock(
    conn: aiosqlite.Connection,
    material_id: str,
    new_stock: Decimal,
    expected_version: int,
    now: datetime,
) -> None:
    cursor = await conn.execute(
        """
        UPDATE materials
        SET current_stock = ?, stock_version = stock_version + 1, updated_at = ?
        WHERE id = ? AND stock_version = ?
        """,
        (decimal_to_text(new_stock), timestamp_to_text(now), material_id, expected_version),
    )
    if cursor.rowcount == 0:
        logger.warning(
            "concurrency_conflict",
            entity="material",
            entity_id=material_id,
            expected_version=expected_version,
        )
        raise ConcurrencyConflictError("material", material_id, expected_version)


async def apply_movement(
    conn: aiosqlite.Connection,
    movement: InventoryMovement,
    expected_version: int,
) -> tuple[InventoryMovement, Material]:
    """
    Insert a movement and move the stock counter by its quantity.

    Must run inside a write transaction owned by the caller; raising here
    leaves the rollback to that transaction.
    """
    cursor = await conn.execute(
        "SELECT * FROM materials WHERE id = ?", (movement.material_id,)
    )
    row = await cursor.fetchone()
    if row is None:
        raise MaterialNotFoundError(movement.material_id)
    material = row_to_material(row)

    if material.stock_version != expected_version:
        logger.warning(
            "concurrency_conflict",
            entity="material",
            entity_id=material.id,
            expected_version=expected_version,
            actual_version=material.stock_version,
        )
        raise ConcurrencyConflictError("material", movement.material_id, expected_version)

    now = datetime.now(UTC)
    new_stock = material.current_stock + movement.quantity
    await _bump_stock(conn, movement.material_id, new_stock, expected_version, now)

    stored = movement.model_copy(update={"id": movement.id or generate_id(), "recorded_at": now})
    await conn.execute(
        """
        INSERT INTO inventory_movements (
            id, material_id, type, quantity, unit_cost, total_cost,
            reference, notes, recorded_by, reorder_request_id, recorded_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            stored.id,
            stored.material_id,
            stored.type.value,
            decimal_to_text(stored.quantity),
            decimal_to_text(stored.unit_cost),
            decimal_to_text(stored.total_cost),
            stored.reference,
            stored.notes,
            stored.recorded_by,
            stored.reorder_request_id,
            timestamp_to_text(now),
        ),
    )

    updated = material.model_copy(
        update={
            "current_stock": new_stock,
            "stock_version": material.stock_version + 1,
            "updated_at": now,
        }
    )
    return stored, updated


def _build_where(filters: MovementFilter | None) -> tuple[list[str], list]:
    clauses: list[str] = []
    params: list = []
    if filters is None:
        return clauses, params
    if filters.material_id:
        clauses.append("material_id = ?")
        params.append(filters.material_id)
    if filters.type:
        clauses.append("type = ?")
        params.append(filters.type.value)
    if filters.start:
        clauses.append("recorded_at >= ?")
        params.append(timestamp_to_text(filters.start))
    if filters.end:
        clauses.append("recorded_at <= ?")
        params.append(timestamp_to_text(filters.end))
    return clauses, params


class SQLiteLedgerStore(ILedgerStore):
    """SQLite implementation of the append-only movement ledger."""

    async def commit_movement(
        self, movement: InventoryMovement, expected_version: int
    ) -> tuple[InventoryMovement, Material]:
        async with get_write_transaction() as conn:
            return await apply_movement(conn, movement, expected_version)

    async def get_movement(self, movement_id: str) -> InventoryMovement | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM inventory_movements WHERE id = ?", (movement_id,)
            )
            row = await cursor.fetchone()
            return self._row_to_movement(row) if row else None

    async def list_movements(
        self,
        filters: MovementFilter | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[InventoryMovement]:
        clauses, params = _build_where(filters)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM inventory_movements
                {where}
                ORDER BY recorded_at DESC, seq DESC
                LIMIT ? OFFSET ?
                """,
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_movement(row) for row in rows]

    async def iter_movements(
        self, filters: MovementFilter | None = None, batch_size: int = 200
    ) -> AsyncIterator[InventoryMovement]:
        """
        Newest-first iteration, fetched in keyset pages.

        The connection is released between pages, so a long iteration never
        holds a pool slot while the consumer works.
        """
        base_clauses, base_params = _build_where(filters)
        cursor_key: tuple[str, int] | None = None

        while True:
            clauses = list(base_clauses)
            params = list(base_params)
            if cursor_key is not None:
                clauses.append("(recorded_at < ? OR (recorded_at = ? AND seq < ?))")
                params.extend([cursor_key[0], cursor_key[0], cursor_key[1]])
            where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

            async with get_connection() as conn:
                cursor = await conn.execute(
                    f"""
                    SELECT * FROM inventory_movements
                    {where}
                    ORDER BY recorded_at DESC, seq DESC
                    LIMIT ?
                    """,
                    (*params, batch_size),
                )
                rows = await cursor.fetchall()

            for row in rows:
                yield self._row_to_movement(row)

            if len(rows) < batch_size:
                return
            last = rows[-1]
            cursor_key = (last["recorded_at"], last["seq"])

    async def sum_movements(self, material_id: str) -> tuple[Decimal, int]:
        total = Decimal("0")
        count = 0
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT quantity FROM inventory_movements WHERE material_id = ?",
                (material_id,),
            )
            async for row in cursor:
                total += Decimal(row["quantity"])
                count += 1
        return total, count

    async def repair_stock(
        self, material_id: str, stock: Decimal, expected_version: int
    ) -> Material:
        async with get_write_transaction() as conn:
            await _bump_stock(conn, material_id, stock, expected_version, datetime.now(UTC))
            cursor = await conn.execute("SELECT * FROM materials WHERE id = ?", (material_id,))
            row = await cursor.fetchone()

        logger.info("stock_repaired", material_id=material_id, stock=str(stock))
        return row_to_material(row)

    @staticmethod
    def _row_to_movement(row: aiosqlite.Row) -> InventoryMovement:
        """Convert database row to InventoryMovement entity."""
        return InventoryMovement(
            id=row["id"],
            material_id=row["material_id"],
            type=MovementType(row["type"]),
            quantity=text_to_decimal(row["quantity"]),
            unit_cost=text_to_decimal(row["unit_cost"]),
            total_cost=text_to_decimal(row["total_cost"]),
            reference=row["reference"],
            notes=row["notes"],
            recorded_by=row["recorded_by"],
            reorder_request_id=row["reorder_request_id"],
            recorded_at=text_to_timestamp(row["recorded_at"]),
        )
