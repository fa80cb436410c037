"""
SQLite implementation of reorder request storage.

Transitions are a compare-and-swap on ``status``. Receipt writes the
status change and the PURCHASE movement in the same write transaction
as the ledger uses, so they commit or roll back together.
"""

from collections.abc import AsyncIterator

import aiosqlite

from stockledger.config import get_logger
from stockledger.core.entities.inventory import InventoryMovement
from stockledger.core.entities.material import Material
from stockledger.core.entities.reorder import (
    ReorderFilter,
    ReorderRequest,
    ReorderStatus,
)
from stockledger.core.exceptions import ConcurrencyConflictError, ReorderRequestNotFoundError
from stockledger.core.interfaces.reorder_store import IReorderStore
from stockledger.infrastructure.storage.sqlite.codec import (
    decimal_to_text,
    generate_id,
    text_to_decimal,
    text_to_timestamp,
    timestamp_to_text,
)
from stockledger.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_transaction,
    get_write_transaction,
)
from stockledger.infrastructure.storage.sqlite.ledger_store import apply_movement

logger = get_logger(__name__)

# Columns a transition may change
_MUTABLE_COLUMNS = (
    "status",
    "notes",
    "order_number",
    "rejection_reason",
    "approved_by",
    "rejected_by",
    "cancelled_by",
    "received_by",
    "approved_at",
    "rejected_at",
    "ordered_at",
    "received_at",
    "cancelled_at",
)


def _column_value(request: ReorderRequest, column: str):
    value = getattr(request, column)
    if column == "status":
        return value.value
    if column.endswith("_at"):
        return timestamp_to_text(value)
    return value


def _build_where(filters: ReorderFilter | None) -> tuple[list[str], list]:
    clauses: list[str] = []
    params: list = []
    if filters is None:
        return clauses, params
    if filters.material_id:
        clauses.append("material_id = ?")
        params.append(filters.material_id)
    if filters.status:
        clauses.append("status = ?")
        params.append(filters.status.value)
    if filters.start:
        clauses.append("requested_at >= ?")
        params.append(timestamp_to_text(filters.start))
    if filters.end:
        clauses.append("requested_at <= ?")
        params.append(timestamp_to_text(filters.end))
    return clauses, params


async def _update_request(
    conn: aiosqlite.Connection,
    request: ReorderRequest,
    expected_status: ReorderStatus,
) -> None:
    assignments = ", ".join(f"{c} = ?" for c in _MUTABLE_COLUMNS)
    values = [_column_value(request, c) for c in _MUTABLE_COLUMNS]
    cursor = await conn.execute(
        f"UPDATE reorder_requests SET {assignments} WHERE id = ? AND status = ?",
        (*values, request.id, expected_status.value),
    )
    if cursor.rowcount == 0:
        cursor = await conn.execute(
            "SELECT 1 FROM reorder_requests WHERE id = ?", (request.id,)
        )
        if await cursor.fetchone() is None:
            raise ReorderRequestNotFoundError(request.id or "")
        logger.warning(
            "concurrency_conflict",
            entity="reorder_request",
            entity_id=request.id,
            expected_status=expected_status.value,
        )
        raise ConcurrencyConflictError("reorder_request", request.id or "", expected_status.value)


class SQLiteReorderStore(IReorderStore):
    """SQLite implementation of reorder request storage."""

    async def create_request(self, request: ReorderRequest) -> ReorderRequest:
        if not request.id:
            request.id = generate_id()
        async with get_transaction() as conn:
            await conn.execute(
                """
                INSERT INTO reorder_requests (
                    id, material_id, requested_quantity, status, notes,
                    requested_by, requested_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    request.id,
                    request.material_id,
                    decimal_to_text(request.requested_quantity),
                    request.status.value,
                    request.notes,
                    request.requested_by,
                    timestamp_to_text(request.requested_at),
                ),
            )
        return request

    async def get_request(self, request_id: str) -> ReorderRequest | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM reorder_requests WHERE id = ?", (request_id,)
            )
            row = await cursor.fetchone()
            return self._row_to_request(row) if row else None

    async def find_pending(self, material_id: str) -> ReorderRequest | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM reorder_requests
                WHERE material_id = ? AND status = ?
                ORDER BY requested_at, seq
                LIMIT 1
                """,
                (material_id, ReorderStatus.PENDING.value),
            )
            row = await cursor.fetchone()
            return self._row_to_request(row) if row else None

    async def list_requests(
        self,
        filters: ReorderFilter | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[ReorderRequest]:
        clauses, params = _build_where(filters)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM reorder_requests
                {where}
                ORDER BY requested_at DESC, seq DESC
                LIMIT ? OFFSET ?
                """,
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_request(row) for row in rows]

    async def iter_requests(
        self, filters: ReorderFilter | None = None, batch_size: int = 200
    ) -> AsyncIterator[ReorderRequest]:
        base_clauses, base_params = _build_where(filters)
        cursor_key: tuple[str, int] | None = None

        while True:
            clauses = list(base_clauses)
            params = list(base_params)
            if cursor_key is not None:
                clauses.append("(requested_at < ? OR (requested_at = ? AND seq < ?))")
                params.extend([cursor_key[0], cursor_key[0], cursor_key[1]])
            where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

            async with get_connection() as conn:
                cursor = await conn.execute(
                    f"""
                    SELECT * FROM reorder_requests
                    {where}
                    ORDER BY requested_at DESC, seq DESC
                    LIMIT ?
                    """,
                    (*params, batch_size),
                )
                rows = await cursor.fetchall()

            for row in rows:
                yield self._row_to_request(row)

            if len(rows) < batch_size:
                return
            cursor_key = (rows[-1]["requested_at"], rows[-1]["seq"])

    async def save_transition(
        self, request: ReorderRequest, expected_status: ReorderStatus
    ) -> ReorderRequest:
        async with get_transaction() as conn:
            await _update_request(conn, request, expected_status)
        return request

    async def commit_receipt(
        self,
        request: ReorderRequest,
        expected_status: ReorderStatus,
        movement: InventoryMovement,
        expected_version: int,
    ) -> tuple[ReorderRequest, InventoryMovement, Material]:
        async with get_write_transaction() as conn:
            await _update_request(conn, request, expected_status)
            movement, material = await apply_movement(conn, movement, expected_version)
        return request, movement, material

    @staticmethod
    def _row_to_request(row: aiosqlite.Row) -> ReorderRequest:
        """Convert database row to ReorderRequest entity."""
        return ReorderRequest(
            id=row["id"],
            material_id=row["material_id"],
            requested_quantity=text_to_decimal(row["requested_quantity"]),
            status=ReorderStatus(row["status"]),
            notes=row["notes"],
            order_number=row["order_number"],
            rejection_reason=row["rejection_reason"],
            requested_by=row["requested_by"],
            approved_by=row["approved_by"],
            rejected_by=row["rejected_by"],
            cancelled_by=row["cancelled_by"],
            received_by=row["received_by"],
            requested_at=text_to_timestamp(row["requested_at"]),
            approved_at=text_to_timestamp(row["approved_at"]),
            rejected_at=text_to_timestamp(row["rejected_at"]),
            ordered_at=text_to_timestamp(row["ordered_at"]),
            received_at=text_to_timestamp(row["received_at"]),
            cancelled_at=text_to_timestamp(row["cancelled_at"]),
        )
