"""
SQLite implementation of the material catalog.

The stock counter columns are read here but never written: they change
only inside a ledger transaction (see ledger_store).
"""

from datetime import UTC, datetime
from decimal import Decimal

import aiosqlite

from stockledger.config import get_logger
from stockledger.core.entities.material import Material
from stockledger.core.interfaces.material_store import IMaterialStore
from stockledger.infrastructure.storage.sqlite.codec import (
    decimal_to_text,
    generate_id,
    text_to_decimal,
    text_to_timestamp,
    timestamp_to_text,
)
from stockledger.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)


def row_to_material(row: aiosqlite.Row) -> Material:
    """Convert database row to Material entity."""
    return Material(
        id=row["id"],
        name=row["name"],
        unit=row["unit"],
        unit_cost=text_to_decimal(row["unit_cost"]),
        min_stock_level=text_to_decimal(row["min_stock_level"]),
        max_stock_level=text_to_decimal(row["max_stock_level"]),
        current_stock=text_to_decimal(row["current_stock"]),
        stock_version=row["stock_version"],
        is_enabled=bool(row["is_enabled"]),
        created_at=text_to_timestamp(row["created_at"]),
        updated_at=text_to_timestamp(row["updated_at"]),
    )


class SQLiteMaterialStore(IMaterialStore):
    """SQLite implementation of the material catalog."""

    async def create_material(self, material: Material) -> Material:
        """
        Create a new material record.

        Opening stock is not accepted here: a material starts at zero and
        every unit it ever holds is booked through the ledger.
        """
        if not material.id:
            material.id = generate_id()
        material.current_stock = Decimal("0")
        material.stock_version = 0
        material.updated_at = datetime.now(UTC)
        async with get_transaction() as conn:
            await conn.execute(
                """
                INSERT INTO materials (
                    id, name, unit, unit_cost, min_stock_level, max_stock_level,
                    current_stock, stock_version, is_enabled, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, '0', 0, ?, ?, ?)
                """,
                (
                    material.id,
                    material.name,
                    material.unit,
                    decimal_to_text(material.unit_cost),
                    decimal_to_text(material.min_stock_level),
                    decimal_to_text(material.max_stock_level),
                    1 if material.is_enabled else 0,
                    timestamp_to_text(material.created_at),
                    timestamp_to_text(material.updated_at),
                ),
            )
        logger.info("material_created", material_id=material.id, name=material.name)
        return material

    async def get_material(self, material_id: str) -> Material | None:
        """Get material by ID, enabled or not."""
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM materials WHERE id = ?", (material_id,))
            row = await cursor.fetchone()
            return row_to_material(row) if row else None

    async def list_materials(
        self,
        enabled_only: bool = True,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Material]:
        """List materials ordered by name."""
        async with get_connection() as conn:
            if enabled_only:
                cursor = await conn.execute(
                    """
                    SELECT * FROM materials
                    WHERE is_enabled = 1
                    ORDER BY name, id
                    LIMIT ? OFFSET ?
                    """,
                    (limit, offset),
                )
            else:
                cursor = await conn.execute(
                    "SELECT * FROM materials ORDER BY name, id LIMIT ? OFFSET ?",
                    (limit, offset),
                )
            rows = await cursor.fetchall()
            return [row_to_material(row) for row in rows]

    async def set_enabled(self, material_id: str, enabled: bool) -> Material | None:
        """Soft-enable or soft-disable a material."""
        async with get_transaction() as conn:
            cursor = await conn.execute(
                "UPDATE materials SET is_enabled = ?, updated_at = ? WHERE id = ?",
                (1 if enabled else 0, timestamp_to_text(datetime.now(UTC)), material_id),
            )
            if cursor.rowcount == 0:
                return None
            cursor = await conn.execute("SELECT * FROM materials WHERE id = ?", (material_id,))
            row = await cursor.fetchone()

        logger.info("material_enabled_changed", material_id=material_id, enabled=enabled)
        return row_to_material(row)
