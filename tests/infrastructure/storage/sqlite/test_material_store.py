"""Tests for SQLite material catalog."""

from decimal import Decimal

import aiosqlite
import pytest

from stockledger.core.entities import Material
from stockledger.infrastructure.storage.sqlite.material_store import SQLiteMaterialStore


class TestSQLiteMaterialStore:
    """Tests for SQLiteMaterialStore."""

    async def test_create_and_get(self, cement):
        store = SQLiteMaterialStore()
        fetched = await store.get_material("MAT-001")

        assert fetched is not None
        assert fetched.name == "Cemento gris"
        assert fetched.unit == "kg"
        assert fetched.unit_cost == Decimal("12.50")
        assert fetched.min_stock_level == Decimal("5")
        assert fetched.max_stock_level is None
        assert fetched.current_stock == Decimal("0")
        assert fetched.stock_version == 0
        assert fetched.is_enabled is True

    async def test_create_ignores_opening_stock(self, db):
        store = SQLiteMaterialStore()
        created = await store.create_material(
            Material(name="Arena", current_stock=Decimal("99"), stock_version=7)
        )

        fetched = await store.get_material(created.id)
        assert created.id
        assert fetched.current_stock == Decimal("0")
        assert fetched.stock_version == 0

    async def test_get_not_found(self, db):
        assert await SQLiteMaterialStore().get_material("missing") is None

    async def test_decimal_precision_survives(self, db):
        store = SQLiteMaterialStore()
        await store.create_material(
            Material(id="MAT-X", name="Cable", unit_cost=Decimal("0.10"))
        )
        fetched = await store.get_material("MAT-X")
        assert fetched.unit_cost == Decimal("0.10")
        assert str(fetched.unit_cost) == "0.10"

    async def test_list_orders_by_name(self, cement, pipe):
        materials = await SQLiteMaterialStore().list_materials()
        assert [m.id for m in materials] == ["MAT-001", "MAT-002"]

    async def test_set_enabled_hides_from_enabled_list(self, cement, pipe):
        store = SQLiteMaterialStore()

        disabled = await store.set_enabled("MAT-001", False)

        assert disabled.is_enabled is False
        assert [m.id for m in await store.list_materials()] == ["MAT-002"]
        all_ids = [m.id for m in await store.list_materials(enabled_only=False)]
        assert all_ids == ["MAT-001", "MAT-002"]

    async def test_set_enabled_unknown(self, db):
        assert await SQLiteMaterialStore().set_enabled("missing", False) is None

    async def test_delete_without_movements_allowed(self, cement, db):
        async with aiosqlite.connect(db) as conn:
            await conn.execute("DELETE FROM materials WHERE id = 'MAT-001'")
            await conn.commit()
        assert await SQLiteMaterialStore().get_material("MAT-001") is None

    async def test_list_pagination(self, cement, pipe):
        store = SQLiteMaterialStore()
        first = await store.list_materials(limit=1)
        second = await store.list_materials(limit=1, offset=1)
        assert [m.id for m in first] == ["MAT-001"]
        assert [m.id for m in second] == ["MAT-002"]


@pytest.mark.parametrize("enabled", [True, False])
async def test_enabled_flag_roundtrip(db, enabled):
    store = SQLiteMaterialStore()
    await store.create_material(Material(id="MAT-F", name="Yeso", is_enabled=enabled))
    fetched = await store.get_material("MAT-F")
    assert fetched.is_enabled is enabled
