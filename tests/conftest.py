"""Pytest configuration and fixtures."""

from collections.abc import Iterator
from decimal import Decimal

import pytest

from stockledger.application.services import reset_services
from stockledger.core.entities import Actor, Material


@pytest.fixture(autouse=True)
def _reset_service_singletons() -> Iterator[None]:
    """Each test builds its own services."""
    reset_services()
    yield
    reset_services()


@pytest.fixture
def worker() -> Actor:
    return Actor(id="user-worker", role="WORKER")


@pytest.fixture
def supervisor() -> Actor:
    return Actor(id="user-supervisor", role="SUPERVISOR")


@pytest.fixture
def admin() -> Actor:
    return Actor(id="user-admin", role="ADMIN")


@pytest.fixture
def sample_material() -> Material:
    """Cement with a min level of 5 and no max level."""
    return Material(
        id="MAT-001",
        name="Cemento gris",
        unit="kg",
        unit_cost=Decimal("12.50"),
        min_stock_level=Decimal("5"),
        current_stock=Decimal("10"),
        stock_version=3,
    )
