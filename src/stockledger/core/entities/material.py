"""
Material domain entity.

The catalog owns identity, unit and thresholds. The ledger owns
``current_stock``, which is a cache of the movement sum and is only
written together with a new movement.
"""

from datetime import UTC, datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class Material(BaseModel):
    """A consumable material tracked by the ledger."""

    id: str | None = None
    name: str
    unit: str = "unidades"
    unit_cost: Decimal | None = None
    min_stock_level: Decimal | None = None
    max_stock_level: Decimal | None = None
    current_stock: Decimal = Decimal("0")
    stock_version: int = 0  # bumped on every stock change, used for CAS
    is_enabled: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def stock_value(self) -> Decimal:
        """Valuation of current stock at unit cost (0 when cost is unknown)."""
        if self.unit_cost is None:
            return Decimal("0")
        return self.current_stock * self.unit_cost
