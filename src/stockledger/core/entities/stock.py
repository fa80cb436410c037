"""Stock classification and reconciliation results (not persisted)."""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel


class StockStatus(str, Enum):
    """Alert band of a material's current stock."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class StockAssessment(BaseModel):
    """Alert band for one material plus a reorder hint when low."""

    material_id: str
    current_stock: Decimal
    min_stock_level: Decimal | None = None
    max_stock_level: Decimal | None = None
    high_threshold: Decimal | None = None
    status: StockStatus
    suggested_quantity: Decimal | None = None


class StockReconciliation(BaseModel):
    """Cached counter compared against the ledger sum."""

    material_id: str
    cached_stock: Decimal
    ledger_stock: Decimal
    movement_count: int
    repaired: bool = False

    @property
    def drift(self) -> Decimal:
        return self.cached_stock - self.ledger_stock

    @property
    def consistent(self) -> bool:
        return self.drift == 0
