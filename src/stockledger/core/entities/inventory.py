"""Inventory movement entities and sign convention."""

from collections.abc import Iterable
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from stockledger.core.exceptions import InvalidQuantityError


class MovementType(str, Enum):
    """Types of stock-affecting events."""

    PURCHASE = "PURCHASE"
    SALE = "SALE"
    TRANSFER = "TRANSFER"
    ADJUSTMENT = "ADJUSTMENT"
    LOSS = "LOSS"
    RETURN = "RETURN"

    @property
    def is_depletion(self) -> bool:
        """Physical depletion types are subject to the stock floor."""
        return self in DEPLETING_TYPES


INCREASING_TYPES = frozenset({MovementType.PURCHASE, MovementType.RETURN})
DEPLETING_TYPES = frozenset(
    {MovementType.SALE, MovementType.TRANSFER, MovementType.LOSS}
)


def derive_signed_quantity(movement_type: MovementType, quantity: Decimal) -> Decimal:
    """
    Turn a caller-supplied quantity into the signed ledger effect.

    PURCHASE and RETURN add the magnitude, SALE, TRANSFER (always outbound)
    and LOSS subtract it. ADJUSTMENT is the single exception: it is a
    correction, so the caller's sign is kept as given. For every other
    type a negative input is rejected rather than reinterpreted.

    Raises:
        InvalidQuantityError: quantity is zero, or negative for a type
            that takes a magnitude.
    """
    if not quantity.is_finite():
        raise InvalidQuantityError(f"Quantity must be a finite number, got {quantity}")
    if quantity == 0:
        raise InvalidQuantityError(
            f"{movement_type.value} quantity must be non-zero",
            details={"type": movement_type.value, "quantity": str(quantity)},
        )
    if movement_type is MovementType.ADJUSTMENT:
        return quantity
    if quantity < 0:
        raise InvalidQuantityError(
            f"{movement_type.value} takes a positive magnitude, got {quantity}",
            details={"type": movement_type.value, "quantity": str(quantity)},
        )
    if movement_type in INCREASING_TYPES:
        return quantity
    return -quantity


class InventoryMovement(BaseModel):
    """One immutable ledger row. ``quantity`` is already signed."""

    id: str | None = None
    material_id: str
    type: MovementType
    quantity: Decimal
    unit_cost: Decimal | None = None
    total_cost: Decimal | None = None
    reference: str | None = None
    notes: str | None = None
    recorded_by: str | None = None
    reorder_request_id: str | None = None
    recorded_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def magnitude(self) -> Decimal:
        return abs(self.quantity)


class MovementFilter(BaseModel):
    """Filter for listing movements."""

    material_id: str | None = None
    type: MovementType | None = None
    start: datetime | None = None
    end: datetime | None = None


class MovementTypeSummary(BaseModel):
    count: int = 0
    quantity: Decimal = Decimal("0")
    cost: Decimal = Decimal("0")


class MovementSummary(BaseModel):
    """Aggregate over every movement matching a listing filter."""

    total_movements: int = 0
    total_quantity: Decimal = Decimal("0")
    total_cost: Decimal = Decimal("0")
    by_type: dict[str, MovementTypeSummary] = Field(default_factory=dict)

    @classmethod
    def from_movements(cls, movements: Iterable[InventoryMovement]) -> "MovementSummary":
        summary = cls()
        for m in movements:
            summary.add(m)
        return summary

    def add(self, movement: InventoryMovement) -> None:
        cost = movement.total_cost or Decimal("0")
        self.total_movements += 1
        self.total_quantity += movement.quantity
        self.total_cost += cost
        bucket = self.by_type.setdefault(movement.type.value, MovementTypeSummary())
        bucket.count += 1
        bucket.quantity += movement.quantity
        bucket.cost += cost
