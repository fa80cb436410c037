"""
Reorder request entities and the workflow state machine.

The transition table is the single source of truth for which
(status, action) pairs are legal. Anything not listed is rejected.
"""

from collections.abc import Iterable
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class ReorderStatus(str, Enum):
    """Lifecycle of a reorder request."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    ORDERED = "ORDERED"
    RECEIVED = "RECEIVED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


class ReorderAction(str, Enum):
    """Events that move a request between statuses."""

    APPROVE = "approve"
    REJECT = "reject"
    ORDER = "order"
    RECEIVE = "receive"
    CANCEL = "cancel"


TERMINAL_STATUSES = frozenset(
    {ReorderStatus.REJECTED, ReorderStatus.RECEIVED, ReorderStatus.CANCELLED}
)

TRANSITIONS: dict[tuple[ReorderStatus, ReorderAction], ReorderStatus] = {
    (ReorderStatus.PENDING, ReorderAction.APPROVE): ReorderStatus.APPROVED,
    (ReorderStatus.PENDING, ReorderAction.REJECT): ReorderStatus.REJECTED,
    (ReorderStatus.PENDING, ReorderAction.CANCEL): ReorderStatus.CANCELLED,
    (ReorderStatus.APPROVED, ReorderAction.ORDER): ReorderStatus.ORDERED,
    (ReorderStatus.APPROVED, ReorderAction.CANCEL): ReorderStatus.CANCELLED,
    (ReorderStatus.ORDERED, ReorderAction.RECEIVE): ReorderStatus.RECEIVED,
}


def next_status(status: ReorderStatus, action: ReorderAction) -> ReorderStatus | None:
    """Target status for a legal transition, None for an illegal one."""
    return TRANSITIONS.get((status, action))


def allowed_actions(status: ReorderStatus) -> list[ReorderAction]:
    """Actions that can be applied from ``status``."""
    return [action for (src, action) in TRANSITIONS if src is status]


class TransitionPayload(BaseModel):
    """Action-specific fields for a transition."""

    rejection_reason: str | None = None
    order_number: str | None = None
    notes: str | None = None


class ReorderRequest(BaseModel):
    """A replenishment request for one material."""

    id: str | None = None
    material_id: str
    requested_quantity: Decimal
    status: ReorderStatus = ReorderStatus.PENDING
    notes: str | None = None
    order_number: str | None = None
    rejection_reason: str | None = None

    requested_by: str | None = None
    approved_by: str | None = None
    rejected_by: str | None = None
    cancelled_by: str | None = None
    received_by: str | None = None

    requested_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    approved_at: datetime | None = None
    rejected_at: datetime | None = None
    ordered_at: datetime | None = None
    received_at: datetime | None = None
    cancelled_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        return not self.status.is_terminal


class ReorderFilter(BaseModel):
    """Filter for listing reorder requests (date range applies to requested_at)."""

    material_id: str | None = None
    status: ReorderStatus | None = None
    start: datetime | None = None
    end: datetime | None = None


class ReorderStatusSummary(BaseModel):
    count: int = 0
    total_quantity: Decimal = Decimal("0")


class ReorderSummary(BaseModel):
    """Aggregate over every reorder request matching a listing filter."""

    total_requests: int = 0
    by_status: dict[str, ReorderStatusSummary] = Field(default_factory=dict)

    @classmethod
    def from_requests(cls, requests: Iterable[ReorderRequest]) -> "ReorderSummary":
        summary = cls()
        for r in requests:
            summary.add(r)
        return summary

    def add(self, request: ReorderRequest) -> None:
        self.total_requests += 1
        bucket = self.by_status.setdefault(request.status.value, ReorderStatusSummary())
        bucket.count += 1
        bucket.total_quantity += request.requested_quantity

    def count(self, status: ReorderStatus) -> int:
        bucket = self.by_status.get(status.value)
        return bucket.count if bucket else 0
