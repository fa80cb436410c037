"""Tests for the reorder request state machine."""

from decimal import Decimal

import pytest

from stockledger.core.entities.reorder import (
    TERMINAL_STATUSES,
    TRANSITIONS,
    ReorderAction,
    ReorderRequest,
    ReorderStatus,
    ReorderSummary,
    allowed_actions,
    next_status,
)

LEGAL = {
    (ReorderStatus.PENDING, ReorderAction.APPROVE): ReorderStatus.APPROVED,
    (ReorderStatus.PENDING, ReorderAction.REJECT): ReorderStatus.REJECTED,
    (ReorderStatus.PENDING, ReorderAction.CANCEL): ReorderStatus.CANCELLED,
    (ReorderStatus.APPROVED, ReorderAction.ORDER): ReorderStatus.ORDERED,
    (ReorderStatus.APPROVED, ReorderAction.CANCEL): ReorderStatus.CANCELLED,
    (ReorderStatus.ORDERED, ReorderAction.RECEIVE): ReorderStatus.RECEIVED,
}


class TestTransitionTable:
    """Every (status, action) pair is either listed or rejected."""

    def test_table_is_exactly_the_legal_set(self):
        assert TRANSITIONS == LEGAL

    @pytest.mark.parametrize("status", list(ReorderStatus))
    @pytest.mark.parametrize("action", list(ReorderAction))
    def test_next_status(self, status, action):
        assert next_status(status, action) == LEGAL.get((status, action))

    @pytest.mark.parametrize("status", sorted(TERMINAL_STATUSES, key=lambda s: s.value))
    def test_terminal_statuses_accept_nothing(self, status):
        assert status.is_terminal
        assert allowed_actions(status) == []

    def test_allowed_actions(self):
        assert set(allowed_actions(ReorderStatus.PENDING)) == {
            ReorderAction.APPROVE,
            ReorderAction.REJECT,
            ReorderAction.CANCEL,
        }
        assert allowed_actions(ReorderStatus.ORDERED) == [ReorderAction.RECEIVE]

    def test_ordered_cannot_be_cancelled(self):
        assert next_status(ReorderStatus.ORDERED, ReorderAction.CANCEL) is None


class TestReorderRequest:
    def test_defaults(self):
        r = ReorderRequest(material_id="MAT-001", requested_quantity=Decimal("20"))
        assert r.status is ReorderStatus.PENDING
        assert r.is_open
        assert r.approved_at is None
        assert r.requested_at.tzinfo is not None

    def test_summary(self):
        requests = [
            ReorderRequest(material_id="A", requested_quantity=Decimal("5")),
            ReorderRequest(material_id="B", requested_quantity=Decimal("7")),
            ReorderRequest(
                material_id="C",
                requested_quantity=Decimal("1"),
                status=ReorderStatus.REJECTED,
            ),
        ]
        summary = ReorderSummary.from_requests(requests)
        assert summary.total_requests == 3
        assert summary.count(ReorderStatus.PENDING) == 2
        assert summary.by_status["PENDING"].total_quantity == Decimal("12")
        assert summary.count(ReorderStatus.RECEIVED) == 0
