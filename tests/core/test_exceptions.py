"""Unit tests for domain exceptions."""

from decimal import Decimal

import pytest

from stockledger.core.exceptions import (
    AdjustmentLimitExceededError,
    ApprovalNotAuthorizedError,
    ConcurrencyConflictError,
    DatabaseError,
    DuplicateReorderRequestError,
    InsufficientStockError,
    InvalidQuantityError,
    InvalidStateTransitionError,
    LedgerError,
    MaterialDisabledError,
    MaterialNotFoundError,
    MissingTransitionFieldError,
    NotFoundError,
    ReorderRequestNotFoundError,
    StorageError,
    ValidationError,
)


class TestLedgerError:
    """Tests for base LedgerError exception."""

    def test_basic_initialization(self):
        error = LedgerError("Something broke")
        assert error.message == "Something broke"
        assert error.code == "LedgerError"
        assert error.details == {}
        assert str(error) == "Something broke"

    def test_to_dict(self):
        error = LedgerError("msg", code="X", details={"a": 1})
        assert error.to_dict() == {"error": "X", "message": "msg", "details": {"a": 1}}


class TestErrorKinds:
    """Each specific error belongs to exactly one of the four kinds."""

    @pytest.mark.parametrize(
        "error,kind",
        [
            (MaterialNotFoundError("M1"), NotFoundError),
            (MaterialDisabledError("M1"), NotFoundError),
            (ReorderRequestNotFoundError("R1"), NotFoundError),
            (InsufficientStockError("M1", Decimal("5"), Decimal("2")), InvalidQuantityError),
            (AdjustmentLimitExceededError("M1", Decimal("900"), Decimal("100")), InvalidQuantityError),
            (MissingTransitionFieldError("R1", "PENDING", "reject", "rejection_reason"), InvalidStateTransitionError),
            (ApprovalNotAuthorizedError("R1", "PENDING", "approve", "u1"), InvalidStateTransitionError),
            (DuplicateReorderRequestError("M1", "R0"), InvalidStateTransitionError),
            (ConcurrencyConflictError("material", "M1", 3), ConcurrencyConflictError),
        ],
    )
    def test_kind(self, error, kind):
        assert isinstance(error, kind)
        assert isinstance(error, LedgerError)

    def test_kinds_are_disjoint(self):
        kinds = (NotFoundError, InvalidQuantityError, InvalidStateTransitionError, ConcurrencyConflictError)
        for kind in kinds:
            others = [k for k in kinds if k is not kind]
            assert not any(issubclass(kind, other) for other in others)


class TestSpecificErrors:
    def test_material_not_found(self):
        error = MaterialNotFoundError("MAT-9")
        assert error.code == "MATERIAL_NOT_FOUND"
        assert error.details["material_id"] == "MAT-9"
        assert "MAT-9" in error.message

    def test_insufficient_stock_details(self):
        error = InsufficientStockError("MAT-1", Decimal("10"), Decimal("2"))
        assert error.code == "INSUFFICIENT_STOCK"
        assert error.details == {"material_id": "MAT-1", "requested": "10", "available": "2"}

    def test_invalid_transition_default_reason(self):
        error = InvalidStateTransitionError("R1", "PENDING", "receive")
        assert error.code == "INVALID_STATE_TRANSITION"
        assert error.details["reason"] == "cannot receive a request in status PENDING"

    def test_missing_field(self):
        error = MissingTransitionFieldError("R1", "PENDING", "reject", "rejection_reason")
        assert error.code == "MISSING_TRANSITION_FIELD"
        assert error.details["field"] == "rejection_reason"

    def test_not_authorized(self):
        error = ApprovalNotAuthorizedError("R1", "PENDING", "approve", "u1")
        assert error.code == "NOT_AUTHORIZED"
        assert error.details["actor_id"] == "u1"

    def test_duplicate_request(self):
        error = DuplicateReorderRequestError("MAT-1", "R0")
        assert error.details["existing_id"] == "R0"
        assert error.details["material_id"] == "MAT-1"

    def test_concurrency_conflict(self):
        error = ConcurrencyConflictError("material", "MAT-1", 7)
        assert error.code == "CONCURRENCY_CONFLICT"
        assert error.details["expected"] == "7"

    def test_database_error(self):
        error = DatabaseError("insert", "disk full")
        assert isinstance(error, StorageError)
        assert error.code == "DATABASE_ERROR"

    def test_validation_error_truncates_value(self):
        error = ValidationError("notes", "too long", "x" * 500)
        assert len(error.details["value"]) == 100
