"""
Domain exceptions for the stock ledger.

Every failure surfaced by the ledger or the reorder workflow is one of
four kinds: not found, invalid quantity, invalid state transition, or
concurrency conflict. Each kind is a base class with specific subclasses.
"""

from decimal import Decimal
from typing import Any


class LedgerError(Exception):
    """Base exception for all stock ledger errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Not found
class NotFoundError(LedgerError):
    """Referenced entity does not exist."""

    pass


class MaterialNotFoundError(NotFoundError):
    """Material not found in the catalog."""

    def __init__(self, material_id: str):
        super().__init__(
            f"Material not found: {material_id}",
            code="MATERIAL_NOT_FOUND",
            details={"material_id": material_id},
        )


class MaterialDisabledError(NotFoundError):
    """Material exists but is disabled for new stock activity."""

    def __init__(self, material_id: str):
        super().__init__(
            f"Material is disabled: {material_id}",
            code="MATERIAL_DISABLED",
            details={"material_id": material_id},
        )


class ReorderRequestNotFoundError(NotFoundError):
    """Reorder request not found."""

    def __init__(self, request_id: str):
        super().__init__(
            f"Reorder request not found: {request_id}",
            code="REORDER_REQUEST_NOT_FOUND",
            details={"request_id": request_id},
        )


# Quantity
class InvalidQuantityError(LedgerError):
    """Quantity is out of range for the requested operation."""

    def __init__(
        self,
        message: str,
        code: str = "INVALID_QUANTITY",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, details=details)


class InsufficientStockError(InvalidQuantityError):
    """Depletion would drive stock below zero."""

    def __init__(self, material_id: str, requested: Decimal, available: Decimal):
        super().__init__(
            f"Insufficient stock for {material_id}: "
            f"requested {requested}, available {available}",
            code="INSUFFICIENT_STOCK",
            details={
                "material_id": material_id,
                "requested": str(requested),
                "available": str(available),
            },
        )


class AdjustmentLimitExceededError(InvalidQuantityError):
    """Adjustment exceeds the configured sanity bound."""

    def __init__(self, material_id: str, quantity: Decimal, limit: Decimal):
        super().__init__(
            f"Adjustment of {quantity} for {material_id} exceeds limit {limit}",
            code="ADJUSTMENT_LIMIT_EXCEEDED",
            details={
                "material_id": material_id,
                "quantity": str(quantity),
                "limit": str(limit),
            },
        )


# Workflow
class InvalidStateTransitionError(LedgerError):
    """Workflow guard violated; nothing was changed."""

    def __init__(
        self,
        request_id: str | None,
        status: str | None,
        action: str,
        reason: str | None = None,
        code: str = "INVALID_STATE_TRANSITION",
    ):
        if reason is None:
            reason = f"cannot {action} a request in status {status}"
        super().__init__(
            f"Invalid transition for reorder request {request_id}: {reason}",
            code=code,
            details={
                "request_id": request_id,
                "status": status,
                "action": action,
                "reason": reason,
            },
        )


class MissingTransitionFieldError(InvalidStateTransitionError):
    """A required payload field for the transition is empty."""

    def __init__(self, request_id: str, status: str, action: str, field: str):
        super().__init__(
            request_id,
            status,
            action,
            reason=f"'{field}' is required to {action}",
            code="MISSING_TRANSITION_FIELD",
        )
        self.details["field"] = field


class ApprovalNotAuthorizedError(InvalidStateTransitionError):
    """Actor lacks authority for the transition."""

    def __init__(self, request_id: str, status: str, action: str, actor_id: str):
        super().__init__(
            request_id,
            status,
            action,
            reason=f"actor {actor_id} is not allowed to {action}",
            code="NOT_AUTHORIZED",
        )
        self.details["actor_id"] = actor_id


class DuplicateReorderRequestError(InvalidStateTransitionError):
    """A pending reorder request already exists for the material."""

    def __init__(self, material_id: str, existing_id: str):
        super().__init__(
            None,
            None,
            "create",
            reason=f"material {material_id} already has pending request {existing_id}",
            code="DUPLICATE_REORDER_REQUEST",
        )
        self.details.update({"material_id": material_id, "existing_id": existing_id})


# Concurrency
class ConcurrencyConflictError(LedgerError):
    """A concurrent writer changed the row; re-read and retry."""

    def __init__(self, entity: str, entity_id: str, expected: Any):
        super().__init__(
            f"Concurrent update detected on {entity} {entity_id}",
            code="CONCURRENCY_CONFLICT",
            details={"entity": entity, "entity_id": entity_id, "expected": str(expected)},
        )


# Storage
class StorageError(LedgerError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class ValidationError(LedgerError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class ConfigurationError(LedgerError):
    """Configuration error."""

    pass
