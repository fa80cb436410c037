"""
Error responses for the inventory API.

Every failure leaves the API as an ``ErrorResponse``: a machine-readable
``error_code``, the message, a recovery ``hint`` and the request path.
Domain errors map to a status by kind: unknown or disabled records are 404,
bad quantities 422, workflow guards and lost updates 409.
"""

import traceback
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from stockledger.application.dto.responses import ErrorResponse
from stockledger.config import get_logger
from stockledger.core.exceptions import (
    ConcurrencyConflictError,
    ConfigurationError,
    InvalidQuantityError,
    InvalidStateTransitionError,
    LedgerError,
    NotFoundError,
    StorageError,
    ValidationError,
)

logger = get_logger(__name__)


# Checked in order; the first matching kind wins
EXCEPTION_STATUS_MAP: tuple[tuple[type[Exception], int], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidQuantityError, 422),
    (InvalidStateTransitionError, status.HTTP_409_CONFLICT),
    (ConcurrencyConflictError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (StorageError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)

HINT_MAP: dict[str, str] = {
    "MATERIAL_NOT_FOUND": "Check the material ID against the material catalog.",
    "MATERIAL_DISABLED": "The material is disabled. Re-enable it in the catalog before booking stock.",
    "REORDER_REQUEST_NOT_FOUND": "Check the request ID and try GET /api/inventory/reorder-requests.",
    "INVALID_QUANTITY": "Use a positive magnitude; only ADJUSTMENT accepts a signed quantity.",
    "INSUFFICIENT_STOCK": "Not enough stock for this movement. Check current stock first.",
    "ADJUSTMENT_LIMIT_EXCEEDED": "Split the correction or raise INVENTORY_ADJUSTMENT_LIMIT.",
    "INVALID_STATE_TRANSITION": "Re-read the request; allowed_actions lists what it accepts now.",
    "MISSING_TRANSITION_FIELD": "Provide the field named in the message (rejection_reason or order_number).",
    "NOT_AUTHORIZED": "Only the requester or an approver role may perform this action.",
    "DUPLICATE_REORDER_REQUEST": "A pending request already exists for this material. Update or cancel it instead.",
    "CONCURRENCY_CONFLICT": "The record changed while you were writing. Re-read it and retry.",
    "VALIDATION_ERROR": "Check the request body against the API schema.",
    "DATABASE_ERROR": "A database operation failed. Check server logs.",
}

STATUS_FALLBACK: dict[int, tuple[str, str]] = {
    400: ("BAD_REQUEST", "Check the request parameters and body."),
    401: ("UNAUTHORIZED", "Send the X-Actor-Id and X-Actor-Role headers."),
    404: ("NOT_FOUND", "The requested resource was not found. Verify the path and ID."),
    405: ("METHOD_NOT_ALLOWED", "Check the HTTP method for this endpoint."),
    409: ("CONFLICT", "The request conflicts with the current state. Re-read and retry."),
    422: ("UNPROCESSABLE_ENTITY", "The request could not be processed. Check the input format."),
    500: ("INTERNAL_ERROR", "An internal error occurred. Check server logs."),
}


def _status_for(exc: Exception) -> int:
    for exc_type, code in EXCEPTION_STATUS_MAP:
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _details_text(exc: Exception) -> str | None:
    if not isinstance(exc, LedgerError) or not exc.details:
        return None
    return "; ".join(f"{k}={v}" for k, v in exc.details.items() if v is not None)


def error_json(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    detail: str | None = None,
) -> JSONResponse:
    fallback_code, fallback_hint = STATUS_FALLBACK.get(status_code, ("HTTP_ERROR", ""))
    body = ErrorResponse(
        error_code=error_code or fallback_code,
        message=message,
        hint=HINT_MAP.get(error_code) or fallback_hint,
        detail=detail,
        path=request.url.path,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def build_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Log the failure and render it; 5xx responses never echo internals."""
    status_code = _status_for(exc)
    is_server_error = status_code >= 500
    error_code = exc.code if isinstance(exc, LedgerError) else "INTERNAL_ERROR"

    log = logger.error if is_server_error else logger.warning
    log(
        "request_error",
        request_id=getattr(request.state, "request_id", None),
        path=request.url.path,
        error_code=error_code,
        error=str(exc),
        traceback=traceback.format_exc() if is_server_error else None,
    )

    if is_server_error and not isinstance(exc, LedgerError):
        return error_json(request, status_code, error_code, "Internal server error")
    return error_json(request, status_code, error_code, str(exc), _details_text(exc))


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Last line of defence: anything a route let escape becomes a JSON 500."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            return build_error_response(request, e)


def setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
        return build_error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        problems = [
            f"{' -> '.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
        return error_json(
            request,
            422,
            "VALIDATION_ERROR",
            "Request validation failed",
            "; ".join(problems),
        )

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
        error_code = STATUS_FALLBACK.get(exc.status_code, ("HTTP_ERROR", ""))[0]
        return error_json(
            request, exc.status_code, error_code, str(exc.detail or "An error occurred")
        )
