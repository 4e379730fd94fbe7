"""
Error handling middleware.

Standardizes all API error responses to include:
- error_code: machine-readable identifier
- message: human-readable description
- hint: suggested recovery action
"""

import traceback
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from invoiceflow.application.dto.responses import ErrorResponse
from invoiceflow.config import get_logger
from invoiceflow.core.exceptions import (
    ConfigurationError,
    InvalidStatusTransitionError,
    InvoiceFlowError,
    InvoiceLockedError,
    NotFoundError,
    SettlementError,
    SettlementPolicyNotConfiguredError,
    StorageError,
    ValidationError,
)

logger = get_logger(__name__)


# Map exceptions to HTTP status codes. Subclasses must precede their bases.
EXCEPTION_STATUS_MAP: dict[type[Exception], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidStatusTransitionError: status.HTTP_409_CONFLICT,
    InvoiceLockedError: status.HTTP_409_CONFLICT,
    SettlementPolicyNotConfiguredError: status.HTTP_503_SERVICE_UNAVAILABLE,
    SettlementError: 422,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ConfigurationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ValueError: status.HTTP_400_BAD_REQUEST,
}

# Hint messages per error code / exception type
HINT_MAP: dict[str, str] = {
    "INVOICE_NOT_FOUND": "Check the invoice ID and try GET /api/owners/{owner_id}/invoices to list invoices.",
    "OWNER_NOT_FOUND": "Check the owner ID or create one with POST /api/owners.",
    "CLIENT_NOT_FOUND": "Check the client ID and try GET /api/owners/{owner_id}/clients to list clients.",
    "SETTLEMENT_NOT_FOUND": "Settlements exist only for paid invoices.",
    "INVALID_LINE_ITEM": "Check quantity, rate, discount and tax rates of the reported item.",
    "INVALID_HSN_SAC": "HSN/SAC codes are 4 to 8 digits.",
    "INVALID_STATE_CODE": "Use a two-digit GST state code between 01 and 38.",
    "MISSING_STATE_CODE": "Set a state code or GSTIN on the owner or client profile.",
    "INVALID_GSTIN": "A GSTIN is 15 characters, e.g. 29ABCDE1234F1Z5.",
    "INVALID_AMOUNT": "Amounts must be positive numbers.",
    "INVALID_STATUS_TRANSITION": "Invoices move draft -> sent -> paid; draft or sent can be cancelled.",
    "INVOICE_LOCKED": "Paid and cancelled invoices cannot be changed.",
    "SEQUENCE_ALLOCATION_FAILED": "No invoice was created. Retry the request.",
    "COMPENSATION_FAILED": "A partial invoice may remain. Check server logs and remove it manually.",
    "SETTLEMENT_ERROR": "Settlements are recorded only for paid invoices whose amount covers the fees.",
    "SETTLEMENT_POLICY_NOT_CONFIGURED": "Set SETTLEMENT_PROCESSOR_FEE_PERCENT and SETTLEMENT_GST_ON_FEE_PERCENT.",
    "VALIDATION_ERROR": "Check the request body against the API schema.",
    "DATABASE_ERROR": "A database operation failed. Check server logs.",
    "ValueError": "A parameter value is invalid. Check the request.",
}

# Default hints by HTTP status code
STATUS_HINTS: dict[int, str] = {
    400: "Check the request parameters and body.",
    404: "The requested resource was not found. Verify the ID.",
    409: "The resource is not in a state that allows this action.",
    422: "The request could not be processed. Check the input format.",
    500: "An internal error occurred. Check server logs.",
    503: "The service is temporarily unavailable. Retry later.",
}


def _get_hint(error_code: str, status_code: int) -> str:
    """Resolve hint from error code, falling back to status-based hint."""
    return HINT_MAP.get(error_code) or STATUS_HINTS.get(status_code, "")


def _status_for(exc: Exception) -> int:
    for exc_type, code in EXCEPTION_STATUS_MAP.items():
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def build_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Convert exception to standardized JSON response."""
    status_code = _status_for(exc)

    # Get error code: prefer InvoiceFlowError.code, fall back to class name
    if isinstance(exc, InvoiceFlowError):
        error_code = exc.code
        message = exc.message
        details = exc.details or None
    else:
        error_code = exc.__class__.__name__
        message = str(exc)
        details = None

    request_id = getattr(request.state, "request_id", None)

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "request_error",
        request_id=request_id,
        path=request.url.path,
        error_type=error_code,
        error=message,
        traceback=traceback.format_exc() if status_code >= 500 else None,
    )

    error_response = ErrorResponse(
        error_code=error_code,
        message=message,
        hint=_get_hint(error_code, status_code),
        details=details,
        path=request.url.path,
    )

    return JSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json"),
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    Converts exceptions that escape the route exception handlers to
    standardized JSON error responses.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Handle request with error catching."""
        try:
            return await call_next(request)

        except Exception as e:
            return build_error_response(request, e)


def setup_exception_handlers(app: FastAPI) -> None:
    """Set up FastAPI exception handlers."""
    from fastapi.exceptions import RequestValidationError
    from starlette.exceptions import HTTPException

    @app.exception_handler(InvoiceFlowError)
    async def domain_exception_handler(
        request: Request,
        exc: InvoiceFlowError,
    ) -> JSONResponse:
        """Handle domain errors raised by services."""
        return build_error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Handle Pydantic validation errors."""
        errors = []
        for error in exc.errors():
            loc = " -> ".join(str(part) for part in error["loc"])
            errors.append(f"{loc}: {error['msg']}")

        return JSONResponse(
            status_code=422,
            content=ErrorResponse(
                error_code="VALIDATION_ERROR",
                message="Request validation failed",
                hint="Check the request body fields and types.",
                detail="; ".join(errors),
                path=request.url.path,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request,
        exc: HTTPException,
    ) -> JSONResponse:
        """Handle HTTP exceptions with standardized format."""
        error_code = _infer_error_code(exc.status_code, exc.detail or "")
        hint = _get_hint(error_code, exc.status_code)

        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error_code=error_code,
                message=exc.detail or "An error occurred",
                hint=hint,
                path=request.url.path,
            ).model_dump(mode="json"),
        )


def _infer_error_code(status_code: int, detail: str) -> str:
    """Infer a machine-readable error code from HTTPException detail."""
    detail_lower = detail.lower()

    if status_code == 404:
        if "invoice" in detail_lower:
            return "INVOICE_NOT_FOUND"
        if "settlement" in detail_lower:
            return "SETTLEMENT_NOT_FOUND"
        if "client" in detail_lower:
            return "CLIENT_NOT_FOUND"
        if "owner" in detail_lower:
            return "OWNER_NOT_FOUND"
        return "NOT_FOUND"

    if status_code == 400:
        return "BAD_REQUEST"

    if status_code == 409:
        return "CONFLICT"

    if status_code == 422:
        return "UNPROCESSABLE_ENTITY"

    return "HTTP_ERROR"
