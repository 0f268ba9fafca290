"""
Exception handlers translating service errors into JSON responses.

Every error body has the shape ``{"error": {"code", "message", "details"}}``.
"""
import time
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from haccp_review.core.exceptions import ErrorCode
from haccp_review.services.common.errors import (
    ConcurrentModificationError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    ServiceError,
    TransactionError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Checked in order; first matching class wins
ERROR_STATUS_MAP = (
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY, ErrorCode.VALIDATION_ERROR),
    (ForbiddenError, status.HTTP_403_FORBIDDEN, ErrorCode.FORBIDDEN),
    (InvalidTransitionError, status.HTTP_409_CONFLICT, ErrorCode.INVALID_TRANSITION),
    (NotFoundError, status.HTTP_404_NOT_FOUND, ErrorCode.RESOURCE_NOT_FOUND),
    (ConcurrentModificationError, status.HTTP_409_CONFLICT, ErrorCode.CONCURRENT_MODIFICATION),
    (TransactionError, status.HTTP_503_SERVICE_UNAVAILABLE, ErrorCode.TRANSACTION_FAILED),
)


def _error_body(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": jsonable_encoder(details or {}),
            "timestamp": int(time.time()),
        }
    }


def resolve_status(exc: ServiceError):
    """Return ``(status_code, error_code)`` for a service error."""
    for exc_cls, status_code, error_code in ERROR_STATUS_MAP:
        if isinstance(exc, exc_cls):
            return status_code, error_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorCode.INTERNAL_ERROR


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    status_code, error_code = resolve_status(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        f"Service error: {error_code.value} - {exc.message}",
        extra={
            "exception_data": {
                "error_code": error_code.value,
                "details": exc.details,
                "path": request.url.path,
                "method": request.method,
            }
        },
    )
    return JSONResponse(
        status_code=status_code,
        content=_error_body(error_code.value, exc.message, exc.details),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle FastAPI request body/query validation errors"""
    field_errors = {}
    for error in exc.errors():
        field_path = '.'.join(str(x) for x in error['loc'])
        field_errors[field_path] = {
            "message": error['msg'],
            "type": error['type'],
        }

    logger.warning(
        f"Validation error: {len(field_errors)} field(s) failed validation",
        extra={"path": request.url.path, "method": request.method},
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_body(
            ErrorCode.VALIDATION_ERROR.value,
            "Request validation failed",
            {"field_errors": field_errors, "error_count": len(field_errors)},
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
