"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain and framework
exceptions to HTTP responses. status_for_error_code is shared with the
workflow routes, which return failed results instead of raising.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.domain.exceptions import ManageKarException

logger = logging.getLogger(__name__)

# Map domain exception error_code and workflow ErrorCode values to HTTP status
_ERROR_CODE_STATUS: dict[str, int] = {
    "RESOURCE_NOT_FOUND": 404,
    "NOT_FOUND": 404,
    "AUTHENTICATION_ERROR": 401,
    "AUTHORIZATION_ERROR": 403,
    "PERMISSION_DENIED": 403,
    "WORKSPACE_REQUIRED": 400,
    "VALIDATION_ERROR": 400,
    "UNKNOWN_ENTITY_TYPE": 400,
    "SERVICE_UNAVAILABLE": 503,
    "DUPLICATE_ENTRY": 409,
    "CONCURRENT_MODIFICATION": 409,
    "APPROVAL_ALREADY_PROCESSED": 409,
    "EXIT_ALREADY_INITIATED": 409,
    "TENANT_ALREADY_EXITED": 409,
    "REFUND_ALREADY_PROCESSED": 409,
    "BILL_ALREADY_PAID": 409,
    "UNKNOWN_ERROR": 500,
    "WORKFLOW_TIMEOUT": 504,
}
# Business-rule failures (ROOM_AT_CAPACITY, PAYMENT_EXCEEDS_DUE, ...)
_DEFAULT_BUSINESS_STATUS = 422


def status_for_error_code(code: str) -> int:
    """HTTP status for a domain or workflow error code."""
    return _ERROR_CODE_STATUS.get(code, _DEFAULT_BUSINESS_STATUS)


def _managekar_exception_handler(
    request: Request, exc: ManageKarException
) -> JSONResponse:
    """Return JSON from ManageKarException.to_dict() with appropriate status code."""
    return JSONResponse(
        status_code=_ERROR_CODE_STATUS.get(exc.error_code, 400),
        content=exc.to_dict(),
    )


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with validation error details (ctx dropped: it can hold exception objects)."""
    errors = [{k: v for k, v in e.items() if k != "ctx"} for e in exc.errors()]
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": jsonable_encoder(errors),
        },
    )


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail},
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    detail: Any = str(exc) if get_settings().debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Handlers: ManageKarException (and subclasses), RequestValidationError,
    StarletteHTTPException, generic Exception.
    """
    app.add_exception_handler(ManageKarException, _managekar_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
