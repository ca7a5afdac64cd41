"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain and framework
exceptions to HTTP responses.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.domain.exceptions import LifecycleException, ProvisioningException
from app.shared.telemetry.tracing import get_trace_id

logger = logging.getLogger(__name__)

# Map domain error_code to HTTP status
_ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "RESOURCE_NOT_FOUND": 404,
    "TENANT_NOT_FOUND": 404,
    "PLAN_NOT_FOUND": 404,
    "ORGANIZATION_NOT_FOUND": 404,
    "DUPLICATE_NAME": 409,
    "DUPLICATE_EMAIL": 409,
    "ACTIVE_USERS_EXIST": 409,
    "PLAN_LIMIT_EXCEEDED": 403,
    "DATABASE_ERROR": 500,
    "DATABASE_DELETION_ERROR": 500,
    "STORAGE_ERROR": 502,
    "EXTERNAL_SERVICE_ERROR": 502,
}


def status_for(exc: LifecycleException) -> int:
    """HTTP status for a domain exception; provisioning failures take their cause's status."""
    if isinstance(exc, ProvisioningException):
        if isinstance(exc.cause, LifecycleException):
            return status_for(exc.cause)
        return 500
    return _ERROR_CODE_STATUS.get(exc.error_code, 400)


def _lifecycle_exception_handler(
    request: Request, exc: LifecycleException
) -> JSONResponse:
    """Return JSON from LifecycleException.to_dict() with the mapped status code."""
    status = status_for(exc)
    if status >= 500:
        logger.error(
            "%s %s failed: %s (%s) trace_id=%s",
            request.method,
            request.url.path,
            exc.error_code,
            exc.message,
            get_trace_id(),
        )
    return JSONResponse(status_code=status, content=exc.to_dict())


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with validation error details."""
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": jsonable_encoder(exc.errors()),
        },
    )


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Return JSON for Starlette HTTP exceptions (status + detail)."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail},
        headers=getattr(exc, "headers", None),
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

    Handlers: LifecycleException (and subclasses), RequestValidationError,
    StarletteHTTPException, generic Exception.
    """
    app.add_exception_handler(LifecycleException, _lifecycle_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
