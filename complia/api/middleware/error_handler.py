"""Exception handlers rendering every failure as an ``ErrorResponse``.

Status mapping for the engine's own exceptions:

- ``NotFoundError`` -> 404
- ``ValidationError`` -> 400
- ``UnauthorizedError`` -> 401
- ``StoreError`` -> 503
- anything else -> 500
"""

import traceback
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from loguru import logger
from starlette.exceptions import HTTPException

from complia.api.constants import HTTP_500_INTERNAL_SERVER_ERROR
from complia.api.schemas.errors import ErrorResponse, ServiceInfo
from complia.api.utils.responses import ORJSONResponse
from complia.core.config import Settings, get_settings
from complia.core.context import RequestContext, generate_request_id
from complia.core.exceptions import (
    ComplianceEngineError,
    ErrorCode,
    NotFoundError,
    StoreError,
    UnauthorizedError,
    ValidationError,
)


def get_service_info(settings: Settings) -> ServiceInfo:
    """Create ServiceInfo from application settings."""
    return ServiceInfo(
        name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )


def status_code_for(exc: ComplianceEngineError) -> int:
    """HTTP status for an engine exception."""
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, UnauthorizedError):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(exc, StoreError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _render(
    status_code: int,
    settings: Settings,
    *,
    error_code: str,
    message: str,
    severity: str,
    details: dict[str, Any] | None = None,
    debug_info: dict[str, Any] | None = None,
) -> Response:
    error_response = ErrorResponse(
        error_code=error_code,
        message=message,
        details=details,
        correlation_id=RequestContext.get_correlation_id(),
        request_id=generate_request_id(),
        severity=severity,
        service_info=get_service_info(settings),
        debug_info=debug_info,
    )
    return ORJSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json"),
    )


async def engine_error_handler(request: Request, exc: Exception) -> Response:
    """Handle ComplianceEngineError and its subclasses.

    Raises:
        TypeError: If exc is not a ComplianceEngineError instance
    """
    if not isinstance(exc, ComplianceEngineError):
        raise TypeError(f"Expected ComplianceEngineError, got {type(exc).__name__}")

    settings = get_settings()
    status_code = status_code_for(exc)
    log = logger.error if exc.should_alert else logger.warning
    log(
        "Handling {}: {}",
        type(exc).__name__,
        exc.message,
        error_code=exc.error_code,
        status_code=status_code,
        fingerprint=exc.fingerprint,
        tenant_id=RequestContext.get_tenant_id(),
        method=request.method,
        path=request.url.path,
    )

    debug_info = None
    if settings.environment == "development":
        debug_info = {
            "stack_trace": exc.stack_trace,
            "error_context": exc.context,
            "exception_type": type(exc).__name__,
        }
        if exc.cause:
            debug_info["cause"] = {
                "type": type(exc.cause).__name__,
                "message": str(exc.cause),
            }

    return _render(
        status_code,
        settings,
        error_code=exc.error_code,
        message=exc.message,
        severity=exc.severity.value,
        details=exc.context or None,
        debug_info=debug_info,
    )


async def validation_error_handler(request: Request, exc: Exception) -> Response:
    """Handle FastAPI RequestValidationError with field-level details.

    Raises:
        TypeError: If exc is not a RequestValidationError instance
    """
    if not isinstance(exc, RequestValidationError):
        raise TypeError(f"Expected RequestValidationError, got {type(exc).__name__}")

    field_errors: dict[str, list[str]] = {}
    for error in exc.errors():
        field_path = error.get("loc", ())
        field_name = ".".join(str(loc) for loc in field_path[1:]) or "root"
        field_errors.setdefault(field_name, []).append(error.get("msg", "Invalid value"))

    logger.warning(
        "Request validation failed",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        method=request.method,
        path=request.url.path,
        validation_errors=field_errors,
    )
    return _render(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        get_settings(),
        error_code=ErrorCode.VALIDATION_ERROR.value,
        message="Request validation failed",
        severity="LOW",
        details={"validation_errors": field_errors},
    )


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle Starlette HTTPException (unknown routes, wrong methods).

    Raises:
        TypeError: If exc is not an HTTPException instance
    """
    if not isinstance(exc, HTTPException):
        raise TypeError(f"Expected HTTPException, got {type(exc).__name__}")

    error_code = ErrorCode.INTERNAL_ERROR.value
    severity = "MEDIUM"
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        error_code = ErrorCode.NOT_FOUND.value
        severity = "LOW"
    elif exc.status_code == status.HTTP_401_UNAUTHORIZED:
        error_code = ErrorCode.UNAUTHORIZED.value
        severity = "HIGH"
    elif exc.status_code < HTTP_500_INTERNAL_SERVER_ERROR:
        error_code = ErrorCode.VALIDATION_ERROR.value
        severity = "LOW"
    else:
        severity = "HIGH"

    logger.warning(
        "HTTP exception",
        status_code=exc.status_code,
        method=request.method,
        path=request.url.path,
        detail=exc.detail,
    )
    return _render(
        exc.status_code,
        get_settings(),
        error_code=error_code,
        message=str(exc.detail),
        severity=severity,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle anything unhandled; details are hidden in production."""
    settings = get_settings()
    logger.opt(exception=exc).error(
        "Unhandled exception: {}",
        type(exc).__name__,
        method=request.method,
        path=request.url.path,
    )

    if settings.environment == "production":
        message = "An internal server error occurred"
        details = None
        debug_info = None
    else:
        message = f"Internal server error: {type(exc).__name__}"
        details = {"error": str(exc), "type": type(exc).__name__}
        debug_info = {
            "stack_trace": traceback.format_tb(exc.__traceback__),
            "exception_type": type(exc).__name__,
        }

    return _render(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        settings,
        error_code=ErrorCode.INTERNAL_ERROR.value,
        message=message,
        severity="CRITICAL",
        details=details,
        debug_info=debug_info,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application."""
    app.add_exception_handler(ComplianceEngineError, engine_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
