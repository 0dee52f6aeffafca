# =============================================
# workhub/core/exception_handlers.py
# =============================================
from fastapi import FastAPI, Request, status
from starlette.exceptions import HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from typing import Dict, List
import logging

from workhub.core.exceptions import AppException, ErrorKind, ValidationError

logger = logging.getLogger(__name__)

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle custom application exceptions"""
    log_extra = {
        "path": request.url.path,
        "method": request.method,
        "error_type": exc.error_type
    }
    if exc.kind == ErrorKind.SERVER_FAULT:
        logger.error(f"Application fault: {exc.message}", extra={**log_extra, "details": exc.details})
        content = exc.to_dict()
        content["details"] = {}
    else:
        logger.warning(f"{exc.error_type}: {exc.message}", extra=log_extra)
        content = exc.to_dict()

    headers = {"WWW-Authenticate": "Bearer"} if exc.kind == ErrorKind.UNAUTHORIZED else None
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Aggregate every pydantic field error into a single validation response"""
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(location) or "__root__"
        errors.setdefault(field, []).append(error.get("msg", "Invalid value"))

    logger.warning(f"Validation error on {request.method} {request.url.path}: {errors}")
    return await app_exception_handler(request, ValidationError(errors))


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle database errors that escaped the repositories"""
    logger.error(f"Database error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "status": "error",
            "message": "Internal database error",
            "error_type": "DATABASE_ERROR",
            "kind": ErrorKind.SERVER_FAULT.value,
            "retryable": True,
            "details": {}
        }
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle FastAPI HTTP exceptions"""
    kind = {
        status.HTTP_401_UNAUTHORIZED: ErrorKind.UNAUTHORIZED,
        status.HTTP_403_FORBIDDEN: ErrorKind.FORBIDDEN,
        status.HTTP_404_NOT_FOUND: ErrorKind.NOT_FOUND,
        status.HTTP_409_CONFLICT: ErrorKind.CONFLICT,
        status.HTTP_422_UNPROCESSABLE_ENTITY: ErrorKind.VALIDATION,
    }.get(exc.status_code, ErrorKind.SERVER_FAULT if exc.status_code >= 500 else ErrorKind.VALIDATION)

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "status": "error",
            "message": exc.detail,
            "error_type": "HTTP_ERROR",
            "kind": kind.value,
            "retryable": False,
            "details": {}
        },
        headers=getattr(exc, "headers", None)
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other exceptions"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "status": "error",
            "message": "Internal server error",
            "error_type": "INTERNAL_SERVER_ERROR",
            "kind": ErrorKind.SERVER_FAULT.value,
            "retryable": False,
            "details": {}
        }
    )

# =============================================
# REGISTRATION
# =============================================

def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
