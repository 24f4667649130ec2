"""
Global exception handlers for FastAPI application.
"""

from typing import Union
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from loguru import logger

from app.utils.exceptions import SupportChatException

_STATUS_BY_ERROR_CODE = {
    "NOT_FOUND": 404,
    "AUTHENTICATION_ERROR": 401,
    "AUTHORIZATION_ERROR": 403,
    "CONFLICT": 409,
    "DATABASE_ERROR": 500,
}


async def support_chat_exception_handler(
    request: Request, exc: SupportChatException
) -> JSONResponse:
    """Handle application exceptions."""
    status_code = _STATUS_BY_ERROR_CODE.get(exc.error_code, 500)
    log = logger.warning if status_code < 500 else logger.error
    log(f"{request.method} {request.url.path} -> {status_code} {exc.error_code}: {exc.message}")

    headers = None
    if status_code == 401:
        headers = {"WWW-Authenticate": "Bearer"}

    return JSONResponse(
        status_code=status_code,
        content={
            "message": exc.message,
            "error_code": exc.error_code,
            "details": exc.details,
            "type": "support_chat_error",
        },
        headers=headers,
    )


async def http_exception_handler(
    request: Request, exc: Union[HTTPException, StarletteHTTPException]
) -> JSONResponse:
    """Handle HTTP exceptions."""
    logger.warning(f"HTTP Exception on {request.method} {request.url.path}: {exc.status_code} {exc.detail}")

    # Extract structured detail if available
    detail = exc.detail
    if isinstance(detail, dict):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "message": detail.get("message", str(exc.detail)),
                "error_code": detail.get("error_code"),
                "details": detail.get("details", {}),
                "type": "http_error",
            },
            headers=getattr(exc, "headers", None),
        )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "message": str(exc.detail),
            "error_code": f"HTTP_{exc.status_code}",
            "details": {},
            "type": "http_error",
        },
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation exceptions."""
    logger.warning(f"Validation Error on {request.method} {request.url.path}: {exc.errors()}")

    # Format validation errors
    formatted_errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        formatted_errors.append({
            "field": field,
            "message": error["msg"],
            "type": error["type"],
        })

    return JSONResponse(
        status_code=422,
        content={
            "message": "Validation failed",
            "error_code": "VALIDATION_ERROR",
            "details": {"errors": formatted_errors},
            "type": "validation_error",
        }
    )


async def database_exception_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    """Handle database exceptions."""
    logger.error(f"Database Error on {request.method} {request.url.path}: {type(exc).__name__}: {exc}")

    message = "Database operation failed"
    if isinstance(exc, IntegrityError):
        message = "Database integrity constraint violated"

    return JSONResponse(
        status_code=500,
        content={
            "message": message,
            "error_code": "DATABASE_ERROR",
            "details": {"exception_type": type(exc).__name__},
            "type": "database_error",
        }
    )


async def general_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Handle general exceptions."""
    logger.opt(exception=exc).error(
        f"Unhandled Exception on {request.method} {request.url.path}: {type(exc).__name__}"
    )

    return JSONResponse(
        status_code=500,
        content={
            "message": "Internal server error",
            "error_code": "INTERNAL_SERVER_ERROR",
            "details": {
                "exception_type": type(exc).__name__,
                "debug_message": str(exc) if request.app.debug else None,
            },
            "type": "internal_error",
        }
    )
