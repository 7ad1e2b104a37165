"""Exception handlers for the FastAPI application.

Every error body has the same shape so a client can show it as a
notification next to the form that caused it::

    {"error_code": "...", "title": "...", "message": "...", "details": ...}
"""

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import settings
from core.exceptions import AppException, ErrorCode

logger = structlog.get_logger()


def error_response(
    status_code: int,
    error_code: str,
    message: str,
    title: str = "Error",
    details: Any | None = None,
) -> JSONResponse:
    """Build an error response in the shared notification shape."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "title": title,
            "message": message,
            "details": details,
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        """Domain failures: validation, not found, storage and face service errors."""
        # Upstream and server faults are errors; bad input is only a warning
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "app_exception",
            error_code=exc.error_code.value,
            status_code=exc.status_code,
            message=exc.message,
        )
        return error_response(
            exc.status_code,
            exc.error_code.value,
            exc.message,
            title=exc.title,
            details=exc.details,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return error_response(exc.status_code, "HTTP_ERROR", str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Malformed requests, such as a profile id that is not a UUID."""
        errors = exc.errors()
        logger.info("request_validation_failed", error_count=len(errors))
        return error_response(
            422,
            ErrorCode.VALIDATION_ERROR.value,
            "Request validation failed",
            title="Invalid Input",
            details=[
                {
                    "field": ".".join(str(part) for part in error["loc"]),
                    "message": error["msg"],
                    "type": error["type"],
                }
                for error in errors
            ],
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        logger.error(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            request_id=request_id,
            exc_info=True,
        )
        # Internal details stay out of production responses
        message = "An unexpected error occurred" if settings.is_production else str(exc)
        return error_response(
            500,
            ErrorCode.INTERNAL_ERROR.value,
            message,
            details={"request_id": request_id},
        )
