"""Global exception handlers for consistent error responses.

Every error body has the shape ``{"error": {"code", "message", "request_id",
"details"?}}``. Purchase-limit rejections additionally carry ``limit``,
``windowSeconds`` and ``product`` at the top level so clients can act on them.

Design:
- ValidationAppError / request body validation → 400
- AuthenticationAppError → 401
- NotFoundAppError → 404
- RateLimitExceededError → 429
- PersistenceAppError and unexpected Exception → generic 500
"""

import logging

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from storefront.core.errors import (
    AppError,
    AuthenticationAppError,
    NotFoundAppError,
    PersistenceAppError,
    RateLimitExceededError,
)
from storefront.core.logging import get_request_id

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = {
    "code": "internal_server_error",
    "message": "An unexpected error occurred. Please try again later.",
}


def _status_for(exc: AppError) -> int:
    if isinstance(exc, AuthenticationAppError):
        return 401
    if isinstance(exc, NotFoundAppError):
        return 404
    if isinstance(exc, RateLimitExceededError):
        return 429
    if isinstance(exc, PersistenceAppError):
        return 500
    return 400


def _server_error_response() -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"error": {**GENERIC_SERVER_ERROR, "request_id": get_request_id()}},
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render domain errors with their status code and structured details.

    Persistence failures are logged in full and reported generically so storage
    internals never reach the client.
    """
    status_code = _status_for(exc)

    if isinstance(exc, PersistenceAppError):
        logger.error(
            "persistence_error_handled",
            extra={
                "error_code": exc.code,
                "error_message": exc.message,
                "cause_type": type(exc.__cause__).__name__ if exc.__cause__ else None,
                "request_path": request.url.path,
            },
        )
        return _server_error_response()

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
        },
    )

    error_content = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }
    if exc.details:
        error_content["details"] = exc.details

    content: dict = {"error": error_content}
    if isinstance(exc, RateLimitExceededError):
        content.update(exc.to_payload())

    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Turn FastAPI body/query validation failures into 400 with field errors."""

    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    logger.warning(
        "request_validation_failed",
        extra={"error_count": len(errors), "request_path": request.url.path},
    )
    return JSONResponse(
        status_code=400,
        content={
            "error": {
                "code": "invalid_request",
                "message": "Request validation failed",
                "request_id": get_request_id(),
                "details": {"errors": errors},
            }
        },
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors; never leaks internals."""
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )
    return _server_error_response()


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(RequestValidationError)(request_validation_handler)
    app.exception_handler(Exception)(general_exception_handler)
