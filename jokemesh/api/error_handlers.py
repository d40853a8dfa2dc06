"""Error handlers for FastAPI exception handling.

Every error leaves a service as an HTTP status plus a flat JSON body:

    {"error": "Human-readable message"}

Status mapping:
    RequestValidationError               -> 400
    UpstreamError                        -> 502
    InternalError / anything else        -> 500
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from jokemesh.core.exceptions import (
    JokeMeshError,
    UpstreamError,
)
from jokemesh.core.logging import get_logger


logger = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


# =============================================================================
# Error Response Model
# =============================================================================


class ErrorResponse(BaseModel):
    """Error body returned by every service.

    Attributes:
        error: Human-readable error message.
    """

    error: str


# =============================================================================
# Status Code Mapping
# =============================================================================


def get_status_code_for_error(error: Exception) -> int:
    """Determine HTTP status code based on exception type."""
    if isinstance(error, RequestValidationError):
        return 400
    if isinstance(error, UpstreamError):
        return 502
    if isinstance(error, JokeMeshError):
        return error.status_code
    return 500


def format_validation_errors(errors: Any) -> str:
    """Collapse pydantic validation errors into one message.

    ``[{"loc": ("body", "joke"), "msg": "Field required"}]`` becomes
    ``"joke: Field required"``.
    """
    parts: list[str] = []
    for error in errors:
        location = [str(item) for item in error.get("loc", ()) if item != "body"]
        message = error.get("msg", "invalid value")
        parts.append(f"{'.'.join(location)}: {message}" if location else message)
    return "; ".join(parts) if parts else "Invalid request"


# =============================================================================
# Exception Handlers
# =============================================================================


async def joke_mesh_error_handler(
    _request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle JokeMeshError and its subclasses."""
    service_exc = exc if isinstance(exc, JokeMeshError) else None
    if service_exc is None:
        return generic_error_handler(_request, exc)

    return JSONResponse(
        status_code=get_status_code_for_error(service_exc),
        content=ErrorResponse(error=service_exc.message).model_dump(),
    )


async def request_validation_error_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Turn FastAPI body/query validation failures into 400 responses.

    FastAPI answers 422 by default; the services answer 400.
    """
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    message = format_validation_errors(errors)

    logger.error("Invalid request", path=request.url.path, error=message)

    return JSONResponse(
        status_code=400,
        content=ErrorResponse(error=message).model_dump(),
    )


def generic_error_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle generic/unexpected exceptions.

    The exception text goes to the log only; callers get a fixed message.
    """
    logger.error(
        "Unhandled error",
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
    )

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error=INTERNAL_ERROR_MESSAGE).model_dump(),
    )


# =============================================================================
# Handler Registration
# =============================================================================


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application."""
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(JokeMeshError, joke_mesh_error_handler)

    # Catch-all for unexpected exceptions
    app.add_exception_handler(Exception, generic_error_handler)
