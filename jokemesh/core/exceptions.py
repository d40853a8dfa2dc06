"""Custom exceptions for the joke-mesh services.

Errors never cross a process boundary as anything richer than an HTTP
status and a ``{"error": "<message>"}`` body, so the hierarchy mirrors the
status classes the services raise. Request validation failures (400) come
from FastAPI's own RequestValidationError and are not part of it.

Exception Hierarchy:
    JokeMeshError (base)
    ├── UpstreamError (502)
    │   └── UpstreamUnavailableError
    ├── InternalError (500)
    │   ├── ProxyRequestError
    │   └── ResponseReadError
    └── ConfigurationError (fatal at startup)

All custom exception names end in "Error".
"""

from __future__ import annotations

from enum import Enum
from typing import Any


# =============================================================================
# Error Codes Enum
# =============================================================================


class ErrorCode(str, Enum):
    """Machine-readable error codes, used in logs and span attributes."""

    JOKE_MESH_ERROR = "JOKE_MESH_ERROR"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    PROXY_REQUEST_FAILED = "PROXY_REQUEST_FAILED"
    RESPONSE_READ_FAILED = "RESPONSE_READ_FAILED"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


# =============================================================================
# Base Exception
# =============================================================================


class JokeMeshError(Exception):
    """Base exception for all joke-mesh errors.

    Attributes:
        message: Human-readable error message, returned to HTTP callers.
        error_code: Machine-readable error code from ErrorCode enum.
        status_code: HTTP status the error maps to.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.JOKE_MESH_ERROR,
        **kwargs: Any,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message.
            error_code: Machine-readable error code.
            **kwargs: Additional attributes to set on the exception.
        """
        super().__init__(message)
        self.message = message
        self.error_code = (
            error_code.value if isinstance(error_code, ErrorCode) else error_code
        )

        for key, value in kwargs.items():
            setattr(self, key, value)


# =============================================================================
# Status Classes
# =============================================================================


class UpstreamError(JokeMeshError):
    """A downstream service could not be reached."""

    status_code = 502


class InternalError(JokeMeshError):
    """The service failed while building or relaying a response."""

    status_code = 500


# =============================================================================
# Concrete Exceptions
# =============================================================================


class UpstreamUnavailableError(UpstreamError):
    """Proxy target unreachable: connection error or timeout.

    Attributes:
        service: Base address of the unreachable service.
    """

    def __init__(
        self,
        message: str = "Service unavailable",
        service: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message, error_code=ErrorCode.UPSTREAM_UNAVAILABLE, **kwargs
        )
        self.service = service


class ProxyRequestError(InternalError):
    """The outbound proxy request could not be constructed."""

    def __init__(self, message: str = "Failed to create request", **kwargs: Any) -> None:
        super().__init__(
            message, error_code=ErrorCode.PROXY_REQUEST_FAILED, **kwargs
        )


class ResponseReadError(InternalError):
    """The backend answered but its body could not be read."""

    def __init__(self, message: str = "Failed to read response", **kwargs: Any) -> None:
        super().__init__(
            message, error_code=ErrorCode.RESPONSE_READ_FAILED, **kwargs
        )


class ConfigurationError(JokeMeshError):
    """Invalid startup configuration. The process must not start."""

    def __init__(self, message: str, setting: str | None = None, **kwargs: Any) -> None:
        super().__init__(
            message, error_code=ErrorCode.CONFIGURATION_ERROR, **kwargs
        )
        self.setting = setting
