"""
Standardized error handling for API

Provides consistent error responses and the decorator that maps Docker
client exceptions to HTTP errors.
"""

import logging
from enum import Enum
from functools import wraps
from typing import Any, Callable

from fastapi import HTTPException
from pydantic import BaseModel

from tosbur.docker.exceptions import (
    DaemonError,
    DaemonNotRunningError,
    DockerConnectionError,
    DockerException,
    LifecycleError,
    NotFoundError,
    ParseError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Standard error codes for API responses"""

    DAEMON_NOT_RUNNING = "daemon_not_running"
    CONNECTION_ERROR = "connection_error"
    DAEMON_ERROR = "daemon_error"
    VALIDATION_ERROR = "validation_error"
    NOT_FOUND = "not_found"
    PARSE_ERROR = "parse_error"
    LIFECYCLE_ERROR = "lifecycle_error"
    INTERNAL_ERROR = "internal_error"


class ErrorResponse(BaseModel):
    """Standard error response format"""

    error: ErrorCode
    message: str
    recovery_hint: str | None = None
    details: dict[str, Any] | None = None


# Most specific first: subclasses must precede their bases
_EXCEPTION_MAP: list[tuple[type[DockerException], ErrorCode, int]] = [
    (DaemonNotRunningError, ErrorCode.DAEMON_NOT_RUNNING, 503),
    (DockerConnectionError, ErrorCode.CONNECTION_ERROR, 503),
    (NotFoundError, ErrorCode.NOT_FOUND, 404),
    (ValidationError, ErrorCode.VALIDATION_ERROR, 422),
    (LifecycleError, ErrorCode.LIFECYCLE_ERROR, 409),
    (ParseError, ErrorCode.PARSE_ERROR, 502),
    (DaemonError, ErrorCode.DAEMON_ERROR, 502),
]


def create_error_response(
    code: ErrorCode,
    message: str,
    status_code: int = 400,
    details: dict | None = None,
    recovery_hint: str | None = None,
) -> HTTPException:
    """
    Create standardized HTTPException

    Args:
        code: Error code enum value
        message: Human-readable error message
        status_code: HTTP status code
        details: Optional additional error details
        recovery_hint: Optional hint for how to resolve the error

    Returns:
        HTTPException with standardized error response
    """
    return HTTPException(
        status_code=status_code,
        detail=ErrorResponse(
            error=code,
            message=message,
            recovery_hint=recovery_hint,
            details=details,
        ).model_dump(mode="json"),
    )


def docker_error_response(error: DockerException) -> HTTPException:
    """Translate a Docker client exception into a standardized HTTPException"""
    code, status_code = ErrorCode.INTERNAL_ERROR, 500
    for exc_type, mapped_code, mapped_status in _EXCEPTION_MAP:
        if isinstance(error, exc_type):
            code, status_code = mapped_code, mapped_status
            break

    details: dict[str, Any] = dict(error.context)
    if error.status_code is not None:
        details["daemon_status"] = error.status_code
    if error.body:
        details["daemon_body"] = error.body

    return create_error_response(
        code,
        error.message,
        status_code,
        details=details or None,
        recovery_hint=error.recovery_hint or None,
    )


def api_exception_handler(operation: str):
    """
    Decorator for consistent error handling in API routes

    Logs exceptions and converts them to standardized error responses.
    Re-raises HTTPExceptions as-is.

    Args:
        operation: Description of the operation for logging

    Example:
        @router.post("")
        @api_exception_handler("launch_notebook")
        async def launch_notebook(request: LaunchRequest):
            ...
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except HTTPException:
                raise
            except DockerException as e:
                logger.warning(f"{operation} - {type(e).__name__}: {e.message}")
                raise docker_error_response(e) from e
            except Exception as e:
                logger.exception(f"{operation} failed: {e}")
                raise create_error_response(
                    ErrorCode.INTERNAL_ERROR,
                    f"{operation} failed: {str(e)}",
                    500,
                    recovery_hint="Check the application logs for more details.",
                ) from e

        return wrapper

    return decorator
