"""Application error types and their FastAPI exception handlers.

Services raise these; the HTTP layer renders them as
``{"error": {"code", "message", "details"}}``. Store failures
(``OperationalError`` and friends) are not wrapped by services: they propagate
to the caller, which may retry the whole operation.
"""

from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError, OperationalError

from meetcal.core.logging import get_logger

logger = get_logger(__name__)


class AppError(Exception):
    """Base exception class for application errors"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppError):
    def __init__(self, message: str = "Resource not found", details: dict | None = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            code="NOT_FOUND",
            details=details,
        )


class ConflictError(AppError):
    def __init__(self, message: str = "Resource already exists", details: dict | None = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            code="CONFLICT",
            details=details,
        )


class InvalidInputError(AppError):
    def __init__(self, message: str = "Invalid input", details: dict | None = None):
        super().__init__(
            message=message,
            status_code=422,
            code="INVALID_INPUT",
            details=details,
        )


class AuthenticationError(AppError):
    def __init__(self, message: str = "Authentication failed", details: dict | None = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            code="AUTHENTICATION_FAILED",
            details=details,
        )


def is_transient(exc: Exception) -> bool:
    """True for store failures worth retrying (unreachable, timed out)."""
    if isinstance(exc, OperationalError):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


async def app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.warning(
        "app_error",
        error_code=exc.code,
        status_code=exc.status_code,
        message=exc.message,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.code,
                "message": exc.message,
                "details": exc.details,
            }
        },
    )


async def store_exception_handler(request: Request, exc: DBAPIError) -> JSONResponse:
    """Map transient store failures to 503 so clients know to retry."""
    if not is_transient(exc):
        raise exc
    logger.error("store_unavailable", path=request.url.path, error=str(exc.orig))
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "error": {
                "code": "STORE_UNAVAILABLE",
                "message": "The data store is temporarily unavailable, please retry",
                "details": {},
            }
        },
    )
