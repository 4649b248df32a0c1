import logging
import traceback
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import InterfaceError, OperationalError
from starlette.exceptions import HTTPException

from app.core.config import settings

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map onto a JSON error response."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Unexpected server error"

    def __init__(self, message: Optional[str] = None, error: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.error = error
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.error:
            body["error"] = self.error
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Missing required parameters"


class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Unauthorized access"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ParseError(AppError):
    status_code = 422
    default_message = "Could not extract questions from the model output"


class PlaceholderDetected(AppError):
    status_code = 422
    default_message = "Model returned placeholder questions"


class ConfigurationError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server configuration error"


class UpstreamError(AppError):
    """A failed call to the LLM provider.

    `transient` marks conditions worth retrying with backoff (connection
    problems, timeouts, rate limiting, service unavailable).
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "LLM API error"

    def __init__(self, message: Optional[str] = None, upstream_status: Optional[int] = None, transient: bool = False):
        super().__init__(message)
        self.upstream_status = upstream_status
        self.transient = transient


class DatabaseUnavailable(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Database service unavailable"


def _with_stack(body: dict, exc: Exception) -> dict:
    if not settings.is_production:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


async def app_error_handler(request: Request, exc: AppError):
    body = exc.to_dict()
    if exc.status_code >= 500:
        logger.error("Error in %s %s: %s", request.method, request.url.path, exc.message)
        body = _with_stack(body, exc)
    return JSONResponse(status_code=exc.status_code, content=body)


async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(part) for part in err.get("loc", ())), "error": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Validation error", "details": details},
    )


async def database_error_handler(request: Request, exc: Exception):
    logger.error("Database error in %s %s: %s", request.method, request.url.path, exc)
    body = _with_stack(DatabaseUnavailable(error="Unable to connect to database").to_dict(), exc)
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body)


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error in %s %s", request.method, request.url.path)
    body = {"message": "Something went wrong on the server"}
    if not settings.is_production:
        body["error"] = str(exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=_with_stack(body, exc))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(OperationalError, database_error_handler)
    app.add_exception_handler(InterfaceError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
