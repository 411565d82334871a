"""
Central error handling for the task log backend

Domain exceptions are raised by the services and repositories; the handlers
below turn them (and FastAPI's own errors) into one JSON error shape.
"""
import logging
import traceback

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class TaskLogError(Exception):
    """Base class for errors raised by the task log services"""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(TaskLogError):
    """A submission or review request broke a business rule; nothing was written"""

    status_code = status.HTTP_400_BAD_REQUEST


class DuplicateSubmissionError(ValidationError):
    """The employee already has logs for the requested date"""

    status_code = status.HTTP_409_CONFLICT


class InvalidTransitionError(TaskLogError):
    """The requested approval action is not allowed from the log's current state"""

    status_code = status.HTTP_409_CONFLICT


class AuthorizationError(TaskLogError):
    """The caller is not allowed to perform the action"""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(TaskLogError):
    status_code = status.HTTP_404_NOT_FOUND


class PersistenceError(TaskLogError):
    """The storage backend failed; the action was not confirmed and may be retried"""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


def _error_body(status_code: int, detail, request: Request) -> dict:
    return {
        "error": True,
        "status_code": status_code,
        "detail": detail,
        "path": str(request.url.path)
    }


async def task_log_exception_handler(request: Request, exc: TaskLogError) -> JSONResponse:
    """
    Handle domain errors raised by services with the common JSON response format

    Persistence failures are flagged as retryable so clients can offer a retry
    instead of assuming the action went through.
    """
    content = _error_body(exc.status_code, exc.detail, request)
    if isinstance(exc, PersistenceError):
        logger.error("Persistence failure on %s: %s", request.url.path, exc.detail)
        content["retryable"] = True
    else:
        logger.info("Request rejected on %s: %s", request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=content)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Handle HTTPException with consistent JSON response format

    Args:
        request: FastAPI request object
        exc: HTTPException instance

    Returns:
        JSONResponse with error details
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.status_code, exc.detail, request),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle RequestValidationError with consistent JSON response format

    Does not leak internal validation details in production.
    """
    from tasklog.core.config import settings

    if settings.APP_ENV == "prod":
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_error_body(422, "Validation error: Invalid request data", request)
        )

    # Sanitize for JSON: e.g. ctx.error ValueError -> str
    errors = []
    for e in exc.errors():
        err = dict(e)
        if "ctx" in err and isinstance(err["ctx"], dict):
            err["ctx"] = {
                k: (str(v) if not isinstance(v, (str, int, float, bool, type(None))) else v)
                for k, v in err["ctx"].items()
            }
        errors.append(err)
    content = _error_body(422, "Validation error", request)
    content["errors"] = errors
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=content)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions with consistent JSON response format

    Does not leak internal error details in production.
    """
    from tasklog.core.config import settings

    logger.error("Unhandled exception: %s", exc, exc_info=True)

    if settings.APP_ENV == "prod":
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(500, "Internal server error", request)
        )

    content = _error_body(500, str(exc), request)
    content["traceback"] = traceback.format_exc() if settings.APP_ENV == "local" else None
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)
