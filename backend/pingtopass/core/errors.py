"""
Error taxonomy and the FastAPI exception handlers that turn it into JSON.

Handlers translate every failure into the same body shape::

    {"error": true, "statusCode": 404, "type": "NotFoundError",
     "message": "...", "timestamp": "...", "path": "/api/..."}

401 bodies additionally carry ``authenticated: false``. Outside production a
``details`` object with the original message is attached; 5xx responses never
expose the original message in production.
"""

import logging
import threading
from datetime import datetime, UTC
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from pingtopass.core.config import settings

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map onto an HTTP status."""
    status_code: int = 500
    error_type: str = "ServerError"
    default_message: str = "An unexpected error occurred."

    def __init__(self, message: Optional[str] = None, *, data: Any = None):
        self.message = message or self.default_message
        self.data = data
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    error_type = "ValidationError"
    default_message = "Invalid request. Please check your input and try again."


class AuthenticationError(AppError):
    status_code = 401
    error_type = "AuthError"
    default_message = "Authentication required"


class PermissionDeniedError(AppError):
    status_code = 403
    error_type = "ForbiddenError"
    default_message = "Access denied. You don't have permission to perform this action."


class NotFoundError(AppError):
    status_code = 404
    error_type = "NotFoundError"
    default_message = "The requested resource was not found."


class ConflictError(AppError):
    status_code = 409
    error_type = "ConflictError"
    default_message = "Conflict detected. The resource already exists or is in use."


class RateLimitError(AppError):
    status_code = 429
    error_type = "RateLimitError"
    default_message = "Too many requests. Please slow down and try again later."


class ServiceUnavailableError(AppError):
    status_code = 503
    error_type = "ServiceUnavailableError"
    default_message = "Service temporarily unavailable. Please try again later."


_TYPE_BY_STATUS = {
    400: "ValidationError",
    401: "AuthError",
    403: "ForbiddenError",
    404: "NotFoundError",
    405: "MethodNotAllowedError",
    409: "ConflictError",
    422: "ValidationError",
    429: "RateLimitError",
    503: "ServiceUnavailableError",
}

GENERIC_SERVER_MESSAGE = "An unexpected error occurred. Our team has been notified."


class ErrorMetrics:
    """In-process error counters, reset on restart."""

    def __init__(self):
        self._lock = threading.Lock()
        self.reset()

    def reset(self) -> None:
        self.request_count = 0
        self.error_count = 0
        self.critical_errors = 0
        self.errors_by_type: Dict[str, int] = {}
        self.last_error = ""

    def record_request(self) -> None:
        with self._lock:
            self.request_count += 1

    def record_error(self, error_type: str, status_code: int) -> None:
        with self._lock:
            self.error_count += 1
            self.last_error = datetime.now(UTC).isoformat()
            self.errors_by_type[error_type] = self.errors_by_type.get(error_type, 0) + 1
            if status_code >= 500:
                self.critical_errors += 1

    @property
    def error_rate(self) -> float:
        """Errors per 100 requests."""
        return self.error_count / max(self.request_count, 1) * 100

    def health_status(self) -> str:
        if self.critical_errors > 20 or self.error_rate > 10:
            return "critical"
        if self.critical_errors > 5 or self.error_rate > 3:
            return "degraded"
        return "healthy"

    def summary(self) -> Dict[str, Any]:
        top = sorted(self.errors_by_type.items(), key=lambda item: item[1], reverse=True)[:5]
        return {
            "timestamp": datetime.now(UTC).isoformat(),
            "totalRequests": self.request_count,
            "totalErrors": self.error_count,
            "errorRate": round(self.error_rate, 2),
            "criticalErrors": self.critical_errors,
            "topErrorTypes": [{"type": t, "count": c} for t, c in top],
            "lastError": self.last_error,
            "healthStatus": self.health_status(),
        }


error_metrics = ErrorMetrics()


def error_body(
    request: Request,
    status_code: int,
    error_type: str,
    message: str,
    original: Optional[str] = None,
    data: Any = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "error": True,
        "statusCode": status_code,
        "type": error_type,
        "message": message,
        "timestamp": datetime.now(UTC).isoformat(),
        "path": request.url.path,
    }
    if status_code == 401:
        body["authenticated"] = False
    trace_id = request.headers.get("cf-ray")
    if trace_id:
        body["traceId"] = trace_id
    if data is not None:
        body["data"] = data
    if not settings.is_production and original:
        body["details"] = {"originalMessage": original}
    return body


def _respond(request: Request, status_code: int, error_type: str, message: str,
             original: Optional[str] = None, data: Any = None) -> JSONResponse:
    error_metrics.record_error(error_type, status_code)
    if status_code >= 500:
        logger.error("Server error %s on %s: %s", error_type, request.url.path, original or message)
    else:
        logger.warning("Client error %s %s on %s: %s", status_code, error_type, request.url.path, message)
    headers = {"X-Error-Type": error_type}
    # set by the request logging middleware; unhandled errors bypass its response path
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        headers["X-Request-ID"] = request_id
    return JSONResponse(
        status_code=status_code,
        content=error_body(request, status_code, error_type, message, original, data),
        headers=headers,
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    message = exc.message
    if exc.status_code >= 500 and settings.is_production:
        message = exc.default_message
    return _respond(request, exc.status_code, exc.error_type, message, exc.message, exc.data)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error_type = _TYPE_BY_STATUS.get(exc.status_code, "ServerError" if exc.status_code >= 500 else "ClientError")
    return _respond(request, exc.status_code, error_type, str(exc.detail), str(exc.detail))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(err.get("loc", [])), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return _respond(
        request, 400, "ValidationError",
        ValidationError.default_message, str(exc), data=errors,
    )


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return _respond(request, 429, "RateLimitError", RateLimitError.default_message, str(exc.detail))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s", request.url.path)
    return _respond(request, 500, type(exc).__name__, GENERIC_SERVER_MESSAGE, str(exc))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
