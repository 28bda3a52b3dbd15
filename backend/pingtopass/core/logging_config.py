"""
Structured logging configuration.

- JSON lines in production (machine-parseable for log shipping)
- Human-readable text for development
- Request ID middleware for tracing, echoed as ``X-Request-ID``
- One access line per request
"""

import json
import logging
import time
import uuid
from contextvars import ContextVar
from typing import Optional

from fastapi import FastAPI, Request

from pingtopass.core.config import settings
from pingtopass.core.errors import error_metrics

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

logger = logging.getLogger("pingtopass.access")


class RequestIdFilter(logging.Filter):
    """Attach the current request id to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get()
        return True


class JSONFormatter(logging.Formatter):
    """Emit log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": "pingtopass",
            "environment": settings.APP_ENV,
        }
        request_id = getattr(record, "request_id", "-")
        if request_id != "-":
            entry["request_id"] = request_id
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(log_format: Optional[str] = None, log_level: Optional[str] = None) -> None:
    """Configure the root logger from settings."""
    log_format = log_format or settings.LOG_FORMAT
    log_level = log_level or settings.LOG_LEVEL

    root = logging.getLogger()
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.addFilter(RequestIdFilter())
    if log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
    root.addHandler(handler)

    # Quiet noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _incoming_request_id(request: Request) -> str:
    return (
        request.headers.get("cf-ray")
        or request.headers.get("x-request-id")
        or uuid.uuid4().hex[:12]
    )


def register_request_logging(app: FastAPI) -> None:
    """Install the request id / access log middleware."""

    @app.middleware("http")
    async def _log_request(request: Request, call_next):
        request_id = _incoming_request_id(request)
        token = request_id_var.set(request_id)
        request.state.request_id = request_id
        error_metrics.record_request()
        start = time.time()
        try:
            try:
                response = await call_next(request)
            except Exception:
                logger.error(
                    "%s %s 500 %.0fms unhandled",
                    request.method,
                    request.url.path,
                    (time.time() - start) * 1000,
                )
                raise
            duration_ms = (time.time() - start) * 1000
            response.headers["X-Request-ID"] = request_id
            logger.info(
                "%s %s %s %.0fms",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
            )
            return response
        finally:
            request_id_var.reset(token)
