# Structured JSON logging plus the middleware that records one log line
# per request. Every line carries request_id, company_id and user_id so a
# single request can be followed across the dispatch pipeline.

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from time import monotonic
from typing import Any
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from hrms.core.config import settings
from hrms.core.metrics import REQUEST_LATENCY


_STANDARD_ATTRS = {
    "args",
    "asctime",
    "created",
    "exc_info",
    "exc_text",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "message",
    "msg",
    "name",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "stack_info",
    "taskName",
    "thread",
    "threadName",
}

_ALWAYS_FIELDS = {
    "request_id",
    "company_id",
    "user_id",
    "route",
    "method",
    "status_code",
    "duration_ms",
    "error_code",
}

REQUEST_ID_HEADER = "X-Request-ID"


class JsonLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _STANDARD_ATTRS:
                continue
            if value is None and key not in _ALWAYS_FIELDS:
                continue
            payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=True, default=str)


def get_structured_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    handler = logging.StreamHandler()
    handler.setFormatter(JsonLogFormatter())
    logger.addHandler(handler)
    logger.setLevel(settings.LOG_LEVEL.upper())
    logger.propagate = False
    return logger


logger = get_structured_logger("api_logger")


UNMATCHED_ROUTE = "unmatched"
CATCH_ALL_PATH = "/{path:path}"


def _resolve_route(request: Request) -> str:
    # Dispatched requests carry the matched route pattern; /ping and /metrics
    # use their own route path. Anything else collapses to one label so
    # unknown URLs never mint new metric series.
    pattern = getattr(request.state, "route", None)
    if pattern:
        return pattern
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    if path and path != CATCH_ALL_PATH:
        return path
    return UNMATCHED_ROUTE


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Assigns a request id, echoes it back, and logs request.completed.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = (
            request.headers.get(REQUEST_ID_HEADER)
            or str(uuid4())
        )
        request.state.request_id = request_id
        start = monotonic()
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = round((monotonic() - start) * 1000.0, 2)
            logger.exception(
                "request.failed",
                extra={
                    "request_id": request_id,
                    "company_id": getattr(request.state, "company_id", None),
                    "user_id": getattr(request.state, "user_id", None),
                    "route": _resolve_route(request),
                    "method": request.method,
                    "status_code": 500,
                    "duration_ms": duration_ms,
                    "error_code": "unhandled_exception",
                },
            )
            raise

        duration_ms = round((monotonic() - start) * 1000.0, 2)
        route = _resolve_route(request)
        REQUEST_LATENCY.labels(method=request.method, endpoint=route).observe(duration_ms / 1000.0)
        logger.info(
            "request.completed",
            extra={
                "request_id": request_id,
                "company_id": getattr(request.state, "company_id", None),
                "user_id": getattr(request.state, "user_id", None),
                "route": route,
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
                "error_code": response.headers.get("X-Error-Code"),
            },
        )
        response.headers["X-Request-Id"] = request_id
        return response
