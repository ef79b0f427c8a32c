from __future__ import annotations

import contextvars
import json
import logging
import sys
import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

# Context var to carry request_id across async tasks
_request_id_ctx: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")

# Extra fields copied into JSON log lines when present on the record
_EXTRA_KEYS = (
    "request_id",
    "run_id",
    "work_id",
    "principal",
    "page",
    "stage",
    "status",
    "reason",
    "error",
    "duration_ms",
    "returncode",
    "path",
)


def get_request_id() -> str:
    return _request_id_ctx.get()


class RequestIdFilter(logging.Filter):
    """Inject request_id from contextvars into log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003 (shadow builtins)
        record.request_id = get_request_id()
        return True


class StructuredFormatter(logging.Formatter):
    """JSON formatter; copies known ``extra={...}`` fields into the payload."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_KEYS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)
        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }
        return json.dumps(log_data, ensure_ascii=False, default=str)


def configure_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure root logging with a consistent, structured-ish format.

    Called once on application import/startup. Safe to call repeatedly.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    # Remove existing handlers to avoid duplicate logs in reload
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level.upper())
    handler.addFilter(RequestIdFilter())
    if json_format:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s | %(levelname)s | %(name)s | request_id=%(request_id)s | %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S%z",
            )
        )
    root.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("pypdf").setLevel(logging.ERROR)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware to attach a request ID to each request/response.

    - Reads X-Request-ID header if provided; otherwise generates a UUID.
    - Stores value in request.state.request_id and a contextvar for logging.
    - Echoes header back in the response.
    """

    async def dispatch(self, request: Request, call_next):
        incoming: Optional[str] = request.headers.get("X-Request-ID")
        rid = incoming or uuid.uuid4().hex
        request.state.request_id = rid
        token = _request_id_ctx.set(rid)
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = rid
            return response
        finally:
            _request_id_ctx.reset(token)
