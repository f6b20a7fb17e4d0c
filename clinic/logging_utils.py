from __future__ import annotations

import contextvars
import json
import logging
import sys
from typing import Any

_request_id_ctx_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)

_STANDARD_ATTRIBUTES = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
    }
)


class RequestContextFilter(logging.Filter):
    """Inject the request id bound to the current context into log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - simple
        record.request_id = _request_id_ctx_var.get()
        return True


class JSONLogFormatter(logging.Formatter):
    """Serialize log records as JSON with context metadata."""

    def __init__(self) -> None:  # pragma: no cover - trivial
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S%z")

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": record.__dict__.get("request_id"),
        }

        for key, value in record.__dict__.items():
            if key == "request_id":
                continue
            if key.startswith("_") or key in _STANDARD_ATTRIBUTES:
                continue
            log_entry[key] = value

        if record.exc_info:
            log_entry["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


_configured = False


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure the root logger for structured JSON output."""

    global _configured
    if _configured:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONLogFormatter())
    handler.addFilter(RequestContextFilter())

    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logger = logging.getLogger(logger_name)
        logger.handlers = []
        logger.propagate = True

    _configured = True


def bind_request_id(request_id: str | None) -> contextvars.Token:
    """Bind a request id to the current logging context."""

    return _request_id_ctx_var.set(request_id)


def reset_request_id(token: contextvars.Token) -> None:
    _request_id_ctx_var.reset(token)


def get_request_id() -> str:
    """Return the request id bound to the current context."""

    request_id = _request_id_ctx_var.get()
    return request_id or "unknown"


__all__ = [
    "JSONLogFormatter",
    "RequestContextFilter",
    "bind_request_id",
    "configure_logging",
    "get_request_id",
    "reset_request_id",
]
