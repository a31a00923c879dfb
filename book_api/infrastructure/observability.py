"""Structured Logging - request-scoped log context, JSON formatter and setup.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Records emitted while serving a request carry request_id, path and the
      handler operation, without callers passing them as extras
    - Explicit extras win over the bound context
    - JSON format in production, human-readable in development

Design Decisions:
    - contextvars for request scope: each asyncio task sees its own values,
      concurrent requests never mix
    - The filter sits on the handler, so library loggers (sqlalchemy, uvicorn)
      are stamped too
"""

import json
import logging
from contextvars import ContextVar, Token
from datetime import datetime, timezone

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)
_request_path: ContextVar[str | None] = ContextVar("request_path", default=None)
_operation: ContextVar[str | None] = ContextVar("operation", default=None)

_EXTRA_KEYS = (
    "request_id", "path", "operation", "user_id", "error_code", "status_code",
)


def bind_request(request_id: str, path: str) -> tuple[Token, Token]:
    """Bind request identity for the current task. Returns tokens for reset_request."""
    return _request_id.set(request_id), _request_path.set(path)


def reset_request(tokens: tuple[Token, Token]) -> None:
    id_token, path_token = tokens
    _request_id.reset(id_token)
    _request_path.reset(path_token)


def bind_operation(name: str) -> None:
    """Name the handler operation running in the current task."""
    _operation.set(name)


def current_context() -> dict:
    return {
        "request_id": _request_id.get(),
        "path": _request_path.get(),
        "operation": _operation.get(),
    }


class RequestContextFilter(logging.Filter):
    """Stamp bound request context onto records that do not already carry it."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in current_context().items():
            if value is not None and getattr(record, key, None) is None:
                setattr(record, key, value)
        return True


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_KEYS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure logging for the application."""
    handler = logging.StreamHandler()
    handler.addFilter(RequestContextFilter())
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s [%(request_id)s] - %(message)s",
            defaults={"request_id": "-"},
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
