"""Request Context Middleware - X-Request-ID propagation and log-context binding.

Invariants:
    - Every HTTP response carries X-Request-ID (forwarded when safe, else a new UUID)
    - request_id and path are bound for the whole request and reset afterwards
    - Client-provided ids are sanitized (length + character set) to prevent log injection

Design Decisions:
    - Raw ASGI (no BaseHTTPMiddleware): the endpoint runs in the same task, so
      the contextvars bound here are visible to handlers and error handlers
"""

import re
import uuid
from typing import Callable

from book_api.infrastructure.observability import bind_request, reset_request

REQUEST_ID_HEADER = "X-Request-ID"
REQUEST_ID_MAX_LENGTH = 64
_ALLOWED = re.compile(r"^[a-zA-Z0-9_-]{1," + str(REQUEST_ID_MAX_LENGTH) + r"}$")


def _get_header(scope: dict, name: str) -> str | None:
    want = name.lower().encode()
    for k, v in scope.get("headers", []):
        if k.lower() == want:
            return v.decode("utf-8", errors="replace")
    return None


def sanitize_request_id(raw: str | None) -> str:
    """Return raw if safe to log; otherwise a fresh UUID."""
    if not raw or not _ALLOWED.match(raw.strip()):
        return str(uuid.uuid4())
    return raw.strip()


def RequestContextMiddleware(app: Callable) -> Callable:
    """Bind request id/path for logging and echo X-Request-ID. Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        request_id = sanitize_request_id(_get_header(scope, REQUEST_ID_HEADER))
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_wrapper(message: dict) -> None:
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((REQUEST_ID_HEADER.encode(), request_id.encode()))
                message["headers"] = headers
            await send(message)

        tokens = bind_request(request_id, scope.get("path", ""))
        try:
            await app(scope, receive, send_wrapper)
        finally:
            reset_request(tokens)

    return asgi_app
