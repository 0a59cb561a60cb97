"""
Per-request trace id.

When enabled, every request gets a trace id: the caller's ``X-Trace-Id``
header if present, otherwise a fresh UUID. The id is available to
handlers, middlewares and resolvers through ``get_trace_id()`` and is
echoed on every response, including rewritten and recovered ones.
"""

import uuid
from contextvars import ContextVar

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

TRACE_ID_HEADER = "x-trace-id"

_trace_id: ContextVar[str | None] = ContextVar("webstarter_trace_id", default=None)


def get_trace_id() -> str | None:
    """Trace id of the request being handled, or None outside a request."""
    return _trace_id.get()


class TraceIdMiddleware:
    """Assigns a trace id to each request and echoes it on the response."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        trace_id = Headers(scope=scope).get(TRACE_ID_HEADER) or uuid.uuid4().hex
        token = _trace_id.set(trace_id)

        async def send_with_trace_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = [
                    (name, value)
                    for name, value in message.get("headers", [])
                    if name.lower() != TRACE_ID_HEADER.encode()
                ]
                headers.append((TRACE_ID_HEADER.encode(), trace_id.encode("latin-1")))
                message = {**message, "headers": headers}
            await send(message)

        try:
            await self.app(scope, receive, send_with_trace_id)
        finally:
            _trace_id.reset(token)
