"""
Deferred status commit and bad transport status resolution.

The engine commits a status as soon as anything sends
``http.response.start``. ``DeferredStatusWriter`` sits in place of the
ASGI ``send`` callable and keeps that status in memory instead, so the
status can still be inspected and replaced after the handler (or the
engine's own router) has written it.

``BadHttpCodeMiddleware`` runs the rest of the application through a
deferred writer. When the application finishes with a status other than
200 that is not ignored, the engine's output is dropped and the
configured resolver's envelope is written with transport status 200.
"""

import logging
from typing import TYPE_CHECKING, Callable

from starlette.requests import Request as StarletteRequest
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from webstarter.http.request import Request
from webstarter.http.writer import render_response
from webstarter.shared.middleware.chain import call_maybe_async

if TYPE_CHECKING:
    from webstarter.core.config import StarterConfig

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_NOT_FOUND = 404
HTTP_METHOD_NOT_ALLOWED = 405

# Headers describing the discarded body; the replacement brings its own.
ENTITY_HEADERS = frozenset({b"content-type", b"content-length"})


class DeferredStatusWriter:
    """ASGI ``send`` wrapper that buffers the response status.

    The status defaults to 404 until something writes one. The buffered
    start message is committed on the first body message whose status
    ``should_hold`` rejects, or when ``finish()`` is called. Body messages
    sent under a held status stay in memory until ``finish()`` or
    ``discard()``.
    """

    def __init__(
        self,
        send: Send,
        should_hold: Callable[[int], bool],
        default_status: int = HTTP_NOT_FOUND,
    ) -> None:
        self._send = send
        self._should_hold = should_hold
        self._status = default_status
        self._start: Message | None = None
        self._held: list[Message] = []
        self._committed = False
        self._body_complete = False

    @property
    def status(self) -> int:
        """The buffered status; reading it never forces a commit."""
        return self._status

    @property
    def committed(self) -> bool:
        return self._committed

    @property
    def headers(self) -> list[tuple[bytes, bytes]]:
        if self._start is None:
            return []
        return list(self._start.get("headers", []))

    async def __call__(self, message: Message) -> None:
        if self._committed:
            await self._forward(message)
            return

        if message["type"] == "http.response.start":
            self._start = message
            self._status = message["status"]
            return

        if message["type"] == "http.response.body" and self._should_hold(self._status):
            self._held.append(message)
            return

        await self.commit()
        await self._forward(message)

    async def _forward(self, message: Message) -> None:
        if message["type"] == "http.response.body" and not message.get("more_body", False):
            self._body_complete = True
        await self._send(message)

    async def commit(self) -> None:
        """Send the buffered start message and any held body messages."""
        if self._committed:
            return
        self._committed = True
        start = self._start or {
            "type": "http.response.start",
            "status": self._status,
            "headers": [],
        }
        await self._send(start)
        held, self._held = self._held, []
        for message in held:
            await self._forward(message)

    async def finish(self) -> None:
        """Commit and make sure the response body is terminated."""
        await self.commit()
        if not self._body_complete:
            await self._forward({"type": "http.response.body", "body": b"", "more_body": False})

    def discard(self) -> list[tuple[bytes, bytes]]:
        """Drop everything buffered and return the dropped headers."""
        headers = self.headers
        self._start = None
        self._held = []
        return headers


class BadHttpCodeMiddleware:
    """Rewrites non-200 transport statuses into the response envelope."""

    def __init__(self, app: ASGIApp, config: "StarterConfig") -> None:
        self.app = app
        self.config = config
        self.ignore_codes = config.effective_ignore_codes()

    def passes(self, status: int) -> bool:
        return status == HTTP_OK or status in self.ignore_codes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        writer = DeferredStatusWriter(send, should_hold=lambda status: not self.passes(status))
        await self.app(scope, receive, writer)

        status = writer.status
        if self.passes(status) or writer.committed:
            await writer.finish()
            return

        dropped_headers = writer.discard()
        settings = self.config.settings
        if status == HTTP_METHOD_NOT_ALLOWED and settings.disable_method_not_allowed_error:
            status = HTTP_NOT_FOUND

        request = Request(
            StarletteRequest(scope, receive),
            forwarded_by_client_ip=not settings.disable_forwarded_by_client_ip,
        )
        response = await call_maybe_async(self.config.bad_http_code_resolver, request, status)
        engine_response = render_response(response, self.config.decoder)

        present = {name for name, _ in engine_response.raw_headers}
        for name, value in dropped_headers:
            lowered = name.lower()
            if lowered in ENTITY_HEADERS or (lowered in present and lowered != b"set-cookie"):
                continue
            engine_response.raw_headers.append((lowered, value))

        await engine_response(scope, receive, send)
