"""
Panic recovery middleware.

Wraps the whole per-request execution in a single ``try``. Any exception
escaping a middleware, a handler or an encoder is handed to the
configured panic resolver and the response it returns is written to the
client, so the engine's default 500 page never reaches it.

Implemented as pure ASGI middleware so it can tell whether the response
had already started before the failure.
"""

import logging
from typing import TYPE_CHECKING

from starlette.requests import Request as StarletteRequest
from starlette.responses import Response as StarletteResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from webstarter.domain.errors import StarterError
from webstarter.http.request import Request
from webstarter.http.response import Response, resp_rest_exception
from webstarter.http.writer import render_response
from webstarter.shared.middleware.chain import call_maybe_async

if TYPE_CHECKING:
    from webstarter.core.config import StarterConfig

logger = logging.getLogger(__name__)

HTTP_INTERNAL_SERVER_ERROR = 500


class RecoveryMiddleware:
    """Turns uncaught exceptions into the panic resolver's response."""

    def __init__(self, app: ASGIApp, config: "StarterConfig") -> None:
        self.app = app
        self.config = config

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            if response_started:
                logger.error(
                    "Exception raised after the response started for %s %s",
                    scope.get("method", "unknown"),
                    scope.get("path", "unknown"),
                    exc_info=exc,
                )
                return

            request = Request(
                StarletteRequest(scope, receive),
                forwarded_by_client_ip=not self.config.settings.disable_forwarded_by_client_ip,
            )
            engine_response = await self._recover(request, exc)
            await engine_response(scope, receive, send)

    async def _recover(self, request: Request, exc: Exception) -> StarletteResponse:
        try:
            response = await self._resolve(request, exc)
            if response is not None:
                return render_response(response, self.config.decoder)
            logger.error(
                "Panic resolver returned no response for %s %s, sending bare %d",
                request.method,
                request.path,
                HTTP_INTERNAL_SERVER_ERROR,
            )
        except Exception:
            logger.exception(
                "Recovery failed while handling %s for %s %s",
                type(exc).__name__,
                request.method,
                request.path,
            )
        return StarletteResponse(status_code=HTTP_INTERNAL_SERVER_ERROR)

    async def _resolve(self, request: Request, exc: Exception) -> Response | None:
        if self.config.settings.hide_panic_error_details and not isinstance(exc, StarterError):
            logger.error(
                "Request %s %s raised %s",
                request.method,
                request.path,
                type(exc).__name__,
                exc_info=exc,
            )
            return resp_rest_exception()
        return await call_maybe_async(self.config.panic_resolver, request, exc)
