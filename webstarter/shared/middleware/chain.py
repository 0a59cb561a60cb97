"""
Middleware chain executor.

A middleware receives the request and returns ``(response, continue)``.
Middlewares run strictly in registration order. The first one that
returns ``continue=False`` ends the chain: its response, if any, is
written and nothing after it runs. When every middleware continues, the
handler runs and its response is written.

Exceptions from middlewares and handlers are never caught here; they
travel up to the recovery middleware.

Global middlewares run as an ASGI layer in front of the router, so they
also see requests that match no route. Group middlewares run inside the
route endpoint through ``MiddlewareChain.execute``.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Sequence, Union

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request as StarletteRequest
from starlette.responses import Response as StarletteResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from webstarter.http.decoder import DEFAULT_DECODER, ResponseDecoder
from webstarter.http.request import Request
from webstarter.http.response import RawResponse, Response
from webstarter.http.writer import ResponseWriter, render_response, write_response

logger = logging.getLogger(__name__)

MiddlewareResult = tuple[Union[Response, None], bool]
Middleware = Callable[[Request], Union[MiddlewareResult, Awaitable[MiddlewareResult]]]
HandlerWrapper = Callable[[Request], Union[Response, None, Awaitable[Union[Response, None]]]]

# Status left on the wire when a chain stops without writing anything.
NOT_WRITTEN_STATUS = 404


def _is_async_callable(fn: Callable[..., Any]) -> bool:
    return inspect.iscoroutinefunction(fn) or inspect.iscoroutinefunction(
        getattr(fn, "__call__", None)
    )


async def call_maybe_async(fn: Callable[..., Any], *args: Any) -> Any:
    """Await async callables; run sync ones in the threadpool."""
    if _is_async_callable(fn):
        return await fn(*args)
    result = await run_in_threadpool(fn, *args)
    if inspect.isawaitable(result):
        result = await result
    return result


def _name(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__qualname__", type(fn).__name__)


async def run_middlewares(
    request: Request, middlewares: Sequence[Middleware]
) -> MiddlewareResult:
    """Run ``middlewares`` in order until one stops the chain.

    Returns:
        ``(response, False)`` from the middleware that stopped the chain,
        or ``(None, True)`` when all of them continued.
    """
    for middleware in middlewares:
        response, continued = await call_maybe_async(middleware, request)
        if isinstance(response, RawResponse) and response.abort:
            continued = False
        if not continued:
            logger.debug(
                "Middleware %s stopped the chain for %s %s",
                _name(middleware),
                request.method,
                request.path,
            )
            return response, False
    return None, True


class MiddlewareChain:
    """Runs an ordered middleware list and then a handler."""

    def __init__(
        self,
        middlewares: Sequence[Middleware] = (),
        decoder: ResponseDecoder = DEFAULT_DECODER,
    ) -> None:
        self.middlewares = tuple(middlewares)
        self.decoder = decoder

    async def execute(
        self, request: Request, handlers: Sequence[HandlerWrapper]
    ) -> StarletteResponse:
        """Run the middlewares, then every handler of the route in order.

        All handlers write through the same ``ResponseWriter``. A raw
        response with ``abort`` set skips the handlers after it.
        """
        response, continued = await run_middlewares(request, self.middlewares)
        if not continued:
            if response is None:
                return StarletteResponse(status_code=NOT_WRITTEN_STATUS)
            return render_response(response, self.decoder)

        writer = ResponseWriter()
        for index, handler in enumerate(handlers):
            response = await call_maybe_async(handler, request)
            write_response(writer, response, self.decoder)
            if isinstance(response, RawResponse) and response.abort:
                skipped = len(handlers) - index - 1
                if skipped:
                    logger.warning(
                        "Request %s %s is aborted, skipping %d handler(s)",
                        request.method,
                        request.path,
                        skipped,
                    )
                break
        return writer.to_response()


class ReplayReceive:
    """ASGI ``receive`` wrapper that records what the middlewares read.

    Global middlewares read the request through ``capture``; the
    downstream application reads through ``replay``, which hands back the
    recorded messages first and then continues with the live stream.
    """

    def __init__(self, receive: Receive) -> None:
        self._receive = receive
        self._recorded: list[Message] = []

    async def capture(self) -> Message:
        message = await self._receive()
        if message["type"] == "http.request":
            self._recorded.append(message)
        return message

    async def replay(self) -> Message:
        if self._recorded:
            return self._recorded.pop(0)
        return await self._receive()


class GlobalMiddlewareChain:
    """ASGI layer running the configured global middlewares.

    A short-circuit with no response writes nothing, leaving the deferred
    writer's default status in place. Body chunks read by a middleware are
    replayed to the route handler.
    """

    def __init__(
        self,
        app: ASGIApp,
        middlewares: Sequence[Middleware] = (),
        decoder: ResponseDecoder = DEFAULT_DECODER,
        forwarded_by_client_ip: bool = True,
    ) -> None:
        self.app = app
        self.middlewares = tuple(middlewares)
        self.decoder = decoder
        self.forwarded_by_client_ip = forwarded_by_client_ip

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self.middlewares:
            await self.app(scope, receive, send)
            return

        replay = ReplayReceive(receive)
        request = Request(
            StarletteRequest(scope, replay.capture),
            forwarded_by_client_ip=self.forwarded_by_client_ip,
        )
        response, continued = await run_middlewares(request, self.middlewares)
        if continued:
            await self.app(scope, replay.replay, send)
            return
        if response is not None:
            await render_response(response, self.decoder)(scope, replay.replay, send)
