"""
Route groups.

Applications describe their routes as ``Router`` objects: ``info()``
returns the group path, optional basic auth account and group
middlewares; ``handlers()`` registers handlers on a ``RouterWrapper``.
Each group becomes one FastAPI ``APIRouter`` whose endpoints run the
group middleware chain and then the handler.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, Sequence, runtime_checkable

from fastapi import APIRouter, FastAPI
from starlette.requests import Request as StarletteRequest
from starlette.responses import Response as StarletteResponse

from webstarter.domain.errors import ConfigurationError
from webstarter.http.request import Request
from webstarter.shared.middleware.chain import HandlerWrapper, Middleware, MiddlewareChain
from webstarter.shared.security.basic_auth import BasicAuthAccount, basic_auth_middleware

if TYPE_CHECKING:
    from webstarter.core.config import StarterConfig

logger = logging.getLogger(__name__)

HTTP_METHODS = frozenset({"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE"})


@dataclass(frozen=True)
class RouterInfo:
    """Group-level routing information.

    Attributes:
        group_path: Path prefix shared by every route of the group.
        basic_auth: When set, every route of the group requires these
            credentials.
        middlewares: Middlewares run, in order, before each handler of
            the group (after the basic auth check).
    """

    group_path: str = ""
    basic_auth: BasicAuthAccount | None = None
    middlewares: Sequence[Middleware] = field(default_factory=tuple)


@runtime_checkable
class Router(Protocol):
    """A group of routes registered by the application."""

    def info(self) -> RouterInfo: ...

    def handlers(self, router: "RouterWrapper") -> None: ...


def _group_prefix(group_path: str) -> str:
    stripped = group_path.strip("/")
    return f"/{stripped}" if stripped else ""


def _route_path(path: str) -> str:
    return "/" + path.lstrip("/")


class RouterWrapper:
    """Registers handlers on one route group."""

    def __init__(
        self,
        router: APIRouter,
        chain: MiddlewareChain,
        forwarded_by_client_ip: bool = True,
    ) -> None:
        self.router = router
        self.chain = chain
        self.forwarded_by_client_ip = forwarded_by_client_ip

    def get(self, path: str, *handlers: HandlerWrapper) -> None:
        self.match(["GET"], path, *handlers)

    def post(self, path: str, *handlers: HandlerWrapper) -> None:
        self.match(["POST"], path, *handlers)

    def put(self, path: str, *handlers: HandlerWrapper) -> None:
        self.match(["PUT"], path, *handlers)

    def patch(self, path: str, *handlers: HandlerWrapper) -> None:
        self.match(["PATCH"], path, *handlers)

    def delete(self, path: str, *handlers: HandlerWrapper) -> None:
        self.match(["DELETE"], path, *handlers)

    def head(self, path: str, *handlers: HandlerWrapper) -> None:
        self.match(["HEAD"], path, *handlers)

    def options(self, path: str, *handlers: HandlerWrapper) -> None:
        self.match(["OPTIONS"], path, *handlers)

    def trace(self, path: str, *handlers: HandlerWrapper) -> None:
        self.match(["TRACE"], path, *handlers)

    def match(self, methods: Sequence[str], path: str, *handlers: HandlerWrapper) -> None:
        """Register ``handlers`` for every method in ``methods``.

        The handlers run in order for each request, writing through one
        response writer.

        Raises:
            ConfigurationError: If no method, an unknown method or no
                handler is given.
        """
        normalized = [method.upper() for method in methods]
        unknown = [method for method in normalized if method not in HTTP_METHODS]
        if not normalized or unknown:
            raise ConfigurationError(f"Invalid HTTP methods for route {path!r}: {list(methods)}")
        if not handlers:
            raise ConfigurationError(f"No handler given for route {path!r}")

        chain = self.chain
        forwarded_by_client_ip = self.forwarded_by_client_ip

        async def endpoint(request: StarletteRequest) -> StarletteResponse:
            return await chain.execute(
                Request(request, forwarded_by_client_ip=forwarded_by_client_ip),
                handlers,
            )

        self.router.add_api_route(
            _route_path(path),
            endpoint,
            methods=normalized,
            name=getattr(handlers[0], "__name__", None),
            include_in_schema=False,
        )


def register_routers(app: FastAPI, config: "StarterConfig") -> None:
    """Register every configured route group on ``app``."""
    forwarded_by_client_ip = not config.settings.disable_forwarded_by_client_ip
    for router in config.routers:
        info = router.info()
        middlewares: list[Middleware] = []
        if info.basic_auth is not None:
            middlewares.append(basic_auth_middleware(info.basic_auth))
        middlewares.extend(m for m in info.middlewares if m is not None)

        prefix = _group_prefix(info.group_path)
        api_router = APIRouter(prefix=prefix)
        wrapper = RouterWrapper(
            api_router,
            MiddlewareChain(middlewares, config.decoder),
            forwarded_by_client_ip=forwarded_by_client_ip,
        )
        router.handlers(wrapper)
        app.include_router(api_router)
        logger.debug(
            "Registered %d route(s) under %r", len(api_router.routes), prefix or "/"
        )
