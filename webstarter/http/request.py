"""
Request context handed to handlers, middlewares and resolvers.

A thin wrapper over the Starlette request. The raw request stays
reachable through ``raw`` for anything not covered here.
"""

import base64
import binascii
from typing import Any

from starlette.requests import Request as StarletteRequest

FORWARDED_FOR_HEADER = "x-forwarded-for"
REAL_IP_HEADER = "x-real-ip"


class Request:
    """Per-request context.

    Attributes:
        raw: The underlying Starlette request.
    """

    def __init__(self, raw: StarletteRequest, *, forwarded_by_client_ip: bool = True) -> None:
        self.raw = raw
        self._forwarded_by_client_ip = forwarded_by_client_ip

    @property
    def method(self) -> str:
        return self.raw.method

    @property
    def path(self) -> str:
        return self.raw.url.path

    @property
    def url(self) -> str:
        return str(self.raw.url)

    @property
    def headers(self):
        return self.raw.headers

    def header(self, name: str, default: str | None = None) -> str | None:
        return self.raw.headers.get(name, default)

    def query_param(self, name: str, default: str | None = None) -> str | None:
        return self.raw.query_params.get(name, default)

    def query_params(self, name: str) -> list[str]:
        return self.raw.query_params.getlist(name)

    def path_param(self, name: str, default: Any = None) -> Any:
        return self.raw.path_params.get(name, default)

    def cookie(self, name: str, default: str | None = None) -> str | None:
        return self.raw.cookies.get(name, default)

    async def body(self) -> bytes:
        return await self.raw.body()

    async def json(self) -> Any:
        return await self.raw.json()

    def client_ip(self) -> str | None:
        """Best-effort client address.

        Uses ``X-Forwarded-For`` (first hop) and ``X-Real-IP`` unless
        forwarded addresses are disabled, then the socket peer.
        """
        if self._forwarded_by_client_ip:
            forwarded = self.raw.headers.get(FORWARDED_FOR_HEADER)
            if forwarded:
                first = forwarded.split(",")[0].strip()
                if first:
                    return first
            real_ip = self.raw.headers.get(REAL_IP_HEADER)
            if real_ip:
                return real_ip.strip()
        if self.raw.client is None:
            return None
        return self.raw.client.host

    def basic_auth(self) -> tuple[str, str] | None:
        """Credentials from a ``Basic`` ``Authorization`` header, if valid."""
        authorization = self.raw.headers.get("authorization")
        if not authorization:
            return None
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "basic" or not token:
            return None
        try:
            decoded = base64.b64decode(token.strip(), validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            return None
        username, separator, password = decoded.partition(":")
        if not separator:
            return None
        return username, password
