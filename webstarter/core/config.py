"""
Application configuration.

``Settings`` holds the plain values, loaded from environment variables
(prefix ``WEBSTARTER_``) and an optional ``.env`` file.
``StarterConfig`` bundles the settings with the pluggable callables
(routers, middlewares, decoder, resolvers). It is built once at startup,
is immutable, and is passed explicitly to every component that needs it.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Sequence

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from webstarter.http.decoder import DEFAULT_DECODER, ResponseDecoder
from webstarter.shared.errors.resolvers import (
    BadHttpCodeResolver,
    PanicResolver,
    default_bad_http_code_resolver,
    default_panic_resolver,
)

if TYPE_CHECKING:
    from fastapi import FastAPI

# Statuses that are legitimate outcomes rather than failures.
DEFAULT_IGNORE_HTTP_CODES: frozenset[int] = frozenset(
    {201, 202, 204, 206, 301, 302, 303, 304, 307, 308}
)


class Settings(BaseSettings):
    """Plain configuration values.

    Attributes:
        project_name: Title of the FastAPI application.
        version: Application version string.
        debug: Enable engine debug mode. Must be False in production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        host: Listen host.
        port: Listen port.
        max_request_size_bytes: Largest accepted request body; 0 disables
            the check.
        ignore_http_codes: Extra transport statuses the bad-status
            resolver leaves untouched.
        disable_bad_http_code_resolver: Turn off the whole bad-status
            pipeline.
        disable_default_ignore_http_code: Do not merge the built-in
            ignore set into ``ignore_http_codes``.
        hide_panic_error_details: Do not pass non-framework exceptions to
            the panic resolver; answer with the generic envelope instead.
        disable_method_not_allowed_error: Report method mismatches as
            not found.
        disable_forwarded_by_client_ip: Ignore ``X-Forwarded-For`` when
            resolving the client address.
        enable_trace_id_response: Give each request a trace id and send it
            back in the ``X-Trace-Id`` response header.
    """

    model_config = SettingsConfigDict(
        env_prefix="WEBSTARTER_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    project_name: str = "webstarter"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=0, le=65535)
    max_request_size_bytes: int = Field(default=1_048_576, ge=0)  # 1 MB

    ignore_http_codes: list[int] = Field(default_factory=list)
    disable_bad_http_code_resolver: bool = False
    disable_default_ignore_http_code: bool = False
    hide_panic_error_details: bool = False
    disable_method_not_allowed_error: bool = False
    disable_forwarded_by_client_ip: bool = False
    enable_trace_id_response: bool = False

    @property
    def listen_address(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class StarterConfig:
    """Everything needed to assemble the application.

    Attributes:
        settings: Plain configuration values.
        routers: Route groups to register, in order.
        global_middlewares: Middlewares run for every request, in order.
        decoder: Encoder for structured response payloads.
        panic_resolver: Builds the response for uncaught exceptions.
        bad_http_code_resolver: Builds the response for non-200 statuses.
        init_func: Called with the FastAPI app before routes are added.
    """

    settings: Settings = field(default_factory=Settings)
    routers: Sequence[Any] = ()
    global_middlewares: Sequence[Callable[..., Any]] = ()
    decoder: ResponseDecoder = DEFAULT_DECODER
    panic_resolver: PanicResolver = default_panic_resolver
    bad_http_code_resolver: BadHttpCodeResolver = default_bad_http_code_resolver
    init_func: Callable[["FastAPI"], None] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "routers", tuple(self.routers))
        object.__setattr__(
            self, "global_middlewares", tuple(m for m in self.global_middlewares if m is not None)
        )

    def effective_ignore_codes(self) -> frozenset[int]:
        """Statuses the bad-status resolver passes through unchanged."""
        codes = set(self.settings.ignore_http_codes)
        if not self.settings.disable_default_ignore_http_code:
            codes |= DEFAULT_IGNORE_HTTP_CODES
        return frozenset(codes)
