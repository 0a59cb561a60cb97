"""
webstarter: uniform responses and fault containment for FastAPI services.

Every handler answers through one ``Response`` model, and every failure
(handler exception, engine status such as an unmatched route, oversized
body) reaches the client as the same structured envelope.

Layers:
    - domain: Status codes, the status registry, the envelope, errors.
    - http: Request context, response model, writer, encoders.
    - shared: Middlewares (chain, recovery, bad status), security,
      error handlers, logging.
    - interfaces: Route groups.
    - core: Configuration.
"""

from webstarter.core.config import Settings, StarterConfig
from webstarter.domain.envelope import RestRespStruct
from webstarter.domain.errors import (
    ConfigurationError,
    ResponseDecodeError,
    ServerStartError,
    StarterError,
)
from webstarter.domain.status import StatusCode, resolve_http_status
from webstarter.http.decoder import JsonResponseDecoder, ResponseDecoder
from webstarter.http.request import Request
from webstarter.http.response import (
    CommonResponse,
    RawResponse,
    Response,
    ResponseCookie,
    ResponseData,
    ResponseHeader,
    RestResponse,
    resp_abort_with_http_status_code,
    resp_http_status_code,
    resp_json,
    resp_redirect,
    resp_rest_bad_parameters,
    resp_rest_biz_error,
    resp_rest_exception,
    resp_rest_raw,
    resp_rest_status_error,
    resp_rest_success,
    resp_rest_unauthorized,
    resp_text_plain,
    resp_toml,
    resp_xml,
    resp_yaml,
)
from webstarter.http.writer import ResponseWriter
from webstarter.interfaces.routing import Router, RouterInfo, RouterWrapper
from webstarter.main import create_app
from webstarter.server import Starter
from webstarter.shared.middleware.chain import HandlerWrapper, Middleware
from webstarter.shared.middleware.trace import get_trace_id
from webstarter.shared.security.basic_auth import BasicAuthAccount, basic_auth_middleware

__all__ = [
    "BasicAuthAccount",
    "CommonResponse",
    "ConfigurationError",
    "HandlerWrapper",
    "JsonResponseDecoder",
    "Middleware",
    "RawResponse",
    "Request",
    "Response",
    "ResponseCookie",
    "ResponseData",
    "ResponseDecodeError",
    "ResponseDecoder",
    "ResponseHeader",
    "ResponseWriter",
    "RestRespStruct",
    "RestResponse",
    "Router",
    "RouterInfo",
    "RouterWrapper",
    "ServerStartError",
    "Settings",
    "Starter",
    "StarterConfig",
    "StarterError",
    "StatusCode",
    "basic_auth_middleware",
    "create_app",
    "get_trace_id",
    "resolve_http_status",
    "resp_abort_with_http_status_code",
    "resp_http_status_code",
    "resp_json",
    "resp_redirect",
    "resp_rest_bad_parameters",
    "resp_rest_biz_error",
    "resp_rest_exception",
    "resp_rest_raw",
    "resp_rest_status_error",
    "resp_rest_success",
    "resp_rest_unauthorized",
    "resp_text_plain",
    "resp_toml",
    "resp_xml",
    "resp_yaml",
]
