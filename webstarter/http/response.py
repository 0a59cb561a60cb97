"""
Response model returned by handlers and middlewares.

A response is one of two variants:

- structured (``RestResponse``, ``CommonResponse``): described entirely by
  a ``ResponseData`` (body bytes, content type, status, headers, cookies).
  ``RestResponse`` produces its body by encoding an envelope through the
  configured ``ResponseDecoder``.
- raw (``RawResponse``): a callable that writes directly against the
  engine ``ResponseWriter``. Any ``ResponseData`` it carries is for
  introspection only and is never written.

The writer dispatches on the variant type.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable

from webstarter.domain.envelope import (
    RestRespStruct,
    new_rest_bad_parameters,
    new_rest_biz_error,
    new_rest_exception,
    new_rest_status_error,
    new_rest_success,
    new_rest_unauthorized,
)
from webstarter.domain.status import StatusCode
from webstarter.http.decoder import DEFAULT_DECODER, ResponseDecoder
from webstarter.http.encoders import (
    MIME_JSON,
    MIME_PLAIN,
    MIME_TOML,
    MIME_XML,
    MIME_YAML,
    json_bytes,
    toml_bytes,
    xml_bytes,
    yaml_bytes,
)

if TYPE_CHECKING:
    from webstarter.http.writer import ResponseWriter

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_MOVED_PERMANENTLY = 301
REDIRECT_MIN = 300
REDIRECT_MAX = 308


@dataclass(frozen=True)
class ResponseHeader:
    """A response header. An empty ``value`` clears the header."""

    name: str
    value: str = ""


@dataclass(frozen=True)
class ResponseCookie:
    """Attributes of a ``Set-Cookie`` header."""

    name: str
    value: str
    max_age: int | None = None
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    http_only: bool = False


@dataclass
class ResponseData:
    """Everything a structured response writes to the client.

    ``status_code`` 0 means unset and is written as 200. An empty ``body``
    suppresses the body write; cookies, headers and status still apply.
    """

    body: bytes = b""
    content_type: str = ""
    status_code: int = 0
    headers: list[ResponseHeader] = field(default_factory=list)
    cookies: list[ResponseCookie] = field(default_factory=list)

    def set_body(self, body: bytes) -> "ResponseData":
        self.body = body
        return self

    def set_content_type(self, content_type: str) -> "ResponseData":
        self.content_type = content_type
        return self

    def set_status_code(self, status_code: int) -> "ResponseData":
        self.status_code = status_code
        return self

    def add_header(self, header: ResponseHeader) -> "ResponseData":
        self.headers.append(header)
        return self

    def add_headers(self, headers: list[ResponseHeader]) -> "ResponseData":
        self.headers.extend(headers)
        return self

    def add_cookie(self, cookie: ResponseCookie) -> "ResponseData":
        self.cookies.append(cookie)
        return self

    def add_cookies(self, cookies: list[ResponseCookie]) -> "ResponseData":
        self.cookies.extend(cookies)
        return self


@runtime_checkable
class Response(Protocol):
    """Anything a handler or middleware can return.

    ``data()`` returning ``None`` means there is no body to write and the
    status has already been handled.
    """

    def data(self) -> ResponseData | None: ...


class RestResponse:
    """Structured response whose body is an encoded envelope."""

    def __init__(self, payload: Any = None, response_data: ResponseData | None = None) -> None:
        self.payload = payload
        self.response_data = response_data or ResponseData()
        self._encoded_with: ResponseDecoder | None = None
        self._decoder_content_type = False

    def encode(self, decoder: ResponseDecoder) -> ResponseData:
        """Encode the payload with ``decoder``.

        The result is kept per decoder: encoding again with the same
        decoder is a no-op, a different decoder replaces the body. A
        content type the caller set explicitly is never overwritten.

        Raises:
            ResponseDecodeError: If the decoder cannot encode the payload.
        """
        if self._encoded_with is decoder:
            return self.response_data
        self.response_data.body = decoder.decode(self.payload)
        if not self.response_data.content_type or self._decoder_content_type:
            self.response_data.content_type = getattr(decoder, "content_type", MIME_JSON)
            self._decoder_content_type = True
        self._encoded_with = decoder
        return self.response_data

    def data(self) -> ResponseData:
        """The response data, encoded with the default decoder if not yet encoded."""
        if self._encoded_with is None:
            return self.encode(DEFAULT_DECODER)
        return self.response_data

    def with_status_code(self, status_code: int) -> "RestResponse":
        self.response_data.set_status_code(status_code)
        return self

    def with_headers(self, *headers: ResponseHeader) -> "RestResponse":
        self.response_data.add_headers(list(headers))
        return self

    def with_cookies(self, *cookies: ResponseCookie) -> "RestResponse":
        self.response_data.add_cookies(list(cookies))
        return self


class CommonResponse:
    """Structured response built from caller supplied ``ResponseData``."""

    def __init__(self, response_data: ResponseData | None = None) -> None:
        self.response_data = response_data or ResponseData()

    def data(self) -> ResponseData:
        return self.response_data

    def build(self, fn: Callable[[], ResponseData]) -> "CommonResponse":
        self.response_data = fn()
        return self


WriteFn = Callable[["ResponseWriter"], None]


class RawResponse:
    """Response that writes itself directly through the engine writer.

    Attributes:
        write: Callable receiving the request's ``ResponseWriter``.
        abort: When set, the response ends the middleware chain even if the
            middleware that returned it asked to continue.
        response_data: Optional description for introspection; never written.
    """

    def __init__(
        self,
        write: WriteFn,
        *,
        abort: bool = False,
        response_data: ResponseData | None = None,
    ) -> None:
        self.write = write
        self.abort = abort
        self.response_data = response_data

    def data(self) -> ResponseData | None:
        return self.response_data


# --- Structured builders ---


def resp_rest_raw(envelope: RestRespStruct) -> RestResponse:
    return RestResponse(envelope)


def resp_rest_success(data: Any = None) -> RestResponse:
    return RestResponse(new_rest_success(data))


def resp_rest_exception(message: str | None = None) -> RestResponse:
    return RestResponse(new_rest_exception(message))


def resp_rest_bad_parameters(message: str | None = None) -> RestResponse:
    return RestResponse(new_rest_bad_parameters(message))


def resp_rest_unauthorized(message: str | None = None) -> RestResponse:
    return RestResponse(new_rest_unauthorized(message))


def resp_rest_status_error(status: StatusCode, message: str | None = None) -> RestResponse:
    return RestResponse(new_rest_status_error(status, message))


def resp_rest_biz_error(biz_error_code: int, biz_error_message: str) -> RestResponse:
    return RestResponse(new_rest_biz_error(biz_error_code, biz_error_message))


# --- Raw builders ---


def _raw_body(body_fn: Callable[[], bytes], content_type: str, status_code: int) -> RawResponse:
    def write(writer: "ResponseWriter") -> None:
        writer.write_body(body_fn(), content_type, status_code)

    return RawResponse(write)


def resp_json(data: Any, http_status_code: int = HTTP_OK) -> RawResponse:
    return _raw_body(lambda: json_bytes(data), MIME_JSON, http_status_code)


def resp_xml(data: Any, http_status_code: int = HTTP_OK) -> RawResponse:
    return _raw_body(lambda: xml_bytes(data), MIME_XML, http_status_code)


def resp_yaml(data: Any, http_status_code: int = HTTP_OK) -> RawResponse:
    return _raw_body(lambda: yaml_bytes(data), MIME_YAML, http_status_code)


def resp_toml(data: Any, http_status_code: int = HTTP_OK) -> RawResponse:
    return _raw_body(lambda: toml_bytes(data), MIME_TOML, http_status_code)


def resp_text_plain(text: str, http_status_code: int = HTTP_OK) -> RawResponse:
    return _raw_body(lambda: text.encode("utf-8"), MIME_PLAIN, http_status_code)


def resp_redirect(url: str, http_status_code: int = HTTP_MOVED_PERMANENTLY) -> RawResponse:
    if not REDIRECT_MIN <= http_status_code <= REDIRECT_MAX:
        logger.warning("Bad redirect status code %d, redirect may not work", http_status_code)

    def write(writer: "ResponseWriter") -> None:
        writer.redirect(url, http_status_code)

    return RawResponse(write)


def resp_http_status_code(http_status_code: int) -> RawResponse:
    """Write a bare status code with no body."""

    def write(writer: "ResponseWriter") -> None:
        writer.write_status(http_status_code)

    return RawResponse(write)


def resp_abort_with_http_status_code(http_status_code: int) -> RawResponse:
    """Write a bare status code and stop the middleware chain."""
    response = resp_http_status_code(http_status_code)
    response.abort = True
    return response
