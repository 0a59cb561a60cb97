"""
Engine writer capability and response writing.

``ResponseWriter`` collects status, headers, cookies and body for one
request and turns them into a Starlette response. ``write_response``
applies a handler's ``Response`` to a writer:

- raw responses run their callback and nothing else;
- structured responses write cookies, then headers, then the body with
  its content type and status (``application/json`` / ``200`` if unset).
"""

import logging

from starlette.responses import Response as StarletteResponse

from webstarter.http.decoder import DEFAULT_DECODER, ResponseDecoder
from webstarter.http.encoders import MIME_JSON
from webstarter.http.response import (
    HTTP_OK,
    RawResponse,
    Response,
    ResponseCookie,
    RestResponse,
)

logger = logging.getLogger(__name__)


class ResponseWriter:
    """Per-request writer over the engine's response object."""

    def __init__(self) -> None:
        self._status_code = HTTP_OK
        self._body = b""
        self._content_type: str | None = None
        self._headers: list[tuple[str, str]] = []
        self._cookies: list[ResponseCookie] = []
        self._committed = False

    @property
    def status_code(self) -> int:
        return self._status_code

    def write_status(self, status_code: int) -> None:
        """Set the status; ignored once a body has been written."""
        if self._committed:
            logger.debug("Status %d ignored, response already written", status_code)
            return
        self._status_code = status_code

    def write_body(self, body: bytes, content_type: str, status_code: int | None = None) -> None:
        if status_code is not None:
            self._status_code = status_code
        self._body = body
        self._content_type = content_type
        self._committed = True

    def set_header(self, name: str, value: str) -> None:
        """Set a header; an empty value removes it."""
        self._headers.append((name, value))

    def set_cookie(self, cookie: ResponseCookie) -> None:
        self._cookies.append(cookie)

    def redirect(self, url: str, status_code: int) -> None:
        self._status_code = status_code
        self._headers.append(("location", url))
        self._committed = True

    def is_committed(self) -> bool:
        return self._committed

    def to_response(self) -> StarletteResponse:
        response = StarletteResponse(content=self._body, status_code=self._status_code)
        for cookie in self._cookies:
            response.set_cookie(
                key=cookie.name,
                value=cookie.value,
                max_age=cookie.max_age,
                path=cookie.path,
                domain=cookie.domain,
                secure=cookie.secure,
                httponly=cookie.http_only,
            )
        for name, value in self._headers:
            if value:
                response.headers[name] = value
            elif name in response.headers:
                del response.headers[name]
        if self._body and self._content_type:
            response.headers["content-type"] = self._content_type
        return response


def write_response(
    writer: ResponseWriter,
    response: Response | None,
    decoder: ResponseDecoder = DEFAULT_DECODER,
) -> None:
    """Apply ``response`` to ``writer``.

    A ``None`` response writes a bare ``200``.

    Raises:
        ResponseDecodeError: If a structured payload cannot be encoded.
    """
    if response is None:
        writer.write_status(HTTP_OK)
        return

    if isinstance(response, RawResponse):
        response.write(writer)
        return

    if isinstance(response, RestResponse):
        response_data = response.encode(decoder)
    else:
        response_data = response.data()
    if response_data is None:
        return

    content_type = response_data.content_type
    if not content_type:
        content_type = MIME_JSON
        logger.debug("Content type is not set, using default %s", MIME_JSON)

    status_code = response_data.status_code or HTTP_OK

    for cookie in response_data.cookies:
        writer.set_cookie(cookie)
    for header in response_data.headers:
        writer.set_header(header.name, header.value)

    if response_data.body:
        writer.write_body(response_data.body, content_type, status_code)
    else:
        writer.write_status(status_code)


def render_response(
    response: Response | None,
    decoder: ResponseDecoder = DEFAULT_DECODER,
) -> StarletteResponse:
    """Write ``response`` through a fresh writer and return the engine response."""
    writer = ResponseWriter()
    write_response(writer, response, decoder)
    return writer.to_response()
