"""
Pluggable encoder for structured response payloads.

Structured responses hand their envelope to a ``ResponseDecoder`` which
turns it into body bytes. The default is JSON; applications can install
their own through ``StarterConfig.decoder``.
"""

from typing import Any, Protocol, runtime_checkable

from webstarter.domain.errors import ResponseDecodeError
from webstarter.http.encoders import MIME_JSON, json_bytes


@runtime_checkable
class ResponseDecoder(Protocol):
    """Encodes a structured payload into response body bytes."""

    content_type: str

    def decode(self, value: Any) -> bytes:
        """Encode ``value``; raise ``ResponseDecodeError`` on failure."""
        ...


class JsonResponseDecoder:
    """Default decoder producing compact UTF-8 JSON."""

    content_type = MIME_JSON

    def decode(self, value: Any) -> bytes:
        try:
            return json_bytes(value)
        except (TypeError, ValueError) as exc:
            raise ResponseDecodeError(type(value).__name__, str(exc)) from exc


DEFAULT_DECODER = JsonResponseDecoder()
