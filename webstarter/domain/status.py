"""
Domain status codes and the transport-to-domain status registry.

Domain statuses travel inside the response envelope and are distinct
from the HTTP status on the wire. The registry is built once at import
time and is read-only afterwards.
"""

from enum import IntEnum
from types import MappingProxyType
from typing import Mapping


class StatusCode(IntEnum):
    """Application-level status carried in the envelope ``status`` field."""

    SUCCESS = 200
    BAD_REQUEST_PARAMETERS = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    REQUEST_TIMEOUT = 408
    UPLOAD_LIMIT_EXCEEDED = 413
    MEDIA_TYPE_NOT_ALLOWED = 415
    EXCEPTION = 500

    @property
    def message(self) -> str:
        """Default human-readable message for this status."""
        return STATUS_MESSAGES[self]


STATUS_MESSAGES: Mapping[StatusCode, str] = MappingProxyType(
    {
        StatusCode.SUCCESS: "success",
        StatusCode.BAD_REQUEST_PARAMETERS: "bad request parameters",
        StatusCode.UNAUTHORIZED: "unauthorized",
        StatusCode.FORBIDDEN: "forbidden",
        StatusCode.NOT_FOUND: "not found",
        StatusCode.METHOD_NOT_ALLOWED: "method not allowed",
        StatusCode.REQUEST_TIMEOUT: "request timeout",
        StatusCode.UPLOAD_LIMIT_EXCEEDED: "upload limit exceeded",
        StatusCode.MEDIA_TYPE_NOT_ALLOWED: "media type not allowed",
        StatusCode.EXCEPTION: "system exception",
    }
)

HTTP_STATUS_REGISTRY: Mapping[int, StatusCode] = MappingProxyType(
    {
        400: StatusCode.BAD_REQUEST_PARAMETERS,
        401: StatusCode.FORBIDDEN,
        403: StatusCode.FORBIDDEN,
        404: StatusCode.NOT_FOUND,
        405: StatusCode.METHOD_NOT_ALLOWED,
        413: StatusCode.UPLOAD_LIMIT_EXCEEDED,
        415: StatusCode.MEDIA_TYPE_NOT_ALLOWED,
    }
)


def resolve_http_status(http_status_code: int) -> StatusCode:
    """Map a transport status code to its domain status.

    Args:
        http_status_code: The HTTP status written by the engine or a handler.

    Returns:
        The registered domain status, or ``StatusCode.EXCEPTION`` when the
        code has no mapping.
    """
    return HTTP_STATUS_REGISTRY.get(http_status_code, StatusCode.EXCEPTION)
