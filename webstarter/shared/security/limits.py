"""
Request body size limit.

Rejects requests whose declared ``Content-Length`` exceeds the configured
maximum with a bare 413, which the bad-status middleware reports as
``UPLOAD_LIMIT_EXCEEDED``. Bodies without a declared length are not
checked.
"""

import logging

from webstarter.http.request import Request
from webstarter.http.response import resp_abort_with_http_status_code
from webstarter.shared.middleware.chain import Middleware, MiddlewareResult

logger = logging.getLogger(__name__)

HTTP_400 = 400
HTTP_413 = 413


def body_limit_middleware(max_request_size_bytes: int) -> Middleware:
    """Build a middleware rejecting bodies larger than ``max_request_size_bytes``."""

    def middleware(request: Request) -> MiddlewareResult:
        declared = request.header("content-length")
        if declared is None:
            return None, True
        try:
            length = int(declared)
        except ValueError:
            logger.warning("Invalid content-length %r on %s %s", declared, request.method, request.path)
            return resp_abort_with_http_status_code(HTTP_400), False
        if length > max_request_size_bytes:
            logger.warning(
                "Request body of %d bytes exceeds limit of %d on %s %s",
                length,
                max_request_size_bytes,
                request.method,
                request.path,
            )
            return resp_abort_with_http_status_code(HTTP_413), False
        return None, True

    return middleware
