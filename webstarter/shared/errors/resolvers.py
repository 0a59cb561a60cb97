"""
Default resolvers for faults and bad transport statuses.

Both are plain functions so applications can swap them through
``StarterConfig`` without subclassing anything.
"""

import logging
from typing import Awaitable, Callable, Union

from webstarter.domain.status import resolve_http_status
from webstarter.http.request import Request
from webstarter.http.response import Response, resp_rest_exception, resp_rest_status_error

logger = logging.getLogger(__name__)

PanicResolver = Callable[
    [Request, BaseException],
    Union[Response, None, Awaitable[Union[Response, None]]],
]
BadHttpCodeResolver = Callable[[Request, int], Union[Response, Awaitable[Response]]]


def default_panic_resolver(request: Request, exc: BaseException) -> Response:
    """Log the failure and answer with the generic exception envelope."""
    logger.error(
        "Request %s %s raised an unhandled exception",
        request.method,
        request.path,
        exc_info=(type(exc), exc, exc.__traceback__),
    )
    return resp_rest_exception()


def default_bad_http_code_resolver(request: Request, http_status_code: int) -> Response:
    """Answer a non-200 transport status with its mapped domain status."""
    logger.warning(
        "Request %s %s ended with bad http status code %d",
        request.method,
        request.path,
        http_status_code,
    )
    return resp_rest_status_error(resolve_http_status(http_status_code))
