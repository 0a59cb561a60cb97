"""
Engine error handlers for FastAPI.

Replaces FastAPI's default JSON error bodies with status-only responses.
Routing failures (unmatched path, wrong method) and validation failures
then reach the client as plain transport statuses, which the bad-status
middleware turns into the response envelope. No details are exposed.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

logger = logging.getLogger(__name__)

HTTP_400 = 400


def register_error_handlers(app: FastAPI) -> None:
    """Register the engine error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request, exc: StarletteHTTPException
    ) -> Response:
        """Answer engine HTTP errors with their bare status."""
        logger.debug(
            "Engine answered %s %s with status %d",
            request.method,
            request.url.path,
            exc.status_code,
        )
        return Response(status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> Response:
        """Answer request validation failures with a bare 400."""
        logger.warning(
            "Request validation failed for %s %s: %d error(s)",
            request.method,
            request.url.path,
            len(exc.errors()),
        )
        return Response(status_code=HTTP_400)
