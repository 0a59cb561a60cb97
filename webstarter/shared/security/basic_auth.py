"""
HTTP Basic authentication middleware.

Protects a route group (or the whole application) with a single
username/password pair. Rejected requests receive a bare 401 with a
``WWW-Authenticate`` challenge; the bad-status middleware maps the 401
to the forbidden envelope and keeps the challenge header.
"""

import logging
import secrets
from dataclasses import dataclass

from webstarter.http.request import Request
from webstarter.http.response import RawResponse
from webstarter.http.writer import ResponseWriter
from webstarter.shared.middleware.chain import Middleware, MiddlewareResult

logger = logging.getLogger(__name__)

HTTP_401 = 401
DEFAULT_REALM = "Authorization Required"


@dataclass(frozen=True)
class BasicAuthAccount:
    """Credentials accepted by ``basic_auth_middleware``."""

    username: str
    password: str

    def matches(self, username: str, password: str) -> bool:
        user_ok = secrets.compare_digest(username.encode(), self.username.encode())
        password_ok = secrets.compare_digest(password.encode(), self.password.encode())
        return user_ok and password_ok


def _challenge(realm: str) -> RawResponse:
    def write(writer: ResponseWriter) -> None:
        writer.set_header("WWW-Authenticate", f'Basic realm="{realm}"')
        writer.write_status(HTTP_401)

    return RawResponse(write)


def basic_auth_middleware(account: BasicAuthAccount, realm: str = DEFAULT_REALM) -> Middleware:
    """Build a middleware accepting only ``account``'s credentials.

    Args:
        account: The username/password pair to accept.
        realm: Realm announced in the ``WWW-Authenticate`` challenge.

    Returns:
        A middleware that continues on valid credentials and stops the
        chain with a 401 otherwise.
    """

    def middleware(request: Request) -> MiddlewareResult:
        credentials = request.basic_auth()
        if credentials is not None and account.matches(*credentials):
            return None, True
        logger.info("Basic auth rejected for %s %s", request.method, request.path)
        return _challenge(realm), False

    return middleware
