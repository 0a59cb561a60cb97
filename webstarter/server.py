"""
Server lifecycle.

``Starter`` builds the application from its configuration, serves it
with uvicorn on a background thread and stops it with a bounded wait.
"""

import functools
import logging
import socket
import threading
import time
from typing import Callable

import uvicorn
from fastapi import FastAPI

from webstarter.core.config import StarterConfig
from webstarter.domain.errors import ServerStartError
from webstarter.main import create_app

logger = logging.getLogger(__name__)

STARTUP_TIMEOUT_SECONDS = 5.0
FORCE_EXIT_GRACE_SECONDS = 1.0
POLL_INTERVAL_SECONDS = 0.05
PROBE_TIMEOUT_SECONDS = 1.0


def _port_open(host: str, port: int) -> bool:
    probe_host = "127.0.0.1" if host in ("", "0.0.0.0") else host
    try:
        with socket.create_connection((probe_host, port), timeout=PROBE_TIMEOUT_SECONDS):
            return True
    except OSError:
        return False


class Starter:
    """Runs the application and stops it gracefully.

    Attributes:
        config: Configuration used when ``lazy_config`` is not given.
        lazy_config: Called once, on first use, to produce the
            configuration; takes precedence over ``config``.
    """

    def __init__(
        self,
        config: StarterConfig | None = None,
        lazy_config: Callable[[], StarterConfig] | None = None,
    ) -> None:
        self._config = config
        self._lazy_config = lazy_config
        self._server: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None
        self._port: int | None = None

    @functools.cached_property
    def config(self) -> StarterConfig:
        if self._lazy_config is not None:
            return self._lazy_config()
        return self._config or StarterConfig()

    @functools.cached_property
    def app(self) -> FastAPI:
        return create_app(self.config)

    def start(self, timeout: float = STARTUP_TIMEOUT_SECONDS) -> FastAPI:
        """Start serving on a background thread.

        Raises:
            ServerStartError: If the listener is not up within ``timeout``.
        """
        settings = self.config.settings
        uvicorn_config = uvicorn.Config(
            self.app,
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level.lower(),
            log_config=None,
        )
        self._server = uvicorn.Server(uvicorn_config)
        self._thread = threading.Thread(
            target=self._server.run, name="webstarter-server", daemon=True
        )
        self._thread.start()

        deadline = time.monotonic() + timeout
        while not self._server.started:
            if not self._thread.is_alive():
                raise ServerStartError(settings.listen_address, "server exited during startup")
            if time.monotonic() >= deadline:
                raise ServerStartError(settings.listen_address, f"not listening after {timeout}s")
            time.sleep(POLL_INTERVAL_SECONDS)

        self._port = self._server.servers[0].sockets[0].getsockname()[1]
        logger.info("Server listening at %s:%d", settings.host, self._port)
        return self.app

    @property
    def port(self) -> int | None:
        """Port actually bound by the running server."""
        return self._port

    def stop(self, max_wait: float) -> tuple[bool, bool]:
        """Stop accepting connections and wait for in-flight requests.

        Args:
            max_wait: Seconds to wait for in-flight requests to finish.

        Returns:
            ``(gracefully, stopped)``: whether shutdown finished within
            ``max_wait``, and whether the listener is closed.
        """
        if self._server is None or self._thread is None:
            return True, True

        self._server.should_exit = True
        self._thread.join(max_wait)
        gracefully = not self._thread.is_alive()
        if not gracefully:
            logger.warning("Server did not stop within %.1fs, forcing exit", max_wait)
            self._server.force_exit = True
            self._thread.join(FORCE_EXIT_GRACE_SECONDS)

        stopped = self._port is None or not _port_open(self.config.settings.host, self._port)
        self._server = None
        self._thread = None
        self._port = None
        return gracefully, stopped
