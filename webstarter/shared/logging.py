"""
Logging setup.

Package modules log through ``logging.getLogger(__name__)`` under the
``webstarter`` logger. Request bodies and credentials are never logged.
"""

import logging
import sys

PACKAGE_LOGGER = "webstarter"
LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)-7s [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Server loggers repeating what the bad-status and recovery layers report.
SERVER_LOGGERS = ("uvicorn.access", "uvicorn.error")


def configure_logging(level: str = "INFO") -> None:
    """Send log records to stdout at ``level``.

    Server loggers stay at WARNING unless ``level`` is DEBUG.

    Args:
        level: The log level string (DEBUG, INFO, WARNING, ERROR).
    """
    resolved = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=resolved,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )
    logging.getLogger(PACKAGE_LOGGER).setLevel(resolved)

    server_level = resolved if resolved <= logging.DEBUG else max(resolved, logging.WARNING)
    for name in SERVER_LOGGERS:
        logging.getLogger(name).setLevel(server_level)
