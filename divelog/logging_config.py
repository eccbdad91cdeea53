"""
Log format shared by the divelog engine and API.

Every line reads ``2026-01-06T14:05:52Z [source] LEVEL message`` with the
timestamp in UTC. LOG_LEVEL selects INFO (default), DEBUG (cache loads and
data-access calls) or TRACE (PocketBase filters and query parameters).

    configure_logging(source="api")
    logger = get_logger(__name__)
"""

from __future__ import annotations

import logging
import os
import re
import sys
from datetime import UTC, datetime

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

# Chatty libraries that only get to speak up about problems.
QUIET_LOGGERS = ("httpx", "httpcore")

UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _trace(self: logging.Logger, message: object, *args: object, **kw: object) -> None:
    if self.isEnabledFor(TRACE):
        self._log(TRACE, message, args, **kw)  # type: ignore[arg-type]


logging.Logger.trace = _trace  # type: ignore[attr-defined]


class ISO8601Formatter(logging.Formatter):
    """Render records as ``<UTC timestamp> [source] LEVEL message``."""

    def __init__(self, source: str = "app"):
        super().__init__()
        self.source = source

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
        line = f"{stamp} [{self.source}] {record.levelname} {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class HealthCheckFilter(logging.Filter):
    """Drop access-log lines for health probes unless they were logged at DEBUG."""

    PROBE_RX = re.compile(r'"(?:GET|HEAD) /(?:api/)?health[ ?"]')

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno == logging.DEBUG:
            return True
        return self.PROBE_RX.search(record.getMessage()) is None


def resolve_level(debug: bool | None = None) -> int:
    """Level named by LOG_LEVEL; ``debug`` raises INFO to DEBUG."""
    name = os.getenv("LOG_LEVEL", "").strip().upper()
    if name == "TRACE":
        return TRACE
    if name == "DEBUG" or debug:
        return logging.DEBUG
    return logging.INFO


def build_handler(source: str, level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(ISO8601Formatter(source=source))
    handler.addFilter(HealthCheckFilter())
    return handler


def configure_logging(
    source: str = "app",
    level: int | None = None,
    debug: bool | None = None,
) -> logging.Logger:
    """Install the divelog handler on the root and uvicorn loggers.

    Safe to call more than once: previous handlers are replaced, not stacked.

    Args:
        source: Tag shown in brackets, e.g. "api".
        level: Explicit level; resolved from LOG_LEVEL when omitted.
        debug: Force at least DEBUG when resolving from the environment.

    Returns:
        The root logger.
    """
    if level is None:
        level = resolve_level(debug)
    handler = build_handler(source, level)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    # uvicorn installs its own handlers, which would bypass the probe filter
    for name in UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.addHandler(handler)
        uvicorn_logger.setLevel(level)
        uvicorn_logger.propagate = False

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
