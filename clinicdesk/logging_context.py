"""Request ID logging context for tracing backend fetches.

Provides a request_id-aware logger that attaches a correlation ID to every
log message, so a navigation-triggered fetch can be followed from the
host screen through the API client and back, including fetches that are
later discarded as stale.

Usage:
    from clinicdesk.logging_context import get_request_logger, set_request_id

    set_request_id("dates-3")
    logger = get_request_logger(__name__)
    logger.info("Fetching available dates")  # ... [dates-3] INFO: Fetching available dates
"""

import logging
from contextvars import ContextVar
from typing import Optional

_request_id: ContextVar[str] = ContextVar("request_id", default="NO_REQUEST_ID")

LOG_FORMAT = "%(asctime)s [%(name)s] [%(request_id)s] %(levelname)s: %(message)s"


def set_request_id(request_id: str) -> None:
    """Set the correlation ID for the current async context."""
    _request_id.set(request_id)


def get_request_id() -> str:
    """Retrieve the current correlation ID."""
    return _request_id.get()


class RequestIdFilter(logging.Filter):
    """Injects request_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


def get_request_logger(name: str) -> logging.Logger:
    """Return a logger with the RequestIdFilter attached.

    The filter adds ``request_id`` to each record so formatters can
    include ``%(request_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, RequestIdFilter) for f in logger.filters):
        logger.addFilter(RequestIdFilter())
    return logger


def install_request_id_filter(logger: Optional[logging.Logger] = None) -> None:
    """Attach a RequestIdFilter to every handler of ``logger`` (root by default).

    Handler-level filters see records propagated from any module, so
    ``%(request_id)s`` in LOG_FORMAT resolves for every log line.
    """
    target = logger or logging.getLogger()
    for handler in target.handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())
