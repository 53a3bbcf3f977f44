# slotwise/utils/my_logging.py
"""
Logging configuration.

Every line carries the correlation ID of the HTTP request it was written
under, so the log lines of one booking attempt can be pulled together.
Lines written outside a request show ``-``.
"""
import logging
import sys
from contextvars import ContextVar
from typing import Optional, TextIO

from slotwise.config.settings import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] %(message)s"

# Set by the correlation ID middleware for the duration of a request
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="-")

# Third-party loggers muted in quiet mode
NOISY_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "alembic",
    "httpx",
    "uvicorn.access",
)


class CorrelationIdFilter(logging.Filter):
    """Stamp records with the current request's correlation ID unless one was passed in ``extra``"""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "correlation_id", None):
            record.correlation_id = correlation_id_var.get()
        return True


def setup_logging(verbose: bool = True, stream: Optional[TextIO] = None):
    """
    Configure application logging.

    ``verbose`` logs at ``LOG_LEVEL``; otherwise only warnings from the
    service and errors from the database and server libraries get through.
    Calling it again replaces the previous configuration.
    """
    settings = get_settings()

    if verbose:
        level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    else:
        level = logging.WARNING

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.addFilter(CorrelationIdFilter())

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[handler],
        force=True,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET if verbose else logging.ERROR)

