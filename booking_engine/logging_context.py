"""Checkout correlation ID logging context.

Provides a checkout_id-aware logger that attaches a correlation ID to
every log message, so one cart checkout can be followed through
validation, pricing, persistence, and notification.

Usage:
    from booking_engine.logging_context import get_checkout_logger, set_checkout_id

    set_checkout_id("CHK-1a2b3c")
    logger = get_checkout_logger(__name__)
    logger.info("Validating cart")  # -> [CHK-1a2b3c] Validating cart

The id is shown by handlers using CheckoutIdFormatter, which
``load_config`` installs on the root logger. Records from loggers
without the filter render as "-".
"""

import logging
import uuid
from contextvars import ContextVar

_checkout_id: ContextVar[str] = ContextVar("checkout_id", default="NO_CHECKOUT_ID")

LOG_FORMAT = "%(asctime)s [%(name)s] [%(checkout_id)s] %(levelname)s: %(message)s"


def new_checkout_id() -> str:
    """Generate a short correlation ID for a checkout attempt."""
    return f"CHK-{uuid.uuid4().hex[:8]}"


def set_checkout_id(checkout_id: str) -> None:
    """Set the correlation ID for the current context."""
    _checkout_id.set(checkout_id)


def get_checkout_id() -> str:
    """Retrieve the current correlation ID."""
    return _checkout_id.get()


class CheckoutIdFilter(logging.Filter):
    """Injects checkout_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.checkout_id = _checkout_id.get()  # type: ignore[attr-defined]
        return True


def get_checkout_logger(name: str) -> logging.Logger:
    """Return a logger with the CheckoutIdFilter attached.

    The filter adds ``checkout_id`` to each record so formatters can
    include ``%(checkout_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, CheckoutIdFilter) for f in logger.filters):
        logger.addFilter(CheckoutIdFilter())
    return logger


class CheckoutIdFormatter(logging.Formatter):
    """Formatter that can use ``%(checkout_id)s`` for any record."""

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "checkout_id"):
            record.checkout_id = "-"  # type: ignore[attr-defined]
        return super().format(record)
