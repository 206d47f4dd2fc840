"""Process-wide logging setup."""

from __future__ import annotations

import logging
import sys

from asgi_correlation_id import CorrelationIdFilter

from petmanager.core.config import get_settings
from petmanager.security.logging_filters import SensitiveFilter

_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(correlation_id)s | %(name)s | %(message)s"
_FILTERED_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "")


def configure_logging(level: str | None = None) -> None:
    """Install a single stdout handler and attach the redaction filter."""
    settings = get_settings()
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter(uuid_length=32, default_value="-"))
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    for logger_name in _FILTERED_LOGGERS:
        target = logging.getLogger(logger_name)
        if not any(isinstance(flt, SensitiveFilter) for flt in target.filters):
            target.addFilter(SensitiveFilter())

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)
