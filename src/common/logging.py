from __future__ import annotations

import logging
import os
import time

from src.common.observability import get_correlation_id

LOG_FORMAT = "%(asctime)sZ %(levelname)s %(name)s corr=%(correlation_id)s %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"


class CorrelationIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id()
        return True


def _utc_formatter() -> logging.Formatter:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)
    formatter.converter = time.gmtime
    return formatter


def configure_logging(level: str | None = None) -> None:
    level_name = (level or os.environ.get("LOG_LEVEL") or "INFO").strip().upper()
    resolved = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(_utc_formatter())
    handler.addFilter(CorrelationIdFilter())

    logging.basicConfig(level=resolved, handlers=[handler])

    root_logger = logging.getLogger()
    for existing_handler in root_logger.handlers:
        if not any(
            isinstance(existing_filter, CorrelationIdFilter)
            for existing_filter in existing_handler.filters
        ):
            existing_handler.addFilter(CorrelationIdFilter())


__all__ = ["configure_logging", "CorrelationIdFilter", "LOG_FORMAT", "LOG_DATEFMT"]
