"""Logging configuration utilities for the file server."""

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from tinyfs.domain.correlation_id import CorrelationLoggerAdapter

LOGGER_NAME = "tinyfs"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s :: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_BYTES = 10 * 1024 * 1024
BACKUP_COUNT = 5

EXTRA_KEYS = (
    "client",
    "method",
    "route",
    "path",
    "status_code",
    "content_type",
    "bytes_out",
    "duration_ms",
    "size",
    "bytes_read",
    "limit",
    "entries",
    "error",
    "error_type",
    "host",
    "port",
    "directory",
    "poll_ms",
    "max_file_size_bytes",
    "accept_threads",
    "active_workers",
    "state",
    "signal",
    "destination",
    "log_level",
    "use_json",
)


class CorrelationIdFilter(logging.Filter):  # pylint: disable=too-few-public-methods
    """Ensure correlation_id field exists in log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = "-"
        return True


class JsonFormatter(logging.Formatter):
    """JSON formatter with stable key ordering for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "correlation_id": getattr(record, "correlation_id", "-"),
            "component": getattr(record, "component", "unknown"),
            "message": record.getMessage(),
        }

        if hasattr(record, "event"):
            log_data["event"] = record.event

        for key in EXTRA_KEYS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, sort_keys=True, default=str)


def _resolve_level(level_name: str) -> int:
    """Translate text level names into logging module numeric levels."""
    level = getattr(logging, level_name.upper(), None)
    if isinstance(level, int):
        return level
    return logging.INFO


def _build_handler(
    destination: Optional[str], level: int, use_json: bool = True
) -> logging.Handler:
    """Create a stdout or rotating file handler for the configured logger."""
    if destination and destination.lower() != "stdout":
        target_path = Path(destination)
        target_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = RotatingFileHandler(
            target_path, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT
        )
    else:
        handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    if use_json:
        handler.setFormatter(JsonFormatter(datefmt=DATE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))

    handler.addFilter(CorrelationIdFilter())
    return handler


def configure_logging(
    level: str = "INFO", destination: Optional[str] = None, use_json: bool = True
) -> CorrelationLoggerAdapter:
    """Install the single project handler and return an adapter over it."""
    logger = logging.getLogger(LOGGER_NAME)
    numeric_level = _resolve_level(level)
    logger.setLevel(numeric_level)
    logger.propagate = False

    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    logger.addHandler(_build_handler(destination, numeric_level, use_json))

    adapter = CorrelationLoggerAdapter(logger, {})
    adapter.info(
        "Logging configured",
        extra={
            "event": "logging_configured",
            "destination": destination or "stdout",
            "log_level": logging.getLevelName(numeric_level),
            "use_json": use_json,
        },
    )
    return adapter
