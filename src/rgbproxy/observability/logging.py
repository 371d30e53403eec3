"""Structured JSON logging with request id support."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from .correlation import get_request_id

_ROOT_LOGGER = "rgbproxy"


class JsonFormatter(logging.Formatter):
    """JSON formatter that includes the request id."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            log_obj["requestId"] = request_id

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        # Include extra fields if present
        if hasattr(record, "extra_fields"):
            log_obj.update(record.extra_fields)

        return json.dumps(log_obj, default=str)


def _ensure_handler(logger: logging.Logger) -> None:
    # Only configure if no handlers (avoid duplicate handlers)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach the JSON handler to the package root logger and set its level.

    Module loggers obtained through get_logger() propagate here, so one
    handler serves the whole package.
    """
    logger = logging.getLogger(_ROOT_LOGGER)
    _ensure_handler(logger)
    logger.setLevel(level)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a package logger configured for JSON output."""
    _ensure_handler(logging.getLogger(_ROOT_LOGGER))
    return logging.getLogger(name)
