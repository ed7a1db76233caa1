"""
Application-wide logging setup.

Records carry the id of the request being served (see RequestIdMiddleware)
and whatever was passed through ``extra=`` (``op``, ``alias``, ...).

JSON format:
{"timestamp": "...", "level": "INFO", "logger": "...", "message": "...", "request_id": "...", "op": "..."}
"""

import json
import logging
import sys
from contextvars import ContextVar
from typing import Any, Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Attributes every LogRecord has; anything else came in through `extra`
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class RequestIdFilter(logging.Filter):
    """Attach the current request id to every record"""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = request_id_var.get() or "-"
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS:
                log_obj[key] = value

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, default=str)


def configure_logging(level: str = "INFO", json_format: bool = False) -> logging.Logger:
    """
    Configure the application logger with a single stdout handler.

    Module loggers (``shortlink_app.*``) propagate to it. Calling this again
    replaces the handler instead of adding a second one.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Emit one JSON object per line instead of text

    Returns:
        The application logger
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIdFilter())
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))

    logger = logging.getLogger("shortlink_app")
    logger.handlers = [handler]
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Requests are logged by RequestIdMiddleware
    logging.getLogger("uvicorn.access").disabled = True
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return logger
