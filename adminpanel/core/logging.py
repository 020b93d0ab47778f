"""Admin Panel Logging Configuration.

Two output shapes: a readable line format for development and one JSON
object per line for log shippers. Both pass through ``RedactTokensFilter``
so bearer tokens never reach a log sink.
"""

import json
import logging
import re
import sys
from typing import Literal

DEV_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# JWTs are three base64url segments; "Bearer <anything>" covers opaque tokens too
_TOKEN_PATTERNS = (
    re.compile(r"(?i)bearer\s+[A-Za-z0-9._~+/=-]+"),
    re.compile(r"eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+"),
)
REDACTED = "[REDACTED]"

# Context keys copied from ``extra=`` into structured output
CONTEXT_FIELDS = ("account_id", "path", "method", "error_code")


def redact(message: str) -> str:
    for pattern in _TOKEN_PATTERNS:
        message = pattern.sub(REDACTED, message)
    return message


class RedactTokensFilter(logging.Filter):
    """Rewrites records in place, replacing anything that looks like a token."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message)
        if cleaned != message:
            record.msg = cleaned
            record.args = None
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record, escaped by json.dumps."""

    def __init__(self):
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _build_handler(format_type: str) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if format_type == "structured":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(DEV_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler.addFilter(RedactTokensFilter())
    return handler


def setup_logging(
    level: str = "INFO",
    format_type: Literal["structured", "dev"] = "dev",
) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: 'structured' for JSON lines, 'dev' for readable lines
    """
    numeric_level = getattr(logging, level.upper())
    logging.root.handlers = [_build_handler(format_type)]
    logging.root.setLevel(numeric_level)

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    # SQL echo and Redis command traces only when debugging
    library_level = logging.DEBUG if numeric_level == logging.DEBUG else logging.WARNING
    for logger_name in ("sqlalchemy.engine", "redis"):
        logging.getLogger(logger_name).setLevel(library_level)

    get_logger("logging").info(f"Logging configured: level={level}, format={format_type}")


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the adminpanel prefix."""
    return logging.getLogger(f"adminpanel.{name}")
