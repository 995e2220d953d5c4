"""
Structured Logging: JSON-Formatted with Request-Scoped Fields

Provides:
- JSON-formatted log output
- Context propagation (collection, operation) via log_context()
- Log level filtering

Every module logs through logging.getLogger(__name__); this module only
installs the formatter and carries the contextual fields.
"""

from __future__ import annotations

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Iterator, Optional, TextIO, Union


class LogLevel(IntEnum):
    """Log level enumeration."""
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50


# Context variable for request-scoped fields
_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})

# Attributes every logging.LogRecord carries; anything else came from extra=
_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename",
    "funcName", "levelname", "levelno", "lineno",
    "module", "msecs", "pathname", "process",
    "processName", "relativeCreated", "stack_info",
    "exc_info", "exc_text", "thread", "threadName",
    "taskName", "message", "asctime",
})


class JsonFormatter(logging.Formatter):
    """
    JSON log formatter merging log_context() fields and record extras.
    """

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "@timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }
        data.update(_log_context.get())

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                data[key] = value

        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)

        return json.dumps(data, default=str)


@contextmanager
def log_context(**fields: Any) -> Iterator[dict[str, Any]]:
    """
    Add fields to every record logged inside the block.

    Usage:
        with log_context(collection="docs", operation="search"):
            logger.info("Search complete")
    """
    merged = {**_log_context.get(), **fields}
    token = _log_context.set(merged)
    try:
        yield merged
    finally:
        _log_context.reset(token)


def current_context() -> dict[str, Any]:
    return dict(_log_context.get())


def setup_logging(
    level: Union[LogLevel, str] = LogLevel.INFO,
    json_output: bool = True,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure root logger for structured logging.

    Args:
        level: Minimum log level (LogLevel or its name)
        json_output: Use JSON formatting
        stream: Output stream (default: stderr)
    """
    if isinstance(level, str):
        level = LogLevel[level.upper()]

    root = logging.getLogger()
    root.setLevel(level.value)

    # Remove existing handlers
    root.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level.value)

    if json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        ))

    root.addHandler(handler)
