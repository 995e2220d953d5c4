"""
Observability module: Structured logging.
"""

from vectable.observability.logging import (
    JsonFormatter,
    LogLevel,
    current_context,
    log_context,
    setup_logging,
)

__all__ = [
    "JsonFormatter",
    "LogLevel",
    "current_context",
    "log_context",
    "setup_logging",
]
