"""Logging utilities for monitoring and debugging."""

from alpacadata.core.logging.config import LogConfig
from alpacadata.core.logging.logger import (
    StructuredLogger,
    configure_logging,
    current_trace_id,
    get_logger,
    log_context,
    logger,
)

__all__ = [
    "LogConfig",
    "StructuredLogger",
    "configure_logging",
    "current_trace_id",
    "get_logger",
    "log_context",
    "logger",
]
