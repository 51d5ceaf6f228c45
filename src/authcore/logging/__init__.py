"""
Structured logging module.

Provides JSON logging with context propagation and OAuth secret redaction.
"""

from authcore.logging.context import (
    clear_log_context,
    get_log_context,
    set_log_context,
)
from authcore.logging.context_managers import LogContext
from authcore.logging.formatters import ConsoleFormatter, JSONFormatter, redact_url
from authcore.logging.setup import (
    generate_trace_id,
    get_log_file_path,
    get_logger,
    setup_logging,
)

__all__ = [
    # Setup
    "setup_logging",
    "get_logger",
    "generate_trace_id",
    "get_log_file_path",
    # Formatters
    "JSONFormatter",
    "ConsoleFormatter",
    "redact_url",
    # Context
    "set_log_context",
    "get_log_context",
    "clear_log_context",
    "LogContext",
]
