"""
Log formatters for JSON and console output.

Token values must never reach a log sink. Both formatters route extras and
URLs through the redaction helpers below.
"""

import json
import logging
import re
import sys
from datetime import UTC, datetime
from typing import Any, Callable

from authcore.logging.context import get_log_context
from authcore.utils.json_serializers import json_serializer

REDACTED = "[REDACTED]"

# Extra fields whose values are replaced outright
SECRET_FIELDS = frozenset({"access_token", "refresh_token", "client_secret", "code", "code_verifier"})

_SECRET_QUERY_PARAM = re.compile(
    r"([?&])(code|code_verifier|state|token|access_token|refresh_token"
    r"|client_secret|secret|password|key)=[^&#]*",
    re.IGNORECASE,
)

CONTEXT_FIELDS = ("provider", "account_id", "operation", "trace_id")


def redact_url(url: str) -> str:
    """Replace the values of OAuth-sensitive query parameters."""
    return _SECRET_QUERY_PARAM.sub(rf"\1\2={REDACTED}", url)


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _secret(value: Any) -> str:
    return REDACTED


def _url(value: Any) -> Any:
    return redact_url(value) if isinstance(value, str) else value


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line, with log context and whitelisted extras.

    Fields listed in EXTRA_FIELDS are copied from `extra=` when present,
    after passing through their converter (type coercion or redaction).
    """

    EXTRA_FIELDS: dict[str, Callable[[Any], Any] | None] = {
        "trace_id": None,
        "duration_ms": _as_float,
        "http_method": None,
        "http_url": _url,
        "url": _url,
        "http_status": _as_int,
        "status_code": _as_int,
        "error_category": None,
        "error_type": None,
        "error_message": None,
        "error": None,
        "provider": None,
        "operation": None,
        "scope": None,
        "expires_in": _as_int,
        "destination_path": None,
        **{name: _secret for name in SECRET_FIELDS},
    }

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        log_context = get_log_context()
        entry.update({f: log_context[f] for f in CONTEXT_FIELDS if log_context.get(f)})

        if record.levelno in (logging.DEBUG, logging.ERROR, logging.CRITICAL):
            entry["file"] = f"{record.filename}:{record.lineno}"

        for field, convert in self.EXTRA_FIELDS.items():
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = convert(value) if convert else value

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "stacktrace": self.formatException(record.exc_info),
            }

        return json.dumps(entry, default=json_serializer, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable single-line output, e.g.

        2024-05-01 12:00:00 - INFO - [api.github.com] - [refresh] - [t-202405] Refreshed credentials

    Level names are coloured only when stdout is a TTY.
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._use_colors = sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        log_context = get_log_context()

        level = record.levelname
        color = self.LEVEL_COLORS.get(record.levelno)
        if self._use_colors and color:
            level = f"{color}{level}{self.RESET}"

        parts = [datetime.now().strftime("%Y-%m-%d %H:%M:%S"), level]
        parts.extend(f"[{log_context[f]}]" for f in ("provider", "operation") if log_context.get(f))
        prefix = " - ".join(parts)

        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        trace_id = getattr(record, "trace_id", None) or log_context.get("trace_id")
        if trace_id:
            return f"{prefix} - [{trace_id[:8]}] {message}"
        return f"{prefix} - {message}"


__all__ = ["REDACTED", "SECRET_FIELDS", "ConsoleFormatter", "JSONFormatter", "redact_url"]
