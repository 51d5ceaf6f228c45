"""Shared JSON serialization utilities for type-safe JSON encoding."""

from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any


def json_serializer(obj: Any) -> Any:
    """
    JSON serializer for log records and documents.

    - datetime/date -> ISO 8601 string
    - timedelta -> seconds as float
    - Path -> string
    - Enums -> value
    - Everything else -> string (fallback)

    Args:
        obj: Object to serialize

    Returns:
        JSON-serializable representation
    """
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, timedelta):
        return obj.total_seconds()
    if isinstance(obj, Path):
        return str(obj)
    if hasattr(obj, "value"):
        return obj.value
    return str(obj)


__all__ = ["json_serializer"]
