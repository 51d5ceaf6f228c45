"""
Error classification and exception hierarchy.

Provides:
- ApiError hierarchy for typed exceptions
- HTTP status classification
- Wrapping of transport and parsing failures
"""

from authcore.errors.exceptions import (
    # Base class
    ApiError,
    # Taxonomy
    AuthError,
    BadRequest,
    OtherError,
    RequestError,
    SerdeError,
    # Classification utilities
    classify_http_status,
    is_auth_error,
    wrap_exception,
)
from authcore.types import ErrorCategory

__all__ = [
    "ErrorCategory",
    "ApiError",
    "AuthError",
    "BadRequest",
    "RequestError",
    "SerdeError",
    "OtherError",
    "classify_http_status",
    "is_auth_error",
    "wrap_exception",
]
