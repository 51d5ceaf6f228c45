"""
Core types shared across the credential lifecycle modules.
"""

from enum import Enum


class ErrorCategory(Enum):
    """
    Classification of error types for handling decisions.

    Categories:
        TRANSIENT: Temporary failures that may succeed if the caller tries again
                   (e.g., network timeouts, 429/503 errors)
        AUTH: Credential failures that require re-running the authorization flow
              (e.g., 401 errors, rejected refresh tokens)
        PERMANENT: Failures that won't succeed on retry
                   (e.g., 404, malformed input, unexpected response shapes)
        UNKNOWN: Unclassified errors
    """

    TRANSIENT = "transient"
    AUTH = "auth"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


__all__ = ["ErrorCategory"]
