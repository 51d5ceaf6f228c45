"""
Unified exception hierarchy for connector API calls.

Every failure surfaced by the credential core or a provider adapter is an
ApiError subclass, so callers can tell "please re-authenticate" (AuthError)
apart from ordinary operation failures.
"""

import asyncio
import json

import aiohttp
from pydantic import ValidationError

from authcore.types import ErrorCategory


class ApiError(Exception):
    """
    Base exception for all connector errors.

    Attributes:
        message: Human-readable error description
        category: Error classification for handling decisions
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        return self.category in (
            ErrorCategory.TRANSIENT,
            ErrorCategory.UNKNOWN,
        )

    @property
    def should_reauthenticate(self) -> bool:
        return self.category == ErrorCategory.AUTH

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


# =============================================================================
# Authentication Errors
# =============================================================================


class AuthError(ApiError):
    """Credential refresh or token exchange failed, or a call returned 401."""

    category = ErrorCategory.AUTH


# =============================================================================
# Input Errors
# =============================================================================


class BadRequest(ApiError):
    """Malformed input detected before any network call was made."""

    category = ErrorCategory.PERMANENT


# =============================================================================
# Transport / HTTP Errors
# =============================================================================


class RequestError(ApiError):
    """Network failure or non-auth HTTP error status."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        body: str | None = None,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        super().__init__(message, cause, context)
        self.status = status
        self.body = body
        if status is None:
            self.category = ErrorCategory.TRANSIENT
        else:
            self.category = classify_http_status(status)


# =============================================================================
# Payload Errors
# =============================================================================


class SerdeError(ApiError):
    """Response or stored document did not match the expected shape."""

    category = ErrorCategory.PERMANENT


class OtherError(ApiError):
    """Catch-all for provider-specific anomalies."""

    pass


# =============================================================================
# Error Classification Utilities
# =============================================================================


def classify_http_status(status_code: int) -> ErrorCategory:
    """Classify HTTP status code into error category."""
    if 200 <= status_code < 300:
        return ErrorCategory.UNKNOWN  # Not an error

    if status_code == 401:
        return ErrorCategory.AUTH

    if status_code == 429:
        return ErrorCategory.TRANSIENT  # Rate limited

    if 400 <= status_code < 500:
        return ErrorCategory.PERMANENT

    if status_code >= 500:
        return ErrorCategory.TRANSIENT

    return ErrorCategory.UNKNOWN


def is_auth_error(exc: Exception) -> bool:
    """
    Check if exception means the credential is no longer usable.

    Only typed errors are trusted here; a bare exception is never treated
    as an auth failure.
    """
    if isinstance(exc, ApiError):
        return exc.category == ErrorCategory.AUTH
    return False


def wrap_exception(exc: Exception, context: dict | None = None) -> ApiError:
    """Wrap a generic exception in the matching ApiError subclass."""
    if isinstance(exc, ApiError):
        if context:
            exc.context.update(context)
        return exc

    context = context or {}

    if isinstance(exc, aiohttp.ClientResponseError):
        return RequestError(
            f"HTTP {exc.status}: {exc.message}",
            status=exc.status,
            cause=exc,
            context=context,
        )

    if isinstance(exc, (aiohttp.ClientError, asyncio.TimeoutError)):
        context.setdefault("error_type", type(exc).__name__)
        return RequestError(f"Request failed: {exc}", cause=exc, context=context)

    if isinstance(exc, (json.JSONDecodeError, ValidationError)):
        return SerdeError(f"Unexpected payload: {exc}", cause=exc, context=context)

    return OtherError(str(exc), cause=exc, context=context)


__all__ = [
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
