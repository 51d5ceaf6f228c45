"""OAuth2-specific exceptions."""

from authcore.errors.exceptions import AuthError, BadRequest, OtherError


class TokenExchangeError(AuthError):
    """The provider rejected the authorization code."""

    pass


class TokenRefreshError(AuthError):
    """The provider rejected the refresh token."""

    pass


class InvalidConfigurationError(BadRequest):
    """Provider profile configuration is invalid."""

    pass


class CredentialWatchClosed(OtherError):
    """The credential watch was closed; no further updates will arrive."""

    pass


__all__ = [
    "TokenExchangeError",
    "TokenRefreshError",
    "InvalidConfigurationError",
    "CredentialWatchClosed",
]
