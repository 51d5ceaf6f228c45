"""
OAuth2 credential lifecycle for provider API clients.

One OAuthCredentialManager per provider account obtains, persists, validates
and transparently refreshes the access token, and broadcasts every new
credential to subscribers.

Basic Usage:
    from authcore.oauth2 import AuthorizeOptions, OAuthCredentialManager, ProviderProfile

    profile = ProviderProfile(
        name="api.example.com",
        auth_url="https://example.com/oauth/authorize",
        token_url="https://example.com/oauth/token",
        client_id=os.getenv("CLIENT_ID"),
        client_secret=os.getenv("CLIENT_SECRET"),
        redirect_url="http://127.0.0.1:8080",
    )
    manager = OAuthCredentialManager(profile)

    request = manager.authorize(["read"], AuthorizeOptions(pkce=True))
    # ... user consents, redirect callback yields code and state ...
    credential = await manager.token_exchange(code, request.pkce_verifier)
    manager.set_credentials(credential)

    # Expired tokens are refreshed before the call goes out
    me = await manager.call_json("https://api.example.com/me")

Persisting Refreshes:
    from authcore.oauth2 import CredentialStore, persist_refreshes

    store = CredentialStore("credentials")
    manager = OAuthCredentialManager(profile, store.load(profile.name))
    task = asyncio.create_task(persist_refreshes(manager, store))
"""

from authcore.oauth2.exceptions import (
    CredentialWatchClosed,
    InvalidConfigurationError,
    TokenExchangeError,
    TokenRefreshError,
)
from authcore.oauth2.exchange import TokenEndpointClient
from authcore.oauth2.http import BearerSession, HttpResponse
from authcore.oauth2.manager import OAuthCredentialManager
from authcore.oauth2.models import (
    AuthorizationRequest,
    AuthorizeOptions,
    Credential,
    PkceChallenge,
    TokenResponse,
)
from authcore.oauth2.notifier import CredentialSubscription, CredentialWatch
from authcore.oauth2.profile import (
    ProviderProfile,
    parser_error_message,
    raw_text_error_message,
    standard_error_message,
)
from authcore.oauth2.store import CredentialStore, persist_refreshes

__all__ = [
    # Manager
    "OAuthCredentialManager",
    # Protocol
    "TokenEndpointClient",
    "ProviderProfile",
    "standard_error_message",
    "raw_text_error_message",
    "parser_error_message",
    # HTTP
    "BearerSession",
    "HttpResponse",
    # Models
    "Credential",
    "TokenResponse",
    "PkceChallenge",
    "AuthorizeOptions",
    "AuthorizationRequest",
    # Broadcast
    "CredentialWatch",
    "CredentialSubscription",
    # Persistence
    "CredentialStore",
    "persist_refreshes",
    # Exceptions
    "TokenExchangeError",
    "TokenRefreshError",
    "InvalidConfigurationError",
    "CredentialWatchClosed",
]
