"""
Credential manager: expiry-gated, self-refreshing API access for one account.

One OAuthCredentialManager owns exactly one Credential and one BearerSession
at a time. Every outbound call goes through get_check_client(), which refreshes
the credential first when it has expired. Refreshes are serialized per
instance, so a burst of concurrent calls on an expired token produces a single
refresh round trip.
"""

import asyncio
import logging
import secrets
import urllib.parse
from typing import Any

import aiohttp

from authcore.errors.exceptions import ApiError, AuthError, RequestError
from authcore.logging.context_managers import LogContext
from authcore.oauth2.exceptions import CredentialWatchClosed, InvalidConfigurationError
from authcore.oauth2.exchange import TokenEndpointClient
from authcore.oauth2.http import (
    DEFAULT_TIMEOUT_SECONDS,
    BearerSession,
    HttpResponse,
    QueryParams,
)
from authcore.oauth2.models import (
    AuthorizationRequest,
    AuthorizeOptions,
    Credential,
    PkceChallenge,
)
from authcore.oauth2.notifier import CredentialSubscription, CredentialWatch
from authcore.oauth2.profile import ProviderProfile

logger = logging.getLogger(__name__)

MAX_ERROR_BODY_CHARS = 500


class OAuthCredentialManager:
    """
    Generic authenticated client for any OAuth2 provider profile.

    Usage:
        manager = OAuthCredentialManager(profile)
        request = manager.authorize(["read"], AuthorizeOptions(pkce=True))
        # user visits request.authorization_url, callback yields (code, state)
        if request.verify_state(state):
            credential = await manager.token_exchange(code, request.pkce_verifier)
            manager.set_credentials(credential)

        data = await manager.call_json("https://api.example.com/me")
    """

    def __init__(
        self,
        profile: ProviderProfile,
        credential: Credential | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        token_endpoint: TokenEndpointClient | None = None,
    ):
        self.profile = profile
        self.timeout = timeout
        self._credential = credential or Credential.empty()
        self._token_endpoint = token_endpoint or TokenEndpointClient(profile, timeout=timeout)
        self._session: aiohttp.ClientSession | None = None
        self._http = self._build_http_client(self._credential)
        self._watch = CredentialWatch(self._credential)
        self._refresh_lock = asyncio.Lock()

        logger.debug(f"Initialized credential manager for '{profile.name}'")

    # ------------------------------------------------------------------
    # Identity and snapshots
    # ------------------------------------------------------------------

    def id(self) -> str:
        """Stable identifier of the provider; the credential cache key."""
        return self.profile.name

    def credentials(self) -> Credential:
        return self._credential

    def http_client(self) -> BearerSession:
        return self._http

    def watch_on_refresh(self) -> CredentialSubscription:
        return self._watch.subscribe()

    def is_expired(self) -> bool:
        return self._credential.is_expired()

    def set_credentials(self, credential: Credential) -> None:
        """Install a credential (freshly exchanged or loaded from storage)."""
        self._install(credential)

    # ------------------------------------------------------------------
    # Authorization code flow
    # ------------------------------------------------------------------

    def authorize(
        self,
        scopes: list[str],
        options: AuthorizeOptions | None = None,
    ) -> AuthorizationRequest:
        """
        Build the provider's authorization URL.

        PKCE follows the profile when it says always or never, else the options.
        """
        options = options or AuthorizeOptions()
        csrf_token = secrets.token_urlsafe(32)

        params: list[tuple[str, str]] = [
            ("response_type", "code"),
            ("client_id", self.profile.client_id),
            ("state", csrf_token),
        ]
        if self.profile.redirect_url:
            params.append(("redirect_uri", self.profile.redirect_url))
        if scopes:
            params.append(("scope", " ".join(scopes)))

        pkce = None
        if self.profile.uses_pkce(options):
            pkce = PkceChallenge.generate()
            params.append(("code_challenge", pkce.challenge))
            params.append(("code_challenge_method", pkce.method))

        params.extend(self.profile.authorize_params(options))

        separator = "&" if urllib.parse.urlsplit(self.profile.auth_url).query else "?"
        url = f"{self.profile.auth_url}{separator}{urllib.parse.urlencode(params)}"

        return AuthorizationRequest(
            authorization_url=url,
            csrf_token=csrf_token,
            pkce_challenge=pkce.challenge if pkce else None,
            pkce_verifier=pkce.verifier if pkce else None,
        )

    async def token_exchange(self, code: str, pkce_verifier: str | None = None) -> Credential:
        """
        Exchange an authorization code for a Credential.

        The returned credential is not installed; pass it to set_credentials().

        Raises:
            TokenExchangeError: If the provider rejects the code
            RequestError: If the token endpoint cannot be reached
        """
        with LogContext(provider=self.id(), operation="token_exchange"):
            response = await self._token_endpoint.exchange_code(code, pkce_verifier)
            logger.info(f"Obtained credentials for '{self.id()}'")
        return Credential.from_token_response(response)

    # ------------------------------------------------------------------
    # Refresh and gating
    # ------------------------------------------------------------------

    async def refresh_credentials(self) -> None:
        """
        Exchange the refresh token for a new credential and publish it.

        No-op when the current credential has no refresh token.

        Raises:
            TokenRefreshError: If the provider rejects the refresh token
            RequestError: If the token endpoint cannot be reached
        """
        async with self._refresh_lock:
            await self._refresh_locked()

    async def _refresh_locked(self) -> None:
        current = self._credential
        if not current.refresh_token:
            logger.debug(f"No refresh token for '{self.id()}', skipping refresh")
            return

        with LogContext(provider=self.id(), operation="refresh"):
            response = await self._token_endpoint.exchange_refresh_token(current.refresh_token)
            self._install(current.apply_token_response(response))
            logger.info(f"Refreshed credentials for '{self.id()}'")

    async def get_check_client(self) -> BearerSession:
        """
        Return an HTTP client with a valid bearer token.

        Refreshes first if the credential has expired. No network call is made
        for a non-expired credential.

        Raises:
            AuthError: If the refresh fails
        """
        if self._credential.is_expired():
            async with self._refresh_lock:
                # Another caller may have refreshed while we waited
                if self._credential.is_expired():
                    logger.debug(f"Refreshing expired token for '{self.id()}'")
                    try:
                        await self._refresh_locked()
                    except ApiError as e:
                        raise AuthError(
                            f"Unable to refresh credentials: {e.message}",
                            cause=e,
                            context={"provider": self.id()},
                        ) from e

        return self._http

    async def call(self, endpoint: str, query: QueryParams | None = None) -> HttpResponse:
        """
        GET an endpoint with a valid bearer token.

        Returns the response whatever its status.

        Raises:
            AuthError: If the credential could not be refreshed
            RequestError: On transport failure
        """
        client = await self.get_check_client()
        return await client.get(endpoint, params=query)

    async def call_json(self, endpoint: str, query: QueryParams | None = None) -> Any:
        """
        GET an endpoint and decode the JSON body.

        Raises:
            AuthError: On HTTP 401 or a failed refresh
            RequestError: On any other 4xx/5xx status, or transport failure
            SerdeError: If a successful body is not JSON
        """
        response = await self.call(endpoint, query)
        return self.json_or_raise(response)

    @staticmethod
    def json_or_raise(response: HttpResponse) -> Any:
        """Decode a successful response, classifying error statuses."""
        if response.ok:
            return response.json()

        if response.status == 401:
            raise AuthError("Unauthorized", context={"http_status": 401, "http_url": response.url})

        body = response.text()[:MAX_ERROR_BODY_CHARS]
        raise RequestError(
            f"HTTP {response.status} {response.reason or ''}".rstrip(),
            status=response.status,
            body=body,
            context={"http_status": response.status, "http_url": response.url},
        )

    # ------------------------------------------------------------------
    # Revocation and lifecycle
    # ------------------------------------------------------------------

    async def revoke(self) -> None:
        """
        Revoke the current tokens at the provider.

        Raises:
            BadRequest: If the profile has no revocation endpoint
            RequestError: If the revocation request fails
        """
        if not self.profile.revoke_url:
            raise InvalidConfigurationError(f"Provider '{self.id()}' does not support revocation")

        credential = self._credential
        if credential.refresh_token:
            await self._token_endpoint.revoke_token(credential.refresh_token, "refresh_token")
        if credential.access_token:
            await self._token_endpoint.revoke_token(credential.access_token, "access_token")

    async def close(self) -> None:
        """Close HTTP sessions and end all credential subscriptions."""
        self._watch.close()
        await self._token_endpoint.close()
        if self._session and not self._session.closed:
            await self._session.close()
        logger.debug(f"Credential manager for '{self.id()}' closed")

    async def __aenter__(self) -> "OAuthCredentialManager":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Get or create the pooled HTTP session shared by all BearerSessions."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    def _build_http_client(self, credential: Credential) -> BearerSession:
        return BearerSession(
            self._ensure_session,
            credential.access_token,
            user_agent=self.profile.user_agent,
            timeout=self.timeout,
        )

    def _install(self, credential: Credential) -> None:
        # Credential and client are swapped together, without an await in between
        self._credential = credential
        self._http = self._build_http_client(credential)
        try:
            self._watch.send(credential)
        except CredentialWatchClosed:
            logger.debug(f"Credential watch for '{self.id()}' is closed, update not published")


__all__ = ["OAuthCredentialManager"]
