"""Token endpoint round trips: authorization-code grant, refresh grant, revocation."""

import asyncio
import base64
import logging

import aiohttp
from pydantic import ValidationError

from authcore.errors.exceptions import RequestError
from authcore.oauth2.exceptions import (
    InvalidConfigurationError,
    TokenExchangeError,
    TokenRefreshError,
)
from authcore.oauth2.models import TokenResponse
from authcore.oauth2.profile import ProviderProfile

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TIMEOUT_SECONDS = 30


def basic_authorization(client_id: str, client_secret: str) -> str:
    """HTTP Basic credentials for the token endpoint (RFC 6749 section 2.3.1)."""
    token = base64.b64encode(f"{client_id}:{client_secret}".encode()).decode("ascii")
    return f"Basic {token}"


class TokenEndpointClient:
    """
    Talks to one provider's token endpoint.

    Applies the profile's quirks to every request: extra body parameters,
    client credentials in the body and/or via HTTP Basic auth, extra headers,
    and the fallback error-body parser for non-standard error payloads.
    """

    def __init__(
        self,
        profile: ProviderProfile,
        timeout: float = DEFAULT_TOKEN_TIMEOUT_SECONDS,
    ):
        self.profile = profile
        self.timeout = timeout
        self._session: aiohttp.ClientSession | None = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP client session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.profile.uses_basic_auth:
            headers["Authorization"] = basic_authorization(
                self.profile.client_id, self.profile.client_secret
            )
        headers.update(self.profile.token_headers)
        return headers

    def _body(self, params: list[tuple[str, str]]) -> list[tuple[str, str]]:
        body = list(params)
        # Without Basic auth the provider can only identify us by client_id
        if not self.profile.uses_basic_auth and not self.profile.credentials_in_body:
            body.append(("client_id", self.profile.client_id))
        body.extend(self.profile.token_params())
        return body

    async def _post(self, body: list[tuple[str, str]]) -> tuple[int, bytes]:
        session = await self._ensure_session()
        async with session.post(
            self.profile.token_url,
            data=body,
            headers=self._headers(),
            timeout=aiohttp.ClientTimeout(total=self.timeout),
        ) as response:
            return response.status, await response.read()

    async def _request_token(
        self,
        body: list[tuple[str, str]],
        error_class: type[TokenExchangeError] | type[TokenRefreshError],
        grant: str,
    ) -> TokenResponse:
        try:
            status, raw = await self._post(self._body(body))
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"HTTP error during {grant} grant for '{self.profile.name}': {e}")
            raise RequestError(
                f"Token endpoint request failed: {e}",
                cause=e,
                context={"http_url": self.profile.token_url, "operation": grant},
            ) from e

        if 200 <= status < 300:
            try:
                return TokenResponse.model_validate_json(raw)
            except ValidationError as e:
                message = self.profile.describe_error(raw, e)
        else:
            message = self.profile.describe_error(
                raw, ValueError(f"HTTP {status} from token endpoint")
            )

        logger.warning(
            f"{grant} grant rejected by '{self.profile.name}'",
            extra={"http_status": status, "operation": grant},
        )
        raise error_class(message, context={"http_status": status, "provider": self.profile.name})

    async def exchange_code(self, code: str, pkce_verifier: str | None = None) -> TokenResponse:
        """
        Exchange an authorization code for tokens.

        Args:
            code: Code parsed from the redirect callback
            pkce_verifier: Verifier retained from the authorization request, if PKCE was used

        Raises:
            TokenExchangeError: If the provider rejects the code
            RequestError: If the token endpoint cannot be reached
        """
        body = [("grant_type", "authorization_code"), ("code", code)]
        if self.profile.redirect_url:
            body.append(("redirect_uri", self.profile.redirect_url))
        if pkce_verifier:
            body.append(("code_verifier", pkce_verifier))

        response = await self._request_token(body, TokenExchangeError, "authorization_code")
        logger.debug(
            f"Exchanged authorization code for '{self.profile.name}'",
            extra={"expires_in": response.expires_in},
        )
        return response

    async def exchange_refresh_token(self, refresh_token: str) -> TokenResponse:
        """
        Exchange a refresh token for a new access token.

        Raises:
            TokenRefreshError: If the provider rejects the refresh token
            RequestError: If the token endpoint cannot be reached
        """
        body = [("grant_type", "refresh_token"), ("refresh_token", refresh_token)]
        response = await self._request_token(body, TokenRefreshError, "refresh_token")
        logger.debug(
            f"Refreshed token for '{self.profile.name}'",
            extra={"expires_in": response.expires_in},
        )
        return response

    async def revoke_token(self, token: str, token_type_hint: str = "access_token") -> None:
        """
        Revoke a token at the provider's revocation endpoint (RFC 7009).

        Raises:
            RequestError: If the endpoint cannot be reached or answers with an error status
        """
        if not self.profile.revoke_url:
            raise InvalidConfigurationError(
                f"Provider '{self.profile.name}' has no revocation endpoint"
            )

        body = self._body([("token", token), ("token_type_hint", token_type_hint)])
        session = await self._ensure_session()
        try:
            async with session.post(
                self.profile.revoke_url,
                data=body,
                headers=self._headers(),
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if response.status >= 400:
                    text = await response.text()
                    raise RequestError(
                        f"Revocation failed with HTTP {response.status}",
                        status=response.status,
                        body=text[:500],
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise RequestError(f"Revocation request failed: {e}", cause=e) from e

        logger.info(f"Revoked {token_type_hint} for '{self.profile.name}'")

    async def close(self) -> None:
        """Close HTTP client session."""
        if self._session and not self._session.closed:
            await self._session.close()


__all__ = ["TokenEndpointClient", "DEFAULT_TOKEN_TIMEOUT_SECONDS"]
