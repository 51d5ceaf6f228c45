"""
Base class for provider connectors.

A connector is a thin layer of provider REST calls over one
OAuthCredentialManager. Every call goes through the manager, so expired
tokens are refreshed before the request is sent.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from authcore.oauth2 import (
    AuthorizationRequest,
    AuthorizeOptions,
    Credential,
    CredentialSubscription,
    OAuthCredentialManager,
    ProviderProfile,
)
from authcore.oauth2.http import DEFAULT_TIMEOUT_SECONDS, QueryParams
from config.config import ConnectorsConfig, ProviderSettings

logger = logging.getLogger(__name__)


class ProviderAdapter(ABC):
    """
    Provider-specific REST surface on top of the generic credential manager.

    Subclasses set `api_endpoint` and `default_scopes`, build their
    ProviderProfile in `build_profile()` and implement `account_id()`.
    """

    api_endpoint: ClassVar[str] = ""
    default_scopes: ClassVar[tuple[str, ...]] = ()
    # False for providers that mandate their own User-Agent format
    configurable_user_agent: ClassVar[bool] = True

    def __init__(self, manager: OAuthCredentialManager, scopes: list[str] | None = None):
        self.manager = manager
        self.scopes = list(scopes) if scopes else list(self.default_scopes)

    @classmethod
    @abstractmethod
    def build_profile(cls, settings: ProviderSettings) -> ProviderProfile:
        """Provider endpoints and quirks for the given client registration."""

    @classmethod
    def from_settings(
        cls,
        settings: ProviderSettings,
        credential: Credential | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str | None = None,
    ) -> "ProviderAdapter":
        profile = cls.build_profile(settings)
        if user_agent and cls.configurable_user_agent:
            profile = profile.with_overrides(user_agent=user_agent)
        manager = OAuthCredentialManager(profile, credential, timeout=timeout)
        return cls(manager, scopes=settings.scopes)

    @classmethod
    def from_config(
        cls,
        config: ConnectorsConfig,
        name: str,
        credential: Credential | None = None,
    ) -> "ProviderAdapter":
        """
        Build from the provider registered under `name`, with the shared HTTP settings.

        Raises:
            KeyError: If the provider is not configured
        """
        return cls.from_settings(
            config.get_provider(name),
            credential,
            timeout=config.timeout_seconds,
            user_agent=config.user_agent,
        )

    def id(self) -> str:
        return self.manager.id()

    @abstractmethod
    async def account_id(self) -> str:
        """Identifier of the authenticated account at the provider."""

    # Delegation to the credential manager

    def authorize(
        self,
        scopes: list[str] | None = None,
        options: AuthorizeOptions | None = None,
    ) -> AuthorizationRequest:
        return self.manager.authorize(scopes if scopes is not None else self.scopes, options)

    async def token_exchange(self, code: str, pkce_verifier: str | None = None) -> Credential:
        return await self.manager.token_exchange(code, pkce_verifier)

    def credentials(self) -> Credential:
        return self.manager.credentials()

    def set_credentials(self, credential: Credential) -> None:
        self.manager.set_credentials(credential)

    def watch_on_refresh(self) -> CredentialSubscription:
        return self.manager.watch_on_refresh()

    async def close(self) -> None:
        await self.manager.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # Request helpers

    def _url(self, path_or_url: str) -> str:
        if path_or_url.startswith(("http://", "https://")):
            return path_or_url
        return f"{self.api_endpoint}{path_or_url}"

    async def _get_json(self, path_or_url: str, query: QueryParams | None = None) -> Any:
        return await self.manager.call_json(self._url(path_or_url), query)

    async def _send_json(self, method: str, path_or_url: str, body: Any, query: QueryParams | None = None) -> Any:
        client = await self.manager.get_check_client()
        response = await client.request(method, self._url(path_or_url), params=query, json_body=body)
        return self.manager.json_or_raise(response)


__all__ = ["ProviderAdapter"]
