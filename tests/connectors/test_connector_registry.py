"""Tests for the connector registry and the shared adapter behaviour."""

from unittest.mock import AsyncMock, patch

import pytest

from authcore.errors import AuthError, RequestError
from authcore.oauth2 import OAuthCredentialManager, TokenResponse
from authcore.oauth2.exchange import TokenEndpointClient
from connectors import CONNECTORS, GitHubConnector, get_connector_class
from connectors.base import ProviderAdapter


class TestRegistry:
    def test_all_connectors_registered(self):
        assert set(CONNECTORS) == {
            "github",
            "google_calendar",
            "google_drive",
            "google_sheets",
            "hubspot",
            "microsoft",
            "reddit",
        }
        assert all(issubclass(cls, ProviderAdapter) for cls in CONNECTORS.values())

    def test_lookup(self):
        assert get_connector_class("github") is GitHubConnector

    def test_unknown_connector(self):
        with pytest.raises(KeyError, match="Unknown connector 'dropbox'"):
            get_connector_class("dropbox")

    def test_ids_are_unique(self, settings):
        ids = [cls.from_settings(settings).id() for cls in CONNECTORS.values()]

        assert len(ids) == len(set(ids))


class TestAdapterDelegation:
    def test_without_credential_starts_empty(self, settings):
        github = GitHubConnector.from_settings(settings)

        assert isinstance(github.manager, OAuthCredentialManager)
        assert github.credentials().access_token == ""

    def test_set_credentials_notifies_watchers(self, settings, fresh_credential):
        github = GitHubConnector.from_settings(settings)
        subscription = github.watch_on_refresh()

        github.set_credentials(fresh_credential)

        assert subscription.latest() is fresh_credential

    async def test_token_exchange(self, settings):
        github = GitHubConnector.from_settings(settings)
        exchange = AsyncMock(return_value=TokenResponse(access_token="A1", refresh_token="R1"))

        with patch.object(TokenEndpointClient, "exchange_code", exchange):
            credential = await github.token_exchange("the-code", "verifier")

        exchange.assert_awaited_once_with("the-code", "verifier")
        assert credential.access_token == "A1"
        assert github.credentials().access_token == ""

    async def test_expired_credential_refreshes_before_call(self, settings, expired_credential, mock_get):
        refresh = AsyncMock(return_value=TokenResponse(access_token="A2", expires_in=3600))
        github = GitHubConnector.from_settings(settings, expired_credential)

        with patch.object(TokenEndpointClient, "exchange_refresh_token", refresh):
            await github.get_user()

        refresh.assert_awaited_once_with("R1")
        assert github.credentials().access_token == "A2"
        assert github.credentials().refresh_token == "R1"

    async def test_context_manager_closes_manager(self, settings):
        github = GitHubConnector.from_settings(settings)

        with patch.object(OAuthCredentialManager, "close", AsyncMock()) as close:
            async with github as entered:
                assert entered is github

        close.assert_awaited_once()

    async def test_failed_refresh_raises_auth_error(self, settings, expired_credential, mock_get):
        refresh = AsyncMock(side_effect=RequestError("Token endpoint request failed"))
        github = GitHubConnector.from_settings(settings, expired_credential)

        with patch.object(TokenEndpointClient, "exchange_refresh_token", refresh):
            with pytest.raises(AuthError, match="Unable to refresh credentials"):
                await github.get_user()

        mock_get.assert_not_awaited()
