"""
Provider connectors built on the shared OAuth2 credential manager.

Usage:
    from connectors import create_connector

    github = create_connector("github")
    repos = await github.list_repos()
"""

from authcore.oauth2 import Credential
from config.config import ConnectorsConfig, get_config
from connectors.base import ProviderAdapter
from connectors.github import GitHubConnector
from connectors.google import GoogleCalendar, GoogleDrive, GoogleSheets
from connectors.hubspot import CrmObject, HubSpotConnector
from connectors.microsoft import MicrosoftConnector
from connectors.reddit import RedditConnector

CONNECTORS: dict[str, type[ProviderAdapter]] = {
    "github": GitHubConnector,
    "google_calendar": GoogleCalendar,
    "google_drive": GoogleDrive,
    "google_sheets": GoogleSheets,
    "hubspot": HubSpotConnector,
    "microsoft": MicrosoftConnector,
    "reddit": RedditConnector,
}


def get_connector_class(name: str) -> type[ProviderAdapter]:
    """
    Look up a connector class by its configuration name.

    Raises:
        KeyError: If no connector is registered under the name
    """
    try:
        return CONNECTORS[name]
    except KeyError:
        raise KeyError(f"Unknown connector '{name}' (available: {', '.join(sorted(CONNECTORS))})") from None


def create_connector(
    name: str,
    config: ConnectorsConfig | None = None,
    credential: Credential | None = None,
) -> ProviderAdapter:
    """
    Build the connector registered under `name` from configuration.

    Without an explicit credential, the one saved in the configured credential
    store is installed when there is one.

    Raises:
        KeyError: If the connector is unknown or the provider is not configured
    """
    config = config or get_config()
    connector = get_connector_class(name).from_config(config, name, credential)
    if credential is None:
        stored = config.credential_store().load(connector.id())
        if stored is not None:
            connector.set_credentials(stored)
    return connector


__all__ = [
    "CONNECTORS",
    "get_connector_class",
    "create_connector",
    "ProviderAdapter",
    "GitHubConnector",
    "GoogleCalendar",
    "GoogleDrive",
    "GoogleSheets",
    "HubSpotConnector",
    "CrmObject",
    "MicrosoftConnector",
    "RedditConnector",
]
