"""Configuration loading for SaaS connectors.

Configuration is loaded from a single config/config.yaml file.

Main Functions
--------------

    - load_config(): Load connector configuration from YAML
    - get_config(): Get or load singleton config instance
    - set_config(): Replace the singleton (useful for testing)
    - reset_config(): Reset singleton config instance

Usage Examples
--------------

    >>> from config import get_config
    >>> from connectors import GitHubConnector
    >>>
    >>> config = get_config()
    >>> github = GitHubConnector.from_settings(config.get_provider("github"))
"""

from config.config import (
    DEFAULT_CONFIG_FILE,
    ConnectorsConfig,
    ProviderSettings,
    get_config,
    load_config,
    reset_config,
    set_config,
)

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "ConnectorsConfig",
    "ProviderSettings",
    "load_config",
    "get_config",
    "set_config",
    "reset_config",
]
