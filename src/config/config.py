"""Connector configuration from YAML file.

Loads from config/config.yaml with all settings in one place:
- Shared HTTP settings (timeout, user agent)
- Credential storage directory
- Per-provider OAuth client registrations

Environment variables ARE supported using ${VAR_NAME} syntax in YAML files.
"""

import json
import logging
import os
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from authcore.oauth2.store import CredentialStore

# Configure module logger
logger = logging.getLogger(__name__)


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return dict."""
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:-default} environment variables in config data."""
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        pattern = r"\$\{([^}:]+)(?::-([^}]*))?\}"

        def replacer(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else match.group(0)
            return os.getenv(var_name, default_value)

        return re.sub(pattern, replacer, data)
    else:
        return data


# Default config file: config/config.yaml in src/ directory
DEFAULT_CONFIG_FILE = Path(__file__).parent / "config.yaml"

DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_USER_AGENT = "saas-connectors"
DEFAULT_CREDENTIALS_DIR = "credentials"


@dataclass
class ProviderSettings:
    """OAuth client registration for one provider."""

    client_id: str = ""
    client_secret: Optional[str] = None
    redirect_url: Optional[str] = None
    scopes: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProviderSettings":
        scopes = data.get("scopes") or []
        if isinstance(scopes, str):
            scopes = scopes.split()
        return cls(
            client_id=str(data.get("client_id") or ""),
            client_secret=data.get("client_secret") or None,
            redirect_url=data.get("redirect_url") or None,
            scopes=list(scopes),
        )


@dataclass
class ConnectorsConfig:
    """Connector configuration.

    Configuration structure:
        http:
          timeout_seconds: 30
          user_agent: saas-connectors
        credentials_dir: credentials
        providers:
          github:
            client_id: ${GITHUB_CLIENT_ID}
            client_secret: ${GITHUB_CLIENT_SECRET}
            redirect_url: http://127.0.0.1:8080
            scopes: [repo, user]
    """

    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    user_agent: str = DEFAULT_USER_AGENT
    credentials_dir: str = DEFAULT_CREDENTIALS_DIR
    providers: Dict[str, ProviderSettings] = field(default_factory=dict)

    def get_provider(self, name: str) -> ProviderSettings:
        """Get settings for a provider.

        Raises:
            KeyError: If the provider is not configured
        """
        if name not in self.providers:
            configured = ", ".join(sorted(self.providers)) or "none"
            raise KeyError(f"Provider '{name}' is not configured (configured: {configured})")
        return self.providers[name]

    def credential_store(self) -> CredentialStore:
        """Credential store rooted at credentials_dir."""
        return CredentialStore(self.credentials_dir)

    def validate(self) -> None:
        """Validate configuration.

        Raises:
            ValueError: If a setting is invalid
        """
        if self.timeout_seconds <= 0:
            raise ValueError(f"http: timeout_seconds must be > 0, got {self.timeout_seconds}")

        for name, settings in self.providers.items():
            if not settings.client_id:
                raise ValueError(f"providers.{name}: client_id is required")
            if settings.client_id.startswith("${"):
                raise ValueError(
                    f"providers.{name}: client_id references an unset environment variable "
                    f"({settings.client_id})"
                )


def _deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge overlay into base dict."""
    result = base.copy()
    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> ConnectorsConfig:
    """Load connector configuration from config.yaml file.

    Environment variables ARE supported using ${VAR_NAME} syntax in YAML files.

    Raises:
        FileNotFoundError: If the config file does not exist
        ValueError: If the configuration is invalid
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_FILE
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path}\n" f"Expected file: config/config.yaml"
        )

    logger.info(f"Loading configuration from file: {config_path}")
    yaml_data = _expand_env_vars(load_yaml(config_path))

    if overrides:
        logger.debug(f"Applying overrides: {list(overrides.keys())}")
        yaml_data = _deep_merge(yaml_data, overrides)

    http = yaml_data.get("http") or {}
    providers = {
        name: ProviderSettings.from_dict(settings or {})
        for name, settings in (yaml_data.get("providers") or {}).items()
    }

    config = ConnectorsConfig(
        timeout_seconds=float(http.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)),
        user_agent=http.get("user_agent") or DEFAULT_USER_AGENT,
        credentials_dir=yaml_data.get("credentials_dir") or DEFAULT_CREDENTIALS_DIR,
        providers=providers,
    )

    logger.debug(f"Configured providers: {sorted(config.providers)}")
    config.validate()
    return config


_connectors_config: Optional[ConnectorsConfig] = None


def get_config() -> ConnectorsConfig:
    """Get or load the singleton connector config instance."""
    global _connectors_config
    if _connectors_config is None:
        _connectors_config = load_config()
    return _connectors_config


def set_config(config: ConnectorsConfig) -> None:
    """Set the singleton connector config instance (useful for testing)."""
    global _connectors_config
    _connectors_config = config


def reset_config() -> None:
    """Reset the singleton config instance (forces reload on next get_config() call)."""
    global _connectors_config
    _connectors_config = None


def _cli_main() -> int:
    """CLI entry point for config validation."""
    import argparse

    parser = argparse.ArgumentParser(description="Connector Configuration Tool")
    parser.add_argument("--config", type=Path, help="Path to config.yaml file")
    parser.add_argument("--json", action="store_true", help="Output in JSON format")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    try:
        config = load_config(config_path=args.config)
    except (FileNotFoundError, ValueError) as e:
        if args.json:
            print(json.dumps({"error": str(e)}))
        else:
            print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps({"valid": True, "providers": sorted(config.providers)}))
    else:
        print("Configuration validation passed")
        for name in sorted(config.providers):
            print(f"  - {name}: OK")
    return 0


if __name__ == "__main__":
    sys.exit(_cli_main())
