"""Provider profiles: endpoints and quirks describing one OAuth2 provider."""

import json
from collections.abc import Callable
from dataclasses import dataclass, field, replace

from authcore.oauth2.exceptions import InvalidConfigurationError
from authcore.oauth2.models import AuthorizeOptions

DEFAULT_USER_AGENT = "saas-connectors"

ErrorBodyParser = Callable[[bytes, Exception], str]


def standard_error_message(raw: bytes) -> str | None:
    """
    Render an RFC 6749 error body ({"error": ..., "error_description": ...}).

    Returns None when the body does not have the standard shape.
    """
    try:
        body = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None

    if not isinstance(body, dict) or not isinstance(body.get("error"), str):
        return None

    message = body["error"]
    description = body.get("error_description")
    if description:
        message = f"{message}: {description}"
    return message


def raw_text_error_message(raw: bytes, error: Exception) -> str:
    """Use the raw response text when it is readable, else the parser error."""
    try:
        text = raw.decode("utf-8").strip()
    except UnicodeDecodeError:
        return str(error)
    return text or str(error)


def parser_error_message(raw: bytes, error: Exception) -> str:
    """Ignore the body and report the parser error only."""
    return str(error)


@dataclass(frozen=True)
class ProviderProfile:
    """
    Endpoints and quirks of one OAuth2 (or near-OAuth2) provider.

    Attributes:
        name: Stable identifier, used as the credential cache key
        auth_url: Authorization endpoint
        token_url: Token endpoint
        client_id: OAuth2 client ID
        client_secret: Optional OAuth2 client secret
        redirect_url: Optional redirect URI registered with the provider
        revoke_url: Optional revocation endpoint
        pkce: True always attaches a PKCE challenge, False never does (the
            provider does not support it), None leaves it to AuthorizeOptions
        extra_authorize_params: Always appended to the authorization URL
        extra_token_params: Always appended to token request bodies
        credentials_in_body: Duplicate client_id/client_secret into token request bodies
        basic_auth: Send client credentials with HTTP Basic auth on token requests
        user_agent: User-Agent for API calls
        token_headers: Extra headers for token endpoint requests
        error_body_parser: Turns a non-conforming token endpoint body into a message
    """

    name: str
    auth_url: str
    token_url: str
    client_id: str
    client_secret: str | None = None
    redirect_url: str | None = None
    revoke_url: str | None = None
    pkce: bool | None = None
    extra_authorize_params: tuple[tuple[str, str], ...] = ()
    extra_token_params: tuple[tuple[str, str], ...] = ()
    credentials_in_body: bool = False
    basic_auth: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    token_headers: tuple[tuple[str, str], ...] = ()
    error_body_parser: ErrorBodyParser = field(default=raw_text_error_message, compare=False)

    def __post_init__(self):
        missing = [
            attr for attr in ("name", "auth_url", "token_url", "client_id") if not getattr(self, attr)
        ]
        if missing:
            raise InvalidConfigurationError(
                f"Provider profile is missing required fields: {', '.join(missing)}"
            )

    def authorize_params(self, options: AuthorizeOptions) -> list[tuple[str, str]]:
        """Profile-level authorization parameters followed by per-call ones."""
        return [*self.extra_authorize_params, *options.extra_params]

    def uses_pkce(self, options: AuthorizeOptions) -> bool:
        return options.pkce if self.pkce is None else self.pkce

    def token_params(self) -> list[tuple[str, str]]:
        params = list(self.extra_token_params)
        if self.credentials_in_body:
            params.append(("client_id", self.client_id))
            if self.client_secret:
                params.append(("client_secret", self.client_secret))
        return params

    @property
    def uses_basic_auth(self) -> bool:
        return self.basic_auth and bool(self.client_secret)

    def describe_error(self, raw: bytes, error: Exception) -> str:
        """Structured parse first, then the profile's fallback hook."""
        return standard_error_message(raw) or self.error_body_parser(raw, error)

    def with_overrides(self, **overrides) -> "ProviderProfile":
        return replace(self, **overrides)


__all__ = [
    "DEFAULT_USER_AGENT",
    "ErrorBodyParser",
    "ProviderProfile",
    "parser_error_message",
    "raw_text_error_message",
    "standard_error_message",
]
