"""OAuth2 data models: credentials, token responses and authorization requests."""

import base64
import hashlib
import hmac
import json
import secrets
import string
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from authcore.errors.exceptions import SerdeError

PKCE_VERIFIER_LENGTH = 64
PKCE_VERIFIER_ALPHABET = string.ascii_letters + string.digits + "-._~"


class TokenResponse(BaseModel):
    """
    Successful response body from a provider token endpoint.

    Unknown fields (id_token, hub_id, ...) are kept so adapters can read
    provider-specific extras.
    """

    model_config = ConfigDict(extra="allow")

    access_token: str = Field(..., min_length=1)
    token_type: str = "bearer"
    expires_in: int | None = None
    refresh_token: str | None = None
    scope: str | None = None

    @field_validator("refresh_token", "scope", mode="before")
    @classmethod
    def empty_as_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v:
            return None
        return v


class StoredCredential(BaseModel):
    """Persisted form of a Credential."""

    requested_at: datetime
    access_token: str
    refresh_token: str | None = None
    expires_in: float | None = Field(default=None, ge=0)


@dataclass(frozen=True)
class Credential:
    """
    Access/refresh token pair plus expiry bookkeeping for one account.

    Never mutated in place: every refresh produces a new value via
    apply_token_response().

    Attributes:
        issued_at: UTC timestamp of the last (re)issuance
        access_token: Opaque bearer secret
        refresh_token: Optional refresh secret (absent for flows without offline access)
        lifetime: Optional validity window; None means the token never expires
    """

    issued_at: datetime
    access_token: str
    refresh_token: str | None = None
    lifetime: timedelta | None = None

    @classmethod
    def empty(cls) -> "Credential":
        """Placeholder credential used before any authorization has happened."""
        return cls(issued_at=datetime.now(UTC), access_token="")

    @classmethod
    def from_token_response(cls, response: TokenResponse) -> "Credential":
        return cls.empty().apply_token_response(response)

    @property
    def expires_at(self) -> datetime | None:
        if self.lifetime is None:
            return None
        return self.issued_at + self.lifetime

    def is_expired(self, now: datetime | None = None) -> bool:
        """
        Check whether the access token is stale.

        A credential without a lifetime never expires. Otherwise it is expired
        once strictly more than `lifetime` has elapsed since issuance.
        """
        if self.lifetime is None:
            return False
        now = now or datetime.now(UTC)
        return (now - self.issued_at) > self.lifetime

    def apply_token_response(self, response: TokenResponse) -> "Credential":
        """
        Produce the credential resulting from a token exchange or refresh.

        Refresh grants often omit the refresh token; the current one is kept
        in that case.
        """
        lifetime = None
        if response.expires_in is not None:
            lifetime = timedelta(seconds=response.expires_in)

        return replace(
            self,
            issued_at=datetime.now(UTC),
            access_token=response.access_token,
            refresh_token=response.refresh_token or self.refresh_token,
            lifetime=lifetime,
        )

    def to_document(self) -> dict[str, Any]:
        expires_in = None
        if self.lifetime is not None:
            seconds = self.lifetime.total_seconds()
            expires_in = int(seconds) if seconds.is_integer() else seconds

        return {
            "requested_at": self.issued_at.isoformat(),
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_in": expires_in,
        }

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "Credential":
        """
        Load a credential from its persisted form.

        Raises:
            SerdeError: If the document is missing fields or has bad values
        """
        try:
            stored = StoredCredential.model_validate(document)
        except ValidationError as e:
            raise SerdeError(f"Invalid credential document: {e}", cause=e) from e

        issued_at = stored.requested_at
        if issued_at.tzinfo is None:
            issued_at = issued_at.replace(tzinfo=UTC)

        lifetime = None
        if stored.expires_in is not None:
            lifetime = timedelta(seconds=stored.expires_in)

        return cls(
            issued_at=issued_at,
            access_token=stored.access_token,
            refresh_token=stored.refresh_token,
            lifetime=lifetime,
        )

    def to_json(self) -> str:
        return json.dumps(self.to_document())

    @classmethod
    def from_json(cls, raw: str | bytes) -> "Credential":
        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            raise SerdeError(f"Credential document is not valid JSON: {e}", cause=e) from e
        if not isinstance(document, dict):
            raise SerdeError("Credential document must be a JSON object")
        return cls.from_document(document)

    def __repr__(self) -> str:
        # Secrets stay out of reprs (and therefore out of logs and tracebacks)
        return (
            f"Credential(issued_at={self.issued_at.isoformat()}, "
            f"access_token={'***' if self.access_token else ''!r}, "
            f"refresh_token={'***' if self.refresh_token else None!r}, "
            f"lifetime={self.lifetime!r})"
        )


@dataclass(frozen=True)
class PkceChallenge:
    """
    PKCE verifier and its S256 challenge.

    The verifier must be kept by the caller until the token exchange and
    discarded afterwards.
    """

    verifier: str
    challenge: str
    method: str = "S256"

    @classmethod
    def generate(cls, length: int = PKCE_VERIFIER_LENGTH) -> "PkceChallenge":
        if not 43 <= length <= 128:
            raise ValueError("PKCE verifier length must be between 43 and 128")
        verifier = "".join(secrets.choice(PKCE_VERIFIER_ALPHABET) for _ in range(length))
        return cls(verifier=verifier, challenge=cls.s256(verifier))

    @staticmethod
    def s256(verifier: str) -> str:
        digest = hashlib.sha256(verifier.encode("ascii")).digest()
        return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


@dataclass(frozen=True)
class AuthorizeOptions:
    """
    Per-call authorization options.

    Attributes:
        pkce: Generate and attach a PKCE challenge
        extra_params: Ordered (key, value) pairs appended to the authorization URL
    """

    pkce: bool = False
    extra_params: list[tuple[str, str]] = field(default_factory=list)


@dataclass(frozen=True)
class AuthorizationRequest:
    """
    A single authorization attempt.

    Attributes:
        authorization_url: URL the end user must visit
        csrf_token: Value sent as `state`; must match the callback's state
        pkce_challenge: Present only when the flow uses PKCE
        pkce_verifier: Present only when the flow uses PKCE
    """

    authorization_url: str
    csrf_token: str
    pkce_challenge: str | None = None
    pkce_verifier: str | None = None

    def verify_state(self, state: str | None) -> bool:
        """Constant-time check of the redirect callback's state parameter."""
        if not state:
            return False
        return hmac.compare_digest(state.encode(), self.csrf_token.encode())


__all__ = [
    "TokenResponse",
    "StoredCredential",
    "Credential",
    "PkceChallenge",
    "AuthorizeOptions",
    "AuthorizationRequest",
]
