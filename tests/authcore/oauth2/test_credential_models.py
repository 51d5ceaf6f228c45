"""Tests for Credential, TokenResponse, PkceChallenge and AuthorizationRequest."""

import base64
import hashlib
import json
from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from authcore.errors import SerdeError
from authcore.oauth2.models import (
    PKCE_VERIFIER_ALPHABET,
    AuthorizationRequest,
    Credential,
    PkceChallenge,
    TokenResponse,
)

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)


class TestCredentialExpiry:
    """is_expired() semantics."""

    @pytest.mark.parametrize(
        "issued_at",
        [NOW, NOW - timedelta(days=3650), NOW + timedelta(days=1)],
    )
    def test_no_lifetime_never_expires(self, issued_at):
        credential = Credential(issued_at=issued_at, access_token="A1")
        assert credential.is_expired(now=NOW) is False

    def test_expired_after_lifetime(self):
        credential = Credential(
            issued_at=NOW - timedelta(seconds=3601),
            access_token="A1",
            lifetime=timedelta(seconds=3600),
        )
        assert credential.is_expired(now=NOW) is True

    def test_not_expired_within_lifetime(self):
        credential = Credential(
            issued_at=NOW - timedelta(seconds=10),
            access_token="A1",
            lifetime=timedelta(seconds=3600),
        )
        assert credential.is_expired(now=NOW) is False

    def test_boundary_is_not_expired(self):
        credential = Credential(
            issued_at=NOW - timedelta(seconds=3600),
            access_token="A1",
            lifetime=timedelta(seconds=3600),
        )
        assert credential.is_expired(now=NOW) is False

    def test_defaults_to_current_time(self, expired_credential, fresh_credential):
        assert expired_credential.is_expired() is True
        assert fresh_credential.is_expired() is False

    def test_expires_at(self):
        credential = Credential(issued_at=NOW, access_token="A1", lifetime=timedelta(minutes=30))
        assert credential.expires_at == NOW + timedelta(minutes=30)
        assert Credential(issued_at=NOW, access_token="A1").expires_at is None


class TestCredentialDefaults:
    def test_empty_credential(self):
        credential = Credential.empty()

        assert credential.access_token == ""
        assert credential.refresh_token is None
        assert credential.lifetime is None
        assert credential.is_expired() is False

    def test_is_immutable(self, fresh_credential):
        with pytest.raises(AttributeError):
            fresh_credential.access_token = "other"

    def test_repr_hides_secrets(self, fresh_credential):
        text = repr(fresh_credential)

        assert "A1" not in text
        assert "R1" not in text
        assert "***" in text


class TestApplyTokenResponse:
    """Credential.apply_token_response()."""

    def test_keeps_refresh_token_when_response_omits_it(self):
        credential = Credential(issued_at=NOW, access_token="A1", refresh_token="r1")

        updated = credential.apply_token_response(TokenResponse(access_token="A2", expires_in=3600))

        assert updated.refresh_token == "r1"
        assert updated.access_token == "A2"

    def test_keeps_refresh_token_when_response_has_empty_one(self):
        credential = Credential(issued_at=NOW, access_token="A1", refresh_token="r1")
        response = TokenResponse.model_validate({"access_token": "A2", "refresh_token": ""})

        assert credential.apply_token_response(response).refresh_token == "r1"

    def test_replaces_refresh_token_when_rotated(self):
        credential = Credential(issued_at=NOW, access_token="A1", refresh_token="r1")

        updated = credential.apply_token_response(
            TokenResponse(access_token="A2", refresh_token="r2")
        )

        assert updated.refresh_token == "r2"

    def test_resets_issued_at_and_lifetime(self):
        credential = Credential(
            issued_at=NOW - timedelta(hours=5),
            access_token="A1",
            lifetime=timedelta(hours=1),
        )

        before = datetime.now(UTC)
        updated = credential.apply_token_response(TokenResponse(access_token="A2", expires_in=1800))

        assert updated.issued_at >= before
        assert updated.lifetime == timedelta(seconds=1800)
        assert updated.is_expired() is False

    def test_missing_expires_in_clears_lifetime(self):
        credential = Credential(issued_at=NOW, access_token="A1", lifetime=timedelta(hours=1))

        updated = credential.apply_token_response(TokenResponse(access_token="A2"))

        assert updated.lifetime is None

    def test_does_not_mutate_original(self):
        credential = Credential(issued_at=NOW, access_token="A1", refresh_token="r1")
        credential.apply_token_response(TokenResponse(access_token="A2"))

        assert credential.access_token == "A1"
        assert credential.issued_at == NOW

    def test_from_token_response(self):
        credential = Credential.from_token_response(
            TokenResponse(access_token="A1", refresh_token="R1", expires_in=3600)
        )

        assert credential.access_token == "A1"
        assert credential.refresh_token == "R1"
        assert credential.lifetime == timedelta(hours=1)


class TestCredentialPersistence:
    """Document and JSON forms."""

    def test_round_trip_preserves_tokens_and_expiry(self):
        credential = Credential(
            issued_at=NOW - timedelta(seconds=100),
            access_token="A1",
            refresh_token="R1",
            lifetime=timedelta(seconds=3600),
        )

        restored = Credential.from_json(credential.to_json())

        assert restored == credential
        for offset in (0, 3500, 3700):
            now = NOW + timedelta(seconds=offset)
            assert restored.is_expired(now=now) == credential.is_expired(now=now)

    def test_round_trip_without_lifetime_or_refresh_token(self):
        credential = Credential(issued_at=NOW, access_token="A1")

        restored = Credential.from_document(credential.to_document())

        assert restored.refresh_token is None
        assert restored.lifetime is None
        assert restored.is_expired(now=NOW + timedelta(days=365)) is False

    def test_document_shape(self):
        credential = Credential(
            issued_at=NOW,
            access_token="A1",
            refresh_token="R1",
            lifetime=timedelta(seconds=3600),
        )

        document = json.loads(credential.to_json())

        assert document == {
            "requested_at": NOW.isoformat(),
            "access_token": "A1",
            "refresh_token": "R1",
            "expires_in": 3600,
        }

    def test_naive_timestamp_treated_as_utc(self):
        restored = Credential.from_document(
            {"requested_at": "2024-05-01T12:00:00", "access_token": "A1", "expires_in": 60}
        )

        assert restored.issued_at == NOW

    def test_missing_access_token_raises_serde_error(self):
        with pytest.raises(SerdeError, match="Invalid credential document"):
            Credential.from_document({"requested_at": NOW.isoformat()})

    def test_negative_expires_in_raises_serde_error(self):
        with pytest.raises(SerdeError):
            Credential.from_document(
                {"requested_at": NOW.isoformat(), "access_token": "A1", "expires_in": -5}
            )

    def test_invalid_json_raises_serde_error(self):
        with pytest.raises(SerdeError, match="not valid JSON"):
            Credential.from_json("{not json")

    def test_non_object_json_raises_serde_error(self):
        with pytest.raises(SerdeError, match="JSON object"):
            Credential.from_json("[1, 2, 3]")


class TestTokenResponse:
    def test_parses_standard_body(self):
        response = TokenResponse.model_validate_json(
            '{"access_token": "A1", "token_type": "Bearer", "expires_in": 3600, '
            '"refresh_token": "R1", "scope": "read write"}'
        )

        assert response.access_token == "A1"
        assert response.expires_in == 3600
        assert response.scope == "read write"

    def test_keeps_unknown_fields(self):
        response = TokenResponse.model_validate({"access_token": "A1", "hub_id": 42})

        assert response.model_extra == {"hub_id": 42}

    def test_rejects_empty_access_token(self):
        with pytest.raises(ValidationError):
            TokenResponse(access_token="")

    def test_rejects_missing_access_token(self):
        with pytest.raises(ValidationError):
            TokenResponse.model_validate({"token_type": "bearer"})


class TestPkceChallenge:
    def test_verifier_length_and_alphabet(self):
        pkce = PkceChallenge.generate()

        assert 43 <= len(pkce.verifier) <= 128
        assert set(pkce.verifier) <= set(PKCE_VERIFIER_ALPHABET)
        assert pkce.method == "S256"

    def test_challenge_is_unpadded_s256_of_verifier(self):
        pkce = PkceChallenge.generate()

        digest = hashlib.sha256(pkce.verifier.encode()).digest()
        expected = base64.urlsafe_b64encode(digest).decode().rstrip("=")
        assert pkce.challenge == expected
        assert "=" not in pkce.challenge

    def test_rfc7636_example(self):
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
        assert PkceChallenge.s256(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"

    def test_verifiers_are_random(self):
        assert PkceChallenge.generate().verifier != PkceChallenge.generate().verifier

    @pytest.mark.parametrize("length", [42, 129])
    def test_rejects_out_of_range_length(self, length):
        with pytest.raises(ValueError, match="between 43 and 128"):
            PkceChallenge.generate(length)


class TestAuthorizationRequest:
    def test_verify_state(self):
        request = AuthorizationRequest(authorization_url="https://x", csrf_token="abc")

        assert request.verify_state("abc") is True
        assert request.verify_state("abd") is False
        assert request.verify_state("") is False
        assert request.verify_state(None) is False
