"""Tests for ProviderProfile and the token error body parsers."""

import pytest

from authcore.errors import BadRequest
from authcore.oauth2.exceptions import InvalidConfigurationError
from authcore.oauth2.models import AuthorizeOptions
from authcore.oauth2.profile import (
    ProviderProfile,
    parser_error_message,
    raw_text_error_message,
    standard_error_message,
)


def _make_profile(**overrides):
    defaults = {
        "name": "api.example.com",
        "auth_url": "https://example.com/authorize",
        "token_url": "https://example.com/token",
        "client_id": "cid",
    }
    defaults.update(overrides)
    return ProviderProfile(**defaults)


class TestProfileValidation:
    @pytest.mark.parametrize("missing", ["name", "auth_url", "token_url", "client_id"])
    def test_required_fields(self, missing):
        with pytest.raises(InvalidConfigurationError, match=missing):
            _make_profile(**{missing: ""})

    def test_invalid_configuration_is_bad_request(self):
        with pytest.raises(BadRequest):
            _make_profile(client_id="")

    def test_with_overrides_returns_copy(self):
        profile = _make_profile()
        updated = profile.with_overrides(pkce=True)

        assert updated.pkce is True
        assert profile.pkce is None
        assert updated.client_id == profile.client_id


class TestProfileParameters:
    def test_authorize_params_profile_first(self):
        profile = _make_profile(extra_authorize_params=(("duration", "permanent"),))
        options = AuthorizeOptions(extra_params=[("prompt", "consent")])

        assert profile.authorize_params(options) == [("duration", "permanent"), ("prompt", "consent")]

    def test_token_params_without_body_credentials(self):
        profile = _make_profile(client_secret="secret", extra_token_params=(("audience", "x"),))

        assert profile.token_params() == [("audience", "x")]

    def test_token_params_with_body_credentials(self):
        profile = _make_profile(client_secret="secret", credentials_in_body=True)

        assert profile.token_params() == [("client_id", "cid"), ("client_secret", "secret")]

    def test_body_credentials_without_secret(self):
        profile = _make_profile(credentials_in_body=True)

        assert profile.token_params() == [("client_id", "cid")]

    @pytest.mark.parametrize(
        "profile_pkce,requested,expected",
        [
            (None, False, False),
            (None, True, True),
            (True, False, True),
            (False, True, False),
        ],
    )
    def test_uses_pkce(self, profile_pkce, requested, expected):
        profile = _make_profile(pkce=profile_pkce)

        assert profile.uses_pkce(AuthorizeOptions(pkce=requested)) is expected

    def test_basic_auth_requires_secret(self):
        assert _make_profile().uses_basic_auth is False
        assert _make_profile(client_secret="secret").uses_basic_auth is True
        assert _make_profile(client_secret="secret", basic_auth=False).uses_basic_auth is False


class TestErrorBodyParsers:
    def test_standard_error_with_description(self):
        raw = b'{"error": "invalid_grant", "error_description": "Token expired"}'
        assert standard_error_message(raw) == "invalid_grant: Token expired"

    def test_standard_error_without_description(self):
        assert standard_error_message(b'{"error": "invalid_client"}') == "invalid_client"

    @pytest.mark.parametrize(
        "raw",
        [b"Bad refresh token", b'{"status": "BAD_REFRESH_TOKEN"}', b"[1]", b"\xff\xfe"],
    )
    def test_non_standard_bodies_return_none(self, raw):
        assert standard_error_message(raw) is None

    def test_raw_text_uses_body(self):
        error = ValueError("parse failed")
        assert raw_text_error_message(b"  missing or unknown client id \n", error) == (
            "missing or unknown client id"
        )

    def test_raw_text_falls_back_to_error(self):
        error = ValueError("parse failed")
        assert raw_text_error_message(b"", error) == "parse failed"
        assert raw_text_error_message(b"\xff\xfe", error) == "parse failed"

    def test_parser_error_ignores_body(self):
        assert parser_error_message(b"body text", ValueError("boom")) == "boom"

    def test_describe_error_prefers_standard_shape(self):
        profile = _make_profile(error_body_parser=parser_error_message)

        raw = b'{"error": "invalid_grant", "error_description": "revoked"}'
        assert profile.describe_error(raw, ValueError("x")) == "invalid_grant: revoked"
        assert profile.describe_error(b"plain", ValueError("x")) == "x"
