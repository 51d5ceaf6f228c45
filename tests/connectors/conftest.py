"""Shared fixtures for connector tests."""

from unittest.mock import AsyncMock, patch

import pytest
from canned_responses import json_response

from authcore.oauth2.http import BearerSession
from config.config import ProviderSettings


@pytest.fixture
def settings():
    return ProviderSettings(
        client_id="client-id",
        client_secret="client-secret",
        redirect_url="http://127.0.0.1:8080",
    )


@pytest.fixture
def mock_get():
    """Patch BearerSession.get; set return_value or side_effect per test."""
    with patch.object(BearerSession, "get", AsyncMock(return_value=json_response({}))) as get:
        yield get


@pytest.fixture
def mock_request():
    """Patch BearerSession.request for non-GET calls."""
    with patch.object(BearerSession, "request", AsyncMock(return_value=json_response({}))) as request:
        yield request
