"""
pytest configuration for connector tests.

Adds src directory to Python path for imports and provides shared fixtures.
"""

import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))

from authcore.logging import clear_log_context  # noqa: E402
from authcore.oauth2 import Credential, ProviderProfile  # noqa: E402


@pytest.fixture(autouse=True)
def _clear_log_context():
    yield
    clear_log_context()


@pytest.fixture
def profile():
    """Minimal confidential-client profile."""
    return ProviderProfile(
        name="api.example.com",
        auth_url="https://example.com/oauth/authorize",
        token_url="https://example.com/oauth/token",
        client_id="client-id",
        client_secret="client-secret",
        redirect_url="http://127.0.0.1:8080",
        revoke_url="https://example.com/oauth/revoke",
    )


@pytest.fixture
def fresh_credential():
    """Credential issued now, valid for an hour."""
    return Credential(
        issued_at=datetime.now(UTC),
        access_token="A1",
        refresh_token="R1",
        lifetime=timedelta(hours=1),
    )


@pytest.fixture
def expired_credential():
    """Credential issued two hours ago with a one-hour lifetime."""
    return Credential(
        issued_at=datetime.now(UTC) - timedelta(hours=2),
        access_token="A1",
        refresh_token="R1",
        lifetime=timedelta(hours=1),
    )
