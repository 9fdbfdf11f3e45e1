"""HTTP-level test fixtures.

Builds a fresh app per test (isolated store, limiters and dedup set) and
wraps it in TestClient. Time-dependent tests use freezegun; the app's
state objects read time.time() so frozen time applies to them.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from donation_bridge.config import Settings
from donation_bridge.serve import create_app
from donation_bridge.webhooks.verification import compute_signature

TEST_API_KEY = "test-api-key"
TEST_WEBHOOK_SECRET = "test-webhook-secret"


@pytest.fixture
def settings():
    """Settings with no signing secret (verification skipped)."""
    return Settings(api_key=TEST_API_KEY, webhook_secret="", _env_file=None)


@pytest.fixture
def signed_settings():
    """Settings with a signing secret configured."""
    return Settings(api_key=TEST_API_KEY, webhook_secret=TEST_WEBHOOK_SECRET, _env_file=None)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def signed_client(signed_settings):
    with TestClient(create_app(signed_settings), raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def api_headers():
    return {"X-Api-Key": TEST_API_KEY}


@pytest.fixture
def sign():
    """Signature header for a payload under TEST_WEBHOOK_SECRET."""

    def _sign(payload) -> dict[str, str]:
        return {"X-Webhook-Signature": compute_signature(payload, TEST_WEBHOOK_SECRET)}

    return _sign
