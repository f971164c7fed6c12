"""Fixtures for integration tests using respx mocking."""

from collections.abc import Iterator

import pytest
import respx

from restenvelope import ClientConfig

API_HOST = "api.example.com"
REST_BASE = f"https://{API_HOST}/_special/rest/"
UPLOAD_BASE = "https://upload.example.com"


@pytest.fixture
def router() -> Iterator[respx.MockRouter]:
    """Intercept every httpx transport; unmatched requests fail the test."""
    with respx.mock(assert_all_called=False, assert_all_mocked=True) as mock:
        yield mock


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(host=API_HOST, client_id="client-1")


@pytest.fixture
def token_response() -> dict:
    """Nude body of a successful OAuth2:token refresh."""
    return {
        "access_token": "new-access",
        "refresh_token": "new-refresh",
        "expires_in": 3600,
        "token_type": "Bearer",
    }


@pytest.fixture
def upload_negotiation() -> dict:
    """Envelope data returned by the upload negotiation step."""
    return {
        "PUT": f"{UPLOAD_BASE}/put/upl-1",
        "Complete": "Cloud/Aws/Bucket/Upload/upl-1:handleComplete",
        "Blocksize": 4,
    }
