"""Shared fixtures for all tests."""

from collections.abc import Generator

import pytest


@pytest.fixture
def mock_env_clear(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear environment variables that change client behaviour."""
    for var in ("RESTENVELOPE_HOST", "RESTENVELOPE_SCHEME", "RESTENVELOPE_CLIENT_ID", "DEBUG"):
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture
def private_key_bytes() -> bytes:
    """Fixed 32-byte Ed25519 seed for reproducible signatures."""
    return bytes(range(32))


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
