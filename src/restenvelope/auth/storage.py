from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class StoredToken:
    access_token: str
    refresh_token: str | None = None
    expires_at: float | None = None


class TokenStorage(Protocol):
    """Persistence hook for bearer credentials. Only the interface is defined
    here; applications supply keychain or file backed implementations.
    """

    def save(self, token: StoredToken) -> None: ...

    def load(self) -> StoredToken | None: ...

    def clear(self) -> None: ...


class InMemoryTokenStorage:
    """In-memory token storage (for testing)."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._token: StoredToken | None = None

    def save(self, token: StoredToken) -> None:
        with self._lock:
            self._token = token

    def load(self) -> StoredToken | None:
        with self._lock:
            return self._token

    def clear(self) -> None:
        with self._lock:
            self._token = None


__all__ = ["InMemoryTokenStorage", "StoredToken", "TokenStorage"]
