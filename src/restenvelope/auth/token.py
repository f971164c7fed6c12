"""OAuth2 bearer-token authentication."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Any

import anyio
import httpx
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..errors import NoClientIdError, NoRefreshTokenError
from .storage import StoredToken, TokenStorage

TOKEN_ENDPOINT = "OAuth2:token"

Clock = Callable[[], float]


class TokenResponse(BaseModel):
    """Nude (non-enveloped) response of the OAuth2 token endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    access_token: str = Field(validation_alias=AliasChoices("access_token", "accessToken"))
    refresh_token: str | None = Field(
        default=None, validation_alias=AliasChoices("refresh_token", "refreshToken")
    )
    expires_in: float | None = Field(
        default=None, validation_alias=AliasChoices("expires_in", "expiresIn")
    )
    token_type: str | None = Field(
        default=None, validation_alias=AliasChoices("token_type", "tokenType")
    )


class TokenAuthentication:
    """Bearer token credential with optional refresh capability.

    Token state is replaced atomically under a lock and must only be read
    through `sign`, `snapshot` or the properties below. `expires_at` is
    expressed in the timebase of `clock` (seconds since the epoch for the
    default clock).

    `refresh_lock` serializes refreshes across every client sharing this
    credential, blocking or async. Async clients additionally queue on
    `async_refresh_lock` so only one task per event loop waits for it.
    """

    def __init__(
        self,
        access_token: str,
        refresh_token: str | None = None,
        expires_at: float | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
        *,
        clock: Clock = time.time,
        storage: TokenStorage | None = None,
    ) -> None:
        self._lock = threading.Lock()
        self._access_token = access_token
        self._refresh_token = refresh_token
        self._expires_at = expires_at
        self.client_id = client_id
        self.client_secret = client_secret
        self._clock = clock
        self._storage = storage
        self.refresh_lock = threading.Lock()
        self._async_refresh_lock: anyio.Lock | None = None

    @classmethod
    def from_storage(
        cls,
        storage: TokenStorage,
        *,
        client_id: str | None = None,
        client_secret: str | None = None,
        clock: Clock = time.time,
    ) -> TokenAuthentication | None:
        stored = storage.load()
        if stored is None:
            return None
        return cls(
            stored.access_token,
            stored.refresh_token,
            stored.expires_at,
            client_id,
            client_secret,
            clock=clock,
            storage=storage,
        )

    @property
    def access_token(self) -> str:
        with self._lock:
            return self._access_token

    @property
    def refresh_token(self) -> str | None:
        with self._lock:
            return self._refresh_token

    @property
    def expires_at(self) -> float | None:
        with self._lock:
            return self._expires_at

    def snapshot(self) -> StoredToken:
        with self._lock:
            return StoredToken(self._access_token, self._refresh_token, self._expires_at)

    @property
    def is_expired(self) -> bool:
        expires_at = self.expires_at
        if expires_at is None:
            return False
        return self._clock() >= expires_at

    @property
    def is_refreshable(self) -> bool:
        return self.refresh_token is not None and self.client_id is not None

    @property
    def async_refresh_lock(self) -> anyio.Lock:
        if self._async_refresh_lock is None:
            self._async_refresh_lock = anyio.Lock()
        return self._async_refresh_lock

    def sign(self, request: httpx.Request) -> httpx.Request:
        request.headers["Authorization"] = f"Bearer {self.access_token}"
        return request

    def update(
        self,
        access_token: str,
        refresh_token: str | None = None,
        expires_in: float | None = None,
    ) -> None:
        """Replace token state after a refresh.

        A missing refresh token keeps the previous one. A missing expiry
        leaves the new access token with no known expiry.
        """
        with self._lock:
            self._access_token = access_token
            if refresh_token is not None:
                self._refresh_token = refresh_token
            self._expires_at = None if expires_in is None else self._clock() + expires_in
            stored = StoredToken(self._access_token, self._refresh_token, self._expires_at)
        if self._storage is not None:
            self._storage.save(stored)

    def refresh_params(self) -> dict[str, Any]:
        """Body of the refresh_token grant.

        Raises:
            NoRefreshTokenError: No refresh token is held.
            NoClientIdError: No client id was configured.
        """
        refresh_token = self.refresh_token
        if refresh_token is None:
            raise NoRefreshTokenError()
        if self.client_id is None:
            raise NoClientIdError()
        params: dict[str, Any] = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "client_id": self.client_id,
        }
        if self.client_secret is not None:
            params["client_secret"] = self.client_secret
        return params

    def apply(self, response: TokenResponse) -> None:
        self.update(response.access_token, response.refresh_token, response.expires_in)


__all__ = ["TOKEN_ENDPOINT", "TokenAuthentication", "TokenResponse"]
