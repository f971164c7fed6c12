"""API key authentication using Ed25519 request signing.

Signed requests carry four extra query parameters::

    _key    key identifier
    _time   unix timestamp in seconds
    _nonce  random token
    _sign   base64url(Ed25519(METHOD "\\n" PATH?QUERY "\\n" BODY_HASH))

PATH?QUERY is taken after `_key`, `_time` and `_nonce` are appended but
before `_sign` is. BODY_HASH is the base64url SHA-256 of the body, or the
empty string when there is no body.
"""

from __future__ import annotations

import hashlib
import time
import uuid
from collections.abc import Callable
from urllib.parse import quote, urlencode

import httpx
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from ..errors import RestError
from ..utils import b64_decode_lenient, b64url_encode

KEY_LENGTH = 32


class APIKeyError(RestError):
    """Errors specific to API key authentication."""

    def __init__(self, message: str, *, expected: int | None = None, got: int | None = None):
        super().__init__(message)
        self.expected = expected
        self.got = got

    def _fields(self) -> tuple[object, ...]:
        return (self.message, self.expected, self.got)

    @classmethod
    def invalid_secret(cls) -> APIKeyError:
        return cls("Invalid API key secret: must be base64 or base64url encoded")

    @classmethod
    def invalid_key_length(cls, expected: int, got: int) -> APIKeyError:
        return cls(
            f"Invalid key length: expected {expected} bytes, got {got}",
            expected=expected,
            got=got,
        )

    @classmethod
    def signing_failed(cls) -> APIKeyError:
        return cls("Failed to sign request")


def _default_nonce() -> str:
    return str(uuid.uuid4())


def body_hash(body: bytes | None) -> str:
    if not body:
        return ""
    return b64url_encode(hashlib.sha256(body).digest())


def signature_input(method: str, url: httpx.URL, body: bytes | None) -> str:
    path_and_query = url.path
    query = url.query.decode("ascii")
    if query:
        path_and_query += "?" + query
    return f"{method}\n{path_and_query}\n{body_hash(body)}"


class APIKeyAuthentication:
    """Sign requests with an Ed25519 key. Immutable after construction."""

    def __init__(
        self,
        key_id: str,
        secret: str,
        *,
        clock: Callable[[], float] = time.time,
        nonce_factory: Callable[[], str] = _default_nonce,
    ) -> None:
        try:
            raw = b64_decode_lenient(secret)
        except ValueError as exc:
            raise APIKeyError.invalid_secret() from exc
        self._init(key_id, raw, clock, nonce_factory)

    @classmethod
    def from_private_bytes(
        cls,
        key_id: str,
        private_key: bytes,
        *,
        clock: Callable[[], float] = time.time,
        nonce_factory: Callable[[], str] = _default_nonce,
    ) -> APIKeyAuthentication:
        self = cls.__new__(cls)
        self._init(key_id, private_key, clock, nonce_factory)
        return self

    def _init(
        self,
        key_id: str,
        raw: bytes,
        clock: Callable[[], float],
        nonce_factory: Callable[[], str],
    ) -> None:
        if len(raw) != KEY_LENGTH:
            raise APIKeyError.invalid_key_length(KEY_LENGTH, len(raw))
        self._key_id = key_id
        self._private_key = Ed25519PrivateKey.from_private_bytes(raw)
        self._clock = clock
        self._nonce_factory = nonce_factory

    @property
    def key_id(self) -> str:
        return self._key_id

    @property
    def public_key(self) -> Ed25519PublicKey:
        return self._private_key.public_key()

    def sign(self, request: httpx.Request) -> httpx.Request:
        timestamp = int(self._clock())
        nonce = self._nonce_factory()

        url = _append_query(
            request.url, [("_key", self._key_id), ("_time", str(timestamp)), ("_nonce", nonce)]
        )
        message = signature_input(request.method, url, request.content)
        try:
            signature = self._private_key.sign(message.encode("utf-8"))
        except Exception as exc:
            raise APIKeyError.signing_failed() from exc

        request.url = _append_query(url, [("_sign", b64url_encode(signature))])
        return request


def _append_query(url: httpx.URL, items: list[tuple[str, str]]) -> httpx.URL:
    # Append textually so the signed query is a byte-exact prefix of the sent one.
    query = url.query.decode("ascii")
    addition = urlencode(items, quote_via=quote)
    return url.copy_with(query=(f"{query}&{addition}" if query else addition).encode("ascii"))


__all__ = [
    "APIKeyAuthentication",
    "APIKeyError",
    "body_hash",
    "signature_input",
]
