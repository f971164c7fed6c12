"""HTTP transport implementations for sync and async clients."""

from __future__ import annotations

import abc
import json
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import httpx


@dataclass(frozen=True, slots=True)
class JSONBody:
    """JSON request body - automatically sets Content-Type to application/json."""

    data: Any

    def encode(self) -> bytes:
        return json.dumps(self.data, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


@dataclass(frozen=True, slots=True)
class BytesBody:
    """Raw bytes request body with explicit content type."""

    data: bytes
    content_type: str = "application/octet-stream"


RequestBody = JSONBody | BytesBody | None
QueryParams = Sequence[tuple[str, str]]


class BaseTransport(abc.ABC):
    """Abstract base class for HTTP transports.

    Requests are built first and sent later so that a signer can rewrite the
    pending request (headers or query string) in between.
    """

    def build(
        self,
        method: str,
        url: str,
        *,
        params: QueryParams | None = None,
        body: RequestBody = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Request:
        """Build a pending request without dispatching it."""
        request_headers = dict(headers or {})
        content: bytes | None = None
        if isinstance(body, JSONBody):
            content = body.encode()
            request_headers["Content-Type"] = "application/json"
        elif isinstance(body, BytesBody):
            content = body.data
            request_headers["Content-Type"] = body.content_type

        return httpx.Request(
            method,
            url,
            params=list(params) if params else None,
            content=content,
            headers=request_headers,
        )

    @abc.abstractmethod
    async def send(self, request: httpx.Request) -> httpx.Response:
        """Send a built request and return the response."""
        ...

    @abc.abstractmethod
    async def aclose(self) -> None:
        """Close any underlying resources."""
        ...


class BlockingTransport(BaseTransport):
    """
    Synchronous HTTP transport using httpx.Client.

    Methods are declared async but don't actually await anything,
    allowing them to be executed via iter_coroutine().
    """

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    async def send(self, request: httpx.Request) -> httpx.Response:
        """Send a synchronous HTTP request (wrapped as async for iter_coroutine)."""
        return self._client.send(request)

    async def aclose(self) -> None:
        self._client.close()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()


class AsyncTransport(BaseTransport):
    """Asynchronous HTTP transport using httpx.AsyncClient."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def send(self, request: httpx.Request) -> httpx.Response:
        """Send an asynchronous HTTP request."""
        return await self._client.send(request)

    async def aclose(self) -> None:
        await self._client.aclose()


__all__ = [
    "BaseTransport",
    "BlockingTransport",
    "AsyncTransport",
    "JSONBody",
    "BytesBody",
    "QueryParams",
    "RequestBody",
]
