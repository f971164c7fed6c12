from __future__ import annotations

from typing import Protocol, runtime_checkable

import httpx


@runtime_checkable
class RestAuthentication(Protocol):
    """Request signer. Implementations only rewrite the pending request; they
    never perform network I/O and fail only on malformed input.
    """

    def sign(self, request: httpx.Request) -> httpx.Request: ...


__all__ = ["RestAuthentication"]
