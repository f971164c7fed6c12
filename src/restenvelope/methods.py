"""HTTP request methods and where each one carries its parameters."""

from __future__ import annotations

from enum import Enum


class HTTPMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    @property
    def encodes_params_in_url(self) -> bool:
        """GET/HEAD/OPTIONS send params as a JSON value in the `_` query key."""
        return self in (HTTPMethod.GET, HTTPMethod.HEAD, HTTPMethod.OPTIONS)

    @property
    def encodes_params_in_body(self) -> bool:
        """POST/PUT/PATCH send params as a JSON body. DELETE sends neither."""
        return self in (HTTPMethod.POST, HTTPMethod.PUT, HTTPMethod.PATCH)


__all__ = ["HTTPMethod"]
