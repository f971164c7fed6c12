"""HTTP configuration for REST envelope clients."""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field

DEFAULT_SCHEME = "https"
DEFAULT_HOST = "www.atonline.com"
DEFAULT_REST_PATH = "/_special/rest/"
DEFAULT_TIMEOUT = 60.0
DEFAULT_RESOURCE_TIMEOUT = 300.0
DEFAULT_UPLOAD_TIMEOUT = 300.0
DEFAULT_UPLOAD_RESOURCE_TIMEOUT = 3600.0
DEFAULT_MAX_CONNECTIONS_PER_HOST = 50


@dataclass(frozen=True)
class ClientConfig:
    """Configuration for RestClient."""

    scheme: str = DEFAULT_SCHEME
    host: str = DEFAULT_HOST
    rest_path: str = DEFAULT_REST_PATH
    client_id: str | None = None
    context_params: dict[str, str] = field(default_factory=dict)
    request_timeout: float = DEFAULT_TIMEOUT
    resource_timeout: float = DEFAULT_RESOURCE_TIMEOUT
    upload_request_timeout: float = DEFAULT_UPLOAD_TIMEOUT
    upload_resource_timeout: float = DEFAULT_UPLOAD_RESOURCE_TIMEOUT
    max_connections_per_host: int = DEFAULT_MAX_CONNECTIONS_PER_HOST

    @classmethod
    def from_env(cls) -> ClientConfig:
        """Build a configuration from RESTENVELOPE_* environment variables."""
        return cls(
            scheme=os.getenv("RESTENVELOPE_SCHEME") or DEFAULT_SCHEME,
            host=os.getenv("RESTENVELOPE_HOST") or DEFAULT_HOST,
            client_id=os.getenv("RESTENVELOPE_CLIENT_ID") or None,
        )

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}"

    def build_url(self, endpoint: str) -> str:
        return self.base_url + self.rest_path + endpoint

    def with_context(
        self, *, language: str | None = None, timezone: str | None = None
    ) -> ClientConfig:
        """Return a copy that sends language/timezone context with every request."""
        params = dict(self.context_params)
        if language is not None:
            params["_ctx[l]"] = language
        if timezone is not None:
            params["_ctx[t]"] = timezone
        return dataclasses.replace(self, context_params=params)

    def with_client_id(self, client_id: str) -> ClientConfig:
        return dataclasses.replace(self, client_id=client_id)


__all__ = [
    "ClientConfig",
    "DEFAULT_HOST",
    "DEFAULT_REST_PATH",
    "DEFAULT_SCHEME",
    "DEFAULT_TIMEOUT",
    "DEFAULT_UPLOAD_TIMEOUT",
]
