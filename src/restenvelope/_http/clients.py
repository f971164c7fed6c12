"""Client factory functions for creating pre-configured httpx clients."""

from __future__ import annotations

import httpx

from .config import ClientConfig


def _limits(config: ClientConfig) -> httpx.Limits:
    return httpx.Limits(
        max_connections=config.max_connections_per_host,
        max_keepalive_connections=config.max_connections_per_host,
    )


def _timeout(request_timeout: float, resource_timeout: float) -> httpx.Timeout:
    """Per-operation timeout; the pool wait is bounded by the resource timeout."""
    return httpx.Timeout(request_timeout, pool=resource_timeout)


def create_base_client(config: ClientConfig) -> httpx.Client:
    """Create a sync httpx client for ordinary envelope requests.

    Auth is applied per request by the active signer, never via hooks.

    Args:
        config: Client configuration supplying timeouts and pool limits.

    Returns:
        An httpx.Client with the regular request deadline.
    """
    return httpx.Client(
        timeout=_timeout(config.request_timeout, config.resource_timeout),
        limits=_limits(config),
    )


def create_base_async_client(config: ClientConfig) -> httpx.AsyncClient:
    """Create an async httpx client for ordinary envelope requests."""
    return httpx.AsyncClient(
        timeout=_timeout(config.request_timeout, config.resource_timeout),
        limits=_limits(config),
    )


def create_upload_client(config: ClientConfig) -> httpx.Client:
    """Create a sync httpx client for chunk transfers (longer deadlines)."""
    return httpx.Client(
        timeout=_timeout(config.upload_request_timeout, config.upload_resource_timeout),
        limits=_limits(config),
    )


def create_upload_async_client(config: ClientConfig) -> httpx.AsyncClient:
    """Create an async httpx client for chunk transfers (longer deadlines)."""
    return httpx.AsyncClient(
        timeout=_timeout(config.upload_request_timeout, config.upload_resource_timeout),
        limits=_limits(config),
    )


__all__ = [
    "create_base_client",
    "create_base_async_client",
    "create_upload_client",
    "create_upload_async_client",
]
