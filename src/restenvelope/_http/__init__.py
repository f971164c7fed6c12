"""Shared HTTP infrastructure for REST envelope clients."""

from .clients import (
    create_base_async_client,
    create_base_client,
    create_upload_async_client,
    create_upload_client,
)
from .config import DEFAULT_HOST, DEFAULT_REST_PATH, DEFAULT_TIMEOUT, ClientConfig
from .iter_coroutine import iter_coroutine
from .transport import (
    AsyncTransport,
    BaseTransport,
    BlockingTransport,
    BytesBody,
    JSONBody,
    QueryParams,
    RequestBody,
)

__all__ = [
    "ClientConfig",
    "DEFAULT_HOST",
    "DEFAULT_REST_PATH",
    "DEFAULT_TIMEOUT",
    "iter_coroutine",
    "BaseTransport",
    "BlockingTransport",
    "AsyncTransport",
    "JSONBody",
    "BytesBody",
    "QueryParams",
    "RequestBody",
    "create_base_client",
    "create_base_async_client",
    "create_upload_client",
    "create_upload_async_client",
]
