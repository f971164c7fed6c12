"""REST envelope clients (blocking and async)."""

from __future__ import annotations

import contextlib
import os
from collections.abc import AsyncIterator, Callable, Mapping
from typing import Any, TypeVar

import anyio
import anyio.to_thread

from ._core import _BaseRestClient, coerce_method, decode_response
from ._http import (
    AsyncTransport,
    BlockingTransport,
    ClientConfig,
    create_base_async_client,
    create_base_client,
    create_upload_async_client,
    create_upload_client,
    iter_coroutine,
)
from .auth import RestAuthentication, TokenAuthentication
from .methods import HTTPMethod
from .response import RestResponse
from .upload import ProgressCallback
from .upload import upload_data as _upload_data
from .upload import upload_file as _upload_file

T = TypeVar("T")

Params = Mapping[str, Any] | None


class RestClient(_BaseRestClient):
    """Synchronous REST envelope client.

    Example:
        >>> client = RestClient(ClientConfig(host="api.example.com"))
        >>> client.set_authentication(TokenAuthentication("access-token"))
        >>> user = client.request("User:get", params={"id": 123}, model=User)
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        authentication: RestAuthentication | None = None,
        debug: bool = False,
    ) -> None:
        self._config = config or ClientConfig()
        self._transport = BlockingTransport(create_base_client(self._config))
        self._upload_transport = BlockingTransport(create_upload_client(self._config))
        self._authentication = authentication
        self.debug = debug

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def authentication(self) -> RestAuthentication | None:
        return self._authentication

    def set_authentication(self, authentication: RestAuthentication | None) -> None:
        self._authentication = authentication

    def set_debug(self, enabled: bool) -> None:
        self.debug = enabled

    @contextlib.asynccontextmanager
    async def _refresh_guard(self, auth: TokenAuthentication) -> AsyncIterator[None]:
        with auth.refresh_lock:
            yield

    def request(
        self,
        endpoint: str,
        method: HTTPMethod | str = HTTPMethod.GET,
        params: Params = None,
        *,
        model: type[T] | None = None,
    ) -> RestResponse | T:
        """Perform an envelope request, optionally decoding `data` into `model`."""
        response = iter_coroutine(
            self._perform_request(endpoint, coerce_method(method), params)
        )
        return decode_response(response, model)

    def request_raw(
        self,
        endpoint: str,
        model: type[T],
        method: HTTPMethod | str = HTTPMethod.GET,
        params: Params = None,
    ) -> T:
        """Perform a request whose body is decoded directly (no envelope)."""
        return iter_coroutine(self._request_raw(endpoint, coerce_method(method), params, model))

    def request_with_retry(
        self,
        endpoint: str,
        method: HTTPMethod | str = HTTPMethod.GET,
        params: Params = None,
        *,
        model: type[T] | None = None,
    ) -> RestResponse | T:
        """Perform a request, refreshing an expired bearer token once."""
        response = iter_coroutine(
            self._request_with_retry(endpoint, coerce_method(method), params)
        )
        return decode_response(response, model)

    def auth_request(
        self,
        endpoint: str,
        method: HTTPMethod | str = HTTPMethod.GET,
        params: Params = None,
        *,
        model: type[T] | None = None,
    ) -> RestResponse | T:
        """Like `request`, but raises LoginRequiredError without authentication."""
        response = iter_coroutine(self._authenticated(endpoint, coerce_method(method), params))
        return decode_response(response, model)

    def auth_request_with_retry(
        self,
        endpoint: str,
        method: HTTPMethod | str = HTTPMethod.GET,
        params: Params = None,
        *,
        model: type[T] | None = None,
    ) -> RestResponse | T:
        response = iter_coroutine(
            self._request_with_retry(
                endpoint, coerce_method(method), params, require_auth=True
            )
        )
        return decode_response(response, model)

    # Optional auth is the default behaviour: sign when configured.
    opt_auth_request = request
    opt_auth_request_with_retry = request_with_retry

    def upload(
        self,
        endpoint: str,
        data: bytes,
        *,
        filename: str,
        mime_type: str,
        params: Params = None,
        progress: Callable[[float], None] | None = None,
        model: type[T] | None = None,
    ) -> RestResponse | T:
        """Upload in-memory data through the chunked upload protocol."""
        response = iter_coroutine(
            _upload_data(
                self,
                endpoint,
                data,
                filename=filename,
                mime_type=mime_type,
                params=params,
                progress=progress,
                await_progress=False,
            )
        )
        return decode_response(response, model)

    def upload_file(
        self,
        endpoint: str,
        path: str | os.PathLike[str],
        *,
        params: Params = None,
        progress: Callable[[float], None] | None = None,
        model: type[T] | None = None,
    ) -> RestResponse | T:
        """Upload a file; name, size, type and mtime are taken from the file."""
        response = iter_coroutine(
            _upload_file(self, endpoint, path, params=params, progress=progress, await_progress=False)
        )
        return decode_response(response, model)

    def close(self) -> None:
        iter_coroutine(self._transport.aclose())
        iter_coroutine(self._upload_transport.aclose())

    def __enter__(self) -> RestClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class AsyncRestClient(_BaseRestClient):
    """Asynchronous REST envelope client."""

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        authentication: RestAuthentication | None = None,
        debug: bool = False,
    ) -> None:
        self._config = config or ClientConfig()
        self._transport = AsyncTransport(create_base_async_client(self._config))
        self._upload_transport = AsyncTransport(create_upload_async_client(self._config))
        self._authentication = authentication
        self.debug = debug

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def authentication(self) -> RestAuthentication | None:
        return self._authentication

    def set_authentication(self, authentication: RestAuthentication | None) -> None:
        self._authentication = authentication

    def set_debug(self, enabled: bool) -> None:
        self.debug = enabled

    @contextlib.asynccontextmanager
    async def _refresh_guard(self, auth: TokenAuthentication) -> AsyncIterator[None]:
        async with auth.async_refresh_lock:
            # shielded so a cancelled waiter never leaves the lock acquired
            with anyio.CancelScope(shield=True):
                await anyio.to_thread.run_sync(auth.refresh_lock.acquire)
            try:
                yield
            finally:
                auth.refresh_lock.release()

    async def request(
        self,
        endpoint: str,
        method: HTTPMethod | str = HTTPMethod.GET,
        params: Params = None,
        *,
        model: type[T] | None = None,
    ) -> RestResponse | T:
        response = await self._perform_request(endpoint, coerce_method(method), params)
        return decode_response(response, model)

    async def request_raw(
        self,
        endpoint: str,
        model: type[T],
        method: HTTPMethod | str = HTTPMethod.GET,
        params: Params = None,
    ) -> T:
        return await self._request_raw(endpoint, coerce_method(method), params, model)

    async def request_with_retry(
        self,
        endpoint: str,
        method: HTTPMethod | str = HTTPMethod.GET,
        params: Params = None,
        *,
        model: type[T] | None = None,
    ) -> RestResponse | T:
        response = await self._request_with_retry(endpoint, coerce_method(method), params)
        return decode_response(response, model)

    async def auth_request(
        self,
        endpoint: str,
        method: HTTPMethod | str = HTTPMethod.GET,
        params: Params = None,
        *,
        model: type[T] | None = None,
    ) -> RestResponse | T:
        response = await self._authenticated(endpoint, coerce_method(method), params)
        return decode_response(response, model)

    async def auth_request_with_retry(
        self,
        endpoint: str,
        method: HTTPMethod | str = HTTPMethod.GET,
        params: Params = None,
        *,
        model: type[T] | None = None,
    ) -> RestResponse | T:
        response = await self._request_with_retry(
            endpoint, coerce_method(method), params, require_auth=True
        )
        return decode_response(response, model)

    opt_auth_request = request
    opt_auth_request_with_retry = request_with_retry

    async def upload(
        self,
        endpoint: str,
        data: bytes,
        *,
        filename: str,
        mime_type: str,
        params: Params = None,
        progress: ProgressCallback | None = None,
        model: type[T] | None = None,
    ) -> RestResponse | T:
        response = await _upload_data(
            self,
            endpoint,
            data,
            filename=filename,
            mime_type=mime_type,
            params=params,
            progress=progress,
        )
        return decode_response(response, model)

    async def upload_file(
        self,
        endpoint: str,
        path: str | os.PathLike[str],
        *,
        params: Params = None,
        progress: ProgressCallback | None = None,
        model: type[T] | None = None,
    ) -> RestResponse | T:
        response = await _upload_file(self, endpoint, path, params=params, progress=progress)
        return decode_response(response, model)

    async def aclose(self) -> None:
        await self._transport.aclose()
        await self._upload_transport.aclose()

    async def __aenter__(self) -> AsyncRestClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()


__all__ = ["AsyncRestClient", "RestClient"]
