"""Core request pipeline shared by the blocking and async clients."""

from __future__ import annotations

import abc
import json
from collections.abc import Mapping
from contextlib import AbstractAsyncContextManager
from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from ._http import BaseTransport, BytesBody, ClientConfig, JSONBody, RequestBody
from .auth import TOKEN_ENDPOINT, RestAuthentication, TokenAuthentication, TokenResponse
from .errors import (
    DecodingError,
    HTTPError,
    InvalidURLError,
    LoginRequiredError,
    NetworkError,
    RedirectError,
    TokenExpiredError,
)
from .methods import HTTPMethod
from .response import RestResponse
from .utils import debug, preview

T = TypeVar("T")

REST_HTTP_HEADER = "Sec-Rest-Http"
CLIENT_ID_HEADER = "Sec-ClientId"
REQUEST_ID_HEADER = "X-Request-Id"
PARAMS_QUERY_KEY = "_"


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


def parse_error_message(content: bytes) -> str | None:
    """Best-effort error text from a non-2xx body that is not an envelope."""
    try:
        parsed = json.loads(content)
    except (ValueError, UnicodeDecodeError):
        parsed = None
    if isinstance(parsed, dict):
        for key in ("error", "error_description", "message"):
            value = parsed.get(key)
            if isinstance(value, str):
                return value
        return None
    if not content:
        return None
    return content.decode("utf-8", errors="replace")


def _is_failure_envelope(content: bytes) -> bool:
    """True for an error or redirect envelope; a non-2xx success envelope is not one."""
    try:
        parsed = json.loads(content)
    except (ValueError, UnicodeDecodeError):
        return False
    return isinstance(parsed, dict) and parsed.get("result") in ("error", "redirect")


def coerce_method(method: HTTPMethod | str) -> HTTPMethod:
    if isinstance(method, HTTPMethod):
        return method
    return HTTPMethod(method.upper())


class _BaseRestClient(abc.ABC):
    """
    Shared business logic for envelope requests, refresh and uploads.

    All methods are async and go through the abstract transports. The
    blocking client plugs in non-suspending transports and drives these
    coroutines with iter_coroutine().
    """

    _config: ClientConfig
    _transport: BaseTransport
    _upload_transport: BaseTransport
    _authentication: RestAuthentication | None
    debug: bool

    @abc.abstractmethod
    def _refresh_guard(self, auth: TokenAuthentication) -> AbstractAsyncContextManager[Any]:
        """Lock serializing refreshes of one credential."""
        ...

    # -- request building -----------------------------------------------

    def _build_request(
        self,
        endpoint: str,
        method: HTTPMethod,
        params: Mapping[str, Any] | None,
    ) -> httpx.Request:
        query: list[tuple[str, str]] = list(self._config.context_params.items())
        if method.encodes_params_in_url and params is not None:
            query.append(
                (PARAMS_QUERY_KEY, JSONBody(dict(params)).encode().decode("utf-8"))
            )

        headers = {REST_HTTP_HEADER: "false"}
        if self._config.client_id:
            headers[CLIENT_ID_HEADER] = self._config.client_id

        body = None
        if method.encodes_params_in_body and params is not None:
            body = JSONBody(dict(params))

        request = self._build(
            self._transport,
            method.value,
            self._config.build_url(endpoint),
            label=endpoint,
            query=query,
            body=body,
            headers=headers,
        )
        return self._sign(request)

    def _build(
        self,
        transport: BaseTransport,
        method: str,
        url: str,
        *,
        label: str,
        query: list[tuple[str, str]] | None = None,
        body: RequestBody = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Request:
        try:
            request = transport.build(method, url, params=query, body=body, headers=headers)
        except (httpx.InvalidURL, ValueError) as exc:
            raise InvalidURLError(label) from exc
        if not request.url.host or request.url.scheme not in ("http", "https"):
            raise InvalidURLError(label)
        return request

    def _sign(self, request: httpx.Request) -> httpx.Request:
        auth = self._authentication
        if auth is None:
            return request
        return auth.sign(request)

    async def _dispatch(self, transport: BaseTransport, request: httpx.Request) -> httpx.Response:
        debug(f"{request.method} {request.url}", enabled=self.debug)
        try:
            response = await transport.send(request)
        except httpx.TransportError as exc:
            raise NetworkError(exc) from exc
        content = response.content
        mark = "OK" if _is_success(response.status_code) else "FAIL"
        debug(f"{mark} {response.status_code} {preview(content)}", enabled=self.debug)
        return response

    # -- envelope requests ----------------------------------------------

    async def _perform_request(
        self,
        endpoint: str,
        method: HTTPMethod,
        params: Mapping[str, Any] | None,
    ) -> RestResponse:
        debug(f"REST: {method.value} {endpoint} params={params}", enabled=self.debug)
        request = self._build_request(endpoint, method, params)
        response = await self._dispatch(self._transport, request)

        request_id = response.headers.get(REQUEST_ID_HEADER)
        content = response.content
        if not _is_success(response.status_code) and not _is_failure_envelope(content):
            raise HTTPError(response.status_code, parse_error_message(content))

        return RestResponse.parse(
            content,
            response.status_code,
            request_id=request_id,
            debug_enabled=self.debug,
        )

    async def _request_raw(
        self,
        endpoint: str,
        method: HTTPMethod,
        params: Mapping[str, Any] | None,
        model: type[T],
    ) -> T:
        """Request an endpoint whose body is not wrapped in an envelope."""
        request = self._build_request(endpoint, method, params)
        response = await self._dispatch(self._transport, request)
        content = response.content
        if not _is_success(response.status_code):
            raise HTTPError(response.status_code, parse_error_message(content))
        try:
            return TypeAdapter(model).validate_json(content)
        except ValidationError as exc:
            raise DecodingError(str(exc)) from exc

    # -- refresh / retry ------------------------------------------------

    async def _refresh_token(self, auth: TokenAuthentication, stale_access_token: str) -> None:
        """Refresh `auth` unless a concurrent caller already replaced the token."""
        refresh_params = auth.refresh_params()
        async with self._refresh_guard(auth):
            if auth.access_token != stale_access_token:
                debug("token already refreshed, skipping", enabled=self.debug)
                return
            token = await self._request_raw(
                TOKEN_ENDPOINT, HTTPMethod.POST, refresh_params, TokenResponse
            )
            auth.apply(token)
            debug("token refreshed", enabled=self.debug)

    async def _request_with_retry(
        self,
        endpoint: str,
        method: HTTPMethod,
        params: Mapping[str, Any] | None,
        *,
        require_auth: bool = False,
    ) -> RestResponse:
        """Run a request, refreshing the bearer credential at most once.

        States: initial attempt, then (after one refresh) a single retry whose
        outcome is returned as is.
        """
        auth = self._authentication
        if auth is None and require_auth:
            raise LoginRequiredError()
        if not isinstance(auth, TokenAuthentication):
            return await self._perform_request(endpoint, method, params)

        refreshed = False
        if auth.is_expired and auth.is_refreshable:
            await self._refresh_token(auth, auth.access_token)
            refreshed = True

        attempted_token = auth.access_token
        try:
            return await self._perform_request(endpoint, method, params)
        except (TokenExpiredError, RedirectError) as exc:
            if refreshed:
                raise
            debug(f"{type(exc).__name__}, refreshing token", enabled=self.debug)
            await self._refresh_token(auth, attempted_token)

        return await self._perform_request(endpoint, method, params)

    async def _authenticated(
        self,
        endpoint: str,
        method: HTTPMethod,
        params: Mapping[str, Any] | None,
    ) -> RestResponse:
        if self._authentication is None:
            raise LoginRequiredError()
        return await self._perform_request(endpoint, method, params)

    # -- chunk transfer -------------------------------------------------

    async def _put_chunk(
        self,
        url: str,
        data: bytes,
        start: int,
        end: int,
        mime_type: str,
    ) -> None:
        request = self._build(
            self._upload_transport,
            "PUT",
            url,
            label=url,
            body=BytesBody(data, mime_type),
            headers={"Content-Range": f"bytes {start}-{end}/*"},
        )
        request = self._sign(request)
        response = await self._dispatch(self._upload_transport, request)
        if not _is_success(response.status_code):
            raise HTTPError(response.status_code, parse_error_message(response.content))


def decode_response(response: RestResponse, model: type[T] | None) -> RestResponse | T:
    if model is None:
        return response
    return response.decode(model)


__all__ = [
    "CLIENT_ID_HEADER",
    "PARAMS_QUERY_KEY",
    "REQUEST_ID_HEADER",
    "REST_HTTP_HEADER",
    "coerce_method",
    "decode_response",
    "parse_error_message",
]
