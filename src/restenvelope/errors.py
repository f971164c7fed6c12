from __future__ import annotations

from typing import Any


class RestError(Exception):
    """Base class for every failure raised by the REST pipeline.

    Errors of the same kind carrying the same fields compare equal, which
    lets callers and tests match on them directly.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def _fields(self) -> tuple[Any, ...]:
        return ()

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self._fields() == other._fields()  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self), self._fields()))

    @property
    def status_code(self) -> int | None:
        return None

    @property
    def is_permission_denied(self) -> bool:
        return self.status_code == 403

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_authentication_error(self) -> bool:
        return self.status_code == 401


class InvalidURLError(RestError):
    def __init__(self, url: str) -> None:
        super().__init__(f"Invalid URL: {url}")
        self.url = url

    def _fields(self) -> tuple[Any, ...]:
        return (self.url,)


class InvalidResponseError(RestError):
    def __init__(self) -> None:
        super().__init__("Invalid response from server")


class NoDataError(RestError):
    def __init__(self) -> None:
        super().__init__("No data in response")


class HTTPError(RestError):
    def __init__(self, status_code: int, message: str | None = None) -> None:
        if message is not None:
            text = f"HTTP {status_code}: {message}"
        else:
            text = f"HTTP error {status_code}"
        super().__init__(text)
        self._status_code = status_code
        self.detail = message

    @property
    def status_code(self) -> int:
        return self._status_code

    def _fields(self) -> tuple[Any, ...]:
        return (self._status_code, self.detail)


class APIError(RestError):
    """Error envelope returned by the server (`result: "error"`)."""

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        extra: str | None = None,
        request_id: str | None = None,
    ) -> None:
        text = message
        if code is not None:
            text = f"[{code}] {text}"
        if extra is not None:
            text = f"{text} ({extra})"
        super().__init__(text)
        self.error = message
        self.code = code
        self.extra = extra
        self.request_id = request_id

    @property
    def status_code(self) -> int | None:
        return self.code

    def _fields(self) -> tuple[Any, ...]:
        return (self.error, self.code, self.extra, self.request_id)


class TokenExpiredError(RestError):
    def __init__(self) -> None:
        super().__init__("Authentication token has expired")

    @property
    def is_authentication_error(self) -> bool:
        return True


class LoginRequiredError(RestError):
    def __init__(self) -> None:
        super().__init__("Login required")

    @property
    def is_authentication_error(self) -> bool:
        return True


class RedirectError(RestError):
    """Redirect envelope (`result: "redirect"`), usually meaning login is required."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Redirect to: {url}")
        self.url = url

    def _fields(self) -> tuple[Any, ...]:
        return (self.url,)


class UploadFailedError(RestError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"Upload failed: {reason}")
        self.reason = reason

    def _fields(self) -> tuple[Any, ...]:
        return (self.reason,)


class UploadStalledError(RestError):
    # Reserved: no progress watchdog raises this yet.
    def __init__(self) -> None:
        super().__init__("Upload stalled (no progress)")


class DecodingError(RestError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"Decoding error: {reason}")
        self.reason = reason

    def _fields(self) -> tuple[Any, ...]:
        return (self.reason,)


class NetworkError(RestError):
    """Transport-level fault (connectivity, timeout). Raised `from` the cause."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Network error: {cause}")
        self.cause = cause

    def __eq__(self, other: object) -> bool:
        # underlying faults are not comparable
        return False

    def __hash__(self) -> int:
        return id(self)


class NoRefreshTokenError(RestError):
    def __init__(self) -> None:
        super().__init__("No refresh token available")

    @property
    def is_authentication_error(self) -> bool:
        return True


class NoClientIdError(RestError):
    def __init__(self) -> None:
        super().__init__("No client ID for token refresh")

    @property
    def is_authentication_error(self) -> bool:
        return True


__all__ = [
    "RestError",
    "InvalidURLError",
    "InvalidResponseError",
    "NoDataError",
    "HTTPError",
    "APIError",
    "TokenExpiredError",
    "LoginRequiredError",
    "RedirectError",
    "UploadFailedError",
    "UploadStalledError",
    "DecodingError",
    "NetworkError",
    "NoRefreshTokenError",
    "NoClientIdError",
]
