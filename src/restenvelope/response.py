"""Envelope parsing for REST responses.

Every non-nude endpoint wraps its payload in the same JSON object::

    {"result": "success" | "error" | "redirect", "data": ..., "error": ...,
     "code": ..., "extra": ..., "token": ..., "redirect_url": ...,
     "paging": {...}, "access": {...}}

`RestResponse.parse` classifies that object. Error and redirect envelopes
never produce a `RestResponse`; they raise the matching `RestError`.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar, Union

from pydantic import TypeAdapter, ValidationError

from .errors import (
    APIError,
    DecodingError,
    InvalidResponseError,
    NoDataError,
    RedirectError,
    TokenExpiredError,
)
from .utils import debug, preview

JSONValue = Union[None, bool, int, float, str, list["JSONValue"], dict[str, "JSONValue"]]

T = TypeVar("T")

RESULT_SUCCESS = "success"
RESULT_ERROR = "error"
RESULT_REDIRECT = "redirect"


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _int_or_none(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


@dataclass(frozen=True, slots=True)
class PagingInfo:
    page_no: int
    count: int
    page_max: int
    results_per_page: int

    @property
    def has_next_page(self) -> bool:
        return self.page_no < self.page_max

    @property
    def has_previous_page(self) -> bool:
        return self.page_no > 1

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> PagingInfo | None:
        """All four fields must be integers, otherwise paging is absent."""
        values = [
            _int_or_none(raw.get(key))
            for key in ("page_no", "count", "page_max", "results_per_page")
        ]
        if any(v is None for v in values):
            return None
        page_no, count, page_max, results_per_page = values
        return cls(
            page_no=page_no,  # type: ignore[arg-type]
            count=count,  # type: ignore[arg-type]
            page_max=page_max,  # type: ignore[arg-type]
            results_per_page=results_per_page,  # type: ignore[arg-type]
        )


@dataclass(frozen=True, slots=True)
class AccessInfo:
    """Permission record for one object: R(ead), W(rite), A(dmin)."""

    required: str | None
    available: str | None
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def can_read(self) -> bool:
        return self.available is not None and any(c in self.available for c in "RWA")

    @property
    def can_write(self) -> bool:
        return self.available is not None and any(c in self.available for c in "WA")

    @property
    def can_admin(self) -> bool:
        return self.available is not None and "A" in self.available

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> AccessInfo:
        return cls(
            required=_str_or_none(raw.get("required")),
            available=_str_or_none(raw.get("available")),
            raw=dict(raw),
        )


def is_token_expiry(
    *, token: str | None, extra: str | None, code: int | None, error: str | None
) -> bool:
    """Classification rule for error envelopes that mean the credential expired.

    Any error message containing "token" (case-sensitive) counts.
    """
    if token == "invalid_request_token" and extra == "token_expired":
        return True
    if code == 401 or extra == "token_expired":
        return True
    return error is not None and "token" in error


@dataclass(frozen=True, slots=True)
class RestResponse:
    """A successful envelope. Construct through `RestResponse.parse`."""

    result: str
    data: JSONValue
    raw_data: bytes
    http_status_code: int
    request_id: str | None = None
    error: str | None = None
    code: int | None = None
    extra: str | None = None
    token: str | None = None
    redirect_url: str | None = None
    paging: PagingInfo | None = None
    access: dict[str, AccessInfo] | None = None

    @classmethod
    def parse(
        cls,
        content: bytes,
        status_code: int,
        *,
        request_id: str | None = None,
        debug_enabled: bool = False,
    ) -> RestResponse:
        """Parse and classify an envelope.

        Raises:
            InvalidResponseError: Body is not a JSON object.
            TokenExpiredError: Error envelope signalling an expired credential.
            APIError: Any other error envelope.
            RedirectError: Redirect envelope.
        """
        try:
            payload = json.loads(content)
        except (ValueError, UnicodeDecodeError):
            payload = None
        if not isinstance(payload, dict):
            debug(f"invalid JSON response: {preview(content)}", enabled=debug_enabled)
            raise InvalidResponseError()

        result = _str_or_none(payload.get("result")) or RESULT_ERROR
        error = _str_or_none(payload.get("error"))
        code = _int_or_none(payload.get("code"))
        extra = _str_or_none(payload.get("extra"))
        token = _str_or_none(payload.get("token"))
        redirect_url = _str_or_none(payload.get("redirect_url"))

        if result == RESULT_ERROR:
            debug(
                f"API error: message={error} token={token} extra={extra} code={code}",
                enabled=debug_enabled,
            )
            if is_token_expiry(token=token, extra=extra, code=code, error=error):
                raise TokenExpiredError()
            raise APIError(
                error or "Unknown error",
                code=code,
                extra=extra,
                request_id=request_id,
            )

        if result == RESULT_REDIRECT:
            debug(f"API redirect: url={redirect_url}", enabled=debug_enabled)
            raise RedirectError(redirect_url or "")

        paging_raw = payload.get("paging")
        paging = PagingInfo.from_dict(paging_raw) if isinstance(paging_raw, dict) else None

        access: dict[str, AccessInfo] | None = None
        access_raw = payload.get("access")
        if isinstance(access_raw, dict):
            access = {
                object_id: AccessInfo.from_dict(entry)
                for object_id, entry in access_raw.items()
                if isinstance(entry, dict)
            }

        return cls(
            result=result,
            data=payload.get("data"),
            raw_data=content,
            http_status_code=status_code,
            request_id=request_id,
            error=error,
            code=code,
            extra=extra,
            token=token,
            redirect_url=redirect_url,
            paging=paging,
            access=access,
        )

    # -- typed decoding -------------------------------------------------

    def decode(self, model: type[T]) -> T:
        """Validate `data` into `model` (a pydantic model, dataclass, or any type
        pydantic can validate). Datetime fields accept epoch numbers and ISO-8601
        strings.
        """
        if self.data is None:
            raise NoDataError()
        try:
            return TypeAdapter(model).validate_python(self.data)
        except ValidationError as exc:
            raise DecodingError(str(exc)) from exc

    # -- schema-free access ---------------------------------------------

    @property
    def data_dict(self) -> dict[str, JSONValue] | None:
        return self.data if isinstance(self.data, dict) else None

    @property
    def data_list(self) -> list[JSONValue] | None:
        return self.data if isinstance(self.data, list) else None

    @property
    def is_data_dict(self) -> bool:
        return isinstance(self.data, dict)

    @property
    def is_data_list(self) -> bool:
        return isinstance(self.data, list)

    def get(self, path: str) -> JSONValue:
        """Return the value at a slash-separated path such as ``"user/name"``
        or ``"items/1"``; None when any segment is missing, out of range, or
        descends into a scalar.
        """
        current: JSONValue = self.data
        for segment in (s for s in path.split("/") if s):
            if isinstance(current, dict):
                if segment not in current:
                    return None
                current = current[segment]
            elif isinstance(current, list):
                if not (segment.isascii() and segment.isdigit()):
                    return None
                index = int(segment)
                if index >= len(current):
                    return None
                current = current[index]
            else:
                return None
        return current

    def get_string(self, path: str) -> str | None:
        value = self.get(path)
        return value if isinstance(value, str) else None

    def get_int(self, path: str) -> int | None:
        value = self.get(path)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            try:
                return int(value)
            except ValueError:
                return None
        return None

    def get_bool(self, path: str) -> bool | None:
        value = self.get(path)
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return value != 0
        if isinstance(value, str):
            return value in ("true", "1")
        return None


__all__ = [
    "AccessInfo",
    "JSONValue",
    "PagingInfo",
    "RestResponse",
    "is_token_expiry",
]
