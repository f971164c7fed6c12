"""Tests for envelope parsing, classification and schema-free access."""

import json
from datetime import datetime, timezone

import pytest
from pydantic import BaseModel

from restenvelope import (
    APIError,
    DecodingError,
    InvalidResponseError,
    NoDataError,
    RedirectError,
    RestResponse,
    TokenExpiredError,
)


def parse(payload, status: int = 200, request_id: str | None = None) -> RestResponse:
    return RestResponse.parse(json.dumps(payload).encode(), status, request_id=request_id)


class TestSuccess:
    def test_success_envelope(self):
        response = parse({"result": "success", "data": {"id": 1}}, request_id="req-1")
        assert response.result == "success"
        assert response.data == {"id": 1}
        assert response.request_id == "req-1"
        assert response.http_status_code == 200
        assert response.is_data_dict
        assert not response.is_data_list

    def test_scalar_and_null_data(self):
        assert parse({"result": "success", "data": 42}).data == 42
        assert parse({"result": "success"}).data is None

    def test_list_data(self):
        response = parse({"result": "success", "data": [{"a": 1}, {"a": 2}]})
        assert response.is_data_list
        assert response.data_list == [{"a": 1}, {"a": 2}]
        assert response.data_dict is None

    def test_raw_data_is_kept(self):
        content = b'{"result":"success","data":true}'
        assert RestResponse.parse(content, 200).raw_data == content


class TestInvalid:
    @pytest.mark.parametrize("content", [b"not json", b"[1,2,3]", b'"text"', b"", b"\xff\xfe"])
    def test_non_object_bodies(self, content):
        with pytest.raises(InvalidResponseError):
            RestResponse.parse(content, 200)

    def test_missing_result_defaults_to_error(self):
        with pytest.raises(APIError) as exc_info:
            parse({"data": {"x": 1}})
        assert exc_info.value.error == "Unknown error"

    def test_non_string_result_defaults_to_error(self):
        with pytest.raises(APIError):
            parse({"result": 1, "error": "boom"})


class TestErrorClassification:
    def test_invalid_request_token_with_expiry(self):
        with pytest.raises(TokenExpiredError):
            parse({"result": "error", "token": "invalid_request_token", "extra": "token_expired"})

    def test_code_401(self):
        with pytest.raises(TokenExpiredError):
            parse({"result": "error", "code": 401})

    def test_extra_token_expired(self):
        with pytest.raises(TokenExpiredError):
            parse({"result": "error", "extra": "token_expired"})

    def test_message_mentions_token(self):
        with pytest.raises(TokenExpiredError):
            parse({"result": "error", "error": "bad token here"})

    def test_token_substring_is_case_sensitive(self):
        with pytest.raises(APIError):
            parse({"result": "error", "error": "Bad TOKEN"})

    def test_api_error_carries_fields(self):
        with pytest.raises(APIError) as exc_info:
            parse(
                {"result": "error", "error": "Access denied", "code": 403, "extra": "perm"},
                request_id="req-9",
            )
        assert exc_info.value == APIError(
            "Access denied", code=403, extra="perm", request_id="req-9"
        )

    def test_boolean_code_is_ignored(self):
        with pytest.raises(APIError) as exc_info:
            parse({"result": "error", "error": "nope", "code": True})
        assert exc_info.value.code is None


class TestRedirect:
    def test_redirect_url(self):
        with pytest.raises(RedirectError) as exc_info:
            parse({"result": "redirect", "redirect_url": "X"})
        assert exc_info.value.url == "X"

    def test_missing_redirect_url(self):
        with pytest.raises(RedirectError) as exc_info:
            parse({"result": "redirect"})
        assert exc_info.value == RedirectError("")


class TestPagingAndAccess:
    def test_paging(self):
        response = parse(
            {
                "result": "success",
                "data": [],
                "paging": {"page_no": 2, "count": 45, "page_max": 3, "results_per_page": 20},
            }
        )
        assert response.paging is not None
        assert response.paging.page_no == 2
        assert response.paging.count == 45
        assert response.paging.has_next_page
        assert response.paging.has_previous_page

    def test_paging_first_and_last(self):
        first = parse(
            {
                "result": "success",
                "paging": {"page_no": 1, "count": 5, "page_max": 1, "results_per_page": 20},
            }
        ).paging
        assert first is not None
        assert not first.has_next_page
        assert not first.has_previous_page

    def test_incomplete_paging_is_absent(self):
        response = parse({"result": "success", "paging": {"page_no": 1, "count": 5}})
        assert response.paging is None

    def test_access(self):
        response = parse(
            {
                "result": "success",
                "access": {
                    "obj-1": {"required": "R", "available": "RW"},
                    "obj-2": {"available": "A"},
                    "obj-3": {"required": "W"},
                    "bogus": "not a dict",
                },
            }
        )
        access = response.access
        assert access is not None
        assert set(access) == {"obj-1", "obj-2", "obj-3"}
        assert access["obj-1"].required == "R"
        assert access["obj-1"].can_read and access["obj-1"].can_write
        assert not access["obj-1"].can_admin
        assert access["obj-2"].can_admin and access["obj-2"].can_write
        assert not access["obj-3"].can_read
        assert access["obj-1"].raw == {"required": "R", "available": "RW"}


class TestPathAccess:
    @pytest.fixture
    def response(self) -> RestResponse:
        return parse(
            {
                "result": "success",
                "data": {
                    "user": {"profile": {"name": "John", "age": 30}},
                    "items": ["a", "b", "c"],
                    "flags": {"on": True, "one": 1, "zero": 0, "yes": "true", "num": "17"},
                },
            }
        )

    def test_nested_key(self, response):
        assert response.get("user/profile/name") == "John"

    def test_array_index(self, response):
        assert response.get("items/1") == "b"

    def test_out_of_range(self, response):
        assert response.get("items/10") is None
        assert response.get("items/-1") is None

    @pytest.mark.parametrize("segment", ["+1", " 1", "1 ", "0_1", "١", "1.0"])
    def test_index_must_be_plain_ascii_digits(self, response, segment):
        assert response.get(f"items/{segment}") is None

    def test_leading_zero_index(self, response):
        assert response.get("items/01") == "b"

    def test_missing_key(self, response):
        assert response.get("user/nonexistent") is None

    def test_type_mismatch(self, response):
        assert response.get("items/name") is None
        assert response.get("user/profile/name/first") is None

    def test_typed_accessors(self, response):
        assert response.get_string("user/profile/name") == "John"
        assert response.get_string("user/profile/age") is None
        assert response.get_int("user/profile/age") == 30
        assert response.get_int("flags/num") == 17
        assert response.get_int("user/profile/name") is None
        assert response.get_bool("flags/on") is True
        assert response.get_bool("flags/one") is True
        assert response.get_bool("flags/zero") is False
        assert response.get_bool("flags/yes") is True
        assert response.get_bool("missing") is None


class User(BaseModel):
    id: int
    name: str
    created: datetime | None = None


class TestDecode:
    def test_decode_model(self):
        response = parse({"result": "success", "data": {"id": 1, "name": "Ann"}})
        user = response.decode(User)
        assert user == User(id=1, name="Ann")

    def test_decode_list(self):
        response = parse({"result": "success", "data": [{"id": 1, "name": "A"}]})
        assert response.decode(list[User]) == [User(id=1, name="A")]

    def test_decode_dates(self):
        epoch = parse(
            {"result": "success", "data": {"id": 1, "name": "A", "created": 1700000000}}
        ).decode(User)
        iso = parse(
            {"result": "success", "data": {"id": 1, "name": "A", "created": "2023-11-14T22:13:20Z"}}
        ).decode(User)
        expected = datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
        assert epoch.created == expected
        assert iso.created == expected

    def test_decode_without_data(self):
        with pytest.raises(NoDataError):
            parse({"result": "success"}).decode(User)

    def test_decode_mismatch(self):
        with pytest.raises(DecodingError):
            parse({"result": "success", "data": {"id": "x"}}).decode(User)
