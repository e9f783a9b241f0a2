"""Tests for junction.server.negotiation: return value dispatch."""

from dataclasses import dataclass

from junction.config import RouterConfig
from junction.http.response import JSON_CONTENT_TYPE, Response
from junction.server.negotiation import negotiate


@dataclass(frozen=True, slots=True)
class User:
    id: int
    name: str


class TestNegotiatePassthrough:
    def test_response_passthrough(self) -> None:
        original = Response(body="hello", status=201)
        assert negotiate(original) is original


class TestNegotiateBasicTypes:
    def test_string(self) -> None:
        result = negotiate("Hello, World!")
        assert result.status == 200
        assert result.text == "Hello, World!"
        assert "text/html" in result.content_type

    def test_string_uses_configured_content_type(self) -> None:
        config = RouterConfig(default_content_type="text/plain; charset=utf-8")
        result = negotiate("hi", config=config)
        assert result.content_type == "text/plain; charset=utf-8"

    def test_bytes(self) -> None:
        result = negotiate(b"\x00\x01")
        assert result.body == b"\x00\x01"
        assert result.content_type == "application/octet-stream"

    def test_dict(self) -> None:
        result = negotiate({"key": "value"})
        assert result.content_type == JSON_CONTENT_TYPE
        assert result.json_body() == {"key": "value"}

    def test_list(self) -> None:
        assert negotiate([1, 2, 3]).json_body() == [1, 2, 3]

    def test_list_ending_in_int_is_data(self) -> None:
        result = negotiate(["a", 404])
        assert result.status == 200
        assert result.json_body() == ["a", 404]

    def test_none_is_no_content(self) -> None:
        result = negotiate(None)
        assert result.status == 204
        assert result.body == ""

    def test_dataclass(self) -> None:
        result = negotiate(User(id=1, name="Ada"))
        assert result.json_body() == {"id": 1, "name": "Ada"}

    def test_fallback_str(self) -> None:
        assert negotiate(42).text == "42"

    def test_non_ascii_json(self) -> None:
        assert "é" in negotiate({"name": "José"}).text
        ascii_only = negotiate({"name": "José"}, config=RouterConfig(json_ensure_ascii=True))
        assert "\\u00e9" in ascii_only.text


class TestNegotiateTuples:
    def test_value_and_status(self) -> None:
        result = negotiate(("Created", 201))
        assert result.status == 201
        assert result.text == "Created"

    def test_dict_and_status(self) -> None:
        result = negotiate(({"errors": {}}, 422))
        assert result.status == 422
        assert result.json_body() == {"errors": {}}

    def test_value_status_headers(self) -> None:
        result = negotiate(("ok", 201, {"Location": "/users/1"}))
        assert result.status == 201
        assert result.header("Location") == "/users/1"

    def test_bool_is_not_a_status(self) -> None:
        result = negotiate(("a", True))
        assert result.status == 200
        assert result.json_body() == ["a", True]
