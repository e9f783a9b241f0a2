"""Tests for junction.http.response: immutable response transformations."""

import pytest

from junction.http.response import HTML_CONTENT_TYPE, JSON_CONTENT_TYPE, Response


class TestConstruction:
    def test_defaults(self) -> None:
        response = Response()
        assert response.status == 200
        assert response.body == ""
        assert response.content_type == HTML_CONTENT_TYPE
        assert response.headers == ()

    def test_json(self) -> None:
        response = Response.json({"id": 1}, status=201, headers={"X-Id": "1"})
        assert response.status == 201
        assert response.content_type == JSON_CONTENT_TYPE
        assert response.json_body() == {"id": 1}
        assert response.header("X-Id") == "1"

    def test_content(self) -> None:
        response = Response.content("plain", content_type="text/plain")
        assert response.text == "plain"
        assert response.content_type == "text/plain"

    def test_no_content(self) -> None:
        assert Response.no_content().status == 204

    def test_redirect(self) -> None:
        response = Response.redirect("/login")
        assert response.status == 302
        assert response.header("Location") == "/login"


class TestTransformations:
    def test_with_status_returns_new(self) -> None:
        original = Response("x")
        changed = original.with_status(404)
        assert changed.status == 404
        assert original.status == 200

    def test_with_header_appends(self) -> None:
        response = Response().with_header("Vary", "Origin").with_header("Vary", "Accept")
        assert response.headers == (("Vary", "Origin"), ("Vary", "Accept"))

    def test_with_headers(self) -> None:
        response = Response().with_headers({"A": "1", "B": "2"})
        assert response.header("a") == "1"
        assert response.header("B") == "2"

    def test_with_content_type(self) -> None:
        assert Response().with_content_type("text/csv").content_type == "text/csv"

    def test_frozen(self) -> None:
        with pytest.raises(AttributeError):
            Response().status = 500  # type: ignore[misc]


class TestAccessors:
    def test_header_last_value_wins(self) -> None:
        response = Response().with_header("X-A", "1").with_header("x-a", "2")
        assert response.header("X-A") == "2"

    def test_header_default(self) -> None:
        assert Response().header("Missing", "none") == "none"

    def test_status_text(self) -> None:
        assert Response(status=404).status_text == "Not Found"
        assert Response(status=799).status_text == "Unknown"

    def test_body_bytes(self) -> None:
        assert Response("é").body_bytes == "é".encode()
        assert Response(b"raw").text == "raw"


class TestWsgiHeaders:
    def test_adds_content_type_and_length(self) -> None:
        headers = Response("hello").wsgi_headers()
        assert headers[0] == ("Content-Type", HTML_CONTENT_TYPE)
        assert ("Content-Length", "5") in headers

    def test_explicit_content_type_kept(self) -> None:
        headers = Response("x").with_header("Content-Type", "text/plain").wsgi_headers()
        assert [v for k, v in headers if k == "Content-Type"] == ["text/plain"]

    def test_no_content_type_for_204(self) -> None:
        headers = Response.no_content().wsgi_headers()
        assert all(name != "Content-Type" for name, _ in headers)

    def test_length_counts_bytes(self) -> None:
        headers = Response("é").wsgi_headers()
        assert ("Content-Length", "2") in headers
