"""Tests for junction.errors and junction.server.errors: error translation."""

import logging

import pytest

from junction.config import RouterConfig
from junction.errors import (
    ConfigurationError,
    ControllerMethodNotFound,
    ControllerNotFound,
    HTTPError,
    InvalidMethod,
    JunctionError,
    MethodNotAllowed,
    NotFound,
    RouteNotFound,
    ValidationFailed,
)
from junction.http.request import Request
from junction.http.response import Response
from junction.server.errors import (
    call_error_handler,
    error_payload,
    handle_http_error,
    handle_internal_error,
)
from junction.validation.result import ValidationResult

CONFIG = RouterConfig()


def _request() -> Request:
    return Request.build("GET", "/boom")


class TestHierarchy:
    def test_http_error_str(self) -> None:
        assert str(HTTPError(status=418, detail="teapot")) == "418: teapot"
        assert str(HTTPError(status=500)) == "500"

    def test_not_found_alias(self) -> None:
        assert NotFound is RouteNotFound
        assert RouteNotFound().status == 404

    def test_method_not_allowed(self) -> None:
        exc = MethodNotAllowed(frozenset({"POST", "GET"}))
        assert exc.status == 405
        assert exc.detail == "Method not allowed. Allowed methods: GET, POST"
        assert exc.headers == (("Allow", "GET, POST"),)

    def test_controller_errors(self) -> None:
        assert ControllerNotFound("Users").status == 500
        assert ControllerNotFound("Users").detail == "Controller not found: Users"
        missing = ControllerMethodNotFound("Users", "show")
        assert missing.status == 501
        assert missing.detail == "Controller method not found: Users.show"

    def test_invalid_method_is_value_error(self) -> None:
        exc = InvalidMethod("BREW")
        assert isinstance(exc, ValueError)
        assert isinstance(exc, ConfigurationError)
        assert exc.method == "BREW"

    def test_common_base(self) -> None:
        assert issubclass(ConfigurationError, JunctionError)
        assert issubclass(HTTPError, JunctionError)


class TestHandleHttpError:
    def test_default_shape(self) -> None:
        response = handle_http_error(RouteNotFound("Route not found: GET /x"), _request(), {}, CONFIG)
        assert response.status == 404
        assert response.json_body() == error_payload(404, "Route not found: GET /x")

    def test_falls_back_to_status_phrase(self) -> None:
        response = handle_http_error(HTTPError(status=403), _request(), {}, CONFIG)
        assert response.json_body()["message"] == "Forbidden"

    def test_error_headers_copied(self) -> None:
        response = handle_http_error(MethodNotAllowed(frozenset({"GET"})), _request(), {}, CONFIG)
        assert response.header("Allow") == "GET"

    def test_validation_shape(self) -> None:
        result = ValidationResult(data={}, errors={"email": ["Must be a valid email address"]})
        response = handle_http_error(ValidationFailed(result), _request(), {}, CONFIG)
        assert response.status == 422
        assert response.json_body() == {
            "valid": False,
            "errors": {"email": ["Must be a valid email address"]},
        }

    def test_status_handler(self) -> None:
        handlers = {404: lambda request: "custom missing"}
        response = handle_http_error(RouteNotFound(), _request(), handlers, CONFIG)
        assert response.status == 404
        assert response.text == "custom missing"

    def test_exact_type_beats_status(self) -> None:
        handlers = {
            404: lambda: "by status",
            RouteNotFound: lambda: "by type",
        }
        response = handle_http_error(RouteNotFound(), _request(), handlers, CONFIG)
        assert response.text == "by type"

    def test_base_class_handler(self) -> None:
        handlers = {HTTPError: lambda request, exc: f"base {exc.status}"}
        response = handle_http_error(RouteNotFound(), _request(), handlers, CONFIG)
        assert response.text == "base 404"

    def test_handler_may_choose_status(self) -> None:
        handlers = {404: lambda: Response("moved", status=410)}
        response = handle_http_error(RouteNotFound(), _request(), handlers, CONFIG)
        assert response.status == 410

    def test_failing_handler_falls_back(self, caplog: pytest.LogCaptureFixture) -> None:
        def broken() -> str:
            raise RuntimeError("handler bug")

        with caplog.at_level(logging.ERROR, logger="junction.server"):
            response = handle_http_error(RouteNotFound(), _request(), {404: broken}, CONFIG)
        assert response.status == 404
        assert response.json_body()["error"] is True
        assert "Error handler for 404 failed" in caplog.text

    def test_controller_errors_logged_as_errors(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR, logger="junction.server"):
            handle_http_error(ControllerNotFound("Users"), _request(), {}, CONFIG)
        assert "Controller not found: Users" in caplog.text


class TestHandleInternalError:
    def test_generic_message(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR, logger="junction.server"):
            response = handle_internal_error(ValueError("secret"), _request(), {}, CONFIG)
        assert response.status == 500
        assert response.json_body() == error_payload(500, "Internal Server Error")
        assert "500 GET /boom" in caplog.text

    def test_debug_exposes_exception(self) -> None:
        response = handle_internal_error(
            ValueError("secret"), _request(), {}, RouterConfig(debug=True)
        )
        assert response.json_body()["message"] == "ValueError: secret"

    def test_registered_handler(self) -> None:
        handlers = {ValueError: lambda request, exc: ({"oops": str(exc)}, 500)}
        response = handle_internal_error(ValueError("x"), _request(), handlers, CONFIG)
        assert response.status == 500
        assert response.json_body() == {"oops": "x"}

    def test_status_500_handler(self) -> None:
        handlers = {500: lambda: ("down", 503)}
        response = handle_internal_error(KeyError("k"), _request(), handlers, CONFIG)
        assert response.status == 503


class TestCallErrorHandler:
    def test_argument_introspection(self) -> None:
        exc = HTTPError(status=400, detail="bad")
        assert call_error_handler(lambda: "zero", _request(), exc, CONFIG).text == "zero"
        assert call_error_handler(lambda r: r.path, _request(), exc, CONFIG).text == "/boom"
        assert call_error_handler(lambda r, e: e.detail, _request(), exc, CONFIG).text == "bad"
