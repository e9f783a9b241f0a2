"""Test client for junction routers.

Uses the same Request and Response types as production.
No wrapper translation layer, no WSGI round trip.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from junction.http.request import Request
from junction.http.response import Response
from junction.routing.router import Router


class TestClient:
    __test__ = False  # Tell pytest this is not a test class
    """Synchronous test client for junction routers.

    Builds a ``Request`` and passes it to ``Router.dispatch``. Returns the
    same ``Response`` type used in production.

    Usage::

        with TestClient(router) as client:
            response = client.get("/users/42")
            assert response.status == 200
            assert response.json_body() == {"id": "42"}
    """

    __slots__ = ("client_address", "router")

    def __init__(self, router: Router, *, client_address: tuple[str, int] = ("127.0.0.1", 0)) -> None:
        self.router = router
        self.client_address = client_address

    def __enter__(self) -> TestClient:
        self.router.compile()
        return self

    def __exit__(self, *args: object) -> None:
        pass

    def request(
        self,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        query: Mapping[str, str] | None = None,
        json: Mapping[str, Any] | None = None,
        form: Mapping[str, Any] | None = None,
    ) -> Response:
        """Dispatch a request and return the response.

        *json* and *form* become the parsed request body and set the
        matching ``Content-Type`` header.
        """
        request_headers = dict(headers or {})
        body: dict[str, Any] = {}
        if json is not None:
            body = dict(json)
            request_headers.setdefault("Content-Type", "application/json")
        elif form is not None:
            body = dict(form)
            request_headers.setdefault("Content-Type", "application/x-www-form-urlencoded")

        request = Request.build(
            method,
            path,
            query=query,
            body=body,
            headers=request_headers,
            client=self.client_address,
        )
        return self.router.dispatch(request)

    def get(
        self,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        query: Mapping[str, str] | None = None,
    ) -> Response:
        """Send a GET request."""
        return self.request("GET", path, headers=headers, query=query)

    def post(
        self,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        json: Mapping[str, Any] | None = None,
        form: Mapping[str, Any] | None = None,
    ) -> Response:
        """Send a POST request."""
        return self.request("POST", path, headers=headers, json=json, form=form)

    def put(
        self,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        json: Mapping[str, Any] | None = None,
    ) -> Response:
        """Send a PUT request."""
        return self.request("PUT", path, headers=headers, json=json)

    def patch(
        self,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        json: Mapping[str, Any] | None = None,
    ) -> Response:
        """Send a PATCH request."""
        return self.request("PATCH", path, headers=headers, json=json)

    def delete(self, path: str, *, headers: Mapping[str, str] | None = None) -> Response:
        """Send a DELETE request."""
        return self.request("DELETE", path, headers=headers)

    def options(self, path: str, *, headers: Mapping[str, str] | None = None) -> Response:
        """Send an OPTIONS request."""
        return self.request("OPTIONS", path, headers=headers)
