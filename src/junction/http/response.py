"""HTTP response with chainable .with_*() transformation API.

Each transformation returns a new Response. Immutable by convention,
built incrementally by design.
"""

from __future__ import annotations

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, replace
from http import HTTPStatus
from typing import Any

JSON_CONTENT_TYPE = "application/json; charset=utf-8"
HTML_CONTENT_TYPE = "text/html; charset=utf-8"


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations.

    Construct directly or through one of the named constructors, then
    chain ``.with_*()`` calls to set status and headers. Each call
    returns a new ``Response``::

        Response.json({"id": 1}, status=201).with_header("Location", "/users/1")
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str = HTML_CONTENT_TYPE
    headers: tuple[tuple[str, str], ...] = ()

    # -- Named constructors --

    @classmethod
    def json(
        cls,
        data: Any,
        status: int = 200,
        headers: Mapping[str, str] | None = None,
        *,
        ensure_ascii: bool = False,
    ) -> Response:
        """JSON-encode *data* into a response body."""
        body = json_module.dumps(data, ensure_ascii=ensure_ascii)
        return cls(
            body=body,
            status=status,
            content_type=JSON_CONTENT_TYPE,
            headers=tuple((headers or {}).items()),
        )

    @classmethod
    def content(
        cls,
        text: str | bytes,
        status: int = 200,
        content_type: str = HTML_CONTENT_TYPE,
        headers: Mapping[str, str] | None = None,
    ) -> Response:
        """Plain content response."""
        return cls(
            body=text,
            status=status,
            content_type=content_type,
            headers=tuple((headers or {}).items()),
        )

    @classmethod
    def no_content(cls) -> Response:
        """204 with an empty body."""
        return cls(body="", status=204)

    @classmethod
    def redirect(cls, url: str, status: int = 302) -> Response:
        return cls(body="", status=status, headers=(("Location", url),))

    # -- Chainable transformations --

    def with_status(self, status: int) -> Response:
        """Return a new Response with a different status code."""
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        """Return a new Response with additional headers."""
        new = tuple(headers.items())
        return replace(self, headers=(*self.headers, *new))

    def with_content_type(self, content_type: str) -> Response:
        """Return a new Response with a different content type."""
        return replace(self, content_type=content_type)

    # -- Accessors --

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return the most recently added value for *name* (case-insensitive)."""
        name_lower = name.lower()
        for key, value in reversed(self.headers):
            if key.lower() == name_lower:
                return value
        return default

    @property
    def status_text(self) -> str:
        try:
            return HTTPStatus(self.status).phrase
        except ValueError:
            return "Unknown"

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body

    def json_body(self) -> Any:
        """Decode the body as JSON."""
        return json_module.loads(self.text)

    def wsgi_headers(self) -> list[tuple[str, str]]:
        """Header list for a WSGI ``start_response`` call."""
        headers = [(name, value) for name, value in self.headers]
        if self.status != 204 and self.header("Content-Type") is None:
            headers.insert(0, ("Content-Type", self.content_type))
        if self.header("Content-Length") is None:
            headers.append(("Content-Length", str(len(self.body_bytes))))
        return headers
