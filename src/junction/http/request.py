"""HTTP request.

Metadata (method, path, headers, query, body) is fixed at creation. The
route-parameter slot and the ``state`` namespace are the only parts the
router and middleware write to.

The router never reads ambient process state. Requests are built either
explicitly (``Request.build``) or at the transport boundary from a WSGI
environ (``Request.from_environ``).
"""

from __future__ import annotations

import json as json_module
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qs

from junction.errors import HTTPError, ValidationFailed
from junction.http.headers import Headers
from junction.http.query import QueryParams

if TYPE_CHECKING:
    from junction.validation.result import ValidationResult
    from junction.validation.validator import Rules, Validator


@dataclass(slots=True)
class Request:
    """An HTTP request as seen by the router, middleware, and handlers.

    Input lookups (``input``, ``all``, ``only``) merge query parameters,
    body fields, and route parameters, in that order. Later sources win,
    so a route parameter shadows a query or body field of the same name.
    """

    method: str
    path: str
    query: QueryParams = field(default_factory=QueryParams)
    headers: Headers = field(default_factory=Headers)
    body: dict[str, Any] = field(default_factory=dict)
    route_params: dict[str, str] = field(default_factory=dict)
    client: tuple[str, int] | None = None

    # Per-request namespace for middleware to hand values downstream
    state: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # Used by validate(); the router sets its own when dispatching
    validator: Validator | None = field(default=None, repr=False, compare=False)

    # -- Route parameters --

    def set_route_parameters(self, params: Mapping[str, str]) -> None:
        self.route_params = dict(params)

    def route_parameter(self, name: str, default: Any = None) -> Any:
        return self.route_params.get(name, default)

    # -- Merged input --

    def all(self) -> dict[str, Any]:
        """Query, body, then route parameters merged into one dict."""
        return {**dict(self.query), **self.body, **self.route_params}

    def input(self, key: str | None = None, default: Any = None) -> Any:
        data = self.all()
        if key is None:
            return data
        return data.get(key, default)

    def has(self, key: str) -> bool:
        return key in self.all()

    def filled(self, key: str) -> bool:
        """True when *key* is present and not blank."""
        value = self.input(key)
        if value is None:
            return False
        if isinstance(value, str):
            return value.strip() != ""
        return bool(value)

    def only(self, keys: Iterable[str]) -> dict[str, Any]:
        data = self.all()
        return {key: data[key] for key in keys if key in data}

    def except_(self, keys: Iterable[str]) -> dict[str, Any]:
        excluded = set(keys)
        return {key: value for key, value in self.all().items() if key not in excluded}

    # -- Headers --

    def header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name, default)

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def is_json(self) -> bool:
        return "application/json" in (self.content_type or "")

    @property
    def expects_json(self) -> bool:
        return "application/json" in self.headers.get("accept", "")

    @property
    def ip(self) -> str | None:
        return self.client[0] if self.client else None

    @property
    def user_agent(self) -> str | None:
        return self.headers.get("user-agent")

    # -- Validation --

    def validate(self, rules: Rules, *, raise_on_failure: bool = True) -> ValidationResult:
        """Validate the merged input against *rules*.

        Raises ``ValidationFailed`` (422) when validation fails, unless
        *raise_on_failure* is False, in which case the result is returned
        for the caller to inspect.
        """
        from junction.validation import validate

        if self.validator is not None:
            result = self.validator.validate(self.all(), rules)
        else:
            result = validate(self.all(), rules)
        if raise_on_failure and not result.is_valid:
            raise ValidationFailed(result)
        return result

    def validated(self, rules: Rules) -> dict[str, Any]:
        """Validate, then return only the fields named in *rules*."""
        if not rules:
            return self.all()
        self.validate(rules)
        return self.only(rules.keys())

    # -- Factories --

    @classmethod
    def build(
        cls,
        method: str,
        path: str,
        *,
        query: Mapping[str, str] | str | None = None,
        body: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | Iterable[tuple[str, str]] | None = None,
        client: tuple[str, int] | None = None,
    ) -> Request:
        """Create a request from plain values.

        A ``?query`` suffix on *path* is split off and parsed; an explicit
        *query* takes its place when given.
        """
        path_part, _, query_string = path.partition("?")
        params = QueryParams(query) if query is not None else QueryParams(query_string)
        return cls(
            method=method.upper(),
            path=path_part or "/",
            query=params,
            headers=Headers(headers or ()),
            body=dict(body or {}),
            client=client,
        )

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, Any],
        *,
        max_content_length: int = 16 * 1024 * 1024,
    ) -> Request:
        """Capture a request from a WSGI environ.

        The only place junction touches transport data. Reads the method,
        path, query string, headers, client address, and a JSON or
        urlencoded body.

        Raises ``HTTPError`` 413 for oversized bodies and 400 for
        malformed JSON, a JSON body that is not an object, or a form
        body that is not valid UTF-8. An empty or ``null`` JSON body
        yields no fields.
        """
        headers: list[tuple[str, str]] = []
        for key, value in environ.items():
            if key.startswith("HTTP_"):
                headers.append((key[5:].replace("_", "-").lower(), str(value)))
            elif key in ("CONTENT_TYPE", "CONTENT_LENGTH") and value:
                headers.append((key.replace("_", "-").lower(), str(value)))
        header_map = Headers(headers)

        remote = environ.get("REMOTE_ADDR")
        client = (remote, int(environ.get("REMOTE_PORT") or 0)) if remote else None

        method = str(environ.get("REQUEST_METHOD", "GET")).upper()
        body = _read_body(environ, header_map, max_content_length)

        return cls(
            method=method,
            path=environ.get("PATH_INFO") or "/",
            query=QueryParams(environ.get("QUERY_STRING", "")),
            headers=header_map,
            body=body,
            client=client,
        )


def _read_body(
    environ: Mapping[str, Any],
    headers: Headers,
    max_content_length: int,
) -> dict[str, Any]:
    """Read and parse a WSGI request body into a field map."""
    try:
        length = int(headers.get("content-length") or 0)
    except ValueError:
        raise HTTPError(status=400, detail="Invalid Content-Length header") from None
    if length <= 0:
        return {}
    if length > max_content_length:
        raise HTTPError(status=413, detail="Request body too large")

    stream = environ.get("wsgi.input")
    raw = stream.read(length) if stream is not None else b""
    content_type = headers.get("content-type") or ""

    if "application/json" in content_type:
        try:
            data = json_module.loads(raw or b"null")
        except ValueError:
            raise HTTPError(status=400, detail="Malformed JSON body") from None
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise HTTPError(status=400, detail="JSON body must be an object")
        return data

    if "application/x-www-form-urlencoded" in content_type:
        try:
            parsed = parse_qs(raw.decode("utf-8"), keep_blank_values=True, errors="strict")
        except UnicodeDecodeError:
            raise HTTPError(status=400, detail="Malformed form body") from None
        return {key: values[0] if len(values) == 1 else values for key, values in parsed.items()}

    return {}
