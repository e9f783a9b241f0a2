"""HTTP method value type."""

from __future__ import annotations

from enum import StrEnum

from junction.errors import InvalidMethod


class HttpMethod(StrEnum):
    """The HTTP methods a route can be registered for.

    Members compare equal to their upper-case string form, so
    ``HttpMethod.GET == "GET"`` holds.
    """

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"
    HEAD = "HEAD"

    @classmethod
    def parse(cls, value: str | HttpMethod) -> HttpMethod:
        """Return the member matching *value*, case-insensitively.

        Raises ``InvalidMethod`` for anything outside the supported set.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise InvalidMethod(str(value)) from None
