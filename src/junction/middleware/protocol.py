"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    def my_mw(request: Request, next: Next) -> Response: ...

No base class required: any callable with this shape works.
"""

from collections.abc import Callable
from typing import Protocol, TypeAlias

from junction.http.request import Request
from junction.http.response import Response

# The remainder of the middleware chain
Next: TypeAlias = Callable[[Request], Response]


class Middleware(Protocol):
    """Protocol for junction middleware.

    Accepts both functions and callable objects::

        # Function middleware
        def timing(request: Request, next: Next) -> Response:
            start = time.monotonic()
            response = next(request)
            elapsed = time.monotonic() - start
            return response.with_header("X-Time", f"{elapsed:.3f}")

        # Class middleware
        class RequireToken:
            def __call__(self, request: Request, next: Next) -> Response:
                ...

    A middleware may call ``next`` and adjust the response it returns,
    return its own response without calling ``next`` (nothing downstream
    runs), or mutate the request before calling ``next``.
    """

    def __call__(self, request: Request, next: Next) -> Response: ...
