"""Onion-style middleware composition.

Given ``[m1, m2, ..., mN]`` and a terminal handler ``H``, builds
``m1(m2(...mN(H)...))``: requests flow in as ``m1, m2, ..., mN, H`` and
responses flow back out as ``H, mN, ..., m2, m1``.
"""

from collections.abc import Iterable
from typing import Any

from junction.http.request import Request
from junction.http.response import Response
from junction.middleware.protocol import Middleware, Next


class MiddlewarePipeline:
    """An ordered, immutable list of middleware.

    Building the chain has no side effects. Entries that are classes are
    instantiated each time the chain is built, so a middleware that keeps
    per-request state gets a fresh instance per dispatch.

    Usage::

        pipeline = MiddlewarePipeline([auth, timing])
        response = pipeline.process(request, handler)
    """

    __slots__ = ("_middleware",)

    def __init__(self, middleware: Iterable[Middleware | type] = ()) -> None:
        self._middleware: tuple[Middleware | type, ...] = tuple(middleware)

    @property
    def middleware(self) -> tuple[Middleware | type, ...]:
        return self._middleware

    def __len__(self) -> int:
        return len(self._middleware)

    def then(self, terminal: Next) -> Next:
        """Compose the chain around *terminal* and return the outermost step."""
        handler: Next = terminal
        for entry in reversed(self._middleware):
            mw = entry() if isinstance(entry, type) else entry
            handler = _link(mw, handler)
        return handler

    def process(self, request: Request, terminal: Next) -> Response:
        """Build the chain and run *request* through it."""
        return self.then(terminal)(request)


def _link(mw: Any, downstream: Next) -> Next:
    def step(request: Request) -> Response:
        return mw(request, downstream)

    return step
