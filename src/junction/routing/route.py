"""Route, RouteMatch, and the handler variants."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeAlias

from junction.http.method import HttpMethod
from junction.routing.pattern import UriPattern


@dataclass(frozen=True, slots=True)
class FunctionHandler:
    """A handler that is a plain callable taking the request."""

    func: Callable[..., Any]

    @property
    def label(self) -> str:
        return getattr(self.func, "__qualname__", repr(self.func))


@dataclass(frozen=True, slots=True)
class ControllerRef:
    """A handler named by controller and method.

    *controller* is a class, an instance, a registered name, or an import
    string (``"app.controllers:UserController"`` or
    ``"app.controllers.UserController"``). It is resolved per request by
    a ``ControllerResolver``.
    """

    controller: type | object | str
    method: str

    @property
    def label(self) -> str:
        if isinstance(self.controller, str):
            return self.controller
        if isinstance(self.controller, type):
            return self.controller.__qualname__
        return type(self.controller).__qualname__


RouteHandler: TypeAlias = FunctionHandler | ControllerRef


def as_route_handler(handler: object) -> RouteHandler:
    """Normalize the accepted handler spellings into a ``RouteHandler``.

    Accepts a callable, a ``ControllerRef``, or a ``(controller, "method")``
    pair.
    """
    match handler:
        case FunctionHandler() | ControllerRef():
            return handler
        case (controller, str() as method):
            return ControllerRef(controller, method)
        case _ if callable(handler):
            return FunctionHandler(handler)
    msg = f"Route handler must be a callable or a (controller, method) pair, got {handler!r}"
    raise TypeError(msg)


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition.

    Built from a ``RouteBuilder`` when the router freezes and owned by the
    ``RouteTable`` that holds it.
    """

    method: HttpMethod
    pattern: UriPattern
    handler: RouteHandler
    middleware: tuple[Any, ...] = ()
    name: str | None = None

    @property
    def path(self) -> str:
        return self.pattern.template


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route resolution."""

    route: Route
    params: dict[str, str]
