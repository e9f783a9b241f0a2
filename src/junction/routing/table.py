"""Ordered route table with first-match resolution.

Registration order is match priority: the first route whose method and
pattern both match wins. There is no specificity ranking and no
backtracking to a better match.
"""

from __future__ import annotations

from collections.abc import Iterator

from junction.errors import ConfigurationError, MethodNotAllowed, RouteNotFound
from junction.http.method import HttpMethod
from junction.routing.route import Route, RouteMatch


class RouteTable:
    """Ordered collection of routes plus a name -> pattern index.

    Built once at startup and read-only while dispatching. Concurrent
    reads are safe; appending during live traffic must be serialized by
    the caller.

    Usage::

        table = RouteTable()
        table.add(Route(HttpMethod.GET, UriPattern.compile("/users/{id:int}"), handler))
        match = table.resolve(HttpMethod.GET, "/users/42")
        match.params  # {"id": "42"}
    """

    __slots__ = ("_names", "_routes")

    def __init__(self) -> None:
        self._routes: list[Route] = []
        self._names: dict[str, Route] = {}

    def add(self, route: Route) -> None:
        """Append a route. Raises ``ConfigurationError`` on a duplicate name."""
        if route.name is not None:
            if route.name in self._names:
                msg = f"Route name {route.name!r} is already registered."
                raise ConfigurationError(msg)
            self._names[route.name] = route
        self._routes.append(route)

    @property
    def routes(self) -> tuple[Route, ...]:
        return tuple(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes)

    def resolve(self, method: HttpMethod, path: str) -> RouteMatch:
        """Find the first route registered for *method* that matches *path*.

        Raises ``RouteNotFound`` if no route matches the path for any
        method. Raises ``MethodNotAllowed`` if the path matches only
        routes registered for other methods.
        """
        allowed: set[str] = set()
        for route in self._routes:
            params = route.pattern.extract_parameters(path)
            if params is None:
                continue
            if route.method == method:
                return RouteMatch(route=route, params=params)
            allowed.add(route.method.value)

        if allowed:
            raise MethodNotAllowed(frozenset(allowed))
        raise RouteNotFound(f"Route not found: {method} {path}")

    def allowed_methods(self, path: str) -> frozenset[str]:
        """Every method with at least one route matching *path*."""
        return frozenset(
            route.method.value for route in self._routes if route.pattern.match(path) is not None
        )

    def find_by_name(self, name: str) -> str | None:
        """Return the pattern string registered under *name*, if any."""
        route = self._names.get(name)
        return route.pattern.template if route is not None else None

    def url_for(self, name: str, **params: object) -> str:
        """Build a concrete path for a named route.

        Raises ``KeyError`` for an unknown name and ``ValueError`` for a
        missing or invalid placeholder value.
        """
        route = self._names.get(name)
        if route is None:
            raise KeyError(name)
        return route.pattern.build(**params)
