"""Router: route registration surface and request dispatch.

Mutable during setup (routes, groups, middleware, error handlers).
Frozen into an immutable ``RouteTable`` when ``compile()`` or the first
``dispatch()`` runs.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Iterator
from contextlib import AbstractContextManager, contextmanager
from functools import partial
from typing import Any

from junction._internal.types import ErrorHandler, Handler
from junction.config import RouterConfig
from junction.errors import (
    ConfigurationError,
    HTTPError,
    InvalidMethod,
    MethodNotAllowed,
    RouteNotFound,
)
from junction.http.method import HttpMethod
from junction.http.request import Request
from junction.http.response import Response
from junction.middleware.pipeline import MiddlewarePipeline
from junction.routing.controllers import ControllerResolver
from junction.routing.pattern import UriPattern
from junction.routing.route import (
    ControllerRef,
    FunctionHandler,
    Route,
    RouteHandler,
    as_route_handler,
)
from junction.routing.table import RouteTable
from junction.server.errors import handle_http_error, handle_internal_error
from junction.server.negotiation import negotiate
from junction.validation.parser import RuleParser
from junction.validation.validator import Validator

logger = logging.getLogger("junction.routing")

# Methods registered by ``Router.any``
ANY_METHODS = (
    HttpMethod.GET,
    HttpMethod.POST,
    HttpMethod.PUT,
    HttpMethod.PATCH,
    HttpMethod.DELETE,
)


def _normalize_prefix(prefix: str) -> str:
    prefix = "/" + prefix.strip("/")
    return "" if prefix == "/" else prefix


def _as_list(middleware: Any) -> list[Any]:
    if middleware is None:
        return []
    if isinstance(middleware, list | tuple):
        return list(middleware)
    return [middleware]


def _fallback_request(environ: dict[str, Any]) -> Request:
    """A bodiless request for error responses when capture itself fails."""
    return Request(
        method=str(environ.get("REQUEST_METHOD", "GET")),
        path=environ.get("PATH_INFO") or "/",
    )


class RouteBuilder:
    """A route waiting to be compiled.

    Returned by the registration methods so a route can be named or given
    extra middleware with chained calls::

        router.get("/dashboard", show).name("dashboard").middleware(auth)

    Becomes an immutable ``Route`` when the router freezes; after that the
    builder rejects further changes.
    """

    __slots__ = ("_handler", "_method", "_middleware", "_name", "_pattern", "_router")

    def __init__(
        self,
        router: Router,
        method: HttpMethod,
        pattern: UriPattern,
        handler: RouteHandler,
        middleware: list[Any],
    ) -> None:
        self._router = router
        self._method = method
        self._pattern = pattern
        self._handler = handler
        self._middleware = middleware
        self._name: str | None = None

    @property
    def method(self) -> HttpMethod:
        return self._method

    @property
    def pattern(self) -> UriPattern:
        return self._pattern

    @property
    def route_name(self) -> str | None:
        return self._name

    def name(self, name: str) -> RouteBuilder:
        """Name the route for ``Router.resolve`` / ``Router.url_for``."""
        self._router._assign_name(self, name)
        return self

    def middleware(self, *middleware: Any) -> RouteBuilder:
        """Append route-level middleware, innermost after group middleware."""
        self._router._check_not_frozen()
        self._middleware.extend(middleware)
        return self

    def build(self) -> Route:
        return Route(
            method=self._method,
            pattern=self._pattern,
            handler=self._handler,
            middleware=tuple(self._middleware),
            name=self._name,
        )

    def __repr__(self) -> str:
        return f"<RouteBuilder {self._method} {self._pattern.template}>"


class Router:
    """The junction router.

    Usage::

        router = Router()

        router.get("/users/{id:int}", show_user).name("users.show")

        with router.group(prefix="/admin", middleware=[require_admin]):
            router.get("/dashboard", dashboard).name("dashboard")

        response = router.dispatch(Request.build("GET", "/users/42"))

    Thread safety:
        Registration is single-threaded (module import or app factory).
        The freeze transition uses a Lock + double-check so exactly one
        thread compiles the route table even if several threads dispatch
        their first request at once. After freezing, dispatch only reads
        shared state.
    """

    __slots__ = (
        "_builders",
        "_controllers",
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_group_middleware",
        "_group_prefix",
        "_middleware",
        "_names",
        "_table",
        "_validator",
        "config",
    )

    def __init__(
        self,
        config: RouterConfig | None = None,
        *,
        controllers: ControllerResolver | None = None,
    ) -> None:
        self.config: RouterConfig = config or RouterConfig()
        self._controllers: ControllerResolver = controllers or ControllerResolver()
        self._validator: Validator = Validator(RuleParser(memoize=self.config.memoize_rules))
        self._builders: list[RouteBuilder] = []
        self._names: dict[str, RouteBuilder] = {}
        self._middleware: list[Any] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._group_prefix: str = ""
        self._group_middleware: list[Any] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state, set by _freeze()
        self._table: RouteTable | None = None

    # -- Route registration --

    def add(self, method: str | HttpMethod, pattern: str, handler: object) -> RouteBuilder:
        """Register *handler* for *method* on *pattern*.

        The pattern is compiled immediately, so ``InvalidPatternType`` and
        other configuration errors surface at registration time.
        """
        self._check_not_frozen()
        http_method = HttpMethod.parse(method)
        compiled = UriPattern.compile(self._group_prefix + "/" + pattern.lstrip("/"))
        builder = RouteBuilder(
            self,
            http_method,
            compiled,
            as_route_handler(handler),
            list(self._group_middleware),
        )
        self._builders.append(builder)
        logger.debug("Registered %s %s", http_method, compiled.template)
        return builder

    def get(self, pattern: str, handler: object) -> RouteBuilder:
        return self.add(HttpMethod.GET, pattern, handler)

    def post(self, pattern: str, handler: object) -> RouteBuilder:
        return self.add(HttpMethod.POST, pattern, handler)

    def put(self, pattern: str, handler: object) -> RouteBuilder:
        return self.add(HttpMethod.PUT, pattern, handler)

    def patch(self, pattern: str, handler: object) -> RouteBuilder:
        return self.add(HttpMethod.PATCH, pattern, handler)

    def delete(self, pattern: str, handler: object) -> RouteBuilder:
        return self.add(HttpMethod.DELETE, pattern, handler)

    def options(self, pattern: str, handler: object) -> RouteBuilder:
        return self.add(HttpMethod.OPTIONS, pattern, handler)

    def head(self, pattern: str, handler: object) -> RouteBuilder:
        return self.add(HttpMethod.HEAD, pattern, handler)

    def match(
        self,
        methods: Iterable[str | HttpMethod],
        pattern: str,
        handler: object,
    ) -> list[RouteBuilder]:
        """Register the same handler for several methods."""
        return [self.add(method, pattern, handler) for method in methods]

    def any(self, pattern: str, handler: object) -> list[RouteBuilder]:
        """Register *handler* for GET, POST, PUT, PATCH, and DELETE."""
        return self.match(ANY_METHODS, pattern, handler)

    def route(
        self,
        pattern: str,
        *,
        methods: Iterable[str | HttpMethod] | None = None,
        name: str | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            pattern: Route template. Use ``{param}`` or ``{param:type}``.
            methods: HTTP methods. Defaults to ``["GET"]``.
            name: Optional route name. Only valid with a single method.
        """
        method_list = list(methods or [HttpMethod.GET])
        if name is not None and len(method_list) > 1:
            msg = f"Route name {name!r} needs a single method, got {method_list}"
            raise ConfigurationError(msg)

        def decorator(func: Handler) -> Handler:
            for builder in self.match(method_list, pattern, func):
                if name is not None:
                    builder.name(name)
            return func

        return decorator

    def group(
        self,
        attributes: dict[str, Any] | None = None,
        callback: Callable[[Router], None] | None = None,
        *,
        prefix: str | None = None,
        middleware: Any = None,
    ) -> AbstractContextManager[Router] | None:
        """Share a prefix and middleware across a block of registrations.

        Usable as a context manager or with a callback::

            with router.group(prefix="/api", middleware=[auth]):
                router.get("/users", list_users)

            router.group({"prefix": "/api"}, lambda r: r.get("/users", list_users))

        Prefixes concatenate and middleware accumulates across nested
        groups; the outer state is restored when the group exits.
        """
        attrs = attributes or {}
        scope = self._group_scope(
            prefix if prefix is not None else attrs.get("prefix"),
            middleware if middleware is not None else attrs.get("middleware"),
        )
        if callback is None:
            return scope
        with scope:
            callback(self)
        return None

    @contextmanager
    def _group_scope(self, prefix: str | None, middleware: Any) -> Iterator[Router]:
        self._check_not_frozen()
        previous_prefix = self._group_prefix
        previous_middleware = self._group_middleware
        if prefix:
            self._group_prefix = _normalize_prefix(previous_prefix + "/" + prefix.strip("/"))
        self._group_middleware = [*previous_middleware, *_as_list(middleware)]
        try:
            yield self
        finally:
            self._group_prefix = previous_prefix
            self._group_middleware = previous_middleware

    def name(self, route: RouteBuilder, name: str) -> None:
        """Name a registered route (same as ``route.name(name)``)."""
        self._assign_name(route, name)

    def use(self, *middleware: Any) -> None:
        """Add middleware that wraps every matched route.

        Global middleware runs outside group and route middleware.
        """
        self._check_not_frozen()
        self._middleware.extend(middleware)

    def error_handler(self, key: int | type[Exception]) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register a handler for a status code or exception type.

        The handler may accept ``()``, ``(request)``, or
        ``(request, exc)``; its return value is negotiated like a route
        handler's.
        """

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[key] = func
            return func

        return decorator

    @property
    def controllers(self) -> ControllerResolver:
        return self._controllers

    @property
    def validator(self) -> Validator:
        return self._validator

    # -- Named routes --

    def resolve(self, name: str) -> str | None:
        """Return the pattern string of the route named *name*, if any."""
        if self._table is not None:
            return self._table.find_by_name(name)
        builder = self._names.get(name)
        return builder.pattern.template if builder is not None else None

    def url_for(self, name: str, **params: object) -> str:
        """Build a concrete path for a named route.

        Raises ``KeyError`` for an unknown name and ``ValueError`` for a
        missing or invalid placeholder value.
        """
        if self._table is not None:
            return self._table.url_for(name, **params)
        builder = self._names.get(name)
        if builder is None:
            raise KeyError(name)
        return builder.pattern.build(**params)

    def _assign_name(self, builder: RouteBuilder, name: str) -> None:
        self._check_not_frozen()
        existing = self._names.get(name)
        if existing is not None and existing is not builder:
            msg = f"Route name {name!r} is already registered."
            raise ConfigurationError(msg)
        if builder._name is not None:
            self._names.pop(builder._name, None)
        builder._name = name
        self._names[name] = builder

    # -- Compilation --

    @property
    def routes(self) -> tuple[Route, ...]:
        """The compiled routes, in match order. Freezes the router."""
        self._ensure_frozen()
        assert self._table is not None
        return self._table.routes

    def compile(self) -> None:
        """Freeze the router. No more routes, groups, or middleware."""
        self._ensure_frozen()

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile builders into the route table.

        MUST only be called while holding _freeze_lock.
        """
        table = RouteTable()
        for builder in self._builders:
            table.add(builder.build())
        self._table = table
        self._frozen = True
        logger.debug("Compiled %d routes", len(table))

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the router after it has started dispatching. "
                "Register routes, groups, and middleware before the first request."
            )
            raise RuntimeError(msg)

    # -- Dispatch --

    def dispatch(self, request: Request) -> Response:
        """Resolve, run middleware and handler, and always return a Response.

        Resolution failures (404, 405) return immediately without running
        any middleware. Every failure raised by middleware or the handler
        is translated into an error response.
        """
        self._ensure_frozen()
        table = self._table
        assert table is not None

        try:
            try:
                method = HttpMethod.parse(request.method)
            except InvalidMethod:
                allowed = table.allowed_methods(request.path)
                if not allowed:
                    raise RouteNotFound(f"Route not found: {request.method} {request.path}") from None
                raise MethodNotAllowed(allowed) from None
            match = table.resolve(method, request.path)
        except HTTPError as exc:
            return handle_http_error(exc, request, self._error_handlers, self.config)

        if request.validator is None:
            request.validator = self._validator
        if match.params:
            request.set_route_parameters({**request.route_params, **match.params})

        pipeline = MiddlewarePipeline((*self._middleware, *match.route.middleware))
        try:
            result = pipeline.process(request, partial(self._invoke_handler, match.route))
            return negotiate(result, config=self.config)
        except HTTPError as exc:
            return handle_http_error(exc, request, self._error_handlers, self.config)
        except Exception as exc:
            return handle_internal_error(exc, request, self._error_handlers, self.config)

    def _invoke_handler(self, route: Route, request: Request) -> Response:
        """The terminal pipeline step: call the route handler."""
        handler = route.handler
        match handler:
            case FunctionHandler(func=func):
                result = func(request)
            case ControllerRef():
                result = self._controllers.resolve(handler)(request)
        return negotiate(result, config=self.config)

    # -- WSGI adapter --

    def __call__(
        self,
        environ: dict[str, Any],
        start_response: Callable[..., Any],
    ) -> list[bytes]:
        """Serve as a WSGI application."""
        try:
            request = Request.from_environ(
                environ,
                max_content_length=self.config.max_content_length,
            )
        except HTTPError as exc:
            request = _fallback_request(environ)
            response = handle_http_error(exc, request, self._error_handlers, self.config)
        except Exception as exc:
            request = _fallback_request(environ)
            response = handle_internal_error(exc, request, self._error_handlers, self.config)
        else:
            response = self.dispatch(request)

        start_response(f"{response.status} {response.status_text}", response.wsgi_headers())
        if request.method.upper() == "HEAD" or response.status in (204, 304):
            return [b""]
        return [response.body_bytes]
