"""Junction: HTTP request routing, middleware, and input validation.

Typed URI patterns, first-match route resolution with 404/405
distinction, onion-style middleware, and rule-string validation.

Basic usage::

    from junction import Router, Request

    router = Router()

    def show_user(request: Request):
        return {"id": request.route_parameter("id")}

    router.get("/users/{id:int}", show_user).name("users.show")

    response = router.dispatch(Request.build("GET", "/users/42"))

Validation::

    def register(request: Request):
        data = request.validated({
            "email": "required|email",
            "age": "required|integer|min:18",
        })
        ...

The router is also a WSGI application: ``wsgiref``, gunicorn, or any
WSGI server can serve it directly.
"""

__version__ = "0.1.0"
__all__ = [
    "ConfigurationError",
    "HTTPError",
    "HttpMethod",
    "JunctionError",
    "MethodNotAllowed",
    "Middleware",
    "Next",
    "NotFound",
    "Request",
    "Response",
    "RouteNotFound",
    "Router",
    "RouterConfig",
    "ValidationFailed",
    "ValidationResult",
    "validate",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import junction`` fast while providing a clean top-level API.
    """
    if name == "Router":
        from junction.routing.router import Router

        return Router

    if name == "RouterConfig":
        from junction.config import RouterConfig

        return RouterConfig

    if name in ("Request", "Response", "HttpMethod"):
        from junction import http as _http

        return getattr(_http, name)

    if name in ("Middleware", "Next"):
        from junction.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("ValidationResult", "validate"):
        from junction import validation as _validation

        return getattr(_validation, name)

    if name in (
        "ConfigurationError",
        "HTTPError",
        "JunctionError",
        "MethodNotAllowed",
        "NotFound",
        "RouteNotFound",
        "ValidationFailed",
    ):
        from junction import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
