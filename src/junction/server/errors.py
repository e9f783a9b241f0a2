"""Error handling pipeline for dispatched requests.

Maps HTTPError exceptions and unexpected failures to JSON Response
objects, using registered error handlers or the default shapes::

    {"error": true, "message": "...", "code": 404}
    {"valid": false, "errors": {"email": ["Must be a valid email address"]}}
"""

import inspect
import logging
from collections.abc import Callable
from http import HTTPStatus
from typing import Any, TypeAlias

from junction.config import RouterConfig
from junction.errors import (
    ControllerMethodNotFound,
    ControllerNotFound,
    HTTPError,
    ValidationFailed,
)
from junction.http.request import Request
from junction.http.response import Response
from junction.server.negotiation import negotiate

logger = logging.getLogger("junction.server")

ErrorHandlers: TypeAlias = dict[int | type, Callable[..., Any]]


def error_payload(status: int, message: str) -> dict[str, Any]:
    """The JSON body shared by every non-validation error response."""
    return {"error": True, "message": message, "code": status}


def _phrase(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return f"Error {status}"


def _find_handler(
    error_handlers: ErrorHandlers,
    exc: Exception,
    status: int,
) -> Callable[..., Any] | None:
    """Exact exception type, then status code, then exception base classes."""
    exc_type = type(exc)
    if exc_type in error_handlers:
        return error_handlers[exc_type]
    if status in error_handlers:
        return error_handlers[status]
    for cls in exc_type.__mro__[1:]:
        if cls in error_handlers:
            return error_handlers[cls]
    return None


def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
    config: RouterConfig,
) -> Response:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept zero, one (request), or two (request, exc) args.
    """
    params = list(inspect.signature(handler).parameters.values())

    if len(params) >= 2:
        result = handler(request, exc)
    elif len(params) == 1:
        result = handler(request)
    else:
        result = handler()

    return negotiate(result, config=config)


def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: ErrorHandlers,
    config: RouterConfig,
) -> Response:
    """Map an HTTPError to a Response using registered error handlers."""
    if isinstance(exc, ControllerNotFound | ControllerMethodNotFound):
        logger.error("%d %s %s - %s", exc.status, request.method, request.path, exc.detail)
    else:
        logger.debug("%d %s %s - %s", exc.status, request.method, request.path, exc.detail)

    handler = _find_handler(error_handlers, exc, exc.status)
    if handler is not None:
        try:
            response = call_error_handler(handler, request, exc, config)
        except Exception:
            logger.exception("Error handler for %d failed", exc.status)
        else:
            # Keep the error status unless the handler chose its own
            if response.status == 200:
                response = response.with_status(exc.status)
            return response

    if isinstance(exc, ValidationFailed):
        response = Response.json(
            exc.result.to_dict(),
            status=exc.status,
            ensure_ascii=config.json_ensure_ascii,
        )
    else:
        message = exc.detail or _phrase(exc.status)
        response = Response.json(
            error_payload(exc.status, message),
            status=exc.status,
            ensure_ascii=config.json_ensure_ascii,
        )
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: ErrorHandlers,
    config: RouterConfig,
) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.path)

    handler = _find_handler(error_handlers, exc, 500)
    if handler is not None:
        try:
            return call_error_handler(handler, request, exc, config)
        except Exception:
            logger.exception("Error handler for 500 failed")

    message = f"{type(exc).__name__}: {exc}" if config.debug else "Internal Server Error"
    return Response.json(
        error_payload(500, message),
        status=500,
        ensure_ascii=config.json_ensure_ascii,
    )
