"""Access logging middleware.

Writes one line when a request arrives and one when its response leaves,
through the ``junction.access`` logger. The library never configures
handlers; attach one in the application::

    logging.getLogger("junction.access").addHandler(logging.StreamHandler())
"""

import json
import logging
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from junction.http.request import Request
from junction.http.response import Response
from junction.middleware.protocol import Next

logger = logging.getLogger("junction.access")

MASK = "***MASKED***"


@dataclass(frozen=True, slots=True)
class AccessLogConfig:
    """Access log configuration.

    ``exclude_paths`` are path prefixes that are neither logged nor timed.
    Bodies are only logged when the matching ``log_*_body`` flag is set,
    and are cut at ``max_body_length`` characters.
    """

    exclude_paths: tuple[str, ...] = ()
    sensitive_headers: tuple[str, ...] = ("authorization", "x-api-key", "cookie", "set-cookie")
    log_request_body: bool = False
    log_response_body: bool = False
    max_body_length: int = 1000


def level_for_status(status: int) -> int:
    """ERROR for 5xx, WARNING for 4xx, INFO otherwise."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class AccessLogMiddleware:
    """Log requests and responses, and add an ``X-Response-Time`` header.

    Sensitive header values are replaced with ``***MASKED***`` in the
    structured ``extra`` data attached to each record.

    Usage::

        router.use(AccessLogMiddleware(AccessLogConfig(exclude_paths=("/health",))))
    """

    __slots__ = ("_sensitive", "config")

    def __init__(self, config: AccessLogConfig | None = None) -> None:
        self.config = config or AccessLogConfig()
        self._sensitive = frozenset(h.lower() for h in self.config.sensitive_headers)

    def _excluded(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.config.exclude_paths)

    def mask_headers(self, headers: Mapping[str, str] | Iterable[tuple[str, str]]) -> dict[str, str]:
        pairs = headers.items() if isinstance(headers, Mapping) else headers
        return {
            name: MASK if name.lower() in self._sensitive else value
            for name, value in pairs
        }

    def _truncate(self, body: str) -> str:
        limit = self.config.max_body_length
        if len(body) <= limit:
            return body
        return body[:limit] + "... (truncated)"

    def _log_request(self, request: Request) -> None:
        context: dict[str, Any] = {
            "method": request.method,
            "path": request.path,
            "query": dict(request.query),
            "ip": request.ip,
            "user_agent": request.user_agent,
            "headers": self.mask_headers(request.headers),
        }
        if self.config.log_request_body and request.method.upper() in ("POST", "PUT", "PATCH"):
            context["body"] = self._truncate(json.dumps(request.body, default=str))
        logger.info(
            "%s %s - IP: %s",
            request.method,
            request.path,
            request.ip,
            extra={"access": context},
        )

    def _log_response(self, request: Request, response: Response, duration_ms: float) -> None:
        context: dict[str, Any] = {
            "method": request.method,
            "path": request.path,
            "status": response.status,
            "duration_ms": duration_ms,
            "headers": self.mask_headers(response.headers),
        }
        if self.config.log_response_body:
            context["body"] = self._truncate(response.body_bytes.decode("utf-8", errors="replace"))
        logger.log(
            level_for_status(response.status),
            "%s %s - Status: %d - Duration: %.2fms",
            request.method,
            request.path,
            response.status,
            duration_ms,
            extra={"access": context},
        )

    def __call__(self, request: Request, next: Next) -> Response:
        if self._excluded(request.path):
            return next(request)

        start = time.perf_counter()
        self._log_request(request)
        response = next(request)
        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        self._log_response(request, response, duration_ms)
        return response.with_header("X-Response-Time", f"{duration_ms}ms")
