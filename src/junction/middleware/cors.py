"""CORS middleware.

Handles preflight requests and adds CORS headers to actual responses.
Origins may be exact (``https://example.com``), wildcard subdomain
patterns (``https://*.example.com``), or ``"*"``.

Preflight requests only reach middleware when an ``OPTIONS`` route
matches the path, so register one (or use ``router.match``) for routes
that browsers will preflight.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from junction.http.request import Request
from junction.http.response import Response
from junction.middleware.protocol import Next


@dataclass(frozen=True, slots=True)
class CORSConfig:
    """CORS middleware configuration.

    All fields have secure defaults (nothing is allowed).
    Override what you need::

        CORSConfig(
            allow_origins=("https://example.com", "https://*.example.com"),
            allow_methods=("GET", "POST"),
        )
    """

    allow_origins: tuple[str, ...] = ()
    allow_methods: tuple[str, ...] = ("GET", "HEAD", "OPTIONS")
    allow_headers: tuple[str, ...] = ()
    expose_headers: tuple[str, ...] = ()
    allow_credentials: bool = False
    max_age: int = 600  # 10 minutes

    @classmethod
    def allow_all(cls) -> CORSConfig:
        """Any origin, common methods, any header, no credentials."""
        return cls(
            allow_origins=("*",),
            allow_methods=("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"),
            allow_headers=("*",),
        )

    @classmethod
    def production(cls, origins: tuple[str, ...]) -> CORSConfig:
        """Listed origins only, with credentials and a day-long preflight cache."""
        return cls(
            allow_origins=origins,
            allow_methods=("GET", "POST", "PUT", "PATCH", "DELETE"),
            allow_headers=("Content-Type", "Authorization", "X-Requested-With"),
            allow_credentials=True,
            max_age=86400,
        )


def _wildcard_regex(pattern: str) -> re.Pattern[str]:
    parts = re.split(r"(\*)", pattern)
    return re.compile("".join("[^/]+" if part == "*" else re.escape(part) for part in parts))


class CORSMiddleware:
    """Standards-compliant CORS middleware.

    Handles:
    - Preflight ``OPTIONS`` requests (returns 204 with CORS headers)
    - Simple and actual requests (adds CORS headers to response)
    - Credential support (``Access-Control-Allow-Credentials``)
    - Wildcard origins (``"*"``) when credentials are disabled

    Requests without an ``Origin`` header, or from an origin that is not
    allowed, pass through untouched.

    Usage::

        router.use(CORSMiddleware(CORSConfig(
            allow_origins=("https://example.com",),
            allow_methods=("GET", "POST", "PUT"),
            allow_headers=("Content-Type", "Authorization"),
        )))
    """

    __slots__ = ("_origin_patterns", "config")

    def __init__(self, config: CORSConfig | None = None) -> None:
        self.config = config or CORSConfig()
        self._origin_patterns = tuple(
            _wildcard_regex(origin)
            for origin in self.config.allow_origins
            if "*" in origin and origin != "*"
        )

    def _is_allowed_origin(self, origin: str) -> bool:
        """Check if the origin is in the allow list."""
        if "*" in self.config.allow_origins:
            return True
        if origin in self.config.allow_origins:
            return True
        return any(pattern.fullmatch(origin) for pattern in self._origin_patterns)

    def _add_cors_headers(self, response: Response, origin: str) -> Response:
        """Add CORS headers to a response."""
        cfg = self.config

        if "*" in cfg.allow_origins and not cfg.allow_credentials:
            response = response.with_header("Access-Control-Allow-Origin", "*")
        else:
            response = response.with_header("Access-Control-Allow-Origin", origin)
            response = response.with_header("Vary", "Origin")

        if cfg.allow_credentials:
            response = response.with_header("Access-Control-Allow-Credentials", "true")

        if cfg.expose_headers:
            response = response.with_header(
                "Access-Control-Expose-Headers",
                ", ".join(cfg.expose_headers),
            )

        return response

    def _preflight_response(self, origin: str, request_method: str | None) -> Response:
        """Build a preflight response with all CORS headers."""
        cfg = self.config
        response = self._add_cors_headers(Response.no_content(), origin)

        if request_method:
            response = response.with_header(
                "Access-Control-Allow-Methods",
                ", ".join(cfg.allow_methods),
            )

        if cfg.allow_headers:
            response = response.with_header(
                "Access-Control-Allow-Headers",
                ", ".join(cfg.allow_headers),
            )

        return response.with_header("Access-Control-Max-Age", str(cfg.max_age))

    def __call__(self, request: Request, next: Next) -> Response:
        origin = request.header("origin")

        # No Origin header: not a CORS request
        if origin is None or not self._is_allowed_origin(origin):
            return next(request)

        if request.method.upper() == "OPTIONS":
            return self._preflight_response(origin, request.header("access-control-request-method"))

        return self._add_cors_headers(next(request), origin)
