"""Middleware: Protocol-based, no inheritance required.

A middleware is any callable matching:
    def mw(request: Request, next: Next) -> Response

Built-in middleware:
    AccessLogMiddleware -- Request/response logging with header masking
    CORSMiddleware -- Cross-Origin Resource Sharing
    RateLimitMiddleware -- Fixed-window limits over a pluggable store
"""

from junction.middleware.access_log import AccessLogConfig, AccessLogMiddleware
from junction.middleware.cors import CORSConfig, CORSMiddleware
from junction.middleware.pipeline import MiddlewarePipeline
from junction.middleware.protocol import Middleware, Next
from junction.middleware.rate_limit import (
    InMemoryRateLimitStore,
    RateLimitConfig,
    RateLimitMiddleware,
    RateLimitStore,
)

__all__ = [
    "AccessLogConfig",
    "AccessLogMiddleware",
    "CORSConfig",
    "CORSMiddleware",
    "InMemoryRateLimitStore",
    "Middleware",
    "MiddlewarePipeline",
    "Next",
    "RateLimitConfig",
    "RateLimitMiddleware",
    "RateLimitStore",
]
