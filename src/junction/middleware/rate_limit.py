"""Fixed-window rate limiting middleware.

Counters live in a ``RateLimitStore`` passed to the middleware, never in
module or class state. ``InMemoryRateLimitStore`` suits a single process;
a shared store (Redis, memcached) only needs ``get``, ``increment``, and
``expire``.
"""

import hashlib
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from junction.http.request import Request
from junction.http.response import Response
from junction.middleware.protocol import Next


class RateLimitStore(Protocol):
    """Counter storage for ``RateLimitMiddleware``.

    Implementations must be safe to call from several threads at once.
    """

    def get(self, key: str) -> int:
        """Current count for *key*, or 0 when absent or expired."""
        ...

    def increment(self, key: str, window_seconds: int) -> tuple[int, float]:
        """Add one to *key* and return ``(count, reset_at)``.

        Starts a new window of *window_seconds* when the key is absent or
        expired. ``reset_at`` is the epoch time at which the window ends.
        """
        ...

    def expire(self, key: str) -> None:
        """Forget *key*."""
        ...


class InMemoryRateLimitStore:
    """Thread-safe in-process store.

    ``clock`` returns the current epoch time; tests pass a fake one.
    Expired windows are swept at most once per window length, so keys
    that stop receiving traffic do not accumulate.
    """

    __slots__ = ("_clock", "_counters", "_lock", "_next_sweep")

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._counters: dict[str, tuple[int, float]] = {}
        self._next_sweep = 0.0

    def __len__(self) -> int:
        with self._lock:
            return len(self._counters)

    def get(self, key: str) -> int:
        with self._lock:
            count, reset_at = self._counters.get(key, (0, 0.0))
            return count if reset_at > self._clock() else 0

    def increment(self, key: str, window_seconds: int) -> tuple[int, float]:
        with self._lock:
            now = self._clock()
            if now >= self._next_sweep:
                self._sweep(now)
                self._next_sweep = now + window_seconds
            count, reset_at = self._counters.get(key, (0, 0.0))
            if reset_at <= now:
                count, reset_at = 0, now + window_seconds
            count += 1
            self._counters[key] = (count, reset_at)
            return count, reset_at

    def expire(self, key: str) -> None:
        with self._lock:
            self._counters.pop(key, None)

    def _sweep(self, now: float) -> None:
        # caller holds the lock
        stale = [key for key, (_, reset_at) in self._counters.items() if reset_at <= now]
        for key in stale:
            del self._counters[key]

    def clear(self) -> None:
        with self._lock:
            self._counters.clear()


@dataclass(frozen=True, slots=True)
class RateLimitConfig:
    """Limit configuration: *max_requests* per *window_seconds* per key."""

    max_requests: int = 60
    window_seconds: int = 60
    key_prefix: str = "rate_limit"
    key_header: str | None = None


def _client_identity(request: Request, header: str | None) -> str:
    if header:
        raw = request.header(header)
        if raw:
            # Comma-separated proxy chain, first hop is the client
            forwarded = raw.split(",")[0].strip()
            if forwarded:
                return forwarded
    return request.ip or "unknown"


class RateLimitMiddleware:
    """Reject requests over the limit with 429 Too Many Requests.

    Every response carries ``X-RateLimit-Limit``, ``X-RateLimit-Remaining``
    and ``X-RateLimit-Reset``. A rejected request also gets ``Retry-After``
    and a JSON body; the handler is not called.

    The default key is the client address plus the request path. Pass
    *key_func* to key on something else (an API key, a user id)::

        router.use(RateLimitMiddleware(
            InMemoryRateLimitStore(),
            RateLimitConfig(max_requests=100),
            key_func=lambda request: request.header("x-api-key") or request.ip,
        ))
    """

    __slots__ = ("_clock", "_key_func", "config", "store")

    def __init__(
        self,
        store: RateLimitStore,
        config: RateLimitConfig | None = None,
        *,
        key_func: Callable[[Request], str | None] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.config = config or RateLimitConfig()
        self._key_func = key_func
        self._clock = clock

    def key_for(self, request: Request) -> str:
        if self._key_func is not None:
            identity = self._key_func(request) or _client_identity(request, None)
        else:
            identity = f"{_client_identity(request, self.config.key_header)}:{request.path}"
        digest = hashlib.sha256(identity.encode("utf-8")).hexdigest()
        return f"{self.config.key_prefix}:{digest}"

    def __call__(self, request: Request, next: Next) -> Response:
        cfg = self.config
        key = self.key_for(request)
        count, reset_at = self.store.increment(key, cfg.window_seconds)
        reset = str(int(reset_at))

        if count > cfg.max_requests:
            retry_after = max(1, int(reset_at - self._clock()))
            return Response.json(
                {
                    "error": True,
                    "message": (
                        f"Rate limit exceeded. Maximum {cfg.max_requests} requests "
                        f"per {cfg.window_seconds} seconds"
                    ),
                    "code": 429,
                    "retry_after": retry_after,
                },
                status=429,
                headers={
                    "X-RateLimit-Limit": str(cfg.max_requests),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": reset,
                    "Retry-After": str(retry_after),
                },
            )

        response = next(request)
        return response.with_headers(
            {
                "X-RateLimit-Limit": str(cfg.max_requests),
                "X-RateLimit-Remaining": str(max(0, cfg.max_requests - count)),
                "X-RateLimit-Reset": reset,
            }
        )
