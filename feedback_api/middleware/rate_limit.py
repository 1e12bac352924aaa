"""In-memory rate limiting middleware for the feedback API."""

from __future__ import annotations

import math
import time
from typing import Callable, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Token-bucket rate limiter keyed by client IP.

    Reads are charged against the default bucket; writes under one of
    ``submit_prefixes`` are charged against a separate, smaller bucket so
    a burst of form submissions cannot starve the admin view.

    The client IP is the socket peer address. ``X-Forwarded-For`` is only
    consulted when ``trust_forwarded`` is set, i.e. when the app runs behind
    a proxy that overwrites the header.

    Args:
        app: The ASGI application.
        default_rpm: Default requests per minute for all endpoints.
        submit_rpm: Rate limit for feedback submissions.
        submit_prefixes: URL prefixes whose non-GET requests count as submissions.
        trust_forwarded: Key clients on the first ``X-Forwarded-For`` entry.
        idle_seconds: Buckets untouched for this long are dropped.
        clock: Monotonic time source, in seconds.
    """

    def __init__(
        self,
        app,
        default_rpm: int = 120,
        submit_rpm: int = 30,
        submit_prefixes: tuple[str, ...] = ("/api/feedback",),
        trust_forwarded: bool = False,
        idle_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(app)
        self.default_rpm = max(1, int(default_rpm))
        self.submit_rpm = max(1, int(submit_rpm))
        self.submit_prefixes = submit_prefixes
        self.trust_forwarded = trust_forwarded
        self.idle_seconds = float(idle_seconds)
        self._clock = clock
        # {(ip, bucket_key): [tokens, last_refill_time]}
        self._buckets: dict[tuple[str, str], list[float]] = {}
        self._last_sweep: Optional[float] = None

    def _get_client_ip(self, request: Request) -> str:
        if self.trust_forwarded:
            forwarded = request.headers.get("x-forwarded-for")
            if forwarded:
                return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    def _is_submission(self, path: str, method: str) -> bool:
        if method in ("GET", "HEAD", "OPTIONS"):
            return False
        return any(path.startswith(prefix) for prefix in self.submit_prefixes)

    def _evict_idle(self, now: float) -> None:
        if self._last_sweep is None:
            self._last_sweep = now
            return
        if now - self._last_sweep < self.idle_seconds:
            return
        self._last_sweep = now
        # An idle bucket has refilled completely, so dropping it changes nothing.
        stale = [key for key, bucket in self._buckets.items() if now - bucket[1] >= self.idle_seconds]
        for key in stale:
            del self._buckets[key]

    def _check_rate(self, ip: str, bucket_key: str, rpm: int) -> bool:
        """Return True if request is allowed, False if rate limited."""
        now = self._clock()
        self._evict_idle(now)
        key = (ip, bucket_key)
        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = [float(rpm), now]
            self._buckets[key] = bucket

        elapsed = now - bucket[1]
        bucket[1] = now
        bucket[0] = min(float(rpm), bucket[0] + elapsed * (rpm / 60.0))

        if bucket[0] >= 1.0:
            bucket[0] -= 1.0
            return True
        return False

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if path in ("/health", "/docs", "/openapi.json"):
            return await call_next(request)

        ip = self._get_client_ip(request)
        is_submission = self._is_submission(path, request.method)
        rpm = self.submit_rpm if is_submission else self.default_rpm
        bucket_key = "submit" if is_submission else "default"

        if not self._check_rate(ip, bucket_key, rpm):
            retry_after = max(1, math.ceil(60 / rpm))
            return JSONResponse(
                status_code=429,
                content={
                    "error": "Too many requests. Please slow down.",
                    "retry_after_seconds": retry_after,
                },
                headers={"Retry-After": str(retry_after)},
            )

        return await call_next(request)


__all__ = ["RateLimitMiddleware"]
