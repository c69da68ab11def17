from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from legaldesk.api.errors import error_response
from legaldesk.core.auth import resolve_token_subject
from legaldesk.core.config import get_settings


@dataclass
class _BucketState:
    tokens: float
    last_refill: float


class _TokenBucketLimiter:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._buckets: dict[tuple[str, str], _BucketState] = {}

    def take(self, caller_key: str, route_group: str, capacity: int, window_seconds: int) -> tuple[bool, int]:
        if capacity <= 0:
            return False, window_seconds

        now = time.monotonic()
        refill_rate = capacity / float(window_seconds)
        key = (caller_key, route_group)

        with self._lock:
            current = self._buckets.get(key)
            if current is None:
                current = _BucketState(tokens=float(capacity), last_refill=now)
                self._buckets[key] = current

            elapsed = max(0.0, now - current.last_refill)
            current.tokens = min(float(capacity), current.tokens + (elapsed * refill_rate))
            current.last_refill = now

            if current.tokens < 1.0:
                retry_after = max(1, math.ceil((1.0 - current.tokens) / refill_rate))
                return False, retry_after

            current.tokens -= 1.0
            return True, 0

    def clear(self) -> None:
        with self._lock:
            self._buckets.clear()


_limiter = _TokenBucketLimiter()


class MutationRateLimitMiddleware(BaseHTTPMiddleware):
    """Token-bucket limit on POST/PATCH/DELETE under /api, keyed by caller and resource group."""

    mutating_methods = {"POST", "PATCH", "PUT", "DELETE"}

    async def dispatch(self, request: Request, call_next):  # type: ignore[no-untyped-def]
        settings = get_settings()
        if settings.rate_limit_disabled:
            return await call_next(request)

        path = request.url.path
        if not path.startswith("/api/") or request.method.upper() not in self.mutating_methods:
            return await call_next(request)

        allowed, retry_after = _limiter.take(
            caller_key=_resolve_caller_key(request),
            route_group=_resolve_route_group(path),
            capacity=settings.rate_limit_mutations_per_minute,
            window_seconds=60,
        )
        if allowed:
            return await call_next(request)

        response = error_response(
            request,
            status_code=429,
            code="rate_limited",
            message="Too many requests",
        )
        response.headers["Retry-After"] = str(retry_after)
        response.headers["X-Correlation-Id"] = str(getattr(request.state, "correlation_id", ""))
        return response


def _resolve_route_group(path: str) -> str:
    parts = [part for part in path.split("/") if part]
    if len(parts) < 2:
        return "api"
    return parts[1]


def _resolve_caller_key(request: Request) -> str:
    subject = resolve_token_subject(request)
    if subject is not None:
        return f"user:{subject}"
    # Guest bookings and registrations are limited per client address.
    client_host = request.client.host if request.client is not None else "unknown"
    return f"guest:{client_host}"


def reset_rate_limiter() -> None:
    _limiter.clear()
