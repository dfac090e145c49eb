"""Request context middleware: request id, caller identity, timing, rate limiting.

The caller's owner id is read from the bearer token once per request and
published through ``owner_var`` for the log formatter. It also picks the
rate-limit bucket: an authenticated owner shares one budget across all of
their devices and addresses, while anonymous or badly authenticated
requests are budgeted per client address. Routes still authenticate
through ``require_auth``; nothing here rejects a bad token.
"""

import logging
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..core.auth import owner_from_authorization
from ..core.config import settings
from ..core.logging_config import owner_var, request_id_var
from ..exceptions import RateLimitedError

logger = logging.getLogger(__name__)

# Health probes and API docs are never throttled.
_EXEMPT_PATHS = frozenset({"/", "/health", "/api/health", "/docs", "/redoc", "/openapi.json"})


@dataclass
class _Bucket:
    tokens: float
    refilled_at: float


class RateLimiter:
    """Token buckets keyed by caller, refilled continuously at ``limit / 60`` per second.

    The limit is passed on every call so a settings change applies
    immediately. Buckets untouched for ``idle_seconds`` are dropped every
    ``sweep_every`` calls.
    """

    def __init__(self, idle_seconds: float = 120.0, sweep_every: int = 100):
        self.idle_seconds = idle_seconds
        self.sweep_every = sweep_every
        self._buckets: dict[str, _Bucket] = {}
        self._lock = threading.Lock()
        self._calls = 0

    def acquire(self, key: str, limit: int, now: Optional[float] = None) -> float:
        """Spend one token for *key*.

        Returns 0.0 when the request may proceed, otherwise the seconds until
        a token becomes available. A limit of 0 or less disables limiting.
        """
        if limit <= 0:
            return 0.0
        if now is None:
            now = time.monotonic()
        per_second = limit / 60.0

        with self._lock:
            self._calls += 1
            if self._calls % self.sweep_every == 0:
                self._drop_idle(now)

            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = self._buckets[key] = _Bucket(tokens=float(limit), refilled_at=now)
            else:
                elapsed = now - bucket.refilled_at
                bucket.tokens = min(float(limit), bucket.tokens + elapsed * per_second)
                bucket.refilled_at = now

            if bucket.tokens >= 1.0:
                bucket.tokens -= 1.0
                return 0.0
            return (1.0 - bucket.tokens) / per_second

    def _drop_idle(self, now: float) -> None:
        cutoff = now - self.idle_seconds
        for key in [k for k, b in self._buckets.items() if b.refilled_at < cutoff]:
            del self._buckets[key]

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()

    def __len__(self) -> int:
        return len(self._buckets)


rate_limiter = RateLimiter()


def _client_address(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def rate_limit_key(request: Request, owner: Optional[str]) -> str:
    """``owner:<id>`` for an authenticated caller, otherwise ``ip:<address>``.

    With authentication disabled every request shares the dev owner, so the
    address is used instead.
    """
    if owner and settings.auth_enabled:
        return f"owner:{owner}"
    return f"ip:{_client_address(request)}"


class RequestContextMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex[:16]
        owner = owner_from_authorization(request.headers.get("authorization"))
        request_id_var.set(rid)
        owner_var.set(owner or "")

        path = request.url.path
        if path not in _EXEMPT_PATHS:
            key = rate_limit_key(request, owner)
            retry_after = rate_limiter.acquire(key, settings.rate_limit_per_minute)
            if retry_after:
                limited = RateLimitedError(retry_after)
                logger.warning(
                    "Rate limit exceeded",
                    extra={"bucket": key, "path": path, "retry_after": limited.details["retry_after"]},
                )
                return JSONResponse(
                    status_code=limited.status_code,
                    content=limited.to_dict(),
                    headers={"Retry-After": str(int(retry_after) + 1), "X-Request-ID": rid},
                )

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        response.headers["X-Request-ID"] = rid
        response.headers["X-Response-Time"] = f"{duration_ms}ms"
        logger.info(
            "%s %s %s",
            request.method,
            path,
            response.status_code,
            extra={"status_code": response.status_code, "duration_ms": duration_ms},
        )
        return response
