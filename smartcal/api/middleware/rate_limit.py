"""Rate limiting middleware for SmartCal API

Every AI request costs up to four Gemini calls, so requests are limited per
client IP (per minute and per hour). Buckets live in TTLCaches so idle IPs
are evicted without a cleanup pass.

Single-process only; a multi-instance deployment needs a shared store.
"""

from __future__ import annotations

import ipaddress
import time
from collections.abc import Callable, Iterable
from typing import Any

from cachetools import TTLCache
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from smartcal.config import RATE_LIMIT_MAX_IPS, RATE_LIMIT_RPH, RATE_LIMIT_RPM
from smartcal.infrastructure.settings import is_development
from smartcal.observability.telemetry import counter, log_event
from smartcal.utils.redaction import redact

# Paths that never count against the limit
EXEMPT_PATHS = frozenset({"/", "/health"})


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Per-IP request limiter.

    Rejections are answered with 429 plus Retry-After. Allowed responses carry
    X-RateLimit-* headers.
    """

    def __init__(
        self,
        app: Any,
        requests_per_minute: int = RATE_LIMIT_RPM,
        requests_per_hour: int = RATE_LIMIT_RPH,
        cors_origins: Iterable[str] = (),
    ) -> None:
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self.requests_per_hour = requests_per_hour
        self.cors_origins = frozenset(cors_origins)

        # Request tracking: {ip: [timestamp, ...]}
        self.minute_buckets: TTLCache[str, list[float]] = TTLCache(
            maxsize=RATE_LIMIT_MAX_IPS, ttl=120
        )
        self.hour_buckets: TTLCache[str, list[float]] = TTLCache(
            maxsize=RATE_LIMIT_MAX_IPS, ttl=7200
        )

    @staticmethod
    def _is_valid_ip(ip_str: str) -> bool:
        try:
            ipaddress.ip_address(ip_str)
            return True
        except ValueError:
            return False

    def _get_client_ip(self, request: Request) -> str:
        """Client IP. X-Forwarded-For is only honored in development."""
        if is_development():
            forwarded = request.headers.get("X-Forwarded-For")
            if forwarded:
                ip = forwarded.split(",")[0].strip()
                if self._is_valid_ip(ip):
                    return ip

        return request.client.host if request.client else "unknown"

    @staticmethod
    def _recent(bucket: list[float], max_age_seconds: int, now: float) -> list[float]:
        return [ts for ts in bucket if now - ts < max_age_seconds]

    def _cors_headers(self, request: Request) -> dict[str, str]:
        # 429s are returned before CORSMiddleware sees the response
        origin = request.headers.get("origin", "")
        if origin and (origin in self.cors_origins or "*" in self.cors_origins):
            return {"Access-Control-Allow-Origin": origin}
        return {}

    def _reject(self, request: Request, client_ip: str, window: str, limit: int, retry_after: int):
        counter(f"api.rate_limit.{window}")
        log_event("api.rate_limit.exceeded", ip=redact(client_ip), limit=window)
        return JSONResponse(
            status_code=429,
            content={
                "error": f"Rate limit exceeded. Maximum {limit} requests per {window}.",
                "retry_after": retry_after,
            },
            headers={"Retry-After": str(retry_after), **self._cors_headers(request)},
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in EXEMPT_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        client_ip = self._get_client_ip(request)
        now = time.time()

        minute_bucket = self._recent(self.minute_buckets.get(client_ip, []), 60, now)
        hour_bucket = self._recent(self.hour_buckets.get(client_ip, []), 3600, now)

        if len(minute_bucket) >= self.requests_per_minute:
            self.minute_buckets[client_ip] = minute_bucket
            return self._reject(request, client_ip, "minute", self.requests_per_minute, 60)

        if len(hour_bucket) >= self.requests_per_hour:
            self.hour_buckets[client_ip] = hour_bucket
            return self._reject(request, client_ip, "hour", self.requests_per_hour, 3600)

        minute_bucket.append(now)
        hour_bucket.append(now)
        self.minute_buckets[client_ip] = minute_bucket
        self.hour_buckets[client_ip] = hour_bucket

        response = await call_next(request)

        response.headers["X-RateLimit-Limit-Minute"] = str(self.requests_per_minute)
        response.headers["X-RateLimit-Remaining-Minute"] = str(
            self.requests_per_minute - len(minute_bucket)
        )
        response.headers["X-RateLimit-Limit-Hour"] = str(self.requests_per_hour)
        response.headers["X-RateLimit-Remaining-Hour"] = str(
            self.requests_per_hour - len(hour_bucket)
        )

        return response
