"""Per-client sliding-window rate limiting for the INFERA API."""

import time
from collections import defaultdict
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

# Routes that spend provider tokens
AI_ROUTES = ("/api/generate", "/api/refine", "/api/code-assist")


class RateLimitMiddleware(BaseHTTPMiddleware):
    """In-memory limiter keyed by client address.

    Counts are per process; a multi-worker deployment needs a shared store.
    """

    # Prune stale client keys every 5 minutes
    _CLEANUP_INTERVAL = 300
    _WINDOW = 60

    def __init__(self, app, requests_per_minute: int = 60, ai_requests_per_minute: int = 10):
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self.ai_requests_per_minute = ai_requests_per_minute
        self._requests: dict[str, list[float]] = defaultdict(list)
        self._last_cleanup = time.time()

    def _get_client_id(self, request: Request) -> str:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
        if request.client:
            return request.client.host
        return "unknown"

    def _is_ai_route(self, path: str) -> bool:
        return path.startswith(AI_ROUTES)

    def _cleanup_stale_keys(self) -> None:
        now = time.time()
        if now - self._last_cleanup < self._CLEANUP_INTERVAL:
            return
        self._last_cleanup = now
        window_start = now - self._WINDOW
        stale_keys = [
            key for key, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] < window_start
        ]
        for key in stale_keys:
            del self._requests[key]

    def _check_rate(self, key: str, limit: int) -> bool:
        """Record a hit for `key` and report whether it is within `limit`."""
        now = time.time()
        window_start = now - self._WINDOW
        self._requests[key] = [t for t in self._requests[key] if t > window_start]

        if len(self._requests[key]) >= limit:
            return False

        self._requests[key].append(now)
        return True

    @staticmethod
    def _too_many(detail: str) -> JSONResponse:
        return JSONResponse(status_code=429, content={"detail": detail}, headers={"Retry-After": "60"})

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path == "/api/health":
            return await call_next(request)

        self._cleanup_stale_keys()
        client_id = self._get_client_id(request)

        if self._is_ai_route(request.url.path):
            if not self._check_rate(f"{client_id}:ai", self.ai_requests_per_minute):
                return self._too_many("AI request rate limit exceeded. Please wait before trying again.")

        if not self._check_rate(client_id, self.requests_per_minute):
            return self._too_many("Rate limit exceeded. Please wait before trying again.")

        return await call_next(request)
