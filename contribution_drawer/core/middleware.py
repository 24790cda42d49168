from collections import defaultdict
from collections import deque
from collections.abc import Awaitable
from collections.abc import Callable
from threading import RLock
from time import monotonic

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response


class DrawingRateLimitMiddleware(BaseHTTPMiddleware):
    """In-memory per-client rate limiter for session creation and export.

    Each limited route has its own window, so creating a session does not
    use up a client's export allowance.
    """

    def __init__(
        self, app, requests_per_window: int = 30, window_seconds: int = 60
    ) -> None:
        super().__init__(app)
        self.max_requests = max(1, requests_per_window)
        self.window_seconds = max(1, window_seconds)
        # Request timestamps per (route, client) pair.
        self._buckets: dict[tuple[str, str], deque[float]] = defaultdict(deque)
        self._lock = RLock()

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        route = self.limited_route(request)
        if route is None:
            return await call_next(request)

        retry_after = self._acquire((route, self._client_ip(request)), monotonic())
        if retry_after is not None:
            return JSONResponse(
                status_code=429,
                content={"detail": "Too Many Requests"},
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)

    def _acquire(self, key: tuple[str, str], now: float) -> int | None:
        """Record a request, or return seconds to wait when over the limit."""

        with self._lock:
            bucket = self._buckets[key]
            while bucket and bucket[0] <= now - self.window_seconds:
                bucket.popleft()

            if len(bucket) >= self.max_requests:
                return max(1, int(self.window_seconds - (now - bucket[0])))
            bucket.append(now)
            return None

    @staticmethod
    def limited_route(request: Request) -> str | None:
        path = request.url.path.rstrip("/")
        if request.method == "POST" and path == "/sessions":
            return "create"
        if (
            request.method == "GET"
            and path.startswith("/sessions/")
            and path.endswith("/export")
        ):
            return "export"
        return None

    @staticmethod
    def _client_ip(request: Request) -> str:
        # Reverse proxies usually set X-Forwarded-For.
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip() or "unknown"

        if request.client and request.client.host:
            return request.client.host

        return "unknown"
