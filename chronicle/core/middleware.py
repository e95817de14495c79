import logging
import math
from collections import deque
from collections.abc import Awaitable
from collections.abc import Callable
from collections.abc import Iterable
from threading import RLock
from time import monotonic

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from chronicle.core.security import parse_bearer_header
from chronicle.core.security import token_fingerprint


logger = logging.getLogger(__name__)


class SlidingWindow:
    """Start times of the requests one client made in the last window."""

    def __init__(self, limit: int, window_seconds: int) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._starts: deque[float] = deque()

    def acquire(self, now: float) -> int | None:
        """Record a request at `now`, or return seconds to wait when full."""

        while self._starts and self._starts[0] <= now - self.window_seconds:
            self._starts.popleft()

        if len(self._starts) >= self.limit:
            waited = now - self._starts[0]
            return max(1, math.ceil(self.window_seconds - waited))

        self._starts.append(now)
        return None


class StatsRateLimitMiddleware(BaseHTTPMiddleware):
    """Limit live stats requests per GitHub token.

    Every live stats request spends GraphQL quota of the token it carries, so
    requests with a bearer token share one window per token whatever address
    they come from. Requests without a token are counted per client IP.
    """

    def __init__(
        self,
        app,
        requests_per_window: int = 30,
        window_seconds: int = 60,
        paths: Iterable[str] = ("/stats/me",),
    ) -> None:
        super().__init__(app)
        self.requests_per_window = max(1, requests_per_window)
        self.window_seconds = max(1, window_seconds)
        self.paths = frozenset(paths)
        self._windows: dict[str, SlidingWindow] = {}
        self._lock = RLock()

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.method != "GET" or request.url.path not in self.paths:
            return await call_next(request)

        key = self.client_key(request)
        with self._lock:
            window = self._windows.get(key)
            if window is None:
                window = SlidingWindow(self.requests_per_window, self.window_seconds)
                self._windows[key] = window
            retry_after = window.acquire(monotonic())

        if retry_after is not None:
            logger.info("Rate limited %s on %s", key, request.url.path)
            return JSONResponse(
                status_code=429,
                content={"detail": "Too Many Requests"},
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)

    @staticmethod
    def client_key(request: Request) -> str:
        token = parse_bearer_header(request.headers.get("authorization"))
        if token:
            return f"token:{token_fingerprint(token)}"

        # Reverse proxies put the original client first in X-Forwarded-For.
        forwarded_for = request.headers.get("x-forwarded-for", "")
        ip = forwarded_for.split(",")[0].strip()
        if not ip and request.client:
            ip = request.client.host
        return f"ip:{ip or 'unknown'}"
