"""
Cat API — Rate Limiting Middleware
====================================

What:  Per-client sliding window limit on API requests.
How:   Keeps a deque of request timestamps per client address; entries older
       than RATE_LIMIT_WINDOW are dropped before each check.

Not limited:
    /health, the OpenAPI docs, and GET /uploads/* (image tags on the map
    page fetch many thumbnails at once).

Single-process only: the counters live in this worker's memory.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Deque, Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from catapi.config import settings
from catapi.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Rejects a client with 429 once it has made RATE_LIMIT_REQUESTS requests
    inside the last RATE_LIMIT_WINDOW seconds. The Retry-After header says
    when the oldest counted request leaves the window.
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}
    EXCLUDED_PREFIXES = ("/uploads/",)

    # Forget idle clients every this many recorded requests
    SWEEP_EVERY = 1000

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._since_sweep = 0

    def _is_excluded(self, path: str) -> bool:
        return path in self.EXCLUDED_PATHS or path.startswith(self.EXCLUDED_PREFIXES)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if self._is_excluded(request.url.path):
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        now = time.time()
        window_start = now - settings.rate_limit_window

        hits = self._hits[client]
        while hits and hits[0] <= window_start:
            hits.popleft()

        if len(hits) >= settings.rate_limit_requests:
            retry_after = int(hits[0] + settings.rate_limit_window - now) + 1
            logger.warning(
                "Rate limit exceeded for %s: %d requests in %ds",
                client,
                len(hits),
                settings.rate_limit_window,
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": f"Too many requests. Retry in {retry_after} seconds.",
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(retry_after)},
            )

        hits.append(now)
        self._since_sweep += 1
        if self._since_sweep >= self.SWEEP_EVERY:
            self._sweep(window_start)

        return await call_next(request)

    def _sweep(self, window_start: float) -> None:
        idle = [c for c, hits in self._hits.items() if not hits or hits[-1] <= window_start]
        for client in idle:
            del self._hits[client]
        self._since_sweep = 0
        if idle:
            logger.debug("Dropped rate limit state for %d idle clients", len(idle))
