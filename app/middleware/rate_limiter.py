"""Rate limiting middleware for FastAPI applications."""

import math
import time
from collections import defaultdict, deque
from typing import Deque, Dict, Iterable, Optional, Tuple

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

WINDOW_SECONDS = 60


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Rate limiting middleware that tracks requests per IP address.

    Only requests whose path starts with one of ``path_prefixes`` are counted;
    with no prefixes every request is. ``X-Forwarded-For`` and ``X-Real-IP``
    are only honoured with ``trust_forwarded=True``, i.e. behind a proxy that
    overwrites them; otherwise the connection address is used.
    """

    def __init__(
        self,
        app,
        requests_per_minute: int = 10,
        path_prefixes: Optional[Iterable[str]] = None,
        trust_forwarded: bool = False,
    ):
        super().__init__(app)
        self.trust_forwarded = trust_forwarded
        self.requests_per_minute = requests_per_minute
        self.path_prefixes: Tuple[str, ...] = tuple(path_prefixes or ())
        # Store request timestamps per IP
        self.request_history: Dict[str, Deque[float]] = defaultdict(deque)

    async def dispatch(self, request: Request, call_next):
        if not self._is_limited_path(request.url.path):
            return await call_next(request)

        client_ip = self._get_client_ip(request)

        retry_after = self._retry_after(client_ip)
        if retry_after is not None:
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limited",
                    "detail": (
                        f"Rate limit exceeded. Maximum {self.requests_per_minute} "
                        "requests per minute allowed."
                    ),
                },
                headers={"Retry-After": str(retry_after)},
            )

        self._record_request(client_ip)
        return await call_next(request)

    def _is_limited_path(self, path: str) -> bool:
        if not self.path_prefixes:
            return True
        return path.startswith(self.path_prefixes)

    def _get_client_ip(self, request: Request) -> str:
        """Extract client IP from request headers or connection."""
        if not self.trust_forwarded:
            return request.client.host if request.client else "unknown"

        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            # Take the first IP in the chain
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

        return request.client.host if request.client else "unknown"

    def _retry_after(self, client_ip: str) -> Optional[int]:
        """Return seconds until the client may retry, or None if it is within the limit."""
        current_time = time.time()
        window_start = current_time - WINDOW_SECONDS

        ip_requests = self.request_history[client_ip]
        while ip_requests and ip_requests[0] < window_start:
            ip_requests.popleft()

        if len(ip_requests) < self.requests_per_minute:
            return None
        return max(1, math.ceil(ip_requests[0] + WINDOW_SECONDS - current_time))

    def _record_request(self, client_ip: str):
        """Record a request for the given IP."""
        self.request_history[client_ip].append(time.time())
        self._cleanup_old_entries()

    def _cleanup_old_entries(self):
        """Drop IPs that have not made a request within the window."""
        window_start = time.time() - WINDOW_SECONDS
        stale = [
            ip
            for ip, requests in self.request_history.items()
            if not requests or requests[-1] < window_start
        ]
        for ip in stale:
            del self.request_history[ip]
