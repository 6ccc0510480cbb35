"""Fixed-window rate limiting keyed by client IP."""
from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from fastapi import Request

from .errors import RateLimitExceeded

logger = logging.getLogger(__name__)


@dataclass
class Window:
    """Counter for a single key within the current window."""

    started_at: float
    count: int = 0


class FixedWindowRateLimiter:
    """Allow ``limit`` hits per key in each ``window_seconds`` window.

    A key's window starts at its first hit and the counter resets once the
    window has elapsed. State is in-memory and per process. Expired windows
    are swept at most once per window length, so only keys seen within the
    last two windows are kept.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if limit <= 0:
            raise ValueError("limit must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, Window] = {}
        self._last_sweep = clock()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._windows)

    def _sweep(self, now: float) -> None:
        expired = [
            key
            for key, window in self._windows.items()
            if now - window.started_at >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]
        self._last_sweep = now
        if expired:
            logger.debug("Evicted %d expired rate limit windows", len(expired))

    def hit(self, key: str) -> tuple[bool, float]:
        """Count one hit for ``key``.

        Returns ``(allowed, retry_after_seconds)``.
        """
        with self._lock:
            now = self._clock()
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(now)

            window = self._windows.get(key)
            if window is None or now - window.started_at >= self.window_seconds:
                window = Window(started_at=now)
                self._windows[key] = window

            if window.count >= self.limit:
                return (False, window.started_at + self.window_seconds - now)

            window.count += 1
            return (True, 0.0)

    def remaining(self, key: str) -> int:
        with self._lock:
            window = self._windows.get(key)
            if window is None or self._clock() - window.started_at >= self.window_seconds:
                return self.limit
            return max(0, self.limit - window.count)


def client_ip(request: Request) -> str:
    """Client address for rate limiting and the login audit.

    ``X-Forwarded-For`` is only honoured when the app is configured to trust
    proxy headers; otherwise any client could pick its own key.
    """

    settings = request.app.state.settings
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for and settings.trust_proxy_headers:
        return forwarded_for.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


def rate_limit(limiter_name: str, message: str):
    """Build a dependency enforcing the limiter stored on ``app.state``."""

    async def dependency(request: Request) -> None:
        limiter: FixedWindowRateLimiter = getattr(request.app.state, limiter_name)
        key = client_ip(request)
        allowed, retry_after = limiter.hit(key)
        if not allowed:
            logger.warning(
                "Rate limit exceeded for %s on %s (retry in %.0fs)",
                key,
                request.url.path,
                retry_after,
            )
            raise RateLimitExceeded(message, retry_after=max(1, math.ceil(retry_after)))

    return dependency


login_rate_limit = rate_limit(
    "login_limiter", "Too many login attempts, please try again later."
)
password_reset_rate_limit = rate_limit(
    "password_reset_limiter", "Too many password reset requests, please try again later."
)

__all__ = [
    "FixedWindowRateLimiter",
    "client_ip",
    "login_rate_limit",
    "password_reset_rate_limit",
]
