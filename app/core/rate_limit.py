"""
Fixed-window rate limiting for the login endpoint.

Only login is limited; the goal is to slow down credential guessing, not to
act as general admission control. State is kept in memory, so the window is
per process.
"""

import math
import threading
import time
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Tuple

from fastapi import Request

from app.core.config import settings
from app.core.exceptions import RateLimitedError

logger = logging.getLogger(__name__)


@dataclass
class RateLimitConfig:
    """Configuration for a fixed-window limiter."""

    # Requests allowed per window
    max_requests: int = 100

    # Window length in seconds
    window_seconds: float = 15 * 60

    # Read the client address from proxy headers (only behind a trusted proxy)
    trust_proxy_headers: bool = False

    trusted_proxy_headers: List[str] = field(default_factory=lambda: [
        "X-Forwarded-For",
        "X-Real-IP",
    ])


@dataclass
class WindowState:
    """Counter for a single client within the current window."""
    window_start: float
    request_count: int = 0


class FixedWindowRateLimiter:
    """In-memory fixed-window counter keyed by client identifier."""

    def __init__(self, config: RateLimitConfig, clock: Callable[[], float] = time.monotonic):
        self.config = config
        self.clock = clock
        self._windows: Dict[str, WindowState] = {}
        self._lock = threading.Lock()
        self._last_cleanup = clock()

    def _cleanup_expired(self, now: float) -> None:
        """Drop counters whose window has ended. Caller holds the lock."""
        if now - self._last_cleanup < self.config.window_seconds:
            return
        expired = [
            key for key, state in self._windows.items()
            if now - state.window_start >= self.config.window_seconds
        ]
        for key in expired:
            del self._windows[key]
        self._last_cleanup = now
        if expired:
            logger.debug(f"Cleaned up {len(expired)} expired rate limit windows")

    def hit(self, identifier: str) -> Tuple[bool, int, float]:
        """
        Count one request for *identifier*.

        Returns:
            Tuple of (allowed, remaining_requests, seconds_until_reset).
        """
        with self._lock:
            now = self.clock()
            self._cleanup_expired(now)

            state = self._windows.get(identifier)
            if state is None or now - state.window_start >= self.config.window_seconds:
                state = WindowState(window_start=now)
                self._windows[identifier] = state

            reset_in = self.config.window_seconds - (now - state.window_start)
            if state.request_count >= self.config.max_requests:
                return False, 0, reset_in

            state.request_count += 1
            return True, self.config.max_requests - state.request_count, reset_in

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def client_identifier(self, request: Request) -> str:
        if self.config.trust_proxy_headers:
            for header in self.config.trusted_proxy_headers:
                value = request.headers.get(header)
                if value:
                    # X-Forwarded-For: client, proxy1, proxy2
                    return value.split(",")[0].strip()
        if request.client:
            return request.client.host
        return "unknown"


login_rate_limiter = FixedWindowRateLimiter(
    RateLimitConfig(
        max_requests=settings.LOGIN_RATE_LIMIT,
        window_seconds=settings.LOGIN_RATE_WINDOW_SECONDS,
        trust_proxy_headers=settings.TRUST_PROXY_HEADERS,
    )
)


def limit_login_attempts(request: Request) -> None:
    """Dependency for the login route; raises RateLimitedError once the window is used up."""
    identifier = login_rate_limiter.client_identifier(request)
    allowed, _, reset_in = login_rate_limiter.hit(identifier)
    if not allowed:
        logger.warning(f"Login rate limit exceeded for {identifier}")
        raise RateLimitedError(
            "Too many login attempts. Please try again later.",
            retry_after=max(1, math.ceil(reset_in)),
        )
