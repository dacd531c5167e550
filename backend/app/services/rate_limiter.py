"""
Rate Limiter Service

Fixed-window rate limiting over a pluggable counter store.

The default InMemoryCounterStore is process-local: counts reset on restart
and are not shared between server instances. Multi-instance deployments
need a shared TTL-capable store behind the same CounterStore protocol.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol

from fastapi import Request

from app.config import settings
from app.middleware.error_handler import RateLimitedError

logger = logging.getLogger(__name__)


@dataclass
class RateLimitWindow:
    """Requests admitted for one key in the current window."""

    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_at: float
    retry_after: int = 0


class CounterStore(Protocol):
    """Storage for rate limit windows keyed by client."""

    def get(self, key: str) -> Optional[RateLimitWindow]: ...

    def set(self, key: str, window: RateLimitWindow) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryCounterStore:
    """Dictionary-backed counter store for a single process."""

    def __init__(self):
        self.windows: Dict[str, RateLimitWindow] = {}

    def get(self, key: str) -> Optional[RateLimitWindow]:
        return self.windows.get(key)

    def set(self, key: str, window: RateLimitWindow) -> None:
        self.windows[key] = window

    def delete(self, key: str) -> None:
        self.windows.pop(key, None)

    def clear(self) -> None:
        self.windows.clear()


class FixedWindowRateLimiter:
    """
    Fixed-window rate limiter.

    The first request from a key opens a window lasting window_seconds.
    Up to max_requests are admitted inside it; later requests are rejected
    until it expires. Expired windows are discarded lazily when the key
    is next seen.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        store: Optional[CounterStore] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize rate limiter.

        Args:
            max_requests: Maximum number of requests allowed in a window
            window_seconds: Window length in seconds
            store: Counter store (in-memory when omitted)
            clock: Returns the current time in epoch seconds
        """
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.store = store if store is not None else InMemoryCounterStore()
        self.clock = clock

    def _current_window(self, key: str, now: float) -> Optional[RateLimitWindow]:
        window = self.store.get(key)
        if window is not None and window.reset_at <= now:
            self.store.delete(key)
            return None
        return window

    def check(self, key: str) -> RateLimitDecision:
        """
        Count one request for key and decide whether to admit it.

        Args:
            key: Client identifier (network address)

        Returns:
            RateLimitDecision: allowed=False with retry_after once exhausted
        """
        now = self.clock()
        window = self._current_window(key, now)

        if window is None:
            window = RateLimitWindow(count=1, reset_at=now + self.window_seconds)
            self.store.set(key, window)
            return RateLimitDecision(
                allowed=True,
                limit=self.max_requests,
                remaining=self.max_requests - 1,
                reset_at=window.reset_at,
            )

        if window.count >= self.max_requests:
            retry_after = max(1, math.ceil(window.reset_at - now))
            logger.warning(
                f"Rate limit exceeded for {key}: "
                f"{window.count} requests in window, retry after {retry_after}s"
            )
            return RateLimitDecision(
                allowed=False,
                limit=self.max_requests,
                remaining=0,
                reset_at=window.reset_at,
                retry_after=retry_after,
            )

        window.count += 1
        self.store.set(key, window)
        return RateLimitDecision(
            allowed=True,
            limit=self.max_requests,
            remaining=self.max_requests - window.count,
            reset_at=window.reset_at,
        )

    def peek(self, key: str) -> RateLimitDecision:
        """Report the state of key's window without counting a request."""
        now = self.clock()
        window = self._current_window(key, now)
        if window is None:
            return RateLimitDecision(
                allowed=True,
                limit=self.max_requests,
                remaining=self.max_requests,
                reset_at=0,
            )
        remaining = max(0, self.max_requests - window.count)
        return RateLimitDecision(
            allowed=remaining > 0,
            limit=self.max_requests,
            remaining=remaining,
            reset_at=window.reset_at,
        )


# Global rate limiter instance: 5 lead submissions per hour
lead_rate_limiter = FixedWindowRateLimiter(
    max_requests=settings.LEAD_RATE_LIMIT_REQUESTS,
    window_seconds=settings.LEAD_RATE_LIMIT_WINDOW,
)


def get_client_ip(request: Request) -> str:
    """
    Resolve the originating address.

    Proxy headers are client-controlled unless a trusted proxy overwrites
    them, so they are only read when TRUST_PROXY_HEADERS is enabled.
    """
    if settings.TRUST_PROXY_HEADERS:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip
    if request.client:
        return request.client.host
    return "unknown"


async def check_lead_rate_limit(request: Request) -> RateLimitDecision:
    """
    FastAPI dependency to check the lead intake rate limit.

    Args:
        request: FastAPI Request object to extract client IP

    Returns:
        RateLimitDecision: The admitted decision (for response headers)

    Raises:
        RateLimitedError: 429 if rate limit exceeded
    """
    client_ip = get_client_ip(request)
    decision = lead_rate_limiter.check(client_ip)
    if not decision.allowed:
        raise RateLimitedError(decision.retry_after, decision.limit, decision.reset_at)
    return decision
