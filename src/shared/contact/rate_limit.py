"""
Per-client rate limiting for contact form submissions.

The default store lives in process memory, so limits are per server instance
and reset on restart. Deployments running several instances can pass any
object implementing RateLimitStore (e.g. backed by a shared cache) to
ContactRateLimiter.
"""

import math
import time
import logging
from dataclasses import dataclass
from threading import Lock
from typing import Dict, NamedTuple, Optional

from fastapi import Request


RATE_LIMIT_WINDOW_SECONDS = 10 * 60
RATE_LIMIT_MAX_REQUESTS = 5


@dataclass
class RateLimitEntry:
    count: int
    window_start: float


class RateLimitDecision(NamedTuple):
    blocked: bool
    retry_after_seconds: int = 0


class RateLimitStore:
    """Minimal key/value interface the limiter needs."""

    def get(self, key: str) -> Optional[RateLimitEntry]:
        raise NotImplementedError

    def set(self, key: str, entry: RateLimitEntry) -> None:
        raise NotImplementedError

    def sweep(self, now: float, window_seconds: float) -> int:
        """Drop expired entries. Stores without cheap iteration may skip this."""
        return 0


class InMemoryRateLimitStore(RateLimitStore):
    """Process-local store. Not shared between workers or instances."""

    def __init__(self):
        self._entries: Dict[str, RateLimitEntry] = {}

    def get(self, key: str) -> Optional[RateLimitEntry]:
        return self._entries.get(key)

    def set(self, key: str, entry: RateLimitEntry) -> None:
        self._entries[key] = entry

    def sweep(self, now: float, window_seconds: float) -> int:
        expired = [
            key for key, entry in self._entries.items()
            if now - entry.window_start > window_seconds
        ]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)


class ContactRateLimiter:
    """Fixed window counter: at most max_requests per window per client key."""

    def __init__(
        self,
        store: Optional[RateLimitStore] = None,
        max_requests: int = RATE_LIMIT_MAX_REQUESTS,
        window_seconds: float = RATE_LIMIT_WINDOW_SECONDS
    ):
        self.store = store if store is not None else InMemoryRateLimitStore()
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._lock = Lock()
        self._last_sweep: Optional[float] = None

    def hit(self, key: str, now: Optional[float] = None) -> RateLimitDecision:
        """
        Record one request for key and decide whether it is allowed.

        Args:
            key: Client identifier (usually an IP address)
            now: Current epoch seconds (defaults to time.time())

        Returns:
            RateLimitDecision; retry_after_seconds is at least 1 when blocked
        """
        if now is None:
            now = time.time()

        with self._lock:
            self._maybe_sweep(now)

            entry = self.store.get(key)
            if entry is None or now - entry.window_start > self.window_seconds:
                self.store.set(key, RateLimitEntry(count=1, window_start=now))
                return RateLimitDecision(blocked=False)

            if entry.count >= self.max_requests:
                remaining = self.window_seconds - (now - entry.window_start)
                return RateLimitDecision(
                    blocked=True,
                    retry_after_seconds=max(1, math.ceil(remaining))
                )

            entry.count += 1
            self.store.set(key, entry)
            return RateLimitDecision(blocked=False)

    def _maybe_sweep(self, now: float) -> None:
        # At most once per window.
        if self._last_sweep is not None and now - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = now
        try:
            removed = self.store.sweep(now, self.window_seconds)
            if removed:
                logging.info(f"Swept {removed} expired contact rate limit entries")
        except Exception as e:
            logging.warning(f"Failed to sweep expired rate limit entries: {str(e)}")


def get_client_ip(request: Request) -> str:
    """Get client identifier for rate limiting."""
    # Check for forwarded IP (from proxy/load balancer)
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # Take the first IP in the chain
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()
    # Fallback to direct connection
    return request.client.host if request.client and request.client.host else "unknown"


_contact_rate_limiter = ContactRateLimiter()


def get_rate_limiter() -> ContactRateLimiter:
    """FastAPI dependency returning the process-wide limiter."""
    return _contact_rate_limiter
