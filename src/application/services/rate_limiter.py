"""
Rate Limiter - Per-client fixed window request counter.

Each client gets a window that opens with its first request and lasts
window_seconds. Requests beyond the limit inside a window are rejected;
once the window has aged out the count starts over. Counters of idle
clients are purged so the tracked set stays bounded by active clients.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict

from src.config.logging import get_logger
from src.domain.models import RateLimitDecision

logger = get_logger(__name__)

RETRY_AFTER_SECONDS = 60


@dataclass
class RateCounter:
    client_id: str
    count: int
    window_start: float


class FixedWindowRateLimiter:
    """Thread-safe fixed window rate limiter keyed by client identity."""

    def __init__(
        self,
        limit_per_window: int = 60,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the limiter.

        Args:
            limit_per_window: Requests admitted per client per window
            window_seconds: Window length in seconds
            clock: Monotonic time source (tests inject a fake clock)
        """
        if limit_per_window < 1:
            raise ValueError("limit_per_window must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self._limit = limit_per_window
        self._window = float(window_seconds)
        self._clock = clock
        self._counters: Dict[str, RateCounter] = {}
        self._lock = threading.Lock()
        self._last_purge = clock()

    @property
    def limit(self) -> int:
        return self._limit

    def try_admit(self, client_id: str) -> RateLimitDecision:
        """Count one request for client_id and decide whether it may proceed."""
        with self._lock:
            now = self._clock()
            if now - self._last_purge >= self._window:
                self._purge_idle(now)
                self._last_purge = now

            counter = self._counters.get(client_id)
            if counter is None or now - counter.window_start >= self._window:
                counter = RateCounter(client_id=client_id, count=0, window_start=now)
                self._counters[client_id] = counter

            counter.count += 1
            count = counter.count

        admitted = count <= self._limit
        if not admitted:
            logger.warning("rate_limit_exceeded", client_id=client_id, count=count, limit=self._limit)

        return RateLimitDecision(
            admitted=admitted,
            client_id=client_id,
            count=count,
            limit=self._limit,
            remaining=max(0, self._limit - count),
            retry_after_seconds=0 if admitted else RETRY_AFTER_SECONDS,
        )

    def _purge_idle(self, now: float) -> None:
        """Caller must hold the lock."""
        stale = [cid for cid, c in self._counters.items() if now - c.window_start >= self._window]
        for cid in stale:
            del self._counters[cid]
        if stale:
            logger.debug("rate_limit_counters_purged", purged=len(stale), tracked=len(self._counters))

    def tracked_clients(self) -> int:
        """Number of clients with a live window. Purges idle counters."""
        with self._lock:
            self._purge_idle(self._clock())
            return len(self._counters)

    def reset(self, client_id: str) -> None:
        """Forget the counter for a client."""
        with self._lock:
            self._counters.pop(client_id, None)
