"""
Result Cache - TTL and size bounded memoization of search results.

Entries expire a fixed time after they were written, whatever reads happen
in between, and the least recently used entry is evicted when the cache is
full. Concurrent misses for the same key share a single computation.
Failed computations are never stored.
"""

import asyncio
import hashlib
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Optional

from src.config.logging import get_logger
from src.domain.models import CacheStats, SearchResult

logger = get_logger(__name__)


def make_cache_key(text: str, count: int) -> str:
    """Fingerprint of a query; independent of which client asked."""
    return hashlib.sha256(f"{count}\x00{text}".encode("utf-8")).hexdigest()


@dataclass
class CacheEntry:
    value: SearchResult
    inserted_at: float


@dataclass
class _Flight:
    task: "asyncio.Task[SearchResult]"
    waiters: int = field(default=0)


class ResultCache:
    """
    In-memory search result cache with single-flight misses.

    The entry store is guarded by a lock, so lookups never observe a
    partially written entry. The in-flight map is only touched from the
    event loop.
    """

    def __init__(
        self,
        ttl_seconds: float = 300,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the cache.

        Args:
            ttl_seconds: Lifetime of an entry, counted from its write
            max_entries: Capacity before least recently used entries are evicted
            clock: Monotonic time source (tests inject a fake clock)
        """
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")

        self._ttl = float(ttl_seconds)
        self._max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()
        self._inflight: Dict[str, _Flight] = {}

        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expirations = 0
        self._coalesced = 0

    def get(self, key: str) -> Optional[SearchResult]:
        """Return a live entry, or None. Counts as a hit or a miss."""
        with self._lock:
            value = self._lookup(key)
            if value is None:
                self._misses += 1
            else:
                self._hits += 1
            return value

    def put(self, key: str, value: SearchResult) -> None:
        """Store a value, evicting expired and then least recently used entries."""
        with self._lock:
            now = self._clock()
            self._purge_expired(now)
            self._entries[key] = CacheEntry(value=value, inserted_at=now)
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_entries:
                evicted_key, _ = self._entries.popitem(last=False)
                self._evictions += 1
                logger.debug("cache_evicted", cache_key=evicted_key[:12])

    async def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Awaitable[SearchResult]],
    ) -> SearchResult:
        """
        Return the cached value for key, computing it on a miss.

        At most one compute runs per key at a time; other callers for the same
        key await the same computation. If a caller is cancelled and no other
        caller is waiting, the computation is cancelled as well.

        Raises:
            Whatever compute raises; nothing is cached in that case
        """
        cached = self.get(key)
        if cached is not None:
            return cached

        flight = self._inflight.get(key)
        if flight is None:
            task = asyncio.ensure_future(self._compute_and_store(key, compute))
            flight = _Flight(task=task)
            self._inflight[key] = flight
        else:
            with self._lock:
                self._coalesced += 1
            logger.debug("cache_coalesced", cache_key=key[:12])

        flight.waiters += 1
        try:
            return await asyncio.shield(flight.task)
        finally:
            flight.waiters -= 1
            if flight.waiters == 0 and not flight.task.done():
                # Last interested caller went away; later callers start afresh
                flight.task.cancel()
                if self._inflight.get(key) is flight:
                    del self._inflight[key]

    async def _compute_and_store(
        self,
        key: str,
        compute: Callable[[], Awaitable[SearchResult]],
    ) -> SearchResult:
        try:
            value = await compute()
            self.put(key, value)
            return value
        finally:
            # A cancelled flight may already have been replaced by a newer one
            flight = self._inflight.get(key)
            if flight is not None and flight.task is asyncio.current_task():
                del self._inflight[key]

    def _lookup(self, key: str) -> Optional[SearchResult]:
        """Caller must hold the lock."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.inserted_at >= self._ttl:
            del self._entries[key]
            self._expirations += 1
            return None
        self._entries.move_to_end(key)
        return entry.value

    def _purge_expired(self, now: float) -> None:
        """Caller must hold the lock."""
        expired = [k for k, e in self._entries.items() if now - e.inserted_at >= self._ttl]
        for k in expired:
            del self._entries[k]
        self._expirations += len(expired)

    def clear(self) -> None:
        """Drop all entries. Counters are kept."""
        with self._lock:
            self._entries.clear()

    def stats(self) -> CacheStats:
        """Snapshot of the cache counters."""
        with self._lock:
            self._purge_expired(self._clock())
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                expirations=self._expirations,
                coalesced=self._coalesced,
                size=len(self._entries),
                max_entries=self._max_entries,
                ttl_seconds=self._ttl,
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
