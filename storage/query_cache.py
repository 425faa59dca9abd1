"""
Short-lived, in-memory cache for upstream query responses.

Responsibilities:
- Map a logical query identity ("<kind>:<param>:<param>") to its last response
- Serve repeated identical queries inside the TTL without touching the network
- Evict lazily: an entry is only checked (and dropped) when it is read

Non-responsibilities:
- Single-flight de-duplication of concurrent misses (both callers fetch, the
  last one to finish owns the entry)
- Negative caching: a failing fetcher leaves no entry behind
- Persistence; everything here dies with the process
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    value: T
    created_at: float
    expires_at: float

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at


class QueryCache:
    """
    Keyed response cache with a default TTL.

    The clock is injectable so tests can move time forward without sleeping;
    it must be monotonic-ish (time.monotonic by default).
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry[Any]] = {}

        self.hits = 0
        self.misses = 0

    @staticmethod
    def make_key(kind: str, *parts: Any) -> str:
        """
        Canonical key for one logical request.

        Invariant:
          key == "<kind>:<part>:<part>..." with parts stringified in call order,
          so get_matchups("123", 4) and get_matchups("123", "4") collapse.
        """
        return ":".join([kind, *(str(p) for p in parts)])

    def peek(self, key: str) -> Optional[Any]:
        """Return a fresh cached value or None, evicting a stale one."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_fresh(self._clock()):
            # Lazy eviction; a concurrent writer may already have replaced it
            if self._entries.get(key) is entry:
                del self._entries[key]
            return None
        return entry.value

    async def get_or_fetch(
        self,
        key: str,
        fetcher: Callable[[], Awaitable[T]],
        ttl: Optional[float] = None,
    ) -> T:
        """
        Return the cached value for key, or await fetcher() and cache its result.

        Exceptions from fetcher propagate and nothing is stored.
        """
        entry = self._entries.get(key)
        now = self._clock()
        if entry is not None:
            if entry.is_fresh(now):
                self.hits += 1
                logger.debug("[CACHE] hit key=%s", key)
                return entry.value
            if self._entries.get(key) is entry:
                del self._entries[key]

        self.misses += 1
        logger.debug("[CACHE] miss key=%s", key)

        value = await fetcher()

        stored_at = self._clock()
        self._entries[key] = CacheEntry(
            value=value,
            created_at=stored_at,
            expires_at=stored_at + (ttl if ttl is not None else self.ttl_seconds),
        )
        return value

    def clear(self) -> None:
        """Drop every entry. Fetches already past the cache check still store their result."""
        count = len(self._entries)
        self._entries.clear()
        logger.info("[CACHE] cleared entries=%d", count)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.is_fresh(self._clock())
