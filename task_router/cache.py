"""
Mode-scoped response cache with TTL and hit/miss counters.

Keys are derived from the normalized query and the active performance mode,
so identical queries under different modes never collide. Expired entries
are dropped lazily on read or by purge_expired(), which run_sweeper() calls
periodically.
"""

import asyncio
import hashlib
import logging
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from .models import CacheStats, PerformanceMode
from .preprocessor import normalize

logger = logging.getLogger("task-router.cache")

DEFAULT_TTL = 1800
DEFAULT_MAX_ENTRIES = 1000


def cache_key(query: str, mode: Union[str, PerformanceMode]) -> str:
    """Deterministic cache key for (normalized query, mode)."""
    mode_name = mode.value if isinstance(mode, PerformanceMode) else str(mode)
    digest = hashlib.sha256(f"{normalize(query)}::{mode_name}".encode("utf-8")).hexdigest()
    return f"task_{mode_name}_{digest[:32]}"


@dataclass
class CacheEntry:
    key: str
    value: str
    created_at: float
    ttl_seconds: int

    def is_expired(self, now: float) -> bool:
        return now - self.created_at > self.ttl_seconds


class CacheManager:
    """In-process cache owned by a single Agent."""

    def __init__(self, default_ttl: int = DEFAULT_TTL, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.default_ttl = default_ttl
        self.max_entries = max_entries
        self._entries: Dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Optional[str]:
        """Return the cached value, counting a hit or a miss."""
        entry = self._entries.get(key)
        if entry is not None and entry.is_expired(time.time()):
            del self._entries[key]
            logger.debug(f"Cache entry expired: {key}")
            entry = None

        if entry is None:
            self._misses += 1
            logger.debug(f"Cache miss: {key}")
            return None

        self._hits += 1
        logger.debug(f"Cache hit: {key}")
        return entry.value

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        """Store value under key. Overwrites do not affect the counters."""
        ttl = self.default_ttl if ttl is None else ttl
        if ttl <= 0:
            raise ValueError("ttl must be positive")

        # Re-inserting moves the key to the end of the eviction order
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(key=key, value=value, created_at=time.time(), ttl_seconds=ttl)

        while len(self._entries) > self.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug(f"Cache full, evicted {oldest}")

    def clear(self) -> None:
        """Drop all entries and reset the counters."""
        self._entries.clear()
        self._hits = 0
        self._misses = 0
        logger.info("Cache cleared")

    def keys(self) -> List[str]:
        return list(self._entries)

    def stats(self) -> CacheStats:
        return CacheStats(hits=self._hits, misses=self._misses, keys=len(self._entries))

    def purge_expired(self) -> int:
        """Remove every expired entry. Returns the number removed."""
        now = time.time()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Purged {len(expired)} expired cache entries")
        return len(expired)

    async def run_sweeper(self, interval: float = 60.0) -> None:
        """
        Purge expired entries every interval seconds until cancelled.

        Not started automatically; Agent.initialize() schedules it when the
        agent has a sweep_interval.
        """
        if interval <= 0:
            raise ValueError("interval must be positive")
        while True:
            await asyncio.sleep(interval)
            self.purge_expired()
