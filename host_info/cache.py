"""In-memory TTL cache used to memoize expensive probe results.

Entries are superseded in place and never evicted by size; staleness is
checked when an entry is read. Misses for the same key are serialized, so
concurrent requests for a stale key trigger a single fetch.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict

DEFAULT_TTL_SECONDS = 60.0


@dataclass(frozen=True)
class CacheEntry:
    timestamp: float
    data: Any


class CacheStore:
    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def _fresh(self, key: str, now: float) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is not None and now - entry.timestamp < self.ttl:
            return entry
        return None

    async def get_cached_data(self, key: str, fetch_function: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value for ``key`` or await ``fetch_function`` and store its result.

        Failures raised by ``fetch_function`` propagate unchanged and leave any
        previous entry untouched.
        """
        entry = self._fresh(key, self._clock())
        if entry is not None:
            logging.debug("Cache hit for %s", key)
            return entry.data

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            # Another request may have refreshed the entry while we waited.
            now = self._clock()
            entry = self._fresh(key, now)
            if entry is not None:
                logging.debug("Cache hit for %s after waiting on refresh", key)
                return entry.data

            logging.debug("Cache miss for %s, fetching", key)
            data = await fetch_function()
            self._entries[key] = CacheEntry(timestamp=now, data=data)
            return data

    def get_entry(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    def clear(self) -> None:
        self._entries.clear()
