"""Time-based cache for derived lookup views.

A plain key -> (value, computed_at) mapping with an explicit TTL check.
Expired entries are not evicted proactively; they are replaced on the next
read. Concurrent misses for the same key may both recompute; the computed
views are pure functions of the profile data, so the last writer wins.

ImageCache adds entry and byte bounds with least-recently-used eviction for
the image proxy, whose key space is chosen by callers.
"""
from __future__ import annotations
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    value: Any
    computed_at: float


class LookupCache:
    """Owned cache instance; create one per app (or per test)."""

    def __init__(self, ttl_seconds: float = 300, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def is_valid(self, entry: CacheEntry, now: Optional[float] = None) -> bool:
        """An entry is valid strictly before its TTL elapses."""
        now = self._clock() if now is None else now
        return now - entry.computed_at < self.ttl_seconds

    def get(self, key: str) -> Any:
        """Return the cached value, or None when absent or expired."""
        entry = self._entries.get(key)
        if entry is None or not self.is_valid(entry):
            return None
        return entry.value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = CacheEntry(value=value, computed_at=self._clock())

    def get_or_compute(self, key: str, compute: Callable[[], Any]) -> Any:
        """Serve a valid entry, or compute synchronously and store it."""
        entry = self._entries.get(key)
        if entry is not None and self.is_valid(entry):
            logger.debug("Cache hit: %s", key)
            return entry.value

        logger.debug("Cache miss: %s", key)
        value = compute()
        self.set(key, value)
        return value

    def clear(self) -> int:
        """Discard every entry. Returns how many entries were dropped."""
        dropped = len(self._entries)
        self._entries.clear()
        return dropped

    def status(self) -> dict:
        """Per-key age, remaining TTL and validity, in whole seconds."""
        now = self._clock()
        keys = {}
        for key, entry in self._entries.items():
            age = now - entry.computed_at
            keys[key] = {
                "isValid": self.is_valid(entry, now),
                "age": int(age),
                "ttl": max(0, int(self.ttl_seconds - age)),
            }
        return {
            "totalKeys": len(self._entries),
            "ttl": int(self.ttl_seconds),
            "keys": keys,
        }


class ImageCache(LookupCache):
    """Bounded cache for proxied image bodies.

    Values are dicts carrying the raw bytes under ``data``. The cache holds
    at most ``max_entries`` images and ``max_bytes`` of image data; inserting
    past either bound drops expired entries first, then the least recently
    used ones. An image larger than ``max_bytes`` is never stored.
    """

    def __init__(
        self,
        ttl_seconds: float = 3600,
        max_entries: int = 1000,
        max_bytes: int = 500 * 1024 * 1024,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(ttl_seconds, clock)
        self.max_entries = max_entries
        self.max_bytes = max_bytes
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()
        self.bytes_held = 0
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    @staticmethod
    def _size(value: Any) -> int:
        return len(value.get("data") or b"") if isinstance(value, dict) else 0

    def _drop(self, key: str) -> None:
        entry = self._entries.pop(key)
        self.bytes_held -= self._size(entry.value)

    def get(self, key: str) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            if not self.is_valid(entry):
                self._drop(key)
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            return entry.value

    def set(self, key: str, value: Any) -> None:
        size = self._size(value)
        with self._lock:
            if key in self._entries:
                self._drop(key)
            if size > self.max_bytes:
                logger.info("Image too large to cache (%d bytes): %s", size, key)
                return
            self._entries[key] = CacheEntry(value=value, computed_at=self._clock())
            self.bytes_held += size
            self._enforce_bounds()

    def _enforce_bounds(self) -> None:
        if not self._over_bounds():
            return
        now = self._clock()
        for key in [key for key, entry in self._entries.items() if not self.is_valid(entry, now)]:
            self._drop(key)
            self.evictions += 1
        while self._over_bounds():
            oldest = next(iter(self._entries))
            self._drop(oldest)
            self.evictions += 1
            logger.debug("Image cache evicted %s", oldest)

    def _over_bounds(self) -> bool:
        return len(self._entries) > self.max_entries or self.bytes_held > self.max_bytes

    def clear(self) -> int:
        with self._lock:
            dropped = len(self._entries)
            self._entries.clear()
            self.bytes_held = 0
            return dropped

    def stats(self) -> dict:
        """Hit/miss counters and utilization against both bounds."""
        with self._lock:
            lookups = self.hits + self.misses
            return {
                "hits": self.hits,
                "misses": self.misses,
                "hitRate": round(self.hits / lookups * 100, 2) if lookups else 0.0,
                "keys": len(self._entries),
                "maxKeys": self.max_entries,
                "size": self.bytes_held,
                "maxSize": self.max_bytes,
                "utilizationPercent": round(self.bytes_held / self.max_bytes * 100, 2) if self.max_bytes else 0.0,
                "evictions": self.evictions,
                "ttl": int(self.ttl_seconds),
            }
