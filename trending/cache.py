"""
Memoized fetch cache for chart snapshots.

Thin layer over a Django cache backend (LocMemCache in the default
settings) that adds a compute-if-absent primitive.  Entries expire
``ttl`` seconds after they are written; an expired entry is treated as
absent on the next read, and the backend culls it on its own schedule.

Concurrent misses on the same cold key are not coalesced: every caller
that misses runs the producer and the last write wins.  Different keys
never interfere, since the backend serializes access with its own lock.
"""

import logging
import threading

from django.conf import settings
from django.core.cache import caches

logger = logging.getLogger(__name__)

_MISSING = object()


class ChartCache:
    """Key → value store with per-entry expiry and get-or-compute."""

    def __init__(self, backend=None, default_ttl: int | None = None):
        self._backend = backend if backend is not None else caches[settings.TRENDING_CACHE_ALIAS]
        self.default_ttl = (
            default_ttl if default_ttl is not None else settings.TRENDING_CACHE_TTL
        )
        self._stats_lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str, default=None):
        value = self._backend.get(key, _MISSING)
        if value is _MISSING:
            logger.debug(f"Cache MISS: {key}")
            self._count(hit=False)
            return default
        logger.debug(f"Cache HIT: {key}")
        self._count(hit=True)
        return value

    def set(self, key: str, value, ttl: int | None = None) -> None:
        timeout = ttl if ttl is not None else self.default_ttl
        logger.debug(f"Cache SET: {key} (TTL: {timeout}s)")
        self._backend.set(key, value, timeout=timeout)

    def delete(self, key: str) -> None:
        self._backend.delete(key)

    def clear(self) -> None:
        self._backend.clear()
        with self._stats_lock:
            self._hits = 0
            self._misses = 0
        logger.info("Cache cleared all entries")

    def stats(self) -> dict:
        """Hit and miss counts since creation or the last clear."""
        with self._stats_lock:
            return {"hits": self._hits, "misses": self._misses}

    def _count(self, hit: bool) -> None:
        with self._stats_lock:
            if hit:
                self._hits += 1
            else:
                self._misses += 1

    def get_or_compute(self, key: str, producer, ttl: int | None = None):
        """
        Return the live value for ``key``, computing it on a miss.

        ``producer`` is called with no arguments.  If it raises, nothing
        is stored and the exception propagates to the caller.
        """
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            return value

        value = producer()
        self.set(key, value, ttl)
        return value


_default_cache = None


def default_cache() -> ChartCache:
    """Process-wide cache bound to ``settings.TRENDING_CACHE_ALIAS``."""
    global _default_cache
    if _default_cache is None:
        _default_cache = ChartCache()
    return _default_cache
