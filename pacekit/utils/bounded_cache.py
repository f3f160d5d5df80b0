"""In-memory key/value cache with optional LRU bounding.

Used by the memoizers to hold computed values (or in-flight futures). The
cache assumes a single logical thread of control, so it does no locking.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from collections.abc import Hashable, Iterator
from typing import Any

from pacekit.utils.coercion import to_int_non_neg

logger = logging.getLogger(__name__)

_MISSING: Any = object()


def _key_repr(key: Hashable) -> str:
    return repr(key)[:32]


class BoundedCache:
    """Key/value store with least-recently-used eviction.

    The OrderedDict is both the hash map and the recency list: the first
    entry is the least recently used, the last one the most recent.

    Attributes:
        max_size: Maximum number of entries (0 for unbounded).
    """

    def __init__(self, max_size: int = 0) -> None:
        self._max_size = to_int_non_neg(max_size)
        self._store: OrderedDict[Hashable, Any] = OrderedDict()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"BoundedCache(max_size={self._max_size}, size={len(self._store)}, "
            f"hits={self._hits}, misses={self._misses}, evictions={self._evictions})"
        )

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def bounded(self) -> bool:
        return self._max_size > 0

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._store

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._store)

    def size(self) -> int:
        return len(self._store)

    def keys(self) -> list[Hashable]:
        """Keys ordered from least to most recently used."""
        return list(self._store)

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Retrieve a cached value, refreshing its recency when bounded.

        Args:
            key: Cache key.
            default: Returned when the key is absent.

        Returns:
            Cached value or default.
        """

        value = self._store.get(key, _MISSING)
        if value is _MISSING:
            self._misses += 1
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("cache.miss", extra={"cache_key": _key_repr(key)})
            return default

        self._hits += 1
        if self.bounded:
            self._store.move_to_end(key)  # mark as recently used
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("cache.hit", extra={"cache_key": _key_repr(key)})
        return value

    def peek(self, key: Hashable, default: Any = None) -> Any:
        """Return the value for key without touching recency or counters."""
        return self._store.get(key, default)

    def set(self, key: Hashable, value: Any) -> None:
        """Store a value as the most recent entry, evicting as needed.

        Args:
            key: Cache key.
            value: Value to store.
        """

        self._store[key] = value
        self._store.move_to_end(key)
        self._evict_if_over_capacity()

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "cache.set",
                extra={
                    "cache_key": _key_repr(key),
                    "size": len(self._store),
                    "max_size": self._max_size,
                },
            )

    def delete(self, key: Hashable) -> bool:
        """Remove key; returns True when an entry was removed."""
        if key not in self._store:
            return False
        del self._store[key]
        return True

    def clear(self) -> None:
        """Remove all cached entries and reset counters."""
        self._store.clear()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def stats(self) -> dict[str, int]:
        """Return lightweight cache metrics without exposing values."""
        return {
            "max_size": self._max_size,
            "entries": len(self._store),
            "hits": self._hits,
            "misses": self._misses,
            "evictions": self._evictions,
        }

    def _evict_if_over_capacity(self) -> None:
        if not self.bounded:
            return

        while len(self._store) > self._max_size:
            # popitem(last=False) removes the least recently used entry
            key, _ = self._store.popitem(last=False)
            self._evictions += 1
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("cache.evict", extra={"cache_key": _key_repr(key)})
