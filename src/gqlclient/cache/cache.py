"""In-memory query caches with a size bound and a fixed entry lifetime.

:class:`QueryCache` stores values under the canonical key of a query and its
variables (see :mod:`gqlclient.cache.keys`). It is bounded in two ways:

* **Size** -- when the cache is full, ``set`` evicts the entry with the
  oldest creation time *before* inserting. Eviction is a linear scan over
  all entries, so capacity should stay small (thousands, not millions).
* **Age** -- an entry whose age reaches ``max_age`` is never returned.
  Expiry is lazy: a stale entry is deleted when ``get`` or ``has`` observes
  it, and otherwise lingers until evicted or cleared. There is no
  background sweep.

Every operation runs under a re-entrant lock, so one cache may be shared by
threads.

See Also:
    :class:`~gqlclient.models.CacheConfig` -- the Pydantic model that
    controls ``enabled``, ``max_size`` and ``max_age``.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from gqlclient.cache.keys import build_key
from gqlclient.models import CacheConfig

logger = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass
class CacheEntry(Generic[V]):
    """A cached value with its creation time and read counter."""

    value: V
    created_at: float
    hit_count: int = 0


class QueryCache(Generic[V]):
    """Bounded TTL cache keyed by query text and variables.

    Args:
        config: Capacity, lifetime and enable switch. Defaults to the
            response cache settings (1000 entries, 5 minutes).
        clock: Returns the current time in seconds.

    Example::

        cache = QueryCache(CacheConfig(max_size=3, max_age=60))
        cache.set("{ viewer { login } }", {"viewer": {"login": "octocat"}})
        cache.get("{ viewer { login } }")
    """

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config or CacheConfig()
        self._clock = clock
        self._entries: dict[str, CacheEntry[V]] = {}
        self._lock = threading.RLock()

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    @property
    def max_size(self) -> int:
        return self._config.max_size

    @property
    def max_age(self) -> float:
        return self._config.max_age

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, query: str, variables: Optional[Mapping[str, Any]] = None) -> Optional[V]:
        """Return the cached value, or ``None`` on a miss, a stale entry, or a disabled cache.

        A hit increments the entry's hit counter.
        """
        if not self._config.enabled:
            return None
        key = build_key(query, variables)
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                return None
            entry.hit_count += 1
            return entry.value

    def set(self, query: str, value: V, variables: Optional[Mapping[str, Any]] = None) -> None:
        """Store *value*, evicting the oldest entry first when the cache is full.

        Overwriting a key resets its creation time and hit counter. A
        disabled cache ignores the call.
        """
        if not self._config.enabled:
            return
        key = build_key(query, variables)
        with self._lock:
            if len(self._entries) >= self._config.max_size:
                self._evict_oldest()
            self._entries[key] = CacheEntry(value=value, created_at=self._clock())

    def has(self, query: str, variables: Optional[Mapping[str, Any]] = None) -> bool:
        """Return whether a fresh entry exists. Does not count as a hit."""
        if not self._config.enabled:
            return False
        key = build_key(query, variables)
        with self._lock:
            return self._live_entry(key) is not None

    def invalidate(self, query: str, variables: Optional[Mapping[str, Any]] = None) -> None:
        """Remove a single entry. Missing entries are ignored."""
        key = build_key(query, variables)
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        """Remove all entries, even when the cache is disabled."""
        with self._lock:
            self._entries.clear()

    def get_stats(self) -> dict[str, Any]:
        """Return a snapshot of the cache.

        Returns:
            A ``dict`` with ``enabled``, ``size``, ``max_size``, ``max_age``
            and ``entries``: one ``{"key", "hit_count", "age"}`` dict per
            stored entry, stale ones included.
        """
        with self._lock:
            now = self._clock()
            entries = [
                {"key": key, "hit_count": entry.hit_count, "age": now - entry.created_at}
                for key, entry in self._entries.items()
            ]
            return {
                "enabled": self._config.enabled,
                "size": len(self._entries),
                "max_size": self._config.max_size,
                "max_age": self._config.max_age,
                "entries": entries,
            }

    def _live_entry(self, key: str) -> Optional[CacheEntry[V]]:
        """Return the entry at *key*, deleting it if it has expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.created_at >= self._config.max_age:
            del self._entries[key]
            return None
        return entry

    def _evict_oldest(self) -> None:
        oldest_key: Optional[str] = None
        oldest_time = 0.0
        for key, entry in self._entries.items():
            if oldest_key is None or entry.created_at < oldest_time:
                oldest_key = key
                oldest_time = entry.created_at
        if oldest_key is not None:
            del self._entries[oldest_key]
            logger.debug("Evicted %s (cache full at %d entries)", oldest_key, self._config.max_size)


class SchemaCache(QueryCache[Any]):
    """Cache for schema introspection results.

    Schemas change rarely, so the defaults trade capacity for lifetime:
    100 entries kept for an hour.
    """

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(config or CacheConfig(max_size=100, max_age=3600.0), clock)


class RequestOptionsCache:
    """Unbounded memo of parsed transport options, keyed by an opaque string.

    No lifetime and no eviction: entries stay until :meth:`clear`.
    """

    def __init__(self) -> None:
        self._entries: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def set(self, key: str, options: dict[str, Any]) -> None:
        with self._lock:
            self._entries[key] = options

    def get(self, key: str) -> Optional[dict[str, Any]]:
        with self._lock:
            return self._entries.get(key)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
