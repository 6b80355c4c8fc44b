"""The cache set shared by clients.

A :class:`CacheSet` groups the three caches a client works with. Clients
receive one explicitly or fall back to the process-wide default returned by
:func:`get_caches`, which is created lazily from default settings. Install a
configured set once at startup with ``set_caches(create_caches(config))``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from gqlclient.cache.cache import QueryCache, RequestOptionsCache, SchemaCache
from gqlclient.models import ClientConfig


@dataclass
class CacheSet:
    """Response, schema and request-options caches owned together.

    Attributes:
        response: Query results, short lifetime, large capacity.
        schema: Introspection results, long lifetime, small capacity.
        request_options: Memoized transport option shapes.
    """

    response: QueryCache[Any] = field(default_factory=QueryCache)
    schema: SchemaCache = field(default_factory=SchemaCache)
    request_options: RequestOptionsCache = field(default_factory=RequestOptionsCache)

    def clear(self) -> None:
        """Empty all three caches."""
        self.response.clear()
        self.schema.clear()
        self.request_options.clear()


def create_caches(config: Optional[ClientConfig] = None) -> CacheSet:
    """Build a fresh :class:`CacheSet` from the cache sections of *config*."""
    config = config or ClientConfig()
    return CacheSet(
        response=QueryCache(config.response_cache),
        schema=SchemaCache(config.schema_cache),
        request_options=RequestOptionsCache(),
    )


# ------------------------------------------------------------------ #
# Process-wide default
# ------------------------------------------------------------------ #

_caches: Optional[CacheSet] = None


def get_caches() -> CacheSet:
    """Return the default :class:`CacheSet`, creating it on first use."""
    global _caches
    if _caches is None:
        _caches = create_caches()
    return _caches


def set_caches(caches: CacheSet) -> None:
    """Install *caches* as the default set."""
    global _caches
    _caches = caches


def reset_caches() -> None:
    """Drop the default set so the next :func:`get_caches` builds a new one."""
    global _caches
    _caches = None
