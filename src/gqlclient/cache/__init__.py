"""In-memory response caching for gqlclient.

This package provides :class:`QueryCache`, a bounded TTL cache keyed by the
canonical form of a query and its variables, its long-lived
:class:`SchemaCache` variant, the unbounded :class:`RequestOptionsCache`,
and the :class:`CacheSet` grouping the three for a client.

Nothing is persisted: every cache lives for the life of the process or until
its owner discards it.
"""

from gqlclient.cache.cache import CacheEntry, QueryCache, RequestOptionsCache, SchemaCache
from gqlclient.cache.instances import CacheSet, create_caches, get_caches, reset_caches, set_caches
from gqlclient.cache.keys import build_key, canonicalize

__all__ = [
    "CacheEntry",
    "CacheSet",
    "QueryCache",
    "RequestOptionsCache",
    "SchemaCache",
    "build_key",
    "canonicalize",
    "create_caches",
    "get_caches",
    "reset_caches",
    "set_caches",
]
