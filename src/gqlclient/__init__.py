"""gqlclient -- GraphQL API client with an in-memory response cache.

Repeated identical queries are answered from a bounded, time-limited cache
instead of a network round-trip. Each call is resolved into a request
descriptor (query, variables, transport options); calls without per-call
headers or transport overrides are eligible for the cache, keyed by the
canonical form of their query and variables.

Typical use::

    from gqlclient import SyncClient

    with SyncClient() as client:
        data = client.graphql("{ viewer { login } }")

Modules:
    cache: Canonical keys, the bounded TTL cache and the cache set.
    client: Call resolution, dispatcher, transports and clients.
    models: Pydantic configuration models.
    config: XDG-aware configuration loading and precedence resolution.
    exceptions: Exception hierarchy.
    output: stderr diagnostics with Rich support.
"""

__version__ = "0.1.0"

from gqlclient.cache import (  # noqa: E402
    CacheSet,
    QueryCache,
    RequestOptionsCache,
    SchemaCache,
    create_caches,
    get_caches,
)
from gqlclient.client import AsyncClient, SyncClient  # noqa: E402
from gqlclient.exceptions import GqlClientError, GraphQueryError  # noqa: E402
from gqlclient.models import CacheConfig, ClientConfig  # noqa: E402

__all__ = [
    "AsyncClient",
    "CacheConfig",
    "CacheSet",
    "ClientConfig",
    "GqlClientError",
    "GraphQueryError",
    "QueryCache",
    "RequestOptionsCache",
    "SchemaCache",
    "SyncClient",
    "__version__",
    "create_caches",
    "get_caches",
]
