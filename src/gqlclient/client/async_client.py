"""Asynchronous GraphQL client -- mirrors :class:`~gqlclient.client.sync_client.SyncClient` API.

:class:`AsyncClient` wires an
:class:`~gqlclient.client.transport.AsyncHttpTransport` (or any injected
object with an ``async dispatch(descriptor)`` method), a
:class:`~gqlclient.cache.CacheSet` and a
:class:`~gqlclient.client.dispatcher.QueryDispatcher`.

The caches are plain in-memory structures touched only between awaits, so
concurrent calls on one event loop never interleave inside a cache
operation. Concurrent identical calls are not coalesced: each one that
misses reaches the transport.
"""

from __future__ import annotations

from typing import Any, Optional

from gqlclient.cache import CacheSet, get_caches
from gqlclient.client.dispatcher import QueryDispatcher
from gqlclient.client.request import default_options, merge_transport_options, validate_defaults
from gqlclient.client.schema import INTROSPECTION_QUERY, cached_schema, store_schema
from gqlclient.client.transport import AsyncHttpTransport, AsyncTransport
from gqlclient.models import ClientConfig
from gqlclient.output import render_cache_stats


class AsyncClient:
    """Asynchronous GraphQL client.

    Takes the same arguments as :class:`~gqlclient.client.sync_client.SyncClient`.
    Must be used as an async context manager when it owns its transport.

    Example::

        async with AsyncClient(resolve_config()) as client:
            data = await client.graphql("{ viewer { login } }")
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        caches: Optional[CacheSet] = None,
        transport: Optional[AsyncTransport] = None,
        defaults: Optional[dict[str, Any]] = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._caches = caches if caches is not None else get_caches()
        self._http = AsyncHttpTransport(self._config) if transport is None else None
        self._transport: AsyncTransport = transport if transport is not None else self._http

        options = default_options(self._config)
        if defaults:
            validate_defaults(defaults)
            options = merge_transport_options(options, defaults)
        self._dispatcher = QueryDispatcher(self._transport, self._caches, options)

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> AsyncClient:
        if self._http is not None:
            await self._http.__aenter__()
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._http is not None:
            await self._http.aclose()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def caches(self) -> CacheSet:
        return self._caches

    @property
    def endpoint_defaults(self) -> dict[str, Any]:
        return self._dispatcher.defaults

    async def graphql(self, query: Any, /, **options: Any) -> Any:
        """Run a query and return its ``data``.

        Behaves like :meth:`~gqlclient.client.sync_client.SyncClient.graphql`
        but is non-blocking. A per-call ``request={"dispatch": fn}``
        override may return a :class:`TransportResponse` or an awaitable.
        """
        return await self._dispatcher.execute(query, options)

    __call__ = graphql

    def defaults(self, **options: Any) -> AsyncClient:
        """Return a client sharing this one's transport and caches with extra defaults."""
        validate_defaults(options)
        merged = merge_transport_options(self._dispatcher.defaults, options)
        return AsyncClient(self._config, self._caches, self._transport, merged)

    async def introspect(self, refresh: bool = False) -> dict[str, Any]:
        """Return the service schema, from the schema cache when possible."""
        schema = cached_schema(self._caches, refresh)
        if schema is not None:
            return schema
        return store_schema(self._caches, await self.graphql(INTROSPECTION_QUERY))

    def print_cache_stats(self) -> None:
        """Render response and schema cache statistics on stderr."""
        render_cache_stats(self._caches.response.get_stats(), title="response cache")
        render_cache_stats(self._caches.schema.get_stats(), title="schema cache")
