"""Blocking GraphQL client with response caching.

This module provides :class:`SyncClient`, the composition root of the
blocking stack. It wires together:

- **Transport** -- an :class:`~gqlclient.client.transport.HttpTransport`
  built from the :class:`~gqlclient.models.ClientConfig`, or any injected
  object with a ``dispatch(descriptor)`` method.
- **Caches** -- a :class:`~gqlclient.cache.CacheSet`, the process-wide
  default from :func:`~gqlclient.cache.get_caches` unless one is injected.
- **Dispatcher** -- a :class:`~gqlclient.client.dispatcher.SyncQueryDispatcher`
  that decides, call by call, whether the response cache may be used.

See Also:
    :class:`~gqlclient.client.async_client.AsyncClient` for the
    equivalent non-blocking implementation.
"""

from __future__ import annotations

from typing import Any, Optional

from gqlclient.cache import CacheSet, get_caches
from gqlclient.client.dispatcher import SyncQueryDispatcher
from gqlclient.client.request import default_options, merge_transport_options, validate_defaults
from gqlclient.client.schema import INTROSPECTION_QUERY, cached_schema, store_schema
from gqlclient.client.transport import HttpTransport, Transport
from gqlclient.models import ClientConfig
from gqlclient.output import render_cache_stats


class SyncClient:
    """Blocking GraphQL client.

    Must be used as a context manager when it owns its HTTP transport (no
    ``transport`` argument) so the connection pool is opened and closed.

    Args:
        config: Base URL, headers, HTTP settings. Defaults to
            :class:`~gqlclient.models.ClientConfig` defaults.
        caches: Cache set to use. Defaults to the process-wide set.
        transport: Object with a ``dispatch(descriptor)`` method. When
            ``None`` an :class:`HttpTransport` is created and owned.
        defaults: Extra transport options applied to every call
            (``headers``, ``base_url``, ``url``, ``method``, ``request``,
            ``media_type``).

    Example::

        with SyncClient(resolve_config()) as client:
            data = client.graphql(
                "query($owner: String!) { repositoryOwner(login: $owner) { id } }",
                owner="octocat",
            )
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        caches: Optional[CacheSet] = None,
        transport: Optional[Transport] = None,
        defaults: Optional[dict[str, Any]] = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._caches = caches if caches is not None else get_caches()
        self._http = HttpTransport(self._config) if transport is None else None
        self._transport: Transport = transport if transport is not None else self._http

        options = default_options(self._config)
        if defaults:
            validate_defaults(defaults)
            options = merge_transport_options(options, defaults)
        self._dispatcher = SyncQueryDispatcher(self._transport, self._caches, options)

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> SyncClient:
        if self._http is not None:
            self._http.__enter__()
        return self

    def __exit__(self, *args: object) -> None:
        if self._http is not None:
            self._http.close()

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
        """The transport options applied under every call."""
        return self._dispatcher.defaults

    def graphql(self, query: Any, /, **options: Any) -> Any:
        """Run a query and return its ``data``.

        Args:
            query: Query text, or a mapping holding ``query`` and options.
            **options: Query variables plus transport options
                (``headers``, ``request``, ``media_type``, ``operation_name``).

        Raises:
            InvalidVariableNameError: ``query`` passed as a variable.
            ReservedVariableNameError: ``query``, ``method`` or ``url``
                passed as a variable.
            MalformedVariablesError: Variables cannot be canonicalized or
                encoded.
            GraphQueryError: The service reported errors.
            AuthError: On 401 / 403.
            NotFoundError: On 404.
            ServerError: On other error statuses.
            ConnectionError_: On network / timeout errors.
        """
        return self._dispatcher.execute(query, options)

    __call__ = graphql

    def defaults(self, **options: Any) -> SyncClient:
        """Return a client sharing this one's transport and caches with extra defaults.

        The child never closes the shared transport.

        Raises:
            InvalidUsageError: An option is not a transport directive.
        """
        validate_defaults(options)
        merged = merge_transport_options(self._dispatcher.defaults, options)
        return SyncClient(self._config, self._caches, self._transport, merged)

    def introspect(self, refresh: bool = False) -> dict[str, Any]:
        """Return the service schema, from the schema cache when possible.

        Args:
            refresh: Drop cached copies and query the service again.
        """
        schema = cached_schema(self._caches, refresh)
        if schema is not None:
            return schema
        return store_schema(self._caches, self.graphql(INTROSPECTION_QUERY))

    def print_cache_stats(self) -> None:
        """Render response and schema cache statistics on stderr."""
        render_cache_stats(self._caches.response.get_stats(), title="response cache")
        render_cache_stats(self._caches.schema.get_stats(), title="schema cache")
