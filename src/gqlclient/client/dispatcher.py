"""Query dispatch with response caching.

A call moves through these states::

    Validating -> Rejected
    Validating -> CacheCheck -> Resolved (cached)
    CacheCheck -> Dispatching -> Resolved (fresh) | Failed (service error) | Failed (transport error)

1. The call is validated and resolved into a
   :class:`~gqlclient.client.request.RequestDescriptor`. Rejections happen
   before any cache or network access.
2. A cache-eligible call (no per-call headers, no transport override) is
   looked up in the response cache; a hit returns the stored object as is.
3. Otherwise the client defaults are merged in and the transport is called,
   or the per-call ``request={"dispatch": fn}`` override when given.
4. A body carrying ``errors`` raises
   :class:`~gqlclient.exceptions.GraphQueryError` and is never cached.
   Non-empty ``data`` of an eligible call is stored, then returned.

There is no retry here and no coalescing of identical in-flight calls:
two concurrent calls for the same key may both miss and both reach the
transport, and the last one to finish wins the cache entry. Transport
errors propagate unchanged.
"""

from __future__ import annotations

import inspect
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Optional

from gqlclient.cache import CacheSet
from gqlclient.client.request import (
    RequestDescriptor,
    build_outgoing,
    is_cache_eligible,
    resolve_call,
)
from gqlclient.client.response import TransportResponse
from gqlclient.client.transport import AsyncTransport, Transport
from gqlclient.exceptions import GraphQueryError, InvalidUsageError
from gqlclient.output import get_output


@dataclass
class PreparedCall:
    """A validated call and its cache eligibility."""

    descriptor: RequestDescriptor
    cacheable: bool


class _BaseDispatcher:
    """Decision steps shared by the blocking and non-blocking dispatchers."""

    def __init__(
        self,
        caches: CacheSet,
        defaults: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._caches = caches
        self._defaults = dict(defaults or {})

    @property
    def caches(self) -> CacheSet:
        return self._caches

    @property
    def defaults(self) -> dict[str, Any]:
        return dict(self._defaults)

    def _prepare(self, query: Any, options: Optional[Mapping[str, Any]]) -> PreparedCall:
        descriptor = resolve_call(query, options)
        return PreparedCall(descriptor=descriptor, cacheable=is_cache_eligible(descriptor))

    def _lookup(self, call: PreparedCall) -> Optional[Any]:
        if not call.cacheable:
            return None
        descriptor = call.descriptor
        data = self._caches.response.get(descriptor.query, descriptor.variables)
        if data is not None:
            get_output().debug(f"Cache hit: {_summary(descriptor.query)}")
        return data

    def _outgoing(self, call: PreparedCall) -> RequestDescriptor:
        return build_outgoing(call.descriptor, self._defaults, self._caches.request_options)

    @staticmethod
    def _override(outgoing: RequestDescriptor) -> Optional[Callable[..., Any]]:
        return (outgoing.transport_options.get("request") or {}).get("dispatch")

    def _complete(
        self,
        call: PreparedCall,
        outgoing: RequestDescriptor,
        response: TransportResponse,
    ) -> Any:
        body = response.body
        if body.get("errors"):
            raise GraphQueryError(outgoing, dict(response.headers), body)

        data = body.get("data")
        if call.cacheable and data:
            descriptor = call.descriptor
            self._caches.response.set(descriptor.query, data, descriptor.variables)
        return data


class QueryDispatcher(_BaseDispatcher):
    """Non-blocking dispatcher.

    Args:
        transport: Object with an ``async dispatch(descriptor)`` method.
        caches: Response, schema and request-options caches.
        defaults: Transport options applied under every call's own options.

    Example::

        dispatcher = QueryDispatcher(transport, create_caches(), {"base_url": "https://api.github.com", "url": "/graphql"})
        data = await dispatcher.execute("{ viewer { login } }")
    """

    def __init__(
        self,
        transport: AsyncTransport,
        caches: CacheSet,
        defaults: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(caches, defaults)
        self._transport = transport

    async def execute(self, query: Any, options: Optional[Mapping[str, Any]] = None) -> Any:
        """Run a query, serving it from the response cache when possible.

        Args:
            query: Query text, or a mapping holding ``query`` and options.
            options: Variables and transport options (``headers``,
                ``request``, ``media_type``, ``operation_name``, ...).

        Returns:
            The ``data`` member of the response body.

        Raises:
            InvalidVariableNameError: ``query`` passed as a variable.
            ReservedVariableNameError: ``query``, ``method`` or ``url`` passed
                as a variable.
            MalformedVariablesError: Variables cannot be canonicalized.
            GraphQueryError: The service reported errors.
        """
        call = self._prepare(query, options)
        cached = self._lookup(call)
        if cached is not None:
            return cached

        outgoing = self._outgoing(call)
        dispatch = self._override(outgoing)
        if dispatch is not None:
            response = dispatch(outgoing)
            if inspect.isawaitable(response):
                response = await response
        else:
            response = await self._transport.dispatch(outgoing)
        return self._complete(call, outgoing, response)


class SyncQueryDispatcher(_BaseDispatcher):
    """Blocking counterpart of :class:`QueryDispatcher`."""

    def __init__(
        self,
        transport: Transport,
        caches: CacheSet,
        defaults: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(caches, defaults)
        self._transport = transport

    def execute(self, query: Any, options: Optional[Mapping[str, Any]] = None) -> Any:
        """Run a query; see :meth:`QueryDispatcher.execute`."""
        call = self._prepare(query, options)
        cached = self._lookup(call)
        if cached is not None:
            return cached

        outgoing = self._outgoing(call)
        dispatch = self._override(outgoing)
        if dispatch is not None:
            response = dispatch(outgoing)
            if inspect.isawaitable(response):
                if inspect.iscoroutine(response):
                    response.close()
                raise InvalidUsageError("A blocking client cannot use an async dispatch override")
        else:
            response = self._transport.dispatch(outgoing)
        return self._complete(call, outgoing, response)


def _summary(query: str, limit: int = 60) -> str:
    text = " ".join(query.split())
    return text if len(text) <= limit else text[: limit - 3] + "..."
