"""GraphQL client module for gqlclient.

Provides blocking and non-blocking clients that resolve each call into a
request descriptor, serve eligible calls from the response cache, and
otherwise dispatch them over :mod:`httpx`.

Classes:
    :class:`SyncClient` -- blocking client backed by :class:`httpx.Client`.
    :class:`AsyncClient` -- non-blocking client backed by :class:`httpx.AsyncClient`.
    :class:`QueryDispatcher` / :class:`SyncQueryDispatcher` -- the cache
    decision logic, usable with any transport.

Example::

    from gqlclient.client import SyncClient

    with SyncClient() as client:
        data = client.graphql("{ viewer { login } }")
"""

from gqlclient.client.async_client import AsyncClient
from gqlclient.client.dispatcher import QueryDispatcher, SyncQueryDispatcher
from gqlclient.client.request import RequestDescriptor
from gqlclient.client.response import TransportResponse
from gqlclient.client.sync_client import SyncClient
from gqlclient.client.transport import AsyncHttpTransport, HttpTransport

__all__ = [
    "AsyncClient",
    "AsyncHttpTransport",
    "HttpTransport",
    "QueryDispatcher",
    "RequestDescriptor",
    "SyncClient",
    "SyncQueryDispatcher",
    "TransportResponse",
]
