"""Tests for the non-blocking GraphQL client."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx
import pytest

from conftest import AsyncRecordingTransport, make_response
from gqlclient.cache import CacheSet
from gqlclient.client.async_client import AsyncClient
from gqlclient.client.request import RequestDescriptor
from gqlclient.client.response import TransportResponse
from gqlclient.client.transport import AsyncHttpTransport
from gqlclient.exceptions import GraphQueryError, ReservedVariableNameError

VIEWER = "{ viewer { login } }"


def _json_response(data: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code=status_code,
        headers={"content-type": "application/json"},
        json=data,
        request=httpx.Request("POST", "https://api.github.com/graphql"),
    )


@pytest.fixture(autouse=True)
def _quiet(quiet_output):
    yield


class TestGraphql:
    @pytest.mark.asyncio
    async def test_repeated_call_served_from_cache(self, caches: CacheSet) -> None:
        transport = AsyncRecordingTransport(make_response({"viewer": {"login": "octocat"}}))
        client = AsyncClient(caches=caches, transport=transport)

        first = await client.graphql(VIEWER)
        second = await client(VIEWER)
        assert second is first
        assert len(transport.calls) == 1

    @pytest.mark.asyncio
    async def test_headers_bypass_cache(self, caches: CacheSet) -> None:
        transport = AsyncRecordingTransport(make_response({"a": 1}))
        client = AsyncClient(caches=caches, transport=transport)

        await client.graphql(VIEWER, headers={"authorization": "token a"})
        await client.graphql(VIEWER, headers={"authorization": "token a"})
        assert len(transport.calls) == 2

    @pytest.mark.asyncio
    async def test_reserved_name(self, caches: CacheSet) -> None:
        client = AsyncClient(caches=caches, transport=AsyncRecordingTransport(make_response({})))
        with pytest.raises(ReservedVariableNameError):
            await client.graphql(VIEWER, method="GET")

    @pytest.mark.asyncio
    async def test_graph_query_error(self, caches: CacheSet) -> None:
        transport = AsyncRecordingTransport(make_response(None, errors=["rate limited"]))
        client = AsyncClient(caches=caches, transport=transport)
        with pytest.raises(GraphQueryError, match=" - rate limited"):
            await client.graphql(VIEWER)

    @pytest.mark.asyncio
    async def test_concurrent_identical_calls_are_not_coalesced(self, caches: CacheSet) -> None:
        calls: list[RequestDescriptor] = []

        class SlowTransport:
            async def dispatch(self, descriptor: RequestDescriptor) -> TransportResponse:
                calls.append(descriptor)
                await asyncio.sleep(0)
                return make_response({"a": len(calls)})

        client = AsyncClient(caches=caches, transport=SlowTransport())
        await asyncio.gather(client.graphql(VIEWER), client.graphql(VIEWER))
        assert len(calls) == 2
        assert len(caches.response) == 1

    @pytest.mark.asyncio
    async def test_child_defaults(self, caches: CacheSet) -> None:
        transport = AsyncRecordingTransport(make_response({"a": 1}))
        client = AsyncClient(caches=caches, transport=transport)
        child = client.defaults(url="https://ghe.example.com/api/graphql")

        await child.graphql(VIEWER)
        assert transport.calls[0].transport_options["url"] == "https://ghe.example.com/api/graphql"
        assert child.caches is client.caches


class TestIntrospect:
    @pytest.mark.asyncio
    async def test_schema_cached(self, caches: CacheSet) -> None:
        transport = AsyncRecordingTransport(make_response({"__schema": {"types": []}}))
        client = AsyncClient(caches=caches, transport=transport)

        assert await client.introspect() == {"types": []}
        assert await client.introspect() == {"types": []}
        assert len(transport.calls) == 1


class TestOverHttp:
    @pytest.mark.asyncio
    async def test_owned_transport_lifecycle(self, caches: CacheSet) -> None:
        client = AsyncClient(caches=caches)
        async with client as entered:
            assert entered is client
            assert client._http._client is not None
        assert client._http._client is None

    @pytest.mark.asyncio
    async def test_full_round_trip(self, caches: CacheSet) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return _json_response({"data": {"viewer": {"login": "octocat"}}})

        async with AsyncHttpTransport(transport=httpx.MockTransport(handler)) as http:
            client = AsyncClient(caches=caches, transport=http)
            await client.graphql(VIEWER, media_type={"previews": ["antiope"]})
            await client.graphql(VIEWER, media_type={"previews": ["antiope"]})

        assert len(seen) == 1
        assert seen[0].headers["accept"] == "application/vnd.github.antiope-preview+json"
        assert json.loads(seen[0].content) == {"query": VIEWER}
