"""Tests for schema introspection caching."""

from __future__ import annotations

import pytest

from gqlclient.cache import CacheSet
from gqlclient.client.schema import INTROSPECTION_QUERY, cached_schema, store_schema
from gqlclient.exceptions import ServerError

SCHEMA = {"queryType": {"name": "Query"}, "types": []}


class TestStoreSchema:
    def test_stores_and_returns_schema(self, caches: CacheSet) -> None:
        assert store_schema(caches, {"__schema": SCHEMA}) == SCHEMA
        assert caches.schema.get(INTROSPECTION_QUERY) == SCHEMA

    @pytest.mark.parametrize("data", [None, {}, {"__schema": None}, ["x"]])
    def test_missing_schema(self, caches: CacheSet, data) -> None:
        with pytest.raises(ServerError, match="__schema"):
            store_schema(caches, data)


class TestCachedSchema:
    def test_miss(self, caches: CacheSet) -> None:
        assert cached_schema(caches) is None

    def test_hit(self, caches: CacheSet) -> None:
        caches.schema.set(INTROSPECTION_QUERY, SCHEMA)
        assert cached_schema(caches) == SCHEMA

    def test_refresh_drops_schema_and_response(self, caches: CacheSet) -> None:
        caches.schema.set(INTROSPECTION_QUERY, SCHEMA)
        caches.response.set(INTROSPECTION_QUERY, {"__schema": SCHEMA})
        assert cached_schema(caches, refresh=True) is None
        assert caches.schema.has(INTROSPECTION_QUERY) is False
        assert caches.response.has(INTROSPECTION_QUERY) is False
