"""Schema introspection backed by the schema cache.

Clients run :data:`INTROSPECTION_QUERY` through their dispatcher and keep
the ``__schema`` member in :attr:`CacheSet.schema
<gqlclient.cache.CacheSet.schema>`, which outlives the response cache
(an hour by default).
"""

from __future__ import annotations

from typing import Any, Optional

from gqlclient.cache import CacheSet
from gqlclient.exceptions import ServerError

INTROSPECTION_QUERY = """
query IntrospectionQuery {
  __schema {
    queryType { name }
    mutationType { name }
    subscriptionType { name }
    types {
      kind
      name
      description
      fields(includeDeprecated: true) {
        name
        description
        args { name description type { ...TypeRef } defaultValue }
        type { ...TypeRef }
        isDeprecated
        deprecationReason
      }
      inputFields { name description type { ...TypeRef } defaultValue }
      interfaces { ...TypeRef }
      enumValues(includeDeprecated: true) { name description isDeprecated deprecationReason }
      possibleTypes { ...TypeRef }
    }
    directives { name description locations args { name description type { ...TypeRef } defaultValue } }
  }
}

fragment TypeRef on __Type {
  kind
  name
  ofType { kind name ofType { kind name ofType { kind name ofType { kind name } } } }
}
""".strip()


def cached_schema(caches: CacheSet, refresh: bool = False) -> Optional[dict[str, Any]]:
    """Return the cached schema, or ``None`` when it must be fetched.

    With ``refresh=True`` the schema entry and the cached introspection
    response are dropped so the next fetch reaches the service.
    """
    if refresh:
        caches.schema.invalidate(INTROSPECTION_QUERY)
        caches.response.invalidate(INTROSPECTION_QUERY)
        return None
    return caches.schema.get(INTROSPECTION_QUERY)


def store_schema(caches: CacheSet, data: Any) -> dict[str, Any]:
    """Extract ``__schema`` from an introspection result and cache it.

    Raises:
        ServerError: The result carries no ``__schema`` object.
    """
    schema = data.get("__schema") if isinstance(data, dict) else None
    if not isinstance(schema, dict):
        raise ServerError("Introspection response has no __schema object")
    caches.schema.set(INTROSPECTION_QUERY, schema)
    return schema
