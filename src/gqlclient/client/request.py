"""Turning a caller's query call into a :class:`RequestDescriptor`.

A call is either a query string plus options (``client.graphql(query,
owner="octocat")``) or a single mapping holding the query and its options
(``client.graphql({"query": query, "owner": "octocat"})``). Both shapes are
classified into a :data:`QueryCall` variant and then partitioned with a
fixed allow-list: allow-listed fields are transport options, everything
else is a query variable.

All functions here are pure apart from :func:`resolve_endpoint`, which
memoizes into a :class:`~gqlclient.cache.RequestOptionsCache`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from gqlclient import __version__
from gqlclient.cache import RequestOptionsCache
from gqlclient.exceptions import (
    InvalidUsageError,
    InvalidVariableNameError,
    ReservedVariableNameError,
)
from gqlclient.models import ClientConfig

USER_AGENT = f"gqlclient.py/{__version__}"

NON_VARIABLE_OPTIONS = frozenset(
    {
        "method",
        "base_url",
        "url",
        "headers",
        "request",
        "query",
        "media_type",
        "operation_name",
    }
)
"""Call fields that are transport directives, never query variables."""

FORBIDDEN_VARIABLE_OPTIONS = frozenset({"query", "method", "url"})
"""Option names rejected outright when passed next to the query."""

DEFAULT_OPTIONS = NON_VARIABLE_OPTIONS - {"query", "operation_name"}
"""Fields a client accepts as defaults for every call."""


@dataclass
class RequestDescriptor:
    """The resolved shape of a single call.

    Attributes:
        query: The query document.
        variables: Query variables (possibly empty).
        transport_options: Allow-listed transport fields (``headers``,
            ``url``, ``method``, ``request``, ...).
    """

    query: str
    variables: dict[str, Any] = field(default_factory=dict)
    transport_options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StringQuery:
    """A query passed as text, with its options given separately."""

    text: str
    options: Mapping[str, Any]


@dataclass(frozen=True)
class DescriptorQuery:
    """A query passed as a mapping holding ``query`` and its options."""

    fields: Mapping[str, Any]


QueryCall = Union[StringQuery, DescriptorQuery]


def validate_call(query: Any, options: Optional[Mapping[str, Any]]) -> None:
    """Reject ambiguous option names before anything else happens.

    Raises:
        InvalidVariableNameError: ``query`` passed as an option next to a
            string query.
        ReservedVariableNameError: ``query``, ``method`` or ``url`` passed
            as an option.
    """
    if not options:
        return
    if isinstance(query, str) and "query" in options:
        raise InvalidVariableNameError('"query" cannot be used as variable name')
    for key in options:
        if key in FORBIDDEN_VARIABLE_OPTIONS:
            raise ReservedVariableNameError(f'"{key}" cannot be used as variable name')


def classify_call(query: Any, options: Optional[Mapping[str, Any]] = None) -> QueryCall:
    """Wrap the raw call arguments in a :data:`QueryCall` variant.

    Options passed next to a mapping-shaped query are merged over it.
    """
    if isinstance(query, str):
        return StringQuery(text=query, options=dict(options or {}))
    if isinstance(query, Mapping):
        return DescriptorQuery(fields={**query, **(options or {})})
    raise InvalidUsageError(
        f"query must be a string or a mapping, got {type(query).__name__}"
    )


def partition_options(
    fields: Mapping[str, Any],
) -> tuple[dict[str, Any], dict[str, Any]]:
    """Split *fields* into ``(transport_options, variables)``.

    A ``variables`` field holding a mapping supplies the base variables;
    other non-allow-listed fields are merged over it.
    """
    transport_options = {k: v for k, v in fields.items() if k in NON_VARIABLE_OPTIONS}

    variables: dict[str, Any] = {}
    explicit = fields.get("variables")
    if isinstance(explicit, Mapping):
        variables.update(explicit)
    for key, value in fields.items():
        if key in NON_VARIABLE_OPTIONS:
            continue
        if key == "variables" and isinstance(value, Mapping):
            continue
        variables[key] = value
    return transport_options, variables


def resolve_call(query: Any, options: Optional[Mapping[str, Any]] = None) -> RequestDescriptor:
    """Validate, classify and partition a call.

    Raises:
        InvalidVariableNameError: See :func:`validate_call`.
        ReservedVariableNameError: See :func:`validate_call`.
        InvalidUsageError: No non-empty query string could be found.
    """
    validate_call(query, options)
    call = classify_call(query, options)
    if isinstance(call, StringQuery):
        fields = {**call.options, "query": call.text}
    else:
        fields = dict(call.fields)

    transport_options, variables = partition_options(fields)
    text = transport_options.pop("query", None)
    if not isinstance(text, str) or not text.strip():
        raise InvalidUsageError("A non-empty query string is required")
    return RequestDescriptor(query=text, variables=variables, transport_options=transport_options)


def is_cache_eligible(descriptor: RequestDescriptor) -> bool:
    """Whether the response cache may serve or store this call.

    Calls carrying their own headers or a transport override are never
    cached, since the cache key covers only the query and its variables.
    """
    options = descriptor.transport_options
    return not options.get("headers") and not options.get("request")


def validate_defaults(options: Mapping[str, Any]) -> None:
    """Reject default options that are not transport directives."""
    unknown = sorted(set(options) - DEFAULT_OPTIONS)
    if unknown:
        raise InvalidUsageError(
            f"Unsupported default option(s): {', '.join(unknown)}"
        )


def merge_transport_options(
    defaults: Mapping[str, Any],
    overrides: Mapping[str, Any],
) -> dict[str, Any]:
    """Layer *overrides* over *defaults*.

    ``headers`` are merged by lower-cased name and ``request`` mappings are
    merged key by key; every other field is replaced.
    """
    merged = {k: v for k, v in defaults.items() if k not in ("headers", "request")}
    merged.update({k: v for k, v in overrides.items() if k not in ("headers", "request")})

    headers = {k.lower(): v for k, v in (defaults.get("headers") or {}).items()}
    headers.update({k.lower(): v for k, v in (overrides.get("headers") or {}).items()})
    merged["headers"] = headers

    request = {**(defaults.get("request") or {}), **(overrides.get("request") or {})}
    if request:
        merged["request"] = request
    return merged


def resolve_endpoint(
    method: str,
    base_url: str,
    url: str,
    cache: Optional[RequestOptionsCache] = None,
) -> dict[str, str]:
    """Return ``{"method", "url"}`` with *url* made absolute against *base_url*.

    Results are memoized in *cache* under ``"METHOD base_url url"``.
    """
    key = f"{method.upper()} {base_url} {url}"
    if cache is not None:
        cached = cache.get(key)
        if cached is not None:
            return dict(cached)

    if url.startswith(("http://", "https://")):
        full_url = url
    else:
        full_url = f"{base_url.rstrip('/')}/{url.lstrip('/')}"
    resolved = {"method": method.upper(), "url": full_url}

    if cache is not None:
        cache.set(key, resolved)
    return dict(resolved)


def build_outgoing(
    descriptor: RequestDescriptor,
    defaults: Mapping[str, Any],
    cache: Optional[RequestOptionsCache] = None,
) -> RequestDescriptor:
    """Return the descriptor actually handed to the transport.

    Client defaults are merged under the call's own transport options and
    the endpoint is resolved to an absolute ``url``; ``base_url`` is
    consumed in the process.
    """
    options = merge_transport_options(defaults, descriptor.transport_options)
    base_url = options.pop("base_url", "") or ""
    endpoint = resolve_endpoint(
        options.get("method", "POST"),
        base_url,
        options.get("url", ""),
        cache,
    )
    options.update(endpoint)
    return RequestDescriptor(
        query=descriptor.query,
        variables=descriptor.variables,
        transport_options=options,
    )


def default_options(config: ClientConfig) -> dict[str, Any]:
    """Transport defaults a client derives from its configuration."""
    headers = {"user-agent": USER_AGENT}
    headers.update({k.lower(): v for k, v in config.headers.items()})
    return {
        "method": "POST",
        "url": "/graphql",
        "base_url": config.base_url,
        "headers": headers,
    }
