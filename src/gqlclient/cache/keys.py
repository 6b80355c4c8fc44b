"""Canonical cache keys for a query and its variables.

Two variable mappings holding the same key/value pairs produce the same key
whatever their insertion order: mapping keys are sorted at every nesting
level, while sequences keep their order. The query is JSON-quoted before the
``:`` separator so a query whose text ends with the separator can never
collide with a different query/variables pair.

An absent variable mapping and an empty one produce the same key.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any, Optional

from gqlclient.exceptions import MalformedVariablesError

KEY_SEPARATOR = ":"


def build_key(query: str, variables: Optional[Mapping[str, Any]] = None) -> str:
    """Return the canonical cache key for *query* and *variables*.

    Raises:
        MalformedVariablesError: If *variables* is not a mapping, holds a
            cyclic reference, a non-string mapping key, or a value JSON
            cannot represent.
    """
    portion = ""
    if variables is not None:
        if not isinstance(variables, Mapping):
            raise MalformedVariablesError(
                f"Query variables must be a mapping, got {type(variables).__name__}"
            )
        if variables:
            portion = _serialize(canonicalize(variables))
    return f"{json.dumps(query)}{KEY_SEPARATOR}{portion}"


def canonicalize(value: Any) -> Any:
    """Return a copy of *value* with every mapping's keys sorted.

    Tuples are turned into lists; sequence order is preserved.
    """
    return _canonical(value, set())


def _canonical(value: Any, active: set[int]) -> Any:
    if isinstance(value, Mapping):
        with _visiting(value, active):
            for key in value:
                if not isinstance(key, str):
                    raise MalformedVariablesError(
                        f"Variable names must be strings, got {key!r}"
                    )
            return {key: _canonical(value[key], active) for key in sorted(value)}
    if isinstance(value, (list, tuple)):
        with _visiting(value, active):
            return [_canonical(item, active) for item in value]
    return value


@contextmanager
def _visiting(container: Any, active: set[int]) -> Iterator[None]:
    """Track containers on the current recursion path to detect cycles."""
    marker = id(container)
    if marker in active:
        raise MalformedVariablesError("Query variables contain a cyclic reference")
    active.add(marker)
    try:
        yield
    finally:
        active.discard(marker)


def _serialize(value: Any) -> str:
    try:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise MalformedVariablesError(f"Query variables are not JSON-serialisable: {exc}") from exc
