"""Pydantic configuration models shared across gqlclient.

:class:`CacheConfig` describes one bounded TTL cache; :class:`ClientConfig`
bundles the HTTP settings and the construction parameters of the response
and schema caches. Both are serialised as JSON in the user's config
directory by :mod:`gqlclient.config`.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_BASE_URL = "https://api.github.com"


class CacheConfig(BaseModel):
    """Construction parameters of a :class:`~gqlclient.cache.QueryCache`.

    Defaults are those of the response cache. ``max_age`` is expressed in
    seconds; an entry whose age reaches it is never served again.
    """

    enabled: bool = Field(default=True, description="Enable the cache")
    max_size: int = Field(default=1000, gt=0, description="Maximum number of entries")
    max_age: float = Field(default=300.0, ge=0, description="Entry lifetime in seconds")


def _schema_cache_config() -> CacheConfig:
    return CacheConfig(max_size=100, max_age=3600.0)


class ClientConfig(BaseModel):
    """Client-wide configuration persisted at ``~/.config/gqlclient/config.json``.

    Loaded by :func:`~gqlclient.config.load_config` and merged with
    environment overrides by :func:`~gqlclient.config.resolve_config`.

    Example::

        ClientConfig(
            base_url="https://github.example.com/api",
            headers={"authorization": "bearer <token>"},
            response_cache=CacheConfig(max_size=200, max_age=60),
        )
    """

    model_config = ConfigDict(extra="forbid")

    base_url: str = Field(default=DEFAULT_BASE_URL, description="Service base URL")
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    max_retries: int = Field(default=0, ge=0, description="Transport retry attempts")
    headers: dict[str, str] = Field(
        default_factory=dict, description="Headers sent with every request"
    )
    response_cache: CacheConfig = Field(default_factory=CacheConfig)
    schema_cache: CacheConfig = Field(default_factory=_schema_cache_config)
