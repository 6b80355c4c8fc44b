"""Shared test fixtures for gqlclient.

Provides a controllable clock, fresh cache sets, recording transports that
stand in for the HTTP layer, and isolation of the global output manager,
the default cache set and the config environment. Fixtures are discovered
by pytest; the plain helpers (``FakeClock``, ``make_response`` and the
recording transports) are imported with ``from conftest import ...``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import pytest

from gqlclient.cache import CacheSet, QueryCache, RequestOptionsCache, SchemaCache, reset_caches
from gqlclient.client.request import RequestDescriptor
from gqlclient.client.response import TransportResponse
from gqlclient.models import CacheConfig
from gqlclient.output import OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_globals_between_tests() -> None:
    """Reset the global OutputManager and default CacheSet after every test.

    Both are created lazily and shared by every client in the process, so
    a test that fills the default caches would otherwise leak entries into
    the next one.
    """
    yield
    reset_output()
    reset_caches()


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, colourless OutputManager for the duration of a test."""
    output = OutputManager(no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def verbose_output() -> OutputManager:
    """Install a verbose, colourless OutputManager so debug lines reach stderr."""
    output = OutputManager(no_color=True, verbose=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Clock and caches
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced time source, in seconds."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def caches(clock: FakeClock) -> CacheSet:
    """A fresh cache set driven by the fake clock, with default capacities."""
    return CacheSet(
        response=QueryCache(CacheConfig(), clock=clock),
        schema=SchemaCache(clock=clock),
        request_options=RequestOptionsCache(),
    )


# ---------------------------------------------------------------------------
# Transport stand-ins
# ---------------------------------------------------------------------------


def make_response(
    data: Any = None,
    errors: Optional[list[Any]] = None,
    status: int = 200,
    headers: Optional[dict[str, str]] = None,
) -> TransportResponse:
    """Build a TransportResponse with a ``data`` and optional ``errors`` member."""
    body: dict[str, Any] = {"data": data}
    if errors is not None:
        body["errors"] = errors
    return TransportResponse(status=status, headers=headers or {}, body=body)


class RecordingTransport:
    """Blocking transport returning canned responses and recording every call."""

    def __init__(self, *responses: TransportResponse) -> None:
        self._responses = list(responses)
        self.calls: list[RequestDescriptor] = []

    def dispatch(self, descriptor: RequestDescriptor) -> TransportResponse:
        self.calls.append(descriptor)
        if len(self._responses) > 1:
            return self._responses.pop(0)
        return self._responses[0]


class AsyncRecordingTransport(RecordingTransport):
    """Non-blocking variant of :class:`RecordingTransport`."""

    async def dispatch(self, descriptor: RequestDescriptor) -> TransportResponse:  # type: ignore[override]
        return RecordingTransport.dispatch(self, descriptor)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME at a subdirectory of tmp_path and clears all
    GQLCLIENT_* environment variables so tests never touch real user
    config.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    for var in [
        "GQLCLIENT_BASE_URL",
        "GQLCLIENT_CACHE_ENABLED",
        "GQLCLIENT_CONFIG",
    ]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
