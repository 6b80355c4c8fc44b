"""HTTP transports for GraphQL calls, built on :mod:`httpx`.

The dispatcher talks to its transport through one method,
``dispatch(descriptor) -> TransportResponse``. :class:`HttpTransport`
(blocking, :class:`httpx.Client`) and :class:`AsyncHttpTransport`
(:class:`httpx.AsyncClient`) implement it and layer on:

- **JSON encoding** of ``{"query", "variables", "operationName"}``.
- **Media types** -- ``media_type={"previews": [...]}`` sets the ``accept``
  header to the matching preview media types.
- **Retry with backoff** -- retries on 5xx and network errors with
  exponential delay (1 s, 2 s, 4 s, ...) up to ``max_retries``.
- **Error mapping** -- non-2xx responses without a GraphQL ``errors`` body
  raise :class:`~gqlclient.exceptions.AuthError`,
  :class:`~gqlclient.exceptions.NotFoundError` or
  :class:`~gqlclient.exceptions.ServerError`; network failures raise
  :class:`~gqlclient.exceptions.ConnectionError_`.

Both transports must be used as context managers so the underlying httpx
client is opened and closed.
"""

from __future__ import annotations

import asyncio
import json
import time
from typing import Any, Optional, Protocol

import httpx

from gqlclient.client.request import RequestDescriptor
from gqlclient.client.response import (
    TransportResponse,
    extract_response_data,
    to_transport_response,
)
from gqlclient.exceptions import (
    AuthError,
    ConnectionError_,
    MalformedVariablesError,
    NotFoundError,
    ServerError,
)
from gqlclient.models import ClientConfig
from gqlclient.output import get_output


class Transport(Protocol):
    """Blocking transport capability."""

    def dispatch(self, descriptor: RequestDescriptor) -> TransportResponse: ...


class AsyncTransport(Protocol):
    """Non-blocking transport capability."""

    async def dispatch(self, descriptor: RequestDescriptor) -> TransportResponse: ...


# ------------------------------------------------------------------ #
# Request building
# ------------------------------------------------------------------ #


def encode_body(descriptor: RequestDescriptor) -> bytes:
    """Serialise the GraphQL request body.

    ``variables`` is omitted when empty, ``operationName`` when unset.

    Raises:
        MalformedVariablesError: If the variables cannot be encoded as JSON.
    """
    payload: dict[str, Any] = {"query": descriptor.query}
    if descriptor.variables:
        payload["variables"] = descriptor.variables
    operation_name = descriptor.transport_options.get("operation_name")
    if operation_name:
        payload["operationName"] = operation_name
    try:
        return json.dumps(payload).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise MalformedVariablesError(f"Query variables are not JSON-serialisable: {exc}") from exc


def build_headers(options: dict[str, Any]) -> dict[str, str]:
    """Return the outgoing headers for a resolved set of transport options."""
    headers = {
        "accept": "application/json",
        "content-type": "application/json; charset=utf-8",
    }
    headers.update({k.lower(): v for k, v in (options.get("headers") or {}).items()})

    accept = _media_type_accept(options.get("media_type") or {})
    if accept:
        headers["accept"] = accept
    return headers


def _media_type_accept(media_type: dict[str, Any]) -> Optional[str]:
    previews = media_type.get("previews") or []
    if not previews:
        return None
    fmt = media_type.get("format")
    suffix = f".{fmt}" if fmt else "+json"
    return ",".join(f"application/vnd.github.{preview}-preview{suffix}" for preview in previews)


def _request_kwargs(descriptor: RequestDescriptor) -> dict[str, Any]:
    options = descriptor.transport_options
    kwargs: dict[str, Any] = {
        "method": options.get("method", "POST"),
        "url": options["url"],
        "headers": build_headers(options),
        "content": encode_body(descriptor),
    }
    timeout = (options.get("request") or {}).get("timeout")
    if timeout is not None:
        kwargs["timeout"] = timeout
    return kwargs


# ------------------------------------------------------------------ #
# Response interpretation
# ------------------------------------------------------------------ #


def interpret_response(response: httpx.Response) -> TransportResponse:
    """Map an HTTP response to a :class:`TransportResponse` or a typed error.

    A non-2xx response whose JSON body carries ``errors`` is returned as is
    so the dispatcher can report the service errors.
    """
    status = response.status_code
    data = extract_response_data(response)

    if status < 400:
        if not isinstance(data, dict):
            raise ServerError(f"HTTP {status}: response body is not a JSON object")
        return to_transport_response(response, data)

    if isinstance(data, dict) and data.get("errors"):
        return to_transport_response(response, data)

    if isinstance(data, dict):
        msg = data.get("message") or data.get("error") or data.get("detail") or ""
    else:
        msg = str(data)[:200] if data else ""

    prefix = f"HTTP {status}"
    full_msg = f"{prefix}: {msg}" if msg else prefix

    if status in (401, 403):
        raise AuthError(full_msg)
    if status == 404:
        raise NotFoundError(full_msg)
    raise ServerError(full_msg)


_NETWORK_ERRORS = (httpx.ConnectError, httpx.TimeoutException, httpx.NetworkError)


# ------------------------------------------------------------------ #
# Transports
# ------------------------------------------------------------------ #


class HttpTransport:
    """Blocking transport backed by :class:`httpx.Client`.

    Args:
        config: Timeout, SSL verification and retry settings.
        transport: Optional httpx transport (e.g. :class:`httpx.MockTransport`).

    Example::

        with HttpTransport(ClientConfig()) as transport:
            result = transport.dispatch(descriptor)
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    def __enter__(self) -> HttpTransport:
        self._client = httpx.Client(
            timeout=self._config.timeout,
            verify=self._config.verify_ssl,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        if self._client:
            self._client.close()
            self._client = None

    def dispatch(self, descriptor: RequestDescriptor) -> TransportResponse:
        """Send *descriptor* and interpret the response.

        Raises:
            MalformedVariablesError: The variables cannot be encoded.
            AuthError: On 401 / 403.
            NotFoundError: On 404.
            ServerError: On other error statuses after all retries.
            ConnectionError_: On network / timeout errors after all retries.
        """
        assert self._client is not None, "Transport not initialised -- use as context manager"

        kwargs = _request_kwargs(descriptor)
        max_retries = self._config.max_retries
        output = get_output()

        for attempt in range(max_retries + 1):
            try:
                response = self._client.request(**kwargs)
            except _NETWORK_ERRORS as exc:
                if attempt < max_retries:
                    delay = 2 ** attempt
                    output.debug(
                        f"Connection error: {exc}, retrying in {delay}s "
                        f"(attempt {attempt + 1}/{max_retries})"
                    )
                    time.sleep(delay)
                    continue
                raise ConnectionError_(
                    f"Connection failed after {max_retries + 1} attempts: {exc}"
                ) from exc

            if response.status_code >= 500 and attempt < max_retries:
                delay = 2 ** attempt
                output.debug(
                    f"Server error {response.status_code}, retrying in {delay}s "
                    f"(attempt {attempt + 1}/{max_retries})"
                )
                time.sleep(delay)
                continue

            return interpret_response(response)

        raise ServerError("Request failed after all retries")  # pragma: no cover


class AsyncHttpTransport:
    """Non-blocking transport backed by :class:`httpx.AsyncClient`.

    Mirrors :class:`HttpTransport`; must be used as an async context manager.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> AsyncHttpTransport:
        self._client = httpx.AsyncClient(
            timeout=self._config.timeout,
            verify=self._config.verify_ssl,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def dispatch(self, descriptor: RequestDescriptor) -> TransportResponse:
        """Send *descriptor* without blocking; see :meth:`HttpTransport.dispatch`."""
        assert self._client is not None, "Transport not initialised -- use as async context manager"

        kwargs = _request_kwargs(descriptor)
        max_retries = self._config.max_retries
        output = get_output()

        for attempt in range(max_retries + 1):
            try:
                response = await self._client.request(**kwargs)
            except _NETWORK_ERRORS as exc:
                if attempt < max_retries:
                    delay = 2 ** attempt
                    output.debug(
                        f"Connection error: {exc}, retrying in {delay}s "
                        f"(attempt {attempt + 1}/{max_retries})"
                    )
                    await asyncio.sleep(delay)
                    continue
                raise ConnectionError_(
                    f"Connection failed after {max_retries + 1} attempts: {exc}"
                ) from exc

            if response.status_code >= 500 and attempt < max_retries:
                delay = 2 ** attempt
                output.debug(
                    f"Server error {response.status_code}, retrying in {delay}s "
                    f"(attempt {attempt + 1}/{max_retries})"
                )
                await asyncio.sleep(delay)
                continue

            return interpret_response(response)

        raise ServerError("Request failed after all retries")  # pragma: no cover
