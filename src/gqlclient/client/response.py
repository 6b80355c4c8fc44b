"""Bridge from :class:`httpx.Response` to the transport result the dispatcher consumes.

The dispatcher never sees :mod:`httpx` objects. A transport hands back a
:class:`TransportResponse` carrying the status, the response headers and
the decoded JSON body (``{"data": ..., "errors": [...]}``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx


@dataclass
class TransportResponse:
    """A structured transport result.

    Attributes:
        status: HTTP status code.
        headers: Response headers with lower-cased names.
        body: Decoded JSON body.
    """

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: dict[str, Any] = field(default_factory=dict)


def extract_response_data(response: httpx.Response) -> Any:
    """Extract the body from an HTTP response.

    Attempts to parse the body as JSON first. If that fails (e.g. an HTML
    error page from a proxy), returns the raw text. Returns ``None`` for
    responses with no content.
    """
    if not response.content:
        return None

    try:
        return response.json()
    except ValueError:
        pass

    return response.text


def to_transport_response(response: httpx.Response, body: dict[str, Any]) -> TransportResponse:
    """Package *response* and its decoded *body* as a :class:`TransportResponse`."""
    return TransportResponse(
        status=response.status_code,
        headers={k.lower(): v for k, v in response.headers.items()},
        body=body,
    )
