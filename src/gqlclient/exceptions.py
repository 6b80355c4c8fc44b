"""Exception hierarchy for gqlclient.

All exceptions inherit from :class:`GqlClientError`. Caller-input errors are
raised before any cache or network access; transport errors raised by
:mod:`gqlclient.client.transport` propagate through the dispatcher unchanged.

Subclass hierarchy::

    GqlClientError
    +-- InvalidUsageError
    |   +-- InvalidVariableNameError
    |   +-- ReservedVariableNameError
    +-- MalformedVariablesError
    +-- GraphQueryError
    +-- AuthError
    +-- NotFoundError
    +-- ServerError
    +-- ConnectionError_
    +-- ConfigError
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from gqlclient.client.request import RequestDescriptor


class GqlClientError(Exception):
    """Base exception for all gqlclient errors.

    Args:
        message: Human-readable error description.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidUsageError(GqlClientError):
    """Raised when a call has an invalid shape (e.g. a missing query)."""


class InvalidVariableNameError(InvalidUsageError):
    """Raised when ``query`` is passed as a variable alongside a string query."""


class ReservedVariableNameError(InvalidUsageError):
    """Raised when an option named ``query``, ``method`` or ``url`` is passed as a variable."""


class MalformedVariablesError(GqlClientError):
    """Raised when query variables cannot be canonicalized or encoded (e.g. cyclic references)."""


class GraphQueryError(GqlClientError):
    """Raised when the service answered the call but reported errors in the body.

    The message lists every error message returned by the service, one per
    line. Partial data, when present, is kept on :attr:`data`.

    Args:
        request: The resolved request descriptor that was sent.
        headers: Response headers.
        response: The parsed response body (``{"data": ..., "errors": [...]}``).
    """

    def __init__(
        self,
        request: RequestDescriptor,
        headers: dict[str, str],
        response: dict[str, Any],
    ):
        self.request = request
        self.headers = headers
        self.response = response
        errors = response.get("errors") or []
        self.errors: list[Any] = list(errors) if isinstance(errors, list) else [errors]
        self.data: Optional[Any] = response.get("data")
        super().__init__(_build_message(self.errors))


def _build_message(errors: list[Any]) -> str:
    lines = []
    for error in errors:
        if isinstance(error, dict):
            lines.append(f" - {error.get('message', error)}")
        else:
            lines.append(f" - {error}")
    return "Request failed due to following response errors:\n" + "\n".join(lines)


class AuthError(GqlClientError):
    """Raised when the endpoint returns HTTP 401 or 403."""


class NotFoundError(GqlClientError):
    """Raised when the endpoint returns HTTP 404."""


class ServerError(GqlClientError):
    """Raised for other non-2xx responses or an unreadable response body."""


class ConnectionError_(GqlClientError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """


class ConfigError(GqlClientError):
    """Raised for configuration problems (invalid JSON, bad values, bad env vars)."""
