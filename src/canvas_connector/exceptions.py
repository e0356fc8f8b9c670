"""Exception hierarchy for canvas_connector.

These exceptions are raised inside the request and credential layers. Public
fetch operations never let them escape: the result classifier in
:mod:`canvas_connector.client.outcome` turns them into outcome variants.
The CLI catches :class:`CanvasConnectorError` and exits with the
attached ``exit_code``.

Subclass hierarchy::

    CanvasConnectorError (exit 1)
    +-- ConfigError          (exit 1)
    +-- StoreError           (exit 1)
    +-- AuthError            (exit 3)
    +-- NotFoundError        (exit 4)
    +-- ServerError          (exit 5)
    +-- ConnectionError_     (exit 6)
        +-- ResponseDecodeError
"""

from canvas_connector.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)


class CanvasConnectorError(Exception):
    """Base exception for all canvas_connector errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(CanvasConnectorError):
    """Raised for configuration problems (invalid JSON, unknown keys, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE


class StoreError(CanvasConnectorError):
    """Raised when the OS secret store is unavailable, locked, or refuses access."""

    exit_code = EXIT_GENERIC_FAILURE


class AuthError(CanvasConnectorError):
    """Raised on HTTP 401 / 403, or when no credential source yields credentials."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(CanvasConnectorError):
    """Raised when Canvas returns HTTP 404."""

    exit_code = EXIT_NOT_FOUND


class ServerError(CanvasConnectorError):
    """Raised for any other HTTP error status (4xx other than 401/403/404, and 5xx)."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(CanvasConnectorError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class ResponseDecodeError(ConnectionError_):
    """Raised when a response body is not valid JSON or has an unexpected shape."""
