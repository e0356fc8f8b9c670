"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~canvas_connector.exceptions.CanvasConnectorError`
subclass and by the CLI when it turns an outcome into a process status.

Example::

    $ canvas-connector auth test
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the token was rejected
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_AUTH_FAILURE = 3
"""Authentication failed or no credentials could be obtained."""

EXIT_NOT_FOUND = 4
"""The requested resource was not found (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""Canvas answered with an error status that is not an authorisation failure."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred, or the response body could not be decoded."""
