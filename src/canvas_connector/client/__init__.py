"""HTTP layer for canvas_connector.

Classes:
    :class:`RequestExecutor` -- blocking executor backed by :class:`httpx.Client`
    with bearer auth, pagination and typed error mapping.

Outcome types:
    :class:`Ok`, :class:`ErrConnection`, :class:`ErrCredentials` and the
    :data:`Outcome` union, plus :func:`classify` which produces them.

Example::

    from canvas_connector.client import RequestExecutor, classify

    with RequestExecutor(credentials) as executor:
        outcome = classify(lambda: executor.get_all("/courses"))
"""

from canvas_connector.client.executor import RequestExecutor, open_http_client
from canvas_connector.client.outcome import (
    ErrConnection,
    ErrCredentials,
    Ok,
    Outcome,
    classify,
)

__all__ = [
    "ErrConnection",
    "ErrCredentials",
    "Ok",
    "Outcome",
    "RequestExecutor",
    "classify",
    "open_http_client",
]
