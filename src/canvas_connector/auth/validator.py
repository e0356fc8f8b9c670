"""Credential validation by probing Canvas.

:func:`test_credentials` sends one authenticated GET to ``/users/self``, a
cheap endpoint every valid token can read, and reports the status in a
:class:`CredentialCheck`. It distinguishes three cases:

- reached Canvas and the token was accepted (2xx),
- reached Canvas and the token was rejected (401 / 403),
- could not talk to Canvas at all (status code :data:`UNREACHABLE`), or
  Canvas answered with some other status.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict

from canvas_connector.client.executor import open_http_client
from canvas_connector.exceptions import ConnectionError_
from canvas_connector.models import RequestConfig

logger = logging.getLogger(__name__)

PROBE_PATH = "/users/self"

UNREACHABLE = 0
"""Status code reported when no HTTP response was received."""


class CredentialCheck(BaseModel):
    """Result of a credential probe.

    Attributes:
        status_code: HTTP status returned by Canvas, or :data:`UNREACHABLE`.
        detail: Transport error text when the host could not be reached.
    """

    model_config = ConfigDict(frozen=True)

    status_code: int
    detail: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def rejected(self) -> bool:
        """Canvas was reached and refused the token."""
        return self.status_code in (401, 403)

    @property
    def unreachable(self) -> bool:
        return self.status_code == UNREACHABLE

    def describe(self) -> str:
        if self.unreachable:
            return f"could not reach Canvas ({self.detail})" if self.detail else "could not reach Canvas"
        return f"HTTP {self.status_code}"


def test_credentials(
    url: str,
    token: str,
    request_config: Optional[RequestConfig] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> CredentialCheck:
    """Check whether Canvas accepts *token* at *url*.

    Args:
        url: API root such as ``https://host/api/v1``.
        token: Access token to probe with.
        request_config: Timeout and TLS settings.
        transport: Optional httpx transport override.

    Returns:
        A :class:`CredentialCheck`. Never raises for network or HTTP failures.
    """
    url = url.strip().rstrip("/")
    token = token.strip()
    if not url or not token:
        return CredentialCheck(status_code=UNREACHABLE, detail="URL and token are required")

    try:
        client = open_http_client(url, token, request_config, transport)
    except ConnectionError_ as exc:
        return CredentialCheck(status_code=UNREACHABLE, detail=str(exc))

    with client:
        try:
            response = client.get(PROBE_PATH)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.debug("Credential probe to %s failed: %s", url, exc)
            return CredentialCheck(
                status_code=UNREACHABLE, detail=str(exc) or type(exc).__name__
            )

    logger.debug("Credential probe to %s returned HTTP %s", url, response.status_code)
    return CredentialCheck(status_code=response.status_code)


# The name starts with "test_"; keep pytest from collecting it when imported.
test_credentials.__test__ = False  # type: ignore[attr-defined]
