"""Synchronous request executor for the Canvas REST API.

:class:`RequestExecutor` wraps :class:`httpx.Client` and layers on:

- **Auth injection** -- every request, including pagination follow-ups,
  carries ``Authorization: Bearer <token>``.
- **Pagination** -- :meth:`RequestExecutor.get_all` follows the ``next``
  relation of the ``Link`` response header until it disappears, and returns
  the concatenated items in the order Canvas sent them.
- **Error mapping** -- HTTP error statuses, transport failures and
  undecodable bodies are raised as the typed exceptions of
  :mod:`canvas_connector.exceptions`.

There is no retry: once credentials are resolved, a failure is reported to
the caller as-is. Pages are fetched one after another because each page's
continuation is only known once the previous response arrives.

See Also:
    :func:`canvas_connector.client.outcome.classify` which turns the raised
    exceptions into outcome values.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from canvas_connector.exceptions import (
    AuthError,
    ConnectionError_,
    NotFoundError,
    ResponseDecodeError,
    ServerError,
)
from canvas_connector.models import Credentials, RequestConfig
from canvas_connector.output import get_output


def open_http_client(
    base_url: str,
    token: str,
    request_config: Optional[RequestConfig] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    """Create an :class:`httpx.Client` rooted at *base_url* with bearer auth.

    The ``Authorization`` header is a client default, so it is attached to
    every request the client sends, absolute pagination URLs included.

    Args:
        base_url: API root such as ``https://host/api/v1``.
        token: Canvas access token.
        request_config: Timeout and TLS settings. A ``None`` timeout keeps
            the httpx default.
        transport: Optional transport override (tests pass
            :class:`httpx.MockTransport`).

    Raises:
        ConnectionError_: If *base_url* is not a usable URL.
    """
    config = request_config or RequestConfig()
    kwargs: dict[str, Any] = {
        "base_url": base_url,
        "headers": {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        },
        "verify": config.verify_ssl,
        "follow_redirects": True,
    }
    if config.timeout is not None:
        kwargs["timeout"] = config.timeout
    if transport is not None:
        kwargs["transport"] = transport
    try:
        return httpx.Client(**kwargs)
    except (httpx.InvalidURL, ValueError) as exc:
        raise ConnectionError_(f"Invalid Canvas URL {base_url!r}: {exc}") from exc


class RequestExecutor:
    """Execute authenticated requests against one Canvas instance.

    Must be used as a context manager so that the underlying connection pool
    is opened and closed.

    Args:
        credentials: Base URL and token to send.
        request_config: Timeout, TLS and page-size settings.
        transport: Optional httpx transport override.

    Example::

        with RequestExecutor(credentials) as executor:
            me = executor.request("GET", "/users/self")
            courses = executor.get_all("/courses")
    """

    def __init__(
        self,
        credentials: Credentials,
        request_config: Optional[RequestConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._credentials = credentials
        self._config = request_config or RequestConfig()
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> RequestExecutor:
        self._client = open_http_client(
            self._credentials.base_url,
            self._credentials.token,
            self._config,
            self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[Any] = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE).
            path: Path below the API root, e.g. ``/courses/42``.
            params: Query parameters. List values repeat the key.
            json_body: JSON-serialisable request body.

        Returns:
            The decoded JSON value, or ``None`` for an empty body.

        Raises:
            AuthError: On 401 / 403.
            NotFoundError: On 404.
            ServerError: On any other error status.
            ConnectionError_: On network / timeout errors.
            ResponseDecodeError: If the body is not valid JSON.
        """
        response = self._send(method, path, params=params, json_body=json_body)
        return self._decode(response)

    def get_all(self, path: str, params: Optional[dict[str, Any]] = None) -> list[Any]:
        """GET a collection endpoint and follow its pagination to the end.

        The first request adds ``per_page`` from the request config unless
        *params* already sets it. Follow-up requests use the ``next`` URL
        verbatim, which already carries the query string.

        Returns:
            Every item of every page, pages in the order received and items
            in page order.

        Raises:
            ResponseDecodeError: If a page is not a JSON array, or a ``next``
                link points back to a page already fetched.
            Everything :meth:`request` raises.
        """
        merged_params: dict[str, Any] = {"per_page": self._config.per_page}
        merged_params.update(params or {})

        output = get_output()
        items: list[Any] = []
        response = self._send("GET", path, params=merged_params)
        fetched = {str(response.request.url)}
        page = 1
        while True:
            body = self._decode(response)
            if not isinstance(body, list):
                raise ResponseDecodeError(
                    f"Expected a JSON array from {response.request.url}, "
                    f"got {type(body).__name__}"
                )
            items.extend(body)
            next_url = _next_link(response)
            output.debug(f"GET {path}: page {page} had {len(body)} items")
            if next_url is None:
                return items
            if next_url in fetched:
                raise ResponseDecodeError(f"Pagination loop: {next_url} was already fetched")
            page += 1
            response = self._send("GET", next_url)
            fetched.update((next_url, str(response.request.url)))

    def get(self, path: str, **kwargs: Any) -> Any:
        """Send a GET request and return the decoded body."""
        return self.request("GET", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> Any:
        """Send a PUT request and return the decoded body."""
        return self.request("PUT", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> Any:
        """Send a POST request and return the decoded body."""
        return self.request("POST", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Any:
        """Send a DELETE request and return the decoded body."""
        return self.request("DELETE", path, **kwargs)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _send(
        self,
        method: str,
        url: str,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[Any] = None,
    ) -> httpx.Response:
        """Send a request and raise a typed exception for error outcomes."""
        assert self._client is not None, "Executor not initialised -- use as context manager"

        kwargs: dict[str, Any] = {"method": method, "url": url}
        if params:
            kwargs["params"] = params
        if json_body is not None:
            kwargs["json"] = json_body

        get_output().debug(f"{method.upper()} {url}")
        try:
            response = self._client.request(**kwargs)
        except httpx.HTTPError as exc:
            raise ConnectionError_(f"Request to {url} failed: {_describe(exc)}") from exc
        except httpx.InvalidURL as exc:
            raise ConnectionError_(f"Invalid request URL {url!r}: {exc}") from exc

        _raise_for_status(response)
        return response

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ResponseDecodeError(
                f"Malformed JSON from {response.request.url} "
                f"(HTTP {response.status_code}): {exc}"
            ) from exc


def _next_link(response: httpx.Response) -> Optional[str]:
    """Return the URL of the ``rel="next"`` link, if the response has one."""
    link = response.links.get("next")
    if not link:
        return None
    return link.get("url") or None


def _describe(exc: httpx.HTTPError) -> str:
    text = str(exc)
    return f"{type(exc).__name__}: {text}" if text else type(exc).__name__


def _raise_for_status(response: httpx.Response) -> None:
    """Raise a typed exception for any status outside 2xx."""
    status = response.status_code
    if 200 <= status < 300:
        return

    # Canvas error bodies look like {"errors": [{"message": "..."}]}.
    try:
        detail = response.json()
        if isinstance(detail, dict):
            errors = detail.get("errors")
            if isinstance(errors, list) and errors and isinstance(errors[0], dict):
                msg = str(errors[0].get("message") or "")
            else:
                msg = str(detail.get("message") or detail.get("error") or errors or "")
        else:
            msg = str(detail)
    except ValueError:
        msg = response.text[:200] if response.text else ""

    prefix = f"HTTP {status}"
    full_msg = f"{prefix}: {msg}" if msg else prefix

    if status in (401, 403):
        raise AuthError(full_msg)
    if status == 404:
        raise NotFoundError(full_msg)
    raise ServerError(full_msg)
