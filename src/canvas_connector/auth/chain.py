"""Credential source chain.

:class:`CredentialChain` holds an ordered list of
:class:`~canvas_connector.auth.sources.CredentialSource` objects and an
explicit :class:`~canvas_connector.auth.secret_store.SecretStore` handle.
:meth:`CredentialChain.resolve` asks each source in turn and stops at the
first one that has credentials. When that source is interactive, the result
is written to the store (best-effort) before it is returned.

The chain never talks to Canvas. Cached credentials are trusted until a call
fails; :func:`resolve_and_validate` is the opt-in path that also probes the
API.

Typical usage::

    from canvas_connector.auth import KeyringSecretStore, build_default_chain

    chain = build_default_chain(KeyringSecretStore(), config)
    credentials = chain.resolve()
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import httpx

from canvas_connector.auth.prompt import ConsoleInputProvider, InputProvider
from canvas_connector.auth.secret_store import SecretStore, StoreKey, save_credentials
from canvas_connector.auth.sources import (
    CredentialSource,
    EnvSource,
    FileSource,
    PromptSource,
    SecretStoreSource,
)
from canvas_connector.auth.validator import CredentialCheck, test_credentials
from canvas_connector.config import get_credentials_file_path
from canvas_connector.exceptions import AuthError, ConnectionError_, StoreError
from canvas_connector.models import ConnectorConfig, Credentials

logger = logging.getLogger(__name__)


class CredentialChain:
    """Resolve :class:`~canvas_connector.models.Credentials` from ordered sources.

    Args:
        sources: Sources in priority order.
        store: Store that receives credentials produced by a source whose
            ``persist`` flag is set.
        key: Where in *store* credentials are written.
    """

    def __init__(
        self,
        sources: Sequence[CredentialSource],
        store: Optional[SecretStore] = None,
        key: Optional[StoreKey] = None,
    ) -> None:
        self._sources = list(sources)
        self._store = store
        self._key = key or StoreKey()
        self._last_source: Optional[CredentialSource] = None

    @property
    def sources(self) -> list[CredentialSource]:
        return list(self._sources)

    @property
    def last_source(self) -> Optional[CredentialSource]:
        """The source that satisfied the most recent :meth:`resolve` call."""
        return self._last_source

    def resolve(self) -> Credentials:
        """Return credentials from the first source that has them.

        Returns:
            The resolved credentials.

        Raises:
            AuthError: If every source came up empty, or the interactive
                source could not obtain input.
        """
        for source in self._sources:
            credentials = source.load()
            if credentials is None:
                logger.debug("No credentials from %s", source.name)
                continue
            logger.debug("Credentials resolved from %s", source.name)
            if source.persist:
                self._persist(credentials)
            self._last_source = source
            return credentials

        tried = ", ".join(s.name for s in self._sources) or "no sources"
        raise AuthError(f"No Canvas credentials available (tried {tried})")

    def _persist(self, credentials: Credentials) -> None:
        if self._store is None:
            return
        try:
            save_credentials(self._store, self._key, credentials)
        except StoreError as exc:
            logger.warning("Could not save credentials to the secret store: %s", exc)


def build_default_chain(
    store: SecretStore,
    config: Optional[ConnectorConfig] = None,
    input_provider: Optional[InputProvider] = None,
    interactive: bool = True,
) -> CredentialChain:
    """Build the standard chain: store, [environment], [file], [prompt].

    Args:
        store: Secret store handle, read first and written after a prompt.
        config: Decides whether the environment and file sources are
            included and where the fallback file lives. Defaults apply when
            omitted (both disabled).
        input_provider: Console used by the prompt source. Defaults to
            :class:`~canvas_connector.auth.prompt.ConsoleInputProvider`.
        interactive: Include the prompt source. Without it, resolution fails
            with :class:`~canvas_connector.exceptions.AuthError` instead of
            asking.
    """
    config = config or ConnectorConfig()
    key = StoreKey.from_config(config)

    sources: list[CredentialSource] = [SecretStoreSource(store, key)]
    if config.env_credentials:
        sources.append(EnvSource())
    if config.file_fallback:
        sources.append(FileSource(get_credentials_file_path(config)))
    if interactive:
        sources.append(PromptSource(input_provider or ConsoleInputProvider()))

    return CredentialChain(sources, store=store, key=key)


def resolve_and_validate(
    chain: CredentialChain,
    config: Optional[ConnectorConfig] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> Credentials:
    """Resolve credentials, then confirm Canvas accepts them.

    Raises:
        AuthError: If resolution fails or Canvas rejects the credentials.
        ConnectionError_: If Canvas could not be reached or answered with a
            non-authorisation error.
    """
    credentials = chain.resolve()
    request = (config or ConnectorConfig()).request
    check: CredentialCheck = test_credentials(
        credentials.base_url, credentials.token, request, transport=transport
    )
    if check.ok:
        return credentials
    if check.rejected:
        raise AuthError(f"Canvas rejected the credentials: {check.describe()}")
    raise ConnectionError_(f"Cannot validate credentials: {check.describe()}")
