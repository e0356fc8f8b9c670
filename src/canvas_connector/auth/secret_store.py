"""Secret store adapter over the OS-native credential store.

:class:`SecretStore` is the small interface the credential chain depends on:
``get`` / ``set`` / ``delete`` a named secret. :class:`KeyringSecretStore`
implements it with the :mod:`keyring` library, which talks to the macOS
Keychain, Windows Credential Manager or the Secret Service on Linux.

Backend failures (locked store, missing backend, denied access) surface as
:class:`~canvas_connector.exceptions.StoreError`. Callers in the chain treat
them like "not found" and move on to the next source.

The stored value is one opaque string; :func:`save_credentials` and
:func:`load_credentials` serialise a
:class:`~canvas_connector.models.Credentials` value into that blob as JSON.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError
from pydantic import ValidationError

from canvas_connector.exceptions import StoreError
from canvas_connector.models import ConnectorConfig, Credentials

logger = logging.getLogger(__name__)

DEFAULT_SERVICE = "canvas-connector"
DEFAULT_ACCOUNT = "credentials"


class SecretStore(ABC):
    """Abstract get/set/delete access to named secrets.

    A secret is addressed by ``(service, account)``. Implementations raise
    :class:`~canvas_connector.exceptions.StoreError` when the backing store
    cannot be used, and return ``None`` from :meth:`get` when the entry
    simply does not exist.
    """

    @abstractmethod
    def get(self, service: str, account: str) -> Optional[str]:
        """Return the stored secret, or ``None`` if there is no entry."""
        ...

    @abstractmethod
    def set(self, service: str, account: str, value: str) -> None:
        """Create or replace the secret."""
        ...

    @abstractmethod
    def delete(self, service: str, account: str) -> None:
        """Remove the secret. Deleting a missing entry is a no-op."""
        ...


class KeyringSecretStore(SecretStore):
    """:class:`SecretStore` backed by the system keyring.

    The OS may ask the user to unlock the store on first access; that
    interaction is outside this package's control.
    """

    def get(self, service: str, account: str) -> Optional[str]:
        try:
            return keyring.get_password(service, account)
        except KeyringError as exc:
            raise StoreError(f"Cannot read {service}/{account} from keyring: {exc}") from exc

    def set(self, service: str, account: str, value: str) -> None:
        try:
            keyring.set_password(service, account, value)
        except KeyringError as exc:
            raise StoreError(f"Cannot write {service}/{account} to keyring: {exc}") from exc

    def delete(self, service: str, account: str) -> None:
        try:
            keyring.delete_password(service, account)
        except PasswordDeleteError:
            logger.debug("No keyring entry %s/%s to delete", service, account)
        except KeyringError as exc:
            raise StoreError(f"Cannot delete {service}/{account} from keyring: {exc}") from exc


class StoreKey:
    """The ``(service, account)`` pair under which credentials are kept."""

    def __init__(self, service: str = DEFAULT_SERVICE, account: str = DEFAULT_ACCOUNT) -> None:
        self.service = service
        self.account = account

    @classmethod
    def from_config(cls, config: ConnectorConfig) -> StoreKey:
        return cls(config.keyring_service, config.keyring_account)

    def __repr__(self) -> str:
        return f"StoreKey({self.service!r}, {self.account!r})"


def load_credentials(store: SecretStore, key: StoreKey) -> Optional[Credentials]:
    """Read and deserialise credentials from *store*.

    Returns:
        The stored :class:`~canvas_connector.models.Credentials`, or ``None``
        when there is no entry or the entry is not a valid credentials blob.

    Raises:
        StoreError: If the store itself is unavailable.
    """
    blob = store.get(key.service, key.account)
    if blob is None:
        return None
    try:
        return Credentials.model_validate_json(blob)
    except ValidationError:
        logger.warning("Ignoring unreadable credentials entry %s/%s", key.service, key.account)
        return None


def save_credentials(store: SecretStore, key: StoreKey, credentials: Credentials) -> None:
    """Serialise *credentials* as JSON and write them to *store*.

    Raises:
        StoreError: If the store rejects the write.
    """
    store.set(key.service, key.account, credentials.model_dump_json())


def forget_credentials(store: SecretStore, key: StoreKey) -> None:
    """Delete stored credentials. A missing entry is not an error.

    Raises:
        StoreError: If the store rejects the deletion.
    """
    store.delete(key.service, key.account)
