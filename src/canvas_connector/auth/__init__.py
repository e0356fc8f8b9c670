"""Credential acquisition for canvas_connector.

This package produces the :class:`~canvas_connector.models.Credentials` every
request needs, and can check them against Canvas.

The main entry points are:

- :class:`SecretStore` / :class:`KeyringSecretStore` -- get/set/delete access to
  the OS credential store.
- :class:`CredentialChain` and :func:`build_default_chain` -- ordered credential
  sources (store, optional environment, optional file, interactive prompt).
- :func:`test_credentials` -- probe Canvas with a URL/token pair.
- :func:`resolve_and_validate` -- resolve, then probe.

Typical usage::

    from canvas_connector.auth import KeyringSecretStore, build_default_chain

    chain = build_default_chain(KeyringSecretStore())
    credentials = chain.resolve()
"""

from canvas_connector.auth.chain import CredentialChain, build_default_chain, resolve_and_validate
from canvas_connector.auth.prompt import ConsoleInputProvider, InputProvider
from canvas_connector.auth.secret_store import (
    KeyringSecretStore,
    SecretStore,
    StoreKey,
    forget_credentials,
    load_credentials,
    save_credentials,
)
from canvas_connector.auth.sources import (
    CredentialSource,
    EnvSource,
    FileSource,
    PromptSource,
    SecretStoreSource,
)
from canvas_connector.auth.validator import CredentialCheck, test_credentials

__all__ = [
    "ConsoleInputProvider",
    "CredentialChain",
    "CredentialCheck",
    "CredentialSource",
    "EnvSource",
    "FileSource",
    "InputProvider",
    "KeyringSecretStore",
    "PromptSource",
    "SecretStore",
    "SecretStoreSource",
    "StoreKey",
    "build_default_chain",
    "forget_credentials",
    "load_credentials",
    "resolve_and_validate",
    "save_credentials",
    "test_credentials",
]
