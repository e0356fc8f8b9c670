"""Credential sources tried in order by :class:`~canvas_connector.auth.chain.CredentialChain`.

Each source answers one question: "do you have credentials?" It returns a
:class:`~canvas_connector.models.Credentials` value when it does and ``None``
when it does not. Sources recover from their own local failures (store
locked, file unreadable) by returning ``None``; only the interactive source
may raise, when no input can be obtained at all.

Built-in sources, in default chain order:

- :class:`SecretStoreSource` -- previously saved credentials.
- :class:`EnvSource` -- ``CANVAS_URL`` / ``CANVAS_TOKEN`` (opt-in).
- :class:`FileSource` -- the local fallback JSON file (opt-in).
- :class:`PromptSource` -- interactive entry; its result is persisted.
"""

from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from canvas_connector.auth.prompt import InputProvider
from canvas_connector.auth.secret_store import SecretStore, StoreKey, load_credentials
from canvas_connector.exceptions import StoreError
from canvas_connector.models import Credentials, FileCredentials

logger = logging.getLogger(__name__)

ENV_URL = "CANVAS_URL"
ENV_TOKEN = "CANVAS_TOKEN"


class CredentialSource(ABC):
    """One provider in the credential chain.

    Subclasses set :attr:`name` for diagnostics and :attr:`persist` to ``True``
    when the chain should save what they return to the secret store.
    """

    name: str = "source"
    persist: bool = False

    @abstractmethod
    def load(self) -> Optional[Credentials]:
        """Return credentials if this source has them, else ``None``."""
        ...


class SecretStoreSource(CredentialSource):
    """Read credentials saved in the OS secret store.

    An unavailable store is logged and treated as empty.
    """

    name = "secret store"

    def __init__(self, store: SecretStore, key: StoreKey) -> None:
        self._store = store
        self._key = key

    def load(self) -> Optional[Credentials]:
        try:
            return load_credentials(self._store, self._key)
        except StoreError as exc:
            logger.warning("Secret store unavailable, trying next source: %s", exc)
            return None


class EnvSource(CredentialSource):
    """Read credentials from ``CANVAS_URL`` and ``CANVAS_TOKEN``.

    Both variables must be set and non-blank.
    """

    name = "environment"

    def load(self) -> Optional[Credentials]:
        url = os.environ.get(ENV_URL)
        token = os.environ.get(ENV_TOKEN)
        if url is None or token is None:
            logger.debug("%s / %s not both set", ENV_URL, ENV_TOKEN)
            return None
        try:
            return Credentials(base_url=url, token=token)
        except ValidationError:
            logger.warning("Ignoring blank %s / %s", ENV_URL, ENV_TOKEN)
            return None


class FileSource(CredentialSource):
    """Read credentials from the fallback JSON file.

    The file holds ``url_canvas`` and ``token_canvas``. It is read-only from
    this package's point of view. A missing, unreadable, or malformed file is
    treated as "not found".
    """

    name = "credentials file"

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[Credentials]:
        if not self._path.is_file():
            logger.debug("No credentials file at %s", self._path)
            return None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            return FileCredentials.model_validate(data).to_credentials()
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            logger.warning("Ignoring unreadable credentials file %s: %s", self._path, exc)
            return None


class PromptSource(CredentialSource):
    """Ask the user for the base URL and token.

    Answers that are empty once cleaned (blank, whitespace, a URL made only
    of slashes) are rejected and asked again; the source never returns
    partially filled credentials. The chain persists the result.
    """

    name = "interactive prompt"
    persist = True

    def __init__(self, input_provider: InputProvider) -> None:
        self._input = input_provider

    def load(self) -> Optional[Credentials]:
        while True:
            url = self._ask(
                "Canvas API URL (e.g. https://canvas.example.edu/api/v1)", "base_url", secret=False
            )
            token = self._ask("Canvas access token", "token", secret=True)
            try:
                return Credentials(base_url=url, token=token)
            except ValidationError as exc:
                self._input.notify(f"Invalid credentials, please try again: {exc.errors()[0]['msg']}")

    def _ask(self, message: str, field: str, secret: bool) -> str:
        while True:
            answer = self._input.prompt(message, secret=secret)
            try:
                return Credentials.normalize(field, answer)
            except ValueError:
                self._input.notify("A value is required.")
