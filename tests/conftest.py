"""Shared test fixtures for canvas_connector.

Provides isolated config directories, in-memory secret stores, a scripted
input provider, sample credentials and the CLI runner. These fixtures are
automatically discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import pytest

from canvas_connector.auth.prompt import InputProvider
from canvas_connector.auth.secret_store import SecretStore
from canvas_connector.exceptions import AuthError, StoreError
from canvas_connector.models import Credentials
from canvas_connector.output import reset_output


BASE_URL = "https://canvas.test/api/v1"
TOKEN = "1234~secret-token"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    The CLI's log handler holds the same kind of reference, so it is
    removed as well.
    """
    yield
    reset_output()
    logger = logging.getLogger("canvas_connector")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


class FakeSecretStore(SecretStore):
    """Dict-backed secret store that records every write."""

    def __init__(self, entries: Optional[dict[tuple[str, str], str]] = None) -> None:
        self.entries: dict[tuple[str, str], str] = dict(entries or {})
        self.writes: list[tuple[str, str, str]] = []

    def get(self, service: str, account: str) -> Optional[str]:
        return self.entries.get((service, account))

    def set(self, service: str, account: str, value: str) -> None:
        self.writes.append((service, account, value))
        self.entries[(service, account)] = value

    def delete(self, service: str, account: str) -> None:
        self.entries.pop((service, account), None)


class BrokenSecretStore(SecretStore):
    """Secret store whose backend is always unavailable."""

    def get(self, service: str, account: str) -> Optional[str]:
        raise StoreError("keyring locked")

    def set(self, service: str, account: str, value: str) -> None:
        raise StoreError("keyring locked")

    def delete(self, service: str, account: str) -> None:
        raise StoreError("keyring locked")


class ScriptedInput(InputProvider):
    """Input provider that replays canned answers.

    Raises :class:`AuthError` once the script runs out, which is what the
    console provider does when no terminal is attached.
    """

    def __init__(self, answers: Optional[list[str]] = None) -> None:
        self.answers = list(answers or [])
        self.prompts: list[tuple[str, bool]] = []
        self.notices: list[str] = []

    def prompt(self, message: str, secret: bool = False) -> str:
        self.prompts.append((message, secret))
        if not self.answers:
            raise AuthError("no scripted input left")
        return self.answers.pop(0)

    def notify(self, message: str) -> None:
        self.notices.append(message)


def stored_blob(base_url: str = BASE_URL, token: str = TOKEN) -> str:
    """Serialised credentials as the chain writes them to the store."""
    return Credentials(base_url=base_url, token=token).model_dump_json()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(base_url=BASE_URL, token=TOKEN)


@pytest.fixture
def fake_store() -> FakeSecretStore:
    return FakeSecretStore()


@pytest.fixture
def filled_store() -> FakeSecretStore:
    """A store that already holds credentials under the default key."""
    return FakeSecretStore({("canvas-connector", "credentials"): stored_blob()})


@pytest.fixture
def broken_store() -> BrokenSecretStore:
    return BrokenSecretStore()


@pytest.fixture
def scripted_input() -> ScriptedInput:
    """Scripted input with one valid URL/token pair."""
    return ScriptedInput([BASE_URL, TOKEN])


@pytest.fixture
def make_input() -> type[ScriptedInput]:
    """The ScriptedInput class, for tests that need their own answers."""
    return ScriptedInput


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path so
    that tests never touch real user config. Forces the XDG layout, clears
    every CANVAS_* environment variable and changes the working directory
    to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("canvas_connector.config._is_xdg_platform", lambda: True)

    for var in [
        "CANVAS_URL",
        "CANVAS_TOKEN",
        "CANVAS_CONNECTOR_FILE_FALLBACK",
        "CANVAS_CONNECTOR_ENV_CREDENTIALS",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def credentials_file(isolated_config: Path) -> Path:
    """Write a fallback credentials file at the default location."""
    path = isolated_config / "config" / "canvas-connector" / "canvas_credentials.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps({"url_canvas": "https://file.test/api/v1", "token_canvas": "file-token"}),
        encoding="utf-8",
    )
    return path


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
