"""Helpers shared by the CLI command groups.

Commands read their collaborators from the Typer context object populated in
:func:`~canvas_connector.app.main_callback`. ``ctx.obj`` may also be seeded
by the caller (``CliRunner.invoke(app, args, obj={...})``) with a ``store``,
``transport`` or ``input_provider`` to replace the keyring, the network or
the console.
"""

from __future__ import annotations

from typing import Optional, TypeVar

import httpx
import typer

from canvas_connector.auth import (
    ConsoleInputProvider,
    CredentialChain,
    InputProvider,
    KeyringSecretStore,
    SecretStore,
    build_default_chain,
)
from canvas_connector.canvas import Canvas
from canvas_connector.client.outcome import ErrCredentials, Ok, Outcome
from canvas_connector.config import resolve_config
from canvas_connector.exceptions import CanvasConnectorError
from canvas_connector.exit_codes import EXIT_AUTH_FAILURE, EXIT_CONNECTION_ERROR
from canvas_connector.models import ConnectorConfig, Credentials
from canvas_connector.output import error, suggest

T = TypeVar("T")


def _obj(ctx: typer.Context) -> dict:
    ctx.ensure_object(dict)
    return ctx.obj


def get_config(ctx: typer.Context) -> ConnectorConfig:
    obj = _obj(ctx)
    if obj.get("config") is None:
        obj["config"] = resolve_config()
    return obj["config"]


def get_store(ctx: typer.Context) -> SecretStore:
    obj = _obj(ctx)
    if obj.get("store") is None:
        obj["store"] = KeyringSecretStore()
    return obj["store"]


def get_transport(ctx: typer.Context) -> Optional[httpx.BaseTransport]:
    return _obj(ctx).get("transport")


def get_input_provider(ctx: typer.Context) -> InputProvider:
    return _obj(ctx).get("input_provider") or ConsoleInputProvider()


def get_chain(ctx: typer.Context) -> CredentialChain:
    return build_default_chain(
        get_store(ctx),
        get_config(ctx),
        input_provider=get_input_provider(ctx),
        interactive=not _obj(ctx).get("no_input", False),
    )


def resolve_credentials(ctx: typer.Context) -> Credentials:
    """Run the credential chain, exiting with the error's code on failure."""
    try:
        return get_chain(ctx).resolve()
    except CanvasConnectorError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def open_canvas(ctx: typer.Context) -> Canvas:
    return Canvas(
        resolve_credentials(ctx),
        get_config(ctx).request,
        transport=get_transport(ctx),
    )


def unwrap(outcome: Outcome[T]) -> T:
    """Return the value of an ``Ok`` outcome, or report the error and exit.

    Credential errors exit with code 3 and suggest logging in again;
    connection errors exit with code 6.
    """
    if isinstance(outcome, Ok):
        return outcome.value
    error(outcome.message)
    if isinstance(outcome, ErrCredentials):
        suggest("Update your token: canvas-connector auth logout && canvas-connector auth login")
        raise typer.Exit(code=EXIT_AUTH_FAILURE)
    raise typer.Exit(code=EXIT_CONNECTION_ERROR)
