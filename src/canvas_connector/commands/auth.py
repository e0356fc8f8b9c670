"""Auth commands -- obtain, check and forget Canvas credentials.

Provides the ``canvas-connector auth`` sub-command group:

    canvas-connector auth login    # resolve (prompting if needed) and validate
    canvas-connector auth test     # probe Canvas with stored or given credentials
    canvas-connector auth status   # show which source supplies credentials
    canvas-connector auth logout   # delete credentials from the secret store
"""

from __future__ import annotations

from typing import Optional

import typer

from canvas_connector.auth import StoreKey, forget_credentials, test_credentials
from canvas_connector.commands._common import (
    get_chain,
    get_config,
    get_store,
    get_transport,
    resolve_credentials,
)
from canvas_connector.config import get_credentials_file_path
from canvas_connector.exceptions import AuthError, StoreError
from canvas_connector.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
)
from canvas_connector.output import error, get_output, info, success, suggest


auth_app = typer.Typer(no_args_is_help=True)


@auth_app.command("login")
def auth_login(ctx: typer.Context) -> None:
    """Resolve credentials and check them against Canvas.

    Uses stored credentials when present; otherwise prompts for the Canvas
    URL and token and saves them to the OS secret store.

    Example::

        canvas-connector auth login
    """
    credentials = resolve_credentials(ctx)
    check = test_credentials(
        credentials.base_url,
        credentials.token,
        get_config(ctx).request,
        transport=get_transport(ctx),
    )
    if check.ok:
        success(f"Authenticated against {credentials.base_url}")
        return
    if check.rejected:
        error(f"Canvas rejected the token ({check.describe()})")
        suggest("Remove it and try again: canvas-connector auth logout")
        raise typer.Exit(code=EXIT_AUTH_FAILURE)
    error(f"Cannot verify credentials: {check.describe()}")
    raise typer.Exit(code=EXIT_CONNECTION_ERROR)


@auth_app.command("test")
def auth_test(
    ctx: typer.Context,
    url: Optional[str] = typer.Option(None, "--url", help="Canvas API URL to test."),
    token: Optional[str] = typer.Option(
        None, "--token", help="Access token to test (defaults to resolved credentials)."
    ),
) -> None:
    """Probe ``/users/self`` and report the HTTP status.

    With both ``--url`` and ``--token`` the given pair is tested; otherwise
    the credential chain supplies them. Exits 0 when accepted, 3 when
    rejected (401/403), 6 when Canvas cannot be reached or answers otherwise.
    """
    if (url is None) != (token is None):
        error("--url and --token must be given together")
        raise typer.Exit(code=EXIT_INVALID_USAGE)
    if url is None or token is None:
        credentials = resolve_credentials(ctx)
        url, token = credentials.base_url, credentials.token

    check = test_credentials(url, token, get_config(ctx).request, transport=get_transport(ctx))
    if check.ok:
        success(f"Credentials accepted (HTTP {check.status_code})")
        return
    if check.rejected:
        error(f"Credentials rejected ({check.describe()})")
        raise typer.Exit(code=EXIT_AUTH_FAILURE)
    error(check.describe())
    raise typer.Exit(code=EXIT_CONNECTION_ERROR)


@auth_app.command("status")
def auth_status(ctx: typer.Context) -> None:
    """Show where credentials would come from, without prompting."""
    ctx.ensure_object(dict)["no_input"] = True
    config = get_config(ctx)
    chain = get_chain(ctx)
    output = get_output()

    info(f"Sources, in order: {', '.join(s.name for s in chain.sources)}")
    if config.file_fallback:
        info(f"Fallback file: {get_credentials_file_path(config)}")
    try:
        credentials = chain.resolve()
    except AuthError as exc:
        error(str(exc))
        suggest("Log in: canvas-connector auth login")
        raise typer.Exit(code=EXIT_AUTH_FAILURE) from None

    source = chain.last_source.name if chain.last_source else "unknown"
    output.print_record(
        {"source": source, "base_url": credentials.base_url, "token": credentials.masked_token()}
    )


@auth_app.command("logout")
def auth_logout(ctx: typer.Context) -> None:
    """Delete saved credentials from the OS secret store.

    The fallback file and environment variables are not touched.
    """
    config = get_config(ctx)
    try:
        forget_credentials(get_store(ctx), StoreKey.from_config(config))
    except StoreError as exc:
        error(str(exc))
        raise typer.Exit(code=EXIT_GENERIC_FAILURE) from None
    success("Stored credentials removed.")
