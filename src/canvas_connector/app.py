"""Typer application and CLI entry point for canvas-connector.

This module wires together the top-level Typer application and registers the
built-in sub-commands (``auth``, ``courses``, ``submissions``, ``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs a SIGINT handler and invokes the Typer app.
Unhandled exceptions are written to a crash log under the data directory.

See Also:
    :mod:`canvas_connector.config`: configuration resolution.
    :mod:`canvas_connector.output`: output formatting initialised in
    :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from canvas_connector import __version__
from canvas_connector.commands.auth import auth_app
from canvas_connector.commands.config import config_app
from canvas_connector.commands.courses import courses_app
from canvas_connector.commands.submissions import submissions_app
from canvas_connector.exit_codes import EXIT_GENERIC_FAILURE

_LOG_HANDLER_NAME = "canvas-connector-cli"


app = typer.Typer(
    name="canvas-connector",
    help="Authenticate against and query the Canvas LMS REST API.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.add_typer(auth_app, name="auth", help="Credential management.")
app.add_typer(courses_app, name="courses", help="Courses, rosters and assignments.")
app.add_typer(submissions_app, name="submissions", help="Assignment submissions.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"canvas-connector {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Route library log records to stderr; DEBUG when verbose."""
    logger = logging.getLogger("canvas_connector")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    for existing in list(logger.handlers):
        if existing.get_name() == _LOG_HANDLER_NAME:
            logger.removeHandler(existing)
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_LOG_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    file_fallback: Optional[bool] = typer.Option(
        None,
        "--file-fallback/--no-file-fallback",
        help="Read credentials from the local fallback file.",
    ),
    no_input: bool = typer.Option(
        False, "--no-input", help="Never prompt for credentials."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~canvas_connector.output.OutputManager`
    and logging from CLI flags, resolves the effective configuration, and
    stores shared state in ``ctx.obj`` for the sub-commands.
    """
    from canvas_connector.config import resolve_config
    from canvas_connector.exceptions import ConfigError
    from canvas_connector.output import OutputFormat, OutputManager, error, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    _configure_logging(verbose)

    try:
        config = resolve_config(cli_file_fallback=file_fallback)
    except ConfigError as exc:
        set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if fmt == OutputFormat.AUTO and config.output.format != OutputFormat.AUTO.value:
        try:
            fmt = OutputFormat(config.output.format)
        except ValueError:
            pass

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["no_input"] = no_input
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from canvas_connector.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``canvas-connector`` console script.

    Unhandled :class:`~canvas_connector.exceptions.CanvasConnectorError`
    instances cause a clean exit with the error's ``exit_code``. All other
    exceptions produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from canvas_connector.exceptions import CanvasConnectorError
        from canvas_connector.output import error

        if isinstance(exc, CanvasConnectorError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
