"""Config commands -- view and modify the connector configuration.

Provides the ``canvas-connector config`` sub-command group for reading and
updating :class:`~canvas_connector.models.ConnectorConfig`. The settings
control which credential sources are enabled, the secret store keys and the
request defaults.
"""

from __future__ import annotations

import typer

from canvas_connector.config import (
    get_config_path,
    get_credentials_file_path,
    load_config,
    save_config,
    set_config_value,
)
from canvas_connector.exceptions import ConfigError
from canvas_connector.exit_codes import EXIT_INVALID_USAGE
from canvas_connector.output import error, get_output, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the saved configuration.

    Environment variables and CLI flags are not applied here; this is what
    ``config.json`` holds (or the defaults when it does not exist).

    Example::

        canvas-connector config show --json
    """
    config = load_config()
    info(f"Config file: {get_config_path()}")
    get_output().print_record(config)


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key (dot notation, e.g. 'request.per_page')."),
    value: str = typer.Argument(help="Value to set ('none' clears optional keys)."),
) -> None:
    """Set a configuration value.

    Example::

        canvas-connector config set file_fallback true
        canvas-connector config set request.timeout 30
    """
    try:
        config = set_config_value(load_config(), key, value)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_config(config)
    success(f"Set {key} = {value}")


@config_app.command("path")
def config_path() -> None:
    """Print the config file and fallback credentials file locations."""
    output = get_output()
    output.print_data(str(get_config_path()))
    output.print_data(str(get_credentials_file_path(load_config())))
