"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for canvas_connector:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.canvas-connector/`` on macOS and Windows. See :func:`get_config_dir`
  and :func:`get_data_dir`.
* **Connector config** -- A single :class:`~canvas_connector.models.ConnectorConfig`
  JSON file storing the credential-source flags, secret store keys and
  request settings.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables and the config file into the effective configuration.
* **Fallback credentials file** -- :func:`get_credentials_file_path` locates
  the optional read-only ``canvas_credentials.json``.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from canvas_connector.exceptions import ConfigError
from canvas_connector.models import ConnectorConfig

_APP_NAME = "canvas-connector"
_CONFIG_FILENAME = "config.json"
_CREDENTIALS_FILENAME = "canvas_credentials.json"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/canvas-connector/`` (default
    ``~/.config/canvas-connector/``). On macOS/Windows: ``~/.canvas-connector/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_CONFIG_HOME", (".config",))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/canvas-connector/`` (default
    ``~/.local/share/canvas-connector/``). On macOS/Windows:
    ``~/.canvas-connector/logs/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_DATA_HOME", (".local", "share"))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_credentials_file_path(config: Optional[ConnectorConfig] = None) -> Path:
    """Return the path of the optional fallback credentials file.

    The file is never created or written by this package.

    Args:
        config: When it sets ``credentials_file``, that path wins over the
            default ``<config_dir>/canvas_credentials.json``.
    """
    if config is not None and config.credentials_file:
        return Path(config.credentials_file).expanduser()
    return get_config_dir() / _CREDENTIALS_FILENAME


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    On success the temp file is renamed over *path*; on any failure the temp
    file is cleaned up.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Connector config ---


def get_config_path() -> Path:
    """Path to the connector config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_config() -> ConnectorConfig:
    """Load the connector configuration from the config directory.

    Returns:
        The deserialised :class:`~canvas_connector.models.ConnectorConfig`.
        If the file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = get_config_path()
    if not path.is_file():
        return ConnectorConfig()
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
        return ConnectorConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_config(config: ConnectorConfig) -> None:
    """Persist the connector configuration atomically to disk.

    Args:
        config: The configuration to save.
    """
    data = config.model_dump(mode="json")
    _atomic_write(get_config_path(), json.dumps(data, indent=2) + "\n")


def set_config_value(config: ConnectorConfig, key: str, value: str) -> ConnectorConfig:
    """Return a copy of *config* with the dotted *key* set to *value*.

    Nested sections are addressed with a dot (``request.per_page``). The
    string *value* is coerced by Pydantic validation of the whole model.

    Raises:
        ConfigError: If the key is unknown or the value does not validate.
    """
    data: dict[str, Any] = config.model_dump(mode="json")
    parts = key.split(".")
    target = data
    for part in parts[:-1]:
        if not isinstance(target.get(part), dict):
            raise ConfigError(f"Unknown config key: {key}")
        target = target[part]
    if parts[-1] not in target or isinstance(target[parts[-1]], dict):
        raise ConfigError(f"Unknown config key: {key}")
    target[parts[-1]] = None if value.lower() in ("none", "null") else value
    try:
        return ConnectorConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid value for {key}: {value!r}") from exc


# --- Precedence resolution ---


def _env_flag(name: str) -> Optional[bool]:
    """Read a boolean flag from the environment, ``None`` when unset."""
    raw = os.environ.get(name)
    if raw is None:
        return None
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"Environment variable {name} must be a boolean, got {raw!r}")


def resolve_config(
    cli_file_fallback: Optional[bool] = None,
    cli_format: Optional[str] = None,
) -> ConnectorConfig:
    """Resolve config with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_file_fallback``, ``cli_format``)
        2. Environment variables (``CANVAS_CONNECTOR_FILE_FALLBACK``,
           ``CANVAS_CONNECTOR_ENV_CREDENTIALS``)
        3. User config (``~/.config/canvas-connector/config.json``)
        4. Defaults

    Returns:
        The effective :class:`~canvas_connector.models.ConnectorConfig`.
    """
    config = load_config()

    env_file_fallback = _env_flag("CANVAS_CONNECTOR_FILE_FALLBACK")
    if env_file_fallback is not None:
        config.file_fallback = env_file_fallback
    env_credentials = _env_flag("CANVAS_CONNECTOR_ENV_CREDENTIALS")
    if env_credentials is not None:
        config.env_credentials = env_credentials

    if cli_file_fallback is not None:
        config.file_fallback = cli_file_fallback
    if cli_format is not None:
        config.output.format = cli_format

    return config
