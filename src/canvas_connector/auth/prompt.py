"""Input providers for interactive credential entry.

The credential chain never touches the console directly. It asks an
:class:`InputProvider` for values, which lets tests substitute a scripted
provider. :class:`ConsoleInputProvider` is the real implementation and uses
:func:`typer.prompt`, masking the token as it is typed.
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod

import click
import typer

from canvas_connector.exceptions import AuthError


class InputProvider(ABC):
    """Source of interactively entered values."""

    @abstractmethod
    def prompt(self, message: str, secret: bool = False) -> str:
        """Ask for one value.

        Args:
            message: Prompt text shown to the user.
            secret: When ``True`` the input must not be echoed.

        Returns:
            The raw entered text. Validation is the caller's job.

        Raises:
            AuthError: If no input can be obtained (not a TTY, user aborted).
        """
        ...

    def notify(self, message: str) -> None:
        """Tell the user something about their input (e.g. why it was rejected)."""


class ConsoleInputProvider(InputProvider):
    """Prompt on the controlling terminal.

    Args:
        require_tty: Refuse to prompt when stdin is not a terminal, so that a
            piped or scheduled run fails fast instead of blocking.
    """

    def __init__(self, require_tty: bool = True) -> None:
        self._require_tty = require_tty

    def prompt(self, message: str, secret: bool = False) -> str:
        if self._require_tty and not sys.stdin.isatty():
            raise AuthError(
                "Canvas credentials are required but stdin is not a TTY; "
                "run 'canvas-connector auth login' in a terminal first"
            )
        try:
            return typer.prompt(message, default="", hide_input=secret, show_default=False)
        except click.exceptions.Abort as exc:
            raise AuthError("Credential entry cancelled") from exc

    def notify(self, message: str) -> None:
        typer.echo(message, err=True)
