"""Outcome values returned by every Canvas data-fetching operation.

An outcome is exactly one of three frozen variants:

- :class:`Ok` -- the call succeeded; ``value`` holds the decoded result.
- :class:`ErrCredentials` -- Canvas answered 401 or 403. Callers can react
  by re-authenticating.
- :class:`ErrConnection` -- anything else went wrong: transport failure,
  another HTTP error status, or a body that could not be decoded into the
  expected type.

:func:`classify` runs a request callable and maps whatever it returns or
raises onto one of these variants. The mapping is total: every exception
from the request layer lands in one of the two error variants.

Example::

    outcome = canvas.fetch_courses()
    if isinstance(outcome, Ok):
        ...
    elif isinstance(outcome, ErrCredentials):
        ...  # ask for a new token
    else:
        ...  # report outcome.message
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

from pydantic import ValidationError

from canvas_connector.exceptions import AuthError, CanvasConnectorError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying the decoded value."""

    value: T


@dataclass(frozen=True)
class ErrConnection:
    """Transport failure, non-authorisation HTTP error, or decode failure."""

    message: str


@dataclass(frozen=True)
class ErrCredentials:
    """Canvas rejected the credentials (HTTP 401 / 403)."""

    message: str


Outcome = Union[Ok[T], ErrConnection, ErrCredentials]


def classify(call: Callable[[], T], context: str = "Canvas request") -> Outcome[T]:
    """Run *call* and map its result onto an :data:`Outcome`.

    Args:
        call: Performs the request and decodes the result into ``T``.
        context: Prefix for error messages, e.g. ``"Failed to fetch courses"``.

    Returns:
        ``Ok(value)`` when *call* returns; ``ErrCredentials`` for
        :class:`~canvas_connector.exceptions.AuthError`; ``ErrConnection``
        for every other request-layer error and for Pydantic validation
        failures of the decoded body.
    """
    try:
        value = call()
    except AuthError as exc:
        return ErrCredentials(f"{context}: {exc}")
    except ValidationError as exc:
        return ErrConnection(f"{context}: unexpected response shape: {_first_error(exc)}")
    except CanvasConnectorError as exc:
        return ErrConnection(f"{context}: {exc}")
    return Ok(value)


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    suffix = f" (+{len(errors) - 1} more)" if len(errors) > 1 else ""
    return f"{loc}: {first.get('msg', '')}{suffix}" if loc else f"{first.get('msg', '')}{suffix}"
