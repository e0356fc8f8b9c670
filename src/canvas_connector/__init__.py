"""canvas_connector -- credential resolution and request execution for the Canvas LMS API.

This package authenticates against a Canvas REST API and queries it. Credentials
are resolved through a layered chain (OS secret store, optional environment and
file fallbacks, then an interactive prompt whose result is persisted), and every
resource fetch returns a closed :mod:`~canvas_connector.client.outcome` value
instead of raising.

Typical usage::

    from canvas_connector import Canvas, KeyringSecretStore, build_default_chain
    from canvas_connector.client.outcome import Ok

    chain = build_default_chain(KeyringSecretStore())
    canvas = Canvas(chain.resolve())
    outcome = canvas.fetch_courses()
    if isinstance(outcome, Ok):
        for course in outcome.value:
            print(course.name)

Modules:
    app: Typer application and CLI entry point.
    canvas: Per-resource fetch entry points.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Internal exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.3.0"

from canvas_connector.auth import (  # noqa: E402
    CredentialChain,
    KeyringSecretStore,
    SecretStore,
    build_default_chain,
    test_credentials,
)
from canvas_connector.canvas import Canvas  # noqa: E402
from canvas_connector.client.outcome import (  # noqa: E402
    ErrConnection,
    ErrCredentials,
    Ok,
    Outcome,
)
from canvas_connector.models import Credentials  # noqa: E402

__all__ = [
    "Canvas",
    "CredentialChain",
    "Credentials",
    "ErrConnection",
    "ErrCredentials",
    "KeyringSecretStore",
    "Ok",
    "Outcome",
    "SecretStore",
    "build_default_chain",
    "test_credentials",
]
