"""Canonical Pydantic models shared across all canvas_connector modules.

This is the single source of truth for data shapes in the project. The models
fall into three groups:

**Credential models** -- the authentication context and its serialised forms:
    :class:`Credentials` and :class:`FileCredentials`.

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`RequestConfig`, :class:`OutputConfig` and :class:`ConnectorConfig`.

**Resource models** -- decoded from Canvas API responses:
    :class:`User`, :class:`Course`, :class:`Assignment` and :class:`Submission`.
    They ignore fields they do not declare, so new Canvas attributes never
    break decoding; a missing required field is a decode failure.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


# --- Credentials ---


class Credentials(BaseModel):
    """Base URL and bearer token identifying one authenticated Canvas context.

    Instances are immutable. Both fields are stripped of surrounding
    whitespace; a blank value fails validation, so a :class:`Credentials`
    object always carries something that can be sent to Canvas. A trailing
    slash on ``base_url`` is dropped so that path joining is predictable.

    Example::

        creds = Credentials(
            base_url="https://canvas.example.edu/api/v1",
            token="1234~abcd",
        )
    """

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(description="API root, e.g. https://host/api/v1")
    token: str = Field(description="Canvas access token sent as a bearer token")

    @field_validator("base_url", "token")
    @classmethod
    def _not_blank(cls, value: str, info: ValidationInfo) -> str:
        return cls.normalize(info.field_name, value)

    @staticmethod
    def normalize(field: str, value: str) -> str:
        """Return *value* cleaned the way *field* is stored.

        Raises:
            ValueError: If nothing is left after cleaning.
        """
        value = value.strip()
        if field == "base_url":
            value = value.rstrip("/")
        if not value:
            raise ValueError("must not be empty")
        return value

    def masked_token(self) -> str:
        """Return the token with everything but its last four characters hidden."""
        if len(self.token) <= 4:
            return "*" * len(self.token)
        return "*" * (len(self.token) - 4) + self.token[-4:]


class FileCredentials(BaseModel):
    """Credentials as stored in the optional local fallback file.

    The file is UTF-8 JSON with exactly the two fields below::

        {"url_canvas": "https://host/api/v1", "token_canvas": "1234~abcd"}
    """

    url_canvas: str
    token_canvas: str

    def to_credentials(self) -> Credentials:
        """Convert to :class:`Credentials`, validating both fields."""
        return Credentials(base_url=self.url_canvas, token=self.token_canvas)


# --- Configuration ---


class RequestConfig(BaseModel):
    """HTTP request settings.

    ``timeout`` is ``None`` by default, which keeps the transport layer's own
    default instead of imposing one.
    """

    timeout: Optional[float] = Field(
        default=None, description="Request timeout in seconds (None = transport default)"
    )
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")
    per_page: int = Field(
        default=100, ge=1, description="Page size requested from collection endpoints"
    )


class OutputConfig(BaseModel):
    """Default output settings for the CLI."""

    format: str = Field(default="auto", description="Output format: auto, json, plain, rich")


class ConnectorConfig(BaseModel):
    """Top-level configuration persisted as ``config.json``.

    The two source flags are off by default: out of the box, credentials come
    from the OS secret store or, failing that, from an interactive prompt.
    """

    file_fallback: bool = Field(
        default=False, description="Read credentials from the local fallback file"
    )
    env_credentials: bool = Field(
        default=False, description="Read credentials from CANVAS_URL / CANVAS_TOKEN"
    )
    keyring_service: str = Field(
        default="canvas-connector", description="Service name in the OS secret store"
    )
    keyring_account: str = Field(
        default="credentials", description="Account name in the OS secret store"
    )
    credentials_file: Optional[str] = Field(
        default=None, description="Override for the fallback credentials file path"
    )
    request: RequestConfig = Field(default_factory=RequestConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Canvas resources ---


class _Resource(BaseModel):
    model_config = ConfigDict(extra="ignore")


class User(_Resource):
    """A Canvas user, as returned by ``/users/self`` or a course roster."""

    id: int
    name: str
    sortable_name: Optional[str] = None
    login_id: Optional[str] = None
    email: Optional[str] = None


class Course(_Resource):
    """A Canvas course."""

    id: int
    name: str
    course_code: str
    workflow_state: Optional[str] = None
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None


class Assignment(_Resource):
    """An assignment within a course."""

    id: int
    name: str
    course_id: Optional[int] = None
    description: Optional[str] = None
    due_at: Optional[datetime] = None
    points_possible: Optional[float] = None


class Submission(_Resource):
    """A student's submission for an assignment."""

    id: int
    assignment_id: int
    user_id: int
    score: Optional[float] = None
    grade: Optional[str] = None
    submitted_at: Optional[datetime] = None
    workflow_state: Optional[str] = None


class SubmissionComment(_Resource):
    """A comment attached to a submission."""

    id: int
    comment: str
    author_id: Optional[int] = None
    author_name: Optional[str] = None
    created_at: Optional[datetime] = None


class Announcement(_Resource):
    """A course announcement (a discussion topic flagged as an announcement)."""

    id: int
    title: str
    message: Optional[str] = None
    posted_at: Optional[datetime] = None
    html_url: Optional[str] = None
