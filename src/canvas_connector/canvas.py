"""Per-resource Canvas fetch entry points.

:class:`Canvas` binds one :class:`~canvas_connector.models.Credentials` value
and exposes one method per resource. Every method opens a
:class:`~canvas_connector.client.executor.RequestExecutor`, decodes the
response into the resource models of :mod:`canvas_connector.models`, and
returns an :data:`~canvas_connector.client.outcome.Outcome`. Nothing here
raises for HTTP, transport or decoding failures.

Collection methods return every item across all pages, in Canvas order.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar

import httpx
from pydantic import TypeAdapter

from canvas_connector.client.executor import RequestExecutor
from canvas_connector.client.outcome import Outcome, classify
from canvas_connector.exceptions import NotFoundError, ResponseDecodeError
from canvas_connector.models import (
    Announcement,
    Assignment,
    Course,
    Credentials,
    RequestConfig,
    Submission,
    SubmissionComment,
    User,
)

T = TypeVar("T")

_COURSES = TypeAdapter(list[Course])
_USERS = TypeAdapter(list[User])
_ASSIGNMENTS = TypeAdapter(list[Assignment])
_SUBMISSIONS = TypeAdapter(list[Submission])


class Canvas:
    """Fetch Canvas resources with one set of credentials.

    Args:
        credentials: URL and token used for every call.
        request_config: Timeout, TLS and page-size settings.
        transport: Optional httpx transport override (tests pass
            :class:`httpx.MockTransport`).

    Example::

        canvas = Canvas(credentials)
        outcome = canvas.fetch_course(42)
        if isinstance(outcome, Ok):
            print(outcome.value.name)
        else:
            print(outcome.message)
    """

    def __init__(
        self,
        credentials: Credentials,
        request_config: Optional[RequestConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._credentials = credentials
        self._request_config = request_config or RequestConfig()
        self._transport = transport

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    # ------------------------------------------------------------------ #
    # Users
    # ------------------------------------------------------------------ #

    def fetch_current_user(self) -> Outcome[User]:
        """Fetch the user that owns the token."""
        return self._run(
            "Failed to fetch current user",
            lambda ex: User.model_validate(_expect_object(ex.get("/users/self"))),
        )

    # ------------------------------------------------------------------ #
    # Courses
    # ------------------------------------------------------------------ #

    def fetch_courses(self, enrollment_role: Optional[str] = None) -> Outcome[list[Course]]:
        """Fetch every course visible to the token.

        Args:
            enrollment_role: Restrict to courses where the user holds this
                role, e.g. ``"TeacherEnrollment"``.
        """
        params: dict[str, Any] = {}
        if enrollment_role:
            params["enrollment_role"] = enrollment_role
        return self._run(
            "Failed to fetch courses",
            lambda ex: _COURSES.validate_python(ex.get_all("/courses", params=params)),
        )

    def fetch_course(self, course_id: int) -> Outcome[Course]:
        """Fetch a single course by id."""
        return self._run(
            f"Failed to fetch course {course_id}",
            lambda ex: Course.model_validate(_expect_object(ex.get(f"/courses/{course_id}"))),
        )

    def fetch_students(self, course_id: int) -> Outcome[list[User]]:
        """Fetch the students enrolled in a course, with their e-mail addresses."""
        params = {"enrollment_type[]": ["student"], "include[]": ["email"]}
        return self._run(
            f"Failed to fetch students of course {course_id}",
            lambda ex: _USERS.validate_python(
                ex.get_all(f"/courses/{course_id}/users", params=params)
            ),
        )

    def fetch_assignments(self, course_id: int) -> Outcome[list[Assignment]]:
        """Fetch every assignment of a course."""
        return self._run(
            f"Failed to fetch assignments of course {course_id}",
            lambda ex: _ASSIGNMENTS.validate_python(
                ex.get_all(f"/courses/{course_id}/assignments")
            ),
        )

    def create_assignment(
        self,
        course_id: int,
        name: str,
        points_possible: float = 10.0,
        published: bool = True,
    ) -> Outcome[Assignment]:
        """Create a points-graded assignment that accepts file uploads."""
        body = {
            "assignment": {
                "name": name,
                "points_possible": points_possible,
                "grading_type": "points",
                "submission_types": ["online_upload"],
                "published": published,
            }
        }
        return self._run(
            f"Failed to create assignment in course {course_id}",
            lambda ex: Assignment.model_validate(
                _expect_object(ex.post(f"/courses/{course_id}/assignments", json_body=body))
            ),
        )

    def create_announcement(self, course_id: int, title: str, message: str) -> Outcome[Announcement]:
        """Post an announcement to a course.

        *message* is sent as-is; Canvas renders it as HTML.
        """
        body = {"title": title, "message": message, "is_announcement": True}
        return self._run(
            f"Failed to create announcement in course {course_id}",
            lambda ex: Announcement.model_validate(
                _expect_object(ex.post(f"/courses/{course_id}/discussion_topics", json_body=body))
            ),
        )

    # ------------------------------------------------------------------ #
    # Submissions
    # ------------------------------------------------------------------ #

    def fetch_submissions(self, course_id: int, assignment_id: int) -> Outcome[list[Submission]]:
        """Fetch every submission for an assignment."""
        path = f"/courses/{course_id}/assignments/{assignment_id}/submissions"
        return self._run(
            f"Failed to fetch submissions of assignment {assignment_id}",
            lambda ex: _SUBMISSIONS.validate_python(ex.get_all(path)),
        )

    def fetch_submission_by_id(
        self, course_id: int, assignment_id: int, submission_id: int
    ) -> Outcome[Submission]:
        """Find one submission of an assignment by its submission id.

        Canvas addresses submissions by user id, so this walks the
        assignment's submission list. A missing id is an
        :class:`~canvas_connector.client.outcome.ErrConnection`.
        """
        path = f"/courses/{course_id}/assignments/{assignment_id}/submissions"

        def _find(ex: RequestExecutor) -> Submission:
            for submission in _SUBMISSIONS.validate_python(ex.get_all(path)):
                if submission.id == submission_id:
                    return submission
            raise NotFoundError(f"Submission with id {submission_id} not found")

        return self._run(f"Failed to fetch submission {submission_id}", _find)

    def update_submission_score(
        self,
        course_id: int,
        assignment_id: int,
        user_id: int,
        score: Optional[float],
    ) -> Outcome[Submission]:
        """Set, or clear with ``None``, the grade of a student's submission."""
        path = f"/courses/{course_id}/assignments/{assignment_id}/submissions/{user_id}"
        posted = "" if score is None else score
        body = {"submission": {"posted_grade": posted}}
        return self._run(
            f"Failed to grade submission of user {user_id}",
            lambda ex: Submission.model_validate(_expect_object(ex.put(path, json_body=body))),
        )

    def add_submission_comment(
        self,
        course_id: int,
        assignment_id: int,
        user_id: int,
        text: str,
    ) -> Outcome[Submission]:
        """Add a text comment to a student's submission."""
        path = f"/courses/{course_id}/assignments/{assignment_id}/submissions/{user_id}"
        body = {"comment": {"text_comment": text}}
        return self._run(
            f"Failed to comment on submission of user {user_id}",
            lambda ex: Submission.model_validate(_expect_object(ex.put(path, json_body=body))),
        )

    def delete_submission_comment(
        self,
        course_id: int,
        assignment_id: int,
        user_id: int,
        comment_id: int,
    ) -> Outcome[SubmissionComment]:
        """Delete one comment from a student's submission and return it."""
        path = (
            f"/courses/{course_id}/assignments/{assignment_id}"
            f"/submissions/{user_id}/comments/{comment_id}"
        )
        return self._run(
            f"Failed to delete comment {comment_id}",
            lambda ex: SubmissionComment.model_validate(_expect_object(ex.delete(path))),
        )

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _run(self, context: str, call: Callable[[RequestExecutor], T]) -> Outcome[T]:
        def _execute() -> T:
            with RequestExecutor(
                self._credentials, self._request_config, self._transport
            ) as executor:
                return call(executor)

        return classify(_execute, context)


def _expect_object(body: Any) -> dict[str, Any]:
    if not isinstance(body, dict):
        raise ResponseDecodeError(f"Expected a JSON object, got {type(body).__name__}")
    return body
