"""Tests for the per-resource Canvas entry points."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from canvas_connector.canvas import Canvas
from canvas_connector.client.outcome import ErrConnection, ErrCredentials, Ok
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
from canvas_connector.output import OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


COURSE = {"id": 10, "name": "Algebra", "course_code": "MATH101", "workflow_state": "available"}
STUDENT = {"id": 7, "name": "Ada Lovelace", "sortable_name": "Lovelace, Ada", "email": "ada@example.edu"}
ASSIGNMENT = {"id": 3, "name": "Homework 1", "course_id": 10, "points_possible": 10.0}
SUBMISSION = {"id": 99, "assignment_id": 3, "user_id": 7, "score": 8.5, "grade": "8.5"}
COMMENT = {"id": 55, "comment": "See me", "author_id": 1, "author_name": "Teacher"}
ANNOUNCEMENT = {"id": 70, "title": "Exam moved", "message": "<p>Now on Friday</p>"}


class _Recorder:
    """MockTransport handler that records requests and replies from a callable."""

    def __init__(self, reply: Callable[[httpx.Request], httpx.Response]) -> None:
        self.reply = reply
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.reply(request)


def _canvas(credentials: Credentials, reply: Callable[[httpx.Request], httpx.Response]) -> tuple[Canvas, _Recorder]:
    recorder = _Recorder(reply)
    canvas = Canvas(credentials, RequestConfig(per_page=2), transport=httpx.MockTransport(recorder))
    return canvas, recorder


def _ok(data: Any, headers: dict[str, str] | None = None) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(200, json=data, headers=headers)


def _status(code: int) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(code, json={"errors": [{"message": "nope"}]})


def _refused(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


@pytest.fixture(autouse=True)
def _clean_output():
    set_output(OutputManager(no_color=True, quiet=True))
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Success paths
# ---------------------------------------------------------------------------


class TestFetchSuccess:
    def test_current_user(self, credentials: Credentials) -> None:
        canvas, rec = _canvas(credentials, _ok({"id": 1, "name": "Teacher", "login_id": "t1"}))
        outcome = canvas.fetch_current_user()
        assert outcome == Ok(User(id=1, name="Teacher", login_id="t1"))
        assert rec.requests[0].url.path == "/api/v1/users/self"

    def test_courses(self, credentials: Credentials) -> None:
        canvas, rec = _canvas(credentials, _ok([COURSE, {**COURSE, "id": 11, "name": "Biology"}]))
        outcome = canvas.fetch_courses()
        assert isinstance(outcome, Ok)
        assert [c.name for c in outcome.value] == ["Algebra", "Biology"]
        assert all(isinstance(c, Course) for c in outcome.value)
        assert "enrollment_role" not in rec.requests[0].url.params

    def test_courses_by_role(self, credentials: Credentials) -> None:
        canvas, rec = _canvas(credentials, _ok([]))
        assert canvas.fetch_courses(enrollment_role="TeacherEnrollment") == Ok([])
        assert rec.requests[0].url.params["enrollment_role"] == "TeacherEnrollment"

    def test_courses_follow_pagination(self, credentials: Credentials) -> None:
        def reply(request: httpx.Request) -> httpx.Response:
            if request.url.params.get("page") == "2":
                return httpx.Response(200, json=[{**COURSE, "id": 12}])
            link = '<https://canvas.test/api/v1/courses?page=2&per_page=2>; rel="next"'
            return httpx.Response(200, json=[COURSE, {**COURSE, "id": 11}], headers={"Link": link})

        canvas, rec = _canvas(credentials, reply)
        outcome = canvas.fetch_courses()
        assert isinstance(outcome, Ok)
        assert [c.id for c in outcome.value] == [10, 11, 12]
        assert len(rec.requests) == 2

    def test_course(self, credentials: Credentials) -> None:
        canvas, rec = _canvas(credentials, _ok(COURSE))
        outcome = canvas.fetch_course(10)
        assert isinstance(outcome, Ok)
        assert outcome.value.course_code == "MATH101"
        assert rec.requests[0].url.path == "/api/v1/courses/10"

    def test_students(self, credentials: Credentials) -> None:
        canvas, rec = _canvas(credentials, _ok([STUDENT]))
        outcome = canvas.fetch_students(10)
        assert isinstance(outcome, Ok)
        assert outcome.value[0].email == "ada@example.edu"
        params = rec.requests[0].url.params
        assert rec.requests[0].url.path == "/api/v1/courses/10/users"
        assert params.get_list("enrollment_type[]") == ["student"]
        assert params.get_list("include[]") == ["email"]
        assert params["per_page"] == "2"

    def test_assignments(self, credentials: Credentials) -> None:
        canvas, rec = _canvas(credentials, _ok([ASSIGNMENT]))
        outcome = canvas.fetch_assignments(10)
        assert outcome == Ok([Assignment.model_validate(ASSIGNMENT)])
        assert rec.requests[0].url.path == "/api/v1/courses/10/assignments"

    def test_submissions(self, credentials: Credentials) -> None:
        canvas, rec = _canvas(credentials, _ok([SUBMISSION]))
        outcome = canvas.fetch_submissions(10, 3)
        assert outcome == Ok([Submission.model_validate(SUBMISSION)])
        assert rec.requests[0].url.path == "/api/v1/courses/10/assignments/3/submissions"


class TestSubmissionUpdates:
    def test_grade(self, credentials: Credentials) -> None:
        canvas, rec = _canvas(credentials, _ok(SUBMISSION))
        outcome = canvas.update_submission_score(10, 3, 7, 8.5)
        assert isinstance(outcome, Ok)
        assert outcome.value.score == 8.5
        request = rec.requests[0]
        assert request.method == "PUT"
        assert request.url.path == "/api/v1/courses/10/assignments/3/submissions/7"
        assert json.loads(request.content) == {"submission": {"posted_grade": 8.5}}

    def test_clear_grade(self, credentials: Credentials) -> None:
        canvas, rec = _canvas(credentials, _ok({**SUBMISSION, "score": None, "grade": None}))
        outcome = canvas.update_submission_score(10, 3, 7, None)
        assert isinstance(outcome, Ok)
        assert outcome.value.score is None
        assert json.loads(rec.requests[0].content) == {"submission": {"posted_grade": ""}}

    def test_comment(self, credentials: Credentials) -> None:
        canvas, rec = _canvas(credentials, _ok(SUBMISSION))
        outcome = canvas.add_submission_comment(10, 3, 7, "Nice work")
        assert isinstance(outcome, Ok)
        assert rec.requests[0].method == "PUT"
        assert json.loads(rec.requests[0].content) == {"comment": {"text_comment": "Nice work"}}

    def test_delete_comment(self, credentials: Credentials) -> None:
        canvas, rec = _canvas(credentials, _ok(COMMENT))
        outcome = canvas.delete_submission_comment(10, 3, 7, 55)
        assert outcome == Ok(SubmissionComment.model_validate(COMMENT))
        request = rec.requests[0]
        assert request.method == "DELETE"
        assert request.url.path == "/api/v1/courses/10/assignments/3/submissions/7/comments/55"


class TestSubmissionLookup:
    def test_found_on_later_page(self, credentials: Credentials) -> None:
        def reply(request: httpx.Request) -> httpx.Response:
            if request.url.params.get("page") == "2":
                return httpx.Response(200, json=[{**SUBMISSION, "id": 101, "user_id": 8}])
            link = '<https://canvas.test/api/v1/courses/10/assignments/3/submissions?page=2>; rel="next"'
            return httpx.Response(200, json=[SUBMISSION], headers={"Link": link})

        canvas, rec = _canvas(credentials, reply)
        outcome = canvas.fetch_submission_by_id(10, 3, 101)
        assert isinstance(outcome, Ok)
        assert outcome.value.user_id == 8
        assert len(rec.requests) == 2

    def test_unknown_id(self, credentials: Credentials) -> None:
        canvas, _ = _canvas(credentials, _ok([SUBMISSION]))
        outcome = canvas.fetch_submission_by_id(10, 3, 12345)
        assert isinstance(outcome, ErrConnection)
        assert outcome.message == "Failed to fetch submission 12345: Submission with id 12345 not found"

    def test_matches_submission_id_not_user_id(self, credentials: Credentials) -> None:
        canvas, _ = _canvas(credentials, _ok([SUBMISSION]))
        assert isinstance(canvas.fetch_submission_by_id(10, 3, SUBMISSION["user_id"]), ErrConnection)


class TestCreation:
    def test_create_assignment(self, credentials: Credentials) -> None:
        canvas, rec = _canvas(credentials, _ok({**ASSIGNMENT, "id": 4, "name": "Homework 2"}))
        outcome = canvas.create_assignment(10, "Homework 2")
        assert isinstance(outcome, Ok)
        assert outcome.value.id == 4
        request = rec.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/api/v1/courses/10/assignments"
        assert json.loads(request.content) == {
            "assignment": {
                "name": "Homework 2",
                "points_possible": 10.0,
                "grading_type": "points",
                "submission_types": ["online_upload"],
                "published": True,
            }
        }

    def test_create_unpublished_assignment(self, credentials: Credentials) -> None:
        canvas, rec = _canvas(credentials, _ok(ASSIGNMENT))
        canvas.create_assignment(10, "Draft", points_possible=25.0, published=False)
        body = json.loads(rec.requests[0].content)["assignment"]
        assert body["points_possible"] == 25.0
        assert body["published"] is False

    def test_create_announcement(self, credentials: Credentials) -> None:
        canvas, rec = _canvas(credentials, _ok(ANNOUNCEMENT))
        outcome = canvas.create_announcement(10, "Exam moved", "<p>Now on Friday</p>")
        assert outcome == Ok(Announcement.model_validate(ANNOUNCEMENT))
        request = rec.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/api/v1/courses/10/discussion_topics"
        assert json.loads(request.content) == {
            "title": "Exam moved",
            "message": "<p>Now on Friday</p>",
            "is_announcement": True,
        }


# ---------------------------------------------------------------------------
# Error outcomes
# ---------------------------------------------------------------------------


FETCHES: list[tuple[str, Callable[[Canvas], Any]]] = [
    ("current_user", lambda c: c.fetch_current_user()),
    ("courses", lambda c: c.fetch_courses()),
    ("course", lambda c: c.fetch_course(10)),
    ("students", lambda c: c.fetch_students(10)),
    ("assignments", lambda c: c.fetch_assignments(10)),
    ("submissions", lambda c: c.fetch_submissions(10, 3)),
    ("grade", lambda c: c.update_submission_score(10, 3, 7, 1.0)),
    ("comment", lambda c: c.add_submission_comment(10, 3, 7, "hi")),
    ("submission_by_id", lambda c: c.fetch_submission_by_id(10, 3, 99)),
    ("delete_comment", lambda c: c.delete_submission_comment(10, 3, 7, 55)),
    ("create_assignment", lambda c: c.create_assignment(10, "Homework 2")),
    ("create_announcement", lambda c: c.create_announcement(10, "Title", "Body")),
]


@pytest.mark.parametrize("name,fetch", FETCHES, ids=[f[0] for f in FETCHES])
class TestErrorOutcomes:
    @pytest.mark.parametrize("status", [401, 403])
    def test_rejected_token(self, credentials: Credentials, name: str, fetch, status: int) -> None:
        canvas, _ = _canvas(credentials, _status(status))
        outcome = fetch(canvas)
        assert isinstance(outcome, ErrCredentials)
        assert f"HTTP {status}" in outcome.message

    @pytest.mark.parametrize("status", [404, 500, 503])
    def test_other_status(self, credentials: Credentials, name: str, fetch, status: int) -> None:
        canvas, _ = _canvas(credentials, _status(status))
        outcome = fetch(canvas)
        assert isinstance(outcome, ErrConnection)
        assert f"HTTP {status}" in outcome.message

    def test_transport_failure(self, credentials: Credentials, name: str, fetch) -> None:
        canvas, _ = _canvas(credentials, _refused)
        outcome = fetch(canvas)
        assert isinstance(outcome, ErrConnection)
        assert "connection refused" in outcome.message

    def test_malformed_json(self, credentials: Credentials, name: str, fetch) -> None:
        canvas, _ = _canvas(credentials, lambda r: httpx.Response(200, content=b"[{oops"))
        outcome = fetch(canvas)
        assert isinstance(outcome, ErrConnection)
        assert "Malformed JSON" in outcome.message


class TestShapeErrors:
    def test_object_where_list_expected(self, credentials: Credentials) -> None:
        canvas, _ = _canvas(credentials, _ok({"id": 1}))
        outcome = canvas.fetch_courses()
        assert isinstance(outcome, ErrConnection)
        assert outcome.message.startswith("Failed to fetch courses:")

    def test_list_where_object_expected(self, credentials: Credentials) -> None:
        canvas, _ = _canvas(credentials, _ok([COURSE]))
        outcome = canvas.fetch_course(10)
        assert isinstance(outcome, ErrConnection)
        assert "Expected a JSON object" in outcome.message

    def test_missing_required_field(self, credentials: Credentials) -> None:
        canvas, _ = _canvas(credentials, _ok([{"id": 1, "name": "No code"}]))
        outcome = canvas.fetch_courses()
        assert isinstance(outcome, ErrConnection)
        assert "unexpected response shape" in outcome.message
        assert "course_code" in outcome.message

    def test_empty_body_for_object(self, credentials: Credentials) -> None:
        canvas, _ = _canvas(credentials, lambda r: httpx.Response(200))
        outcome = canvas.fetch_course(10)
        assert isinstance(outcome, ErrConnection)

    def test_pagination_loop(self, credentials: Credentials) -> None:
        link = '<https://canvas.test/api/v1/courses?page=2&per_page=2>; rel="next"'
        canvas, rec = _canvas(credentials, _ok([COURSE], headers={"Link": link}))
        outcome = canvas.fetch_courses()
        assert isinstance(outcome, ErrConnection)
        assert "Pagination loop" in outcome.message
        assert len(rec.requests) == 2

    def test_not_modified_is_not_success(self, credentials: Credentials) -> None:
        canvas, _ = _canvas(credentials, lambda r: httpx.Response(304))
        outcome = canvas.fetch_course(10)
        assert outcome == ErrConnection("Failed to fetch course 10: HTTP 304")
