"""Submission commands -- list, show, grade and comment on assignment submissions."""

from __future__ import annotations

from typing import Optional

import typer

from canvas_connector.commands._common import open_canvas, unwrap
from canvas_connector.output import get_output, info, success


submissions_app = typer.Typer(no_args_is_help=True)


@submissions_app.command("list")
def submissions_list(
    ctx: typer.Context,
    course_id: int = typer.Argument(help="Canvas course id."),
    assignment_id: int = typer.Argument(help="Assignment id."),
) -> None:
    """List every submission for an assignment."""
    submissions = unwrap(open_canvas(ctx).fetch_submissions(course_id, assignment_id))
    info(f"{len(submissions)} submission(s)")
    get_output().print_records(
        submissions,
        ["id", "user_id", "score", "submitted_at", "workflow_state"],
        title="Submissions",
    )


@submissions_app.command("show")
def submissions_show(
    ctx: typer.Context,
    course_id: int = typer.Argument(help="Canvas course id."),
    assignment_id: int = typer.Argument(help="Assignment id."),
    submission_id: int = typer.Argument(help="Submission id (not the user id)."),
) -> None:
    """Show one submission, looked up by its submission id."""
    submission = unwrap(
        open_canvas(ctx).fetch_submission_by_id(course_id, assignment_id, submission_id)
    )
    get_output().print_record(submission)


@submissions_app.command("grade")
def submissions_grade(
    ctx: typer.Context,
    course_id: int = typer.Argument(help="Canvas course id."),
    assignment_id: int = typer.Argument(help="Assignment id."),
    user_id: int = typer.Argument(help="Student user id."),
    score: Optional[float] = typer.Argument(None, help="New score; omit to clear the grade."),
) -> None:
    """Set or clear a student's score."""
    submission = unwrap(
        open_canvas(ctx).update_submission_score(course_id, assignment_id, user_id, score)
    )
    success(f"Submission {submission.id} graded: {submission.score}")


@submissions_app.command("comment")
def submissions_comment(
    ctx: typer.Context,
    course_id: int = typer.Argument(help="Canvas course id."),
    assignment_id: int = typer.Argument(help="Assignment id."),
    user_id: int = typer.Argument(help="Student user id."),
    text: str = typer.Argument(help="Comment text."),
) -> None:
    """Add a text comment to a student's submission."""
    submission = unwrap(
        open_canvas(ctx).add_submission_comment(course_id, assignment_id, user_id, text)
    )
    success(f"Comment added to submission {submission.id}")


@submissions_app.command("delete-comment")
def submissions_delete_comment(
    ctx: typer.Context,
    course_id: int = typer.Argument(help="Canvas course id."),
    assignment_id: int = typer.Argument(help="Assignment id."),
    user_id: int = typer.Argument(help="Student user id."),
    comment_id: int = typer.Argument(help="Comment id."),
) -> None:
    """Delete a comment from a student's submission."""
    comment = unwrap(
        open_canvas(ctx).delete_submission_comment(course_id, assignment_id, user_id, comment_id)
    )
    success(f"Comment {comment.id} deleted")
