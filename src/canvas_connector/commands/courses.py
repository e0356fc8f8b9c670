"""Course commands -- list courses, their rosters and assignments, and post to them.

Provides the ``canvas-connector courses`` sub-command group. Every command
resolves credentials through the chain, calls one
:class:`~canvas_connector.canvas.Canvas` entry point and prints the result
to stdout (table, plain text, or JSON with ``--json``).
"""

from __future__ import annotations

from typing import Optional

import typer

from canvas_connector.commands._common import open_canvas, unwrap
from canvas_connector.output import get_output, info, success


courses_app = typer.Typer(no_args_is_help=True)


@courses_app.command("list")
def courses_list(
    ctx: typer.Context,
    role: Optional[str] = typer.Option(
        None,
        "--role",
        help="Only courses with this enrollment role, e.g. TeacherEnrollment.",
    ),
) -> None:
    """List every course visible to the token.

    Example::

        canvas-connector courses list --role TeacherEnrollment
    """
    courses = unwrap(open_canvas(ctx).fetch_courses(enrollment_role=role))
    info(f"{len(courses)} course(s)")
    get_output().print_records(courses, ["id", "course_code", "name"], title="Courses")


@courses_app.command("show")
def courses_show(
    ctx: typer.Context,
    course_id: int = typer.Argument(help="Canvas course id."),
) -> None:
    """Show one course."""
    course = unwrap(open_canvas(ctx).fetch_course(course_id))
    get_output().print_record(course)


@courses_app.command("students")
def courses_students(
    ctx: typer.Context,
    course_id: int = typer.Argument(help="Canvas course id."),
) -> None:
    """List the students enrolled in a course."""
    students = unwrap(open_canvas(ctx).fetch_students(course_id))
    info(f"{len(students)} student(s)")
    get_output().print_records(students, ["id", "name", "email"], title="Students")


@courses_app.command("assignments")
def courses_assignments(
    ctx: typer.Context,
    course_id: int = typer.Argument(help="Canvas course id."),
) -> None:
    """List the assignments of a course."""
    assignments = unwrap(open_canvas(ctx).fetch_assignments(course_id))
    info(f"{len(assignments)} assignment(s)")
    get_output().print_records(
        assignments, ["id", "name", "due_at", "points_possible"], title="Assignments"
    )


@courses_app.command("create-assignment")
def courses_create_assignment(
    ctx: typer.Context,
    course_id: int = typer.Argument(help="Canvas course id."),
    name: str = typer.Argument(help="Assignment name."),
    points: float = typer.Option(10.0, "--points", help="Points possible."),
    published: bool = typer.Option(
        True, "--published/--unpublished", help="Publish the assignment right away."
    ),
) -> None:
    """Create a points-graded assignment that accepts file uploads.

    Example::

        canvas-connector courses create-assignment 4242 "Homework 2" --points 20
    """
    assignment = unwrap(
        open_canvas(ctx).create_assignment(
            course_id, name, points_possible=points, published=published
        )
    )
    get_output().print_record(assignment)
    success(f"Assignment {assignment.id} created")


@courses_app.command("announce")
def courses_announce(
    ctx: typer.Context,
    course_id: int = typer.Argument(help="Canvas course id."),
    title: str = typer.Argument(help="Announcement title."),
    message: str = typer.Argument(help="Announcement body (HTML allowed)."),
) -> None:
    """Post an announcement to a course."""
    announcement = unwrap(open_canvas(ctx).create_announcement(course_id, title, message))
    get_output().print_record(announcement)
    success(f"Announcement {announcement.id} posted")
