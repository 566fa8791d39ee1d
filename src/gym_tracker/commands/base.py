"""Shared CLI utilities."""

import asyncio
from functools import wraps
from pathlib import Path

import click

from ..config import get_data_dir
from ..db import SQLiteStore, get_db_path
from ..events import LoggingSink
from ..models.workout import ExerciseSet, Workout, WorkoutExercise
from ..services.session import WorkoutSession
from ..services.timer import RestTimer


def async_command(f):
    """Decorator to run async Click commands."""

    @wraps(f)
    def wrapper(*args, **kwargs):
        return asyncio.run(f(*args, **kwargs))

    return wrapper


def data_dir_for(ctx: click.Context) -> Path:
    """Data directory chosen on the command line, or the configured one."""
    obj = ctx.find_root().obj or {}
    return obj.get("data_dir") or get_data_dir()


def db_path_for(ctx: click.Context) -> Path:
    return get_db_path(data_dir_for(ctx))


def ensure_initialized(ctx: click.Context) -> None:
    """Ensure the database is initialized."""
    db_path = db_path_for(ctx)
    if not db_path.exists():
        click.echo(
            click.style("Error: ", fg="red")
            + "Project not initialized. Run 'gym-tracker init' first."
        )
        ctx.exit(1)


def open_store(ctx: click.Context) -> SQLiteStore:
    ensure_initialized(ctx)
    return SQLiteStore(db_path_for(ctx))


def open_session(ctx: click.Context) -> WorkoutSession:
    """A session on the project store whose rest timer is ticked by hand."""
    store = open_store(ctx)
    return WorkoutSession(store, sink=LoggingSink(), timer=RestTimer(auto_tick=False))


def resolve_set(
    workout: Workout, position: int, set_number: int
) -> tuple[WorkoutExercise, ExerciseSet]:
    """Find a set by 1-based exercise position and set number."""
    exercises = workout.sorted_exercises
    if not 1 <= position <= len(exercises):
        raise click.BadParameter(
            f"Exercise position must be between 1 and {len(exercises)}",
            param_hint="POSITION",
        )
    workout_exercise = exercises[position - 1]
    for exercise_set in workout_exercise.sets:
        if exercise_set.set_number == set_number:
            return workout_exercise, exercise_set
    raise click.BadParameter(
        f"Exercise {position} has no set {set_number}", param_hint="SET_NUMBER"
    )


def echo_success(message: str) -> None:
    """Print a success message."""
    click.echo(click.style("[OK] ", fg="green") + message)


def echo_error(message: str) -> None:
    """Print an error message."""
    click.echo(click.style("[ERROR] ", fg="red") + message)


def echo_info(message: str) -> None:
    """Print an info message."""
    click.echo(click.style("[INFO] ", fg="blue") + message)


def echo_warning(message: str) -> None:
    """Print a warning message."""
    click.echo(click.style("[WARN] ", fg="yellow") + message)


def format_table(headers: list[str], rows: list[list[str]], padding: int = 2) -> str:
    """Format data as a simple table."""
    if not rows:
        return ""

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))

    lines = [
        "".join(h.ljust(widths[i] + padding) for i, h in enumerate(headers)).rstrip(),
        "".join("-" * w + " " * padding for w in widths).rstrip(),
    ]
    for row in rows:
        lines.append(
            "".join(str(cell).ljust(widths[i] + padding) for i, cell in enumerate(row)).rstrip()
        )
    return "\n".join(lines)


def format_weight(weight: float | None) -> str:
    if weight is None:
        return "-"
    return f"{weight:g}"
