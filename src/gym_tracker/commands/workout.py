"""Active workout commands."""

from datetime import timedelta

import click

from ..errors import GymTrackerError
from ..models.exercises import ExerciseCategory
from ..services.catalog import ExerciseCatalog
from ..services.performance import PerformanceAggregator
from ..services.rotation import ProgramManager, SuggestionEngine
from ..services.session import WorkoutSession
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    echo_warning,
    format_table,
    format_weight,
    open_session,
    resolve_set,
)

CATEGORY_CHOICE = click.Choice([c.value for c in ExerciseCategory], case_sensitive=False)


async def _active_session(ctx: click.Context) -> WorkoutSession:
    """Session with the unfinished workout loaded, or exit."""
    session = open_session(ctx)
    if await session.load_active_workout() is None:
        echo_error("No workout in progress. Start one with 'gym-tracker workout start'")
        ctx.exit(1)
    return session


def _show_workout(session: WorkoutSession) -> None:
    workout = session.workout
    click.echo()
    click.echo(
        click.style(f"{workout.session_type.display_name} workout", bold=True)
        + f"  ({session.duration_minutes} min, {session.progress:.0%} done)"
    )
    click.echo("=" * 50)

    if not workout.exercises:
        echo_info("No exercises yet. Add one with 'gym-tracker workout add-exercise'")
        return

    for position, workout_exercise in enumerate(workout.sorted_exercises, start=1):
        exercise = session.exercise_for(workout_exercise)
        name = exercise.name if exercise else "(deleted exercise)"
        click.echo()
        header = (
            f"{position}. {name}  "
            f"[{workout_exercise.completed_sets_count}/{workout_exercise.total_sets_count}]"
        )
        if workout_exercise.last_time_display:
            header += f"  last time: {workout_exercise.last_time_display}"
        click.echo(click.style(header, bold=workout_exercise.is_fully_completed))

        rows = []
        for exercise_set in workout_exercise.sorted_sets:
            rows.append([
                exercise_set.short_label,
                format_weight(exercise_set.weight),
                str(exercise_set.reps) if exercise_set.reps is not None else "-",
                "done" if exercise_set.is_completed else "",
            ])
        if rows:
            click.echo(format_table(["Set", "Weight", "Reps", ""], rows))


@click.group()
def workout():
    """Log the workout in progress."""
    pass


@workout.command()
@click.argument("category", required=False, type=CATEGORY_CHOICE)
@click.pass_context
@async_command
async def start(ctx, category: str | None):
    """Start a workout.

    Without CATEGORY the next session of the active program is used, or
    the default rotation after the last workout when no program is active.
    """
    session = open_session(ctx)
    if await session.load_active_workout() is not None:
        echo_error("A workout is already in progress. Finish or cancel it first")
        ctx.exit(1)

    if category is None:
        active = await ProgramManager(session.store).active_program()
        recent = await session.store.fetch_workouts(
            start=session.clock.now() - timedelta(days=session.config.history_window_days)
        )
        suggested = SuggestionEngine().suggest_next_session(active, recent)
        if suggested is None:
            echo_error("The active program has no sessions; pass a CATEGORY")
            ctx.exit(1)
        category = suggested.value

    try:
        await session.start_workout(ExerciseCategory.parse(category))
    except GymTrackerError as e:
        echo_error(str(e))
        ctx.exit(1)

    echo_success(f"{session.workout.session_type.display_name} workout started")
    _show_workout(session)


@workout.command()
@click.pass_context
@async_command
async def status(ctx):
    """Show the workout in progress."""
    session = open_session(ctx)
    if await session.load_active_workout() is None:
        echo_info("No workout in progress")
        return
    _show_workout(session)


@workout.command(name="add-exercise")
@click.argument("name")
@click.pass_context
@async_command
async def add_exercise(ctx, name: str):
    """Add a library exercise to the workout."""
    session = await _active_session(ctx)
    try:
        exercise = await ExerciseCatalog(session.store).find(name)
        await session.add_exercise(exercise)
    except GymTrackerError as e:
        echo_error(str(e))
        ctx.exit(1)
    echo_success(f"Added {exercise.name} with {session.config.default_sets_per_exercise} sets")


@workout.command(name="remove-exercise")
@click.argument("position", type=int)
@click.pass_context
@async_command
async def remove_exercise(ctx, position: int):
    """Remove the exercise at POSITION from the workout."""
    session = await _active_session(ctx)
    exercises = session.workout.sorted_exercises
    if not 1 <= position <= len(exercises):
        echo_error(f"No exercise at position {position}")
        ctx.exit(1)

    await session.remove_exercise(exercises[position - 1].id)
    echo_success(f"Removed exercise {position}")


@workout.command(name="add-set")
@click.argument("position", type=int)
@click.option("--warmup", "-w", is_flag=True, help="Mark the set as a warm-up")
@click.pass_context
@async_command
async def add_set(ctx, position: int, warmup: bool):
    """Append a set to the exercise at POSITION."""
    session = await _active_session(ctx)
    exercises = session.workout.sorted_exercises
    if not 1 <= position <= len(exercises):
        echo_error(f"No exercise at position {position}")
        ctx.exit(1)

    new_set = await session.add_set(exercises[position - 1].id, is_warmup=warmup)
    echo_success(f"Added set {new_set.set_number}")


@workout.command(name="remove-set")
@click.argument("position", type=int)
@click.argument("set_number", type=int)
@click.pass_context
@async_command
async def remove_set(ctx, position: int, set_number: int):
    """Remove a set; the remaining sets are renumbered."""
    session = await _active_session(ctx)
    workout_exercise, exercise_set = resolve_set(session.workout, position, set_number)
    await session.remove_set(workout_exercise.id, exercise_set.id)
    echo_success(f"Removed set {set_number}")


@workout.command()
@click.argument("position", type=int)
@click.argument("set_number", type=int)
@click.argument("weight", type=float)
@click.argument("reps", type=int)
@click.option("--rest", "-r", type=int, help="Rest period in seconds")
@click.pass_context
@async_command
async def done(ctx, position: int, set_number: int, weight: float, reps: int, rest: int | None):
    """Complete a set with WEIGHT and REPS."""
    session = await _active_session(ctx)
    workout_exercise, exercise_set = resolve_set(session.workout, position, set_number)

    try:
        await session.complete_set(exercise_set.id, weight, reps, rest_seconds=rest)
    except GymTrackerError as e:
        echo_error(str(e))
        ctx.exit(1)

    echo_success(f"Set {set_number} done: {format_weight(weight)} x {reps}")

    exercise = session.exercise_for(workout_exercise)
    if exercise is not None and exercise.last_performance is not None:
        if PerformanceAggregator().has_progressed(exercise, weight, reps):
            echo_success("Better than last time!")

    if session.timer.total:
        echo_info(
            f"Rest {session.timer.formatted}: gym-tracker timer {session.timer.total}"
        )


@workout.command()
@click.argument("position", type=int)
@click.argument("set_number", type=int)
@click.pass_context
@async_command
async def undo(ctx, position: int, set_number: int):
    """Mark a completed set as not done."""
    session = await _active_session(ctx)
    _, exercise_set = resolve_set(session.workout, position, set_number)
    await session.uncomplete_set(exercise_set.id)
    echo_success(f"Set {set_number} reopened")


@workout.command()
@click.pass_context
@async_command
async def finish(ctx):
    """Complete the workout and record performances."""
    session = await _active_session(ctx)
    workout = session.workout
    duration = session.duration_minutes

    try:
        records = await session.complete_workout()
    except GymTrackerError as e:
        echo_error(str(e))
        ctx.exit(1)

    echo_success(f"{workout.session_type.display_name} workout completed")
    click.echo(f"Duration: {duration} min")
    click.echo(f"Sets: {workout.total_sets}")
    click.echo(f"Volume: {workout.total_volume:g}")
    click.echo(f"Exercises recorded: {len(records)}")

    active = await ProgramManager(session.store).active_program()
    if active is not None and active.next_session is not None:
        echo_info(f"Next session: {active.next_session.display_name}")


@workout.command()
@click.option("--force", "-f", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def cancel(ctx, force: bool):
    """Discard the workout in progress."""
    session = await _active_session(ctx)

    if not force:
        click.echo(
            f"{session.workout.session_type.display_name} workout, "
            f"{session.workout.total_sets} set(s) done"
        )
        if not click.confirm("Are you sure you want to discard this workout?"):
            echo_info("Cancelled")
            return

    await session.cancel_workout()
    echo_warning("Workout discarded")
