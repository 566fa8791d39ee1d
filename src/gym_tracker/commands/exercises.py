"""Exercise library commands."""

import click

from ..errors import GymTrackerError
from ..models.exercises import Exercise, ExerciseCategory, MuscleGroup
from ..services.catalog import ExerciseCatalog
from ..services.performance import PerformanceAggregator
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    format_table,
    format_weight,
    open_store,
)

CATEGORY_CHOICE = click.Choice([c.value for c in ExerciseCategory], case_sensitive=False)
MUSCLE_CHOICE = click.Choice([m.value for m in MuscleGroup], case_sensitive=False)


@click.group()
def exercises():
    """Manage the exercise library."""
    pass


@exercises.command(name="list")
@click.option("--category", "-c", type=CATEGORY_CHOICE, help="Only this category")
@click.option("--search", "-s", help="Filter by name")
@click.option("--by-category", "-g", is_flag=True, help="One table per category")
@click.pass_context
@async_command
async def list_exercises(ctx, category: str | None, search: str | None, by_category: bool):
    """List exercises with their last performance."""
    catalog = ExerciseCatalog(open_store(ctx))
    found = await catalog.list_exercises(category=category, search=search)

    if not found:
        echo_info("No exercises found. Add one with 'gym-tracker exercises add'")
        return

    if by_category:
        wanted = {e.id for e in found}
        for group, members in (await catalog.grouped_by_category()).items():
            members = [e for e in members if e.id in wanted]
            if not members:
                continue
            click.echo()
            click.echo(click.style(f"{group.display_name} ({len(members)})", bold=True))
            click.echo(_exercise_table(members, with_category=False))
    else:
        click.echo()
        click.echo(_exercise_table(found))

    click.echo()
    click.echo(f"Total: {len(found)} exercise(s)")


def _exercise_table(found: list[Exercise], with_category: bool = True) -> str:
    headers = ["Name", "Category", "Muscle", "Last time"]
    if not with_category:
        headers.remove("Category")

    rows = []
    for exercise in found:
        last = exercise.last_performance
        row = [
            exercise.name,
            exercise.category.display_name,
            exercise.muscle_group.value,
            _format_set(last.best_set) if last else "-",
        ]
        if not with_category:
            del row[1]
        rows.append(row)
    return format_table(headers, rows)


def _format_set(best_set: tuple[float, int]) -> str:
    weight, reps = best_set
    return f"{format_weight(weight)} x {reps}"


@exercises.command()
@click.argument("name")
@click.argument("category", type=CATEGORY_CHOICE)
@click.argument("muscle_group", type=MUSCLE_CHOICE)
@click.option("--notes", "-n", help="Free-form notes")
@click.pass_context
@async_command
async def add(ctx, name: str, category: str, muscle_group: str, notes: str | None):
    """Add an exercise to the library."""
    catalog = ExerciseCatalog(open_store(ctx))
    try:
        exercise = await catalog.add_exercise(name, category, muscle_group, notes)
    except GymTrackerError as e:
        echo_error(str(e))
        ctx.exit(1)
    echo_success(f"Added {exercise.name} ({exercise.category.display_name})")


@exercises.command()
@click.argument("name")
@click.pass_context
@async_command
async def show(ctx, name: str):
    """Show an exercise and its performance history."""
    catalog = ExerciseCatalog(open_store(ctx))
    try:
        exercise = await catalog.find(name)
    except GymTrackerError as e:
        echo_error(str(e))
        ctx.exit(1)

    aggregator = PerformanceAggregator()

    click.echo()
    click.echo(click.style(exercise.name, bold=True))
    click.echo("=" * 50)
    click.echo(f"Category: {exercise.category.display_name}")
    click.echo(f"Muscle group: {exercise.muscle_group.value}")
    if exercise.notes:
        click.echo(f"Notes: {exercise.notes}")

    records = exercise.sorted_records
    if not records:
        click.echo()
        echo_info("No history yet")
        return

    click.echo()
    rows = [
        [
            r.date.strftime("%Y-%m-%d"),
            _format_set(r.best_set),
            str(r.total_sets),
            f"{r.total_volume:g}",
            f"{r.average_volume_per_set:g}",
        ]
        for r in records
    ]
    click.echo(format_table(["Date", "Best set", "Sets", "Volume", "Per set"], rows))

    click.echo()
    click.echo(f"Personal best: {format_weight(aggregator.personal_best(exercise))}")
    click.echo(f"All-time volume: {aggregator.total_volume_all_time(exercise):g}")
    change = aggregator.progression_percent(exercise)
    if change is not None:
        click.echo(f"Progression: {change:+.1f}%")


@exercises.command()
@click.argument("name")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def delete(ctx, name: str, force: bool):
    """Delete an exercise and its history."""
    catalog = ExerciseCatalog(open_store(ctx))
    try:
        exercise = await catalog.find(name)
    except GymTrackerError as e:
        echo_error(str(e))
        ctx.exit(1)

    if not force:
        click.echo(f"Exercise: {exercise.name} ({len(exercise.performance_records)} records)")
        if not click.confirm("Are you sure you want to delete this exercise?"):
            echo_info("Cancelled")
            return

    await catalog.delete_exercise(exercise)
    echo_success(f"Exercise {exercise.name} deleted")


@exercises.command()
@click.argument("name")
@click.option("--name", "new_name", help="New name")
@click.option("--category", "-c", type=CATEGORY_CHOICE, help="New category")
@click.option("--muscle-group", "-m", type=MUSCLE_CHOICE, help="New muscle group")
@click.option("--notes", "-n", help="New notes (empty string clears them)")
@click.pass_context
@async_command
async def edit(
    ctx,
    name: str,
    new_name: str | None,
    category: str | None,
    muscle_group: str | None,
    notes: str | None,
):
    """Edit an exercise. Options left out keep their value."""
    if new_name is None and category is None and muscle_group is None and notes is None:
        echo_error("Nothing to change")
        ctx.exit(1)

    catalog = ExerciseCatalog(open_store(ctx))
    try:
        exercise = await catalog.find(name)
        exercise = await catalog.update_exercise(
            exercise,
            name=new_name,
            category=category,
            muscle_group=muscle_group,
            notes=notes,
        )
    except GymTrackerError as e:
        echo_error(str(e))
        ctx.exit(1)

    echo_success(
        f"Updated {exercise.name} ({exercise.category.display_name}, "
        f"{exercise.muscle_group.value})"
    )
