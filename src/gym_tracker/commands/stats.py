"""Training statistics command."""

import json
from datetime import timedelta

import click

from ..services.rotation import ProgramManager
from ..services.stats import SessionStatistics
from .base import async_command, echo_info, format_table, format_weight, open_store


@click.command()
@click.option("--days", "-d", type=int, default=30, show_default=True, help="History window")
@click.option("--json", "as_json", is_flag=True, help="Print the summary as JSON")
@click.pass_context
@async_command
async def stats(ctx, days: int, as_json: bool):
    """Show this week's numbers, the streak and the suggested session."""
    store = open_store(ctx)
    statistics = SessionStatistics()

    since = statistics.clock.now() - timedelta(days=days)
    workouts = await store.fetch_workouts(start=since)
    active = await ProgramManager(store).active_program()
    summary = statistics.summarize(workouts, active)

    if as_json:
        click.echo(json.dumps(summary.to_dict(), indent=2))
        return

    click.echo()
    click.echo(click.style("This week", bold=True))
    click.echo("=" * 50)
    click.echo(f"Workouts: {summary.workouts_this_week}")
    click.echo(f"Sets: {summary.sets_this_week}")
    click.echo(f"Volume: {summary.volume_this_week:g}")
    click.echo(f"Streak: {summary.current_streak} day(s)")
    if summary.days_since_last_workout is not None:
        click.echo(f"Days since last workout: {summary.days_since_last_workout}")

    click.echo()
    if summary.suggested_session is not None:
        source = f"program {active.name}" if active else "default rotation"
        echo_info(f"Suggested next: {summary.suggested_session.display_name} ({source})")

    completed = [w for w in workouts if w.is_completed]
    if not completed:
        return

    rows = [
        [
            w.date.strftime("%Y-%m-%d"),
            w.session_type.display_name,
            str(w.exercise_count),
            str(w.total_sets),
            format_weight(w.total_volume),
        ]
        for w in completed[:10]
    ]
    click.echo()
    click.echo(click.style("Recent workouts", bold=True))
    click.echo(format_table(["Date", "Session", "Exercises", "Sets", "Volume"], rows))
