"""Initialize project command."""

import click

from ..db import init_db, seed_exercises
from .base import async_command, data_dir_for, db_path_for, echo_info, echo_success


@click.command()
@click.option("--no-seed", is_flag=True, help="Skip the default exercise library")
@click.pass_context
@async_command
async def init(ctx, no_seed: bool):
    """Initialize the gym-tracker database.

    Creates the data directory and the SQLite schema, then fills the
    exercise library with a default set of exercises. Running it again is
    safe: existing exercises are kept.
    """
    data_dir = data_dir_for(ctx)
    db_path = db_path_for(ctx)

    echo_info(f"Initializing gym-tracker in {data_dir}")

    await init_db(db_path)
    echo_success("Database initialized")

    if not no_seed:
        count = await seed_exercises(db_path)
        echo_success(f"Exercise library populated ({count} new exercises)")

    click.echo()
    click.echo("gym-tracker is ready to use!")
    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Set up a rotation:")
    click.echo('     gym-tracker programs add "PPL" push pull legs')
    click.echo()
    click.echo("  2. Start training:")
    click.echo("     gym-tracker workout start")
