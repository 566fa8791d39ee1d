"""CLI entry point for gym-tracker."""

import logging
from pathlib import Path

import click

from . import __version__
from .config import DATA_DIR_ENV
from .commands import exercises, init, programs, stats, timer, workout


@click.group()
@click.version_option(version=__version__, prog_name="gym-tracker")
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar=DATA_DIR_ENV,
    help="Directory holding the database",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, data_dir: Path | None, verbose: bool):
    """gym-tracker: log workouts, follow a session rotation, rest between sets.

    Example usage:

        # Initialize the project
        gym-tracker init

        # Set up a Push/Pull/Legs rotation
        gym-tracker programs add "PPL" push pull legs

        # Train
        gym-tracker workout start
        gym-tracker workout done 1 1 60 10
        gym-tracker timer 90
        gym-tracker workout finish

        # See how the week is going
        gym-tracker stats
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["data_dir"] = data_dir


# Register commands
main.add_command(init)
main.add_command(exercises)
main.add_command(programs)
main.add_command(workout)
main.add_command(stats)
main.add_command(timer)


def run():
    """Run the CLI (handles async event loop)."""
    main()


if __name__ == "__main__":
    run()
