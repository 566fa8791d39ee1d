"""Program management commands."""

import click

from ..errors import GymTrackerError
from ..models.exercises import ExerciseCategory
from ..models.program import Program
from ..services.rotation import ProgramManager
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    format_table,
    open_store,
)

CATEGORY_CHOICE = click.Choice([c.value for c in ExerciseCategory], case_sensitive=False)


async def _find_program(manager: ProgramManager, name: str) -> Program | None:
    wanted = name.strip().lower()
    for program in await manager.list_programs():
        if program.id == name or program.name.lower() == wanted:
            return program
    return None


def _position(program: Program) -> str:
    if not program.total_sessions:
        return "-"
    index = program.current_session_index % program.total_sessions
    return f"{index + 1}/{program.total_sessions}"


@click.group()
def programs():
    """Manage session rotations.

    A program is a repeating order of session categories. The active
    program decides which session is suggested next.
    """
    pass


@programs.command(name="list")
@click.pass_context
@async_command
async def list_programs(ctx):
    """List all programs."""
    manager = ProgramManager(open_store(ctx))
    all_programs = await manager.list_programs()

    if not all_programs:
        echo_info("No programs found. Add one with 'gym-tracker programs add'")
        return

    headers = ["Active", "Name", "Rotation", "Next", "Position", "Created"]
    rows = []
    for prog in all_programs:
        rows.append([
            "*" if prog.is_active else "",
            prog.name[:30] + "..." if len(prog.name) > 30 else prog.name,
            prog.get_rotation_display(),
            prog.next_session.display_name if prog.next_session else "-",
            _position(prog),
            prog.created_at.strftime("%Y-%m-%d"),
        ])

    click.echo()
    click.echo(format_table(headers, rows))
    click.echo()
    click.echo(f"Total: {len(all_programs)} program(s)")


@programs.command()
@click.argument("name")
@click.argument("sessions", nargs=-1, required=True, type=CATEGORY_CHOICE)
@click.pass_context
@async_command
async def add(ctx, name: str, sessions: tuple[str, ...]):
    """Create a program from an ordered list of SESSIONS.

    The first program created becomes the active one.
    """
    manager = ProgramManager(open_store(ctx))
    try:
        program = await manager.add_program(name, list(sessions))
    except GymTrackerError as e:
        echo_error(str(e))
        ctx.exit(1)

    echo_success(f"Created {program.name}: {program.get_rotation_display()}")
    if program.is_active:
        echo_info("This is now the active program")


@programs.command()
@click.argument("name")
@click.pass_context
@async_command
async def activate(ctx, name: str):
    """Make a program the active one."""
    manager = ProgramManager(open_store(ctx))
    program = await _find_program(manager, name)
    if program is None:
        echo_error(f"Program {name!r} not found")
        ctx.exit(1)

    await manager.set_active(program)
    echo_success(f"{program.name} is now active")


@programs.command()
@click.pass_context
@async_command
async def advance(ctx):
    """Skip the active program ahead by one session."""
    manager = ProgramManager(open_store(ctx))
    program = await manager.advance_active()
    if program is None:
        echo_error("No active program")
        ctx.exit(1)

    next_session = program.next_session
    echo_success(
        f"Next session: {next_session.display_name if next_session else '-'}"
    )


@programs.command()
@click.argument("name")
@click.pass_context
@async_command
async def reset(ctx, name: str):
    """Send a program back to its first session."""
    manager = ProgramManager(open_store(ctx))
    program = await _find_program(manager, name)
    if program is None:
        echo_error(f"Program {name!r} not found")
        ctx.exit(1)

    await manager.restart_program(program)
    echo_success(f"{program.name} restarted at {program.next_session.display_name}")


@programs.command()
@click.argument("name")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def delete(ctx, name: str, force: bool):
    """Delete a program."""
    manager = ProgramManager(open_store(ctx))
    program = await _find_program(manager, name)
    if program is None:
        echo_error(f"Program {name!r} not found")
        ctx.exit(1)

    if not force:
        click.echo(f"Program: {program.name}")
        if not click.confirm("Are you sure you want to delete this program?"):
            echo_info("Cancelled")
            return

    await manager.delete_program(program)
    echo_success(f"Program {program.name} deleted")
