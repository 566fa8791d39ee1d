"""Rest timer command."""

import asyncio

import click

from ..config import DEFAULT_REST_DURATION
from ..errors import GymTrackerError
from ..events import Event, EventKind, FanOutSink, LoggingSink
from ..services.timer import RestTimer, TimerState
from .base import async_command, echo_error, echo_success

# Seconds between redraws of the countdown line
TICK_SECONDS = 1.0


class _ConsoleSink:
    """Clears the countdown line once the rest is over."""

    def emit(self, event: Event) -> None:
        if event.kind is EventKind.TIMER_EXPIRED:
            click.echo("\r" + " " * 20 + "\r", nl=False)


@click.command()
@click.argument("seconds", type=int, default=int(DEFAULT_REST_DURATION))
@click.pass_context
@async_command
async def timer(ctx, seconds: int):
    """Count down a rest period of SECONDS (default 90)."""
    rest_timer = RestTimer(FanOutSink(LoggingSink(), _ConsoleSink()), auto_tick=False)

    try:
        rest_timer.start(seconds)
    except GymTrackerError as e:
        echo_error(str(e))
        ctx.exit(1)

    click.echo(f"Resting {rest_timer.formatted} (Ctrl+C to stop)")
    while rest_timer.state is TimerState.RUNNING:
        click.echo(f"\rRest: {rest_timer.formatted} ", nl=False)
        await asyncio.sleep(TICK_SECONDS)
        rest_timer.tick()

    if rest_timer.state is TimerState.EXPIRED:
        click.echo("\a", nl=False)
        echo_success("Rest is over, next set!")
