"""Rest timer running between sets."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum

from ..errors import InvalidStateError, ValidationError
from ..events import Event, EventKind, NotificationSink, NullSink

logger = logging.getLogger(__name__)

# Seconds before expiry that produce a tick notification
TICK_WARNING_SECONDS = 5


class TimerState(str, Enum):
    """Rest timer states."""

    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"
    EXPIRED = "expired"


class RestTimer:
    """A one-tick-per-second countdown, independent of any workout.

    The countdown runs as an asyncio task when an event loop is running and
    `auto_tick` is enabled. Every state change bumps a generation number, so
    a tick that wakes up after a pause, stop or restart is dropped instead of
    applying to the new state. With `auto_tick=False` the host drives the
    countdown by calling `tick()`.
    """

    def __init__(
        self,
        sink: NotificationSink | None = None,
        *,
        auto_tick: bool = True,
        tick_interval: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.sink = sink or NullSink()
        self.auto_tick = auto_tick
        self.tick_interval = tick_interval
        self._sleep = sleep

        self.state = TimerState.STOPPED
        self.remaining = 0
        self.total = 0

        self._generation = 0
        self._task: asyncio.Task | None = None
        self._finished = asyncio.Event()

    @property
    def is_running(self) -> bool:
        return self.state is TimerState.RUNNING

    @property
    def progress(self) -> float:
        """Elapsed fraction of the rest period (0 when nothing is set)."""
        if self.total <= 0:
            return 0.0
        return 1 - self.remaining / self.total

    @property
    def formatted(self) -> str:
        minutes, seconds = divmod(max(self.remaining, 0), 60)
        return f"{minutes}:{seconds:02d}"

    def start(self, seconds: int) -> None:
        """Start a fresh countdown, replacing any current one."""
        seconds = int(seconds)
        if seconds <= 0:
            raise ValidationError(f"Rest duration must be positive (got {seconds})")

        self.total = seconds
        self.remaining = seconds
        self.state = TimerState.RUNNING
        self._finished.clear()
        self._restart_ticker()
        logger.debug("Rest timer started for %ss", seconds)

    def pause(self) -> None:
        if self.state is not TimerState.RUNNING:
            raise InvalidStateError(f"Cannot pause a {self.state.value} timer")
        self.state = TimerState.PAUSED
        self._cancel_ticker()

    def resume(self) -> None:
        if self.state is not TimerState.PAUSED:
            raise InvalidStateError(f"Cannot resume a {self.state.value} timer")
        if self.remaining <= 0:
            return
        self.state = TimerState.RUNNING
        self._restart_ticker()

    def add_time(self, seconds: int) -> None:
        """Extend the current rest period.

        An expired timer becomes paused with the extra time left on it.
        """
        if self.state is TimerState.STOPPED:
            raise InvalidStateError("Cannot add time to a stopped timer")
        seconds = int(seconds)
        if seconds <= 0:
            raise ValidationError(f"Added time must be positive (got {seconds})")

        self.remaining += seconds
        self.total += seconds
        if self.state is TimerState.EXPIRED:
            self.state = TimerState.PAUSED
            self._finished.clear()

    def reset(self) -> None:
        """Restore the full duration and run again."""
        if self.state is TimerState.STOPPED:
            raise InvalidStateError("Cannot reset a stopped timer")
        self.remaining = self.total
        self.state = TimerState.RUNNING
        self._finished.clear()
        self._restart_ticker()

    def stop(self) -> None:
        """Cancel the countdown. Safe to call in any state."""
        self._cancel_ticker()
        self.state = TimerState.STOPPED
        self.remaining = 0
        self.total = 0
        self._finished.set()

    def tick(self) -> None:
        """Account for one elapsed second."""
        if self.state is not TimerState.RUNNING:
            return

        self.remaining = max(self.remaining - 1, 0)

        if self.remaining <= 0:
            self._expire()
        elif self.remaining <= TICK_WARNING_SECONDS:
            self.sink.emit(
                Event(EventKind.TIMER_TICK, f"{self.remaining}s left", {"remaining": self.remaining})
            )

    async def wait(self) -> TimerState:
        """Block until the timer expires or is stopped."""
        if self.state in (TimerState.STOPPED, TimerState.EXPIRED):
            return self.state
        await self._finished.wait()
        return self.state

    def _expire(self) -> None:
        self.state = TimerState.EXPIRED
        self._generation += 1
        self._task = None
        self._finished.set()
        logger.info("Rest timer expired after %ss", self.total)
        self.sink.emit(Event(EventKind.TIMER_EXPIRED, "Rest is over", {"total": self.total}))

    def _restart_ticker(self) -> None:
        self._cancel_ticker()
        if not self.auto_tick:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; rest timer waits for manual ticks")
            return
        self._task = loop.create_task(self._run(self._generation))

    def _cancel_ticker(self) -> None:
        self._generation += 1
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

    async def _run(self, generation: int) -> None:
        while True:
            await self._sleep(self.tick_interval)
            if generation != self._generation:
                return
            self.tick()
            if self.state is not TimerState.RUNNING:
                return
