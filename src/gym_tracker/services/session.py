"""Lifecycle of the active workout session."""

import asyncio
import logging
from collections.abc import Callable
from enum import Enum

from ..clock import Clock, SystemClock
from ..config import SessionConfig
from ..db.store import ObjectStore
from ..errors import InvalidStateError, NotFoundError, PersistenceError, ValidationError
from ..events import Event, EventKind, NotificationSink, NullSink
from ..models.exercises import Exercise, ExerciseCategory, PerformanceRecord
from ..models.program import Program
from ..models.workout import ExerciseSet, Workout, WorkoutExercise
from .performance import PerformanceAggregator
from .timer import RestTimer

logger = logging.getLogger(__name__)

LastPerformanceLookup = Callable[[Exercise], PerformanceRecord | None]


class SessionState(str, Enum):
    """Workout session states."""

    IDLE = "idle"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class WorkoutSession:
    """Owns the single in-progress workout.

    All mutating operations are coroutines serialized by one lock, so at most
    one change to the workout is in flight at a time. Completing or
    cancelling returns the session to idle; the terminal state that was
    reached is kept in `last_outcome`.

    Persistence failures are emitted as error events and re-raised. The
    in-memory workout is not rolled back; calling `store.save()` again
    retries the commit.
    """

    def __init__(
        self,
        store: ObjectStore,
        *,
        clock: Clock | None = None,
        sink: NotificationSink | None = None,
        timer: RestTimer | None = None,
        aggregator: PerformanceAggregator | None = None,
        config: SessionConfig | None = None,
    ):
        self.store = store
        self.clock = clock or SystemClock()
        self.sink = sink or NullSink()
        self.timer = timer or RestTimer(self.sink)
        self.aggregator = aggregator or PerformanceAggregator(self.clock)
        self.config = config or SessionConfig()

        self.state = SessionState.IDLE
        self.last_outcome: SessionState | None = None
        self.workout: Workout | None = None
        self.selected_exercise_index = 0

        self._exercises: dict[str, Exercise] = {}
        self._lookup: LastPerformanceLookup = self.aggregator.last_performance
        self._lock = asyncio.Lock()

    # Read-only views

    @property
    def is_active(self) -> bool:
        return self.state is SessionState.ACTIVE

    @property
    def progress(self) -> float:
        if self.workout is None:
            return 0.0
        return self.workout.progress

    @property
    def duration_minutes(self) -> int:
        if self.workout is None:
            return 0
        return self.workout.duration_minutes(self.clock.now())

    @property
    def current_exercise(self) -> WorkoutExercise | None:
        if self.workout is None:
            return None
        exercises = self.workout.sorted_exercises
        if 0 <= self.selected_exercise_index < len(exercises):
            return exercises[self.selected_exercise_index]
        return None

    def exercise_for(self, workout_exercise: WorkoutExercise) -> Exercise | None:
        """The library exercise a workout exercise refers to, if still known."""
        return self._exercises.get(workout_exercise.exercise_id)

    # Lifecycle

    async def load_active_workout(self) -> Workout | None:
        """Pick up an unfinished workout left in the store by an earlier run."""
        async with self._lock:
            if self.state is SessionState.ACTIVE:
                return self.workout

            unfinished = await self.store.fetch_workouts(completed=False)
            if not unfinished:
                return None

            workout = unfinished[0]
            exercises = await self.store.fetch_exercises()
            self._exercises = {e.id: e for e in exercises}
            self._lookup = self.aggregator.last_performance
            self.workout = workout
            self.selected_exercise_index = 0
            self.state = SessionState.ACTIVE
            logger.info("Resumed %s workout %s", workout.session_type.value, workout.id)
            return workout

    async def start_workout(
        self,
        category: ExerciseCategory,
        available_exercises: list[Exercise] | None = None,
        last_performance: LastPerformanceLookup | None = None,
    ) -> Workout:
        """Begin a workout seeded with every exercise of the category.

        Args:
            category: Session category to train
            available_exercises: Exercise library; fetched from the store
                when omitted
            last_performance: Lookup for the "last time" snapshot; defaults
                to each exercise's most recent performance record

        Returns:
            The new active workout
        """
        async with self._lock:
            if self.state is SessionState.ACTIVE:
                raise InvalidStateError("A workout is already in progress")

            category = ExerciseCategory.parse(category)
            if available_exercises is None:
                available_exercises = await self.store.fetch_exercises()

            now = self.clock.now()
            workout = Workout(session_type=category, date=now, start_time=now)

            self._exercises = {e.id: e for e in available_exercises}
            self._lookup = last_performance or self.aggregator.last_performance
            for exercise in available_exercises:
                if exercise.category is category:
                    self._seed(workout, exercise)

            self.store.insert(workout)
            self.workout = workout
            self.selected_exercise_index = 0
            self.state = SessionState.ACTIVE

            logger.info(
                "Started %s workout with %d exercise(s)",
                category.value,
                workout.exercise_count,
            )
            self.sink.emit(
                Event(
                    EventKind.WORKOUT_STARTED,
                    f"{category.display_name} workout started",
                    {"workout_id": workout.id, "exercises": workout.exercise_count},
                )
            )
            await self._save()
            return workout

    async def complete_workout(self) -> list[PerformanceRecord]:
        """Finish the workout, record performances and advance the program.

        Returns:
            One new record per exercise that had at least one completed set
        """
        async with self._lock:
            workout = self._require_active()
            # History lives on the stored instance only
            stored = {e.id: e for e in await self.store.fetch_exercises()}
            now = self.clock.now()
            workout.complete(at=now)

            records = []
            for workout_exercise in workout.sorted_exercises:
                record = self.aggregator.derive_record(workout_exercise, date=now)
                if record is None:
                    continue

                exercise = stored.get(workout_exercise.exercise_id)
                if exercise is None:
                    message = (
                        f"Exercise {workout_exercise.exercise_id} no longer exists; "
                        "performance not recorded"
                    )
                    logger.warning(message)
                    self.sink.emit(Event(EventKind.WARNING, message))
                    continue

                exercise.performance_records.append(record)
                self.store.insert(record)
                records.append(record)

            program = await self._advance_active_program()

            self.timer.stop()
            self._finish(SessionState.COMPLETED)

            logger.info(
                "Completed workout %s: %d record(s), %.1f volume",
                workout.id,
                len(records),
                workout.total_volume,
            )
            self.sink.emit(
                Event(
                    EventKind.WORKOUT_COMPLETED,
                    f"{workout.session_type.display_name} workout completed",
                    {
                        "workout_id": workout.id,
                        "records": len(records),
                        "total_volume": workout.total_volume,
                        "total_sets": workout.total_sets,
                        "next_session": (
                            program.next_session.value
                            if program and program.next_session
                            else None
                        ),
                    },
                )
            )
            await self._save()
            return records

    async def cancel_workout(self) -> None:
        """Throw the workout away without recording anything."""
        async with self._lock:
            workout = self._require_active()
            workout.cancel(at=self.clock.now())
            self.store.delete(workout)

            self.timer.stop()
            self._finish(SessionState.CANCELLED)

            logger.info("Cancelled workout %s", workout.id)
            self.sink.emit(
                Event(EventKind.WARNING, "Workout cancelled", {"workout_id": workout.id})
            )
            await self._save()

    # Exercises

    async def add_exercise(self, exercise: Exercise) -> WorkoutExercise:
        async with self._lock:
            workout = self._require_active()
            self._exercises[exercise.id] = exercise
            workout_exercise = self._seed(workout, exercise)
            await self._save()
            return workout_exercise

    async def remove_exercise(self, workout_exercise_id: str) -> WorkoutExercise:
        async with self._lock:
            workout = self._require_active()
            removed = workout.remove_exercise(workout_exercise_id)

            if self.selected_exercise_index >= workout.exercise_count:
                self.selected_exercise_index = max(0, workout.exercise_count - 1)

            await self._save()
            return removed

    # Sets

    async def add_set(
        self, workout_exercise_id: str, is_warmup: bool = False
    ) -> ExerciseSet:
        async with self._lock:
            workout = self._require_active()
            new_set = workout.get_exercise(workout_exercise_id).add_set(is_warmup=is_warmup)
            await self._save()
            return new_set

    async def remove_set(self, workout_exercise_id: str, set_id: str) -> ExerciseSet:
        """Remove a set; the remaining sets are renumbered 1..N."""
        async with self._lock:
            workout = self._require_active()
            removed = workout.get_exercise(workout_exercise_id).remove_set(set_id)
            await self._save()
            return removed

    async def complete_set(
        self,
        set_id: str,
        weight: float,
        reps: int,
        rest_seconds: int | None = None,
    ) -> ExerciseSet:
        """Record a set and start the rest timer."""
        async with self._lock:
            return await self._complete_set(set_id, weight, reps, rest_seconds)

    async def uncomplete_set(self, set_id: str) -> ExerciseSet:
        """Mark a set not done; its weight and reps stay for re-editing."""
        async with self._lock:
            workout = self._require_active()
            _, exercise_set = workout.find_set(set_id)
            exercise_set.uncomplete()
            await self._save()
            return exercise_set

    async def toggle_set(self, set_id: str) -> ExerciseSet:
        """Flip a set, re-using its stored values when completing it."""
        async with self._lock:
            workout = self._require_active()
            _, exercise_set = workout.find_set(set_id)

            if exercise_set.is_completed:
                exercise_set.uncomplete()
                await self._save()
                return exercise_set

            if exercise_set.weight is None or exercise_set.reps is None:
                raise ValidationError("Enter weight and reps before completing the set")
            return await self._complete_set(
                set_id, exercise_set.weight, exercise_set.reps, None
            )

    async def update_set(
        self, set_id: str, weight: float | None, reps: int | None
    ) -> ExerciseSet:
        async with self._lock:
            workout = self._require_active()
            _, exercise_set = workout.find_set(set_id)
            exercise_set.update(weight, reps)
            await self._save()
            return exercise_set

    # Selection

    def select_exercise(self, index: int) -> WorkoutExercise:
        workout = self._require_active()
        if not 0 <= index < workout.exercise_count:
            raise NotFoundError(f"No exercise at position {index + 1}")
        self.selected_exercise_index = index
        selected = workout.sorted_exercises[index]
        self._emit_selection(selected)
        return selected

    def next_exercise(self) -> WorkoutExercise | None:
        workout = self._require_active()
        if self.selected_exercise_index >= workout.exercise_count - 1:
            return None
        return self.select_exercise(self.selected_exercise_index + 1)

    def previous_exercise(self) -> WorkoutExercise | None:
        self._require_active()
        if self.selected_exercise_index <= 0:
            return None
        return self.select_exercise(self.selected_exercise_index - 1)

    # Internals

    def _require_active(self) -> Workout:
        if self.state is not SessionState.ACTIVE or self.workout is None:
            raise InvalidStateError("No workout in progress")
        return self.workout

    def _seed(self, workout: Workout, exercise: Exercise) -> WorkoutExercise:
        last = self._lookup(exercise)
        workout_exercise = workout.add_exercise(
            exercise,
            last_weight=last.max_weight if last else None,
            last_reps=last.max_reps if last else None,
        )
        workout_exercise.add_sets(self.config.default_sets_per_exercise)
        return workout_exercise

    async def _complete_set(
        self,
        set_id: str,
        weight: float,
        reps: int,
        rest_seconds: int | None,
    ) -> ExerciseSet:
        workout = self._require_active()
        if rest_seconds is not None and rest_seconds <= 0:
            raise ValidationError(f"Rest duration must be positive (got {rest_seconds})")

        workout_exercise, exercise_set = workout.find_set(set_id)
        exercise_set.complete(weight, reps, at=self.clock.now())

        self.sink.emit(
            Event(
                EventKind.SET_COMPLETED,
                f"Set {exercise_set.set_number} done: {weight:g} x {reps}",
                {
                    "workout_exercise_id": workout_exercise.id,
                    "set_id": exercise_set.id,
                    "weight": weight,
                    "reps": reps,
                },
            )
        )
        if self.config.auto_start_rest_timer:
            self.timer.start(rest_seconds or self.config.default_rest_seconds)

        await self._save()
        return exercise_set

    async def _advance_active_program(self) -> Program | None:
        active = await self.store.fetch_programs(is_active=True)
        if not active:
            logger.debug("No active program to advance")
            return None
        program = active[0]
        program.advance()
        logger.info(
            "Program %s advanced, next session: %s",
            program.name,
            program.next_session.value if program.next_session else None,
        )
        return program

    def _finish(self, outcome: SessionState) -> None:
        self.state = outcome
        self.last_outcome = outcome
        self.workout = None
        self._exercises = {}
        self.selected_exercise_index = 0
        self.state = SessionState.IDLE

    def _emit_selection(self, selected: WorkoutExercise) -> None:
        exercise = self.exercise_for(selected)
        name = exercise.name if exercise else selected.exercise_id
        self.sink.emit(
            Event(
                EventKind.SELECTION_CHANGED,
                name,
                {"index": self.selected_exercise_index, "workout_exercise_id": selected.id},
            )
        )

    async def _save(self) -> None:
        try:
            await self.store.save()
        except PersistenceError as e:
            logger.error("Saving workout failed: %s", e)
            self.sink.emit(Event(EventKind.ERROR, str(e)))
            raise
