"""Performance aggregation: records, personal bests and progression."""

import logging
from datetime import datetime

from ..clock import Clock, SystemClock
from ..models.exercises import Exercise, PerformanceRecord
from ..models.workout import Workout, WorkoutExercise

logger = logging.getLogger(__name__)


class PerformanceAggregator:
    """Derives performance records from workouts and reads history back."""

    def __init__(self, clock: Clock | None = None):
        self.clock = clock or SystemClock()

    def derive_record(
        self, workout_exercise: WorkoutExercise, date: datetime | None = None
    ) -> PerformanceRecord | None:
        """Summarize the completed sets of one exercise in a workout.

        Only completed sets count. `max_reps` is the best rep count at the
        heaviest weight used, not the highest rep count overall.

        Returns:
            A new record, or None when no set was completed
        """
        completed = workout_exercise.completed_sets
        if not completed:
            logger.debug(
                "No completed sets for workout exercise %s, no record", workout_exercise.id
            )
            return None

        weights = [s.weight for s in completed if s.weight is not None]
        max_weight = max(weights) if weights else 0.0
        reps_at_max = [
            s.reps for s in completed if s.weight == max_weight and s.reps is not None
        ]
        max_reps = max(reps_at_max) if reps_at_max else 0

        total_volume = sum((s.weight or 0.0) * (s.reps or 0) for s in completed)

        return PerformanceRecord(
            exercise_id=workout_exercise.exercise_id,
            date=date or self.clock.now(),
            max_weight=max_weight,
            max_reps=max_reps,
            total_volume=total_volume,
            total_sets=len(completed),
        )

    def last_performance(self, exercise: Exercise) -> PerformanceRecord | None:
        return exercise.last_performance

    def personal_best(self, exercise: Exercise) -> float | None:
        """Heaviest weight across the exercise's whole history."""
        if not exercise.performance_records:
            return None
        return max(r.max_weight for r in exercise.performance_records)

    def total_volume_all_time(self, exercise: Exercise) -> float:
        return sum(r.total_volume for r in exercise.performance_records)

    def progression_percent(self, exercise: Exercise) -> float | None:
        """Change in max weight from the first to the latest record, in percent.

        None with fewer than two records, or when the first record's weight
        is zero.
        """
        records = exercise.sorted_records
        if len(records) < 2:
            return None

        first, last = records[0], records[-1]
        if first.max_weight <= 0:
            return None

        return (last.max_weight - first.max_weight) / first.max_weight * 100

    def has_progressed(
        self, exercise: Exercise, current_weight: float, current_reps: int
    ) -> bool:
        """Compare a set against the last record by weight x reps.

        A first attempt always counts as progress.
        """
        last = exercise.last_performance
        if last is None:
            return True
        return current_weight * current_reps > last.max_weight * last.max_reps

    def last_performance_in(
        self, exercise: Exercise, workouts: list[Workout]
    ) -> tuple[float, int] | None:
        """Best (weight, reps) from the most recent workout containing the exercise.

        Args:
            exercise: The exercise to look for
            workouts: Workouts ordered most recent first

        Returns:
            (max weight, reps at that weight), or None if no workout has
            completed work for the exercise
        """
        for workout in workouts:
            for workout_exercise in workout.exercises:
                if workout_exercise.exercise_id != exercise.id:
                    continue
                weight = workout_exercise.max_weight_used
                reps = workout_exercise.max_reps_at_max_weight
                if weight is not None and reps is not None:
                    return weight, reps
        return None
