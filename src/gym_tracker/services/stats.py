"""Weekly statistics and training streaks over a window of workouts."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from ..clock import Clock, SystemClock
from ..models.exercises import ExerciseCategory
from ..models.program import Program
from ..models.workout import Workout
from .rotation import SuggestionEngine


def start_of_week(day: date) -> datetime:
    """Midnight on the Monday of the week containing `day`."""
    monday = day - timedelta(days=day.weekday())
    return datetime.combine(monday, time.min)


@dataclass
class WeeklySummary:
    """Numbers shown on the home screen."""

    suggested_session: ExerciseCategory | None
    workouts_this_week: int
    volume_this_week: float
    sets_this_week: int
    current_streak: int
    days_since_last_workout: int | None

    def to_dict(self) -> dict:
        return {
            "suggested_session": (
                self.suggested_session.value if self.suggested_session else None
            ),
            "workouts_this_week": self.workouts_this_week,
            "volume_this_week": self.volume_this_week,
            "sets_this_week": self.sets_this_week,
            "current_streak": self.current_streak,
            "days_since_last_workout": self.days_since_last_workout,
        }


class SessionStatistics:
    """Computes statistics from a caller-supplied list of workouts."""

    def __init__(
        self,
        clock: Clock | None = None,
        suggestion_engine: SuggestionEngine | None = None,
    ):
        self.clock = clock or SystemClock()
        self.suggestion_engine = suggestion_engine or SuggestionEngine()

    def _this_week(self, workouts: list[Workout]) -> list[Workout]:
        week_start = start_of_week(self.clock.now().date())
        return [w for w in workouts if w.is_completed and w.date >= week_start]

    def workouts_this_week(self, workouts: list[Workout]) -> int:
        return len(self._this_week(workouts))

    def volume_this_week(self, workouts: list[Workout]) -> float:
        return sum(w.total_volume for w in self._this_week(workouts))

    def sets_this_week(self, workouts: list[Workout]) -> int:
        return sum(w.total_sets for w in self._this_week(workouts))

    def current_streak(self, workouts: list[Workout]) -> int:
        """Consecutive training days ending today, or yesterday.

        A day without a workout only breaks the streak once it has fully
        elapsed, so the walk starts from yesterday when today is empty.
        """
        days = {w.date.date() for w in workouts if w.is_completed}
        if not days:
            return 0

        day = self.clock.now().date()
        if day not in days:
            day -= timedelta(days=1)

        streak = 0
        while day in days:
            streak += 1
            day -= timedelta(days=1)
        return streak

    def last_workout(self, workouts: list[Workout]) -> Workout | None:
        completed = [w for w in workouts if w.is_completed]
        if not completed:
            return None
        return max(completed, key=lambda w: w.date)

    def days_since_last_workout(self, workouts: list[Workout]) -> int | None:
        last = self.last_workout(workouts)
        if last is None:
            return None
        return (self.clock.now().date() - last.date.date()).days

    def summarize(
        self, workouts: list[Workout], active_program: Program | None = None
    ) -> WeeklySummary:
        return WeeklySummary(
            suggested_session=self.suggestion_engine.suggest_next_session(
                active_program, workouts
            ),
            workouts_this_week=self.workouts_this_week(workouts),
            volume_this_week=self.volume_this_week(workouts),
            sets_this_week=self.sets_this_week(workouts),
            current_streak=self.current_streak(workouts),
            days_since_last_workout=self.days_since_last_workout(workouts),
        )
