"""Workout session models: workouts, exercises within them, and sets."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum

from ..errors import NotFoundError, ValidationError
from .exercises import Exercise, ExerciseCategory, new_id


class RestDuration(IntEnum):
    """Preset rest lengths between sets, in seconds."""

    THIRTY = 30
    SIXTY = 60
    NINETY = 90
    TWO_MINUTES = 120
    THREE_MINUTES = 180

    @property
    def label(self) -> str:
        minutes, seconds = divmod(self.value, 60)
        if not minutes:
            return f"{seconds}s"
        if not seconds:
            return f"{minutes}min"
        return f"{minutes}min{seconds:02d}"


def _check_non_negative(weight: float | None, reps: int | None) -> None:
    if weight is not None and weight < 0:
        raise ValidationError(f"Weight cannot be negative (got {weight})")
    if reps is not None and reps < 0:
        raise ValidationError(f"Reps cannot be negative (got {reps})")


@dataclass
class ExerciseSet:
    """One set of an exercise within a workout.

    A completed set always carries both weight and reps; an uncompleted set
    never carries a completion timestamp.
    """

    set_number: int
    weight: float | None = None
    reps: int | None = None
    is_completed: bool = False
    completed_at: datetime | None = None
    is_warmup: bool = False
    id: str = field(default_factory=new_id)

    @property
    def volume(self) -> float:
        """Weight x reps, or 0 while either is unknown."""
        if self.weight is None or self.reps is None:
            return 0.0
        return self.weight * self.reps

    @property
    def short_label(self) -> str:
        return "W" if self.is_warmup else str(self.set_number)

    def complete(self, weight: float, reps: int, at: datetime | None = None) -> None:
        """Record weight and reps and mark the set done."""
        if weight is None or reps is None:
            raise ValidationError("A completed set needs both weight and reps")
        _check_non_negative(weight, reps)
        self.weight = weight
        self.reps = reps
        self.is_completed = True
        self.completed_at = at or datetime.now()

    def uncomplete(self) -> None:
        """Mark the set not done, keeping the entered values for re-editing."""
        self.is_completed = False
        self.completed_at = None

    def update(self, weight: float | None, reps: int | None) -> None:
        """Change the values without touching the completion state."""
        _check_non_negative(weight, reps)
        if self.is_completed and (weight is None or reps is None):
            raise ValidationError("A completed set needs both weight and reps")
        self.weight = weight
        self.reps = reps

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "set_number": self.set_number,
            "weight": self.weight,
            "reps": self.reps,
            "is_completed": self.is_completed,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "is_warmup": self.is_warmup,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ExerciseSet":
        """Create from dictionary."""
        completed_at = None
        if data.get("completed_at"):
            completed_at = datetime.fromisoformat(data["completed_at"])

        return cls(
            id=data.get("id") or new_id(),
            set_number=int(data["set_number"]),
            weight=data.get("weight"),
            reps=data.get("reps"),
            is_completed=bool(data.get("is_completed", False)),
            completed_at=completed_at,
            is_warmup=bool(data.get("is_warmup", False)),
        )


@dataclass
class WorkoutExercise:
    """An exercise as performed in one workout."""

    exercise_id: str
    order: int = 0
    workout_id: str | None = None
    last_weight: float | None = None
    last_reps: int | None = None
    notes: str | None = None
    sets: list[ExerciseSet] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    @property
    def sorted_sets(self) -> list[ExerciseSet]:
        return sorted(self.sets, key=lambda s: s.set_number)

    @property
    def completed_sets(self) -> list[ExerciseSet]:
        return [s for s in self.sets if s.is_completed]

    @property
    def completed_sets_count(self) -> int:
        return len(self.completed_sets)

    @property
    def total_sets_count(self) -> int:
        return len(self.sets)

    @property
    def total_volume(self) -> float:
        """Volume over completed sets only."""
        return sum(s.volume for s in self.completed_sets)

    @property
    def max_weight_used(self) -> float | None:
        weights = [s.weight for s in self.completed_sets if s.weight is not None]
        return max(weights) if weights else None

    @property
    def max_reps_at_max_weight(self) -> int | None:
        """Best reps among completed sets at the heaviest weight used."""
        max_weight = self.max_weight_used
        if max_weight is None:
            return None
        reps = [
            s.reps
            for s in self.completed_sets
            if s.weight == max_weight and s.reps is not None
        ]
        return max(reps) if reps else None

    @property
    def is_fully_completed(self) -> bool:
        return bool(self.sets) and all(s.is_completed for s in self.sets)

    @property
    def last_time_display(self) -> str | None:
        if self.last_weight is None or self.last_reps is None:
            return None
        return f"{self.last_weight:g}kg x {self.last_reps}"

    def add_set(self, is_warmup: bool = False) -> ExerciseSet:
        """Append a set numbered after the existing ones."""
        new_set = ExerciseSet(set_number=len(self.sets) + 1, is_warmup=is_warmup)
        self.sets.append(new_set)
        return new_set

    def add_sets(self, count: int, is_warmup: bool = False) -> list[ExerciseSet]:
        return [self.add_set(is_warmup=is_warmup) for _ in range(count)]

    def get_set(self, set_id: str) -> ExerciseSet:
        for s in self.sets:
            if s.id == set_id:
                return s
        raise NotFoundError(f"Set {set_id} not found")

    def remove_set(self, set_id: str) -> ExerciseSet:
        """Remove a set and renumber the remaining ones 1..N."""
        removed = self.get_set(set_id)
        self.sets = [s for s in self.sets if s.id != set_id]
        self.sets.sort(key=lambda s: s.set_number)
        for number, s in enumerate(self.sets, start=1):
            s.set_number = number
        return removed

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "exercise_id": self.exercise_id,
            "order": self.order,
            "workout_id": self.workout_id,
            "last_weight": self.last_weight,
            "last_reps": self.last_reps,
            "notes": self.notes,
            "sets": [s.to_dict() for s in self.sets],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkoutExercise":
        """Create from dictionary."""
        return cls(
            id=data.get("id") or new_id(),
            exercise_id=data["exercise_id"],
            order=int(data.get("order", 0)),
            workout_id=data.get("workout_id"),
            last_weight=data.get("last_weight"),
            last_reps=data.get("last_reps"),
            notes=data.get("notes"),
            sets=[ExerciseSet.from_dict(s) for s in data.get("sets", [])],
        )


@dataclass
class Workout:
    """A training session and everything done in it."""

    session_type: ExerciseCategory
    date: datetime = field(default_factory=datetime.now)
    start_time: datetime | None = None
    end_time: datetime | None = None
    is_completed: bool = False
    notes: str | None = None
    exercises: list[WorkoutExercise] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        self.session_type = ExerciseCategory.parse(self.session_type)
        if self.start_time is None:
            self.start_time = self.date

    @property
    def sorted_exercises(self) -> list[WorkoutExercise]:
        return sorted(self.exercises, key=lambda e: e.order)

    @property
    def exercise_count(self) -> int:
        return len(self.exercises)

    @property
    def total_volume(self) -> float:
        return sum(e.total_volume for e in self.exercises)

    @property
    def total_sets(self) -> int:
        """Number of completed sets across all exercises."""
        return sum(e.completed_sets_count for e in self.exercises)

    @property
    def planned_sets(self) -> int:
        return sum(e.total_sets_count for e in self.exercises)

    @property
    def progress(self) -> float:
        """Fraction of all sets that are completed (0 with no sets)."""
        planned = self.planned_sets
        if planned == 0:
            return 0.0
        return self.total_sets / planned

    def duration_minutes(self, now: datetime | None = None) -> int:
        """Whole minutes from start to end, or to `now` while running."""
        end = self.end_time or now or datetime.now()
        return int((end - self.start_time).total_seconds() // 60)

    def add_exercise(
        self,
        exercise: Exercise,
        last_weight: float | None = None,
        last_reps: int | None = None,
    ) -> WorkoutExercise:
        """Append an exercise after the current last one."""
        order = max((e.order for e in self.exercises), default=-1) + 1
        workout_exercise = WorkoutExercise(
            exercise_id=exercise.id,
            order=order,
            workout_id=self.id,
            last_weight=last_weight,
            last_reps=last_reps,
        )
        self.exercises.append(workout_exercise)
        return workout_exercise

    def get_exercise(self, workout_exercise_id: str) -> WorkoutExercise:
        for e in self.exercises:
            if e.id == workout_exercise_id:
                return e
        raise NotFoundError(f"Workout exercise {workout_exercise_id} not found")

    def remove_exercise(self, workout_exercise_id: str) -> WorkoutExercise:
        removed = self.get_exercise(workout_exercise_id)
        self.exercises = [e for e in self.exercises if e.id != workout_exercise_id]
        return removed

    def find_set(self, set_id: str) -> tuple[WorkoutExercise, ExerciseSet]:
        """Locate a set anywhere in the workout."""
        for e in self.exercises:
            for s in e.sets:
                if s.id == set_id:
                    return e, s
        raise NotFoundError(f"Set {set_id} not found")

    def complete(self, at: datetime | None = None) -> None:
        self.end_time = at or datetime.now()
        self.is_completed = True

    def cancel(self, at: datetime | None = None) -> None:
        self.end_time = at or datetime.now()
        self.is_completed = False

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "session_type": self.session_type.value,
            "date": self.date.isoformat(),
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "is_completed": self.is_completed,
            "notes": self.notes,
            "exercises": [e.to_dict() for e in self.exercises],
        }

    @classmethod
    def from_dict(cls, data: dict, id: str | None = None) -> "Workout":
        """Create from dictionary."""
        end_time = None
        if data.get("end_time"):
            end_time = datetime.fromisoformat(data["end_time"])

        date = datetime.fromisoformat(data["date"])
        start_time = date
        if data.get("start_time"):
            start_time = datetime.fromisoformat(data["start_time"])

        return cls(
            id=id or data.get("id") or new_id(),
            session_type=ExerciseCategory.parse(data["session_type"]),
            date=date,
            start_time=start_time,
            end_time=end_time,
            is_completed=bool(data.get("is_completed", False)),
            notes=data.get("notes"),
            exercises=[WorkoutExercise.from_dict(e) for e in data.get("exercises", [])],
        )
