"""Exercise definitions and performance history."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import uuid4

from ..errors import ValidationError


def new_id() -> str:
    """Generate a fresh entity identifier."""
    return uuid4().hex


class ExerciseCategory(str, Enum):
    """Training focus of an exercise or a whole session."""

    PUSH = "push"
    PULL = "pull"
    LEGS = "legs"
    JJB = "jjb"
    MOBILITY = "mobility"

    @property
    def display_name(self) -> str:
        if self is ExerciseCategory.JJB:
            return "JJB"
        return self.value.capitalize()

    @classmethod
    def parse(cls, value: "str | ExerciseCategory") -> "ExerciseCategory":
        """Coerce a raw value, raising ValidationError for unknown ones."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(c.value for c in cls)
            raise ValidationError(
                f"Unknown category {value!r} (expected one of: {choices})"
            ) from None


class MuscleGroup(str, Enum):
    """Muscle groups targeted by exercises."""

    CHEST = "chest"
    BACK = "back"
    SHOULDERS = "shoulders"
    BICEPS = "biceps"
    TRICEPS = "triceps"
    QUADRICEPS = "quadriceps"
    HAMSTRINGS = "hamstrings"
    GLUTES = "glutes"
    CALVES = "calves"
    CORE = "core"
    FULL_BODY = "full_body"

    @classmethod
    def parse(cls, value: "str | MuscleGroup") -> "MuscleGroup":
        """Coerce a raw value, raising ValidationError for unknown ones."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower().replace(" ", "_"))
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            raise ValidationError(
                f"Unknown muscle group {value!r} (expected one of: {choices})"
            ) from None

    @classmethod
    def groups_for(cls, category: ExerciseCategory) -> list["MuscleGroup"]:
        """Muscle groups usually trained in a session category."""
        return list(CATEGORY_MUSCLE_GROUPS[category])


CATEGORY_MUSCLE_GROUPS = {
    ExerciseCategory.PUSH: (MuscleGroup.CHEST, MuscleGroup.SHOULDERS, MuscleGroup.TRICEPS),
    ExerciseCategory.PULL: (MuscleGroup.BACK, MuscleGroup.BICEPS),
    ExerciseCategory.LEGS: (
        MuscleGroup.QUADRICEPS,
        MuscleGroup.HAMSTRINGS,
        MuscleGroup.GLUTES,
        MuscleGroup.CALVES,
    ),
    ExerciseCategory.JJB: (MuscleGroup.FULL_BODY, MuscleGroup.CORE),
    ExerciseCategory.MOBILITY: (MuscleGroup.FULL_BODY, MuscleGroup.CORE),
}


@dataclass(frozen=True)
class PerformanceRecord:
    """Aggregated result of one exercise in one completed workout.

    Records are append-only history: they are created once, when the
    workout is completed, and never edited afterwards.
    """

    exercise_id: str
    date: datetime
    max_weight: float
    max_reps: int
    total_volume: float
    total_sets: int
    id: str = field(default_factory=new_id)

    @property
    def average_volume_per_set(self) -> float:
        if self.total_sets <= 0:
            return 0.0
        return self.total_volume / self.total_sets

    @property
    def best_set(self) -> tuple[float, int]:
        """The heaviest set as (weight, reps)."""
        return self.max_weight, self.max_reps

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "exercise_id": self.exercise_id,
            "date": self.date.isoformat(),
            "max_weight": self.max_weight,
            "max_reps": self.max_reps,
            "total_volume": self.total_volume,
            "total_sets": self.total_sets,
        }

    @classmethod
    def from_dict(cls, data: dict, id: str | None = None) -> "PerformanceRecord":
        """Create from dictionary."""
        return cls(
            id=id or data.get("id") or new_id(),
            exercise_id=data["exercise_id"],
            date=datetime.fromisoformat(data["date"]),
            max_weight=float(data["max_weight"]),
            max_reps=int(data["max_reps"]),
            total_volume=float(data["total_volume"]),
            total_sets=int(data["total_sets"]),
        )


@dataclass
class Exercise:
    """An exercise in the user's library, with its performance history."""

    name: str
    category: ExerciseCategory
    muscle_group: MuscleGroup
    notes: str | None = None
    performance_records: list[PerformanceRecord] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        self.category = ExerciseCategory.parse(self.category)
        self.muscle_group = MuscleGroup.parse(self.muscle_group)

    @property
    def sorted_records(self) -> list[PerformanceRecord]:
        """History ordered oldest first."""
        return sorted(self.performance_records, key=lambda r: r.date)

    @property
    def last_performance(self) -> PerformanceRecord | None:
        """The most recent performance record, if any."""
        if not self.performance_records:
            return None
        return max(self.performance_records, key=lambda r: r.date)

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "name": self.name,
            "category": self.category.value,
            "muscle_group": self.muscle_group.value,
            "notes": self.notes,
            "created_at": self.created_at.isoformat(),
            "performance_records": [r.to_dict() for r in self.performance_records],
        }

    @classmethod
    def from_dict(cls, data: dict, id: str | None = None) -> "Exercise":
        """Create from dictionary."""
        created_at = datetime.now()
        if data.get("created_at"):
            created_at = datetime.fromisoformat(data["created_at"])

        exercise_id = id or data.get("id") or new_id()
        records = []
        for record in data.get("performance_records", []):
            records.append(
                PerformanceRecord.from_dict({**record, "exercise_id": exercise_id})
            )

        return cls(
            id=exercise_id,
            name=data["name"],
            category=ExerciseCategory.parse(data["category"]),
            muscle_group=MuscleGroup.parse(data["muscle_group"]),
            notes=data.get("notes"),
            performance_records=records,
            created_at=created_at,
        )


# Starter library loaded by `gym-tracker init`
DEFAULT_EXERCISES: list[Exercise] = [
    # Push
    Exercise("Bench Press", ExerciseCategory.PUSH, MuscleGroup.CHEST),
    Exercise("Incline Dumbbell Press", ExerciseCategory.PUSH, MuscleGroup.CHEST),
    Exercise("Overhead Press", ExerciseCategory.PUSH, MuscleGroup.SHOULDERS),
    Exercise("Lateral Raise", ExerciseCategory.PUSH, MuscleGroup.SHOULDERS),
    Exercise("Tricep Pushdown", ExerciseCategory.PUSH, MuscleGroup.TRICEPS),
    # Pull
    Exercise("Pull Up", ExerciseCategory.PULL, MuscleGroup.BACK),
    Exercise("Barbell Row", ExerciseCategory.PULL, MuscleGroup.BACK),
    Exercise("Lat Pulldown", ExerciseCategory.PULL, MuscleGroup.BACK),
    Exercise("Barbell Curl", ExerciseCategory.PULL, MuscleGroup.BICEPS),
    # Legs
    Exercise("Squat", ExerciseCategory.LEGS, MuscleGroup.QUADRICEPS),
    Exercise("Romanian Deadlift", ExerciseCategory.LEGS, MuscleGroup.HAMSTRINGS),
    Exercise("Hip Thrust", ExerciseCategory.LEGS, MuscleGroup.GLUTES),
    Exercise("Standing Calf Raise", ExerciseCategory.LEGS, MuscleGroup.CALVES),
    # JJB
    Exercise("Kettlebell Swing", ExerciseCategory.JJB, MuscleGroup.FULL_BODY),
    Exercise("Turkish Get Up", ExerciseCategory.JJB, MuscleGroup.CORE),
    # Mobility
    Exercise("Hip Opener Flow", ExerciseCategory.MOBILITY, MuscleGroup.FULL_BODY),
    Exercise("Dead Bug", ExerciseCategory.MOBILITY, MuscleGroup.CORE),
]
