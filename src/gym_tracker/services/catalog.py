"""Exercise library management."""

import logging

from ..db.store import ObjectStore
from ..errors import NotFoundError, ValidationError
from ..models.exercises import Exercise, ExerciseCategory, MuscleGroup

logger = logging.getLogger(__name__)


class ExerciseCatalog:
    """Adds, edits, finds and deletes exercises in the library."""

    def __init__(self, store: ObjectStore):
        self.store = store

    async def list_exercises(
        self,
        category: ExerciseCategory | str | None = None,
        search: str | None = None,
    ) -> list[Exercise]:
        """List exercises by name, optionally filtered.

        Args:
            category: Only exercises of this category
            search: Case-insensitive substring of the name
        """
        exercises = await self.store.fetch_exercises()
        if category is not None:
            category = ExerciseCategory.parse(category)
            exercises = [e for e in exercises if e.category is category]
        if search:
            needle = search.strip().lower()
            exercises = [e for e in exercises if needle in e.name.lower()]
        return sorted(exercises, key=lambda e: e.name.lower())

    async def grouped_by_category(self) -> dict[ExerciseCategory, list[Exercise]]:
        """Exercises keyed by category, in category declaration order."""
        exercises = await self.list_exercises()
        grouped = {}
        for category in ExerciseCategory:
            members = [e for e in exercises if e.category is category]
            if members:
                grouped[category] = members
        return grouped

    async def find(self, id_or_name: str) -> Exercise:
        """Look an exercise up by id, or by exact name ignoring case."""
        wanted = id_or_name.strip().lower()
        for exercise in await self.store.fetch_exercises():
            if exercise.id == id_or_name or exercise.name.lower() == wanted:
                return exercise
        raise NotFoundError(f"Exercise {id_or_name!r} not found")

    async def add_exercise(
        self,
        name: str,
        category: ExerciseCategory | str,
        muscle_group: MuscleGroup | str,
        notes: str | None = None,
    ) -> Exercise:
        exercise = Exercise(
            name=self._validate_name(name),
            category=category,
            muscle_group=muscle_group,
            notes=(notes or "").strip() or None,
        )
        self.store.insert(exercise)
        await self.store.save()
        logger.info("Added exercise %s (%s)", exercise.name, exercise.category.value)
        return exercise

    async def update_exercise(
        self,
        exercise: Exercise,
        name: str | None = None,
        category: ExerciseCategory | str | None = None,
        muscle_group: MuscleGroup | str | None = None,
        notes: str | None = None,
    ) -> Exercise:
        """Edit an exercise. Arguments left as None keep their value."""
        # Validate everything before touching the exercise
        new_name = self._validate_name(name) if name is not None else exercise.name
        new_category = (
            ExerciseCategory.parse(category) if category is not None else exercise.category
        )
        new_group = (
            MuscleGroup.parse(muscle_group)
            if muscle_group is not None
            else exercise.muscle_group
        )

        exercise.name = new_name
        exercise.category = new_category
        exercise.muscle_group = new_group
        if notes is not None:
            exercise.notes = notes.strip() or None

        await self.store.save()
        return exercise

    async def delete_exercise(self, exercise: Exercise) -> None:
        """Delete an exercise and its performance history.

        Past workouts keep their reference to the exercise id.
        """
        self.store.delete(exercise)
        await self.store.save()
        logger.info("Deleted exercise %s", exercise.name)

    @staticmethod
    def _validate_name(name: str | None) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Exercise name cannot be empty")
        return name
