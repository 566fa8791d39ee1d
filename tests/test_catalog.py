"""Tests for the exercise catalog."""

import pytest

from gym_tracker.errors import NotFoundError, ValidationError
from gym_tracker.models.exercises import ExerciseCategory, MuscleGroup
from gym_tracker.services.catalog import ExerciseCatalog


class TestExerciseCatalog:
    """Tests for ExerciseCatalog over the in-memory store."""

    @pytest.mark.asyncio
    async def test_grouped_by_category(self, store):
        grouped = await ExerciseCatalog(store).grouped_by_category()

        assert list(grouped) == [ExerciseCategory.PUSH, ExerciseCategory.PULL]
        assert [e.name for e in grouped[ExerciseCategory.PUSH]] == [
            "Bench Press",
            "Overhead Press",
        ]
        assert [e.name for e in grouped[ExerciseCategory.PULL]] == ["Barbell Row"]

    @pytest.mark.asyncio
    async def test_search_ignores_case(self, store):
        found = await ExerciseCatalog(store).list_exercises(search="PRESS")
        assert [e.name for e in found] == ["Bench Press", "Overhead Press"]

    @pytest.mark.asyncio
    async def test_update_exercise(self, store):
        catalog = ExerciseCatalog(store)
        row = await catalog.find("barbell row")

        await catalog.update_exercise(
            row, name=" Pendlay Row ", muscle_group="full body", notes="From the floor"
        )

        reloaded = await catalog.find("Pendlay Row")
        assert reloaded is row
        assert row.category is ExerciseCategory.PULL
        assert row.muscle_group is MuscleGroup.FULL_BODY
        assert row.notes == "From the floor"

    @pytest.mark.asyncio
    async def test_update_with_empty_notes_clears_them(self, store):
        catalog = ExerciseCatalog(store)
        bench = await catalog.find("Bench Press")
        bench.notes = "Pause reps"

        await catalog.update_exercise(bench, notes="  ")

        assert bench.notes is None
        assert bench.name == "Bench Press"

    @pytest.mark.asyncio
    async def test_invalid_update_changes_nothing(self, store):
        catalog = ExerciseCatalog(store)
        bench = await catalog.find("Bench Press")

        with pytest.raises(ValidationError):
            await catalog.update_exercise(bench, name="Floor Press", category="cardio")
        with pytest.raises(ValidationError):
            await catalog.update_exercise(bench, name="   ")

        assert bench.name == "Bench Press"
        assert bench.category is ExerciseCategory.PUSH

    @pytest.mark.asyncio
    async def test_find_unknown(self, store):
        with pytest.raises(NotFoundError):
            await ExerciseCatalog(store).find("Zercher Squat")
