"""Tests for the object stores."""

from datetime import datetime

import aiosqlite
import pytest

from gym_tracker.clock import ManualClock
from gym_tracker.db import InMemoryStore, SQLiteStore, init_db, seed_exercises
from gym_tracker.errors import NotFoundError, PersistenceError, ValidationError
from gym_tracker.events import EventLog
from gym_tracker.models.exercises import (
    DEFAULT_EXERCISES,
    Exercise,
    ExerciseCategory,
    MuscleGroup,
    PerformanceRecord,
)
from gym_tracker.models.program import Program
from gym_tracker.models.workout import Workout
from gym_tracker.services.catalog import ExerciseCatalog
from gym_tracker.services.rotation import ProgramManager
from gym_tracker.services.session import WorkoutSession
from gym_tracker.services.timer import RestTimer


def _bench():
    return Exercise("Bench Press", ExerciseCategory.PUSH, MuscleGroup.CHEST)


class TestInMemoryStore:
    """Tests for InMemoryStore."""

    @pytest.mark.asyncio
    async def test_changes_apply_on_save(self):
        store = InMemoryStore()
        store.insert(_bench())

        assert store.has_changes
        assert await store.fetch_exercises() == []

        await store.save()
        assert len(await store.fetch_exercises()) == 1
        assert not store.has_changes

    @pytest.mark.asyncio
    async def test_record_is_appended_to_owner(self):
        store = InMemoryStore()
        bench = _bench()
        store.insert(bench)
        store.insert(PerformanceRecord(bench.id, datetime(2024, 3, 1), 60, 10, 600, 1))
        await store.save()

        assert len(bench.performance_records) == 1

    @pytest.mark.asyncio
    async def test_record_without_owner(self):
        store = InMemoryStore()
        store.insert(PerformanceRecord("missing", datetime(2024, 3, 1), 60, 10, 600, 1))
        with pytest.raises(NotFoundError):
            await store.save()
        assert store.has_changes

    def test_records_cannot_be_deleted(self):
        with pytest.raises(ValidationError):
            InMemoryStore().delete(PerformanceRecord("x", datetime(2024, 3, 1), 60, 10, 600, 1))

    def test_unknown_entity(self):
        with pytest.raises(ValidationError):
            InMemoryStore().insert("not an entity")

    @pytest.mark.asyncio
    async def test_workout_filters(self):
        store = InMemoryStore()
        done = Workout(ExerciseCategory.PUSH, date=datetime(2024, 3, 10))
        done.complete()
        open_workout = Workout(ExerciseCategory.PULL, date=datetime(2024, 3, 12))
        store.insert(done)
        store.insert(open_workout)
        await store.save()

        assert await store.fetch_workouts() == [open_workout, done]
        assert await store.fetch_workouts(completed=True) == [done]
        assert await store.fetch_workouts(start=datetime(2024, 3, 11)) == [open_workout]
        assert await store.fetch_workouts(end=datetime(2024, 3, 11)) == [done]


class TestSQLiteStore:
    """Tests for SQLiteStore on a temporary database."""

    @pytest.mark.asyncio
    async def test_exercise_round_trip(self, temp_db_path):
        await init_db(temp_db_path)
        store = SQLiteStore(temp_db_path)
        bench = _bench()
        bench.notes = "Pause reps"
        store.insert(bench)
        await store.save()

        loaded = await SQLiteStore(temp_db_path).fetch_exercises()

        assert len(loaded) == 1
        assert loaded[0].id == bench.id
        assert loaded[0].notes == "Pause reps"
        assert loaded[0].muscle_group is MuscleGroup.CHEST

    @pytest.mark.asyncio
    async def test_tracked_edits_are_saved(self, temp_db_path):
        await init_db(temp_db_path)
        store = SQLiteStore(temp_db_path)
        store.insert(Program("PPL", ["push", "pull", "legs"], is_active=True))
        await store.save()

        program = (await store.fetch_programs())[0]
        program.advance()
        await store.save()

        reloaded = (await SQLiteStore(temp_db_path).fetch_programs(is_active=True))[0]
        assert reloaded.current_session_index == 1
        assert reloaded.session_order[2] is ExerciseCategory.LEGS

    @pytest.mark.asyncio
    async def test_only_edited_aggregates_are_written(self, temp_db_path):
        await init_db(temp_db_path)
        old = Workout(ExerciseCategory.PUSH, date=datetime(2024, 3, 1), is_completed=True)
        recent = Workout(ExerciseCategory.PULL, date=datetime(2024, 3, 4), is_completed=True)
        seeding = SQLiteStore(temp_db_path)
        seeding.insert(old)
        seeding.insert(recent)
        await seeding.save()

        store = SQLiteStore(temp_db_path)
        written = []
        write = store.workouts.write

        async def counting_write(db, workout):
            written.append(workout.id)
            await write(db, workout)

        store.workouts.write = counting_write
        loaded = {w.id: w for w in await store.fetch_workouts()}

        await store.save()
        assert written == []

        loaded[recent.id].notes = "Felt strong"
        await store.save()
        assert written == [recent.id]

        await store.save()
        assert written == [recent.id]

        reloaded = {w.id: w for w in await SQLiteStore(temp_db_path).fetch_workouts()}
        assert reloaded[recent.id].notes == "Felt strong"
        assert reloaded[old.id].notes is None

    @pytest.mark.asyncio
    async def test_identity_map(self, temp_db_path):
        await init_db(temp_db_path)
        store = SQLiteStore(temp_db_path)
        store.insert(_bench())
        await store.save()

        first = await store.fetch_exercises()
        second = await store.fetch_exercises()
        assert first[0] is second[0]

    @pytest.mark.asyncio
    async def test_delete_exercise_removes_history(self, temp_db_path):
        await init_db(temp_db_path)
        store = SQLiteStore(temp_db_path)
        bench = _bench()
        store.insert(bench)
        store.insert(PerformanceRecord(bench.id, datetime(2024, 3, 1), 60, 10, 600, 1))
        await store.save()

        store.delete(bench)
        await store.save()

        assert await store.fetch_exercises() == []
        async with aiosqlite.connect(temp_db_path) as db:
            cursor = await db.execute("SELECT COUNT(*) FROM performance_records")
            assert (await cursor.fetchone())[0] == 0

    @pytest.mark.asyncio
    async def test_missing_schema_raises_persistence_error(self, temp_db_path):
        store = SQLiteStore(temp_db_path)
        with pytest.raises(PersistenceError):
            await store.fetch_exercises()

        store.insert(_bench())
        with pytest.raises(PersistenceError):
            await store.save()
        assert store.has_changes

    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, temp_db_path):
        await init_db(temp_db_path)

        assert await seed_exercises(temp_db_path) == len(DEFAULT_EXERCISES)
        assert await seed_exercises(temp_db_path) == 0

        catalog = ExerciseCatalog(SQLiteStore(temp_db_path))
        assert len(await catalog.list_exercises()) == len(DEFAULT_EXERCISES)


class TestSQLiteWorkflow:
    """A full workout against the SQLite store, reloaded from disk."""

    @pytest.mark.asyncio
    async def test_workout_survives_restart(self, temp_db_path):
        await init_db(temp_db_path)
        await seed_exercises(temp_db_path)
        clock = ManualClock(datetime(2024, 3, 13, 18, 0))

        store = SQLiteStore(temp_db_path)
        await ProgramManager(store).add_program("PPL", ["push", "pull", "legs"])
        session = WorkoutSession(store, clock=clock, timer=RestTimer(auto_tick=False))
        workout = await session.start_workout("push")
        bench_row = next(
            we for we in workout.sorted_exercises
            if session.exercise_for(we).name == "Bench Press"
        )
        for exercise_set, (weight, reps) in zip(
            bench_row.sorted_sets, [(80, 10), (82.5, 8), (80, 10)]
        ):
            await session.complete_set(exercise_set.id, weight, reps)

        # A second process picks the workout up and finishes it
        clock.advance(minutes=50)
        store = SQLiteStore(temp_db_path)
        resumed = WorkoutSession(store, clock=clock, sink=EventLog(), timer=RestTimer(auto_tick=False))
        loaded = await resumed.load_active_workout()
        assert loaded.id == workout.id
        assert loaded.total_sets == 3
        assert resumed.duration_minutes == 50

        records = await resumed.complete_workout()
        assert len(records) == 1

        store = SQLiteStore(temp_db_path)
        bench = await ExerciseCatalog(store).find("bench press")
        assert bench.last_performance.max_weight == 82.5
        assert bench.last_performance.total_volume == 2260

        program = (await store.fetch_programs(is_active=True))[0]
        assert program.next_session is ExerciseCategory.PULL

        finished = await store.fetch_workouts(completed=True)
        assert [w.id for w in finished] == [workout.id]
        assert finished[0].end_time == clock.now()

    @pytest.mark.asyncio
    async def test_cancelled_workout_is_deleted(self, temp_db_path):
        await init_db(temp_db_path)
        await seed_exercises(temp_db_path)
        store = SQLiteStore(temp_db_path)
        session = WorkoutSession(store, timer=RestTimer(auto_tick=False))
        await session.start_workout("legs")

        await session.cancel_workout()

        assert await SQLiteStore(temp_db_path).fetch_workouts() == []
        async with aiosqlite.connect(temp_db_path) as db:
            cursor = await db.execute("SELECT COUNT(*) FROM exercise_sets")
            assert (await cursor.fetchone())[0] == 0
