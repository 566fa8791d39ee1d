"""Data access layer for gym-tracker.

Reads open their own connection; writes take the connection of the
surrounding unit of work so that one `save()` is one transaction.
"""

import json
from datetime import datetime
from pathlib import Path

import aiosqlite

from ..models.exercises import Exercise, PerformanceRecord
from ..models.program import Program
from ..models.workout import ExerciseSet, Workout, WorkoutExercise
from .engine import get_db_path


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class ExerciseRepository:
    """Repository for the exercise library and its performance history."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def list_all(self) -> list[Exercise]:
        """List all exercises sorted by name, with their records."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM exercises ORDER BY name COLLATE NOCASE"
            )
            rows = await cursor.fetchall()

            cursor = await db.execute(
                "SELECT * FROM performance_records ORDER BY date"
            )
            records: dict[str, list[dict]] = {}
            for row in await cursor.fetchall():
                records.setdefault(row["exercise_id"], []).append(
                    self._row_to_record_dict(row)
                )

            return [self._row_to_exercise(row, records.get(row["id"], [])) for row in rows]

    async def write(self, db: aiosqlite.Connection, exercise: Exercise) -> None:
        """Insert or update an exercise and append any new records."""
        await db.execute(
            """
            INSERT INTO exercises (id, name, category, muscle_group, notes, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                name = excluded.name, category = excluded.category,
                muscle_group = excluded.muscle_group, notes = excluded.notes
            """,
            (
                exercise.id,
                exercise.name,
                exercise.category.value,
                exercise.muscle_group.value,
                exercise.notes,
                exercise.created_at.isoformat(),
            ),
        )
        for record in exercise.performance_records:
            await self.insert_record(db, record)

    async def insert_record(
        self, db: aiosqlite.Connection, record: PerformanceRecord
    ) -> None:
        """Append a performance record; existing records are never rewritten."""
        await db.execute(
            """
            INSERT OR IGNORE INTO performance_records
            (id, exercise_id, date, max_weight, max_reps, total_volume, total_sets)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.id,
                record.exercise_id,
                record.date.isoformat(),
                record.max_weight,
                record.max_reps,
                record.total_volume,
                record.total_sets,
            ),
        )

    async def delete(self, db: aiosqlite.Connection, exercise_id: str) -> None:
        """Delete an exercise together with its performance history."""
        await db.execute(
            "DELETE FROM performance_records WHERE exercise_id = ?", (exercise_id,)
        )
        await db.execute("DELETE FROM exercises WHERE id = ?", (exercise_id,))

    def _row_to_record_dict(self, row: aiosqlite.Row) -> dict:
        return {
            "id": row["id"],
            "exercise_id": row["exercise_id"],
            "date": row["date"],
            "max_weight": row["max_weight"],
            "max_reps": row["max_reps"],
            "total_volume": row["total_volume"],
            "total_sets": row["total_sets"],
        }

    def _row_to_exercise(self, row: aiosqlite.Row, records: list[dict]) -> Exercise:
        """Convert a database row to an Exercise."""
        data = {
            "name": row["name"],
            "category": row["category"],
            "muscle_group": row["muscle_group"],
            "notes": row["notes"],
            "created_at": row["created_at"],
            "performance_records": records,
        }
        return Exercise.from_dict(data, id=row["id"])


class ProgramRepository:
    """Repository for programs."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def list_all(self, is_active: bool | None = None) -> list[Program]:
        """List programs sorted by name, optionally filtered by the active flag."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            if is_active is None:
                cursor = await db.execute(
                    "SELECT * FROM programs ORDER BY name COLLATE NOCASE"
                )
            else:
                cursor = await db.execute(
                    "SELECT * FROM programs WHERE is_active = ? ORDER BY name COLLATE NOCASE",
                    (int(is_active),),
                )
            rows = await cursor.fetchall()
            return [self._row_to_program(row) for row in rows]

    async def write(self, db: aiosqlite.Connection, program: Program) -> None:
        """Insert or update a program."""
        data = program.to_dict()
        await db.execute(
            """
            INSERT INTO programs
            (id, name, session_order, is_active, current_session_index, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                name = excluded.name, session_order = excluded.session_order,
                is_active = excluded.is_active,
                current_session_index = excluded.current_session_index
            """,
            (
                program.id,
                data["name"],
                json.dumps(data["session_order"]),
                int(data["is_active"]),
                data["current_session_index"],
                data["created_at"],
            ),
        )

    async def delete(self, db: aiosqlite.Connection, program_id: str) -> None:
        """Delete a program."""
        await db.execute("DELETE FROM programs WHERE id = ?", (program_id,))

    def _row_to_program(self, row: aiosqlite.Row) -> Program:
        """Convert a database row to a Program."""
        data = {
            "name": row["name"],
            "session_order": json.loads(row["session_order"]),
            "is_active": bool(row["is_active"]),
            "current_session_index": row["current_session_index"],
            "created_at": row["created_at"],
        }
        return Program.from_dict(data, id=row["id"])


class WorkoutRepository:
    """Repository for workouts, their exercises and sets."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def list_workouts(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        completed: bool | None = None,
    ) -> list[Workout]:
        """List workouts, most recent first.

        Args:
            start: Only workouts on or after this time
            end: Only workouts before this time
            completed: Filter on the completed flag when given
        """
        clauses = []
        params: list = []
        if start is not None:
            clauses.append("date >= ?")
            params.append(start.isoformat())
        if end is not None:
            clauses.append("date < ?")
            params.append(end.isoformat())
        if completed is not None:
            clauses.append("is_completed = ?")
            params.append(int(completed))

        query = "SELECT * FROM workouts"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY date DESC"

        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(query, params)
            rows = await cursor.fetchall()
            return [await self._load_workout(db, row) for row in rows]

    async def write(self, db: aiosqlite.Connection, workout: Workout) -> None:
        """Insert or update a workout and rewrite its children."""
        await db.execute(
            """
            INSERT INTO workouts
            (id, session_type, date, start_time, end_time, is_completed, notes)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                session_type = excluded.session_type, date = excluded.date,
                start_time = excluded.start_time, end_time = excluded.end_time,
                is_completed = excluded.is_completed, notes = excluded.notes
            """,
            (
                workout.id,
                workout.session_type.value,
                workout.date.isoformat(),
                workout.start_time.isoformat(),
                _iso(workout.end_time),
                int(workout.is_completed),
                workout.notes,
            ),
        )

        await self._delete_children(db, workout.id)
        for workout_exercise in workout.exercises:
            await db.execute(
                """
                INSERT INTO workout_exercises
                (id, workout_id, exercise_id, position, last_weight, last_reps, notes)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    workout_exercise.id,
                    workout.id,
                    workout_exercise.exercise_id,
                    workout_exercise.order,
                    workout_exercise.last_weight,
                    workout_exercise.last_reps,
                    workout_exercise.notes,
                ),
            )
            for exercise_set in workout_exercise.sets:
                await db.execute(
                    """
                    INSERT INTO exercise_sets
                    (id, workout_exercise_id, set_number, weight, reps,
                     is_completed, completed_at, is_warmup)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        exercise_set.id,
                        workout_exercise.id,
                        exercise_set.set_number,
                        exercise_set.weight,
                        exercise_set.reps,
                        int(exercise_set.is_completed),
                        _iso(exercise_set.completed_at),
                        int(exercise_set.is_warmup),
                    ),
                )

    async def delete(self, db: aiosqlite.Connection, workout_id: str) -> None:
        """Delete a workout and everything it owns."""
        await self._delete_children(db, workout_id)
        await db.execute("DELETE FROM workouts WHERE id = ?", (workout_id,))

    async def _delete_children(self, db: aiosqlite.Connection, workout_id: str) -> None:
        cursor = await db.execute(
            "SELECT id FROM workout_exercises WHERE workout_id = ?", (workout_id,)
        )
        for row in await cursor.fetchall():
            await db.execute(
                "DELETE FROM exercise_sets WHERE workout_exercise_id = ?", (row[0],)
            )
        await db.execute(
            "DELETE FROM workout_exercises WHERE workout_id = ?", (workout_id,)
        )

    async def _load_workout(self, db: aiosqlite.Connection, row: aiosqlite.Row) -> Workout:
        cursor = await db.execute(
            "SELECT * FROM workout_exercises WHERE workout_id = ? ORDER BY position",
            (row["id"],),
        )
        exercises = []
        for exercise_row in await cursor.fetchall():
            set_cursor = await db.execute(
                "SELECT * FROM exercise_sets WHERE workout_exercise_id = ? ORDER BY set_number",
                (exercise_row["id"],),
            )
            sets = [self._row_to_set(set_row) for set_row in await set_cursor.fetchall()]
            exercises.append(
                WorkoutExercise(
                    id=exercise_row["id"],
                    exercise_id=exercise_row["exercise_id"],
                    workout_id=row["id"],
                    order=exercise_row["position"],
                    last_weight=exercise_row["last_weight"],
                    last_reps=exercise_row["last_reps"],
                    notes=exercise_row["notes"],
                    sets=sets,
                )
            )

        data = {
            "session_type": row["session_type"],
            "date": row["date"],
            "start_time": row["start_time"],
            "end_time": row["end_time"],
            "is_completed": bool(row["is_completed"]),
            "notes": row["notes"],
        }
        workout = Workout.from_dict(data, id=row["id"])
        workout.exercises = exercises
        return workout

    def _row_to_set(self, row: aiosqlite.Row) -> ExerciseSet:
        """Convert a database row to an ExerciseSet."""
        return ExerciseSet.from_dict(
            {
                "id": row["id"],
                "set_number": row["set_number"],
                "weight": row["weight"],
                "reps": row["reps"],
                "is_completed": bool(row["is_completed"]),
                "completed_at": row["completed_at"],
                "is_warmup": bool(row["is_warmup"]),
            }
        )
