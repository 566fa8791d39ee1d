"""Database engine setup and initialization."""

from pathlib import Path

import aiosqlite

from ..config import get_data_dir

DB_FILENAME = "gym_tracker.db"


def get_db_path(data_dir: Path | None = None) -> Path:
    """Get the database file path."""
    if data_dir is None:
        data_dir = get_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / DB_FILENAME


async def init_db(db_path: Path | None = None) -> None:
    """Initialize the database schema.

    Child tables reference their owners by id; there are no ON DELETE
    CASCADE clauses because deletes are cascaded explicitly by the
    repositories.
    """
    if db_path is None:
        db_path = get_db_path()

    async with aiosqlite.connect(db_path) as db:
        # Exercise library
        await db.execute("""
            CREATE TABLE IF NOT EXISTS exercises (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                category TEXT NOT NULL,
                muscle_group TEXT NOT NULL,
                notes TEXT,
                created_at TIMESTAMP NOT NULL
            )
        """)

        # Append-only performance history, one row per exercise per workout
        await db.execute("""
            CREATE TABLE IF NOT EXISTS performance_records (
                id TEXT PRIMARY KEY,
                exercise_id TEXT NOT NULL,
                date TIMESTAMP NOT NULL,
                max_weight REAL NOT NULL,
                max_reps INTEGER NOT NULL,
                total_volume REAL NOT NULL,
                total_sets INTEGER NOT NULL,
                FOREIGN KEY (exercise_id) REFERENCES exercises(id)
            )
        """)

        # Programs (session rotations)
        await db.execute("""
            CREATE TABLE IF NOT EXISTS programs (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                session_order TEXT NOT NULL DEFAULT '[]',
                is_active INTEGER NOT NULL DEFAULT 0,
                current_session_index INTEGER NOT NULL DEFAULT 0,
                created_at TIMESTAMP NOT NULL
            )
        """)

        # Workouts
        await db.execute("""
            CREATE TABLE IF NOT EXISTS workouts (
                id TEXT PRIMARY KEY,
                session_type TEXT NOT NULL,
                date TIMESTAMP NOT NULL,
                start_time TIMESTAMP NOT NULL,
                end_time TIMESTAMP,
                is_completed INTEGER NOT NULL DEFAULT 0,
                notes TEXT
            )
        """)

        # Exercises performed in a workout; exercise_id is a plain reference
        await db.execute("""
            CREATE TABLE IF NOT EXISTS workout_exercises (
                id TEXT PRIMARY KEY,
                workout_id TEXT NOT NULL,
                exercise_id TEXT NOT NULL,
                position INTEGER NOT NULL,
                last_weight REAL,
                last_reps INTEGER,
                notes TEXT,
                FOREIGN KEY (workout_id) REFERENCES workouts(id)
            )
        """)

        # Sets of a workout exercise
        await db.execute("""
            CREATE TABLE IF NOT EXISTS exercise_sets (
                id TEXT PRIMARY KEY,
                workout_exercise_id TEXT NOT NULL,
                set_number INTEGER NOT NULL,
                weight REAL,
                reps INTEGER,
                is_completed INTEGER NOT NULL DEFAULT 0,
                completed_at TIMESTAMP,
                is_warmup INTEGER NOT NULL DEFAULT 0,
                FOREIGN KEY (workout_exercise_id) REFERENCES workout_exercises(id)
            )
        """)

        # Create indexes for common queries
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_exercises_name
            ON exercises(name)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_records_exercise
            ON performance_records(exercise_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_workouts_date
            ON workouts(date)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_workout_exercises_workout
            ON workout_exercises(workout_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_exercise_sets_workout_exercise
            ON exercise_sets(workout_exercise_id)
        """)

        await db.commit()


async def seed_exercises(db_path: Path | None = None) -> int:
    """Seed the database with the default exercise library.

    Exercises whose name already exists are left alone.

    Returns:
        Number of exercises added
    """
    from ..models.exercises import DEFAULT_EXERCISES, Exercise

    if db_path is None:
        db_path = get_db_path()

    added = 0
    async with aiosqlite.connect(db_path) as db:
        cursor = await db.execute("SELECT lower(name) FROM exercises")
        existing = {row[0] for row in await cursor.fetchall()}

        for template in DEFAULT_EXERCISES:
            if template.name.lower() in existing:
                continue
            exercise = Exercise(
                name=template.name,
                category=template.category,
                muscle_group=template.muscle_group,
                notes=template.notes,
            )
            await db.execute(
                """
                INSERT INTO exercises
                (id, name, category, muscle_group, notes, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
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
            added += 1

        await db.commit()
    return added
