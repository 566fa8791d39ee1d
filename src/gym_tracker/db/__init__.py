"""Database layer for gym-tracker."""

from .engine import get_db_path, init_db, seed_exercises
from .repositories import ExerciseRepository, ProgramRepository, WorkoutRepository
from .store import BaseStore, InMemoryStore, ObjectStore, SQLiteStore

__all__ = [
    "BaseStore",
    "ExerciseRepository",
    "get_db_path",
    "InMemoryStore",
    "init_db",
    "ObjectStore",
    "ProgramRepository",
    "seed_exercises",
    "SQLiteStore",
    "WorkoutRepository",
]
