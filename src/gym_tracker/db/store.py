"""Object stores used by the core.

The core only talks to the `ObjectStore` protocol: stage inserts and
deletes, commit them with `save()`, and run a few queries. Entities handed
out by the queries are tracked, so editing them in place and calling
`save()` persists the edit.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Protocol, Union

import aiosqlite

from ..errors import NotFoundError, PersistenceError, ValidationError
from ..models.exercises import Exercise, PerformanceRecord
from ..models.program import Program
from ..models.workout import Workout
from .engine import get_db_path
from .repositories import ExerciseRepository, ProgramRepository, WorkoutRepository

logger = logging.getLogger(__name__)

Entity = Union[Exercise, Program, Workout, PerformanceRecord]

_ENTITY_TYPES = (Exercise, Program, Workout, PerformanceRecord)


class ObjectStore(Protocol):
    """Persistence contract required by the core."""

    def insert(self, entity: Entity) -> None: ...

    def delete(self, entity: Entity) -> None: ...

    async def save(self) -> None: ...

    async def fetch_exercises(self) -> list[Exercise]: ...

    async def fetch_programs(self, is_active: bool | None = None) -> list[Program]: ...

    async def fetch_workouts(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        completed: bool | None = None,
    ) -> list[Workout]: ...


class BaseStore:
    """Staging of inserts and deletes shared by the concrete stores."""

    def __init__(self):
        self._inserted: dict[str, Entity] = {}
        self._deleted: dict[str, Entity] = {}

    @property
    def has_changes(self) -> bool:
        return bool(self._inserted or self._deleted)

    def insert(self, entity: Entity) -> None:
        """Stage a new entity for the next save."""
        if not isinstance(entity, _ENTITY_TYPES):
            raise ValidationError(f"Cannot store {type(entity).__name__}")
        self._deleted.pop(entity.id, None)
        self._inserted[entity.id] = entity

    def delete(self, entity: Entity) -> None:
        """Stage an entity, and everything it owns, for deletion."""
        if isinstance(entity, PerformanceRecord):
            raise ValidationError("Performance records are append-only")
        if not isinstance(entity, _ENTITY_TYPES):
            raise ValidationError(f"Cannot delete {type(entity).__name__}")
        self._inserted.pop(entity.id, None)
        self._deleted[entity.id] = entity

    async def save(self) -> None:
        """Commit staged changes and in-place edits.

        On failure the staged changes are kept, so calling save again
        retries the same commit.
        """
        inserted = list(self._inserted.values())
        deleted = list(self._deleted.values())
        await self._commit(inserted, deleted)
        self._inserted.clear()
        self._deleted.clear()

    async def _commit(self, inserted: list[Entity], deleted: list[Entity]) -> None:
        raise NotImplementedError


class InMemoryStore(BaseStore):
    """Keeps aggregates in per-type dictionaries for the process lifetime."""

    def __init__(self):
        super().__init__()
        self._exercises: dict[str, Exercise] = {}
        self._programs: dict[str, Program] = {}
        self._workouts: dict[str, Workout] = {}

    def _table_for(self, entity: Entity) -> dict:
        if isinstance(entity, Exercise):
            return self._exercises
        if isinstance(entity, Program):
            return self._programs
        return self._workouts

    async def _commit(self, inserted: list[Entity], deleted: list[Entity]) -> None:
        # Resolve record owners first so a failed commit changes nothing
        pending_exercises = {e.id: e for e in inserted if isinstance(e, Exercise)}
        owners = {}
        for record in (e for e in inserted if isinstance(e, PerformanceRecord)):
            owner = self._exercises.get(record.exercise_id) or pending_exercises.get(
                record.exercise_id
            )
            if owner is None:
                raise NotFoundError(
                    f"Exercise {record.exercise_id} not found for performance record"
                )
            owners[record.id] = owner

        for entity in deleted:
            self._table_for(entity).pop(entity.id, None)

        for entity in inserted:
            if isinstance(entity, PerformanceRecord):
                owner = owners[entity.id]
                if all(r.id != entity.id for r in owner.performance_records):
                    owner.performance_records.append(entity)
            else:
                self._table_for(entity)[entity.id] = entity

    async def fetch_exercises(self) -> list[Exercise]:
        return sorted(self._exercises.values(), key=lambda e: e.name.lower())

    async def fetch_programs(self, is_active: bool | None = None) -> list[Program]:
        programs = sorted(self._programs.values(), key=lambda p: p.name.lower())
        if is_active is None:
            return programs
        return [p for p in programs if p.is_active == is_active]

    async def fetch_workouts(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        completed: bool | None = None,
    ) -> list[Workout]:
        workouts = [
            w
            for w in self._workouts.values()
            if (start is None or w.date >= start)
            and (end is None or w.date < end)
            and (completed is None or w.is_completed == completed)
        ]
        return sorted(workouts, key=lambda w: w.date, reverse=True)


class SQLiteStore(BaseStore):
    """aiosqlite-backed store with an identity map of loaded aggregates.

    Every `save()` runs in a single transaction: staged deletes first, then
    inserted aggregates and tracked ones edited since their last load or
    save are written back. Unchanged aggregates are left alone.
    """

    def __init__(self, db_path: Path | None = None):
        super().__init__()
        self.db_path = db_path or get_db_path()
        self.exercises = ExerciseRepository(self.db_path)
        self.programs = ProgramRepository(self.db_path)
        self.workouts = WorkoutRepository(self.db_path)
        self._tracked: dict[str, Entity] = {}
        self._snapshots: dict[str, dict] = {}

    def _track(self, entities: list) -> list:
        """Swap loaded copies for already-tracked instances."""
        result = []
        for entity in entities:
            if entity.id in self._deleted:
                continue
            if entity.id not in self._tracked:
                self._tracked[entity.id] = entity
                self._snapshots[entity.id] = entity.to_dict()
            result.append(self._tracked[entity.id])
        return result

    def _dirty(self) -> list[Entity]:
        """Tracked aggregates edited in place since they were loaded or saved."""
        return [
            entity
            for entity_id, entity in self._tracked.items()
            if entity.to_dict() != self._snapshots.get(entity_id)
        ]

    async def _commit(self, inserted: list[Entity], deleted: list[Entity]) -> None:
        to_write = {entity.id: entity for entity in self._dirty()}
        for entity in deleted:
            to_write.pop(entity.id, None)
        for entity in inserted:
            to_write[entity.id] = entity

        try:
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute("PRAGMA foreign_keys = ON")

                for entity in deleted:
                    if isinstance(entity, Exercise):
                        await self.exercises.delete(db, entity.id)
                    elif isinstance(entity, Program):
                        await self.programs.delete(db, entity.id)
                    else:
                        await self.workouts.delete(db, entity.id)

                # Exercises go first so their records have an owner row
                ordered = sorted(
                    to_write.values(),
                    key=lambda e: 1 if isinstance(e, PerformanceRecord) else 0,
                )
                for entity in ordered:
                    if isinstance(entity, Exercise):
                        await self.exercises.write(db, entity)
                    elif isinstance(entity, Program):
                        await self.programs.write(db, entity)
                    elif isinstance(entity, Workout):
                        await self.workouts.write(db, entity)
                    else:
                        await self.exercises.insert_record(db, entity)

                await db.commit()
        except aiosqlite.Error as e:
            logger.error("Commit to %s failed: %s", self.db_path, e)
            raise PersistenceError(f"Could not save to {self.db_path}: {e}") from e

        for entity in deleted:
            self._tracked.pop(entity.id, None)
            self._snapshots.pop(entity.id, None)
        for entity in to_write.values():
            if not isinstance(entity, PerformanceRecord):
                self._tracked[entity.id] = entity
                self._snapshots[entity.id] = entity.to_dict()

    async def fetch_exercises(self) -> list[Exercise]:
        try:
            exercises = await self.exercises.list_all()
        except aiosqlite.Error as e:
            raise PersistenceError(f"Could not load exercises: {e}") from e
        return self._track(exercises)

    async def fetch_programs(self, is_active: bool | None = None) -> list[Program]:
        try:
            programs = await self.programs.list_all(is_active=is_active)
        except aiosqlite.Error as e:
            raise PersistenceError(f"Could not load programs: {e}") from e
        tracked = self._track(programs)
        if is_active is None:
            return tracked
        # Tracked instances may have been edited since they were loaded
        return [p for p in tracked if p.is_active == is_active]

    async def fetch_workouts(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        completed: bool | None = None,
    ) -> list[Workout]:
        try:
            workouts = await self.workouts.list_workouts(
                start=start, end=end, completed=completed
            )
        except aiosqlite.Error as e:
            raise PersistenceError(f"Could not load workouts: {e}") from e
        return self._track(workouts)
