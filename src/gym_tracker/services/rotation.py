"""Program rotation and next-session suggestion."""

import logging

from ..config import DEFAULT_ROTATION
from ..db.store import ObjectStore
from ..errors import NotFoundError, ValidationError
from ..models.exercises import ExerciseCategory
from ..models.program import Program
from ..models.workout import Workout

logger = logging.getLogger(__name__)


def activate_program(programs: list[Program], program: Program) -> None:
    """Make `program` the only active one among `programs`."""
    for other in programs:
        other.is_active = other is program or other.id == program.id
    program.is_active = True


class SuggestionEngine:
    """Decides which session category to train next."""

    def __init__(self, rotation: tuple[ExerciseCategory, ...] = DEFAULT_ROTATION):
        self.rotation = tuple(rotation)

    def suggest_next_session(
        self, active_program: Program | None, recent_workouts: list[Workout]
    ) -> ExerciseCategory | None:
        """Next session from the active program, or from recent history."""
        if active_program is not None:
            return active_program.next_session
        return self.suggest_from_history(recent_workouts)

    def suggest_from_history(self, recent_workouts: list[Workout]) -> ExerciseCategory:
        """Follow the default rotation after the last completed workout."""
        completed = [w for w in recent_workouts if w.is_completed]
        if not completed:
            return self.rotation[0]

        last = max(completed, key=lambda w: w.date)
        if last.session_type not in self.rotation:
            return self.rotation[0]

        index = self.rotation.index(last.session_type)
        return self.rotation[(index + 1) % len(self.rotation)]


class ProgramManager:
    """Creates, edits and activates programs against an object store."""

    def __init__(self, store: ObjectStore):
        self.store = store

    async def list_programs(self) -> list[Program]:
        programs = await self.store.fetch_programs()
        return sorted(programs, key=lambda p: p.name.lower())

    async def active_program(self) -> Program | None:
        active = await self.store.fetch_programs(is_active=True)
        return active[0] if active else None

    async def get(self, program_id: str) -> Program:
        for program in await self.store.fetch_programs():
            if program.id == program_id:
                return program
        raise NotFoundError(f"Program {program_id} not found")

    async def add_program(
        self, name: str, session_order: list[ExerciseCategory]
    ) -> Program:
        """Create a program; the very first one becomes active."""
        name, session_order = self._validate(name, session_order)
        existing = await self.store.fetch_programs()

        program = Program(
            name=name,
            session_order=session_order,
            is_active=not existing,
        )
        self.store.insert(program)
        await self.store.save()
        logger.info("Created program %s (%s)", program.name, program.get_rotation_display())
        return program

    async def update_program(
        self, program: Program, name: str, session_order: list[ExerciseCategory]
    ) -> Program:
        program.name, program.session_order = self._validate(name, session_order)
        await self.store.save()
        return program

    async def delete_program(self, program: Program) -> None:
        """Delete a program, handing the active flag on if it had it."""
        was_active = program.is_active
        self.store.delete(program)
        await self.store.save()

        if was_active:
            remaining = await self.list_programs()
            if remaining:
                await self.set_active(remaining[0])

    async def set_active(self, program: Program) -> Program:
        programs = await self.store.fetch_programs()
        activate_program(programs, program)
        await self.store.save()
        logger.info("Active program is now %s", program.name)
        return program

    async def restart_program(self, program: Program) -> Program:
        """Send a program back to its first session."""
        program.reset_session_index()
        await self.store.save()
        logger.info("Restarted program %s", program.name)
        return program

    async def advance_active(self) -> Program | None:
        """Move the active program to its next session, if there is one."""
        program = await self.active_program()
        if program is None:
            return None
        program.advance()
        await self.store.save()
        return program

    @staticmethod
    def _validate(
        name: str, session_order: list[ExerciseCategory]
    ) -> tuple[str, list[ExerciseCategory]]:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Program name cannot be empty")
        if not session_order:
            raise ValidationError("Program needs at least one session")
        return name, [ExerciseCategory.parse(s) for s in session_order]
