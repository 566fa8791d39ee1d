"""Training program (session rotation) model."""

from dataclasses import dataclass, field
from datetime import datetime

from .exercises import ExerciseCategory, new_id


@dataclass
class Program:
    """A cyclic rotation of session categories.

    `current_session_index` is a cursor into `session_order`; it is always
    read modulo the rotation length, so an empty rotation simply has no
    next session.
    """

    name: str
    session_order: list[ExerciseCategory] = field(default_factory=list)
    is_active: bool = False
    current_session_index: int = 0
    created_at: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        self.session_order = [ExerciseCategory.parse(s) for s in self.session_order]

    @property
    def total_sessions(self) -> int:
        return len(self.session_order)

    @property
    def next_session(self) -> ExerciseCategory | None:
        """The session to do next, or None for an empty rotation."""
        return self.session_at(self.current_session_index)

    def session_at(self, index: int) -> ExerciseCategory | None:
        """Session at a (cyclic) position in the rotation."""
        if not self.session_order:
            return None
        return self.session_order[index % len(self.session_order)]

    def advance(self) -> None:
        """Move the cursor to the next session, wrapping around."""
        if not self.session_order:
            return
        self.current_session_index = (self.current_session_index + 1) % len(
            self.session_order
        )

    def reset_session_index(self) -> None:
        self.current_session_index = 0

    def get_rotation_display(self) -> str:
        """Get a human-readable rotation string (e.g. "Push -> Pull -> Legs")."""
        return " -> ".join(s.display_name for s in self.session_order)

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "name": self.name,
            "session_order": [s.value for s in self.session_order],
            "is_active": self.is_active,
            "current_session_index": self.current_session_index,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict, id: str | None = None) -> "Program":
        """Create from dictionary."""
        created_at = datetime.now()
        if data.get("created_at"):
            created_at = datetime.fromisoformat(data["created_at"])

        return cls(
            id=id or data.get("id") or new_id(),
            name=data["name"],
            session_order=[ExerciseCategory.parse(s) for s in data.get("session_order", [])],
            is_active=bool(data.get("is_active", False)),
            current_session_index=int(data.get("current_session_index", 0)),
            created_at=created_at,
        )
