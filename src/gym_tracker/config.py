"""Default settings for sessions, timers and history windows."""

import os
from dataclasses import dataclass
from pathlib import Path

from .models.exercises import ExerciseCategory
from .models.workout import RestDuration

DEFAULT_SETS_PER_EXERCISE = 4
DEFAULT_REST_DURATION = RestDuration.NINETY
HISTORY_WINDOW_DAYS = 30

# Fallback rotation used when no program is active
DEFAULT_ROTATION = (
    ExerciseCategory.PUSH,
    ExerciseCategory.PULL,
    ExerciseCategory.LEGS,
)

DATA_DIR_ENV = "GYM_TRACKER_DATA_DIR"
DEFAULT_DATA_DIR = Path.cwd() / "data"


def get_data_dir() -> Path:
    """Get the data directory path."""
    return Path(os.environ.get(DATA_DIR_ENV, DEFAULT_DATA_DIR))


@dataclass
class SessionConfig:
    """Tunables for a workout session."""

    default_sets_per_exercise: int = DEFAULT_SETS_PER_EXERCISE
    default_rest_seconds: int = int(DEFAULT_REST_DURATION)
    auto_start_rest_timer: bool = True
    history_window_days: int = HISTORY_WINDOW_DAYS
