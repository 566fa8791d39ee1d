"""CLI commands for gym-tracker."""

from .exercises import exercises
from .init import init
from .programs import programs
from .stats import stats
from .timer import timer
from .workout import workout

__all__ = [
    "exercises",
    "init",
    "programs",
    "stats",
    "timer",
    "workout",
]
