"""Workout tracking services."""

from .catalog import ExerciseCatalog
from .performance import PerformanceAggregator
from .rotation import ProgramManager, SuggestionEngine, activate_program
from .session import SessionState, WorkoutSession
from .stats import SessionStatistics, WeeklySummary, start_of_week
from .timer import RestTimer, TimerState

__all__ = [
    "activate_program",
    "ExerciseCatalog",
    "PerformanceAggregator",
    "ProgramManager",
    "RestTimer",
    "SessionState",
    "SessionStatistics",
    "start_of_week",
    "SuggestionEngine",
    "TimerState",
    "WeeklySummary",
    "WorkoutSession",
]
