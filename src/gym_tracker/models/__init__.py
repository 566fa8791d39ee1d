"""Data models for gym-tracker."""

from .exercises import (
    DEFAULT_EXERCISES,
    Exercise,
    ExerciseCategory,
    MuscleGroup,
    PerformanceRecord,
)
from .program import Program
from .workout import ExerciseSet, RestDuration, Workout, WorkoutExercise

__all__ = [
    "DEFAULT_EXERCISES",
    "Exercise",
    "ExerciseCategory",
    "ExerciseSet",
    "MuscleGroup",
    "PerformanceRecord",
    "Program",
    "RestDuration",
    "Workout",
    "WorkoutExercise",
]
