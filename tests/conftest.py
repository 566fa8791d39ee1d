"""Pytest configuration and fixtures."""

import pytest
import pytest_asyncio
import tempfile
from datetime import datetime
from pathlib import Path

from gym_tracker.clock import ManualClock
from gym_tracker.db import InMemoryStore
from gym_tracker.events import EventLog
from gym_tracker.models.exercises import Exercise, ExerciseCategory, MuscleGroup
from gym_tracker.services.session import WorkoutSession
from gym_tracker.services.timer import RestTimer

# A Wednesday
NOW = datetime(2024, 3, 13, 18, 0)


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
def clock():
    return ManualClock(NOW)


@pytest.fixture
def event_log():
    return EventLog()


@pytest.fixture
def sample_exercises():
    """Two push exercises and one pull exercise."""
    return [
        Exercise("Bench Press", ExerciseCategory.PUSH, MuscleGroup.CHEST),
        Exercise("Overhead Press", ExerciseCategory.PUSH, MuscleGroup.SHOULDERS),
        Exercise("Barbell Row", ExerciseCategory.PULL, MuscleGroup.BACK),
    ]


@pytest_asyncio.fixture
async def store(sample_exercises):
    """In-memory store holding the sample exercises."""
    store = InMemoryStore()
    for exercise in sample_exercises:
        store.insert(exercise)
    await store.save()
    return store


@pytest.fixture
def timer(event_log):
    """Rest timer driven by explicit tick() calls."""
    return RestTimer(event_log, auto_tick=False)


@pytest.fixture
def session(store, clock, event_log, timer):
    return WorkoutSession(store, clock=clock, sink=event_log, timer=timer)
