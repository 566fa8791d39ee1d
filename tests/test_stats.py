"""Tests for weekly statistics and streaks."""

from datetime import date, datetime, timedelta

import pytest

from gym_tracker.clock import ManualClock
from gym_tracker.models.exercises import Exercise, ExerciseCategory, MuscleGroup
from gym_tracker.models.program import Program
from gym_tracker.models.workout import Workout
from gym_tracker.services.stats import SessionStatistics, start_of_week

# Wednesday evening
NOW = datetime(2024, 3, 13, 20, 0)


def _workout(days_ago, completed=True, sets=(), category=ExerciseCategory.PUSH):
    day = NOW - timedelta(days=days_ago, hours=2)
    workout = Workout(category, date=day)
    if sets:
        exercise = Exercise("Bench Press", ExerciseCategory.PUSH, MuscleGroup.CHEST)
        workout_exercise = workout.add_exercise(exercise)
        for weight, reps in sets:
            workout_exercise.add_set().complete(weight, reps)
    if completed:
        workout.complete(at=day + timedelta(hours=1))
    return workout


@pytest.fixture
def statistics():
    return SessionStatistics(ManualClock(NOW))


class TestWeek:
    def test_start_of_week_is_monday(self):
        assert start_of_week(date(2024, 3, 13)) == datetime(2024, 3, 11)
        assert start_of_week(date(2024, 3, 11)) == datetime(2024, 3, 11)
        assert start_of_week(date(2024, 3, 17)) == datetime(2024, 3, 11)

    def test_counts_only_this_weeks_completed_workouts(self, statistics):
        workouts = [
            _workout(0, sets=[(60, 10), (60, 10)]),
            _workout(2, sets=[(80, 5)]),
            _workout(3, sets=[(100, 5)]),  # previous Sunday
            _workout(1, completed=False, sets=[(60, 10)]),
        ]

        assert statistics.workouts_this_week(workouts) == 2
        assert statistics.volume_this_week(workouts) == 1600
        assert statistics.sets_this_week(workouts) == 3


class TestStreak:
    """Tests for the consecutive-day streak."""

    def test_empty_history(self, statistics):
        assert statistics.current_streak([]) == 0

    def test_three_days_in_a_row(self, statistics):
        workouts = [_workout(0), _workout(1), _workout(2)]
        assert statistics.current_streak(workouts) == 3

    def test_gap_breaks_streak(self, statistics):
        workouts = [_workout(0), _workout(2), _workout(3)]
        assert statistics.current_streak(workouts) == 1

    def test_streak_survives_until_today_ends(self, statistics):
        workouts = [_workout(1), _workout(2)]
        assert statistics.current_streak(workouts) == 2

    def test_two_day_gap(self, statistics):
        assert statistics.current_streak([_workout(2)]) == 0

    def test_several_workouts_on_one_day_count_once(self, statistics):
        workouts = [_workout(0), _workout(0), _workout(1)]
        assert statistics.current_streak(workouts) == 2

    def test_unfinished_workouts_do_not_count(self, statistics):
        workouts = [_workout(0, completed=False), _workout(1, completed=False)]
        assert statistics.current_streak(workouts) == 0


class TestSummary:
    def test_days_since_last_workout(self, statistics):
        assert statistics.days_since_last_workout([]) is None
        workouts = [_workout(4), _workout(2), _workout(0, completed=False)]
        assert statistics.days_since_last_workout(workouts) == 2
        assert statistics.last_workout(workouts) is workouts[1]

    def test_summarize_with_program(self, statistics):
        program = Program("PPL", ["push", "pull", "legs"], current_session_index=2)
        summary = statistics.summarize([_workout(0, sets=[(50, 10)])], program)

        assert summary.suggested_session is ExerciseCategory.LEGS
        assert summary.workouts_this_week == 1
        assert summary.volume_this_week == 500
        assert summary.current_streak == 1
        assert summary.days_since_last_workout == 0

    def test_summarize_without_program(self, statistics):
        workouts = [_workout(1, category=ExerciseCategory.PULL)]
        summary = statistics.summarize(workouts)

        assert summary.suggested_session is ExerciseCategory.LEGS
        assert summary.to_dict()["suggested_session"] == "legs"
