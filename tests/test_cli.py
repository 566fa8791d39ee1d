"""Tests for the command line interface."""

import importlib
import json

import pytest
from click.testing import CliRunner

from gym_tracker.cli import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, tmp_path):
    """Run a gym-tracker command against a temporary data directory."""

    def _invoke(*args, input=None):
        return runner.invoke(main, ["--data-dir", str(tmp_path), *args], input=input)

    return _invoke


@pytest.fixture
def initialized(invoke):
    result = invoke("init")
    assert result.exit_code == 0, result.output
    return invoke


class TestInit:
    def test_init(self, invoke, tmp_path):
        result = invoke("init")

        assert result.exit_code == 0
        assert "Database initialized" in result.output
        assert (tmp_path / "gym_tracker.db").exists()

    def test_init_twice_keeps_library(self, initialized):
        result = initialized("init")
        assert "(0 new exercises)" in result.output

    def test_commands_require_init(self, invoke):
        result = invoke("workout", "status")
        assert result.exit_code == 1
        assert "not initialized" in result.output


class TestExercises:
    def test_list_by_category(self, initialized):
        result = initialized("exercises", "list", "--category", "pull")

        assert result.exit_code == 0
        assert "Barbell Row" in result.output
        assert "Bench Press" not in result.output

    def test_add_show_delete(self, initialized):
        result = initialized("exercises", "add", "Face Pull", "pull", "shoulders", "-n", "Light")
        assert result.exit_code == 0
        assert "Added Face Pull" in result.output

        result = initialized("exercises", "show", "face pull")
        assert "Notes: Light" in result.output
        assert "No history yet" in result.output

        result = initialized("exercises", "delete", "Face Pull", "--force")
        assert result.exit_code == 0
        result = initialized("exercises", "show", "Face Pull")
        assert result.exit_code == 1

    def test_blank_name_rejected(self, initialized):
        result = initialized("exercises", "add", "  ", "push", "chest")
        assert result.exit_code == 1
        assert "cannot be empty" in result.output

    def test_list_grouped(self, initialized):
        result = initialized("exercises", "list", "--by-category", "--search", "raise")

        assert result.exit_code == 0
        assert "Push (" in result.output
        assert "Legs (" in result.output
        assert "Pull (" not in result.output
        assert "Category" not in result.output

    def test_edit(self, initialized):
        result = initialized(
            "exercises", "edit", "barbell row",
            "--name", "Pendlay Row", "-m", "back", "-n", "From the floor",
        )
        assert result.exit_code == 0, result.output
        assert "Updated Pendlay Row (Pull, back)" in result.output

        result = initialized("exercises", "show", "Pendlay Row")
        assert "Notes: From the floor" in result.output
        assert initialized("exercises", "show", "Barbell Row").exit_code == 1

    def test_edit_needs_a_change(self, initialized):
        result = initialized("exercises", "edit", "Squat")
        assert result.exit_code == 1
        assert "Nothing to change" in result.output

    def test_edit_unknown_exercise(self, initialized):
        result = initialized("exercises", "edit", "Nope", "--notes", "x")
        assert result.exit_code == 1
        assert "not found" in result.output


class TestPrograms:
    def test_add_and_list(self, initialized):
        result = initialized("programs", "add", "PPL", "push", "pull", "legs")
        assert result.exit_code == 0
        assert "Push -> Pull -> Legs" in result.output
        assert "now the active program" in result.output

        result = initialized("programs", "list")
        assert "PPL" in result.output
        assert "Total: 1 program(s)" in result.output

    def test_activate_and_advance(self, initialized):
        initialized("programs", "add", "PPL", "push", "pull", "legs")
        initialized("programs", "add", "Grapple", "jjb", "mobility")

        result = initialized("programs", "activate", "grapple")
        assert result.exit_code == 0

        result = initialized("programs", "advance")
        assert "Next session: Mobility" in result.output

    def test_unknown_program(self, initialized):
        result = initialized("programs", "activate", "nope")
        assert result.exit_code == 1

    def test_position_and_reset(self, initialized):
        initialized("programs", "add", "PPL", "push", "pull", "legs")
        initialized("programs", "advance")

        result = initialized("programs", "list")
        assert "Position" in result.output
        assert "2/3" in result.output

        result = initialized("programs", "reset", "ppl")
        assert result.exit_code == 0
        assert "PPL restarted at Push" in result.output

        result = initialized("programs", "list")
        assert "1/3" in result.output

    def test_reset_unknown_program(self, initialized):
        result = initialized("programs", "reset", "nope")
        assert result.exit_code == 1


class TestWorkout:
    """A workout logged command by command."""

    def test_full_workout(self, initialized):
        initialized("programs", "add", "PPL", "push", "pull", "legs")

        result = initialized("workout", "start")
        assert result.exit_code == 0, result.output
        assert "Push workout started" in result.output
        assert "1. Bench Press" in result.output

        for set_number, weight, reps in [(1, "80", "10"), (2, "82.5", "8"), (3, "80", "10")]:
            result = initialized("workout", "done", "1", str(set_number), weight, reps)
            assert result.exit_code == 0, result.output
        assert "gym-tracker timer 90" in result.output

        result = initialized("workout", "status")
        assert "[3/4]" in result.output

        result = initialized("workout", "finish")
        assert result.exit_code == 0, result.output
        assert "Volume: 2260" in result.output
        assert "Exercises recorded: 1" in result.output
        assert "Next session: Pull" in result.output

        result = initialized("exercises", "show", "Bench Press")
        assert "82.5 x 8" in result.output
        assert "Per set" in result.output
        assert "753.333" in result.output

        result = initialized("stats", "--json")
        summary = json.loads(result.output)
        assert summary["workouts_this_week"] == 1
        assert summary["suggested_session"] == "pull"
        assert summary["current_streak"] == 1

    def test_start_twice(self, initialized):
        initialized("workout", "start", "legs")
        result = initialized("workout", "start", "push")
        assert result.exit_code == 1
        assert "already in progress" in result.output

    def test_suggestion_without_program(self, initialized):
        result = initialized("workout", "start")
        assert "Push workout started" in result.output

    def test_edit_sets_and_exercises(self, initialized):
        initialized("workout", "start", "pull")

        result = initialized("workout", "add-set", "1", "--warmup")
        assert "Added set 5" in result.output

        result = initialized("workout", "remove-set", "1", "2")
        assert result.exit_code == 0

        result = initialized("workout", "add-exercise", "Squat")
        assert result.exit_code == 0

        result = initialized("workout", "status")
        assert "[0/4]" in result.output
        assert "Squat" in result.output
        assert any(line.startswith("W ") for line in result.output.splitlines())

        result = initialized("workout", "remove-exercise", "1")
        assert result.exit_code == 0

    def test_done_and_undo(self, initialized):
        initialized("workout", "start", "push")
        initialized("workout", "done", "1", "1", "60", "10")

        result = initialized("workout", "undo", "1", "1")
        assert "Set 1 reopened" in result.output
        result = initialized("workout", "status")
        assert "[0/4]" in result.output

    def test_done_with_bad_position(self, initialized):
        initialized("workout", "start", "push")
        result = initialized("workout", "done", "9", "1", "60", "10")
        assert result.exit_code == 2

    def test_cancel(self, initialized):
        initialized("workout", "start", "push")
        initialized("workout", "done", "1", "1", "60", "10")

        result = initialized("workout", "cancel", input="n\n")
        assert "Cancelled" in result.output

        result = initialized("workout", "cancel", "--force")
        assert "Workout discarded" in result.output

        result = initialized("workout", "status")
        assert "No workout in progress" in result.output

    def test_finish_without_workout(self, initialized):
        result = initialized("workout", "finish")
        assert result.exit_code == 1


class TestStatsAndTimer:
    def test_stats_empty(self, initialized):
        result = initialized("stats")
        assert result.exit_code == 0
        assert "Workouts: 0" in result.output
        assert "Suggested next: Push (default rotation)" in result.output

    def test_timer_rejects_zero(self, invoke):
        result = invoke("timer", "0")
        assert result.exit_code == 1
        assert "must be positive" in result.output

    def test_timer_redraws_every_second(self, invoke, monkeypatch):
        monkeypatch.setattr(
            importlib.import_module("gym_tracker.commands.timer"), "TICK_SECONDS", 0
        )

        result = invoke("timer", "3")

        assert result.exit_code == 0
        for remaining in ("0:03", "0:02", "0:01"):
            assert f"Rest: {remaining}" in result.output
        assert "Rest is over, next set!" in result.output
