"""Tests for steward.workflow.state_machine module.

Tests the wrapper functions around the FSM.
The FSM itself is tested in test_fsm.py.
"""

import json

import pytest

from steward.lib.sprint_file import load_sprint
from steward.lib.types import TaskStatus, TestRunSummary
from steward.workflow.fsm import STATES
from steward.workflow.gate import evaluate_gate
from steward.workflow.sprint import record_files, set_task_status
from steward.workflow.state_machine import (
    InvalidTransition,
    SprintState,
    advance,
    can_transition,
    get_state,
    parse_state,
    transition,
)

GREEN = TestRunSummary(passed=47, failed=0, total=47)


def write_status(path, status):
    data = json.loads(path.read_text())
    data["status"] = status
    path.write_text(json.dumps(data))


class TestParseState:
    """Tests for parse_state() function."""

    def test_parse_valid_state(self):
        assert parse_state("planned") == SprintState.PLANNED
        assert parse_state("in_progress") == SprintState.IN_PROGRESS
        assert parse_state("done") == SprintState.DONE

    def test_parse_none(self):
        assert parse_state(None) is None

    def test_parse_unknown(self):
        assert parse_state("archived") is None
        assert parse_state("") is None


class TestSprintStateEnum:
    """Tests for SprintState enum."""

    def test_values_match_fsm(self):
        """State values should match FSM state strings."""
        assert {s.value for s in SprintState} == set(STATES)


class TestAdvance:
    """Tests for advance() on Sprint values."""

    def test_submit_clear_enters_review(self, sprint):
        updated = advance(sprint, "submit", gate=evaluate_gate(sprint, GREEN))
        assert updated.status == "review"
        assert updated.blockers == ()

    def test_submit_blocked_records_blocker(self, sprint):
        touched = record_files(sprint, "2", ["app/auth/login.ts"])
        updated = advance(touched, "submit", gate=evaluate_gate(touched, GREEN))
        assert updated.status == "blocked"
        assert updated.blockers[-1].description == "app/auth/login.ts is off-limits for sprint checkout-v2"

    def test_resolve_requires_resolution(self, sprint):
        blocked = advance(sprint, "block")
        with pytest.raises(ValueError, match="resolution"):
            advance(blocked, "resolve")

    def test_resolve_records_decision(self, sprint):
        blocked = advance(sprint, "block")
        resolved = advance(blocked, "resolve", resolution="Scope amended to include lib/utils.ts")
        assert resolved.status == "in_progress"
        decision = resolved.decisions[-1]
        assert decision.what == "Resolved: Blocked from in_progress"
        assert decision.why == "Scope amended to include lib/utils.ts"

    def test_complete_with_open_tasks_rejected(self, sprint):
        in_review = advance(sprint, "submit", gate=evaluate_gate(sprint, GREEN))
        with pytest.raises(InvalidTransition, match="not all tasks are completed"):
            advance(in_review, "complete", gate=evaluate_gate(in_review, GREEN))

    def test_complete(self, sprint):
        finished = set_task_status(sprint, "2", TaskStatus.COMPLETED)
        in_review = advance(finished, "submit", gate=evaluate_gate(finished, GREEN))
        done = advance(in_review, "complete", gate=evaluate_gate(in_review, GREEN))
        assert done.status == "done"

    def test_complete_with_regression_blocks(self, sprint):
        finished = set_task_status(sprint, "2", TaskStatus.COMPLETED)
        in_review = advance(finished, "submit", gate=evaluate_gate(finished, GREEN))
        failing = TestRunSummary(44, 1, 45, ("auth_login_test",))
        blocked = advance(in_review, "complete", gate=evaluate_gate(in_review, failing))
        assert blocked.status == "blocked"
        assert "auth_login_test now failing" in blocked.blockers[-1].description

    def test_done_sprint_rejected(self, sprint):
        finished = set_task_status(sprint, "2", TaskStatus.COMPLETED)
        in_review = advance(finished, "submit", gate=evaluate_gate(finished, GREEN))
        done = advance(in_review, "complete", gate=evaluate_gate(in_review, GREEN))
        with pytest.raises(InvalidTransition, match="sprint is done"):
            advance(done, "block")

    def test_trigger_not_allowed(self, sprint):
        with pytest.raises(InvalidTransition, match="'start' not allowed") as exc_info:
            advance(sprint, "start")
        assert exc_info.value.from_state == "in_progress"

    def test_unknown_trigger(self, sprint):
        with pytest.raises(InvalidTransition):
            advance(sprint, "archive")


class TestTransition:
    """Tests for transition() function."""

    def test_valid_transition(self, sprint_file):
        write_status(sprint_file, "planned")
        assert transition(sprint_file, SprintState.IN_PROGRESS, reason="kickoff") is SprintState.IN_PROGRESS
        assert get_state(sprint_file) == SprintState.IN_PROGRESS

    def test_self_transition_is_noop(self, sprint_file):
        before = sprint_file.read_text()
        assert transition(sprint_file, SprintState.IN_PROGRESS) is SprintState.IN_PROGRESS
        assert sprint_file.read_text() == before

    def test_invalid_transition_raises(self, sprint_file):
        with pytest.raises(InvalidTransition) as exc_info:
            transition(sprint_file, SprintState.DONE)
        assert exc_info.value.from_state == "in_progress"
        assert exc_info.value.to_state == SprintState.DONE

    def test_submit_lands_in_blocked(self, sprint_file):
        """Asking for review with findings returns the state actually reached."""
        sprint = load_sprint(sprint_file)
        reached = transition(sprint_file, SprintState.REVIEW, gate=evaluate_gate(sprint, None))
        assert reached is SprintState.BLOCKED
        saved = load_sprint(sprint_file)
        assert saved.status == "blocked"
        assert saved.blockers[-1].description == "No current test run supplied"

    def test_done_sprint_rejects_changes(self, sprint_file):
        write_status(sprint_file, "done")
        with pytest.raises(InvalidTransition):
            transition(sprint_file, SprintState.IN_PROGRESS)

    def test_file_untouched_on_failure(self, sprint_file):
        write_status(sprint_file, "review")
        before = sprint_file.read_text()
        gate = evaluate_gate(load_sprint(sprint_file), GREEN)
        with pytest.raises(InvalidTransition, match="not all tasks are completed"):
            transition(sprint_file, SprintState.DONE, gate=gate)
        assert sprint_file.read_text() == before

    def test_complete_with_regression_lands_in_blocked(self, sprint_file):
        write_status(sprint_file, "review")
        failing = TestRunSummary(44, 1, 45, ("x",))
        gate = evaluate_gate(load_sprint(sprint_file), failing)
        assert transition(sprint_file, SprintState.DONE, gate=gate) is SprintState.BLOCKED
        saved = load_sprint(sprint_file)
        assert saved.status == "blocked"
        assert "x now failing" in saved.blockers[-1].description


class TestCanTransition:
    """Tests for can_transition()."""

    def test_valid(self):
        assert can_transition("planned", SprintState.IN_PROGRESS)
        assert can_transition("blocked", SprintState.IN_PROGRESS)
        assert can_transition("review", SprintState.DONE)

    def test_invalid(self):
        assert not can_transition("planned", SprintState.DONE)
        assert not can_transition("done", SprintState.IN_PROGRESS)

    def test_self(self):
        assert can_transition("review", SprintState.REVIEW)
