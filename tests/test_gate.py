"""Tests for steward.workflow.gate module."""

import dataclasses

import pytest

from steward.lib.types import TaskStatus, TestRunSummary, VerdictKind
from steward.regression.detector import InconsistentTestSummary
from steward.workflow.gate import GATE_BLOCKED, GATE_CLEAR, evaluate_gate
from steward.workflow.sprint import record_files, set_task_status


GREEN = TestRunSummary(passed=47, failed=0, total=47)


class TestEvaluateGate:
    """Tests for evaluate_gate."""

    def test_clear(self, sprint):
        gate = evaluate_gate(sprint, GREEN)
        assert gate.status == GATE_CLEAR
        assert gate.is_clear
        assert gate.reasons == []
        assert gate.verdict.kind is VerdictKind.IMPROVED
        assert gate.scope.in_scope == ["app/checkout/pay.ts", "app/checkout/receipt.ts"]

    def test_tasks_complete_reported(self, sprint):
        assert not evaluate_gate(sprint, GREEN).tasks_complete
        done = set_task_status(sprint, "2", TaskStatus.COMPLETED)
        assert evaluate_gate(done, GREEN).tasks_complete

    def test_off_limits_file_blocks(self, sprint):
        touched = record_files(sprint, "2", ["app/auth/login.ts"])
        gate = evaluate_gate(touched, GREEN)
        assert gate.status == GATE_BLOCKED
        assert gate.reasons == ["app/auth/login.ts is off-limits for sprint checkout-v2"]

    def test_unscoped_file_blocks(self, sprint):
        touched = record_files(sprint, "1", ["lib/utils.ts"])
        gate = evaluate_gate(touched, GREEN)
        assert not gate.is_clear
        assert "lib/utils.ts is outside sprint scope" in gate.reasons[0]

    def test_approved_path_does_not_block(self, sprint):
        touched = record_files(sprint, "1", ["lib/utils.ts"])
        gate = evaluate_gate(touched, GREEN, approved_paths=["lib/utils.ts"])
        assert gate.is_clear
        assert gate.scope.approved == ["lib/utils.ts"]

    def test_regression_blocks(self, sprint):
        current = TestRunSummary(passed=44, failed=1, total=45, failing_test_ids=("auth_login_test",))
        gate = evaluate_gate(sprint, current)
        assert gate.verdict.kind is VerdictKind.REGRESSION
        assert gate.reasons == ["Regression: auth_login_test now failing"]

    def test_regression_without_ids(self, sprint):
        current = TestRunSummary(passed=43, failed=2, total=45)
        gate = evaluate_gate(sprint, current)
        assert gate.reasons == ["Regression: 43 passing vs 45 in baseline"]

    def test_missing_current_run_blocks(self, sprint):
        gate = evaluate_gate(sprint, None)
        assert gate.reasons == ["No current test run supplied"]
        assert gate.verdict is None

    def test_missing_baseline_blocks(self, sprint):
        no_baseline = dataclasses.replace(sprint, regression_baseline=None)
        gate = evaluate_gate(no_baseline, GREEN)
        assert gate.reasons == ["No regression baseline recorded for this sprint"]

    def test_findings_accumulate(self, sprint):
        touched = record_files(sprint, "2", ["app/auth/login.ts", "lib/utils.ts"])
        gate = evaluate_gate(touched, None)
        assert len(gate.reasons) == 3

    def test_inconsistent_summary_propagates(self, sprint):
        with pytest.raises(InconsistentTestSummary):
            evaluate_gate(sprint, TestRunSummary(passed=1, failed=0, total=3))

    def test_blocked_gate_logged(self, sprint, caplog):
        evaluate_gate(sprint, None)
        assert "[GATE] checkout-v2: blocked (1 finding(s))" in caplog.text
