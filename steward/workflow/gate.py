"""Completion gate for a sprint.

Combines the two checks that decide whether work may leave in_progress:
- every modified file is IN_SCOPE (or explicitly approved by a human)
- the current test run shows no regression against the sprint baseline

Anything unresolved blocks. The gate never auto-resolves findings; it only
lists them as reasons for the caller to surface.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from steward.lib.types import Sprint, TaskStatus, TestRunSummary, Verdict, VerdictKind
from steward.regression.detector import compare
from steward.scope.validator import ScopeReport, build_report, classify

logger = logging.getLogger(__name__)

GATE_CLEAR = "clear"
GATE_BLOCKED = "blocked"


@dataclass
class GateResult:
    """Outcome of evaluate_gate()."""
    status: str  # GATE_CLEAR or GATE_BLOCKED
    scope: ScopeReport
    verdict: Verdict | None = None
    tasks_complete: bool = False
    reasons: list[str] = field(default_factory=list)

    @property
    def is_clear(self) -> bool:
        return self.status == GATE_CLEAR


def evaluate_gate(
    sprint: Sprint,
    current: TestRunSummary | None,
    approved_paths: Iterable[str] = (),
) -> GateResult:
    """Evaluate the completion gate for a sprint.

    Args:
        sprint: Sprint whose tasks' modified files are checked
        current: Test run after the work, or None if not run yet
        approved_paths: Non-IN_SCOPE paths a human explicitly allowed

    Raises:
        InconsistentTestSummary: If baseline or current counts contradict each other
    """
    reasons: list[str] = []

    report = build_report(classify(sprint.modified_files(), sprint), approved_paths)
    for path in report.off_limits:
        if path not in report.approved:
            reasons.append(f"{path} is off-limits for sprint {sprint.id}")
    for path in report.unscoped:
        if path not in report.approved:
            reasons.append(f"{path} is outside sprint scope (needs impact analysis or approval)")

    verdict = None
    if sprint.regression_baseline is None:
        reasons.append("No regression baseline recorded for this sprint")
    elif current is None:
        reasons.append("No current test run supplied")
    else:
        verdict = compare(sprint.regression_baseline, current)
        if verdict.kind is VerdictKind.REGRESSION:
            if verdict.regressed_test_ids:
                reasons.append(f"Regression: {', '.join(verdict.regressed_test_ids)} now failing")
            else:
                reasons.append(
                    f"Regression: {current.passed} passing vs {sprint.regression_baseline.passed} in baseline"
                )

    tasks_complete = all(t.status is TaskStatus.COMPLETED for t in sprint.tasks)
    status = GATE_BLOCKED if reasons else GATE_CLEAR

    if reasons:
        logger.warning(f"[GATE] {sprint.id}: blocked ({len(reasons)} finding(s))")
    else:
        logger.info(f"[GATE] {sprint.id}: clear")

    return GateResult(
        status=status,
        scope=report,
        verdict=verdict,
        tasks_complete=tasks_complete,
        reasons=reasons,
    )
