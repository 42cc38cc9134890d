"""
Regression baseline comparison.

Compares the test run recorded before a sprint began (baseline) with the run
after the work (current). Summaries only carry failing test ids; passing
tests are a bare count, so a regression is inferred from:

- a failing id in current that was not failing in baseline, or
- fewer passing tests than baseline.

Verdicts:
    REGRESSION     (current.failed > 0 and new failing ids) or current.passed < baseline.passed
    IMPROVED       current.passed > baseline.passed, current.failed <= baseline.failed,
                   and no new failing ids
    NO_REGRESSION  anything else

Inconsistent input (total != passed + failed, negative counts) is refused
with InconsistentTestSummary rather than guessed at: a false "no regression"
is worse than a hard stop.
"""

import logging
from typing import Any, Mapping

from steward.lib import validate
from steward.lib.types import TestRunSummary, Verdict, VerdictKind

logger = logging.getLogger(__name__)


class InconsistentTestSummary(Exception):
    """A test summary's counts contradict each other."""

    def __init__(self, label: str, summary: TestRunSummary, reason: str):
        self.label = label
        self.summary = summary
        super().__init__(
            f"{label} summary is inconsistent ({reason}): "
            f"passed={summary.passed} failed={summary.failed} total={summary.total}"
        )


def check_summary(summary: TestRunSummary, label: str = "test") -> None:
    """
    Verify a summary's internal invariants.

    Raises:
        InconsistentTestSummary: negative counts or total != passed + failed
    """
    if summary.passed < 0 or summary.failed < 0 or summary.total < 0:
        raise InconsistentTestSummary(label, summary, "negative count")
    if summary.total != summary.passed + summary.failed:
        raise InconsistentTestSummary(label, summary, "total != passed + failed")
    if len(set(summary.failing_test_ids)) > summary.failed:
        # Ids outnumbering the failure count is suspicious but not contradictory
        # enough to refuse: id lists may include retried tests.
        logger.warning(
            f"[REGRESSION] {label} summary lists {len(set(summary.failing_test_ids))} "
            f"failing ids but failed={summary.failed}"
        )


def compare(baseline: TestRunSummary, current: TestRunSummary) -> Verdict:
    """
    Compare a current test run against the baseline.

    Raises:
        InconsistentTestSummary: If either summary is inconsistent
    """
    check_summary(baseline, "baseline")
    check_summary(current, "current")

    baseline_failing = set(baseline.failing_test_ids)
    current_failing = set(current.failing_test_ids)

    regressed = tuple(dict.fromkeys(
        t for t in current.failing_test_ids if t not in baseline_failing
    ))
    fixed = tuple(dict.fromkeys(
        t for t in baseline.failing_test_ids if t not in current_failing
    ))
    newly_passing = max(0, current.passed - baseline.passed)

    if current.failed > baseline.failed and len(current_failing) < current.failed:
        logger.warning(
            f"[REGRESSION] failures rose from {baseline.failed} to {current.failed} but current "
            f"lists {len(current_failing)} failing ids; verdict rests on counts alone"
        )

    if (current.failed > 0 and regressed) or current.passed < baseline.passed:
        kind = VerdictKind.REGRESSION
    elif current.passed > baseline.passed and current.failed <= baseline.failed and not regressed:
        kind = VerdictKind.IMPROVED
    else:
        kind = VerdictKind.NO_REGRESSION

    verdict = Verdict(
        kind=kind,
        regressed_test_ids=regressed,
        newly_passing_count=newly_passing,
        fixed_test_ids=fixed,
    )

    message = (
        f"[REGRESSION] baseline {baseline.passed}/{baseline.total} -> "
        f"current {current.passed}/{current.total}: {kind.value}"
    )
    if kind is VerdictKind.REGRESSION:
        logger.warning(message + (f" ({', '.join(regressed)})" if regressed else ""))
    else:
        logger.info(message)
    return verdict


def summary_from_dict(data: Mapping[str, Any]) -> TestRunSummary:
    """
    Build a TestRunSummary from a parsed document.

    Accepts both spellings: passed/failed/total/failing_test_ids and the
    sprint-file tests_passed/tests_failed/tests_total/failing_tests.

    Raises:
        ValidationError: If data doesn't match the test_summary schema
    """
    validate.validate(dict(data), "test_summary")

    if "passed" in data:
        passed, failed, total = data["passed"], data["failed"], data["total"]
        failing = data.get("failing_test_ids", data.get("failing_tests", []))
    else:
        passed, failed, total = data["tests_passed"], data["tests_failed"], data["tests_total"]
        failing = data.get("failing_tests", data.get("failing_test_ids", []))

    timestamp = data.get("timestamp")
    if timestamp is not None and not isinstance(timestamp, str):
        # YAML loads unquoted ISO timestamps as datetime
        timestamp = timestamp.isoformat()

    return TestRunSummary(
        passed=passed,
        failed=failed,
        total=total,
        failing_test_ids=tuple(failing),
        timestamp=timestamp,
    )


def summary_to_dict(summary: TestRunSummary) -> dict[str, Any]:
    """Serialize a TestRunSummary using the passed/failed/total spelling."""
    return {
        "passed": summary.passed,
        "failed": summary.failed,
        "total": summary.total,
        "failing_test_ids": list(summary.failing_test_ids),
        "timestamp": summary.timestamp,
    }
