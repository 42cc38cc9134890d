"""
steward regress / parse-tests - Compare test runs against the baseline.
"""

import json
from pathlib import Path

from steward.lib import validate
from steward.lib.sprint_file import load_sprint
from steward.lib.test_parser import parse_test_run
from steward.lib.types import TestRunSummary, Verdict, VerdictKind
from steward.regression.detector import compare, summary_from_dict, summary_to_dict


def load_summary(filepath: Path) -> TestRunSummary:
    """Load a test summary file (JSON or YAML)."""
    return summary_from_dict(validate.read_document(filepath, "test_summary"))


def print_verdict(baseline: TestRunSummary, current: TestRunSummary, verdict: Verdict) -> None:
    print(f"Baseline: {baseline.passed} passed, {baseline.failed} failed ({baseline.total} total)")
    print(f"Current:  {current.passed} passed, {current.failed} failed ({current.total} total)")
    print()
    print(f"Verdict: {verdict.kind.value}")
    if verdict.regressed_test_ids:
        print("Newly failing:")
        for test_id in verdict.regressed_test_ids:
            print(f"  {test_id}")
    if verdict.fixed_test_ids:
        print("Fixed since baseline:")
        for test_id in verdict.fixed_test_ids:
            print(f"  {test_id}")
    if verdict.newly_passing_count:
        print(f"+{verdict.newly_passing_count} passing")


def cmd_regress(args, config) -> int:
    """Compare a current test run with a baseline.

    Baseline comes from --baseline, else from the sprint file.
    Returns 1 on REGRESSION.
    """
    current = load_summary(Path(args.current))

    if args.baseline:
        baseline = load_summary(Path(args.baseline))
    else:
        sprint = load_sprint(config.sprint_file)
        if sprint.regression_baseline is None:
            print(f"ERROR: Sprint {sprint.id} has no regression baseline. Use --baseline FILE.")
            return 2
        baseline = sprint.regression_baseline

    verdict = compare(baseline, current)
    print_verdict(baseline, current, verdict)

    if verdict.kind is VerdictKind.REGRESSION:
        print()
        print("BLOCKED: fix the regression before completing the sprint.")
        return 1
    return 0


def cmd_parse_tests(args, config) -> int:
    """Turn raw test runner output into a summary JSON document."""
    output = Path(args.output).read_text()
    try:
        summary = parse_test_run(output)
    except ValueError as e:
        print(f"ERROR: {e}")
        return 2

    text = json.dumps(summary_to_dict(summary), indent=2)
    if args.write:
        Path(args.write).write_text(text + "\n")
        print(f"Wrote {args.write}: {summary.passed} passed, {summary.failed} failed")
    else:
        print(text)
    return 0
