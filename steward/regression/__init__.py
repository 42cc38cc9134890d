"""Regression baseline comparison."""

from steward.regression.detector import (
    InconsistentTestSummary,
    check_summary,
    compare,
    summary_from_dict,
    summary_to_dict,
)

__all__ = [
    "InconsistentTestSummary",
    "check_summary",
    "compare",
    "summary_from_dict",
    "summary_to_dict",
]
