"""
Sprint scope validation.

Classifies the files a task intends to touch against the active sprint's
scope declaration. Per path, in precedence order:

1. matches any off_limits pattern -> OFF_LIMITS (deny beats allow)
2. matches any in_scope pattern   -> IN_SCOPE
3. otherwise                      -> UNSCOPED (shared code; needs impact analysis)

This is a pure function of the Sprint value passed in. Deciding whether to
block, warn, or proceed is the caller's job; ScopeReport only summarizes.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from steward.lib.types import Classification, Sprint

from .matcher import first_match

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScopeFinding:
    """Classification of one path plus the pattern that decided it."""
    path: str
    classification: Classification
    pattern: str | None = None  # None for UNSCOPED


def explain(path: str, sprint: Sprint) -> ScopeFinding:
    """Classify one path and report which pattern decided it.

    When several patterns of the same list match, the first declared one
    is reported.
    """
    pattern = first_match(path, sprint.scope.off_limits)
    if pattern is not None:
        return ScopeFinding(path, Classification.OFF_LIMITS, pattern)

    pattern = first_match(path, sprint.scope.in_scope)
    if pattern is not None:
        return ScopeFinding(path, Classification.IN_SCOPE, pattern)

    return ScopeFinding(path, Classification.UNSCOPED)


def classify(paths: Iterable[str], sprint: Sprint) -> dict[str, Classification]:
    """Classify each path against the sprint scope.

    Returns:
        Dict path -> Classification, in input order (duplicates collapse)
    """
    result: dict[str, Classification] = {}
    for path in paths:
        if path not in result:
            result[path] = explain(path, sprint).classification
    logger.debug(f"[SCOPE] {sprint.id}: classified {len(result)} path(s)")
    return result


@dataclass
class ScopeReport:
    """Classification grouped by outcome."""
    in_scope: list[str] = field(default_factory=list)
    off_limits: list[str] = field(default_factory=list)
    unscoped: list[str] = field(default_factory=list)
    approved: list[str] = field(default_factory=list)  # Non-IN_SCOPE paths with explicit approval

    @property
    def violations(self) -> list[str]:
        """Paths that block progress: OFF_LIMITS or UNSCOPED and not approved."""
        return [p for p in self.off_limits + self.unscoped if p not in self.approved]

    @property
    def is_clear(self) -> bool:
        return not self.violations


def build_report(
    classification: dict[str, Classification],
    approved: Iterable[str] = (),
) -> ScopeReport:
    """Group a classify() result. approved lists paths a human explicitly allowed."""
    approved_set = set(approved)
    report = ScopeReport()
    for path, outcome in classification.items():
        if outcome is Classification.OFF_LIMITS:
            report.off_limits.append(path)
        elif outcome is Classification.UNSCOPED:
            report.unscoped.append(path)
        else:
            report.in_scope.append(path)
            continue
        if path in approved_set:
            report.approved.append(path)

    if report.off_limits:
        logger.warning(f"[SCOPE] Off-limits paths: {', '.join(report.off_limits)}")
    return report
