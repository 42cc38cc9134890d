"""Pure operations on Sprint values.

Sprints are immutable; every operation returns a new Sprint. Decision and
blocker logs are append-only. A sprint in the done state cannot be changed.
"""

import dataclasses
from datetime import datetime, timezone
from typing import Iterable

from steward.lib.types import (
    Blocker,
    Decision,
    Sprint,
    TaskStatus,
    TestRunSummary,
    Verdict,
    VerdictKind,
)
from steward.workflow.fsm import TERMINAL_STATES


class SprintClosed(Exception):
    """Attempted to change a sprint that is already done."""

    def __init__(self, sprint_id: str):
        self.sprint_id = sprint_id
        super().__init__(f"Sprint {sprint_id} is done and cannot be modified")


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _check_open(sprint: Sprint) -> None:
    if sprint.status in TERMINAL_STATES:
        raise SprintClosed(sprint.id)


def _task_index(sprint: Sprint, task_id: str) -> int:
    for i, task in enumerate(sprint.tasks):
        if task.id == task_id:
            return i
    raise KeyError(f"Task {task_id} not found in sprint {sprint.id}")


def set_task_status(sprint: Sprint, task_id: str, status: TaskStatus) -> Sprint:
    _check_open(sprint)
    i = _task_index(sprint, task_id)
    tasks = list(sprint.tasks)
    tasks[i] = dataclasses.replace(tasks[i], status=status)
    return dataclasses.replace(sprint, tasks=tuple(tasks))


def record_files(sprint: Sprint, task_id: str, paths: Iterable[str]) -> Sprint:
    """Add paths to a task's files_modified (no duplicates, order kept)."""
    _check_open(sprint)
    i = _task_index(sprint, task_id)
    tasks = list(sprint.tasks)
    files = tuple(dict.fromkeys((*tasks[i].files_modified, *paths)))
    tasks[i] = dataclasses.replace(tasks[i], files_modified=files)
    return dataclasses.replace(sprint, tasks=tuple(tasks))


def append_decision(sprint: Sprint, what: str, why: str, timestamp: str | None = None) -> Sprint:
    _check_open(sprint)
    entry = Decision(what=what, why=why, timestamp=timestamp or now_iso())
    return dataclasses.replace(sprint, decisions=(*sprint.decisions, entry))


def append_blocker(sprint: Sprint, description: str, resolution: str = "", timestamp: str | None = None) -> Sprint:
    _check_open(sprint)
    entry = Blocker(description=description, resolution=resolution, timestamp=timestamp or now_iso())
    return dataclasses.replace(sprint, blockers=(*sprint.blockers, entry))


def with_baseline(sprint: Sprint, baseline: TestRunSummary) -> Sprint:
    """Record the regression baseline (captured before work begins)."""
    _check_open(sprint)
    return dataclasses.replace(sprint, regression_baseline=baseline)


def with_status(sprint: Sprint, status: str) -> Sprint:
    _check_open(sprint)
    return dataclasses.replace(sprint, status=status)


def is_archivable(sprint: Sprint, verdict: Verdict) -> bool:
    """True when every task is completed and the verdict is not a regression."""
    if verdict.kind is VerdictKind.REGRESSION:
        return False
    return all(t.status is TaskStatus.COMPLETED for t in sprint.tasks)
