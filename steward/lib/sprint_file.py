"""
Sprint file loading and saving.

The sprint file (YAML or JSON) is owned by the sprint-lifecycle manager;
steward reads it into an immutable Sprint value. Loading fails hard: the
document must match sprint.schema.json and every scope pattern must compile,
so InvalidPattern surfaces before any classification is attempted.

File layout:

    sprint_id: checkout-v2
    goal: Rework checkout payment flow
    status: in_progress
    scope:
      in_scope: ["app/checkout/**"]
      off_limits: ["app/auth/**"]
    tasks:
      - {id: "1", title: Payment form, status: completed, files_modified: [app/checkout/pay.ts]}
    regression_baseline: {tests_passed: 45, tests_failed: 0, tests_total: 45, timestamp: "..."}
    decisions: [{what: ..., why: ..., timestamp: ...}]
    blockers: [{description: ..., resolution: ..., timestamp: ...}]
"""

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml

from steward.lib import validate
from steward.lib.types import (
    Blocker,
    Decision,
    Scope,
    Sprint,
    Task,
    TaskStatus,
    TestRunSummary,
)
from steward.regression.detector import summary_from_dict
from steward.scope.matcher import validate_patterns

logger = logging.getLogger(__name__)


def _timestamp(value: Any) -> str:
    """YAML loads unquoted ISO timestamps as datetime; keep everything as str."""
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _baseline_from_dict(data: dict | None) -> TestRunSummary | None:
    if data is None:
        return None
    return summary_from_dict(data)


def sprint_from_dict(data: dict) -> Sprint:
    """
    Build a Sprint from a parsed sprint document.

    Raises:
        ValidationError: If data doesn't match the sprint schema
        InvalidPattern: If any scope pattern is malformed
    """
    validate.validate(data, "sprint")

    scope_data = data.get("scope") or {}
    scope = Scope(
        in_scope=tuple(scope_data.get("in_scope") or ()),
        off_limits=tuple(scope_data.get("off_limits") or ()),
    )
    validate_patterns(scope.off_limits)
    validate_patterns(scope.in_scope)

    tasks = tuple(
        Task(
            id=str(t["id"]),
            title=t["title"],
            status=TaskStatus(t.get("status", "pending")),
            files_modified=tuple(t.get("files_modified") or ()),
        )
        for t in data.get("tasks") or ()
    )
    decisions = tuple(
        Decision(what=d["what"], why=d.get("why", ""), timestamp=_timestamp(d.get("timestamp")))
        for d in data.get("decisions") or ()
    )
    blockers = tuple(
        Blocker(
            description=b["description"],
            resolution=b.get("resolution", ""),
            timestamp=_timestamp(b.get("timestamp")),
        )
        for b in data.get("blockers") or ()
    )

    return Sprint(
        id=data["sprint_id"],
        goal=data["goal"],
        scope=scope,
        tasks=tasks,
        regression_baseline=_baseline_from_dict(data.get("regression_baseline")),
        decisions=decisions,
        blockers=blockers,
        status=data.get("status", "planned"),
    )


def sprint_to_dict(sprint: Sprint) -> dict:
    """Serialize a Sprint to the sprint file layout."""
    baseline = None
    if sprint.regression_baseline is not None:
        b = sprint.regression_baseline
        baseline = {
            "tests_passed": b.passed,
            "tests_failed": b.failed,
            "tests_total": b.total,
            "failing_tests": list(b.failing_test_ids),
        }
        if b.timestamp:
            baseline["timestamp"] = b.timestamp

    return {
        "sprint_id": sprint.id,
        "goal": sprint.goal,
        "status": sprint.status,
        "scope": {
            "in_scope": list(sprint.scope.in_scope),
            "off_limits": list(sprint.scope.off_limits),
        },
        "tasks": [
            {
                "id": t.id,
                "title": t.title,
                "status": t.status.value,
                "files_modified": list(t.files_modified),
            }
            for t in sprint.tasks
        ],
        "regression_baseline": baseline,
        "decisions": [
            {"what": d.what, "why": d.why, "timestamp": d.timestamp}
            for d in sprint.decisions
        ],
        "blockers": [
            {"description": b.description, "resolution": b.resolution, "timestamp": b.timestamp}
            for b in sprint.blockers
        ],
    }


def load_sprint(filepath: Path) -> Sprint:
    """
    Load and validate a sprint file.

    Raises:
        ValidationError: If the file is missing, unparseable, or malformed
        InvalidPattern: If any scope pattern is malformed
    """
    data = validate.read_document(filepath, "sprint")
    sprint = sprint_from_dict(data)
    logger.debug(f"Loaded sprint {sprint.id} ({len(sprint.tasks)} tasks) from {filepath}")
    return sprint


def save_sprint(sprint: Sprint, filepath: Path) -> None:
    """
    Write a sprint file. JSON for .json paths, YAML otherwise.

    Raises:
        ValidationError: If the serialized sprint doesn't match the schema
    """
    data = sprint_to_dict(sprint)
    validate.validate_before_write(data, "sprint", filepath)

    if filepath.suffix == ".json":
        text = json.dumps(data, indent=2) + "\n"
    else:
        text = yaml.safe_dump(data, sort_keys=False)

    tmp_path = filepath.with_suffix(filepath.suffix + ".tmp")
    tmp_path.write_text(text)
    tmp_path.replace(filepath)
