"""
Shared data types for steward.

Records passed between the search, scope, and regression engines live here
to avoid circular imports. All of them are immutable: operations that
"change" a sprint return a new value.
"""

from dataclasses import dataclass, field
from enum import Enum


class Level(Enum):
    """Enforcement level of a policy."""
    MUST = "MUST"
    SHOULD = "SHOULD"
    MAY = "MAY"


class QueryType(Enum):
    """Which PolicyIndex mapping a query is resolved against."""
    KEYWORD = "keyword"
    SCENARIO = "scenario"
    TECHNOLOGY = "technology"
    CATEGORY = "category"


class Classification(Enum):
    """Scope classification of a single file path."""
    IN_SCOPE = "IN_SCOPE"
    OFF_LIMITS = "OFF_LIMITS"
    UNSCOPED = "UNSCOPED"


class Recommendation(Enum):
    """Strategy for modifying shared (unscoped) code."""
    MODIFY_IN_PLACE = "MODIFY_IN_PLACE"
    CREATE_VARIANT = "CREATE_VARIANT"
    REQUEST_PERMISSION = "REQUEST_PERMISSION"


class VerdictKind(Enum):
    """Outcome of a baseline/current test comparison."""
    NO_REGRESSION = "NO_REGRESSION"
    REGRESSION = "REGRESSION"
    IMPROVED = "IMPROVED"


class TaskStatus(Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class PolicyRecord:
    """Metadata for one policy. Identity is the dotted id (e.g. "4.1")."""
    id: str
    title: str
    level: Level
    category: str


@dataclass(frozen=True)
class Query:
    """A typed search request, already reduced from free text by the caller."""
    type: QueryType
    value: str


@dataclass(frozen=True)
class TestRunSummary:
    """Aggregate result of one test run.

    Only failing tests are tracked by id; passing tests are a count.
    """
    passed: int
    failed: int
    total: int
    failing_test_ids: tuple[str, ...] = ()
    timestamp: str | None = None  # ISO-8601

    # Keep pytest from collecting this as a test class
    __test__ = False


@dataclass(frozen=True)
class Verdict:
    """Result of RegressionDetector.compare()."""
    kind: VerdictKind
    regressed_test_ids: tuple[str, ...] = ()
    newly_passing_count: int = 0
    fixed_test_ids: tuple[str, ...] = ()  # Failing in baseline, not failing now

    @property
    def is_regression(self) -> bool:
        return self.kind is VerdictKind.REGRESSION


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    status: TaskStatus = TaskStatus.PENDING
    files_modified: tuple[str, ...] = ()


@dataclass(frozen=True)
class Decision:
    """Append-only log entry: what was decided and why."""
    what: str
    why: str
    timestamp: str


@dataclass(frozen=True)
class Blocker:
    """Append-only log entry: what blocked the sprint and how it was resolved."""
    description: str
    resolution: str
    timestamp: str


@dataclass(frozen=True)
class Scope:
    """Allow/deny path-glob lists bounding what a sprint may modify."""
    in_scope: tuple[str, ...] = ()
    off_limits: tuple[str, ...] = ()


@dataclass(frozen=True)
class Sprint:
    """A scoped, goal-bounded unit of work."""
    id: str
    goal: str
    scope: Scope = field(default_factory=Scope)
    tasks: tuple[Task, ...] = ()
    regression_baseline: TestRunSummary | None = None
    decisions: tuple[Decision, ...] = ()
    blockers: tuple[Blocker, ...] = ()
    status: str = "planned"  # Lifecycle state, see workflow/fsm.py

    def modified_files(self) -> list[str]:
        """All files modified across tasks, first occurrence order, no duplicates."""
        seen: dict[str, None] = {}
        for task in self.tasks:
            for path in task.files_modified:
                seen.setdefault(path, None)
        return list(seen)
