"""
steward sprint - Show sprint status, evaluate the completion gate, and move
the sprint through its lifecycle.
"""

from pathlib import Path

from steward.commands.regress import load_summary
from steward.lib.sprint_file import load_sprint, save_sprint
from steward.lib.types import TaskStatus
from steward.workflow.gate import evaluate_gate
from steward.workflow.state_machine import SprintState, advance

TASK_MARKERS = {
    TaskStatus.PENDING: "[ ]",
    TaskStatus.IN_PROGRESS: "[~]",
    TaskStatus.COMPLETED: "[x]",
}


def cmd_sprint_status(args, config) -> int:
    """Show the active sprint."""
    sprint = load_sprint(config.sprint_file)

    print(f"Sprint: {sprint.id}")
    print("=" * 60)
    print()
    print(f"Goal:       {sprint.goal}")
    print(f"Status:     {sprint.status}")
    print(f"In scope:   {', '.join(sprint.scope.in_scope) or '(none)'}")
    print(f"Off limits: {', '.join(sprint.scope.off_limits) or '(none)'}")
    print()

    if sprint.tasks:
        done_count = sum(1 for t in sprint.tasks if t.status is TaskStatus.COMPLETED)
        print(f"Tasks:      {done_count}/{len(sprint.tasks)} completed")
        for task in sprint.tasks:
            print(f"  {TASK_MARKERS[task.status]} {task.id}: {task.title}")
    else:
        print("Tasks:      none defined")

    print()
    baseline = sprint.regression_baseline
    if baseline:
        print(f"Baseline:   {baseline.passed} passed, {baseline.failed} failed ({baseline.timestamp or 'no timestamp'})")
    else:
        print("Baseline:   not recorded")
    print(f"Decisions:  {len(sprint.decisions)}")
    print(f"Blockers:   {len(sprint.blockers)}")
    return 0


def _gate(args, sprint):
    current = load_summary(Path(args.current)) if args.current else None
    return evaluate_gate(sprint, current, args.approve or ())


def cmd_sprint_gate(args, config) -> int:
    """Evaluate the completion gate. Returns 1 if blocked."""
    sprint = load_sprint(config.sprint_file)
    gate = _gate(args, sprint)

    if gate.verdict:
        print(f"Regression verdict: {gate.verdict.kind.value}")
    print(f"Modified files:     {len(gate.scope.in_scope)} in scope, "
          f"{len(gate.scope.off_limits)} off-limits, {len(gate.scope.unscoped)} unscoped")
    print(f"Tasks complete:     {'yes' if gate.tasks_complete else 'no'}")
    print()

    if gate.is_clear:
        print("Gate: CLEAR")
        return 0

    print("Gate: BLOCKED")
    for reason in gate.reasons:
        print(f"  - {reason}")
    return 1


def cmd_sprint_transition(args, config) -> int:
    """Run the named lifecycle trigger and rewrite the sprint file.

    Returns 1 if the sprint lands in blocked.
    """
    sprint = load_sprint(config.sprint_file)
    gate = _gate(args, sprint) if args.action in ("submit", "complete") else None

    updated = advance(sprint, args.action, gate=gate, resolution=args.resolution or "")
    save_sprint(updated, config.sprint_file)
    print(f"Sprint {sprint.id}: {sprint.status} -> {updated.status} ({args.action})")

    if updated.status == SprintState.BLOCKED.value and gate is not None:
        for reason in gate.reasons:
            print(f"  - {reason}")
        return 1
    return 0
