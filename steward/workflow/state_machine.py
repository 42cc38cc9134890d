"""Sprint state machine with explicit transitions and guards.

Thin wrapper around the FSM in fsm.py. All transition logic lives in fsm.py;
this module provides:
- SprintState enum for type safety
- advance(): run a trigger against a Sprint value, returning the new Sprint
- transition(): destination-based API that loads and saves the sprint file

Usage:
    from steward.workflow.state_machine import transition, SprintState

    transition(sprint_path, SprintState.REVIEW, gate=evaluate_gate(sprint, current))
"""

import logging
from enum import Enum
from pathlib import Path

from transitions import MachineError

from steward.lib.sprint_file import load_sprint, save_sprint
from steward.lib.types import Sprint
from steward.workflow.fsm import STATES, TRIGGER_FOR, SprintFSM
from steward.workflow.gate import GateResult
from steward.workflow.sprint import append_blocker, append_decision, with_status

logger = logging.getLogger(__name__)


class SprintState(Enum):
    """All valid sprint lifecycle states.

    Values match FSM state strings for compatibility.
    """
    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    BLOCKED = "blocked"
    DONE = "done"


class InvalidTransition(Exception):
    """Raised when attempting an invalid state transition."""

    def __init__(self, from_state: str, to_state: SprintState, sprint_id: str = "", reason: str = ""):
        self.from_state = from_state
        self.to_state = to_state
        self.sprint_id = sprint_id
        self.reason = reason
        super().__init__(
            f"Invalid transition: {from_state} -> {to_state.value}"
            + (f" (sprint: {sprint_id})" if sprint_id else "")
            + (f": {reason}" if reason else "")
        )


def parse_state(status_str: str | None) -> SprintState | None:
    """Parse a status string into SprintState enum.

    Returns None if status is unknown.
    """
    if status_str is None:
        return None
    for state in SprintState:
        if state.value == status_str:
            return state
    return None


def advance(
    sprint: Sprint,
    trigger: str,
    gate: GateResult | None = None,
    resolution: str = "",
) -> Sprint:
    """Run a lifecycle trigger against a sprint and return the updated sprint.

    Entering blocked appends a blocker entry listing the gate's findings;
    resolve requires a resolution, recorded as a decision.

    Raises:
        InvalidTransition: If the trigger is not valid from the current state
            or its guards reject the gate
        ValueError: If resolve is called without a resolution
    """
    fsm = SprintFSM(sprint.status, sprint_id=sprint.id)
    from_state = fsm.state

    if fsm.is_terminal:
        raise InvalidTransition(from_state, SprintState(from_state), sprint.id, "sprint is done")

    if trigger == "resolve" and not resolution.strip():
        raise ValueError("A blocked sprint can only be resolved with a resolution")

    try:
        executed = getattr(fsm, trigger)(gate=gate)
    except (AttributeError, MachineError) as e:
        target = _target_for(from_state, trigger)
        raise InvalidTransition(from_state, target, sprint.id, f"'{trigger}' not allowed") from e

    if not executed:
        reasons = "; ".join(gate.reasons) if gate and gate.reasons else "guard conditions not met"
        if gate is not None and gate.is_clear and not gate.tasks_complete:
            reasons = "not all tasks are completed"
        raise InvalidTransition(from_state, _target_for(from_state, trigger), sprint.id, reasons)

    updated = with_status(sprint, fsm.state)

    if fsm.state == SprintState.BLOCKED.value:
        description = "; ".join(gate.reasons) if gate and gate.reasons else f"Blocked from {from_state}"
        updated = append_blocker(updated, description)
    elif trigger == "resolve":
        last = sprint.blockers[-1].description if sprint.blockers else "blocker"
        updated = append_decision(updated, f"Resolved: {last}", resolution)

    return updated


def _target_for(from_state: str, trigger: str) -> SprintState:
    """Best-effort destination of a trigger, for error messages."""
    for (source, dest), name in TRIGGER_FOR.items():
        if source == from_state and name == trigger:
            return SprintState(dest)
    return parse_state(from_state) or SprintState.PLANNED


def transition(
    sprint_path: Path,
    to_state: SprintState,
    gate: GateResult | None = None,
    reason: str = "",
    resolution: str = "",
) -> SprintState:
    """Transition the sprint stored at sprint_path towards a new state.

    Uses the FSM for validation; the sprint file is rewritten with the new
    status. Submitting for review with an unclear gate lands in BLOCKED, so
    the state actually reached is returned.

    Raises:
        InvalidTransition: If the transition is not allowed
    """
    sprint = load_sprint(sprint_path)
    current_state = sprint.status
    reason_str = f" ({reason})" if reason else ""

    # Self-transition is a no-op
    if current_state == to_state.value:
        logger.debug(f"[STATE] {sprint.id}: already in {to_state.value}, no-op")
        return to_state

    if current_state not in STATES:
        raise InvalidTransition(current_state, to_state, sprint.id, "unknown source state")

    trigger = TRIGGER_FOR.get((current_state, to_state.value))
    if trigger is None:
        raise InvalidTransition(current_state, to_state, sprint.id)

    logger.info(f"[STATE] {sprint.id}: {current_state} -> {to_state.value}{reason_str}")
    updated = advance(sprint, trigger, gate=gate, resolution=resolution)
    save_sprint(updated, sprint_path)
    return SprintState(updated.status)


def get_state(sprint_path: Path) -> SprintState | None:
    """Get current sprint state.

    Returns None if state is unknown or not set.
    """
    return parse_state(load_sprint(sprint_path).status)


def can_transition(from_state: str, to_state: SprintState) -> bool:
    """Check if a transition between two states exists (guards not evaluated)."""
    if from_state == to_state.value:
        return True
    return (from_state, to_state.value) in TRIGGER_FOR
