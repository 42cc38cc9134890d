"""Sprint lifecycle: state machine, completion gate, sprint value operations."""

from steward.workflow.fsm import STATES, TRANSITIONS, TRIGGER_FOR, SprintFSM
from steward.workflow.gate import GATE_BLOCKED, GATE_CLEAR, GateResult, evaluate_gate
from steward.workflow.state_machine import (
    InvalidTransition,
    SprintState,
    advance,
    can_transition,
    get_state,
    parse_state,
    transition,
)
from steward.workflow.sprint import (
    SprintClosed,
    append_blocker,
    append_decision,
    is_archivable,
    record_files,
    set_task_status,
    with_baseline,
)

__all__ = [
    "GATE_BLOCKED",
    "GATE_CLEAR",
    "GateResult",
    "InvalidTransition",
    "STATES",
    "SprintClosed",
    "SprintFSM",
    "SprintState",
    "TRANSITIONS",
    "TRIGGER_FOR",
    "advance",
    "append_blocker",
    "append_decision",
    "can_transition",
    "evaluate_gate",
    "get_state",
    "is_archivable",
    "parse_state",
    "record_files",
    "set_task_status",
    "transition",
    "with_baseline",
]
