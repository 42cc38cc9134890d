"""Sprint lifecycle state machine using transitions library.

States:
    planned -> in_progress -> review -> done
    blocked is a side state, entered when the completion gate finds scope
    violations or a regression on submit or complete, and left only through
    resolve.

Guards read a GateResult (workflow/gate.py) passed as the `gate` keyword
argument of the trigger, so the machine is driven purely by the engines'
outputs:

    fsm = SprintFSM("in_progress", sprint_id="checkout-v2")
    fsm.submit(gate=evaluate_gate(sprint, current))  # -> review, or blocked
    fsm.complete(gate=gate)                          # -> done, or blocked

done is terminal.
"""

import logging
from typing import Callable

from transitions import Machine

logger = logging.getLogger(__name__)


# State values must match SprintState enum for compatibility
STATES = [
    "planned",
    "in_progress",
    "review",
    "blocked",
    "done",
]

# Transitions are tried in order for a trigger; the first whose guards pass wins.
TRANSITIONS = [
    {"trigger": "start", "source": "planned", "dest": "in_progress"},

    # Caller-initiated block (e.g. waiting on a permission grant)
    {"trigger": "block", "source": "planned", "dest": "blocked"},
    {"trigger": "block", "source": "in_progress", "dest": "blocked"},
    {"trigger": "block", "source": "review", "dest": "blocked"},

    # Submitting work: a clear gate enters review, anything else blocks
    {"trigger": "submit", "source": "in_progress", "dest": "review", "conditions": "gate_is_clear"},
    {"trigger": "submit", "source": "in_progress", "dest": "blocked", "unless": "gate_is_clear"},

    # Scope amendment, permission grant, or bug fix supplied by the caller
    {"trigger": "resolve", "source": "blocked", "dest": "in_progress"},

    # Reviewer sends work back
    {"trigger": "reopen", "source": "review", "dest": "in_progress"},

    {
        "trigger": "complete",
        "source": "review",
        "dest": "done",
        "conditions": ["gate_is_clear", "all_tasks_completed"],
    },
    {"trigger": "complete", "source": "review", "dest": "blocked", "unless": "gate_is_clear"},
]

TERMINAL_STATES = {"done"}


# Pre-computed lookup: (source, dest) -> trigger name
# Built once at module load, used to map destination-based API to trigger-based FSM
def _build_trigger_lookup() -> dict[tuple[str, str], str]:
    """Build lookup from (source, dest) -> trigger name."""
    lookup: dict[tuple[str, str], str] = {}
    for t in TRANSITIONS:
        key = (t["source"], t["dest"])
        if key not in lookup:  # First trigger wins for a given source->dest
            lookup[key] = t["trigger"]
    return lookup


TRIGGER_FOR = _build_trigger_lookup()


class SprintFSM:
    """State machine for sprint lifecycle.

    Wraps the transitions library with sprint-specific logic:
    - Guards evaluated against a GateResult passed to triggers
    - Logs all transitions
    - Optional callback for persistence by the owner of the sprint file
    """

    def __init__(
        self,
        initial: str = "planned",
        sprint_id: str = "",
        on_transition: Callable[[str, str, str], None] | None = None,
    ):
        """Initialize FSM for a sprint.

        Args:
            initial: Current lifecycle state of the sprint
            sprint_id: Used in log messages
            on_transition: Optional callback(from_state, to_state, trigger) called after transitions
        """
        self.sprint_id = sprint_id
        self.on_transition = on_transition

        if initial not in STATES:
            logger.warning(f"[FSM] {sprint_id}: Unknown state '{initial}', defaulting to 'planned'")
            initial = "planned"

        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial=initial,
            auto_transitions=False,  # Only explicit transitions
            send_event=True,  # Pass EventData to callbacks
            after_state_change="on_state_change",  # Callback after any transition
        )

    def gate_is_clear(self, event) -> bool:
        """Guard: scope is clear and no regression."""
        gate = event.kwargs.get("gate")
        return gate is not None and gate.is_clear

    def all_tasks_completed(self, event) -> bool:
        """Guard: every task in the sprint is completed."""
        gate = event.kwargs.get("gate")
        return gate is not None and gate.tasks_complete

    def on_state_change(self, event) -> None:
        """Callback after any state transition."""
        from_state = event.transition.source
        to_state = event.transition.dest
        trigger = event.event.name

        logger.info(f"[FSM] {self.sprint_id}: {from_state} -> {to_state} ({trigger})")

        if self.on_transition:
            self.on_transition(from_state, to_state, trigger)

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES
