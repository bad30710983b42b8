"""Proposal lifecycle state machine using transitions library.

The machine is rebuilt for every operation. Its initial state is derived
from the workspace state record (active list and primary), so nothing
beyond .specflow.json is ever persisted.

Usage:
    from specflow.workflow.fsm import ProposalFSM

    fsm = ProposalFSM("auth", state)
    fsm.fire("activate")  # created -> active_primary
    fsm.fire("remove", force=True)
"""

import logging
from typing import Callable

from transitions import Machine, MachineError

from specflow.lib.errors import InvalidTransition
from specflow.lib.state import WorkspaceState

logger = logging.getLogger(__name__)


STATES = [
    "created",
    "active_primary",
    "active_secondary",
    "completed",
    "removed",
    "abandoned",
]

ACTIVE_STATES = ["active_primary", "active_secondary"]
OPEN_STATES = ["created"] + ACTIVE_STATES

TRANSITIONS = [
    # Activation (re-activating the primary refreshes its hashes)
    {"trigger": "activate", "source": "created", "dest": "active_primary"},
    {"trigger": "activate", "source": "active_secondary", "dest": "active_primary"},
    {"trigger": "activate", "source": "active_primary", "dest": "active_primary"},

    # Another proposal became primary
    {"trigger": "demote", "source": "active_primary", "dest": "active_secondary"},

    {"trigger": "deactivate", "source": ACTIVE_STATES, "dest": "created"},

    {"trigger": "complete", "source": OPEN_STATES, "dest": "completed"},

    # Active proposals are only removed when forced
    {"trigger": "remove", "source": "created", "dest": "removed"},
    {"trigger": "remove", "source": ACTIVE_STATES, "dest": "removed", "conditions": "is_forced"},

    {"trigger": "abandon", "source": OPEN_STATES, "dest": "abandoned"},
]


def initial_state(slug: str, state: WorkspaceState) -> str:
    """Lifecycle state of an existing proposal according to the state record."""
    if slug == state.primary:
        return "active_primary"
    if state.is_active(slug):
        return "active_secondary"
    return "created"


class ProposalFSM:
    """State machine for one proposal.

    Wraps the transitions library:
    - Derives the initial state from WorkspaceState
    - Raises InvalidTransition instead of returning False
    - Logs all transitions
    """

    def __init__(
        self,
        slug: str,
        state: WorkspaceState,
        on_transition: Callable[[str, str, str], None] | None = None,
    ):
        """
        Args:
            slug: Proposal slug (must exist in the proposal area)
            state: Current workspace state record
            on_transition: Optional callback(from_state, to_state, trigger)
        """
        self.slug = slug
        self.on_transition = on_transition

        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial=initial_state(slug, state),
            auto_transitions=False,
            send_event=True,
            after_state_change="on_state_change",
        )

    def is_forced(self, event) -> bool:
        return bool(event.kwargs.get("force"))

    def on_state_change(self, event) -> None:
        from_state = event.transition.source
        to_state = event.transition.dest
        trigger = event.event.name

        logger.info(f"[FSM] {self.slug}: {from_state} -> {to_state} ({trigger})")

        if self.on_transition:
            self.on_transition(from_state, to_state, trigger)

    def can(self, trigger: str) -> bool:
        """Check if a trigger can be executed in current state."""
        return trigger in self.machine.get_triggers(self.state)

    def get_available_triggers(self) -> list[str]:
        return self.machine.get_triggers(self.state)

    def fire(self, trigger: str, **kwargs) -> str:
        """Run a trigger and return the new state.

        Raises:
            InvalidTransition: If the trigger is not allowed from the current
                state or its guard rejects it
        """
        source = self.state
        if not self.can(trigger):
            raise InvalidTransition(self.slug, trigger, source)

        try:
            moved = getattr(self, trigger)(**kwargs)
        except MachineError as e:
            raise InvalidTransition(self.slug, trigger, source) from e

        if not moved:
            raise InvalidTransition(
                self.slug, trigger, source,
                message=f"Proposal '{self.slug}' is active; use force to {trigger} it",
            )
        return self.state
