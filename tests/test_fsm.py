"""Tests for specflow.workflow.fsm module."""

import logging

import pytest

from specflow.lib.errors import InvalidTransition
from specflow.lib.state import WorkspaceState
from specflow.workflow.fsm import STATES, TRANSITIONS, ProposalFSM, initial_state


@pytest.fixture
def state():
    state = WorkspaceState()
    state.activate("second", {})
    state.activate("first", {})
    return state


class TestFSMStates:
    def test_all_states_defined(self):
        assert set(STATES) == {
            "created", "active_primary", "active_secondary",
            "completed", "removed", "abandoned",
        }

    def test_every_trigger_targets_known_state(self):
        for t in TRANSITIONS:
            assert t["dest"] in STATES

    def test_initial_state_from_workspace_state(self, state):
        assert initial_state("first", state) == "active_primary"
        assert initial_state("second", state) == "active_secondary"
        assert initial_state("other", state) == "created"


class TestFSMTransitions:
    def test_activate_created(self, state):
        fsm = ProposalFSM("other", state)
        assert fsm.fire("activate") == "active_primary"

    def test_reactivate_primary(self, state):
        fsm = ProposalFSM("first", state)
        assert fsm.fire("activate") == "active_primary"

    def test_demote_and_promote(self, state):
        fsm = ProposalFSM("first", state)
        assert fsm.fire("demote") == "active_secondary"
        assert fsm.fire("activate") == "active_primary"

    def test_deactivate_requires_active(self, state):
        assert ProposalFSM("second", state).fire("deactivate") == "created"
        with pytest.raises(InvalidTransition, match="Cannot deactivate proposal 'other' while created"):
            ProposalFSM("other", state).fire("deactivate")

    def test_remove_active_needs_force(self, state):
        fsm = ProposalFSM("first", state)
        with pytest.raises(InvalidTransition, match="use force"):
            fsm.fire("remove")
        assert fsm.state == "active_primary"
        assert fsm.fire("remove", force=True) == "removed"

    def test_remove_inactive(self, state):
        assert ProposalFSM("other", state).fire("remove") == "removed"

    def test_terminal_states(self, state):
        fsm = ProposalFSM("other", state)
        fsm.fire("complete")
        assert fsm.get_available_triggers() == []
        with pytest.raises(InvalidTransition):
            fsm.fire("activate")

    def test_abandon_from_any_open_state(self, state):
        for slug in ("first", "second", "other"):
            assert ProposalFSM(slug, state).fire("abandon") == "abandoned"

    def test_can(self, state):
        fsm = ProposalFSM("other", state)
        assert fsm.can("activate")
        assert not fsm.can("demote")


class TestFSMCallbacks:
    def test_transition_logged(self, state, caplog):
        with caplog.at_level(logging.INFO, logger="specflow.workflow.fsm"):
            ProposalFSM("other", state).fire("activate")
        assert "[FSM] other: created -> active_primary (activate)" in caplog.text

    def test_on_transition_callback(self, state):
        calls = []
        fsm = ProposalFSM("second", state, on_transition=lambda *a: calls.append(a))
        fsm.fire("deactivate")
        assert calls == [("active_secondary", "created", "deactivate")]
