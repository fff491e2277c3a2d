"""
Tests for the run state machine.

Verifies the linear pipeline, cancellation from every non-terminal state
and that terminal states never move.
"""

import pytest

from turbomigrate.domain.errors import InvalidTransitionError
from turbomigrate.domain.state_machine import (
    PIPELINE,
    RunState,
    RunStateMachine,
    can_transition,
)


class TestCanTransition:
    """Test cases for the transition table."""

    def test_pipeline_steps_are_legal(self):
        for current, following in zip(PIPELINE, PIPELINE[1:]):
            assert can_transition(current, following)

    def test_skipping_a_step_is_illegal(self):
        assert not can_transition(RunState.RESOLVING_CONFIG, RunState.RESOLVING_MIGRATIONS)
        assert not can_transition(RunState.RESOLVING_TARGET, RunState.EXECUTING)
        assert not can_transition(RunState.RESOLVING_CONFIG, RunState.DONE)

    def test_going_back_is_illegal(self):
        assert not can_transition(RunState.EXECUTING, RunState.RESOLVING_TARGET)
        assert not can_transition(RunState.RESOLVING_TARGET, RunState.RESOLVING_TARGET)

    @pytest.mark.parametrize("state", [s for s in RunState if not s.is_terminal()])
    def test_cancel_reachable_from_non_terminal(self, state):
        assert can_transition(state, RunState.CANCELLED)

    @pytest.mark.parametrize("state", [RunState.DONE, RunState.CANCELLED])
    def test_terminal_states_never_move(self, state):
        for target in RunState:
            assert not can_transition(state, target)


class TestRunStateMachine:
    """Test cases for RunStateMachine."""

    def setup_method(self):
        self.machine = RunStateMachine()

    def test_initial_state(self):
        assert self.machine.state == RunState.RESOLVING_CONFIG
        assert self.machine.history == [RunState.RESOLVING_CONFIG]
        assert not self.machine.finished

    def test_full_run(self):
        for state in PIPELINE[1:]:
            self.machine.advance(state)

        assert self.machine.state == RunState.DONE
        assert self.machine.history == list(PIPELINE)
        assert self.machine.finished
        assert self.machine.cancel_reason is None

    def test_illegal_advance_raises(self):
        with pytest.raises(InvalidTransitionError, match="resolving_config -> executing"):
            self.machine.advance(RunState.EXECUTING)
        assert self.machine.state == RunState.RESOLVING_CONFIG

    def test_cancel_records_reason(self):
        self.machine.advance(RunState.RESOLVING_TARGET)
        self.machine.cancel("user escaped")

        assert self.machine.state == RunState.CANCELLED
        assert self.machine.cancel_reason == "user escaped"
        assert self.machine.history == [
            RunState.RESOLVING_CONFIG,
            RunState.RESOLVING_TARGET,
            RunState.CANCELLED,
        ]

    def test_cancel_after_done_is_ignored(self):
        for state in PIPELINE[1:]:
            self.machine.advance(state)

        self.machine.cancel("too late")

        assert self.machine.state == RunState.DONE
        assert self.machine.cancel_reason is None

    def test_no_advance_after_cancel(self):
        self.machine.cancel("stop")
        with pytest.raises(InvalidTransitionError):
            self.machine.advance(RunState.RESOLVING_TARGET)
