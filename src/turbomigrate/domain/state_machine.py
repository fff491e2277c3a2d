"""
State Machine for a migration run.

This module is the single source of truth for which run states exist and
which moves between them are legal. The orchestrator asks it before every
step; nothing else decides transitions.

Architecture Note:
    - Pure domain logic - no I/O, no prompts, no subprocesses
    - Strictly linear with early exit: no state is ever re-entered
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from turbomigrate.domain.errors import InvalidTransitionError

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    """Lifecycle states of a migration run."""

    RESOLVING_CONFIG = "resolving_config"
    RESOLVING_TARGET = "resolving_target"
    RESOLVING_MIGRATIONS = "resolving_migrations"
    EXECUTING = "executing"
    DONE = "done"
    CANCELLED = "cancelled"

    def is_terminal(self) -> bool:
        return self in (RunState.DONE, RunState.CANCELLED)


# The happy path, in order
PIPELINE: tuple[RunState, ...] = (
    RunState.RESOLVING_CONFIG,
    RunState.RESOLVING_TARGET,
    RunState.RESOLVING_MIGRATIONS,
    RunState.EXECUTING,
    RunState.DONE,
)


def can_transition(current: RunState, target: RunState) -> bool:
    """
    Check whether a run may move from ``current`` to ``target``.

    Rules:
        1. Terminal states never move
        2. CANCELLED is reachable from every non-terminal state
        3. Otherwise only the next pipeline state is reachable
    """
    if current.is_terminal():
        return False
    if target == RunState.CANCELLED:
        return True
    index = PIPELINE.index(current)
    return index + 1 < len(PIPELINE) and PIPELINE[index + 1] == target


@dataclass
class RunStateMachine:
    """Tracks the state of one run and records every move it makes."""

    state: RunState = RunState.RESOLVING_CONFIG
    history: list[RunState] = field(default_factory=lambda: [RunState.RESOLVING_CONFIG])
    cancel_reason: str | None = None

    def advance(self, target: RunState) -> RunState:
        """
        Move to ``target``.

        Raises:
            InvalidTransitionError: If the move is not allowed
        """
        if not can_transition(self.state, target):
            raise InvalidTransitionError(
                f"Illegal run transition: {self.state.value} -> {target.value}"
            )
        logger.debug("Run state %s -> %s", self.state.value, target.value)
        self.state = target
        self.history.append(target)
        return target

    def cancel(self, reason: str) -> None:
        """Move to CANCELLED. A run that already finished stays as it is."""
        if self.state.is_terminal():
            return
        self.cancel_reason = reason
        self.advance(RunState.CANCELLED)

    @property
    def finished(self) -> bool:
        return self.state.is_terminal()
