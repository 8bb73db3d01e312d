"""
Optimizer lifecycle state machine.

IDLE -> PRECOMPUTING -> SEARCHING -> DONE, with CANCELLED and FAILED as
terminal alternatives. A finished machine may start a new run.
"""

import threading
from enum import Enum
from typing import Any, Callable, Optional

from ..errors import StateTransitionError
from ..logging.config import get_optimizer_logger, log_state_transition

optimizer_logger = get_optimizer_logger(__name__)

ProgressCallback = Callable[[int, int], None]


class OptimizerState(str, Enum):
    """Optimizer run phases."""
    IDLE = "idle"
    PRECOMPUTING = "precomputing"
    SEARCHING = "searching"
    DONE = "done"
    CANCELLED = "cancelled"
    FAILED = "failed"


_TERMINAL = {OptimizerState.DONE, OptimizerState.CANCELLED, OptimizerState.FAILED}

ALLOWED_TRANSITIONS: dict[OptimizerState, set[OptimizerState]] = {
    OptimizerState.IDLE: {OptimizerState.PRECOMPUTING},
    OptimizerState.PRECOMPUTING: {
        OptimizerState.SEARCHING,
        OptimizerState.DONE,
        OptimizerState.CANCELLED,
        OptimizerState.FAILED,
    },
    OptimizerState.SEARCHING: {
        OptimizerState.DONE,
        OptimizerState.CANCELLED,
        OptimizerState.FAILED,
    },
    OptimizerState.DONE: {OptimizerState.PRECOMPUTING},
    OptimizerState.CANCELLED: {OptimizerState.PRECOMPUTING},
    OptimizerState.FAILED: {OptimizerState.PRECOMPUTING},
}


class OptimizerStateMachine:
    """Tracks the phase of the current optimizer run."""

    def __init__(self):
        self.state = OptimizerState.IDLE
        self.run_id: Optional[str] = None
        self.complexity: Optional[int] = None

    @property
    def is_running(self) -> bool:
        return self.state in (OptimizerState.PRECOMPUTING, OptimizerState.SEARCHING)

    @property
    def is_finished(self) -> bool:
        return self.state in _TERMINAL

    def transition(
        self,
        new_state: OptimizerState,
        trigger: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        """
        Move to ``new_state``.

        Raises:
            StateTransitionError: If the transition is not allowed
        """
        if new_state not in ALLOWED_TRANSITIONS[self.state]:
            raise StateTransitionError(
                f"Cannot move optimizer from {self.state.value} to {new_state.value}",
                current_state=self.state.value,
                attempted_transition=new_state.value,
                run_id=self.run_id,
                context={"trigger": trigger}
            )

        log_state_transition(
            optimizer_logger,
            run_id=self.run_id or "",
            from_state=self.state.value,
            to_state=new_state.value,
            trigger=trigger,
            context=context
        )
        self.state = new_state


class CancellationToken:
    """Cooperative cancellation flag checked at the optimizer's yield points."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()
