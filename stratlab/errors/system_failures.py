"""
Optimizer failures.

These report misuse or breakage of the optimizer machinery itself, not
problems with the price data it was given. They are never retried.
"""

from typing import Any, Optional


class SystemFailureError(Exception):
    """The optimizer could not carry out or continue a run."""

    def __init__(self, message: str, run_id: Optional[str] = None,
                 context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.run_id = run_id
        self.context = dict(context or {})
        self.recoverable = False


class StateTransitionError(SystemFailureError):
    """A phase change the optimizer lifecycle does not allow."""

    def __init__(self, message: str, current_state: Optional[str] = None,
                 attempted_transition: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.current_state = current_state
        self.attempted_transition = attempted_transition


class OptimizationError(SystemFailureError):
    """A request the search cannot run, such as an unsupported combination size."""

    def __init__(self, message: str, complexity: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.complexity = complexity
