"""
What a caller can do about an error.

``RecoverableError``: the same request may be submitted again.
``UnrecoverableError``: the request itself has to change.
"""

from typing import Optional


class RecoverableError(Exception):
    """The request was valid; running it again can succeed."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message)
        self.recoverable = True


class UnrecoverableError(Exception):
    """The request is invalid and will fail the same way every time."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message)
        self.recoverable = False


class ConfigurationError(UnrecoverableError):
    """Run configuration or parameter overrides failed validation."""

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []

    @property
    def fields(self) -> list[str]:
        """Names of the offending fields."""
        return [getattr(error, "field", str(error)) for error in self.errors]


class OptimizationCancelledError(RecoverableError):
    """The run's cancellation token was set; progress at that point is attached."""

    def __init__(self, message: str, completed: int = 0, total: int = 0, **kwargs):
        super().__init__(message, **kwargs)
        self.completed = completed
        self.total = total
