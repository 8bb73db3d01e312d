"""
Error classification for the backtesting and optimization system.

The numeric core never raises: insufficient history and strategies without
signals are reported as outcomes. These exceptions are raised at the
boundaries (payload parsing, configuration, optimizer lifecycle) and handled
by the data store and engine.
"""

from .data_quality import (
    DataQualityError,
    MissingDataError,
    MalformedDataError,
    InsufficientDataError,
)
from .system_failures import (
    SystemFailureError,
    StateTransitionError,
    OptimizationError,
)
from .recovery import (
    RecoverableError,
    UnrecoverableError,
    ConfigurationError,
    OptimizationCancelledError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "MissingDataError",
    "MalformedDataError",
    "InsufficientDataError",
    # System Failures
    "SystemFailureError",
    "StateTransitionError",
    "OptimizationError",
    # Recovery Categories
    "RecoverableError",
    "UnrecoverableError",
    "ConfigurationError",
    "OptimizationCancelledError",
]
