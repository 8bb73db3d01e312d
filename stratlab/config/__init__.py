"""Configuration: defaults, YAML overrides, validation and run descriptions."""

from .defaults import DefaultConfig, get_default_config
from .loader import ConfigLoader
from .run import Holding, OptimizationRequest, RunConfig
from .validation import ConfigValidator, ValidationError

__all__ = [
    "DefaultConfig",
    "get_default_config",
    "ConfigLoader",
    "ConfigValidator",
    "ValidationError",
    "Holding",
    "RunConfig",
    "OptimizationRequest",
]
