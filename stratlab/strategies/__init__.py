"""Strategy simulators: each replays one buy rule over a price window"""

from .base import (
    PositionLedger,
    SignalStrategy,
    Strategy,
    StrategyKind,
    build_overlay,
    prefetch_range,
    slice_window,
)
from .periodic import DCAStrategy, LumpSumStrategy
from .registry import build_strategies, get_strategy
from .signals import EMACrossoverStrategy, EMATouchStrategy, MACDStrategy, RSIStrategy

__all__ = [
    "DCAStrategy",
    "EMACrossoverStrategy",
    "EMATouchStrategy",
    "LumpSumStrategy",
    "MACDStrategy",
    "PositionLedger",
    "RSIStrategy",
    "SignalStrategy",
    "Strategy",
    "StrategyKind",
    "build_overlay",
    "build_strategies",
    "get_strategy",
    "prefetch_range",
    "slice_window",
]
