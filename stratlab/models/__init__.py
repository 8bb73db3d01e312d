"""Result models shared by simulators, the aggregator and the optimizer"""

from .results import (
    AssetCandidate,
    AssetResult,
    Allocation,
    BacktestOutcome,
    BacktestResult,
    BuySignal,
    IndicatorPoint,
    NoSignals,
    OptimizationCandidate,
    PortfolioResult,
    TrajectoryPoint,
)

__all__ = [
    "Allocation",
    "AssetCandidate",
    "AssetResult",
    "BacktestOutcome",
    "BacktestResult",
    "BuySignal",
    "IndicatorPoint",
    "NoSignals",
    "OptimizationCandidate",
    "PortfolioResult",
    "TrajectoryPoint",
]
