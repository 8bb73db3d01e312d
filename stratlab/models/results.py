"""Data models for backtest and optimization results"""

from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

import numpy as np


@dataclass(frozen=True)
class TrajectoryPoint:
    """Mark-to-market portfolio state at the close of one day"""
    date: date
    value: float        # Holdings valued at that day's close
    invested: float     # Capital contributed so far; never decreases


@dataclass(frozen=True)
class BuySignal:
    """A purchase made by a strategy"""
    date: date
    price: float


@dataclass(frozen=True)
class IndicatorPoint:
    """Indicator values on one window day, for drawing over the price chart"""
    date: date
    price: float
    lines: dict[str, float]     # Keyed by line name, e.g. "ema" or "signal"


@dataclass(frozen=True)
class BacktestResult:
    """Outcome of one strategy run over one asset"""
    strategy_key: str
    total_invested: float
    final_value: float
    profit: float
    return_percent: float
    total_shares: float
    avg_cost_per_share: float
    max_drawdown: float             # Percent, <= 0
    trajectory: tuple[TrajectoryPoint, ...]
    buy_count: int
    buy_signals: tuple[BuySignal, ...] = ()
    overlay: tuple[IndicatorPoint, ...] = ()     # Empty for periodic strategies

    @property
    def values(self) -> np.ndarray:
        return np.fromiter((p.value for p in self.trajectory), dtype=np.float64,
                           count=len(self.trajectory))

    @property
    def invested(self) -> np.ndarray:
        return np.fromiter((p.invested for p in self.trajectory), dtype=np.float64,
                           count=len(self.trajectory))


@dataclass(frozen=True)
class NoSignals:
    """
    A signal-driven strategy never fired inside the window.

    Distinct from absence (None): the run is well defined and invested
    nothing.
    """
    strategy_key: Optional[str] = None
    per_asset: tuple = ()


# None means absence: not enough history for the requested window
BacktestOutcome = Optional[Union[BacktestResult, NoSignals]]


@dataclass(frozen=True)
class AssetResult:
    """One holding's contribution to a portfolio run"""
    symbol: str
    allocation: float
    amount: float
    outcome: BacktestOutcome

    @property
    def has_data(self) -> bool:
        return isinstance(self.outcome, BacktestResult)


@dataclass(frozen=True)
class PortfolioResult:
    """Blended result of several holdings run with the same strategy"""
    total_invested: float
    final_value: float
    profit: float
    return_percent: float
    annualized_return: float
    max_drawdown: float
    trajectory: tuple[TrajectoryPoint, ...]
    per_asset: tuple[AssetResult, ...]


@dataclass(frozen=True, eq=False)
class AssetCandidate:
    """
    A $1-unit simulation of one (asset, strategy) pair.

    The optimizer scales these buffers by allocation weight instead of
    re-running the simulation for every split.
    """
    symbol: str
    strategy_key: str
    total_invested_unit: float
    final_value_unit: float
    twr_percent: float
    values: np.ndarray
    invested: np.ndarray

    def __len__(self) -> int:
        return len(self.values)

    def annualized_return(self, years: float) -> float:
        return self.twr_percent / years


@dataclass(frozen=True)
class Allocation:
    """One asset's share of an optimized portfolio"""
    symbol: str
    weight_percent: int


@dataclass(frozen=True)
class OptimizationCandidate:
    """A ranked allocation/strategy combination"""
    strategy_key: str
    strategy_name: str
    allocations: tuple[Allocation, ...]
    annualized_return: float
    max_drawdown: float
    volatility: float
    risk_score: float
    total_invested: float
    final_value: float
    distance: float                 # |annualized_return - target|
