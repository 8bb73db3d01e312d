"""
Shared machinery for strategy simulators.

A simulator walks the backtest window day by day, buys when its trigger
fires and marks the position to market at every close. Indicator-driven
strategies compute their indicator over extra history before the window so
it is already warm on the first window day.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterator, Optional, Sequence

import structlog

from ..data.models import PricePoint, PriceSeries
from ..metrics.risk import compute_max_drawdown
from ..models.results import (
    BacktestOutcome,
    BacktestResult,
    BuySignal,
    IndicatorPoint,
    NoSignals,
    TrajectoryPoint,
)
from ..utils.time import days_before, years_before

logger = structlog.get_logger(__name__)


class StrategyKind(str, Enum):
    """Strategy identifiers."""
    DCA = "dca"
    LUMP = "lump"
    EMA50 = "ema50"
    EMA100 = "ema100"
    EMA200 = "ema200"
    EMA_CROSSOVER = "emaCrossover"
    RSI = "rsi"
    MACD = "macd"


class PositionLedger:
    """Accumulates purchases and the daily value/invested trajectory."""

    def __init__(self):
        self.total_shares = 0.0
        self.total_invested = 0.0
        self.trajectory: list[TrajectoryPoint] = []
        self.buy_signals: list[BuySignal] = []

    @property
    def buy_count(self) -> int:
        return len(self.buy_signals)

    def buy(self, point: PricePoint, amount: float) -> None:
        self.total_shares += amount / point.price
        self.total_invested += amount
        self.buy_signals.append(BuySignal(date=point.date, price=point.price))

    def mark(self, point: PricePoint) -> None:
        self.trajectory.append(TrajectoryPoint(
            date=point.date,
            value=self.total_shares * point.price,
            invested=self.total_invested
        ))

    def to_result(self, strategy_key: str, last_price: float,
                  avg_cost: Optional[float] = None,
                  overlay: tuple[IndicatorPoint, ...] = ()) -> BacktestResult:
        final_value = self.total_shares * last_price
        profit = final_value - self.total_invested

        if self.total_invested > 0:
            return_percent = profit / self.total_invested * 100.0
        else:
            return_percent = 0.0

        if avg_cost is None:
            avg_cost = self.total_invested / self.total_shares if self.total_shares > 0 else 0.0

        values = [p.value for p in self.trajectory]
        return BacktestResult(
            strategy_key=strategy_key,
            total_invested=self.total_invested,
            final_value=final_value,
            profit=profit,
            return_percent=return_percent,
            total_shares=self.total_shares,
            avg_cost_per_share=avg_cost,
            max_drawdown=compute_max_drawdown(values) if values else 0.0,
            trajectory=tuple(self.trajectory),
            buy_count=self.buy_count,
            buy_signals=tuple(self.buy_signals),
            overlay=overlay,
        )


def slice_window(series: PriceSeries, years: int, as_of: date) -> Optional[PriceSeries]:
    """
    Restrict a series to the backtest window.

    Returns:
        Points dated from ``as_of - years`` through ``as_of``, or None when
        fewer than two points fall inside the window
    """
    cutoff = years_before(as_of, years)
    series = series.until(as_of)
    window = series.slice_from(series.first_index_on_or_after(cutoff))
    if len(window) < 2:
        return None
    return window


@dataclass(frozen=True)
class PrefetchedRange:
    """Window plus the warm-up history before it."""
    series: PriceSeries
    window_start: int       # Index of the first window point in ``series``

    @property
    def window_length(self) -> int:
        return len(self.series) - self.window_start


def prefetch_range(
    series: PriceSeries,
    years: int,
    as_of: date,
    prefetch_days: int
) -> Optional[PrefetchedRange]:
    """
    Cut the series to ``prefetch_days`` calendar days before the window start.

    Returns:
        The prefetched range, or None when the window has fewer than two
        points or no history precedes it
    """
    cutoff = years_before(as_of, years)
    prefetch_from = days_before(cutoff, prefetch_days)

    series = series.until(as_of)
    sliced = series.slice_from(series.first_index_on_or_after(prefetch_from))
    window_start = sliced.first_index_on_or_after(cutoff)

    # The first window day compares against the previous day's indicator
    if window_start < 1 or len(sliced) - window_start < 2:
        return None

    return PrefetchedRange(series=sliced, window_start=window_start)


def build_overlay(points: Sequence[PricePoint], lines: dict[str, Sequence[Optional[float]]],
                  start: int) -> tuple[IndicatorPoint, ...]:
    """Indicator values from ``start`` on, keeping days where every line is defined."""
    overlay = []
    for i in range(start, len(points)):
        values = {name: line[i] for name, line in lines.items()}
        if not values or any(v is None for v in values.values()):
            continue
        overlay.append(IndicatorPoint(date=points[i].date, price=points[i].price,
                                      lines={name: float(v) for name, v in values.items()}))
    return tuple(overlay)


class Strategy(ABC):
    """A buy-only investment strategy that can be replayed over a price series."""

    description: str = ""
    default_amount: float = 1000.0

    @property
    @abstractmethod
    def key(self) -> str:
        """Identifier used in run configurations and results."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Display name."""

    @abstractmethod
    def simulate(self, series: PriceSeries, amount: float, years: int, as_of: date) -> BacktestOutcome:
        """
        Replay the strategy over the window ending at ``as_of``.

        Args:
            series: Full daily history of one asset
            amount: Dollar amount per purchase (per month for DCA, total
                for lump sum)
            years: Window length in calendar years
            as_of: Last day of the window

        Returns:
            BacktestResult, NoSignals when a signal strategy never fired,
            or None when history is insufficient
        """


class SignalStrategy(Strategy):
    """
    Template for indicator-driven strategies.

    Subclasses provide the warm-up requirements, the indicator computation
    and the indices on which a purchase is triggered.
    """

    @property
    @abstractmethod
    def min_history(self) -> int:
        """Minimum number of points the full series must hold."""

    @property
    @abstractmethod
    def prefetch_days(self) -> int:
        """Calendar days of history to load before the window start."""

    @abstractmethod
    def compute_indicators(self, prices) -> Optional[tuple]:
        """Indicator lines over the prefetched prices; None if unavailable."""

    @abstractmethod
    def signal_indices(self, indicators: tuple, start: int, end: int) -> Iterator[int]:
        """Yield indices in [start, end) where a purchase is made."""

    @staticmethod
    def is_warm(indicators: tuple) -> bool:
        """True when every indicator line is defined at the last point."""
        return all(line and line[-1] is not None for line in indicators)

    def overlay_lines(self, indicators: tuple) -> dict[str, Sequence[Optional[float]]]:
        """Indicator lines worth drawing over the price chart, by name."""
        return {}

    def simulate(self, series: PriceSeries, amount: float, years: int, as_of: date) -> BacktestOutcome:
        if series is None or len(series) < self.min_history:
            return None

        prefetched = prefetch_range(series, years, as_of, self.prefetch_days)
        if prefetched is None:
            logger.debug("Window not covered by history", strategy=self.key, symbol=series.symbol)
            return None

        points = prefetched.series.points
        indicators = self.compute_indicators(prefetched.series.prices)
        if indicators is None or not self.is_warm(indicators):
            logger.debug("Indicator never stabilizes inside window", strategy=self.key,
                         symbol=series.symbol)
            return None

        buy_days = set(self.signal_indices(indicators, prefetched.window_start, len(points)))

        ledger = PositionLedger()
        for i in range(prefetched.window_start, len(points)):
            if i in buy_days:
                ledger.buy(points[i], amount)
            ledger.mark(points[i])

        if ledger.buy_count == 0:
            return NoSignals(strategy_key=self.key)

        overlay = build_overlay(points, self.overlay_lines(indicators), prefetched.window_start)
        return ledger.to_result(self.key, points[-1].price, overlay=overlay)
