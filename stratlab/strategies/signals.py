"""
Indicator-driven strategies.

All four are buy-only: a signal adds a fixed amount to the position and
nothing is ever sold.
"""

from dataclasses import dataclass
from typing import Iterator, Optional

from ..indicators.ema import calculate_ema
from ..indicators.macd import calculate_macd
from ..indicators.rsi import calculate_rsi
from .base import SignalStrategy, StrategyKind


def _defined(*values) -> bool:
    return all(v is not None for v in values)


@dataclass(frozen=True)
class EMATouchStrategy(SignalStrategy):
    """Buy when price drops from above its EMA to at or below it."""

    period: int = 200
    prefetch_margin_days: int = 100
    default_amount: float = 1000.0

    @property
    def key(self) -> str:
        return f"ema{self.period}"

    @property
    def name(self) -> str:
        return f"{self.period} EMA Touch"

    @property
    def description(self) -> str:
        return f"Buy when price touches {self.period}-day EMA"

    @property
    def min_history(self) -> int:
        return self.period

    @property
    def prefetch_days(self) -> int:
        return self.period + self.prefetch_margin_days

    def compute_indicators(self, prices) -> Optional[tuple]:
        ema = calculate_ema(prices, self.period)
        if not ema:
            return None
        return (list(prices), ema)

    def overlay_lines(self, indicators: tuple) -> dict:
        return {"ema": indicators[1]}

    def signal_indices(self, indicators: tuple, start: int, end: int) -> Iterator[int]:
        prices, ema = indicators
        for i in range(start, end):
            if not _defined(ema[i], ema[i - 1]):
                continue
            if prices[i - 1] > ema[i - 1] and prices[i] <= ema[i]:
                yield i


@dataclass(frozen=True)
class EMACrossoverStrategy(SignalStrategy):
    """Buy on a golden cross: the short EMA rises above the long EMA."""

    short_period: int = 50
    long_period: int = 200
    prefetch_margin_days: int = 100
    default_amount: float = 5000.0
    description: str = "Buy on golden cross (50 EMA crosses above 200)"

    @property
    def key(self) -> str:
        return StrategyKind.EMA_CROSSOVER.value

    @property
    def name(self) -> str:
        return "EMA Crossover"

    @property
    def min_history(self) -> int:
        return self.long_period

    @property
    def prefetch_days(self) -> int:
        return self.long_period + self.prefetch_margin_days

    def compute_indicators(self, prices) -> Optional[tuple]:
        short_ema = calculate_ema(prices, self.short_period)
        long_ema = calculate_ema(prices, self.long_period)
        if not short_ema or not long_ema:
            return None
        return (short_ema, long_ema)

    def overlay_lines(self, indicators: tuple) -> dict:
        short_ema, long_ema = indicators
        return {"ema_short": short_ema, "ema_long": long_ema}

    def signal_indices(self, indicators: tuple, start: int, end: int) -> Iterator[int]:
        short_ema, long_ema = indicators
        for i in range(start, end):
            if not _defined(short_ema[i], long_ema[i], short_ema[i - 1], long_ema[i - 1]):
                continue
            if short_ema[i - 1] <= long_ema[i - 1] and short_ema[i] > long_ema[i]:
                yield i


@dataclass(frozen=True)
class RSIStrategy(SignalStrategy):
    """
    Buy when RSI crosses below the oversold threshold.

    After each signal, evaluation pauses until ``cooldown_days`` trading
    days have passed.
    """

    period: int = 14
    threshold: float = 30.0
    cooldown_days: int = 5
    prefetch_margin_days: int = 50
    default_amount: float = 1000.0
    description: str = "Buy when RSI drops below 30 (oversold)"

    @property
    def key(self) -> str:
        return StrategyKind.RSI.value

    @property
    def name(self) -> str:
        return "RSI Mean Reversion"

    @property
    def min_history(self) -> int:
        return self.period + 1

    @property
    def prefetch_days(self) -> int:
        return self.period + self.prefetch_margin_days

    def compute_indicators(self, prices) -> Optional[tuple]:
        rsi = calculate_rsi(prices, self.period)
        if not rsi:
            return None
        return (rsi,)

    def overlay_lines(self, indicators: tuple) -> dict:
        return {"rsi": indicators[0]}

    def signal_indices(self, indicators: tuple, start: int, end: int) -> Iterator[int]:
        (rsi,) = indicators
        cooldown = 0
        for i in range(start, end):
            if cooldown > 0:
                cooldown -= 1
            if cooldown > 0 or not _defined(rsi[i], rsi[i - 1]):
                continue
            if rsi[i - 1] >= self.threshold and rsi[i] < self.threshold:
                cooldown = self.cooldown_days
                yield i


@dataclass(frozen=True)
class MACDStrategy(SignalStrategy):
    """Buy when the MACD line crosses above its signal line."""

    fast: int = 12
    slow: int = 26
    signal: int = 9
    prefetch_margin_days: int = 50
    default_amount: float = 1000.0
    description: str = "Buy on bullish MACD crossover"

    @property
    def key(self) -> str:
        return StrategyKind.MACD.value

    @property
    def name(self) -> str:
        return "MACD Divergence"

    @property
    def min_history(self) -> int:
        return self.slow + self.signal

    @property
    def prefetch_days(self) -> int:
        return self.slow + self.signal + self.prefetch_margin_days

    def compute_indicators(self, prices) -> Optional[tuple]:
        macd = calculate_macd(prices, self.fast, self.slow, self.signal)
        if macd is None:
            return None
        return (macd.macd_line, macd.signal_line)

    def overlay_lines(self, indicators: tuple) -> dict:
        macd_line, signal_line = indicators
        return {"macd": macd_line, "signal": signal_line}

    def signal_indices(self, indicators: tuple, start: int, end: int) -> Iterator[int]:
        macd_line, signal_line = indicators
        for i in range(start, end):
            if not _defined(macd_line[i], signal_line[i], macd_line[i - 1], signal_line[i - 1]):
                continue
            if macd_line[i - 1] <= signal_line[i - 1] and macd_line[i] > signal_line[i]:
                yield i
