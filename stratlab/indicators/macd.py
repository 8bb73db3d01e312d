"""MACD (Moving Average Convergence/Divergence) calculation"""

from dataclasses import dataclass
from typing import Optional, Sequence

from .ema import calculate_ema


@dataclass(frozen=True)
class MACDResult:
    """MACD, signal and histogram lines aligned with the source prices."""
    macd_line: list[Optional[float]]
    signal_line: list[Optional[float]]
    histogram: list[Optional[float]]


def calculate_macd(
    prices: Sequence[float],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9
) -> Optional[MACDResult]:
    """
    Calculate MACD

    MACD line = EMA(fast) - EMA(slow). The signal line is the EMA of the
    MACD line taken over its defined values only and written back at their
    original positions. Histogram = MACD - signal.

    Args:
        prices: Prices in chronological order
        fast: Fast EMA period (default 12)
        slow: Slow EMA period (default 26)
        signal: Signal EMA period (default 9)

    Returns:
        MACDResult, or None if either EMA cannot be computed
    """
    fast_ema = calculate_ema(prices, fast)
    slow_ema = calculate_ema(prices, slow)
    if not fast_ema or not slow_ema:
        return None

    macd_line: list[Optional[float]] = []
    for f, s in zip(fast_ema, slow_ema):
        macd_line.append(None if f is None or s is None else f - s)

    defined_indices = [i for i, v in enumerate(macd_line) if v is not None]
    signal_raw = calculate_ema([macd_line[i] for i in defined_indices], signal)

    signal_line: list[Optional[float]] = [None] * len(prices)
    for offset, value in enumerate(signal_raw):
        if value is not None:
            signal_line[defined_indices[offset]] = value

    histogram: list[Optional[float]] = []
    for m, s in zip(macd_line, signal_line):
        histogram.append(None if m is None or s is None else m - s)

    return MACDResult(macd_line=macd_line, signal_line=signal_line, histogram=histogram)
