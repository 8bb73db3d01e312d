"""EMA (Exponential Moving Average) calculation"""

from typing import Optional, Sequence


def calculate_ema(prices: Sequence[float], period: int) -> list[Optional[float]]:
    """
    Calculate an EMA aligned index-for-index with the input

    The first value is the simple average of the first ``period`` prices;
    afterwards ``ema = (price - ema) * k + ema`` with ``k = 2 / (period + 1)``.

    Args:
        prices: Prices in chronological order
        period: EMA period

    Returns:
        List of the input's length whose first ``period - 1`` entries are
        None, or an empty list if there are fewer than ``period`` prices
    """
    if period <= 0 or len(prices) < period:
        return []

    multiplier = 2.0 / (period + 1)

    ema = sum(float(p) for p in prices[:period]) / period
    values: list[Optional[float]] = [None] * (period - 1)
    values.append(ema)

    for i in range(period, len(prices)):
        ema = (float(prices[i]) - ema) * multiplier + ema
        values.append(ema)

    return values
