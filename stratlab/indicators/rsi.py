"""RSI (Relative Strength Index) with Wilder's smoothing"""

from typing import Optional, Sequence


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    # No losses in the averaging window pins RSI at its ceiling
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))


def calculate_rsi(prices: Sequence[float], period: int = 14) -> list[Optional[float]]:
    """
    Calculate RSI aligned index-for-index with the input

    Average gain and loss are seeded with the mean of the first ``period``
    price changes and then smoothed with
    ``avg = (avg * (period - 1) + current) / period``.

    Args:
        prices: Prices in chronological order
        period: RSI period (default 14)

    Returns:
        List of the input's length whose first ``period`` entries are None,
        or an empty list if there are fewer than ``period + 1`` prices
    """
    if period <= 0 or len(prices) < period + 1:
        return []

    values: list[Optional[float]] = [None] * period

    avg_gain = 0.0
    avg_loss = 0.0
    for i in range(1, period + 1):
        change = float(prices[i]) - float(prices[i - 1])
        if change > 0:
            avg_gain += change
        else:
            avg_loss += -change
    avg_gain /= period
    avg_loss /= period
    values.append(_rsi_value(avg_gain, avg_loss))

    for i in range(period + 1, len(prices)):
        change = float(prices[i]) - float(prices[i - 1])
        gain = change if change > 0 else 0.0
        loss = -change if change < 0 else 0.0
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
        values.append(_rsi_value(avg_gain, avg_loss))

    return values
