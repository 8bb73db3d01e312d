"""
Drawdown, time-weighted return and volatility of value trajectories.

Every function accepts a 1-D buffer (one trajectory) or a 2-D block whose
rows are trajectories of the same length, and reduces along the last axis.
1-D input returns a float, 2-D input returns one value per row.
"""

from typing import Union

import numpy as np

ArrayLike = Union[np.ndarray, list, tuple]
Reduced = Union[float, np.ndarray]


def _as_buffer(values: ArrayLike) -> np.ndarray:
    return np.asarray(values, dtype=np.float64)


def _unwrap(result: np.ndarray) -> Reduced:
    if result.ndim == 0:
        return float(result)
    return result


def compute_max_drawdown(values: ArrayLike) -> Reduced:
    """
    Calculate the maximum drawdown

    Tracks the running peak P (starting at 0); each day's drawdown is
    (value - P) / P while P > 0.

    Args:
        values: Portfolio values in chronological order

    Returns:
        Most negative drawdown as a percentage (<= 0); 0 for empty input
    """
    v = _as_buffer(values)
    if v.shape[-1] == 0:
        return _unwrap(np.zeros(v.shape[:-1]))

    peaks = np.maximum.accumulate(np.maximum(v, 0.0), axis=-1)
    drawdowns = np.divide(v - peaks, peaks, out=np.zeros_like(v), where=peaks > 0)
    return _unwrap(np.minimum(drawdowns.min(axis=-1), 0.0) * 100.0)


def compute_twr(values: ArrayLike, invested: ArrayLike) -> Reduced:
    """
    Calculate the time-weighted return over the whole trajectory

    Each step's cash flow is the change in invested capital; the step
    starts from ``previous value + cash flow`` and its return is
    ``value / start``. Steps starting from a non-positive value are
    skipped. Sub-period returns are chained multiplicatively.

    Args:
        values: Portfolio values
        invested: Cumulative invested capital, aligned with values

    Returns:
        TWR as a percentage; 0 for fewer than two points
    """
    v = _as_buffer(values)
    inv = _as_buffer(invested)
    if v.shape[-1] < 2:
        return _unwrap(np.zeros(v.shape[:-1]))

    cash_flows = np.diff(inv, axis=-1)
    starts = v[..., :-1] + cash_flows
    growth = np.divide(v[..., 1:], starts, out=np.ones_like(starts), where=starts > 0)
    return _unwrap((np.prod(growth, axis=-1) - 1.0) * 100.0)


def compute_volatility(values: ArrayLike, trading_days: int = 252) -> Reduced:
    """
    Calculate annualized volatility of day-over-day simple returns

    Population standard deviation of the returns, skipping days whose
    previous value is not positive, scaled by sqrt(trading_days).

    Args:
        values: Portfolio values in chronological order
        trading_days: Periods per year used for annualization

    Returns:
        Annualized volatility as a percentage
    """
    v = _as_buffer(values)
    if v.shape[-1] < 2:
        return _unwrap(np.zeros(v.shape[:-1]))

    previous = v[..., :-1]
    valid = previous > 0
    returns = np.divide(np.diff(v, axis=-1), previous, out=np.zeros_like(previous), where=valid)

    counts = valid.sum(axis=-1).astype(np.float64)
    has_returns = counts > 0
    mean = np.divide(returns.sum(axis=-1), counts, out=np.zeros_like(counts), where=has_returns)
    deviations = np.where(valid, returns - mean[..., np.newaxis], 0.0)
    variance = np.divide((deviations * deviations).sum(axis=-1), counts,
                         out=np.zeros_like(counts), where=has_returns)

    return _unwrap(np.sqrt(variance) * np.sqrt(trading_days) * 100.0)


def calculate_risk_score(
    max_drawdown: Reduced,
    volatility: Reduced,
    drawdown_weight: float = 0.6,
    volatility_weight: float = 0.4
) -> Reduced:
    """
    Blend drawdown depth and volatility into one score

    score = 0.6 * |max_drawdown| + 0.4 * volatility

    Not a risk-adjusted return; only used to compare candidates.
    """
    score = np.abs(max_drawdown) * drawdown_weight + np.asarray(volatility) * volatility_weight
    return _unwrap(np.asarray(score))


def annualize_return(total_return_percent: Reduced, years: float) -> Reduced:
    """Simple (non-compounded) annualization: total percent / years."""
    return total_return_percent / years
