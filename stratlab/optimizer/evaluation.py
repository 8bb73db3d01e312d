"""
Unit precomputation and blended split evaluation.

Every (asset, strategy) pair is simulated once with a $1 amount. A blend of
several assets at a given split is then just a weighted sum of those unit
buffers, so all splits of one combination are evaluated together: the split
weight matrix (one row per split) is multiplied with the stacked unit
buffers, and the risk metrics reduce each row.
"""

from dataclasses import dataclass
from datetime import date
from typing import Mapping, Sequence

import numpy as np
import structlog

from ..config.defaults import RiskParams
from ..data.models import PriceSeries
from ..metrics.risk import (
    calculate_risk_score,
    compute_max_drawdown,
    compute_twr,
    compute_volatility,
)
from ..models.results import AssetCandidate, BacktestResult
from ..strategies.base import Strategy

logger = structlog.get_logger(__name__)


def _read_only(buffer: np.ndarray) -> np.ndarray:
    buffer = np.ascontiguousarray(buffer, dtype=np.float64)
    buffer.setflags(write=False)
    return buffer


def build_asset_candidate(symbol: str, result: BacktestResult) -> AssetCandidate:
    """Convert a unit-amount backtest into flat buffers plus cached scalars."""
    values = _read_only(result.values)
    invested = _read_only(result.invested)
    return AssetCandidate(
        symbol=symbol,
        strategy_key=result.strategy_key,
        total_invested_unit=result.total_invested,
        final_value_unit=result.final_value,
        twr_percent=compute_twr(values, invested),
        values=values,
        invested=invested,
    )


def precompute_candidates(
    price_data: Mapping[str, PriceSeries],
    symbols: Sequence[str],
    strategies: Sequence[Strategy],
    years: int,
    as_of: date
) -> dict[str, dict[str, AssetCandidate]]:
    """
    Simulate every (asset, strategy) pair at a $1 amount.

    Pairs that are absent, never signalled, empty or invested nothing are
    left out; assets with no usable pair are dropped entirely.

    Returns:
        Candidates keyed by symbol then strategy key, in ``symbols`` order
    """
    universe: dict[str, dict[str, AssetCandidate]] = {}

    for symbol in symbols:
        series = price_data.get(symbol)
        if series is None or series.is_empty:
            logger.warning("No price history for symbol", symbol=symbol)
            continue

        usable: dict[str, AssetCandidate] = {}
        for strategy in strategies:
            outcome = strategy.simulate(series, 1.0, years, as_of)
            if not isinstance(outcome, BacktestResult):
                continue
            if not outcome.trajectory or outcome.total_invested <= 0:
                continue
            usable[strategy.key] = build_asset_candidate(symbol, outcome)

        if usable:
            universe[symbol] = usable
        else:
            logger.info("Symbol has no usable strategy results", symbol=symbol, years=years)

    return universe


def common_length_returns(members: Sequence[AssetCandidate], years: int) -> list[float]:
    """
    Annualized TWR of each member over the length blends are evaluated on.

    Blends are cut to the shortest member, so a longer member's cached
    full-length return does not bound them.
    """
    length = min(len(m) for m in members)
    returns = []
    for m in members:
        if len(m) == length:
            returns.append(m.annualized_return(years))
        else:
            returns.append(float(compute_twr(m.values[:length], m.invested[:length])) / years)
    return returns


@dataclass(frozen=True, eq=False)
class SplitEvaluation:
    """Metrics of every split of one combination, one array entry per split."""
    annualized_return: np.ndarray
    max_drawdown: np.ndarray
    volatility: np.ndarray
    risk_score: np.ndarray
    total_invested: np.ndarray
    final_value: np.ndarray


def evaluate_splits(
    members: Sequence[AssetCandidate],
    weights: np.ndarray,
    notional: float,
    years: int,
    risk: RiskParams
) -> SplitEvaluation:
    """
    Evaluate all splits of one asset combination in a single pass.

    Args:
        members: Unit candidates of the combination, same strategy
        weights: Split matrix in percent, shape (splits, len(members))
        notional: Dollar scale applied to the unit buffers
        years: Window length for annualization
        risk: Risk score weights and trading days per year

    Returns:
        SplitEvaluation with one entry per weight row
    """
    length = min(len(m) for m in members)
    values = np.vstack([m.values[:length] for m in members])
    invested = np.vstack([m.invested[:length] for m in members])

    scales = weights * (notional / 100.0)
    blended_values = scales @ values
    blended_invested = scales @ invested

    twr = compute_twr(blended_values, blended_invested)
    max_drawdown = compute_max_drawdown(blended_values)
    volatility = compute_volatility(blended_values, risk.trading_days_per_year)

    return SplitEvaluation(
        annualized_return=twr / years,
        max_drawdown=max_drawdown,
        volatility=volatility,
        risk_score=calculate_risk_score(
            max_drawdown, volatility, risk.drawdown_weight, risk.volatility_weight
        ),
        total_invested=scales @ np.array([m.total_invested_unit for m in members]),
        final_value=scales @ np.array([m.final_value_unit for m in members]),
    )
