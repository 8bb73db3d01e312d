"""
Blend per-asset backtests into one portfolio result.

Each asset's result is already scaled to its dollar allocation. Assets can
cover different spans of history, so the blended trajectory is truncated to
the shortest contributing trajectory while the headline totals credit every
asset in full.
"""

from typing import Optional, Sequence, Union

import structlog

from ..metrics.risk import annualize_return, compute_max_drawdown
from ..models.results import AssetResult, BacktestResult, NoSignals, PortfolioResult, TrajectoryPoint

logger = structlog.get_logger(__name__)


def aggregate_trajectories(results: Sequence[BacktestResult]) -> tuple[TrajectoryPoint, ...]:
    """
    Sum value and invested index-for-index across trajectories.

    The date at each index is taken from the first trajectory.
    """
    if not results:
        return ()

    common_length = min(len(r.trajectory) for r in results)
    blended = []
    for i in range(common_length):
        blended.append(TrajectoryPoint(
            date=results[0].trajectory[i].date,
            value=sum(r.trajectory[i].value for r in results),
            invested=sum(r.trajectory[i].invested for r in results),
        ))
    return tuple(blended)


def aggregate_results(
    per_asset: Sequence[AssetResult],
    years: int
) -> Optional[Union[PortfolioResult, NoSignals]]:
    """
    Combine holdings run with the same strategy.

    Args:
        per_asset: One entry per holding, outcome already scaled to its amount
        years: Window length, used for the annualized return

    Returns:
        PortfolioResult; NoSignals if no holding produced data but at least
        one reported no signals; None if no holding produced usable data
    """
    contributing = [a.outcome for a in per_asset if a.has_data]

    if not contributing:
        if any(isinstance(a.outcome, NoSignals) for a in per_asset):
            return NoSignals(per_asset=tuple(per_asset))
        return None

    trajectory = aggregate_trajectories(contributing)
    if not trajectory:
        return None

    total_invested = sum(r.total_invested for r in contributing)
    final_value = sum(r.final_value for r in contributing)
    profit = final_value - total_invested
    return_percent = profit / total_invested * 100.0 if total_invested > 0 else 0.0

    if len({len(r.trajectory) for r in contributing}) > 1:
        logger.debug(
            "Truncated portfolio trajectory to common length",
            common_length=len(trajectory),
            lengths=[len(r.trajectory) for r in contributing]
        )

    return PortfolioResult(
        total_invested=total_invested,
        final_value=final_value,
        profit=profit,
        return_percent=return_percent,
        annualized_return=annualize_return(return_percent, years),
        max_drawdown=compute_max_drawdown([p.value for p in trajectory]),
        trajectory=trajectory,
        per_asset=tuple(per_asset),
    )
