"""Risk and return metrics of value trajectories"""

from .risk import (
    annualize_return,
    calculate_risk_score,
    compute_max_drawdown,
    compute_twr,
    compute_volatility,
)

__all__ = [
    "annualize_return",
    "calculate_risk_score",
    "compute_max_drawdown",
    "compute_twr",
    "compute_volatility",
]
