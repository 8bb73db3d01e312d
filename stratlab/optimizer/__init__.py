"""
Allocation optimizer.

Searches strategy and asset-weight combinations for the annualized return
closest to a target, with vectorized split evaluation and pruning.
"""

from .evaluation import (
    SplitEvaluation,
    build_asset_candidate,
    common_length_returns,
    evaluate_splits,
    precompute_candidates,
)
from .ranking import TopCandidates, best_case_distance
from .search import PortfolioOptimizer
from .splits import splits_for, three_asset_splits, two_asset_splits
from .state import (
    ALLOWED_TRANSITIONS,
    CancellationToken,
    OptimizerState,
    OptimizerStateMachine,
    ProgressCallback,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "CancellationToken",
    "OptimizerState",
    "OptimizerStateMachine",
    "PortfolioOptimizer",
    "ProgressCallback",
    "SplitEvaluation",
    "TopCandidates",
    "best_case_distance",
    "build_asset_candidate",
    "common_length_returns",
    "evaluate_splits",
    "precompute_candidates",
    "splits_for",
    "three_asset_splits",
    "two_asset_splits",
]
