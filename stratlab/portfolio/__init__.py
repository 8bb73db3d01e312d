"""Portfolio aggregation across holdings"""

from .aggregator import aggregate_results, aggregate_trajectories

__all__ = ["aggregate_results", "aggregate_trajectories"]
