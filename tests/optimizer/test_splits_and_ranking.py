"""Tests for split lattices and the bounded candidate list."""

import math
import random

import numpy as np
import pytest

from stratlab.models.results import Allocation, OptimizationCandidate
from stratlab.optimizer import TopCandidates, best_case_distance, splits_for, three_asset_splits, two_asset_splits


def _candidate(annualized: float, target: float, tag: str = "x") -> OptimizationCandidate:
    return OptimizationCandidate(
        strategy_key="lump",
        strategy_name="Lump Sum",
        allocations=(Allocation(tag, 100),),
        annualized_return=annualized,
        max_drawdown=0.0,
        volatility=0.0,
        risk_score=0.0,
        total_invested=1000.0,
        final_value=1000.0,
        distance=abs(annualized - target),
    )


class TestSplits:
    """Test the allocation split ladders."""

    def test_two_asset_ladder(self):
        """Nine splits from 90/10 down to 10/90."""
        splits = two_asset_splits()

        assert splits.shape == (9, 2)
        assert splits[0].tolist() == [90.0, 10.0]
        assert splits[-1].tolist() == [10.0, 90.0]
        assert np.all(splits.sum(axis=1) == 100)

    def test_three_asset_lattice(self):
        """Exactly the four descending splits of the nested enumeration."""
        assert three_asset_splits().tolist() == [
            [60.0, 20.0, 20.0],
            [50.0, 30.0, 20.0],
            [40.0, 40.0, 20.0],
            [40.0, 30.0, 30.0],
        ]

    def test_splits_for(self):
        """Dispatch by combination size."""
        assert splits_for(1, (90, 10)).tolist() == [[100.0]]
        assert splits_for(2, (70, 30)).tolist() == [[70.0, 30.0], [30.0, 70.0]]
        assert splits_for(3, (90,)).shape == (4, 3)

    def test_unknown_size(self):
        """Only sizes 1 to 3 are searched."""
        with pytest.raises(ValueError):
            splits_for(4, (50,))


class TestBestCaseDistance:
    """Test the pruning bound."""

    def test_target_inside_range(self):
        """A target between the component returns can be hit exactly."""
        assert best_case_distance([5.0, 15.0], 10.0) == 0.0

    def test_target_above_range(self):
        """Above the best component the gap to it is the bound."""
        assert best_case_distance([5.0, 15.0, 8.0], 20.0) == pytest.approx(5.0)

    def test_target_below_range(self):
        """Below the worst component the gap to it is the bound."""
        assert best_case_distance([5.0, 15.0], 1.0) == pytest.approx(4.0)


class TestTopCandidates:
    """Test the bounded best-K list."""

    def test_keeps_closest_sorted(self):
        """Only the ten closest survive, in non-decreasing distance."""
        rng = random.Random(7)
        target = 10.0
        returns = [rng.uniform(-20.0, 40.0) for _ in range(40)]
        top = TopCandidates(target, capacity=10)

        for i, r in enumerate(returns):
            top.add(_candidate(r, target, tag=str(i)))

        items = top.items()
        distances = [c.distance for c in items]
        assert len(items) == 10
        assert distances == sorted(distances)
        assert distances == pytest.approx(sorted(abs(r - target) for r in returns)[:10])
        assert top.worst_distance == distances[-1]

    def test_worst_distance_infinite_until_full(self):
        """Anything is accepted while the list has room."""
        top = TopCandidates(10.0, capacity=3)
        top.add(_candidate(100.0, 10.0))

        assert not top.is_full
        assert top.accepts(1e9)
        assert top.can_improve(1e9)

    def test_rejects_when_full_and_not_better(self):
        """Once full, a candidate must be strictly closer than the worst."""
        top = TopCandidates(10.0, capacity=2)
        top.add(_candidate(11.0, 10.0))
        top.add(_candidate(13.0, 10.0))

        assert top.is_full
        assert not top.add(_candidate(7.0, 10.0))
        assert top.add(_candidate(9.5, 10.0))
        assert [c.annualized_return for c in top.items()] == [9.5, 11.0]
        assert not top.can_improve(1.0)
        assert top.can_improve(0.9)

    def test_empty(self):
        """A fresh list is empty with an infinite bound."""
        top = TopCandidates(0.0)
        assert len(top) == 0
        assert math.isinf(top.worst_distance)
