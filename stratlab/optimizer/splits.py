"""Allocation split lattices searched by the optimizer."""

from typing import Sequence

import numpy as np


def two_asset_splits(steps: Sequence[int] = (90, 80, 70, 60, 50, 40, 30, 20, 10)) -> np.ndarray:
    """
    Weight matrix for pairs: one row per split, ``[w, 100 - w]``.
    """
    return np.array([[w, 100 - w] for w in steps], dtype=np.float64)


def three_asset_splits() -> np.ndarray:
    """
    Weight matrix for triplets: one row per split ``[a, b, c]``.

    Weights are multiples of 10 summing to 100, enumerated by nested
    descent: ``a`` from 60 down to 20, ``b`` from ``min(80 - a, a)`` down to
    10, ``c`` the remainder, kept only when ``10 <= c <= b``.
    """
    splits = []
    for a in range(60, 19, -10):
        for b in range(min(80 - a, a), 9, -10):
            c = 100 - a - b
            if 10 <= c <= b:
                splits.append([a, b, c])
    return np.array(splits, dtype=np.float64)


def splits_for(complexity: int, two_asset_steps: Sequence[int]) -> np.ndarray:
    """Weight matrix for a combination size."""
    if complexity == 1:
        return np.array([[100]], dtype=np.float64)
    if complexity == 2:
        return two_asset_splits(two_asset_steps)
    if complexity == 3:
        return three_asset_splits()
    raise ValueError(f"complexity must be 1, 2 or 3, got {complexity}")
