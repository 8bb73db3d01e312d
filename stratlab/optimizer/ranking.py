"""Bounded best-K list ordered by distance to the target return."""

import math

from ..models.results import OptimizationCandidate


def best_case_distance(annualized_returns, target_return: float) -> float:
    """
    Closest any blend of the given per-asset returns could get to the target.

    Blends are assumed to land between the lowest and highest component
    return, so the target is clamped into that range.
    """
    low = min(annualized_returns)
    high = max(annualized_returns)
    if target_return < low:
        return low - target_return
    if target_return > high:
        return target_return - high
    return 0.0


class TopCandidates:
    """
    Keeps the ``capacity`` candidates closest to the target.

    Once the list is full, ``worst_distance`` only ever decreases, which is
    what makes pruning against it sound.
    """

    def __init__(self, target_return: float, capacity: int = 10):
        self.target_return = target_return
        self.capacity = capacity
        self._items: list[OptimizationCandidate] = []
        self.worst_distance = math.inf

    def __len__(self) -> int:
        return len(self._items)

    @property
    def is_full(self) -> bool:
        return len(self._items) >= self.capacity

    def distance(self, annualized_return: float) -> float:
        return abs(annualized_return - self.target_return)

    def accepts(self, distance: float) -> bool:
        """Would a candidate at ``distance`` enter the list?"""
        return not self.is_full or distance < self.worst_distance

    def can_improve(self, best_case: float) -> bool:
        """False when no candidate at ``best_case`` or worse could enter."""
        return self.accepts(best_case)

    def add(self, candidate: OptimizationCandidate) -> bool:
        """Insert a candidate; returns False if it was rejected."""
        if not self.accepts(candidate.distance):
            return False

        self._items.append(candidate)
        self._items.sort(key=lambda c: c.distance)
        del self._items[self.capacity:]
        self.worst_distance = self._items[-1].distance
        return True

    def items(self) -> list[OptimizationCandidate]:
        return list(self._items)
