"""Display helpers for result summaries and chart series."""

import math
from typing import Sequence, TypeVar

T = TypeVar("T")


def format_currency(value: float) -> str:
    """Dollar amount; millions are abbreviated."""
    if value >= 1_000_000:
        return f"${value / 1_000_000:.2f}M"
    return f"${math.floor(value + 0.5):,}"


def format_percent(value: float) -> str:
    """Signed percentage with one decimal."""
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.1f}%"


def sample_for_chart(points: Sequence[T], target_points: int = 120) -> list[T]:
    """
    Downsample a trajectory to at most ``target_points`` evenly spaced points.

    The first and last points are always kept; fractional positions round
    half up.
    """
    if len(points) <= target_points:
        return list(points)
    if target_points < 2:
        return [points[-1]]

    last = len(points) - 1
    return [
        points[math.floor(i / (target_points - 1) * last + 0.5)]
        for i in range(target_points)
    ]
