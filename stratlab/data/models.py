"""
Canonical data models for daily price history.

This module defines immutable data structures that represent clean, validated
price history after normalization from raw payloads.
"""

import math
from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from datetime import date
from functools import cached_property
from typing import Iterable

import numpy as np


@dataclass(frozen=True)
class PricePoint:
    """One daily close."""
    date: date          # UTC calendar day
    price: float        # Positive close price


@dataclass(frozen=True)
class PriceSeries:
    """
    Date-ascending daily closes for one asset.

    Instances are immutable once built; use ``from_points`` to construct one
    from unsorted or partially invalid input.
    """
    symbol: str
    points: tuple[PricePoint, ...] = ()

    @classmethod
    def from_points(cls, symbol: str, points: Iterable[PricePoint]) -> "PriceSeries":
        """
        Build a series: sort by date, drop non-finite or non-positive prices
        and keep one point per day (the later entry wins).
        """
        by_day: dict[date, PricePoint] = {}
        for point in points:
            price = point.price
            if price is None or not math.isfinite(price) or price <= 0:
                continue
            by_day[point.date] = PricePoint(date=point.date, price=float(price))

        ordered = tuple(by_day[day] for day in sorted(by_day))
        return cls(symbol=symbol, points=ordered)

    @classmethod
    def empty(cls, symbol: str) -> "PriceSeries":
        return cls(symbol=symbol, points=())

    def __len__(self) -> int:
        return len(self.points)

    @property
    def is_empty(self) -> bool:
        return not self.points

    @cached_property
    def dates(self) -> tuple[date, ...]:
        return tuple(p.date for p in self.points)

    @cached_property
    def prices(self) -> np.ndarray:
        """Closes as a read-only float64 buffer."""
        buffer = np.fromiter((p.price for p in self.points), dtype=np.float64,
                             count=len(self.points))
        buffer.setflags(write=False)
        return buffer

    @property
    def last_price(self) -> float:
        return self.points[-1].price if self.points else 0.0

    def first_index_on_or_after(self, day: date) -> int:
        """Index of the first point dated on or after ``day``; len(self) if none."""
        return bisect_left(self.dates, day)

    def slice_from(self, index: int) -> "PriceSeries":
        return PriceSeries(symbol=self.symbol, points=self.points[index:])

    def until(self, day: date) -> "PriceSeries":
        """Points dated on or before ``day``."""
        end = bisect_right(self.dates, day)
        if end == len(self.points):
            return self
        return PriceSeries(symbol=self.symbol, points=self.points[:end])


@dataclass(frozen=True)
class Quote:
    """Latest price of one asset and its move since the previous close."""
    symbol: str
    name: str
    current_price: float
    price_change: float = 0.0
    percent_change: float = 0.0


@dataclass(frozen=True)
class Asset:
    """Catalog entry: display symbol, market-data symbol and name."""
    symbol: str
    provider_symbol: str
    name: str


DEFAULT_ASSETS: tuple[Asset, ...] = (
    Asset("AAPL", "AAPL", "Apple"),
    Asset("MSFT", "MSFT", "Microsoft"),
    Asset("GOOGL", "GOOGL", "Alphabet (Google)"),
    Asset("AMZN", "AMZN", "Amazon"),
    Asset("META", "META", "Meta Platforms"),
    Asset("NVDA", "NVDA", "Nvidia"),
    Asset("TSLA", "TSLA", "Tesla"),
    Asset("GLD", "GLD", "SPDR Gold Trust"),
    Asset("SLV", "SLV", "iShares Silver Trust"),
    Asset("VOO", "VOO", "Vanguard S&P 500 ETF"),
    Asset("SPY", "SPY", "SPDR S&P 500 ETF"),
    Asset("BTC", "BTC-USD", "Bitcoin"),
    Asset("ETH", "ETH-USD", "Ethereum"),
)


def find_asset(symbol: str) -> Asset:
    """Look up a catalog entry by display or provider symbol."""
    for asset in DEFAULT_ASSETS:
        if symbol in (asset.symbol, asset.provider_symbol):
            return asset
    return Asset(symbol, symbol, symbol)
