"""Pytest configuration and shared fixtures."""

import math
from datetime import date, timedelta
from typing import Callable, Sequence

import pytest

from stratlab.data.models import PricePoint, PriceSeries


def _business_days(start: date, count: int) -> list[date]:
    days = []
    day = start
    while len(days) < count:
        if day.weekday() < 5:
            days.append(day)
        day += timedelta(days=1)
    return days


def _build_series(symbol: str, start: date, prices: Sequence[float]) -> PriceSeries:
    days = _business_days(start, len(prices))
    return PriceSeries.from_points(
        symbol,
        [PricePoint(date=d, price=p) for d, p in zip(days, prices)]
    )


@pytest.fixture
def series_factory() -> Callable[[str, Sequence[float], date], PriceSeries]:
    """Build a series of weekday closes starting at ``start``."""
    def factory(symbol: str, prices: Sequence[float], start: date = date(2020, 1, 1)) -> PriceSeries:
        return _build_series(symbol, start, prices)
    return factory


@pytest.fixture
def geometric_factory() -> Callable[..., PriceSeries]:
    """Build a constant-growth weekday series: ``base * (1 + growth) ** i``."""
    def factory(symbol: str, growth: float, count: int = 800,
                base: float = 100.0, start: date = date(2020, 1, 1)) -> PriceSeries:
        return _build_series(symbol, start, [base * (1 + growth) ** i for i in range(count)])
    return factory


@pytest.fixture
def wavy_series() -> PriceSeries:
    """About three years of oscillating closes on a slight uptrend."""
    prices = [100.0 + 10.0 * math.sin(i / 7.0) + 0.05 * i for i in range(800)]
    return _build_series("WAVE", date(2020, 1, 1), prices)


@pytest.fixture
def rising_series() -> PriceSeries:
    """About three years of strictly rising closes."""
    return _build_series("RISE", date(2020, 1, 1), [100.0 * 1.002 ** i for i in range(800)])


@pytest.fixture
def monthly_series() -> PriceSeries:
    """Twelve month-start closes rising linearly from 100 to 200."""
    points = [
        PricePoint(date=date(2023, month, 1), price=100.0 + (month - 1) * 100.0 / 11)
        for month in range(1, 13)
    ]
    return PriceSeries.from_points("MONTHLY", points)


@pytest.fixture
def sample_daily_payload() -> dict:
    """Bundled daily cache payload with two tickers."""
    return {
        "tickers": {
            "AAPL": [
                {"date": "2024-01-02", "price": 185.6},
                {"date": "2024-01-03", "price": 184.25},
                {"date": "2024-01-04", "price": 181.91},
            ],
            "BTC-USD": [
                {"date": "2024-01-01", "price": 44167.33},
                {"date": "2024-01-02", "price": 44957.97},
            ],
        }
    }


@pytest.fixture
def sample_chart_payload() -> dict:
    """Chart API response with a null close and a live price."""
    return {
        "chart": {
            "result": [{
                "meta": {"regularMarketPrice": 190.5},
                "timestamp": [1704205800, 1704292200, 1704378600, 1704465000],
                "indicators": {
                    "quote": [{"close": [185.64, None, 181.91, 181.18]}]
                },
            }]
        }
    }
