#!/usr/bin/env python3
"""
Basic Usage Example - stratlab backtesting engine

This script demonstrates the basic usage of the engine with synthetic
price data. It shows how to:
- Initialize the engine
- Backtest one strategy over a two-asset portfolio
- Compare every strategy on the same holdings
- Search allocations for a target annual return

Run: python examples/basic_usage.py [path/to/daily-data.json]
"""

import math
import sys
from datetime import date, timedelta

from stratlab.config.run import Holding, OptimizationRequest, RunConfig
from stratlab.data import PricePoint, PriceSeries, PriceStore
from stratlab.engine import BacktestEngine
from stratlab.logging import configure_logging
from stratlab.models.results import NoSignals
from stratlab.utils.format import format_currency, format_percent
from stratlab.utils.time import resolve_as_of


def synthetic_series(symbol: str, drift: float, swing: float, days: int = 1500) -> PriceSeries:
    """Weekday closes with a trend and a slow oscillation."""
    points = []
    day = date(2019, 1, 1)
    i = 0
    while len(points) < days:
        if day.weekday() < 5:
            price = 100.0 * (1 + drift) ** i * (1 + swing * math.sin(i / 15.0))
            points.append(PricePoint(date=day, price=price))
            i += 1
        day += timedelta(days=1)
    return PriceSeries.from_points(symbol, points)


def load_prices() -> dict[str, PriceSeries]:
    if len(sys.argv) > 1:
        store = PriceStore(sys.argv[1])
        return store.as_mapping()

    return {
        "AAPL": synthetic_series("AAPL", 0.0009, 0.08),
        "GLD": synthetic_series("GLD", 0.0003, 0.03),
        "BTC": synthetic_series("BTC", 0.0015, 0.25),
    }


def print_portfolio(engine: BacktestEngine, run: RunConfig, prices: dict[str, PriceSeries]) -> None:
    result = engine.run_backtest(run, prices)
    strategy = engine.strategies[run.strategy]

    if result is None:
        print(f"  {strategy.name:<22} not enough history")
    elif isinstance(result, NoSignals):
        print(f"  {strategy.name:<22} no buy signals in window")
    else:
        print(
            f"  {strategy.name:<22} invested {format_currency(result.total_invested):>10}"
            f"  value {format_currency(result.final_value):>10}"
            f"  return {format_percent(result.return_percent):>8}"
            f"  max DD {format_percent(result.max_drawdown):>7}"
        )


def main():
    """Run the example."""
    configure_logging(level="WARNING")

    engine = BacktestEngine()
    prices = load_prices()
    symbols = list(prices)[:2]
    # A real cache is anchored to today, synthetic data to its last close
    synthetic_end = max(s.points[-1].date for s in prices.values() if not s.is_empty)
    as_of = resolve_as_of(None if len(sys.argv) > 1 else synthetic_end)

    print("🚀 stratlab basic usage")
    print(f"Holdings: {', '.join(symbols)} (60/40), as of {as_of.isoformat()}, 3 years\n")

    print("📊 Strategy comparison:")
    for key, strategy in engine.strategies.items():
        run = RunConfig(
            holdings=(Holding(symbols[0], 60.0), Holding(symbols[1], 40.0)),
            strategy=key,
            amount=strategy.default_amount,
            years=3,
            as_of=as_of,
        )
        print_portfolio(engine, run, prices)

    print("\n🎯 Allocations closest to 20% a year (pairs):")
    request = OptimizationRequest(target_return=20.0, years=3, complexity=2, as_of=as_of)
    for rank, candidate in enumerate(engine.optimize(request, prices), start=1):
        split = " / ".join(f"{a.symbol} {a.weight_percent}%" for a in candidate.allocations)
        print(
            f"  {rank:>2}. {candidate.strategy_name:<22} {split:<22}"
            f" annualized {format_percent(candidate.annualized_return):>8}"
            f"  risk {candidate.risk_score:6.1f}"
        )


if __name__ == "__main__":
    main()
