#!/usr/bin/env python3
"""
Optimizer Demo - progress reporting and cancellation

Runs a three-asset allocation search as a coroutine next to a watchdog task
that cancels it after a time limit, printing progress and the optimizer
phase as it goes.

Run: python examples/optimizer_demo.py [time limit in seconds]
"""

import asyncio
import sys
from datetime import date, timedelta

from stratlab.config.run import OptimizationRequest
from stratlab.data import DEFAULT_ASSETS, PricePoint, PriceSeries
from stratlab.engine import BacktestEngine
from stratlab.errors import OptimizationCancelledError
from stratlab.logging import configure_logging
from stratlab.optimizer import CancellationToken
from stratlab.utils.format import format_percent


def synthetic_universe(days: int = 1300) -> dict[str, PriceSeries]:
    """One constant-growth series per catalog asset."""
    universe = {}
    for n, asset in enumerate(DEFAULT_ASSETS):
        growth = 0.0001 * (n + 1)
        points = []
        day = date(2020, 1, 1)
        while len(points) < days:
            if day.weekday() < 5:
                points.append(PricePoint(date=day, price=50.0 * (1 + growth) ** len(points)))
            day += timedelta(days=1)
        universe[asset.symbol] = PriceSeries.from_points(asset.symbol, points)
    return universe


async def watchdog(token: CancellationToken, seconds: float) -> None:
    await asyncio.sleep(seconds)
    print(f"\n⏱️  Time limit of {seconds}s reached, cancelling")
    token.cancel()


async def main(time_limit: float) -> None:
    configure_logging(level="INFO")

    engine = BacktestEngine()
    prices = synthetic_universe()
    as_of = next(iter(prices.values())).points[-1].date
    request = OptimizationRequest(target_return=15.0, years=4, complexity=3, as_of=as_of)

    token = CancellationToken()

    def progress(done: int, total: int) -> None:
        print(f"\r🔎 {done}/{total} triplets ({engine.optimizer.state.value})", end="", flush=True)

    guard = asyncio.create_task(watchdog(token, time_limit))
    try:
        results = await engine.run_optimization(request, prices, progress=progress, cancel_token=token)
    except OptimizationCancelledError as e:
        print(f"\n❌ Cancelled after {e.completed}/{e.total} triplets")
        return
    finally:
        guard.cancel()

    print(f"\n✅ Finished in state {engine.optimizer.state.value}")
    for rank, candidate in enumerate(results, start=1):
        split = " / ".join(f"{a.symbol} {a.weight_percent}%" for a in candidate.allocations)
        print(f"  {rank:>2}. {candidate.strategy_name:<22} {split:<28}"
              f" {format_percent(candidate.annualized_return):>8}")


if __name__ == "__main__":
    limit = float(sys.argv[1]) if len(sys.argv) > 1 else 30.0
    asyncio.run(main(limit))
