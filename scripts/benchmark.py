#!/usr/bin/env python3
"""Optimizer benchmark: pruned search against brute force."""

import sys
import time
from datetime import date, timedelta
from pathlib import Path
from typing import Any

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from stratlab.config.defaults import OptimizerParams
from stratlab.config.run import OptimizationRequest
from stratlab.data.models import PricePoint, PriceSeries
from stratlab.logging import configure_logging
from stratlab.optimizer import PortfolioOptimizer
from stratlab.strategies import build_strategies


def generate_universe(assets: int, days: int = 1300) -> dict[str, PriceSeries]:
    """Generate constant-growth weekday series for benchmarking."""
    universe = {}
    for n in range(assets):
        symbol = f"SYM{n:02d}"
        growth = 0.00015 * (n + 1)
        points = []
        day = date(2020, 1, 1)
        while len(points) < days:
            if day.weekday() < 5:
                points.append(PricePoint(date=day, price=100.0 * (1 + growth) ** len(points)))
            day += timedelta(days=1)
        universe[symbol] = PriceSeries.from_points(symbol, points)
    return universe


def benchmark_search(universe: dict[str, PriceSeries], complexity: int, prune: bool) -> dict[str, Any]:
    """Time one optimizer run."""
    optimizer = PortfolioOptimizer(build_strategies(), params=OptimizerParams(prune=prune))
    as_of = next(iter(universe.values())).points[-1].date
    request = OptimizationRequest(target_return=12.0, years=4, complexity=complexity, as_of=as_of)

    start_time = time.time()
    results = optimizer.optimize(request, universe)
    total_time = time.time() - start_time

    return {
        "total_time": total_time,
        "results": results,
    }


def main():
    """Main benchmark function."""
    configure_logging(level="WARNING")

    print("⚡ stratlab Optimizer Benchmark")
    print("=" * 40)

    universe = generate_universe(13)

    for complexity in (1, 2, 3):
        try:
            pruned = benchmark_search(universe, complexity, prune=True)
            brute = benchmark_search(universe, complexity, prune=False)

            print(f"\n📊 Results for {complexity}-asset search over {len(universe)} assets:")
            print(f"   Pruned:      {pruned['total_time']:.3f}s")
            print(f"   Brute force: {brute['total_time']:.3f}s")

            same = [(c.strategy_key, c.allocations) for c in pruned["results"]] == \
                [(c.strategy_key, c.allocations) for c in brute["results"]]
            if same:
                print("   ✅ Pruned search matches brute force")
            else:
                print("   ❌ Pruned search differs from brute force")

        except Exception as e:
            print(f"   ❌ Benchmark failed: {e}")


if __name__ == "__main__":
    main()
