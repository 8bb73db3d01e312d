"""Tests for the allocation optimizer."""

import asyncio
from dataclasses import replace
from datetime import date

import pytest

from stratlab.config.defaults import OptimizerParams
from stratlab.config.run import OptimizationRequest
from stratlab.errors import OptimizationCancelledError, OptimizationError, StateTransitionError
from stratlab.metrics import compute_twr
from stratlab.models.results import Allocation
from stratlab.optimizer import (
    CancellationToken,
    OptimizerState,
    OptimizerStateMachine,
    PortfolioOptimizer,
    common_length_returns,
    precompute_candidates,
    three_asset_splits,
)
from stratlab.portfolio import aggregate_trajectories
from stratlab.strategies import DCAStrategy, EMATouchStrategy, LumpSumStrategy, MACDStrategy, RSIStrategy

GROWTHS = {"AAA": 0.0002, "BBB": 0.0005, "CCC": 0.0008, "DDD": 0.0011}


@pytest.fixture
def universe(geometric_factory):
    """Four constant-growth assets over the same weekdays."""
    return {symbol: geometric_factory(symbol, g, count=600) for symbol, g in GROWTHS.items()}


@pytest.fixture
def strategies():
    """Lump sum and monthly DCA only."""
    return {"lump": LumpSumStrategy(), "dca": DCAStrategy()}


def _request(universe, complexity: int, target: float = 12.0) -> OptimizationRequest:
    as_of = next(iter(universe.values())).points[-1].date
    return OptimizationRequest(target_return=target, years=2, complexity=complexity, as_of=as_of)


def _fingerprint(results):
    return [(c.strategy_key, c.allocations) for c in results]


class TestSingleAsset:
    """Test the one-asset search."""

    def test_every_pair_ranked(self, universe, strategies):
        """Eight pairs fit in the top ten, closest first."""
        results = PortfolioOptimizer(strategies).optimize(_request(universe, 1), universe)

        assert len(results) == 8
        distances = [c.distance for c in results]
        assert distances == sorted(distances)
        assert all(len(c.allocations) == 1 and c.allocations[0].weight_percent == 100 for c in results)

    def test_matches_direct_simulation(self, universe, strategies):
        """Reported return is the simulated TWR over the window years."""
        request = _request(universe, 1)
        results = PortfolioOptimizer(strategies).optimize(request, universe)
        best = results[0]

        series = universe[best.allocations[0].symbol]
        simulated = strategies[best.strategy_key].simulate(series, 1000.0, request.years, request.as_of)

        assert best.annualized_return == pytest.approx(
            compute_twr(simulated.values, simulated.invested) / request.years
        )
        assert best.total_invested == pytest.approx(simulated.total_invested)
        assert best.final_value == pytest.approx(simulated.final_value)


class TestCombinationSearch:
    """Test the two- and three-asset searches."""

    @pytest.mark.parametrize("complexity", [2, 3])
    def test_pruning_matches_brute_force(self, universe, strategies, complexity):
        """Skipping hopeless combinations never changes the answer."""
        request = _request(universe, complexity)
        pruned = PortfolioOptimizer(strategies).optimize(request, universe)
        brute = PortfolioOptimizer(
            strategies, params=OptimizerParams(prune=False)
        ).optimize(request, universe)

        assert _fingerprint(pruned) == _fingerprint(brute)
        assert [c.annualized_return for c in pruned] == pytest.approx(
            [c.annualized_return for c in brute]
        )

    def test_pruning_with_shorter_history(self, geometric_factory, series_factory):
        """A late-listed asset cuts blends short; pruning still matches brute force."""
        # Falls for 340 trading days, then climbs; cheap over the first 250 window days only
        turn_prices = [100.0 * 0.9995 ** min(i, 340) * 1.004 ** max(i - 340, 0) for i in range(600)]
        universe = {
            "STEADY": geometric_factory("STEADY", 0.0005, count=600),
            "TURN": series_factory("TURN", turn_prices),
            "LATE": geometric_factory("LATE", 0.001, count=250, start=date(2021, 5, 3)),
        }
        strategies = {s.key: s for s in (
            LumpSumStrategy(), EMATouchStrategy(period=50), RSIStrategy(), MACDStrategy()
        )}
        request = _request(universe, 2, target=0.0)

        pruned = PortfolioOptimizer(strategies, params=OptimizerParams(top_k=3)).optimize(
            request, universe
        )
        brute = PortfolioOptimizer(
            strategies, params=OptimizerParams(top_k=3, prune=False)
        ).optimize(request, universe)

        assert _fingerprint(pruned) == _fingerprint(brute)
        assert ("lump", (Allocation("TURN", 70), Allocation("LATE", 30))) in _fingerprint(pruned)

    def test_bound_uses_blend_length(self, geometric_factory):
        """Member returns for the bound are measured over the shortest member."""
        universe = {
            "LONG": geometric_factory("LONG", 0.0005, count=600),
            "SHORT": geometric_factory("SHORT", 0.001, count=250, start=date(2021, 5, 3)),
        }
        as_of = universe["LONG"].points[-1].date
        candidates = precompute_candidates(universe, list(universe), [LumpSumStrategy()], 2, as_of)
        long_lump = candidates["LONG"]["lump"]
        short_lump = candidates["SHORT"]["lump"]

        returns = common_length_returns([long_lump, short_lump], 2)

        length = len(short_lump)
        assert len(long_lump) > length
        assert returns[0] == pytest.approx(
            compute_twr(long_lump.values[:length], long_lump.invested[:length]) / 2
        )
        assert returns[0] < long_lump.annualized_return(2)
        assert returns[1] == short_lump.annualized_return(2)

    def test_two_asset_results(self, universe, strategies):
        """Ten results, sorted, weights summing to 100."""
        results = PortfolioOptimizer(strategies).optimize(_request(universe, 2), universe)

        assert len(results) == 10
        distances = [c.distance for c in results]
        assert distances == sorted(distances)
        for candidate in results:
            assert len(candidate.allocations) == 2
            assert sum(a.weight_percent for a in candidate.allocations) == 100

    def test_blend_reconciles_with_simulation(self, universe, strategies):
        """A reported blend equals simulating each asset at its dollar weight."""
        request = _request(universe, 2)
        best = PortfolioOptimizer(strategies).optimize(request, universe)[0]
        strategy = strategies[best.strategy_key]

        results = [
            strategy.simulate(universe[a.symbol], 1000.0 * a.weight_percent / 100.0,
                              request.years, request.as_of)
            for a in best.allocations
        ]
        blended = aggregate_trajectories(results)
        values = [p.value for p in blended]
        invested = [p.invested for p in blended]

        assert best.annualized_return == pytest.approx(compute_twr(values, invested) / request.years)
        assert best.total_invested == pytest.approx(sum(r.total_invested for r in results))
        assert best.final_value == pytest.approx(sum(r.final_value for r in results))

    def test_three_asset_results_meet_target(self, universe, strategies):
        """Triplet results never fall short of the target."""
        request = _request(universe, 3, target=10.0)
        results = PortfolioOptimizer(strategies).optimize(request, universe)
        lattice = [tuple(row) for row in three_asset_splits().tolist()]

        assert results
        for candidate in results:
            assert candidate.annualized_return >= request.target_return
            weights = tuple(float(a.weight_percent) for a in candidate.allocations)
            assert weights in lattice

    def test_restricted_symbols(self, universe, strategies):
        """Only the requested symbols are searched."""
        request = replace(_request(universe, 2), symbols=("AAA", "BBB", "CCC"))
        results = PortfolioOptimizer(strategies).optimize(request, universe)

        symbols = {a.symbol for c in results for a in c.allocations}
        assert symbols <= {"AAA", "BBB", "CCC"}

    def test_progress_reported(self, universe, strategies):
        """Progress ends at (total, total) and never goes backwards."""
        calls = []
        PortfolioOptimizer(strategies).optimize(
            _request(universe, 2), universe, progress=lambda done, total: calls.append((done, total))
        )

        assert calls[-1] == (6, 6)
        assert [done for done, _ in calls] == sorted(done for done, _ in calls)


class TestPrecompute:
    """Test unit candidate precomputation."""

    def test_unusable_symbols_dropped(self, universe, strategies, series_factory):
        """Symbols without history or usable results are left out."""
        data = dict(universe)
        data["TINY"] = series_factory("TINY", [10.0])
        as_of = universe["AAA"].points[-1].date

        candidates = precompute_candidates(data, list(data) + ["MISSING"], list(strategies.values()), 2, as_of)

        assert set(candidates) == set(universe)
        assert set(candidates["AAA"]) == {"lump", "dca"}
        assert candidates["AAA"]["lump"].total_invested_unit == pytest.approx(1.0)
        assert not candidates["AAA"]["lump"].values.flags.writeable


class TestLifecycle:
    """Test state transitions and cancellation."""

    def test_completed_run_is_done(self, universe, strategies):
        """A normal run ends in DONE."""
        optimizer = PortfolioOptimizer(strategies)
        assert optimizer.state == OptimizerState.IDLE

        optimizer.optimize(_request(universe, 2), universe)
        assert optimizer.state == OptimizerState.DONE

    def test_cancel_before_search(self, universe, strategies):
        """A pre-cancelled token stops the run at the first yield."""
        token = CancellationToken()
        token.cancel()
        optimizer = PortfolioOptimizer(strategies)

        with pytest.raises(OptimizationCancelledError):
            optimizer.optimize(_request(universe, 2), universe, cancel_token=token)

        assert optimizer.state == OptimizerState.CANCELLED

    def test_cancel_mid_search(self, geometric_factory, strategies):
        """Cancelling from the progress callback stops at the next yield point."""
        data = {f"S{i}": geometric_factory(f"S{i}", 0.0002 * (i + 1), count=600) for i in range(6)}
        token = CancellationToken()
        optimizer = PortfolioOptimizer(strategies)

        with pytest.raises(OptimizationCancelledError) as exc_info:
            asyncio.run(optimizer.run(
                _request(data, 2), data,
                progress=lambda done, total: token.cancel(),
                cancel_token=token
            ))

        assert exc_info.value.completed == 10
        assert exc_info.value.total == 15
        assert optimizer.state == OptimizerState.CANCELLED

    def test_rerun_after_cancel(self, universe, strategies):
        """A cancelled optimizer can run again."""
        token = CancellationToken()
        token.cancel()
        optimizer = PortfolioOptimizer(strategies)

        with pytest.raises(OptimizationCancelledError):
            optimizer.optimize(_request(universe, 1), universe, cancel_token=token)

        assert optimizer.optimize(_request(universe, 1), universe)
        assert optimizer.state == OptimizerState.DONE

    def test_no_data_finishes_empty(self, strategies):
        """Nothing to search is an empty answer, not an error."""
        optimizer = PortfolioOptimizer(strategies)
        request = OptimizationRequest(target_return=10.0, years=1, complexity=2, as_of=date(2024, 1, 1))

        assert optimizer.optimize(request, {}) == []
        assert optimizer.state == OptimizerState.DONE

    def test_invalid_complexity(self, universe, strategies):
        """Combination sizes outside 1 to 3 are rejected up front."""
        optimizer = PortfolioOptimizer(strategies)
        with pytest.raises(OptimizationError):
            optimizer.optimize(_request(universe, 4), universe)
        assert optimizer.state == OptimizerState.IDLE

    def test_invalid_transition(self):
        """Skipping the precompute phase is refused."""
        machine = OptimizerStateMachine()
        with pytest.raises(StateTransitionError) as exc_info:
            machine.transition(OptimizerState.SEARCHING, "test")

        assert exc_info.value.current_state == "idle"
        assert exc_info.value.attempted_transition == "searching"
        assert machine.state == OptimizerState.IDLE
