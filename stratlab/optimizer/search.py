"""
Allocation search.

Brute-forces {strategy x asset combination x allocation split} and keeps
the ten results whose annualized time-weighted return lies closest to a
target. Combinations whose best conceivable blend cannot beat the current
10th-best distance are skipped without being evaluated.
"""

import asyncio
import uuid
from itertools import combinations
from typing import Mapping, Optional, Sequence

import numpy as np

from ..config.defaults import OptimizerParams, RiskParams
from ..config.run import OptimizationRequest
from ..data.models import PriceSeries
from ..errors import OptimizationCancelledError, OptimizationError
from ..logging.config import get_optimizer_logger, log_prune_decision
from ..metrics.risk import calculate_risk_score, compute_max_drawdown, compute_volatility
from ..models.results import Allocation, AssetCandidate, OptimizationCandidate
from ..strategies.base import Strategy
from .evaluation import common_length_returns, evaluate_splits, precompute_candidates
from .ranking import TopCandidates, best_case_distance
from .splits import splits_for
from .state import CancellationToken, OptimizerState, OptimizerStateMachine, ProgressCallback

optimizer_logger = get_optimizer_logger(__name__)


class PortfolioOptimizer:
    """
    Searches allocation/strategy combinations for a target annual return.

    One run at a time per instance; runs are cooperative coroutines that
    yield to the event loop every ``yield_every`` combinations.
    """

    def __init__(
        self,
        strategies: Mapping[str, Strategy],
        params: Optional[OptimizerParams] = None,
        risk: Optional[RiskParams] = None
    ):
        # Keyed like the precomputed universe
        self.strategies = {s.key: s for s in strategies.values()}
        self.params = params or OptimizerParams()
        self.risk = risk or RiskParams()
        self.machine = OptimizerStateMachine()
        self.logger = optimizer_logger

    @property
    def state(self) -> OptimizerState:
        return self.machine.state

    def optimize(
        self,
        request: OptimizationRequest,
        price_data: Mapping[str, PriceSeries],
        progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None
    ) -> list[OptimizationCandidate]:
        """Blocking wrapper around ``run``."""
        return asyncio.run(self.run(request, price_data, progress, cancel_token))

    async def run(
        self,
        request: OptimizationRequest,
        price_data: Mapping[str, PriceSeries],
        progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None
    ) -> list[OptimizationCandidate]:
        """
        Run one optimization.

        Args:
            request: Target return, horizon, combination size and as-of date
            price_data: Price history keyed by symbol
            progress: Called with (units completed, units total)
            cancel_token: Checked at every yield point

        Returns:
            At most ``top_k`` candidates, closest to the target first

        Raises:
            OptimizationError: If the combination size is not 1, 2 or 3
            OptimizationCancelledError: If the token was cancelled
        """
        if request.complexity not in (1, 2, 3):
            raise OptimizationError(
                f"complexity must be 1, 2 or 3, got {request.complexity}",
                complexity=request.complexity
            )

        self.machine.run_id = uuid.uuid4().hex[:8]
        self.machine.complexity = request.complexity
        self.machine.transition(OptimizerState.PRECOMPUTING, "run_started", {
            "target_return": request.target_return,
            "years": request.years,
            "complexity": request.complexity,
            "as_of": request.as_of.isoformat(),
        })

        try:
            results = await self._run_phases(request, price_data, progress, cancel_token)
        except OptimizationCancelledError as e:
            self.machine.transition(OptimizerState.CANCELLED, "cancel_requested", {
                "completed": e.completed,
                "total": e.total,
            })
            raise
        except Exception as e:
            self.machine.transition(OptimizerState.FAILED, "exception", {"error": str(e)})
            raise

        self.machine.transition(OptimizerState.DONE, "search_completed", {"results": len(results)})
        return results

    async def _run_phases(
        self,
        request: OptimizationRequest,
        price_data: Mapping[str, PriceSeries],
        progress: Optional[ProgressCallback],
        cancel_token: Optional[CancellationToken]
    ) -> list[OptimizationCandidate]:
        symbols = list(request.symbols) if request.symbols is not None else list(price_data)
        universe = precompute_candidates(
            price_data, symbols, list(self.strategies.values()), request.years, request.as_of
        )

        if not universe:
            self.logger.warning("No symbol produced usable results", run_id=self.machine.run_id)
            if progress:
                progress(1, 1)
            return []

        await self._checkpoint(cancel_token, 0, 1)

        self.machine.transition(OptimizerState.SEARCHING, f"search_{request.complexity}_asset", {
            "symbols": list(universe),
        })

        top = TopCandidates(request.target_return, self.params.top_k)
        if request.complexity == 1:
            self._search_single(universe, request, top, progress)
        else:
            await self._search_combinations(universe, request, top, progress, cancel_token)

        return top.items()

    async def _checkpoint(self, cancel_token: Optional[CancellationToken], completed: int, total: int) -> None:
        await asyncio.sleep(0)
        if cancel_token is not None and cancel_token.cancelled:
            raise OptimizationCancelledError(
                "Optimization cancelled",
                completed=completed,
                total=total
            )

    def _search_single(
        self,
        universe: dict[str, dict[str, AssetCandidate]],
        request: OptimizationRequest,
        top: TopCandidates,
        progress: Optional[ProgressCallback]
    ) -> None:
        total = len(universe) * len(self.strategies)
        notional = self.params.notional

        for symbol, candidates in universe.items():
            for key, strategy in self.strategies.items():
                candidate = candidates.get(key)
                if candidate is None:
                    continue

                annualized = candidate.annualized_return(request.years)
                max_drawdown = compute_max_drawdown(candidate.values)
                volatility = compute_volatility(candidate.values, self.risk.trading_days_per_year)
                top.add(OptimizationCandidate(
                    strategy_key=key,
                    strategy_name=strategy.name,
                    allocations=(Allocation(symbol, 100),),
                    annualized_return=annualized,
                    max_drawdown=max_drawdown,
                    volatility=volatility,
                    risk_score=calculate_risk_score(
                        max_drawdown, volatility,
                        self.risk.drawdown_weight, self.risk.volatility_weight
                    ),
                    total_invested=candidate.total_invested_unit * notional,
                    final_value=candidate.final_value_unit * notional,
                    distance=top.distance(annualized),
                ))

        if progress:
            progress(total, total)

    async def _search_combinations(
        self,
        universe: dict[str, dict[str, AssetCandidate]],
        request: OptimizationRequest,
        top: TopCandidates,
        progress: Optional[ProgressCallback],
        cancel_token: Optional[CancellationToken]
    ) -> None:
        size = request.complexity
        weights = splits_for(size, self.params.two_asset_steps)
        # Triplets only report blends at or above the target
        at_or_above_target = size == 3

        combos = list(combinations(universe, size))
        total = len(combos)
        pruned = 0

        for done, symbols in enumerate(combos, start=1):
            for key, strategy in self.strategies.items():
                members = [universe[s].get(key) for s in symbols]
                if any(m is None for m in members):
                    continue

                if self.params.prune and not self._worth_evaluating(members, request, top, key, symbols):
                    pruned += 1
                    continue

                self._offer_splits(members, weights, strategy, request, top, at_or_above_target)

            if done % self.params.yield_every == 0:
                if progress:
                    progress(done, total)
                await self._checkpoint(cancel_token, done, total)

        if progress:
            progress(total, total)

        self.logger.info(
            "Combination search finished",
            run_id=self.machine.run_id,
            combinations=total,
            pruned=pruned,
            retained=len(top)
        )

    def _worth_evaluating(
        self,
        members: Sequence[AssetCandidate],
        request: OptimizationRequest,
        top: TopCandidates,
        strategy_key: str,
        symbols: tuple
    ) -> bool:
        returns = common_length_returns(members, request.years)
        best_case = best_case_distance(returns, request.target_return)
        worth = top.can_improve(best_case)
        log_prune_decision(
            self.logger,
            run_id=self.machine.run_id or "",
            strategy_key=strategy_key,
            symbols=symbols,
            pruned=not worth,
            best_case_distance=best_case,
            worst_retained_distance=top.worst_distance
        )
        return worth

    def _offer_splits(
        self,
        members: Sequence[AssetCandidate],
        weights: np.ndarray,
        strategy: Strategy,
        request: OptimizationRequest,
        top: TopCandidates,
        at_or_above_target: bool
    ) -> None:
        evaluation = evaluate_splits(members, weights, self.params.notional, request.years, self.risk)

        for s in range(len(weights)):
            annualized = float(evaluation.annualized_return[s])
            if at_or_above_target and annualized < request.target_return:
                continue

            distance = top.distance(annualized)
            if not top.accepts(distance):
                continue

            top.add(OptimizationCandidate(
                strategy_key=strategy.key,
                strategy_name=strategy.name,
                allocations=tuple(
                    Allocation(m.symbol, int(w)) for m, w in zip(members, weights[s])
                ),
                annualized_return=annualized,
                max_drawdown=float(evaluation.max_drawdown[s]),
                volatility=float(evaluation.volatility[s]),
                risk_score=float(evaluation.risk_score[s]),
                total_invested=float(evaluation.total_invested[s]),
                final_value=float(evaluation.final_value[s]),
                distance=distance,
            ))
