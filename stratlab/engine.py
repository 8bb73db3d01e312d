"""
Main backtesting engine coordinator.

Wires configuration, the strategy catalog, the portfolio aggregator and
the optimizer together behind two entry points: a single backtest run and
an allocation search.
"""

from pathlib import Path
from typing import Any, Mapping, Optional, Union

import structlog

from .config.loader import ConfigLoader
from .config.run import OptimizationRequest, RunConfig
from .config.validation import ConfigValidator, ValidationError
from .data.models import PriceSeries
from .data.store import PriceStore
from .errors import ConfigurationError
from .logging.config import get_backtest_logger
from .models.results import (
    AssetResult,
    BacktestResult,
    IndicatorPoint,
    NoSignals,
    OptimizationCandidate,
    PortfolioResult,
    TrajectoryPoint,
)
from .optimizer import CancellationToken, PortfolioOptimizer, ProgressCallback
from .portfolio import aggregate_results
from .strategies import Strategy, build_strategies
from .utils.format import sample_for_chart

logger = structlog.get_logger(__name__)
backtest_logger = get_backtest_logger(__name__)


def _raise_if_invalid(message: str, errors: list[ValidationError]) -> None:
    if errors:
        details = [f"{err.field}: {err.message} (got: {err.value})" for err in errors]
        raise ConfigurationError(f"{message}: {'; '.join(details)}", errors=errors)


class BacktestEngine:
    """
    Main coordinator for strategy backtests and allocation searches.

    Manages the pipeline:
    Config → Strategy catalog → Per-asset simulation → Aggregate / Optimize
    """

    def __init__(
        self,
        config_dir: Optional[str] = None,
        run_overrides: Optional[dict[str, Any]] = None
    ) -> None:
        """
        Initialize the engine.

        Raises:
            ConfigurationError: If the merged parameters fail validation
        """
        self.logger = logger
        self.backtest_logger = backtest_logger

        self.config_loader = ConfigLoader.create(config_dir)
        merged = self.config_loader.merge_config(run_overrides)
        _raise_if_invalid("Invalid strategy parameters", ConfigValidator.validate_config(merged))

        self.config = self.config_loader.build_config(merged)
        self.strategies: dict[str, Strategy] = build_strategies(self.config)
        self.optimizer = PortfolioOptimizer(
            self.strategies,
            params=self.config.optimizer,
            risk=self.config.risk
        )

        self.logger.info("Backtest engine initialized", strategies=list(self.strategies))

    def run_backtest(
        self,
        run_config: RunConfig,
        price_data: Mapping[str, PriceSeries]
    ) -> Optional[Union[PortfolioResult, NoSignals]]:
        """
        Run one strategy over every holding and blend the results.

        Args:
            run_config: Holdings, strategy, amount, window and as-of date
            price_data: Price history keyed by symbol

        Returns:
            PortfolioResult, NoSignals if no holding ever signalled, or None
            when no holding has enough history or allocations sum to zero

        Raises:
            ConfigurationError: If the run configuration is invalid
        """
        _raise_if_invalid(
            "Invalid run configuration",
            ConfigValidator.validate_run_config(run_config, set(self.strategies))
        )

        if run_config.total_allocation <= 0:
            self.backtest_logger.warning(
                "Holdings have no allocation",
                holdings=[h.symbol for h in run_config.holdings]
            )
            return None

        strategy = self.strategies[run_config.strategy]
        per_asset = []

        for holding in run_config.holdings:
            amount = run_config.amount_for(holding)
            series = price_data.get(holding.symbol)

            if series is None or series.is_empty:
                self.backtest_logger.warning("No price history for holding", symbol=holding.symbol)
                outcome = None
            else:
                outcome = strategy.simulate(series, amount, run_config.years, run_config.as_of)

            per_asset.append(AssetResult(
                symbol=holding.symbol,
                allocation=holding.allocation,
                amount=amount,
                outcome=outcome,
            ))

        result = aggregate_results(per_asset, run_config.years)

        self.backtest_logger.info(
            "Backtest completed",
            strategy=strategy.key,
            years=run_config.years,
            as_of=run_config.as_of.isoformat(),
            holdings=[h.symbol for h in run_config.holdings],
            outcome=type(result).__name__ if result is not None else "absent",
            return_percent=getattr(result, "return_percent", None)
        )

        return result

    async def run_optimization(
        self,
        request: OptimizationRequest,
        price_data: Mapping[str, PriceSeries],
        progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None
    ) -> list[OptimizationCandidate]:
        """
        Search allocations for the target return.

        Raises:
            ConfigurationError: If the request is invalid
            OptimizationCancelledError: If ``cancel_token`` was cancelled
        """
        _raise_if_invalid(
            "Invalid optimization request",
            ConfigValidator.validate_optimization_request(request)
        )
        return await self.optimizer.run(request, price_data, progress, cancel_token)

    def optimize(
        self,
        request: OptimizationRequest,
        price_data: Mapping[str, PriceSeries],
        progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None
    ) -> list[OptimizationCandidate]:
        """Blocking wrapper around ``run_optimization``."""
        _raise_if_invalid(
            "Invalid optimization request",
            ConfigValidator.validate_optimization_request(request)
        )
        return self.optimizer.optimize(request, price_data, progress, cancel_token)

    def open_price_store(self, data_dir: Union[str, Path]) -> PriceStore:
        """Price store over the configured daily cache file in ``data_dir``."""
        return PriceStore(Path(data_dir) / self.config.data.daily_cache_file)

    def chart_series(self, result: PortfolioResult) -> list[TrajectoryPoint]:
        """Trajectory downsampled for display."""
        return sample_for_chart(result.trajectory, self.config.data.chart_sample_points)

    def chart_overlay(self, result: BacktestResult) -> list[IndicatorPoint]:
        """Indicator overlay downsampled like ``chart_series``."""
        return sample_for_chart(result.overlay, self.config.data.chart_sample_points)
