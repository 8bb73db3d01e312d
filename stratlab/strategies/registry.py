"""Strategy catalog built from configuration."""

from typing import Optional

from ..config.defaults import DefaultConfig, get_default_config
from .base import Strategy
from .periodic import DCAStrategy, LumpSumStrategy
from .signals import EMACrossoverStrategy, EMATouchStrategy, MACDStrategy, RSIStrategy


def build_strategies(config: Optional[DefaultConfig] = None) -> dict[str, Strategy]:
    """
    Instantiate every strategy variant with its configured parameters.

    Returns:
        Strategies keyed by identifier, in display order
    """
    config = config or get_default_config()

    strategies: list[Strategy] = [
        DCAStrategy(default_amount=config.amounts.dca),
        LumpSumStrategy(default_amount=config.amounts.lump),
    ]
    strategies.extend(
        EMATouchStrategy(
            period=period,
            prefetch_margin_days=config.ema.prefetch_margin_days,
            default_amount=config.amounts.ema,
        )
        for period in config.ema.periods
    )
    strategies.append(EMACrossoverStrategy(
        short_period=config.crossover.short_period,
        long_period=config.crossover.long_period,
        prefetch_margin_days=config.crossover.prefetch_margin_days,
        default_amount=config.amounts.crossover,
    ))
    strategies.append(RSIStrategy(
        period=config.rsi.period,
        threshold=config.rsi.threshold,
        cooldown_days=config.rsi.cooldown_days,
        prefetch_margin_days=config.rsi.prefetch_margin_days,
        default_amount=config.amounts.rsi,
    ))
    strategies.append(MACDStrategy(
        fast=config.macd.fast,
        slow=config.macd.slow,
        signal=config.macd.signal,
        prefetch_margin_days=config.macd.prefetch_margin_days,
        default_amount=config.amounts.macd,
    ))

    return {strategy.key: strategy for strategy in strategies}


_DEFAULT_STRATEGIES: Optional[dict[str, Strategy]] = None


def get_strategy(key: str) -> Optional[Strategy]:
    """Default-configured strategy by identifier, None if unknown."""
    global _DEFAULT_STRATEGIES
    if _DEFAULT_STRATEGIES is None:
        _DEFAULT_STRATEGIES = build_strategies()
    return _DEFAULT_STRATEGIES.get(key)
