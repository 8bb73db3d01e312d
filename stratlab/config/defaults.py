"""Default configuration parameters for strategy backtests and the optimizer."""

from dataclasses import dataclass


@dataclass(frozen=True)
class EMAParams:
    """EMA touch strategy parameters."""
    periods: tuple = (50, 100, 200)         # One strategy variant per period
    prefetch_margin_days: int = 100         # Extra history beyond the period


@dataclass(frozen=True)
class CrossoverParams:
    """Golden-cross parameters."""
    short_period: int = 50
    long_period: int = 200
    prefetch_margin_days: int = 100


@dataclass(frozen=True)
class RSIParams:
    """RSI mean-reversion parameters."""
    period: int = 14
    threshold: float = 30.0                 # Buy when RSI drops below this
    cooldown_days: int = 5                  # Trading days between signals
    prefetch_margin_days: int = 50


@dataclass(frozen=True)
class MACDParams:
    """MACD bullish-crossover parameters."""
    fast: int = 12
    slow: int = 26
    signal: int = 9
    prefetch_margin_days: int = 50


@dataclass(frozen=True)
class AmountParams:
    """Default per-strategy amounts shown to users."""
    dca: float = 500.0
    lump: float = 10000.0
    ema: float = 1000.0
    crossover: float = 5000.0
    rsi: float = 1000.0
    macd: float = 1000.0


@dataclass(frozen=True)
class RiskParams:
    """Risk score blend and annualization."""
    drawdown_weight: float = 0.6
    volatility_weight: float = 0.4
    trading_days_per_year: int = 252


@dataclass(frozen=True)
class OptimizerParams:
    """Allocation search parameters."""
    top_k: int = 10
    notional: float = 1000.0                # Scale applied to $1 unit buffers
    yield_every: int = 10                   # Pairs/triplets between yields
    two_asset_steps: tuple = (90, 80, 70, 60, 50, 40, 30, 20, 10)
    prune: bool = True


@dataclass(frozen=True)
class DataParams:
    """Local price cache parameters."""
    daily_cache_file: str = "daily-data.json"
    chart_sample_points: int = 120


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    ema: EMAParams
    crossover: CrossoverParams
    rsi: RSIParams
    macd: MACDParams
    amounts: AmountParams
    risk: RiskParams
    optimizer: OptimizerParams
    data: DataParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        ema=EMAParams(),
        crossover=CrossoverParams(),
        rsi=RSIParams(),
        macd=MACDParams(),
        amounts=AmountParams(),
        risk=RiskParams(),
        optimizer=OptimizerParams(),
        data=DataParams(),
    )
