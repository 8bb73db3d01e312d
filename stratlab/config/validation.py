"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any

from .run import OptimizationRequest, RunConfig


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class ConfigValidator:
    """Validates configuration parameters and run descriptions."""

    @staticmethod
    def validate_period_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate indicator period parameters of any strategy section."""
        errors = []

        for name in ("period", "short_period", "long_period", "fast", "slow", "signal"):
            if name in params:
                value = params[name]
                if not _is_int(value) or value <= 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a positive integer",
                        value=value
                    ))

        if "periods" in params:
            value = params["periods"]
            if not isinstance(value, (list, tuple)) or not value or \
                    not all(_is_int(p) and p > 0 for p in value):
                errors.append(ValidationError(
                    field="periods",
                    message="Must be a non-empty list of positive integers",
                    value=value
                ))

        if "prefetch_margin_days" in params:
            value = params["prefetch_margin_days"]
            if not _is_int(value) or value < 0:
                errors.append(ValidationError(
                    field="prefetch_margin_days",
                    message="Must be a non-negative integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_crossover_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate golden-cross parameters."""
        errors = ConfigValidator.validate_period_params(params)

        short = params.get("short_period")
        long = params.get("long_period")
        if _is_int(short) and _is_int(long) and short >= long:
            errors.append(ValidationError(
                field="short_period",
                message="Must be smaller than long_period",
                value=short
            ))

        return errors

    @staticmethod
    def validate_rsi_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate RSI parameters."""
        errors = ConfigValidator.validate_period_params(params)

        if "threshold" in params:
            value = params["threshold"]
            if not _is_number(value) or value <= 0 or value >= 100:
                errors.append(ValidationError(
                    field="threshold",
                    message="Must be a number between 0 and 100",
                    value=value
                ))

        if "cooldown_days" in params:
            value = params["cooldown_days"]
            if not _is_int(value) or value < 0:
                errors.append(ValidationError(
                    field="cooldown_days",
                    message="Must be a non-negative integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_macd_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate MACD parameters."""
        errors = ConfigValidator.validate_period_params(params)

        fast = params.get("fast")
        slow = params.get("slow")
        if _is_int(fast) and _is_int(slow) and fast >= slow:
            errors.append(ValidationError(
                field="fast",
                message="Must be smaller than slow",
                value=fast
            ))

        return errors

    @staticmethod
    def validate_optimizer_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate optimizer parameters."""
        errors = []

        for name in ("top_k", "yield_every"):
            if name in params:
                value = params[name]
                if not _is_int(value) or value <= 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a positive integer",
                        value=value
                    ))

        if "notional" in params:
            value = params["notional"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="notional",
                    message="Must be a positive number",
                    value=value
                ))

        if "two_asset_steps" in params:
            value = params["two_asset_steps"]
            if not isinstance(value, (list, tuple)) or not value or \
                    not all(_is_int(w) and 0 < w < 100 for w in value):
                errors.append(ValidationError(
                    field="two_asset_steps",
                    message="Must be a non-empty list of integers between 1 and 99",
                    value=value
                ))

        if "prune" in params and not isinstance(params["prune"], bool):
            errors.append(ValidationError(
                field="prune",
                message="Must be a boolean",
                value=params["prune"]
            ))

        return errors

    @staticmethod
    def validate_risk_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate risk score parameters."""
        errors = []

        for name in ("drawdown_weight", "volatility_weight"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value < 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a non-negative number",
                        value=value
                    ))

        if "trading_days_per_year" in params:
            value = params["trading_days_per_year"]
            if not _is_int(value) or value <= 0:
                errors.append(ValidationError(
                    field="trading_days_per_year",
                    message="Must be a positive integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        if "ema" in config:
            errors.extend(ConfigValidator.validate_period_params(config["ema"]))

        if "crossover" in config:
            errors.extend(ConfigValidator.validate_crossover_params(config["crossover"]))

        if "rsi" in config:
            errors.extend(ConfigValidator.validate_rsi_params(config["rsi"]))

        if "macd" in config:
            errors.extend(ConfigValidator.validate_macd_params(config["macd"]))

        if "optimizer" in config:
            errors.extend(ConfigValidator.validate_optimizer_params(config["optimizer"]))

        if "risk" in config:
            errors.extend(ConfigValidator.validate_risk_params(config["risk"]))

        return errors

    @staticmethod
    def validate_run_config(run: RunConfig, strategy_keys: set[str]) -> list[ValidationError]:
        """Validate a backtest run description."""
        errors = []

        if run.strategy not in strategy_keys:
            errors.append(ValidationError(
                field="strategy",
                message=f"Must be one of {sorted(strategy_keys)}",
                value=run.strategy
            ))

        if not _is_number(run.amount) or run.amount <= 0:
            errors.append(ValidationError(
                field="amount",
                message="Must be a positive number",
                value=run.amount
            ))

        if not _is_int(run.years) or run.years <= 0:
            errors.append(ValidationError(
                field="years",
                message="Must be a positive integer",
                value=run.years
            ))

        for holding in run.holdings:
            if not _is_number(holding.allocation) or holding.allocation < 0:
                errors.append(ValidationError(
                    field=f"holdings.{holding.symbol}.allocation",
                    message="Must be a non-negative number",
                    value=holding.allocation
                ))

        return errors

    @staticmethod
    def validate_optimization_request(request: OptimizationRequest) -> list[ValidationError]:
        """Validate an optimization request."""
        errors = []

        if request.complexity not in (1, 2, 3):
            errors.append(ValidationError(
                field="complexity",
                message="Must be 1, 2 or 3",
                value=request.complexity
            ))

        if not _is_int(request.years) or request.years <= 0:
            errors.append(ValidationError(
                field="years",
                message="Must be a positive integer",
                value=request.years
            ))

        if not _is_number(request.target_return):
            errors.append(ValidationError(
                field="target_return",
                message="Must be a number",
                value=request.target_return
            ))

        return errors
