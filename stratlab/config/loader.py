"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from .defaults import (
    AmountParams,
    CrossoverParams,
    DataParams,
    DefaultConfig,
    EMAParams,
    MACDParams,
    OptimizerParams,
    RiskParams,
    RSIParams,
    get_default_config,
)

_SECTION_TYPES = {
    "ema": EMAParams,
    "crossover": CrossoverParams,
    "rsi": RSIParams,
    "macd": MACDParams,
    "amounts": AmountParams,
    "risk": RiskParams,
    "optimizer": OptimizerParams,
    "data": DataParams,
}


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: DefaultConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_file_config(self) -> dict[str, Any]:
        """Load parameter overrides from strategies.yaml, if present."""
        strategies_file = self.config_dir / "strategies.yaml"

        if not strategies_file.exists():
            return {}

        with open(strategies_file) as f:
            file_config = yaml.safe_load(f)

        return file_config or {}

    def merge_config(self, run_overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Per-run overrides (highest priority)
        2. strategies.yaml overrides
        3. Global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        config = self._deep_merge(config, self.load_file_config())

        if run_overrides:
            config = self._deep_merge(config, run_overrides)

        return config

    def load(self, run_overrides: Optional[dict[str, Any]] = None) -> DefaultConfig:
        """Merge all tiers and rebuild the frozen configuration."""
        return self.build_config(self.merge_config(run_overrides))

    @staticmethod
    def build_config(config: dict[str, Any]) -> DefaultConfig:
        """Convert a merged dictionary back into a DefaultConfig."""
        sections = {}
        for section, params_type in _SECTION_TYPES.items():
            known = {f.name for f in fields(params_type)}
            values = {
                key: tuple(value) if isinstance(value, list) else value
                for key, value in config.get(section, {}).items()
                if key in known
            }
            sections[section] = params_type(**values)
        return DefaultConfig(**sections)

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
