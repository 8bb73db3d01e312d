"""
Local price cache.

Serves daily price series from the bundled cache file. Retrieval problems
never propagate: an unreadable cache or unknown symbol yields an empty
series, which every strategy reports as absence.
"""

from pathlib import Path
from typing import Optional, Union

import structlog

from ..errors import DataQualityError
from .models import DEFAULT_ASSETS, Asset, PriceSeries, find_asset
from .parsers import parse_daily_payload

logger = structlog.get_logger(__name__)


class PriceStore:
    """Lazily loaded, read-only view of the bundled daily cache."""

    def __init__(self, cache_path: Optional[Union[str, Path]] = None,
                 assets: tuple[Asset, ...] = DEFAULT_ASSETS):
        self.cache_path = Path(cache_path) if cache_path is not None else None
        self.assets = assets
        self._series: Optional[dict[str, PriceSeries]] = None

    @classmethod
    def from_series(cls, series: dict[str, PriceSeries]) -> "PriceStore":
        """Build a store around already-loaded series keyed by provider symbol."""
        store = cls(cache_path=None)
        store._series = dict(series)
        return store

    def _load(self) -> dict[str, PriceSeries]:
        if self._series is not None:
            return self._series

        self._series = {}
        if self.cache_path is None:
            return self._series

        if not self.cache_path.exists():
            logger.warning("Price cache file not found", path=str(self.cache_path))
            return self._series

        try:
            self._series = parse_daily_payload(self.cache_path.read_bytes())
        except DataQualityError as e:
            logger.warning(
                "Price cache could not be parsed",
                path=str(self.cache_path),
                **e.describe()
            )
        except OSError as e:
            logger.warning("Price cache could not be read", path=str(self.cache_path), error=str(e))
        else:
            logger.info(
                "Loaded price cache",
                path=str(self.cache_path),
                symbols=len(self._series)
            )

        return self._series

    def get(self, symbol: str) -> PriceSeries:
        """Series for a display or provider symbol; empty if unavailable."""
        series = self._load()
        asset = find_asset(symbol)
        for key in (asset.provider_symbol, asset.symbol, symbol):
            if key in series:
                return series[key]
        return PriceSeries.empty(symbol)

    def symbols(self) -> list[str]:
        """Display symbols of catalog assets that have any history, catalog order."""
        series = self._load()
        available = []
        for asset in self.assets:
            if not self.get(asset.symbol).is_empty:
                available.append(asset.symbol)
        for key, s in series.items():
            display = find_asset(key).symbol
            if display not in available and not s.is_empty:
                available.append(display)
        return available

    def as_mapping(self, symbols: Optional[list[str]] = None) -> dict[str, PriceSeries]:
        """Series keyed by display symbol, for the engine entry points."""
        wanted = symbols if symbols is not None else self.symbols()
        return {symbol: self.get(symbol) for symbol in wanted}
