"""Price history models, quotes, payload parsers and the local cache."""

from .models import DEFAULT_ASSETS, Asset, PricePoint, PriceSeries, Quote, find_asset
from .parsers import parse_chart_payload, parse_chart_quote, parse_daily_entries, parse_daily_payload
from .store import PriceStore

__all__ = [
    "Asset",
    "DEFAULT_ASSETS",
    "PricePoint",
    "PriceSeries",
    "PriceStore",
    "Quote",
    "find_asset",
    "parse_chart_payload",
    "parse_chart_quote",
    "parse_daily_entries",
    "parse_daily_payload",
]
