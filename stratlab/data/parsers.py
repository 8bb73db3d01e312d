"""
Price payload parsers for converting raw formats to normalized series.

Two formats are understood: the bundled daily cache written by the data
refresh job, and the chart response of the market-data API that job reads,
which also yields a price quote.
Structural problems raise MalformedDataError; individual unusable rows are
skipped.
"""

import math
from dataclasses import replace
from typing import Any, Union

import orjson
import structlog

from ..errors import InsufficientDataError, MalformedDataError, MissingDataError
from ..utils.time import to_utc_date
from .models import PricePoint, PriceSeries, Quote

logger = structlog.get_logger(__name__)


def _load_json(payload: Union[str, bytes, dict[str, Any]]) -> dict[str, Any]:
    if isinstance(payload, dict):
        return payload
    try:
        data = orjson.loads(payload)
    except (TypeError, orjson.JSONDecodeError) as e:
        raise MalformedDataError(
            f"Invalid JSON payload: {e}",
            raw_data=payload,
            expected_format="json object"
        )
    if not isinstance(data, dict):
        raise MalformedDataError(
            "Payload must be a JSON object",
            raw_data=payload,
            expected_format="json object"
        )
    return data


def _parse_price(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def parse_daily_entries(symbol: str, entries: Any) -> PriceSeries:
    """
    Parse a list of ``{"date": "YYYY-MM-DD", "price": p}`` rows.

    Rows with an unreadable date or price are skipped.
    """
    if not isinstance(entries, list):
        raise MalformedDataError(
            f"Daily entries for {symbol} must be a list",
            raw_data=entries,
            expected_format="list of {date, price}",
            symbol=symbol
        )

    points = []
    skipped = 0
    for entry in entries:
        if not isinstance(entry, dict) or "date" not in entry:
            skipped += 1
            continue
        try:
            day = to_utc_date(entry["date"])
        except (TypeError, ValueError):
            skipped += 1
            continue
        points.append(PricePoint(date=day, price=_parse_price(entry.get("price"))))

    series = PriceSeries.from_points(symbol, points)
    skipped += len(points) - len(series)
    if skipped:
        logger.debug("Skipped unusable daily rows", symbol=symbol, skipped=skipped)
    return series


def parse_daily_payload(payload: Union[str, bytes, dict[str, Any]]) -> dict[str, PriceSeries]:
    """
    Parse the bundled daily cache.

    Format: ``{"tickers": {provider_symbol: [{"date", "price"}, ...]}}``

    Returns:
        Series keyed by provider symbol
    """
    data = _load_json(payload)
    tickers = data.get("tickers")
    if tickers is None:
        raise MissingDataError("Daily payload has no 'tickers' section", data_type="tickers")
    if not isinstance(tickers, dict):
        raise MalformedDataError(
            "'tickers' must be an object keyed by symbol",
            raw_data=tickers,
            expected_format="{symbol: [...]}"
        )

    return {symbol: parse_daily_entries(symbol, entries) for symbol, entries in tickers.items()}


def _chart_result(symbol: str, data: dict[str, Any]) -> tuple[dict[str, Any], list, list]:
    try:
        result = data["chart"]["result"][0]
        timestamps = result["timestamp"]
        closes = result["indicators"]["quote"][0]["close"]
    except (KeyError, IndexError, TypeError):
        raise MalformedDataError(
            f"Chart payload for {symbol} is missing result data",
            raw_data=data,
            expected_format="chart.result[0].{timestamp, indicators.quote[0].close}",
            symbol=symbol
        )

    if not isinstance(timestamps, list) or not isinstance(closes, list):
        raise MalformedDataError(
            f"Chart payload for {symbol} has non-list timestamp/close arrays",
            expected_format="parallel lists",
            symbol=symbol
        )
    return result, timestamps, closes


def _live_price(result: dict[str, Any]) -> float:
    price = _parse_price((result.get("meta") or {}).get("regularMarketPrice"))
    return price if math.isfinite(price) and price > 0 else math.nan


def parse_chart_payload(symbol: str, payload: Union[str, bytes, dict[str, Any]]) -> PriceSeries:
    """
    Parse a market-data chart response into daily closes.

    Timestamps are epoch seconds; null closes are skipped. When the response
    carries a live ``regularMarketPrice`` it replaces the last close.
    """
    result, timestamps, closes = _chart_result(symbol, _load_json(payload))

    points = []
    for ts, close in zip(timestamps, closes):
        if close is None or ts is None:
            continue
        try:
            day = to_utc_date(ts)
        except (TypeError, ValueError, OverflowError, OSError):
            continue
        points.append(PricePoint(date=day, price=_parse_price(close)))

    live_price = _live_price(result)
    if points and not math.isnan(live_price):
        points[-1] = PricePoint(date=points[-1].date, price=live_price)

    series = PriceSeries.from_points(symbol, points)
    if series.is_empty:
        raise InsufficientDataError(
            f"Chart payload for {symbol} has no usable closes",
            required_count=1,
            available_count=0,
            symbol=symbol
        )
    return series


def parse_chart_quote(symbol: str, payload: Union[str, bytes, dict[str, Any]]) -> Quote:
    """
    Summarize a chart response as a quote.

    The current price is the live ``regularMarketPrice``, or the last close
    without one. The change is measured against the second-to-last non-null
    close and is zero when fewer than two closes exist. The name falls back
    from ``meta.shortName`` to ``meta.symbol`` to ``symbol``.
    """
    result, _, closes = _chart_result(symbol, _load_json(payload))
    meta = result.get("meta") or {}
    usable = [price for price in map(_parse_price, closes) if math.isfinite(price) and price > 0]

    current = _live_price(result)
    if math.isnan(current):
        if not usable:
            raise InsufficientDataError(
                f"Chart payload for {symbol} has no price to quote",
                required_count=1,
                available_count=0,
                symbol=symbol
            )
        current = usable[-1]

    quote = Quote(
        symbol=symbol,
        name=meta.get("shortName") or meta.get("symbol") or symbol,
        current_price=current
    )
    if len(usable) < 2:
        return quote

    previous = usable[-2]
    change = current - previous
    return replace(quote, price_change=change, percent_change=change / previous * 100.0)
