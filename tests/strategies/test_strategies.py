"""Tests for the strategy simulators."""

from datetime import date

import pytest

from stratlab.data.models import PricePoint, PriceSeries
from stratlab.indicators.ema import calculate_ema
from stratlab.models.results import BacktestResult, NoSignals
from stratlab.strategies import (
    DCAStrategy,
    EMACrossoverStrategy,
    EMATouchStrategy,
    LumpSumStrategy,
    MACDStrategy,
    RSIStrategy,
    build_overlay,
    build_strategies,
    get_strategy,
    prefetch_range,
    slice_window,
)


def _sawtooth(cycles: int = 27) -> list[float]:
    """Twenty steady up days then ten sharp down days, repeated."""
    prices = []
    price = 100.0
    for _ in range(cycles):
        for _ in range(20):
            price += 1.5
            prices.append(price)
        for _ in range(10):
            price -= 3.0
            prices.append(price)
    return prices


class TestDCA:
    """Test monthly dollar-cost averaging."""

    def test_monthly_scenario(self, monthly_series):
        """Twelve month starts at $100 each: invested 1200, no drawdown on a rising series."""
        result = DCAStrategy().simulate(monthly_series, 100.0, 1, date(2023, 12, 1))

        assert isinstance(result, BacktestResult)
        assert result.buy_count == 12
        assert result.total_invested == pytest.approx(1200.0)
        assert len(result.trajectory) == 12
        assert result.max_drawdown == 0.0

        shares = sum(100.0 / p.price for p in monthly_series.points)
        assert result.total_shares == pytest.approx(shares)
        assert result.final_value == pytest.approx(shares * 200.0)
        assert result.final_value > result.total_invested

    def test_one_buy_per_month(self, rising_series):
        """Daily data still buys only on the first trading day of each month."""
        as_of = rising_series.points[-1].date
        result = DCAStrategy().simulate(rising_series, 500.0, 1, as_of)

        months = {(s.date.year, s.date.month) for s in result.buy_signals}
        assert len(months) == result.buy_count
        for signal in result.buy_signals:
            window_days = [p.date for p in result.trajectory
                           if (p.date.year, p.date.month) == (signal.date.year, signal.date.month)]
            assert signal.date == window_days[0]

    def test_window_beyond_history_is_absent(self, rising_series):
        """An as-of date years after the data leaves no points in the window."""
        assert DCAStrategy().simulate(rising_series, 500.0, 1, date(2030, 1, 1)) is None

    def test_single_point_is_absent(self):
        """Fewer than two points in the window is absence."""
        series = PriceSeries.from_points("ONE", [PricePoint(date(2024, 1, 2), 10.0)])
        assert DCAStrategy().simulate(series, 500.0, 1, date(2024, 1, 2)) is None

    def test_points_after_as_of_ignored(self, rising_series):
        """The window ends at the as-of date."""
        as_of = rising_series.points[400].date
        result = DCAStrategy().simulate(rising_series, 500.0, 1, as_of)

        assert result.trajectory[-1].date == as_of
        assert result.final_value == pytest.approx(result.total_shares * rising_series.points[400].price)


class TestLumpSum:
    """Test lump-sum investing."""

    def test_single_purchase_on_first_day(self, rising_series):
        """Everything is invested on the first window day."""
        as_of = rising_series.points[-1].date
        result = LumpSumStrategy().simulate(rising_series, 10000.0, 1, as_of)

        window = slice_window(rising_series, 1, as_of)
        first = window.points[0].price
        last = window.points[-1].price

        assert result.buy_count == 1
        assert result.total_invested == 10000.0
        assert result.avg_cost_per_share == first
        assert result.final_value == pytest.approx(10000.0 / first * last)
        assert result.return_percent == pytest.approx((last / first - 1) * 100.0)
        assert all(p.invested == 10000.0 for p in result.trajectory)

    def test_average_cost_is_entry_price(self, series_factory):
        """The average cost is the entry close itself, not a re-derived quotient."""
        series = series_factory("ODD", [0.3, 0.7, 1.1, 0.9])
        result = LumpSumStrategy().simulate(series, 10.0, 1, series.points[-1].date)

        assert result.avg_cost_per_share == 0.3

    def test_drawdown_after_crash(self, series_factory):
        """A halving of the price is a -50% drawdown."""
        series = series_factory("CRASH", [100.0, 120.0, 60.0, 90.0])
        result = LumpSumStrategy().simulate(series, 1000.0, 1, series.points[-1].date)

        assert result.max_drawdown == pytest.approx(-50.0)


class TestSignalStrategies:
    """Test the indicator-driven simulators."""

    @pytest.mark.parametrize("period", [50, 100, 200])
    def test_ema_touch_never_fires_on_rising_series(self, rising_series, period):
        """Price never drops to its EMA on a strictly rising series."""
        result = EMATouchStrategy(period=period).simulate(
            rising_series, 1000.0, 2, rising_series.points[-1].date
        )

        assert isinstance(result, NoSignals)
        assert result.strategy_key == f"ema{period}"

    def test_rsi_never_fires_on_rising_series(self, rising_series):
        """RSI stays at 100 without losses."""
        result = RSIStrategy().simulate(rising_series, 1000.0, 2, rising_series.points[-1].date)
        assert isinstance(result, NoSignals)

    def test_ema_touch_fires_on_oscillating_series(self, wavy_series):
        """Oscillating closes repeatedly touch their EMA."""
        result = EMATouchStrategy(period=50).simulate(
            wavy_series, 1000.0, 2, wavy_series.points[-1].date
        )

        assert isinstance(result, BacktestResult)
        assert result.buy_count > 0
        assert result.total_invested == pytest.approx(1000.0 * result.buy_count)

    def test_rsi_cooldown_spacing(self, series_factory):
        """Consecutive RSI buys are at least the cooldown apart."""
        series = series_factory("SAW", _sawtooth())
        result = RSIStrategy().simulate(series, 1000.0, 2, series.points[-1].date)

        assert isinstance(result, BacktestResult)
        index = {p.date: i for i, p in enumerate(result.trajectory)}
        buys = [index[s.date] for s in result.buy_signals]
        assert all(b - a >= 5 for a, b in zip(buys, buys[1:]))

    def test_history_shorter_than_period_is_absent(self, series_factory):
        """A series shorter than the EMA period cannot be simulated."""
        series = series_factory("SHORT", [100.0 + i for i in range(150)])
        assert EMATouchStrategy(period=200).simulate(series, 1000.0, 1, series.points[-1].date) is None

    def test_no_history_before_window_is_absent(self, wavy_series):
        """The window must be preceded by at least one prefetched point."""
        as_of = wavy_series.points[-1].date
        for strategy in (EMATouchStrategy(period=50), EMACrossoverStrategy(), RSIStrategy(), MACDStrategy()):
            assert strategy.simulate(wavy_series, 1000.0, 10, as_of) is None

    def test_empty_series_is_absent(self):
        """Empty data is absence, never an exception."""
        empty = PriceSeries.empty("NONE")
        for strategy in build_strategies().values():
            assert strategy.simulate(empty, 1000.0, 1, date(2024, 1, 1)) is None


class TestSignalRules:
    """Test trigger rules against hand-built indicator lines."""

    def test_ema_touch_from_above(self):
        """A close moving from above the EMA to at or below it triggers."""
        prices = [10.0, 9.0, 11.0, 9.5]
        ema = [9.5, 9.5, 9.5, 9.5]
        indices = list(EMATouchStrategy(period=2).signal_indices((prices, ema), 1, 4))
        assert indices == [1, 3]

    def test_golden_cross(self):
        """Short EMA moving from at or below to above the long EMA triggers."""
        short = [None, 1.0, 2.0, 3.0, 1.0, 3.0]
        long = [None, 2.0, 2.0, 2.0, 2.0, 2.0]
        indices = list(EMACrossoverStrategy().signal_indices((short, long), 1, 6))
        assert indices == [3, 5]

    def test_rsi_cooldown_blocks_following_days(self):
        """After a signal the next four days are not evaluated."""
        rsi = [None, 40.0, 20.0, 40.0, 20.0, 40.0, 20.0, 40.0, 20.0, 40.0, 20.0]

        with_cooldown = list(RSIStrategy(cooldown_days=5).signal_indices((rsi,), 1, len(rsi)))
        without_cooldown = list(RSIStrategy(cooldown_days=0).signal_indices((rsi,), 1, len(rsi)))

        assert with_cooldown == [2, 8]
        assert without_cooldown == [2, 4, 6, 8, 10]

    def test_macd_bullish_cross(self):
        """MACD crossing above its signal line triggers."""
        macd = [None, -1.0, 0.5, 0.2, 0.4]
        signal = [None, 0.0, 0.0, 0.3, 0.3]
        indices = list(MACDStrategy().signal_indices((macd, signal), 1, 5))
        assert indices == [2, 4]


class TestResultInvariants:
    """Test properties every normal result satisfies."""

    def test_profit_identity_and_invested_monotone(self, wavy_series):
        """profit = final - invested; invested never decreases; one point per window day."""
        as_of = wavy_series.points[-1].date
        window = slice_window(wavy_series, 2, as_of)
        checked = 0

        for strategy in build_strategies().values():
            result = strategy.simulate(wavy_series, 1000.0, 2, as_of)
            if not isinstance(result, BacktestResult):
                continue
            checked += 1

            assert result.profit == pytest.approx(result.final_value - result.total_invested)
            invested = [p.invested for p in result.trajectory]
            assert all(b >= a for a, b in zip(invested, invested[1:]))
            assert len(result.trajectory) == len(window)
            assert result.trajectory[0].date == window.points[0].date
            assert result.max_drawdown <= 0.0

        assert checked >= 3

    def test_prefetch_range_precedes_window(self, wavy_series):
        """Prefetched history ends right before the first window day."""
        as_of = wavy_series.points[-1].date
        prefetched = prefetch_range(wavy_series, 2, as_of, 300)
        window = slice_window(wavy_series, 2, as_of)

        assert prefetched.window_start >= 1
        assert prefetched.series.points[prefetched.window_start] == window.points[0]
        assert prefetched.window_length == len(window)


class TestIndicatorOverlay:
    """Test the indicator lines attached to signal results."""

    OVERLAY_KEYS = {
        "ema50": {"ema"},
        "ema100": {"ema"},
        "ema200": {"ema"},
        "emaCrossover": {"ema_short", "ema_long"},
        "rsi": {"rsi"},
        "macd": {"macd", "signal"},
    }

    def test_overlay_restricted_to_window(self, wavy_series):
        """Overlay days are window days with every line defined."""
        as_of = wavy_series.points[-1].date
        window = slice_window(wavy_series, 2, as_of)
        strategy = EMATouchStrategy(period=50)
        result = strategy.simulate(wavy_series, 1000.0, 2, as_of)

        assert isinstance(result, BacktestResult)
        assert 0 < len(result.overlay) <= len(result.trajectory)
        assert result.overlay[0].date >= window.points[0].date
        assert result.overlay[-1].date == as_of
        assert {p.date for p in result.overlay} <= {p.date for p in result.trajectory}

        prefetched = prefetch_range(wavy_series, 2, as_of, strategy.prefetch_days)
        ema = calculate_ema(prefetched.series.prices, 50)
        assert result.overlay[-1].lines["ema"] == pytest.approx(ema[-1])
        assert result.overlay[-1].price == pytest.approx(wavy_series.last_price)

    def test_overlay_lines_named_per_strategy(self, wavy_series, series_factory):
        """Each signal strategy draws its own indicator lines."""
        checked = 0
        for series in (wavy_series, series_factory("SAW", _sawtooth())):
            as_of = series.points[-1].date
            for key, strategy in build_strategies().items():
                if key not in self.OVERLAY_KEYS:
                    continue
                result = strategy.simulate(series, 1000.0, 2, as_of)
                if not isinstance(result, BacktestResult):
                    continue
                checked += 1
                assert result.overlay
                assert all(set(p.lines) == self.OVERLAY_KEYS[key] for p in result.overlay)

        assert checked >= 2

    def test_periodic_results_have_no_overlay(self, wavy_series):
        """DCA and lump sum carry no indicator lines."""
        as_of = wavy_series.points[-1].date
        for strategy in (DCAStrategy(), LumpSumStrategy()):
            assert strategy.simulate(wavy_series, 1000.0, 2, as_of).overlay == ()

    def test_undefined_days_skipped(self, series_factory):
        """Days before every line is warm are left out."""
        series = series_factory("S", [10.0, 11.0, 12.0, 13.0])
        lines = {"fast": [None, 1.0, 2.0, 3.0], "slow": [None, None, 5.0, 6.0]}

        overlay = build_overlay(series.points, lines, 1)

        assert [p.date for p in overlay] == [series.points[2].date, series.points[3].date]
        assert overlay[0].lines == {"fast": 2.0, "slow": 5.0}
        assert overlay[1].price == 13.0


class TestRegistry:
    """Test the strategy catalog."""

    def test_catalog_keys_in_display_order(self):
        """All eight variants, keyed by identifier."""
        assert list(build_strategies()) == [
            "dca", "lump", "ema50", "ema100", "ema200", "emaCrossover", "rsi", "macd",
        ]

    def test_default_amounts(self):
        """Catalog defaults match the documented amounts."""
        strategies = build_strategies()
        assert strategies["dca"].default_amount == 500.0
        assert strategies["lump"].default_amount == 10000.0
        assert strategies["ema200"].default_amount == 1000.0
        assert strategies["emaCrossover"].default_amount == 5000.0

    def test_get_strategy(self):
        """Lookup by key, None for unknown keys."""
        assert get_strategy("macd").name == "MACD Divergence"
        assert get_strategy("unknown") is None
