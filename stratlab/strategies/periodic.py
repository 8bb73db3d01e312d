"""Calendar-driven strategies: monthly dollar-cost averaging and lump sum."""

from dataclasses import dataclass
from datetime import date

from ..data.models import PriceSeries
from ..models.results import BacktestOutcome
from .base import PositionLedger, Strategy, StrategyKind, slice_window


@dataclass(frozen=True)
class DCAStrategy(Strategy):
    """Buy a fixed amount on the first trading day of every calendar month."""

    default_amount: float = 500.0
    description: str = "Buy a fixed amount every month"

    @property
    def key(self) -> str:
        return StrategyKind.DCA.value

    @property
    def name(self) -> str:
        return "Monthly DCA"

    def simulate(self, series: PriceSeries, amount: float, years: int, as_of: date) -> BacktestOutcome:
        window = slice_window(series, years, as_of) if series is not None else None
        if window is None:
            return None

        ledger = PositionLedger()
        last_month = None
        for point in window.points:
            month = (point.date.year, point.date.month)
            if month != last_month:
                ledger.buy(point, amount)
                last_month = month
            ledger.mark(point)

        return ledger.to_result(self.key, window.last_price)


@dataclass(frozen=True)
class LumpSumStrategy(Strategy):
    """Invest the whole amount on the first day of the window."""

    default_amount: float = 10000.0
    description: str = "Invest everything at once"

    @property
    def key(self) -> str:
        return StrategyKind.LUMP.value

    @property
    def name(self) -> str:
        return "Lump Sum"

    def simulate(self, series: PriceSeries, amount: float, years: int, as_of: date) -> BacktestOutcome:
        window = slice_window(series, years, as_of) if series is not None else None
        if window is None:
            return None

        entry = window.points[0]
        ledger = PositionLedger()
        ledger.buy(entry, amount)
        for point in window.points:
            ledger.mark(point)

        return ledger.to_result(self.key, window.last_price, avg_cost=entry.price)
