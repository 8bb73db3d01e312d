"""Immutable run descriptions passed into the engine entry points."""

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Holding:
    """One portfolio position: symbol and its relative allocation."""
    symbol: str
    allocation: float


@dataclass(frozen=True)
class RunConfig:
    """
    A single backtest run.

    Allocations are relative: each holding receives
    ``amount * allocation / sum(allocations)``.
    """
    holdings: tuple[Holding, ...]
    strategy: str
    amount: float
    years: int
    as_of: date

    @property
    def total_allocation(self) -> float:
        return sum(h.allocation for h in self.holdings)

    def amount_for(self, holding: Holding) -> float:
        """Dollar amount routed to one holding."""
        total = self.total_allocation
        if total <= 0:
            return 0.0
        return self.amount * (holding.allocation / total)


@dataclass(frozen=True)
class OptimizationRequest:
    """An allocation search run."""
    target_return: float                    # Annualized, percent
    years: int
    complexity: int                         # Assets per combination: 1, 2 or 3
    as_of: date
    symbols: Optional[tuple[str, ...]] = None   # None searches every loaded symbol
