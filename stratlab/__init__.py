"""
Stratlab - Strategy Backtesting and Allocation Search

Replays investment strategies (periodic buys, lump sum and indicator-driven
entries) against daily price history and searches allocation mixes across
assets that best hit a target annualized return under a risk penalty.
"""

__version__ = "0.1.0"
__author__ = "Stratlab Team"
