"""
Utility functions module.

Date Semantics:
- Every backtest is anchored at an explicit as-of date
- Lookback windows subtract calendar years, not elapsed days
- Price dates are UTC calendar days
- Wall-clock time is only used when a caller supplies no as-of date
"""
