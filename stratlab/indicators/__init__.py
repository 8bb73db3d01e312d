"""Technical indicators computed over daily closes"""

from .ema import calculate_ema
from .macd import MACDResult, calculate_macd
from .rsi import calculate_rsi

__all__ = [
    "MACDResult",
    "calculate_ema",
    "calculate_macd",
    "calculate_rsi",
]
