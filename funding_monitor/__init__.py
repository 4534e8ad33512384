"""
Funding Rate Arbitrage Monitor
"""

__version__ = "1.0.0"
__author__ = "Funding Bot Team"
__description__ = "Funding rate arbitrage detection across Binance, OKX and Bybit"

from .bot.arbitrage_engine import ArbitrageEngine
from .models.config import MonitorConfig

__all__ = [
    'ArbitrageEngine',
    'MonitorConfig'
]
