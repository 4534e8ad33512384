# funding_monitor/connectors/binance_connector.py
"""
Binance USDⓈ-M futures connector.
One premiumIndex call returns every perpetual with mark and index prices.
"""

from typing import Optional

from .ccxt_connector import CcxtConnector
from funding_monitor.models.config import ExchangeConfig


class BinanceConnector(CcxtConnector):
    """Binance USDⓈ-M perpetual futures"""

    ccxt_id = "binanceusdm"
    default_options = {
        'defaultType': 'future',
        'adjustForTimeDifference': True,
    }

    def __init__(self, config: Optional[ExchangeConfig] = None, exchange=None):
        super().__init__("binance", config, exchange)
