# funding_monitor/connectors/bybit_connector.py
"""
Bybit linear perpetuals connector.
Attribution: Based on Hummingbot's connector patterns (Apache 2.0)
"""

from typing import Any, Dict, Optional

from .ccxt_connector import CcxtConnector, parse_interval_hours, safe_int
from funding_monitor.models.config import ExchangeConfig


class BybitConnector(CcxtConnector):
    """
    Bybit linear (USDT) perpetuals.

    The tickers payload reports the funding interval per instrument
    (``fundingIntervalHour``), which is kept on the rate for reference.
    """

    ccxt_id = "bybit"
    default_options = {
        'defaultType': 'swap',
        'defaultSubType': 'linear',
    }

    def __init__(self, config: Optional[ExchangeConfig] = None, exchange=None):
        super().__init__("bybit", config, exchange)

    def _parse_interval(self, item: Dict[str, Any]) -> Optional[int]:
        info = item.get('info') or {}
        interval = safe_int(info.get('fundingIntervalHour'))
        if interval:
            return interval
        return parse_interval_hours(item.get('interval')) or 8
