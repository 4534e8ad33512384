# funding_monitor/connectors/okx_connector.py
"""
OKX swap connector.
OKX funding payloads carry no mark or index price, so OKX legs fall back to a
zero price in the price divergence check.
"""

from typing import Any, Dict, Optional

from .ccxt_connector import CcxtConnector
from funding_monitor.models.config import ExchangeConfig


class OKXConnector(CcxtConnector):
    """OKX USDT-margined perpetual swaps"""

    ccxt_id = "okx"
    default_options = {
        'defaultType': 'swap',
    }

    def __init__(self, config: Optional[ExchangeConfig] = None, exchange=None):
        super().__init__("okx", config, exchange)

    async def _fetch_raw_rates(self) -> Dict[str, Dict[str, Any]]:
        await self.exchange.load_markets()
        return await self.exchange.fetch_funding_rates()
