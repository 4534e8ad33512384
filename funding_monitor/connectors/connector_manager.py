"""
Connector manager - builds and owns the exchange connectors.
"""

import logging
from typing import Dict, List, Optional, Type

from .base_connector import BaseConnector
from .binance_connector import BinanceConnector
from .bybit_connector import BybitConnector
from .okx_connector import OKXConnector
from funding_monitor.models.config import MonitorConfig


CONNECTOR_CLASSES: Dict[str, Type[BaseConnector]] = {
    "binance": BinanceConnector,
    "okx": OKXConnector,
    "bybit": BybitConnector,
}


class ConnectorManager:
    """
    Holds the enabled connectors in fixed fetch order
    """

    def __init__(self, connectors: Optional[List[BaseConnector]] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self._connectors: List[BaseConnector] = list(connectors or [])

    @classmethod
    def from_config(cls, config: MonitorConfig) -> "ConnectorManager":
        """Create one connector per enabled exchange"""
        manager = cls()
        for exchange_name in config.get_enabled_exchanges():
            connector_class = CONNECTOR_CLASSES[exchange_name]
            manager.add_connector(connector_class(config.get_exchange_config(exchange_name)))
        return manager

    def add_connector(self, connector: BaseConnector):
        if self.get_connector(connector.exchange_name) is not None:
            raise ValueError(f"Connector for {connector.exchange_name} already registered")
        self._connectors.append(connector)
        self.logger.info(f"Added connector: {connector.exchange_name}")

    def get_connector(self, exchange: str) -> Optional[BaseConnector]:
        for connector in self._connectors:
            if connector.exchange_name == exchange.lower():
                return connector
        return None

    @property
    def connectors(self) -> List[BaseConnector]:
        return list(self._connectors)

    @property
    def exchanges(self) -> List[str]:
        return [connector.exchange_name for connector in self._connectors]

    def health(self) -> Dict[str, bool]:
        """Connector health after their last fetch"""
        return {connector.exchange_name: connector.is_healthy for connector in self._connectors}

    async def close_all(self):
        """Close every connector, logging failures"""
        for connector in self._connectors:
            try:
                await connector.close()
            except Exception as e:
                self.logger.error(f"Error closing {connector.exchange_name}: {e}")


def create_connectors(config: MonitorConfig) -> List[BaseConnector]:
    """Enabled connectors in fetch order (binance, okx, bybit)"""
    return ConnectorManager.from_config(config).connectors
