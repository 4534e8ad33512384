"""
Exchange connectors for funding rate monitoring.
Attribution: Based on Hummingbot connector architecture (Apache 2.0)
"""

from .base_connector import (
    BaseConnector,
    ConnectorStatus,
    ExchangeError,
    ConnectionError,
    RateLimitError,
    InvalidResponseError
)
from .ccxt_connector import CcxtConnector
from .binance_connector import BinanceConnector
from .okx_connector import OKXConnector
from .bybit_connector import BybitConnector
from .connector_manager import ConnectorManager, CONNECTOR_CLASSES, create_connectors

__all__ = [
    "BaseConnector", "ConnectorStatus",
    "ExchangeError", "ConnectionError", "RateLimitError", "InvalidResponseError",
    "CcxtConnector", "BinanceConnector", "OKXConnector", "BybitConnector",
    "ConnectorManager", "CONNECTOR_CLASSES", "create_connectors"
]
