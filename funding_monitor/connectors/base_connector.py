"""
Base connector for funding rate sources.
Attribution: Based on Hummingbot's connector architecture (Apache 2.0)
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import List, Optional

from funding_monitor.models.funding_rate import FundingRate


class ExchangeError(Exception):
    """Base error raised by connectors"""
    pass


class ConnectionError(ExchangeError):
    """Network failure or timeout while talking to the exchange"""
    pass


class RateLimitError(ExchangeError):
    """API rate limit reached"""
    pass


class InvalidResponseError(ExchangeError):
    """Payload could not be understood"""
    pass


class ConnectorStatus(Enum):
    """Connector status enumeration"""
    IDLE = "IDLE"
    HEALTHY = "HEALTHY"
    ERROR = "ERROR"
    CLOSED = "CLOSED"


class BaseConnector(ABC):
    """
    Base class for all exchange rate sources.

    A connector returns every current funding rate of its exchange in one call,
    and raises ExchangeError (or a subclass) when it cannot.
    """

    def __init__(self, exchange_name: str):
        self._exchange_name = exchange_name.lower()
        self._status = ConnectorStatus.IDLE

        # Fetch tracking
        self.last_fetch_time: Optional[datetime] = None
        self.last_error: Optional[str] = None
        self.fetch_count = 0
        self.error_count = 0

        self.logger = logging.getLogger(f"{self.__class__.__name__}.{self._exchange_name}")

    @property
    def exchange_name(self) -> str:
        return self._exchange_name

    @property
    def status(self) -> ConnectorStatus:
        return self._status

    @property
    def is_healthy(self) -> bool:
        return self._status in (ConnectorStatus.IDLE, ConnectorStatus.HEALTHY)

    # ====== Abstract Methods (Must be implemented by subclasses) ======

    @abstractmethod
    async def get_all_funding_rates(self) -> List[FundingRate]:
        """Fetch the current funding rate of every listed perpetual"""
        pass

    async def close(self):
        """Release network resources"""
        self._status = ConnectorStatus.CLOSED

    # ====== Status Tracking ======

    def _record_success(self, count: int):
        self.fetch_count += 1
        self.last_fetch_time = datetime.now()
        self.last_error = None
        self._status = ConnectorStatus.HEALTHY
        self.logger.debug(f"Fetched {count} funding rates")

    def _record_failure(self, error: Exception):
        self.fetch_count += 1
        self.error_count += 1
        self.last_error = str(error)
        self._status = ConnectorStatus.ERROR

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(exchange={self._exchange_name}, status={self._status.value})"
