"""
CCXT-backed funding rate connector.
Shared parsing of ccxt unified funding rate structures for USDT perpetuals.
"""

import math
from typing import Any, Dict, List, Optional

import ccxt.async_support as ccxt
from ccxt.base.errors import BaseError, NetworkError, RateLimitExceeded

from .base_connector import (
    BaseConnector, ExchangeError, ConnectionError, RateLimitError, InvalidResponseError
)
from funding_monitor.models.config import ExchangeConfig
from funding_monitor.models.funding_rate import FundingRate
from funding_monitor.utils.time_utils import get_utc_timestamp_ms


def safe_float(value: Any) -> Optional[float]:
    """Convert to a finite float, None otherwise"""
    if value is None or value == "":
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


def safe_int(value: Any) -> Optional[int]:
    """Convert to int, None otherwise"""
    result = safe_float(value)
    return int(result) if result is not None else None


def normalize_symbol(ccxt_symbol: str) -> str:
    """Convert a ccxt swap symbol to the exchange-neutral form (BTC/USDT:USDT -> BTCUSDT)"""
    pair = ccxt_symbol.split(':')[0]
    return pair.replace('/', '').replace('-', '').upper()


def parse_interval_hours(interval: Any) -> Optional[int]:
    """Parse a ccxt funding interval such as '8h'"""
    if not interval:
        return None
    text = str(interval).strip().lower()
    if text.endswith('h'):
        text = text[:-1]
    return safe_int(text)


class CcxtConnector(BaseConnector):
    """
    Funding rate connector on top of ccxt.async_support.

    Subclasses set ``ccxt_id`` and ``default_options``; the exchange client
    can be injected for testing.
    """

    ccxt_id: str = ""
    default_options: Dict[str, Any] = {}
    settle_currency = "USDT"

    def __init__(self, exchange_name: str, config: Optional[ExchangeConfig] = None, exchange=None):
        super().__init__(exchange_name)
        self.config = config or ExchangeConfig(name=exchange_name)
        self._exchange = exchange

    @property
    def exchange(self):
        """CCXT client, created on first use"""
        if self._exchange is None:
            self._exchange = self._create_exchange()
        return self._exchange

    def _create_exchange(self):
        exchange_class = getattr(ccxt, self.ccxt_id)
        exchange_config = {
            'enableRateLimit': True,
            'timeout': self.config.timeout_ms,
            'options': dict(self.default_options),
        }
        for key, value in self.config.ccxt_config.items():
            if key == 'options' and isinstance(value, dict):
                exchange_config['options'].update(value)
            else:
                exchange_config[key] = value
        return exchange_class(exchange_config)

    async def close(self):
        """Close the ccxt HTTP session"""
        if self._exchange is not None:
            await self._exchange.close()
            self._exchange = None
        await super().close()

    # ====== Funding rates ======

    async def get_all_funding_rates(self) -> List[FundingRate]:
        """Fetch and parse every USDT perpetual funding rate"""
        try:
            raw_rates = await self._fetch_raw_rates()
        except RateLimitExceeded as e:
            self._record_failure(e)
            raise RateLimitError(f"{self.exchange_name} rate limit exceeded: {e}") from e
        except NetworkError as e:
            self._record_failure(e)
            raise ConnectionError(f"{self.exchange_name} network error: {e}") from e
        except BaseError as e:
            self._record_failure(e)
            raise ExchangeError(f"{self.exchange_name} error: {e}") from e

        if not isinstance(raw_rates, dict):
            error = InvalidResponseError(
                f"{self.exchange_name} returned {type(raw_rates).__name__} instead of a mapping"
            )
            self._record_failure(error)
            raise error

        observed_at = get_utc_timestamp_ms()
        rates = []
        for ccxt_symbol, item in raw_rates.items():
            if not isinstance(item, dict) or not self._is_supported_symbol(ccxt_symbol):
                continue
            rate = self._parse_rate(ccxt_symbol, item, observed_at)
            if rate is not None:
                rates.append(rate)

        self._record_success(len(rates))
        return rates

    async def _fetch_raw_rates(self) -> Dict[str, Dict[str, Any]]:
        return await self.exchange.fetch_funding_rates()

    def _is_supported_symbol(self, ccxt_symbol: str) -> bool:
        """Linear USDT-settled perpetuals only"""
        return ccxt_symbol.endswith(f"/{self.settle_currency}:{self.settle_currency}")

    def _parse_rate(self, ccxt_symbol: str, item: Dict[str, Any], observed_at: int) -> Optional[FundingRate]:
        funding_rate = safe_float(item.get('fundingRate'))
        if funding_rate is None:
            return None

        next_funding = safe_int(item.get('nextFundingTimestamp'))
        if next_funding is None:
            next_funding = safe_int(item.get('fundingTimestamp'))

        return FundingRate(
            exchange=self.exchange_name,
            symbol=normalize_symbol(ccxt_symbol),
            funding_rate=funding_rate,
            next_funding_time=next_funding,
            mark_price=safe_float(item.get('markPrice')),
            index_price=safe_float(item.get('indexPrice')),
            funding_interval_hours=self._parse_interval(item),
            observed_at=observed_at,
        )

    def _parse_interval(self, item: Dict[str, Any]) -> Optional[int]:
        return parse_interval_hours(item.get('interval'))
