"""
Pytest configuration and shared fixtures.

Provides fake connectors, storage, clocks and ccxt clients so the detection
pipeline runs without network access or real sleeps.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

import pytest

from funding_monitor.connectors.base_connector import BaseConnector, ConnectionError
from funding_monitor.models.config import MonitorConfig
from funding_monitor.models.funding_rate import FundingRate
from funding_monitor.storage.base_storage import StorageError
from funding_monitor.storage.memory_storage import InMemoryStorage


DETECTED_AT = datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)


def make_rate(exchange: str, symbol: str = "BTCUSDT", funding_rate: float = 0.0001,
              mark_price: Optional[float] = 50000.0, index_price: Optional[float] = None,
              next_funding_time: Optional[int] = 1_704_096_000_000,
              funding_interval_hours: Optional[int] = 8) -> FundingRate:
    return FundingRate(
        exchange=exchange,
        symbol=symbol,
        funding_rate=funding_rate,
        next_funding_time=next_funding_time,
        mark_price=mark_price,
        index_price=index_price,
        funding_interval_hours=funding_interval_hours,
        observed_at=1_704_096_000_000,
    )


class FakeConnector(BaseConnector):
    """Returns a fixed rate list, or raises the configured error"""

    def __init__(self, exchange_name: str, rates: Sequence[FundingRate] = (),
                 error: Optional[Exception] = None, log: Optional[List[str]] = None):
        super().__init__(exchange_name)
        self.rates = list(rates)
        self.error = error
        self.calls = 0
        self.closed = False
        self._log = log

    async def get_all_funding_rates(self) -> List[FundingRate]:
        self.calls += 1
        if self._log is not None:
            self._log.append(f"fetch:{self.exchange_name}")
        if self.error is not None:
            self._record_failure(self.error)
            raise self.error
        self._record_success(len(self.rates))
        return list(self.rates)

    async def close(self):
        self.closed = True
        await super().close()


class FakeClock:
    """Manually advanced monotonic clock (ms)"""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float):
        self.now += ms


class RecordingSleep:
    """Async sleep stand-in that records durations instead of waiting"""

    def __init__(self, log: Optional[List[str]] = None):
        self.durations: List[float] = []
        self._log = log

    async def __call__(self, seconds: float):
        self.durations.append(seconds)
        if self._log is not None:
            self._log.append(f"sleep:{seconds}")


class FailingStorage(InMemoryStorage):
    """In-memory storage whose batch saves can be made to fail"""

    def __init__(self, fail_opportunities: bool = False, fail_rates: bool = False):
        super().__init__()
        self.fail_opportunities = fail_opportunities
        self.fail_rates = fail_rates

    async def save_arbitrage_opportunities_batch(self, records):
        if self.fail_opportunities:
            raise StorageError("database unavailable")
        return await super().save_arbitrage_opportunities_batch(records)

    async def save_funding_rates_batch(self, records):
        if self.fail_rates:
            raise StorageError("database unavailable")
        return await super().save_funding_rates_batch(records)


class FakeCcxtExchange:
    """Minimal ccxt async client double"""

    def __init__(self, payload=None, error: Optional[Exception] = None):
        self.payload = payload if payload is not None else {}
        self.error = error
        self.markets_loaded = False
        self.closed = False

    async def load_markets(self):
        self.markets_loaded = True
        return {}

    async def fetch_funding_rates(self, symbols=None, params=None):
        if self.error is not None:
            raise self.error
        return self.payload

    async def close(self):
        self.closed = True


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def config() -> MonitorConfig:
    """Default configuration with no pacing delay"""
    return MonitorConfig(fetcher={'exchange_request_delay_ms': 0})


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def profitable_connectors() -> Dict[str, FakeConnector]:
    """Three exchanges sharing BTCUSDT and ETHUSDT; BTCUSDT has a 0.59% spread"""
    return {
        "binance": FakeConnector("binance", [
            make_rate("binance", "BTCUSDT", 0.0001, mark_price=50000.0),
            make_rate("binance", "ETHUSDT", 0.0001, mark_price=3000.0),
            make_rate("binance", "SOLUSDT", 0.0100, mark_price=100.0),
        ]),
        "okx": FakeConnector("okx", [
            make_rate("okx", "BTCUSDT", 0.0060, mark_price=50010.0),
            make_rate("okx", "ETHUSDT", 0.0001, mark_price=3000.0),
        ]),
        "bybit": FakeConnector("bybit", [
            make_rate("bybit", "BTCUSDT", 0.0002, mark_price=50005.0),
            make_rate("bybit", "ETHUSDT", 0.0002, mark_price=3000.5),
            make_rate("bybit", "SOLUSDT", 0.0001, mark_price=100.0),
        ]),
    }


@pytest.fixture
def unreachable_connector() -> FakeConnector:
    return FakeConnector("okx", error=ConnectionError("okx network error: timeout"))
