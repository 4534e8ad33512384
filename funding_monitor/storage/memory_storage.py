"""
Bounded in-memory storage backend.
"""

import asyncio
import logging
from collections import deque
from typing import Deque, List, Sequence

from .base_storage import FundingRateRecord, Storage, StorageError
from funding_monitor.models.opportunity import ArbitrageRecord, OpportunityFilter


FUNDING_RATE_FIELDS = ('exchange', 'symbol', 'funding_rate')
OPPORTUNITY_FIELDS = ('symbol', 'long_exchange', 'short_exchange', 'spread_rate', 'detected_at')


class InMemoryStorage(Storage):
    """
    Keeps the most recent records in memory, newest last

    Args:
        max_records: Records kept per table before the oldest are dropped
    """

    def __init__(self, max_records: int = 10_000):
        self.logger = logging.getLogger(self.__class__.__name__)
        self._funding_rates: Deque[FundingRateRecord] = deque(maxlen=max_records)
        self._opportunities: Deque[ArbitrageRecord] = deque(maxlen=max_records)
        self._lock = asyncio.Lock()
        self._next_id = 1

    @property
    def funding_rate_count(self) -> int:
        return len(self._funding_rates)

    @property
    def opportunity_count(self) -> int:
        return len(self._opportunities)

    @staticmethod
    def _validate(records: Sequence[dict], required: Sequence[str], table: str):
        for index, record in enumerate(records):
            missing = [name for name in required if name not in record]
            if missing:
                raise StorageError(f"{table} record {index} missing fields: {', '.join(missing)}")

    async def save_funding_rates_batch(self, records: Sequence[FundingRateRecord]) -> int:
        self._validate(records, FUNDING_RATE_FIELDS, "funding_rates")
        async with self._lock:
            for record in records:
                self._funding_rates.append(self._with_id(record))
        return len(records)

    async def save_arbitrage_opportunities_batch(self, records: Sequence[ArbitrageRecord]) -> int:
        self._validate(records, OPPORTUNITY_FIELDS, "arbitrage_opportunities")
        async with self._lock:
            for record in records:
                self._opportunities.append(self._with_id(record))
        return len(records)

    def _with_id(self, record: dict) -> dict:
        stored = dict(record)
        stored['id'] = self._next_id
        self._next_id += 1
        return stored

    async def query_opportunities(self, filter: OpportunityFilter) -> List[ArbitrageRecord]:
        """Newest first, filtered by symbol and minimum spread"""
        matches = []
        for record in reversed(self._opportunities):
            if filter.symbol is not None and record['symbol'] != filter.symbol:
                continue
            if filter.min_spread is not None and record['spread_rate'] < filter.min_spread:
                continue
            matches.append(dict(record))
        return filter.paginate(matches)

    async def get_latest_opportunities(self, limit: int = 50) -> List[ArbitrageRecord]:
        return await self.query_opportunities(OpportunityFilter(limit=limit))

    async def get_funding_rates(self, symbol: str) -> List[FundingRateRecord]:
        """Stored rates of one symbol, newest first"""
        return [dict(record) for record in reversed(self._funding_rates) if record['symbol'] == symbol]

    async def close(self):
        self.logger.debug(f"Closing with {self.opportunity_count} opportunities, "
                          f"{self.funding_rate_count} funding rates")
