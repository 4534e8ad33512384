"""
Storage interface used by the detection engine and the query helper.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence

from funding_monitor.models.opportunity import ArbitrageRecord, OpportunityFilter


FundingRateRecord = Dict[str, Any]


class StorageError(Exception):
    """Persistence failure"""
    pass


class Storage(ABC):
    """
    Persistence backend

    Batch saves are all-or-nothing: either every record is stored and the
    count is returned, or StorageError is raised and nothing is stored.
    """

    @abstractmethod
    async def save_funding_rates_batch(self, records: Sequence[FundingRateRecord]) -> int:
        pass

    @abstractmethod
    async def save_arbitrage_opportunities_batch(self, records: Sequence[ArbitrageRecord]) -> int:
        pass

    @abstractmethod
    async def query_opportunities(self, filter: OpportunityFilter) -> List[ArbitrageRecord]:
        pass

    @abstractmethod
    async def get_latest_opportunities(self, limit: int = 50) -> List[ArbitrageRecord]:
        pass

    async def close(self):
        """Release backend resources"""
        pass
