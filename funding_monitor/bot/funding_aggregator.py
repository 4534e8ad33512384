"""
Funding Rate Aggregator - Collects funding rates from every exchange
===================================================================

Fetches every exchange's full funding rate list in a fixed order, with a
pause between calls to stay under per-exchange rate limits. One exchange
failing yields an empty list for that exchange and never blocks the others.
Results are served from a RateCache until it expires.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from .rate_cache import RateCache, RatesTuple
from ..connectors.base_connector import BaseConnector
from ..models.config import FetcherConfig
from ..models.funding_rate import FundingRate


@dataclass(frozen=True)
class ExchangeFetchResult:
    """Outcome of one exchange call"""
    exchange: str
    rates: Tuple[FundingRate, ...] = ()
    error: Optional[Exception] = None
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


class FundingRateAggregator:
    """
    Aggregator of funding rates across exchanges

    Responsibilities:
    - Call each connector sequentially with pacing
    - Isolate per-exchange failures
    - Populate and serve the rate cache
    """

    def __init__(self,
                 connectors: Sequence[BaseConnector],
                 cache: Optional[RateCache] = None,
                 request_delay_ms: int = 200,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        """
        Args:
            connectors: Rate sources, in fetch order
            cache: Shared rate cache (a 5 minute cache is created if omitted)
            request_delay_ms: Pause between two consecutive exchange calls
            sleep: Async sleep primitive (injectable for tests)
        """
        self.connectors = list(connectors)
        self.cache = cache if cache is not None else RateCache(ttl_ms=300_000)
        self.request_delay_ms = request_delay_ms
        self._sleep = sleep
        self.logger = logging.getLogger(__name__)

        # Metrics
        self.total_refreshes = 0
        self.cache_hits = 0
        self.failed_fetches: Dict[str, int] = {c.exchange_name: 0 for c in self.connectors}
        self.last_results: Tuple[ExchangeFetchResult, ...] = ()

    @classmethod
    def from_config(cls, connectors: Sequence[BaseConnector], config: FetcherConfig) -> "FundingRateAggregator":
        return cls(connectors,
                   cache=RateCache(ttl_ms=config.cache_ttl_ms),
                   request_delay_ms=config.exchange_request_delay_ms)

    @property
    def exchanges(self) -> List[str]:
        return [connector.exchange_name for connector in self.connectors]

    def apply_config(self, config: FetcherConfig):
        """Take new pacing and TTL values into account"""
        self.request_delay_ms = config.exchange_request_delay_ms
        self.cache.ttl_ms = config.cache_ttl_ms

    def clear_cache(self):
        self.cache.clear()

    # =============================================================================
    # DATA COLLECTION
    # =============================================================================

    async def fetch_all(self, skip_cache: bool = False, silent: bool = False) -> RatesTuple:
        """
        Funding rates of every exchange, one tuple per exchange in fetch order

        Args:
            skip_cache: Ignore a fresh cached snapshot and refetch
            silent: Do not log exchange failures

        Returns:
            Tuple of per-exchange rate tuples; a failed exchange contributes ()
        """
        if not skip_cache:
            snapshot = self.cache.get()
            if snapshot is not None:
                self.cache_hits += 1
                return snapshot.rates

        results = await self._fetch_sequentially(silent)

        # Fold each outcome to a plain collection at this boundary
        rates: RatesTuple = tuple(result.rates for result in results)
        snapshot = self.cache.put(rates)
        self.total_refreshes += 1
        return snapshot.rates

    async def _fetch_sequentially(self, silent: bool) -> Tuple[ExchangeFetchResult, ...]:
        results = []
        for index, connector in enumerate(self.connectors):
            if index > 0 and self.request_delay_ms > 0:
                await self._sleep(self.request_delay_ms / 1000)

            result = await self._fetch_exchange(connector)
            if result.ok:
                self.logger.debug(f"Collected {len(result.rates)} rates from {result.exchange} "
                                  f"in {result.duration_ms:.0f}ms")
            else:
                self.failed_fetches[result.exchange] = self.failed_fetches.get(result.exchange, 0) + 1
                if not silent:
                    self.logger.warning(f"✗ {result.exchange} get_all_funding_rates: {result.error}")
            results.append(result)

        self.last_results = tuple(results)
        return self.last_results

    async def _fetch_exchange(self, connector: BaseConnector) -> ExchangeFetchResult:
        start = time.monotonic()
        try:
            rates = await connector.get_all_funding_rates()
        except Exception as e:
            return ExchangeFetchResult(
                exchange=connector.exchange_name,
                error=e,
                duration_ms=(time.monotonic() - start) * 1000
            )

        return ExchangeFetchResult(
            exchange=connector.exchange_name,
            rates=tuple(rates),
            duration_ms=(time.monotonic() - start) * 1000
        )

    # =============================================================================
    # STATISTICS
    # =============================================================================

    def get_stats(self) -> Dict:
        snapshot = self.cache.snapshot
        return {
            'exchanges': self.exchanges,
            'total_refreshes': self.total_refreshes,
            'cache_hits': self.cache_hits,
            'failed_fetches': dict(self.failed_fetches),
            'cached_rates': snapshot.total_rates if snapshot else 0,
            'cache_fresh': self.cache.get() is not None,
            'cache_fetched_at': snapshot.fetched_at if snapshot else None,
        }

    def __repr__(self) -> str:
        return (f"FundingRateAggregator(exchanges={self.exchanges}, "
                f"refreshes={self.total_refreshes}, cache={self.cache!r})")
