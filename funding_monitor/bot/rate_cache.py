"""
Rate Cache - Time-boxed snapshot of the last multi-exchange fetch
================================================================

The cache holds one immutable RateSnapshot. Writers build a new snapshot and
swap the reference; readers take the reference once and never observe a
partially written triple.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from ..models.funding_rate import FundingRate
from ..utils.time_utils import get_utc_timestamp_ms, monotonic_ms


RatesTuple = Tuple[Tuple[FundingRate, ...], ...]


@dataclass(frozen=True)
class RateSnapshot:
    """Rates of every exchange, in fetch order, with an expiry"""
    rates: RatesTuple
    fetched_at: int      # Epoch ms, for display
    expires_at: float    # Monotonic ms

    def is_fresh(self, now_ms: float) -> bool:
        return now_ms < self.expires_at

    @property
    def total_rates(self) -> int:
        return sum(len(exchange_rates) for exchange_rates in self.rates)


class RateCache:
    """
    Swap-on-write cache of the latest RateSnapshot

    Args:
        ttl_ms: Lifetime of a snapshot
        clock: Monotonic clock in milliseconds (injectable for tests)
    """

    def __init__(self, ttl_ms: int, clock: Callable[[], float] = monotonic_ms):
        self.ttl_ms = ttl_ms
        self._clock = clock
        self._snapshot: Optional[RateSnapshot] = None

    @property
    def snapshot(self) -> Optional[RateSnapshot]:
        """Latest snapshot, fresh or not"""
        return self._snapshot

    def get(self) -> Optional[RateSnapshot]:
        """Latest snapshot if it has not expired"""
        snapshot = self._snapshot
        if snapshot is not None and snapshot.is_fresh(self._clock()):
            return snapshot
        return None

    def put(self, rates: RatesTuple) -> RateSnapshot:
        """Replace the cached snapshot"""
        snapshot = RateSnapshot(
            rates=tuple(tuple(exchange_rates) for exchange_rates in rates),
            fetched_at=get_utc_timestamp_ms(),
            expires_at=self._clock() + self.ttl_ms,
        )
        self._snapshot = snapshot
        return snapshot

    def clear(self):
        """Drop the snapshot so the next read refreshes"""
        self._snapshot = None

    def __repr__(self) -> str:
        state = "empty" if self._snapshot is None else ("fresh" if self.get() else "stale")
        return f"RateCache(ttl_ms={self.ttl_ms}, state={state})"
