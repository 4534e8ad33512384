"""
Funding rate data model.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..utils.time_utils import get_utc_timestamp_ms


@dataclass(frozen=True)
class FundingRate:
    """Funding rate snapshot of one perpetual contract on one exchange"""
    exchange: str
    symbol: str
    funding_rate: float  # Fraction of notional, 0.0001 = 0.01%
    next_funding_time: Optional[int] = None  # Epoch milliseconds
    mark_price: Optional[float] = None
    index_price: Optional[float] = None
    funding_interval_hours: Optional[int] = None  # Informational only
    observed_at: int = field(default_factory=get_utc_timestamp_ms)

    @property
    def funding_rate_percent(self) -> float:
        """Funding rate expressed as a percentage"""
        return self.funding_rate * 100

    def to_record(self) -> Dict[str, Any]:
        """Row stored by the persistence layer"""
        return {
            'exchange': self.exchange,
            'symbol': self.symbol,
            'funding_rate': self.funding_rate,
            'funding_time': self.next_funding_time,
            'mark_price': self.mark_price,
            'index_price': self.index_price,
            'recorded_at': self.observed_at,
        }
