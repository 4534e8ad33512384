"""
Opportunity Model - Funding rate arbitrage opportunity
=====================================================

An opportunity pairs two exchanges listing the same perpetual contract:
go long where funding is cheaper, go short where it is more expensive,
and collect the rate differential at each settlement.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ..utils.time_utils import get_utc_datetime


ArbitrageRecord = Dict[str, Any]


@dataclass(frozen=True)
class ArbitrageOpportunity:
    """
    Opportunity detected between two exchanges for one symbol

    All rate fields are percentages (fraction x 100). ``long_rate`` is never
    greater than ``short_rate``.
    """
    symbol: str
    long_exchange: str
    short_exchange: str
    long_rate: float
    short_rate: float
    spread_rate: float
    annualized_return: float
    long_price: float
    short_price: float
    price_diff: float
    price_spread_percent: float
    confidence: float
    detected_at: datetime = field(default_factory=get_utc_datetime)

    @property
    def pair_name(self) -> str:
        """Exchange pair identifier, long leg first"""
        return f"{self.long_exchange}_{self.short_exchange}"

    def to_record(self) -> ArbitrageRecord:
        """Convert to the flat record shared by storage and the realtime path"""
        return {
            'symbol': self.symbol,
            'long_exchange': self.long_exchange,
            'short_exchange': self.short_exchange,
            'long_rate': self.long_rate,
            'short_rate': self.short_rate,
            'spread_rate': self.spread_rate,
            'annualized_return': self.annualized_return,
            'long_price': self.long_price,
            'short_price': self.short_price,
            'price_diff': self.price_diff,
            'price_spread_percent': self.price_spread_percent,
            'confidence': self.confidence,
            'detected_at': self.detected_at,
        }

    def __str__(self) -> str:
        return (f"{self.symbol}: long {self.long_exchange} ({self.long_rate:.4f}%) / "
                f"short {self.short_exchange} ({self.short_rate:.4f}%) | "
                f"spread {self.spread_rate:.4f}% | annual {self.annualized_return:.2f}% | "
                f"confidence {self.confidence:.2f}")


@dataclass(frozen=True)
class OpportunityFilter:
    """Filter and pagination applied to opportunity queries"""
    symbol: Optional[str] = None
    min_spread: Optional[float] = None
    limit: int = 50
    offset: int = 0

    def __post_init__(self):
        if self.limit < 0:
            raise ValueError(f"limit must be >= 0, got {self.limit}")
        if self.offset < 0:
            raise ValueError(f"offset must be >= 0, got {self.offset}")

    def paginate(self, items: list) -> list:
        """Apply offset/limit slicing"""
        return items[self.offset:self.offset + self.limit]


# Realtime queries take the same filter as storage queries
RealtimeOpportunityFilter = OpportunityFilter
