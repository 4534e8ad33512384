"""
Opportunity Analyzer - Pairwise funding rate comparison
======================================================

For one symbol, compares every pair of exchanges reporting it. A pair
qualifies when the funding spread clears the minimum threshold and the two
legs' prices stay close enough to hedge each other.

Percent conventions: funding rates arrive as fractions (0.0001) and every
derived figure on ArbitrageOpportunity is in percent (0.01).
"""

import math
from datetime import datetime
from itertools import combinations
from typing import Dict, List, Optional, Sequence, Tuple

from ..models.funding_rate import FundingRate
from ..models.opportunity import ArbitrageOpportunity
from ..utils.time_utils import get_utc_datetime


# Annualization assumes 8h funding (3 settlements/day) on every exchange
SETTLEMENTS_PER_DAY = 3
DAYS_PER_YEAR = 365


def calculate_confidence(spread_rate: float, price_spread_percent: float) -> float:
    """
    Heuristic confidence in [0, 1]

    Larger funding spreads score higher; larger price divergence between
    the legs scores lower. Each factor is applied multiplicatively.
    """
    confidence = 1.0

    if spread_rate < 0.5:
        confidence *= 0.6
    elif spread_rate < 1.0:
        confidence *= 0.8

    if price_spread_percent > 0.3:
        confidence *= 0.7
    elif price_spread_percent > 0.1:
        confidence *= 0.9

    return max(0.0, min(1.0, confidence))


def annualize_spread(spread_rate: float) -> float:
    """Yearly projection of a per-settlement spread (percent)"""
    return spread_rate * SETTLEMENTS_PER_DAY * DAYS_PER_YEAR


def _usable_price(value: Optional[float]) -> Optional[float]:
    if value is None or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return float(value)


def resolve_price(rate: FundingRate) -> float:
    """Mark price, else index price, else 0"""
    for candidate in (rate.mark_price, rate.index_price):
        price = _usable_price(candidate)
        if price is not None:
            return price
    return 0.0


def _usable_rate(rate: FundingRate) -> bool:
    return isinstance(rate.funding_rate, (int, float)) and math.isfinite(rate.funding_rate)


class OpportunityAnalyzer:
    """
    Detects arbitrage opportunities from same-symbol funding rates

    Args:
        min_spread_percent: Minimum funding spread (percent) to report
        max_price_spread_percent: Maximum price divergence (percent) between legs
    """

    def __init__(self, min_spread_percent: float, max_price_spread_percent: float):
        self.min_spread_percent = min_spread_percent
        self.max_price_spread_percent = max_price_spread_percent

    def analyze(self, rates: Sequence[FundingRate],
                now: Optional[datetime] = None) -> List[ArbitrageOpportunity]:
        """
        All qualifying pairs for one symbol, best spread first

        Args:
            rates: One rate per exchange for the same symbol
            now: Detection timestamp (defaults to current UTC time)
        """
        usable = [rate for rate in rates if _usable_rate(rate)]
        if len(usable) < 2:
            return []

        detected_at = now or get_utc_datetime()
        opportunities = []

        for first, second in combinations(usable, 2):
            opportunity = self._evaluate_pair(first, second, detected_at)
            if opportunity is not None:
                opportunities.append(opportunity)

        opportunities.sort(key=lambda opp: opp.spread_rate, reverse=True)
        return opportunities

    def analyze_groups(self, grouped: Dict[str, List[FundingRate]],
                       now: Optional[datetime] = None) -> List[ArbitrageOpportunity]:
        """Analyze several symbols and sort every result by spread"""
        detected_at = now or get_utc_datetime()
        opportunities = []

        for rates in grouped.values():
            if len(rates) >= 2:
                opportunities.extend(self.analyze(rates, detected_at))

        opportunities.sort(key=lambda opp: opp.spread_rate, reverse=True)
        return opportunities

    def _evaluate_pair(self, first: FundingRate, second: FundingRate,
                       detected_at: datetime) -> Optional[ArbitrageOpportunity]:
        spread_rate = abs(first.funding_rate - second.funding_rate) * 100
        if spread_rate == 0 or spread_rate < self.min_spread_percent:
            return None

        # Cheaper funding side is the long leg
        long_leg, short_leg = self._assign_legs(first, second)

        long_price = resolve_price(long_leg)
        short_price = resolve_price(short_leg)
        price_diff = abs(long_price - short_price)
        price_spread_percent = (price_diff / long_price) * 100 if long_price > 0 else 0.0

        if price_spread_percent > self.max_price_spread_percent:
            return None

        return ArbitrageOpportunity(
            symbol=long_leg.symbol,
            long_exchange=long_leg.exchange,
            short_exchange=short_leg.exchange,
            long_rate=long_leg.funding_rate * 100,
            short_rate=short_leg.funding_rate * 100,
            spread_rate=spread_rate,
            annualized_return=annualize_spread(spread_rate),
            long_price=long_price,
            short_price=short_price,
            price_diff=price_diff,
            price_spread_percent=price_spread_percent,
            confidence=calculate_confidence(spread_rate, price_spread_percent),
            detected_at=detected_at,
        )

    @staticmethod
    def _assign_legs(first: FundingRate, second: FundingRate) -> Tuple[FundingRate, FundingRate]:
        if first.funding_rate < second.funding_rate:
            return first, second
        return second, first
