"""
Bot Package - Detection Engine
"""

from .rate_cache import RateCache, RateSnapshot
from .funding_aggregator import FundingRateAggregator, ExchangeFetchResult
from .symbol_reconciler import intersect, group_by_symbol
from .opportunity_analyzer import OpportunityAnalyzer, calculate_confidence, annualize_spread
from .arbitrage_engine import ArbitrageEngine, EngineState, EngineStats
from .realtime import compute_realtime_opportunities, query_opportunities

__all__ = [
    'RateCache',
    'RateSnapshot',
    'FundingRateAggregator',
    'ExchangeFetchResult',
    'intersect',
    'group_by_symbol',
    'OpportunityAnalyzer',
    'calculate_confidence',
    'annualize_spread',
    'ArbitrageEngine',
    'EngineState',
    'EngineStats',
    'compute_realtime_opportunities',
    'query_opportunities'
]
