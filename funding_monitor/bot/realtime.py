"""
Realtime Opportunities - On-demand detection
===========================================

Runs the detection pipeline for a single query without touching storage.
Shares the aggregator (and therefore its rate cache) with the scheduled
engine, so a query right after a cycle costs no exchange calls.
"""

import logging
from typing import List, Optional

from .funding_aggregator import FundingRateAggregator
from .opportunity_analyzer import OpportunityAnalyzer
from .symbol_reconciler import group_by_symbol, intersect
from ..models.config import MonitorConfig
from ..models.opportunity import ArbitrageRecord, OpportunityFilter
from ..storage.base_storage import Storage


logger = logging.getLogger(__name__)


async def compute_realtime_opportunities(aggregator: FundingRateAggregator,
                                         config: MonitorConfig,
                                         filter: Optional[OpportunityFilter] = None) -> List[ArbitrageRecord]:
    """
    Opportunities computed from the current funding rates

    Args:
        aggregator: Rate source (cached)
        config: Supplies the default minimum spread and the price guard
        filter: Symbol, minimum spread and pagination

    Returns:
        Records sorted by spread, best first, then paginated.
        Empty when no exchange answered.
    """
    filter = filter or OpportunityFilter()

    rate_lists = await aggregator.fetch_all(skip_cache=False, silent=True)
    common_symbols = intersect(*rate_lists, symbol=filter.symbol)
    if not common_symbols:
        return []

    min_spread = filter.min_spread if filter.min_spread is not None else config.min_profit_spread_percent
    analyzer = OpportunityAnalyzer(min_spread, config.max_price_spread_percent)
    opportunities = analyzer.analyze_groups(group_by_symbol(rate_lists, common_symbols))

    return filter.paginate([opportunity.to_record() for opportunity in opportunities])


async def query_opportunities(storage: Optional[Storage],
                              aggregator: FundingRateAggregator,
                              config: MonitorConfig,
                              filter: Optional[OpportunityFilter] = None,
                              realtime: bool = False) -> List[ArbitrageRecord]:
    """
    Stored opportunities first, realtime computation when storage has none

    Args:
        realtime: Skip storage and compute directly
    """
    filter = filter or OpportunityFilter()

    if not realtime and storage is not None:
        records = await storage.query_opportunities(filter)
        if records:
            return records
        logger.debug("No stored opportunities match, computing realtime")

    return await compute_realtime_opportunities(aggregator, config, filter)
