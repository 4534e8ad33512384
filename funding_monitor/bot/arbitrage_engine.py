"""
Arbitrage Engine - Scheduled funding rate arbitrage detection
============================================================

Runs detection cycles on a fixed interval:
- Fetch funding rates from every exchange (cached)
- Reconcile the symbols listed everywhere
- Compare rates pairwise per symbol
- Persist the opportunities found

A failing cycle is logged and counted; the loop itself never dies.
"""

import asyncio
import logging
import time
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from .funding_aggregator import FundingRateAggregator
from .opportunity_analyzer import OpportunityAnalyzer
from .symbol_reconciler import group_by_symbol, intersect
from ..models.config import MonitorConfig
from ..models.funding_rate import FundingRate
from ..models.opportunity import ArbitrageOpportunity
from ..storage.base_storage import Storage


class EngineState(Enum):
    """Engine states"""
    STOPPED = "stopped"
    RUNNING = "running"


@dataclass
class EngineStats:
    """Counters maintained by the detection loop"""
    total_checks: int = 0
    opportunities_found: int = 0
    last_check_duration_ms: float = 0.0
    error_count: int = 0
    running: bool = False


class ArbitrageEngine:
    """
    Scheduled funding rate arbitrage detector

    Responsibilities:
    - Detection loop lifecycle (start/stop)
    - One detection cycle per poll interval, never overlapping
    - Persistence of opportunities and their underlying rates
    - Statistics and runtime configuration
    """

    def __init__(self, config: MonitorConfig, aggregator: FundingRateAggregator,
                 storage: Optional[Storage] = None):
        """
        Args:
            config: Monitor configuration
            aggregator: Funding rate source shared with the realtime path
            storage: Persistence backend (detections are only logged if None)
        """
        self.config = config
        self.aggregator = aggregator
        self.storage = storage
        self.logger = logging.getLogger(__name__)

        self.state = EngineState.STOPPED
        self.stats = EngineStats()
        self.last_opportunities: List[ArbitrageOpportunity] = []
        self._task: Optional[asyncio.Task] = None

    # =============================================================================
    # LIFECYCLE MANAGEMENT
    # =============================================================================

    @property
    def is_running(self) -> bool:
        return self.state == EngineState.RUNNING

    async def start(self) -> None:
        """Start the loop: one cycle now, then one per poll interval"""
        if self.is_running:
            self.logger.warning("⚠ Engine is already running")
            return

        self.logger.info("🚀 Starting Arbitrage Engine...")
        self.logger.info(f"⚙ Poll interval: {self.config.poll_interval_ms}ms")
        self.logger.info(f"⚙ Min profit threshold: {self.config.min_profit_spread_percent}%")
        self.logger.info(f"⚙ Max price spread: {self.config.max_price_spread_percent}%")
        self.logger.info(f"⚙ Exchanges: {', '.join(self.aggregator.exchanges)}")

        self.state = EngineState.RUNNING
        self.stats.running = True

        # First cycle runs immediately
        first_start = time.monotonic()
        await self.run_cycle()

        if self.is_running:
            self._task = asyncio.create_task(self._detection_loop(first_start))

    async def stop(self) -> None:
        """Stop the loop and log final statistics"""
        if not self.is_running:
            self.logger.warning("⚠ Engine is not running")
            return

        self.logger.info("🛑 Stopping Arbitrage Engine...")
        self.state = EngineState.STOPPED
        self.stats.running = False

        task, self._task = self._task, None
        if task is not None and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        self._log_stats()

    async def _detection_loop(self, last_start: float) -> None:
        """Sleeps the remainder of the interval after each cycle"""
        while self.is_running:
            try:
                elapsed = time.monotonic() - last_start
                await asyncio.sleep(max(0.0, self.config.poll_interval_ms / 1000 - elapsed))
                if not self.is_running:
                    break
                last_start = time.monotonic()
                await self.run_cycle()
            except asyncio.CancelledError:
                break

    # =============================================================================
    # DETECTION CYCLE
    # =============================================================================

    async def run_cycle(self) -> List[ArbitrageOpportunity]:
        """
        Run one detection cycle

        Returns:
            Opportunities found, best spread first (empty on failure)
        """
        start = time.monotonic()
        self.stats.total_checks += 1
        opportunities: List[ArbitrageOpportunity] = []

        try:
            self.logger.info("🔍 Checking arbitrage opportunities...")

            rate_lists = await self.aggregator.fetch_all(skip_cache=False)
            common_symbols = intersect(*rate_lists)
            grouped = group_by_symbol(rate_lists, common_symbols)

            analyzer = OpportunityAnalyzer(self.config.min_profit_spread_percent,
                                           self.config.max_price_spread_percent)
            opportunities = analyzer.analyze_groups(grouped)

            self.logger.debug(f"{len(common_symbols)} symbols common to "
                              f"{len(rate_lists)} exchanges")

            if opportunities:
                self.stats.opportunities_found += len(opportunities)
                self._log_opportunities(opportunities)
                await self._persist(opportunities, grouped)
            else:
                self.logger.info("  ℹ No arbitrage opportunities found")

            self.last_opportunities = opportunities

        except Exception as e:
            self.stats.error_count += 1
            self.logger.error(f"✗ Error in detection cycle: {e}", exc_info=True)

        self.stats.last_check_duration_ms = (time.monotonic() - start) * 1000
        self.logger.info(f"  ⏱ Check completed in {self.stats.last_check_duration_ms:.0f}ms")
        return opportunities

    async def _persist(self, opportunities: List[ArbitrageOpportunity],
                       grouped: Dict[str, List[FundingRate]]) -> None:
        """Store opportunities, then the rates of the symbols involved"""
        if self.storage is None:
            return

        try:
            await self.storage.save_arbitrage_opportunities_batch(
                [opportunity.to_record() for opportunity in opportunities]
            )
        except Exception as e:
            self.stats.error_count += 1
            self.logger.error(f"✗ Failed to save {len(opportunities)} opportunities: {e}")

        if not self.config.bot.persist_funding_rates:
            return

        symbols = {opportunity.symbol for opportunity in opportunities}
        records = [rate.to_record() for symbol in symbols for rate in grouped.get(symbol, [])]
        try:
            await self.storage.save_funding_rates_batch(records)
        except Exception as e:
            self.stats.error_count += 1
            self.logger.error(f"✗ Failed to save {len(records)} funding rates: {e}")

    # =============================================================================
    # CONFIGURATION & STATISTICS
    # =============================================================================

    def update_config(self, **changes: Any) -> MonitorConfig:
        """
        Replace some settings at runtime

        Raises:
            KeyError / pydantic.ValidationError: the running config is left unchanged
        """
        new_config = self.config.updated(**changes)
        self.config = new_config
        self.aggregator.apply_config(new_config.fetcher)
        self.logger.info(f"⚙ Configuration updated: {new_config.summary()}")
        return new_config

    def get_config(self) -> Dict[str, Any]:
        return self.config.summary()

    def get_stats(self) -> Dict[str, Any]:
        return asdict(self.stats)

    def _log_opportunities(self, opportunities: List[ArbitrageOpportunity]) -> None:
        self.logger.info(f"✓ Found {len(opportunities)} arbitrage opportunities:")
        for opportunity in opportunities:
            self.logger.info(f"  📊 {opportunity.symbol}: {opportunity.long_exchange} ↔ "
                             f"{opportunity.short_exchange}")
            self.logger.info(f"     Spread: {opportunity.spread_rate:.4f}% | "
                             f"Annual: {opportunity.annualized_return:.2f}%")

    def _log_stats(self) -> None:
        self.logger.info("📊 Engine Statistics:")
        self.logger.info(f"  Total checks: {self.stats.total_checks}")
        self.logger.info(f"  Opportunities found: {self.stats.opportunities_found}")
        self.logger.info(f"  Errors: {self.stats.error_count}")
        self.logger.info(f"  Last check time: {self.stats.last_check_duration_ms:.0f}ms")

    def __repr__(self) -> str:
        return (f"ArbitrageEngine(state={self.state.value}, "
                f"checks={self.stats.total_checks}, found={self.stats.opportunities_found})")
