"""
Main entry point for the funding rate monitor.
"""

import asyncio
import logging
import signal
from typing import Optional

from funding_monitor.bot.arbitrage_engine import ArbitrageEngine
from funding_monitor.bot.funding_aggregator import FundingRateAggregator
from funding_monitor.config.settings import load_config
from funding_monitor.connectors.connector_manager import ConnectorManager
from funding_monitor.models.config import MonitorConfig
from funding_monitor.storage.base_storage import Storage
from funding_monitor.storage.memory_storage import InMemoryStorage


class FundingMonitorApp:
    """
    Main application that wires connectors, aggregator, storage and engine
    """

    def __init__(self, config: Optional[MonitorConfig] = None, config_file: Optional[str] = None,
                 storage: Optional[Storage] = None,
                 connector_manager: Optional[ConnectorManager] = None):
        self.logger = logging.getLogger(self.__class__.__name__)

        self._config = config or load_config(config_file)
        self.connector_manager = connector_manager
        self.storage = storage
        self.aggregator: Optional[FundingRateAggregator] = None
        self.engine: Optional[ArbitrageEngine] = None

        self._running = False
        self._shutdown_event: Optional[asyncio.Event] = None

    @property
    def config(self) -> MonitorConfig:
        """Running configuration, including runtime updates made on the engine"""
        return self.engine.config if self.engine is not None else self._config

    def initialize(self):
        """Build every component from the configuration"""
        self.logger.info("🚀 Initializing Funding Monitor...")

        if self.connector_manager is None:
            self.connector_manager = ConnectorManager.from_config(self.config)
        if self.storage is None:
            self.storage = InMemoryStorage()

        self.aggregator = FundingRateAggregator.from_config(self.connector_manager.connectors,
                                                            self.config.fetcher)
        self.engine = ArbitrageEngine(self.config, self.aggregator, self.storage)

        self.logger.info(f"📊 Monitoring {len(self.connector_manager.exchanges)} exchanges: "
                         f"{', '.join(self.connector_manager.exchanges)}")

    def request_shutdown(self):
        self.logger.info("🛑 Shutdown requested")
        if self._shutdown_event is not None:
            self._shutdown_event.set()

    def _install_signal_handlers(self):
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.request_shutdown)
            except (NotImplementedError, RuntimeError):
                # Windows event loops have no signal support
                self.logger.debug(f"Cannot install handler for {sig.name}")

    def _remove_signal_handlers(self):
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.remove_signal_handler(sig)
            except (NotImplementedError, RuntimeError):
                pass

    async def start(self):
        """Run the detection loop until shutdown is requested"""
        if self._running:
            self.logger.warning("Monitor is already running")
            return

        if self.engine is None:
            self.initialize()

        self._shutdown_event = asyncio.Event()
        self._install_signal_handlers()
        self._running = True

        try:
            await self.engine.start()
            self.logger.info("🟢 Monitor started")
            await self._shutdown_event.wait()
        finally:
            await self.stop()

    async def stop(self):
        """Stop the engine and release exchange and storage resources"""
        if not self._running:
            return

        self.logger.info("🔴 Stopping monitor...")
        self._running = False
        self._remove_signal_handlers()

        if self.engine and self.engine.is_running:
            await self.engine.stop()

        if self.connector_manager:
            await self.connector_manager.close_all()

        if self.storage:
            try:
                await self.storage.close()
            except Exception as e:
                self.logger.error(f"Error closing storage: {e}")

        self.logger.info("✅ Monitor stopped")


async def run(config_file: Optional[str] = None):
    app = FundingMonitorApp(config_file=config_file)
    await app.start()


if __name__ == "__main__":
    from funding_monitor.utils.logging_utils import setup_logging

    setup_logging()
    asyncio.run(run())
